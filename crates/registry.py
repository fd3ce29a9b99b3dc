"""
Read-only client for the registry metadata API (crates.io /api/v1).
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import List, Optional

import requests
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .errors import FetchError, RegistryError

logger = logging.getLogger(__name__)


@dataclass
class RegistryRelease:
    release_time: Optional[datetime] = None
    yanked: Optional[bool] = None
    downloads: Optional[int] = None


@dataclass
class RegistryOwner:
    login: str
    name: str = ''
    email: str = ''
    avatar: str = ''


class RegistryClient:
    """
    Fetches per-version release data and crate owners.

    Nothing is cached; every call goes to the network.
    """

    def __init__(self, api_base: str, session=None):
        self.api_base = api_base.rstrip('/')
        self.session = session or requests.Session()

    def _get_json(self, path: str):
        url = f"{self.api_base}{path}"
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url)
            response.raise_for_status()
            return response.json()
        except requests.JSONDecodeError as e:
            raise RegistryError(f"Response from {url} is not JSON: {e}") from e
        except requests.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise RegistryError(f"Response from {url} is not JSON: {e}") from e

    def release(self, name: str, version: str) -> RegistryRelease:
        """
        Return release time, yanked flag and downloads for one version.

        Fields stay None when the registry does not list the version.

        Raises:
            FetchError: If the request fails
            RegistryError: If the response is not the expected shape
        """
        data = self._get_json(f"/crates/{name}/versions")
        versions = data.get('versions') if isinstance(data, dict) else data
        if not isinstance(versions, list):
            raise RegistryError(f"No versions array for {name}")

        for entry in versions:
            if not isinstance(entry, dict) or not isinstance(entry.get('num'), str):
                raise RegistryError(f"Malformed version entry for {name}")
            if entry['num'] != version:
                continue
            return RegistryRelease(
                release_time=_parse_release_time(entry.get('created_at')),
                yanked=entry.get('yanked'),
                downloads=entry.get('downloads'),
            )

        logger.info("Registry has no version %s of %s", version, name)
        return RegistryRelease()

    def owners(self, name: str) -> List[RegistryOwner]:
        """
        Return the owners of a crate. Entries without a login are dropped.

        Raises:
            FetchError: If the request fails
            RegistryError: If the response is not JSON
        """
        data = self._get_json(f"/crates/{name}/owners")
        users = data.get('users') if isinstance(data, dict) else None
        if not isinstance(users, list):
            return []

        owners = []
        for user in users:
            if not isinstance(user, dict):
                continue
            login = user.get('login') or ''
            if not login:
                continue
            owners.append(RegistryOwner(
                login=login,
                name=user.get('name') or '',
                email=user.get('email') or '',
                avatar=user.get('avatar') or '',
            ))
        return owners


def _parse_release_time(value) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = parse_datetime(value)
    except ValueError as e:
        raise RegistryError(f"Invalid release time {value!r}") from e
    if parsed is not None and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed
