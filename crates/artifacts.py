"""
Fetching, extracting and cleaning up .crate archives.

Archives are downloaded to ``<work_dir>/<name>-<version>.crate`` and extract
to ``<work_dir>/<name>-<version>/``.
"""
import logging
import shutil
import tarfile
from pathlib import Path

import requests

from .errors import ArchiveError, FetchError, FilesystemError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def crate_url(artifact_host: str, name: str, version: str) -> str:
    """URL of a crate archive in the artifact store"""
    return f"{artifact_host.rstrip('/')}/{name}/{name}-{version}.crate"


def crate_file_path(work_dir, record, version_index) -> Path:
    return Path(work_dir) / f"{record.canonical_name(version_index)}.crate"


def build_dir_path(work_dir, record, version_index) -> Path:
    return Path(work_dir) / record.canonical_name(version_index)


def download_crate(record, version_index, work_dir, artifact_host, session=None) -> Path:
    """
    Download a crate archive into work_dir.

    Args:
        record: CrateRecord of the crate
        version_index: Index into record.versions
        work_dir: Directory the archive is written to
        artifact_host: Base URL of the artifact store
        session: Optional requests.Session

    Returns:
        Path: Path to the downloaded .crate file

    Raises:
        FetchError: If the request fails or returns a non-2xx status
        FilesystemError: If the archive cannot be written
    """
    version = record.versions[version_index]
    url = crate_url(artifact_host, record.name, version)
    target = crate_file_path(work_dir, record, version_index)
    http = session or requests

    logger.info("Downloading %s", url)
    try:
        response = http.get(url, stream=True)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to download {url}: {e}") from e

    try:
        Path(work_dir).mkdir(parents=True, exist_ok=True)
        with open(target, 'wb') as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
    except requests.RequestException as e:
        raise FetchError(f"Failed to download {url}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Cannot write {target}: {e}") from e

    return target


def extract_crate(record, version_index, work_dir) -> Path:
    """
    Extract a previously downloaded crate archive into work_dir.

    Returns:
        Path: The <name>-<version> directory the archive was expected to create

    Raises:
        ArchiveError: If the archive is missing or not a valid gzip tarball
    """
    archive = crate_file_path(work_dir, record, version_index)
    logger.info("Extracting %s", archive.name)
    try:
        with tarfile.open(archive, 'r:gz') as tar:
            tar.extractall(work_dir, filter='data')
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(f"Failed to extract {archive}: {e}") from e

    return build_dir_path(work_dir, record, version_index)


def remove_crate_file(record, version_index, work_dir):
    """Remove the downloaded archive if it exists"""
    path = crate_file_path(work_dir, record, version_index)
    if path.is_file():
        try:
            path.unlink()
        except OSError as e:
            raise FilesystemError(f"Cannot remove {path}: {e}") from e


def remove_build_dir(record, version_index, work_dir):
    """Remove the extracted <name>-<version> directory if it exists"""
    remove_tree(build_dir_path(work_dir, record, version_index))


def remove_tree(path):
    path = Path(path)
    if path.is_dir():
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FilesystemError(f"Cannot remove {path}: {e}") from e


def copy_files(source, destination):
    """
    Copy the contents of source into destination, merging with what is there.

    Raises:
        FilesystemError: If any file cannot be copied
    """
    try:
        shutil.copytree(source, destination, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise FilesystemError(f"Cannot copy {source} to {destination}: {e}") from e
