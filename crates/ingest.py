"""
Recording crate metadata in the database.

All external inputs (manifest, registry data, build evidence on disk) are
gathered first; the writes then happen in a single transaction. Running the
ingest again for the same version updates the same rows, and relationship
rows are insert-or-ignore, so re-running is how partial failures recover.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from django.db import DatabaseError as DjangoDatabaseError
from django.db import transaction
from django.utils.text import slugify

from . import artifacts
from .errors import DatabaseError, EncodingError
from .manifest import ManifestInfo, have_examples, info_from_path
from .models import Author, AuthorRel, Crate, Keyword, KeywordRel, Owner, OwnerRel, Release
from .models.release import BuildStatus
from .registry import RegistryClient, RegistryOwner, RegistryRelease

logger = logging.getLogger(__name__)

AUTHOR_RE = re.compile(r'^([^><]+)<*(.*?)>*$')


def parse_author(author: str) -> Optional[Tuple[str, str]]:
    """
    Split "Name <email>" into (name, email). The email part is optional.

    Returns:
        (name, email) with surrounding whitespace removed, or None when the
        string does not look like an author at all
    """
    match = AUTHOR_RE.match(author)
    if match is None:
        return None
    return match.group(1).strip(), match.group(2).strip()


def build_status(options, name: str, version: str) -> int:
    """
    Classify a build attempt from what it left on disk.

    A log with generated docs means success, a log without docs means
    failure, and no log means the crate was never tried.
    """
    log_exists = options.log_path(name, version).exists()
    doc_exists = options.doc_path(name, version).exists()

    if log_exists and doc_exists:
        return BuildStatus.SUCCEEDED
    if log_exists:
        return BuildStatus.FAILED
    return BuildStatus.UNTRIED


def rustdoc_status(options, name: str, version: str, target_name: str) -> int:
    """1 if docs for the manifest's primary target were generated, else 0"""
    return 1 if (options.doc_path(name, version) / target_name).exists() else 0


def encode_json_field(value):
    """
    Return value as plain JSON data (lists, dicts, strings, numbers).

    Raises:
        EncodingError: If value cannot be represented as JSON
    """
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot encode {value!r} as JSON: {e}") from e


@dataclass
class ReleaseInputs:
    """Everything the database writes need, gathered before any write"""
    info: ManifestInfo
    have_examples: bool
    registry: RegistryRelease
    owners: List[RegistryOwner]
    build_status: int
    rustdoc_status: int
    dependencies: list = field(default_factory=list)
    authors: list = field(default_factory=list)
    keywords: list = field(default_factory=list)


class MetadataIngestor:
    """
    Reconciles one crate version's metadata into the database.

    Args:
        options: BuilderOptions
        registry: RegistryClient; one is created from options when omitted
        session: Optional requests.Session used for archive downloads
    """

    def __init__(self, options, registry=None, session=None):
        self.options = options
        self.session = session
        self.registry = registry or RegistryClient(options.registry_api, session=session)

    def read_manifest(self, record, version_index) -> Tuple[ManifestInfo, bool]:
        """
        Read ManifestInfo from synced sources, or from a fresh download that
        is removed again afterwards.
        """
        name, version = record.name, record.versions[version_index]
        source = self.options.source_path(name, version)
        if source.exists():
            return info_from_path(source), have_examples(source)

        work_dir = self.options.build_dir
        artifacts.download_crate(record, version_index, work_dir,
                                 self.options.artifact_host, session=self.session)
        try:
            package_root = artifacts.extract_crate(record, version_index, work_dir)
            return info_from_path(package_root), have_examples(package_root)
        finally:
            artifacts.remove_crate_file(record, version_index, work_dir)
            artifacts.remove_build_dir(record, version_index, work_dir)

    def gather(self, record, version_index) -> ReleaseInputs:
        name, version = record.name, record.versions[version_index]
        info, examples = self.read_manifest(record, version_index)

        return ReleaseInputs(
            info=info,
            have_examples=examples,
            registry=self.registry.release(name, version),
            owners=self.registry.owners(name),
            build_status=build_status(self.options, name, version),
            rustdoc_status=rustdoc_status(self.options, name, version, info.target_name),
            dependencies=encode_json_field([list(dep) for dep in info.dependencies]),
            authors=encode_json_field(info.metadata.authors),
            keywords=encode_json_field(info.metadata.keywords),
        )

    def ingest(self, record, version_index) -> Release:
        """
        Add or update a crate version in the database.

        Returns:
            Release: The created or updated release

        Raises:
            ManifestError, FilesystemError, FetchError, ArchiveError,
            RegistryError, EncodingError: While gathering inputs
            DatabaseError: If a query fails; nothing is committed then
        """
        inputs = self.gather(record, version_index)
        version = record.versions[version_index]

        try:
            with transaction.atomic():
                crate, _ = Crate.objects.get_or_create(name=record.name)
                release = self._upsert_release(crate, inputs)
                self._add_keywords(release, inputs.info.metadata.keywords)
                self._add_authors(release, inputs.info.metadata.authors)
                self._add_owners(crate, inputs.owners)

                if crate.add_version(version):
                    crate.save(update_fields=['versions', 'updated_at'])
        except DjangoDatabaseError as e:
            raise DatabaseError(f"Failed to record {record.canonical_name(version_index)}: {e}") from e

        logger.info("Recorded %s (build status %s)", release, inputs.build_status)
        return release

    def _upsert_release(self, crate, inputs: ReleaseInputs) -> Release:
        info = inputs.info
        release, created = Release.objects.update_or_create(
            crate=crate,
            version=info.version,
            defaults={
                'release_time': inputs.registry.release_time,
                'yanked': inputs.registry.yanked,
                'downloads': inputs.registry.downloads,
                'dependencies': inputs.dependencies,
                'build_status': inputs.build_status,
                'rustdoc_status': inputs.rustdoc_status,
                'test_status': 0,
                'license': info.metadata.license,
                'repository_url': info.metadata.repository,
                'homepage_url': info.metadata.homepage,
                'description': info.metadata.description,
                'description_long': info.rustdoc,
                'readme': info.readme,
                'authors': inputs.authors,
                'keywords': inputs.keywords,
                'have_examples': inputs.have_examples,
            },
        )
        if created:
            logger.debug("Created release %s", release)
        return release

    def _add_keywords(self, release, keywords):
        rels = []
        for keyword in keywords:
            slug = slugify(keyword, allow_unicode=True)
            if not slug:
                logger.debug("Skipping keyword without a slug %r", keyword)
                continue
            keyword_row, _ = Keyword.objects.get_or_create(slug=slug, defaults={'name': keyword})
            rels.append(KeywordRel(release=release, keyword=keyword_row))
        KeywordRel.objects.bulk_create(rels, ignore_conflicts=True)

    def _add_authors(self, release, authors):
        rels = []
        for author in authors:
            parsed = parse_author(author)
            if parsed is None:
                logger.debug("Skipping malformed author %r", author)
                continue
            name, email = parsed
            slug = slugify(name, allow_unicode=True)
            if not slug:
                logger.debug("Skipping author without a slug %r", author)
                continue
            author_row, _ = Author.objects.get_or_create(
                slug=slug,
                defaults={'name': name, 'email': email},
            )
            rels.append(AuthorRel(release=release, author=author_row))
        AuthorRel.objects.bulk_create(rels, ignore_conflicts=True)

    def _add_owners(self, crate, owners):
        rels = []
        for owner in owners:
            if not owner.login:
                continue
            owner_row, _ = Owner.objects.update_or_create(
                login=owner.login,
                defaults={
                    'slug': slugify(owner.login, allow_unicode=True),
                    'avatar': owner.avatar,
                    'name': owner.name,
                    'email': owner.email,
                },
            )
            rels.append(OwnerRel(crate=crate, owner=owner_row))
        OwnerRel.objects.bulk_create(rels, ignore_conflicts=True)


def add_crate_into_database(record, version_index, options, session=None) -> Release:
    """Record one crate version using a fresh MetadataIngestor"""
    return MetadataIngestor(options, session=session).ingest(record, version_index)
