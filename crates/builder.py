"""
Building crate documentation.

DocBuilder drives one crate version through clean, fetch, extract, stage
local dependencies, ``cargo doc`` and classification. Everything happens
inside ``options.build_dir``, so builders with different build directories
do not interfere; one builder must not run two builds at once.
"""
import logging
from pathlib import Path
from typing import Optional

import requests

from . import artifacts, cargo_wrapper
from .errors import BuildFailed, CrateIndexError, CratesDocsError, FilesystemError
from .index import CrateRecord, iter_index_files
from .ingest import MetadataIngestor
from .models.release import BuildStatus
from .options import BuilderOptions
from .stager import DependencyStager

logger = logging.getLogger(__name__)


class DocBuilder:
    """
    Builds documentation for crates found in the mirrored index.

    Args:
        options: BuilderOptions; read from Django settings when omitted
        session: Optional requests.Session shared by all downloads
    """

    def __init__(self, options: Optional[BuilderOptions] = None, session=None):
        self.options = options or BuilderOptions.from_settings()
        self.session = session or requests.Session()

    @property
    def work_dir(self) -> Path:
        return self.options.build_dir

    def stager(self) -> DependencyStager:
        return DependencyStager(self.options.index_path, self.work_dir,
                                self.options.artifact_host, session=self.session)

    def package_root(self, record, version_index) -> Path:
        return artifacts.build_dir_path(self.work_dir, record, version_index)

    def resolve(self, name: str, version: Optional[str] = None):
        """
        Look a crate up in the index.

        Args:
            name: Crate name
            version: Version prefix; None or "*" means the latest version

        Returns:
            (CrateRecord, version index)

        Raises:
            CrateIndexError: If the crate or the version is unknown
        """
        record = CrateRecord.from_index_path(name, self.options.index_path)
        version_index = record.version_starts_with(version or '*')
        if version_index is None:
            raise CrateIndexError(f"No version of {name} matches {version}")
        return record, version_index

    def build_crate_doc(self, record, version_index) -> str:
        """
        Download, extract, stage and document one crate version.

        Returns:
            str: The cargo doc log

        Raises:
            BuildFailed: If cargo doc fails; the log is attached
            CratesDocsError: If any earlier step fails
        """
        canonical = record.canonical_name(version_index)
        logger.info("Building documentation for %s", canonical)

        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot create build dir {self.work_dir}: {e}") from e

        # Leftovers from an earlier attempt
        artifacts.remove_build_dir(record, version_index, self.work_dir)
        artifacts.remove_crate_file(record, version_index, self.work_dir)

        artifacts.download_crate(record, version_index, self.work_dir,
                                 self.options.artifact_host, session=self.session)
        package_root = artifacts.extract_crate(record, version_index, self.work_dir)

        logger.info("Checking local dependencies")
        self.stager().stage(package_root)

        logger.info("Building documentation")
        log = cargo_wrapper.build_docs(package_root)
        logger.debug("cargo doc --no-deps --verbose\n%s", log)
        return log

    def build_package(self, name: str, version: Optional[str] = None) -> BuildStatus:
        """
        Build one crate version and store the results.

        The log is written to the logs path whatever the outcome. On success
        the generated docs are copied to the destination and the sources to
        the sources path.

        Returns:
            BuildStatus.SUCCEEDED or BuildStatus.FAILED
        """
        record, version_index = self.resolve(name, version)
        return self.build_record(record, version_index)

    def build_record(self, record, version_index) -> BuildStatus:
        version = record.versions[version_index]
        try:
            log = self.build_crate_doc(record, version_index)
            status = BuildStatus.SUCCEEDED
        except BuildFailed as e:
            logger.warning("Documentation build failed for %s: %s",
                           record.canonical_name(version_index), e)
            log = e.log
            status = BuildStatus.FAILED

        self.write_log(record.name, version, log)
        if status == BuildStatus.SUCCEEDED:
            self.copy_documentation(record, version_index)
            self.copy_sources(record, version_index)

        artifacts.remove_build_dir(record, version_index, self.work_dir)
        artifacts.remove_crate_file(record, version_index, self.work_dir)
        return status

    def write_log(self, name: str, version: str, log: str):
        path = self.options.log_path(name, version)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(log, encoding='utf-8')
        except OSError as e:
            raise FilesystemError(f"Cannot write build log {path}: {e}") from e

    def copy_documentation(self, record, version_index):
        doc_dir = self.package_root(record, version_index) / 'target' / 'doc'
        destination = self.options.doc_path(record.name, record.versions[version_index])
        if not doc_dir.is_dir():
            raise FilesystemError(f"cargo doc produced no output in {doc_dir}")
        artifacts.remove_tree(destination)
        artifacts.copy_files(doc_dir, destination)

    def copy_sources(self, record, version_index):
        source = self.package_root(record, version_index)
        destination = self.options.source_path(record.name, record.versions[version_index])
        artifacts.remove_tree(destination)
        artifacts.copy_files(source, destination)
        # Build output is not part of the sources
        artifacts.remove_tree(destination / 'target')

    def ingestor(self) -> MetadataIngestor:
        return MetadataIngestor(self.options, session=self.session)

    def build_and_record(self, name: str, version: Optional[str] = None):
        """
        Build a crate version and record its metadata.

        Returns:
            Release: The recorded release
        """
        record, version_index = self.resolve(name, version)
        self.build_record(record, version_index)
        return self.ingestor().ingest(record, version_index)

    def add_package(self, name: str, version: Optional[str] = None):
        """Record metadata for a crate version without building it"""
        record, version_index = self.resolve(name, version)
        return self.ingestor().ingest(record, version_index)

    def build_world(self):
        """
        Build and record every version of every crate in the index.

        Errors for a single version are logged and the run continues.

        Returns:
            dict: Counts of 'built', 'failed' and 'errors'
        """
        counts = {'built': 0, 'failed': 0, 'errors': 0}
        for index_file in iter_index_files(self.options.index_path):
            try:
                record = CrateRecord.from_index_file(index_file)
            except CratesDocsError as e:
                logger.error("Skipping index file %s: %s", index_file, e)
                counts['errors'] += 1
                continue

            for version_index in range(len(record.versions)):
                try:
                    status = self.build_record(record, version_index)
                    self.ingestor().ingest(record, version_index)
                except CratesDocsError as e:
                    logger.error("Failed to process %s: %s", record.canonical_name(version_index), e)
                    counts['errors'] += 1
                    continue
                counts['built' if status == BuildStatus.SUCCEEDED else 'failed'] += 1
        return counts
