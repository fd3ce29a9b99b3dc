"""
Builder configuration.

All paths the pipeline touches come from here; nothing relies on the process
working directory.
"""
from dataclasses import dataclass
from pathlib import Path


@dataclass
class BuilderOptions:
    """
    Locations and endpoints used by DocBuilder and the metadata ingestor.

    Attributes:
        index_path: Root of the mirrored crates.io-index checkout
        sources_path: Synced crate sources, laid out as <name>/<version>/
        logs_path: Build logs, laid out as <name>/<name>-<version>.log
        destination: Generated docs, laid out as <name>/<version>/
        build_dir: Working directory for archives and extracted crates
        artifact_host: Base URL of the .crate artifact store
        registry_api: Base URL of the registry metadata API
    """
    index_path: Path
    sources_path: Path
    logs_path: Path
    destination: Path
    build_dir: Path
    artifact_host: str = 'https://crates-io.s3-us-west-1.amazonaws.com/crates'
    registry_api: str = 'https://crates.io/api/v1'

    def __post_init__(self):
        for field_name in ('index_path', 'sources_path', 'logs_path', 'destination', 'build_dir'):
            setattr(self, field_name, Path(getattr(self, field_name)))
        self.artifact_host = self.artifact_host.rstrip('/')
        self.registry_api = self.registry_api.rstrip('/')

    @classmethod
    def from_settings(cls):
        """Build options from the CRATESDOCS_* Django settings"""
        from django.conf import settings

        return cls(
            index_path=settings.CRATESDOCS_INDEX_PATH,
            sources_path=settings.CRATESDOCS_SOURCES_PATH,
            logs_path=settings.CRATESDOCS_LOGS_PATH,
            destination=settings.CRATESDOCS_DESTINATION,
            build_dir=settings.CRATESDOCS_BUILD_DIR,
            artifact_host=settings.CRATESDOCS_ARTIFACT_HOST,
            registry_api=settings.CRATESDOCS_REGISTRY_API,
        )

    def log_path(self, name: str, version: str) -> Path:
        """Path of the build log for a crate version"""
        return self.logs_path / name / f"{name}-{version}.log"

    def doc_path(self, name: str, version: str) -> Path:
        """Directory holding generated documentation for a crate version"""
        return self.destination / name / version

    def source_path(self, name: str, version: str) -> Path:
        """Directory holding synced sources for a crate version"""
        return self.sources_path / name / version
