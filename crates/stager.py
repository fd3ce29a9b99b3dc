"""
Staging of local path dependencies.

Some published crates declare dependencies such as::

    [dependencies]
    foo-macros = { version = "0.2", path = "macros" }

The path does not exist inside the published archive, so cargo cannot build
the crate until the dependency is downloaded and placed there.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Set

from . import artifacts
from .errors import CrateIndexError, DependencyResolutionError, MissingRelocationTarget
from .index import CrateRecord
from .manifest import dependency_table

logger = logging.getLogger(__name__)


@dataclass
class PathDependency:
    """A dependency declared with both a local path and a version requirement"""
    name: str
    version: str
    path: str


@dataclass
class ResolvedDependency:
    dependency: PathDependency
    record: CrateRecord
    version_index: int

    @property
    def canonical_name(self) -> str:
        return self.record.canonical_name(self.version_index)


def local_dependencies(package_root) -> List[PathDependency]:
    """
    Return the dependencies of the crate at package_root that need staging.

    Dependencies with a path but no version are assumed to be present
    already and registry-only dependencies are left to cargo.
    """
    dependencies = []
    for name, spec in dependency_table(package_root).items():
        if not isinstance(spec, dict):
            continue
        path = spec.get('path')
        version = spec.get('version')
        if isinstance(path, str) and isinstance(version, str):
            dependencies.append(PathDependency(name=name, version=version, path=path))
    return dependencies


class DependencyStager:
    """
    Downloads path dependencies of an extracted crate and places them where
    its manifest expects them, recursively.

    Args:
        index_path: Root of the mirrored crates.io-index
        work_dir: Directory archives are downloaded and extracted into
        artifact_host: Base URL of the artifact store
        session: Optional requests.Session used for downloads
    """

    def __init__(self, index_path, work_dir, artifact_host, session=None):
        self.index_path = Path(index_path)
        self.work_dir = Path(work_dir)
        self.artifact_host = artifact_host
        self.session = session

    def stage(self, package_root, _staged: Optional[Set[Path]] = None):
        """
        Stage every path+version dependency under package_root.

        Raises:
            StagingError: If a dependency cannot be resolved or relocated
            FetchError, ArchiveError, FilesystemError, ManifestError:
                On download, extraction, IO or manifest failures
        """
        package_root = Path(package_root)
        # Directories already populated during this invocation
        staged = {package_root.resolve()} if _staged is None else _staged

        for dependency in local_dependencies(package_root):
            target = (package_root / dependency.path).resolve()
            if target in staged:
                logger.debug("%s already staged at %s", dependency.name, target)
                continue

            resolved = self.resolve(dependency)
            self.relocate(resolved, target)
            staged.add(target)
            self.stage(target, staged)
            self.cleanup(resolved)

    def resolve(self, dependency: PathDependency) -> ResolvedDependency:
        """Find the index entry and version a path dependency refers to"""
        try:
            record = CrateRecord.from_index_path(dependency.name, self.index_path)
        except CrateIndexError as e:
            raise DependencyResolutionError(
                f"Local dependency {dependency.name} cannot be resolved: {e}"
            ) from e

        version_index = record.version_starts_with(dependency.version)
        if version_index is None:
            raise DependencyResolutionError(
                f"No version of {dependency.name} matches {dependency.version}"
            )
        return ResolvedDependency(dependency, record, version_index)

    def relocate(self, resolved: ResolvedDependency, target: Path) -> Path:
        """
        Download and extract a dependency and copy it into target.

        Returns:
            Path: The directory the dependency now lives in
        """
        logger.info("Staging local dependency %s into %s", resolved.canonical_name, target)

        artifacts.download_crate(resolved.record, resolved.version_index,
                                 self.work_dir, self.artifact_host, session=self.session)
        extracted = artifacts.extract_crate(resolved.record, resolved.version_index, self.work_dir)

        if not extracted.is_dir():
            raise MissingRelocationTarget(
                f"Extracting {resolved.canonical_name} did not create {extracted}"
            )

        artifacts.copy_files(extracted, target)
        return target

    def cleanup(self, resolved: ResolvedDependency):
        """Remove the downloaded archive and extraction directory"""
        artifacts.remove_build_dir(resolved.record, resolved.version_index, self.work_dir)
        artifacts.remove_crate_file(resolved.record, resolved.version_index, self.work_dir)
