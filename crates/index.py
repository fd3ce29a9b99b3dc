"""
Crate lookups against a mirrored crates.io-index checkout.

The index keeps one file per crate name; every line of that file is a JSON
object describing one published version, appended in publish order.
"""
import json
import logging
from pathlib import Path
from typing import Iterator, List, Optional

from .errors import FilesystemError, IndexFileNotFound, IndexParseError, IndexShapeError

logger = logging.getLogger(__name__)

# Never descended into or matched while searching the index
SKIPPED_FILENAME = 'config.json'
VCS_MARKER = '.git'


def _is_skipped(path: Path) -> bool:
    return VCS_MARKER in path.name or path.name == SKIPPED_FILENAME


def parse_index_line(line: str):
    """
    Parse one index line into (name, version).

    Raises:
        IndexParseError: If the line is not valid JSON
        IndexShapeError: If the line is not an object or lacks name/vers
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise IndexParseError(f"Invalid index line: {e}") from e

    if not isinstance(data, dict):
        raise IndexShapeError("Index line is not a JSON object")

    name = data.get('name')
    if not isinstance(name, str):
        raise IndexShapeError("Index line has no string 'name' field")

    vers = data.get('vers')
    if not isinstance(vers, str):
        raise IndexShapeError("Index line has no string 'vers' field")

    return name, vers


class CrateRecord:
    """
    A crate name and its published versions, newest first.

    ``versions[0]`` is always the latest published version.
    """

    def __init__(self, name: str, versions: List[str]):
        self.name = name
        self.versions = list(versions)

    def __repr__(self):
        return f"CrateRecord({self.name!r}, {self.versions!r})"

    @classmethod
    def from_index_file(cls, path) -> 'CrateRecord':
        """
        Load a crate from its index file.

        Args:
            path: Path to the per-crate index file

        Returns:
            CrateRecord with versions ordered newest first

        Raises:
            FilesystemError: If the file cannot be read
            IndexParseError, IndexShapeError: If a line is malformed or names
                a different crate than the rest of the file
        """
        path = Path(path)
        try:
            content = path.read_text(encoding='utf-8')
        except UnicodeDecodeError as e:
            raise IndexParseError(f"Index file {path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise FilesystemError(f"Cannot read index file {path}: {e}") from e

        name = None
        versions = []
        for line in content.splitlines():
            if not line.strip():
                continue
            line_name, vers = parse_index_line(line)
            if name is not None and line_name != name:
                raise IndexShapeError(f"Index file {path} mixes crates {name!r} and {line_name!r}")
            name = line_name
            versions.append(vers)

        # Index files are chronological
        versions.reverse()
        return cls(name or '', versions)

    @classmethod
    def from_index_path(cls, name: str, root) -> 'CrateRecord':
        """
        Find the index file for ``name`` under ``root`` and load it.

        The search is depth-first in sorted order; the first file whose name
        equals ``name`` wins.

        Raises:
            IndexFileNotFound: If no such file exists under root
        """
        path = _find_index_file(name, Path(root))
        if path is None:
            raise IndexFileNotFound(f"Crate '{name}' not found in index {root}")
        logger.debug("Found index file for %s: %s", name, path)
        return cls.from_index_file(path)

    def version_index(self, requested_version: str) -> Optional[int]:
        """Return the position of an exact version match, or None"""
        for i, version in enumerate(self.versions):
            if version == requested_version:
                return i
        return None

    def version_starts_with(self, prefix: str) -> Optional[int]:
        """
        Return the position of the first version starting with ``prefix``.

        "*" always means the latest version. The match is a plain string
        prefix, so "1.2" also matches "1.20.0".
        """
        if prefix == '*':
            return 0 if self.versions else None
        for i, version in enumerate(self.versions):
            if version.startswith(prefix):
                return i
        return None

    def canonical_name(self, version_index: int) -> str:
        """Return the on-disk name of a version, e.g. "rand-0.3.13" """
        return f"{self.name}-{self.versions[version_index]}"


def _find_index_file(name: str, directory: Path) -> Optional[Path]:
    if not directory.is_dir():
        return None

    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        raise FilesystemError(f"Cannot list {directory}: {e}") from e

    for entry in entries:
        if _is_skipped(entry):
            continue
        if entry.is_dir():
            found = _find_index_file(name, entry)
            if found is not None:
                return found
        elif entry.name == name:
            return entry
    return None


def iter_index_files(root) -> Iterator[Path]:
    """Yield every crate file in the index, skipping .git and config.json"""
    root = Path(root)
    if not root.is_dir():
        raise IndexFileNotFound(f"Index directory {root} does not exist")

    for entry in sorted(root.iterdir()):
        if _is_skipped(entry):
            continue
        if entry.is_dir():
            yield from iter_index_files(entry)
        elif entry.is_file():
            yield entry
