"""
Reading Cargo.toml manifests of extracted crates.
"""
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .errors import FilesystemError, ManifestError

logger = logging.getLogger(__name__)

MANIFEST_NAME = 'Cargo.toml'
DEPENDENCY_SECTIONS = ('dependencies', 'dev-dependencies', 'build-dependencies')


@dataclass(frozen=True)
class ManifestMetadata:
    license: Optional[str] = None
    repository: Optional[str] = None
    homepage: Optional[str] = None
    description: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ManifestInfo:
    """Snapshot of what a crate version's manifest and sources say about it"""
    name: str
    target_name: str
    version: str
    dependencies: List[Tuple[str, str]]
    rustdoc: Optional[str]
    readme: Optional[str]
    metadata: ManifestMetadata


def load_manifest(root) -> Dict[str, Any]:
    """
    Parse <root>/Cargo.toml.

    Raises:
        ManifestError: If the manifest is missing, not UTF-8 or not valid TOML
    """
    path = Path(root) / MANIFEST_NAME
    try:
        with open(path, 'rb') as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ManifestError(f"No {MANIFEST_NAME} in {root}") from e
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"{path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Cannot read {path}: {e}") from e


def dependency_table(root) -> Dict[str, Any]:
    """Return the [dependencies] table of the manifest at root"""
    table = load_manifest(root).get('dependencies', {})
    if not isinstance(table, dict):
        raise ManifestError(f"[dependencies] in {root} is not a table")
    return table


def _dependency_requirement(name, spec) -> Optional[Tuple[str, str]]:
    if isinstance(spec, str):
        return name, spec
    if isinstance(spec, dict):
        return spec.get('package', name), spec.get('version', '*')
    return None


def _collect_dependencies(manifest) -> List[Tuple[str, str]]:
    tables = [manifest.get(section, {}) for section in DEPENDENCY_SECTIONS]
    for target in manifest.get('target', {}).values():
        if isinstance(target, dict):
            tables.extend(target.get(section, {}) for section in DEPENDENCY_SECTIONS)

    dependencies = []
    for table in tables:
        if not isinstance(table, dict):
            continue
        for name, spec in table.items():
            requirement = _dependency_requirement(name, spec)
            if requirement is not None:
                dependencies.append(requirement)
    return dependencies


def primary_target(manifest, root: Path) -> Tuple[str, Path]:
    """
    Work out the first build target the way cargo orders them: the library
    if there is one, otherwise the first binary.

    Returns:
        (target name, path to the target's root source file)
    """
    package_name = manifest['package']['name']
    lib = manifest.get('lib')

    if isinstance(lib, dict) or (root / 'src' / 'lib.rs').exists():
        lib = lib if isinstance(lib, dict) else {}
        name = lib.get('name', package_name.replace('-', '_'))
        return name, root / lib.get('path', 'src/lib.rs')

    bins = manifest.get('bin')
    if isinstance(bins, list) and bins:
        first = bins[0]
        name = first.get('name', package_name)
        if 'path' in first:
            return name, root / first['path']
        if name == package_name and (root / 'src' / 'main.rs').exists():
            return name, root / 'src' / 'main.rs'
        return name, root / 'src' / 'bin' / f"{name}.rs"

    if (root / 'src' / 'main.rs').exists():
        return package_name, root / 'src' / 'main.rs'

    raise ManifestError(f"No library or binary target in {root}")


def read_rustdoc(source_file: Path) -> Optional[str]:
    """
    Collect the crate-level ``//!`` doc comment lines of a source file.

    Returns:
        str: Doc text, one line per comment line, or None when there is none

    Raises:
        FilesystemError: If the source file cannot be read
    """
    logger.debug("Reading rustdoc from: %s", source_file)
    try:
        content = source_file.read_text(encoding='utf-8', errors='replace')
    except OSError as e:
        raise FilesystemError(f"Cannot read {source_file}: {e}") from e

    lines = []
    for line in content.splitlines():
        if line.startswith('//!'):
            text = line[3:]
            lines.append(text[1:] if text.startswith(' ') else text)

    if not lines:
        return None
    return '\n'.join(lines) + '\n'


def info_from_path(root) -> ManifestInfo:
    """
    Read ManifestInfo from an extracted crate directory.

    Args:
        root: Directory containing Cargo.toml

    Raises:
        ManifestError: If the manifest is unusable
        FilesystemError: If the target source or readme cannot be read
    """
    root = Path(root)
    logger.debug("Getting info from path: %s", root)
    manifest = load_manifest(root)

    package = manifest.get('package')
    if not isinstance(package, dict):
        raise ManifestError(f"{root / MANIFEST_NAME} has no [package] table")
    name = package.get('name')
    version = package.get('version')
    if not isinstance(name, str) or not isinstance(version, str):
        raise ManifestError(f"{root / MANIFEST_NAME} has no package name or version")

    target_name, target_src = primary_target(manifest, root)
    rustdoc = read_rustdoc(target_src)

    readme = None
    readme_file = package.get('readme')
    if isinstance(readme_file, str):
        readme_path = root / readme_file
        try:
            readme = readme_path.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            raise FilesystemError(f"Cannot read {readme_path}: {e}") from e

    metadata = ManifestMetadata(
        license=package.get('license'),
        repository=package.get('repository'),
        homepage=package.get('homepage'),
        description=package.get('description'),
        authors=list(package.get('authors', [])),
        keywords=list(package.get('keywords', [])),
    )

    return ManifestInfo(
        name=name,
        target_name=target_name,
        version=version,
        dependencies=_collect_dependencies(manifest),
        rustdoc=rustdoc,
        readme=readme,
        metadata=metadata,
    )


def have_examples(root) -> bool:
    """True when the crate ships an examples/ directory"""
    return (Path(root) / 'examples').is_dir()
