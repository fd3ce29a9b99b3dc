"""
Wrapper for Cargo CLI operations

Documentation is produced by running ``cargo doc`` inside the extracted crate.
Every command takes its working directory as an argument; this module never
changes the working directory of the current process.
"""
import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .errors import BuildFailed, CommandFailure

logger = logging.getLogger(__name__)

DOC_COMMAND = ['doc', '--no-deps', '--verbose']


@dataclass
class CommandResult:
    """Exit status and combined stdout/stderr of a finished command"""
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def get_cargo_executable() -> str:
    """
    Get the path to the cargo executable.

    Prefers a cargo installed inside the active virtual environment, then
    ~/.cargo/bin/cargo, then whatever ``cargo`` resolves to on PATH.

    Returns:
        str: Path to cargo executable
    """
    if sys.base_prefix != sys.prefix:
        if sys.platform == 'win32':
            venv_cargo = Path(sys.prefix) / 'Scripts' / 'cargo.exe'
        else:
            venv_cargo = Path(sys.prefix) / 'bin' / 'cargo'
        if venv_cargo.exists():
            return str(venv_cargo)

    home_cargo = Path.home() / '.cargo' / 'bin' / ('cargo.exe' if sys.platform == 'win32' else 'cargo')
    if home_cargo.exists():
        return str(home_cargo)

    return 'cargo'


def run_command(args: List[str], cwd: Path) -> CommandResult:
    """
    Run a command in ``cwd`` and capture stdout and stderr together.

    Args:
        args: Command and arguments
        cwd: Working directory for the child process

    Returns:
        CommandResult: Exit status and captured output

    Raises:
        CommandFailure: If the executable cannot be started
    """
    logger.debug("Running %s in %s", ' '.join(args), cwd)
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors='replace',
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise CommandFailure(f"Could not run {args[0]}: {e}") from e

    return CommandResult(returncode=result.returncode, output=result.stdout or '')


def get_cargo_version() -> Optional[str]:
    """
    Get the installed cargo version

    Returns:
        str: Version string (e.g. "cargo 1.75.0 (1d8b05cdd 2023-11-20)") or None
    """
    try:
        result = run_command([get_cargo_executable(), '--version'], cwd=Path.cwd())
    except CommandFailure:
        return None
    if result.ok:
        return result.output.strip()
    return None


def build_docs(package_root: Path) -> str:
    """
    Run ``cargo doc --no-deps --verbose`` inside package_root.

    Args:
        package_root: Extracted crate directory containing Cargo.toml

    Returns:
        str: The build log

    Raises:
        BuildFailed: If cargo exits with a non-zero status or cannot be run
    """
    args = [get_cargo_executable()] + DOC_COMMAND
    try:
        result = run_command(args, cwd=package_root)
    except CommandFailure as e:
        raise BuildFailed(str(e), log=e.log or f"{e}\n") from e

    if not result.ok:
        raise BuildFailed(
            f"cargo doc exited with status {result.returncode} in {package_root}",
            log=result.output,
        )
    return result.output
