from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from ..core.errors import InvalidVersionError, UpgradeError, VerificationDefect
from ..core.semver import SemanticVersion

logger = logging.getLogger(__name__)


def copy_permissions(old_exe: Path, new_exe: Path) -> None:
    """Give the staged executable the mode bits of the installed one."""
    shutil.copymode(old_exe, new_exe)


def _run_version_query(exe_path: Path, version_flag: str, timeout: float) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            [str(exe_path), version_flag],
            stdout=subprocess.PIPE,
            stderr=None,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise VerificationDefect(f"{exe_path} did not answer {version_flag} within {timeout}s") from e


def check_exe(
    exe_path: Path,
    tool_name: str,
    expected_version: SemanticVersion,
    *,
    version_flag: str = "-V",
    timeout: float = 60,
) -> None:
    """Run the staged executable and require it to report exactly ``"<tool> <version>"``."""
    result = _run_version_query(exe_path, version_flag, timeout)
    if result.returncode != 0:
        raise VerificationDefect(f"{exe_path} {version_flag} exited with status {result.returncode}")

    try:
        reported = result.stdout.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise VerificationDefect(f"{exe_path} printed non UTF-8 output") from e

    expected = f"{tool_name} {expected_version}"
    if reported != expected:
        raise VerificationDefect(f"Version check failed: expected {expected!r}, got {reported!r}")
    logger.info("Verified %s reports %s", exe_path, expected)


def installed_version(exe_path: Path, tool_name: str, *, version_flag: str = "-V", timeout: float = 60) -> SemanticVersion:
    """Ask the installed executable for its version.

    Unlike ``check_exe`` this is about the binary already in place, so a bad
    answer is a recoverable error rather than a defect.
    """
    try:
        result = subprocess.run(
            [str(exe_path), version_flag],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise UpgradeError(f"Could not query the installed version of {exe_path}: {e}") from e

    if result.returncode != 0:
        raise UpgradeError(f"{exe_path} {version_flag} exited with status {result.returncode}")

    first_line = result.stdout.decode("utf-8", errors="replace").strip().splitlines()[:1]
    prefix = f"{tool_name} "
    if not first_line or not first_line[0].startswith(prefix):
        raise InvalidVersionError(f"Unexpected version output from {exe_path}: {first_line!r}")
    return SemanticVersion.parse(first_line[0][len(prefix):])
