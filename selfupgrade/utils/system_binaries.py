"""Lookup of the system tools used to extract release archives.

Only executables living in system directories are accepted, so a ``gunzip``
or ``unzip`` dropped earlier on ``PATH`` (e.g. in the working directory) is
never run against downloaded data.
"""

import os
import shutil
from pathlib import Path
from typing import Iterable

_POSIX_SYSTEM_DIRS = ("/usr/bin", "/bin", "/usr/local/bin", "/opt/homebrew/bin")


def system_dirs() -> list[Path]:
    if os.name == "nt":
        windir = Path(os.environ.get("WINDIR", r"C:\Windows"))
        candidates: Iterable[Path] = (
            windir / "System32",
            windir / "System32" / "WindowsPowerShell" / "v1.0",
        )
    else:
        candidates = (Path(d) for d in _POSIX_SYSTEM_DIRS)
    return [d.resolve() for d in candidates if d.is_dir()]


def _inside(path: Path, dirs: list[Path]) -> bool:
    return any(path.is_relative_to(d) for d in dirs)


def resolve_trusted_binary(binary_name: str) -> str:
    """Return the absolute path of ``binary_name`` from a system directory.

    Raises FileNotFoundError when none is found, so a missing tool surfaces
    like any other I/O failure.
    """
    dirs = system_dirs()
    discovered = shutil.which(binary_name)
    candidates = [Path(discovered)] if discovered else []
    candidates.extend(d / binary_name for d in dirs)

    for candidate in candidates:
        try:
            resolved = candidate.resolve()
        except OSError:
            continue
        if resolved.is_file() and os.access(resolved, os.X_OK) and _inside(resolved, dirs):
            return str(resolved)

    raise FileNotFoundError(f"Trusted executable not found for '{binary_name}'")
