from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from typing import Optional

from ..core.errors import SettingsError
from ..core.semver import SemanticVersion
from ..core.settings import UpgradeSettings

_ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
}


@dataclass(frozen=True)
class ReleaseTarget:
    version: SemanticVersion
    url: str
    archive_name: str


def platform_target(sys_platform: Optional[str] = None, machine: Optional[str] = None) -> str:
    """Target triple for the running interpreter, e.g. ``x86_64-unknown-linux-gnu``."""
    sys_platform = sys_platform or sys.platform
    machine = (machine or platform.machine()).lower()

    arch = _ARCH_ALIASES.get(machine)
    if arch is None:
        raise SettingsError(f"Unsupported architecture: {machine}")

    if sys_platform.startswith("linux"):
        return f"{arch}-unknown-linux-gnu"
    if sys_platform == "darwin":
        return f"{arch}-apple-darwin"
    if sys_platform in ("win32", "cygwin"):
        return f"{arch}-pc-windows-msvc"
    raise SettingsError(f"Unsupported platform: {sys_platform}")


def archive_name(tool_name: str, target: str, archive_ext: str) -> str:
    return f"{tool_name}-{target}.{archive_ext}"


def compose_download_url(release_url: str, version: SemanticVersion, name: str) -> str:
    return f"{release_url.rstrip('/')}/download/v{version}/{name}"


def locate_release(version: SemanticVersion, settings: UpgradeSettings) -> ReleaseTarget:
    name = archive_name(settings.tool_name, settings.target or platform_target(), settings.archive_ext)
    return ReleaseTarget(
        version=version,
        url=compose_download_url(settings.release_url, version, name),
        archive_name=name,
    )
