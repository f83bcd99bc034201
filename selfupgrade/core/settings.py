"""Upgrade settings loaded from ``SELFUPGRADE_*`` environment variables."""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .errors import SettingsError

ENV_PREFIX = "SELFUPGRADE_"
SUPPORTED_ARCHIVE_EXTS = ("gz", "zip")

DEFAULT_ARCHIVE_EXT = "zip"
DEFAULT_VERSION_FLAG = "-V"
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
DEFAULT_VERIFY_TIMEOUT_SEC = 60.0


@dataclass(frozen=True)
class UpgradeSettings:
    tool_name: str
    release_url: str
    exe_path: Path
    current_version: Optional[str] = None
    archive_ext: str = DEFAULT_ARCHIVE_EXT
    target: Optional[str] = None
    version_flag: str = DEFAULT_VERSION_FLAG
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SEC
    verify_timeout: float = DEFAULT_VERIFY_TIMEOUT_SEC

    @classmethod
    def from_env(cls, **overrides: Any) -> "UpgradeSettings":
        """Build settings from the environment; non-None overrides win."""
        raw: dict[str, Any] = {
            "tool_name": _env("TOOL_NAME"),
            "release_url": _env("RELEASE_URL"),
            "exe_path": _env("EXE_PATH"),
            "current_version": _env("CURRENT_VERSION"),
            "archive_ext": _env("ARCHIVE_EXT"),
            "target": _env("TARGET"),
            "version_flag": _env("VERSION_FLAG"),
            "request_timeout": _env("TIMEOUT"),
            "verify_timeout": _env("VERIFY_TIMEOUT"),
        }
        raw.update({key: value for key, value in overrides.items() if value is not None})

        release_url = (raw.get("release_url") or "").strip().rstrip("/")
        if not release_url:
            raise SettingsError(f"No release URL configured. Pass --release-url or set {ENV_PREFIX}RELEASE_URL.")

        archive_ext = (raw.get("archive_ext") or DEFAULT_ARCHIVE_EXT).lower().lstrip(".")
        if archive_ext not in SUPPORTED_ARCHIVE_EXTS:
            raise SettingsError(f"Unsupported archive extension: {archive_ext!r}")

        exe_path = _resolve_exe_path(raw.get("exe_path"), raw.get("tool_name"))
        tool_name = raw.get("tool_name") or _tool_name_from_exe(exe_path)

        try:
            request_timeout = float(raw.get("request_timeout") or DEFAULT_REQUEST_TIMEOUT_SEC)
            verify_timeout = float(raw.get("verify_timeout") or DEFAULT_VERIFY_TIMEOUT_SEC)
        except (TypeError, ValueError) as e:
            raise SettingsError(f"Invalid timeout: {e}") from e

        return cls(
            tool_name=tool_name,
            release_url=release_url,
            exe_path=exe_path,
            current_version=raw.get("current_version") or None,
            archive_ext=archive_ext,
            target=raw.get("target") or None,
            version_flag=raw.get("version_flag") or DEFAULT_VERSION_FLAG,
            request_timeout=request_timeout,
            verify_timeout=verify_timeout,
        )


def _env(name: str) -> Optional[str]:
    value = os.getenv(ENV_PREFIX + name, "").strip()
    return value or None


def _tool_name_from_exe(exe_path: Path) -> str:
    name = exe_path.name
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return name


def _resolve_exe_path(explicit: Optional[Any], tool_name: Optional[str]) -> Path:
    if explicit:
        return Path(explicit).expanduser().resolve()
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    if tool_name:
        discovered = shutil.which(tool_name)
        if discovered:
            return Path(discovered).resolve()
    raise SettingsError(f"Cannot locate the installed executable. Pass --exe or set {ENV_PREFIX}EXE_PATH.")
