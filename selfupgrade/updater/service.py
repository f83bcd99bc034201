"""Upgrade orchestration: resolve, locate, download, unpack, verify, swap."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..core.semver import SemanticVersion
from ..core.settings import UpgradeSettings
from .downloader import download_package
from .http_util import build_session, fetch_once
from .locator import ReleaseTarget, locate_release
from .resolver import get_latest_version, resolve_target_version
from .swapper import SwapStrategy, select_swap_strategy, write_output
from .unpacker import ArchiveUnpacker
from .verifier import check_exe, copy_permissions, installed_version

logger = logging.getLogger(__name__)


class UpgradeOutcome(Enum):
    ALREADY_CURRENT = "already_current"
    UPGRADED = "upgraded"


@dataclass(frozen=True)
class UpgradeOptions:
    dry_run: bool = False
    force: bool = False
    version: Optional[str] = None
    output: Optional[Path] = None
    ca_file: Optional[str] = None
    builtin_extract: bool = False


@dataclass(frozen=True)
class UpgradeResult:
    outcome: UpgradeOutcome
    version: Optional[SemanticVersion] = None
    staged_exe: Optional[Path] = None
    installed_path: Optional[Path] = None
    dry_run: bool = False


class Upgrader:
    """Runs one upgrade attempt against the configured release server.

    Recoverable failures raise ``UpgradeError`` or ``OSError``; archive and
    verification defects raise ``UpgradeDefect`` and must end the process.
    """

    def __init__(
        self,
        settings: UpgradeSettings,
        *,
        session=None,
        fetcher: Callable = fetch_once,
        swap_strategy: Optional[SwapStrategy] = None,
    ):
        self.settings = settings
        self.session = session
        self.fetcher = fetcher
        self.swap_strategy = swap_strategy or select_swap_strategy()

    def current_version(self) -> SemanticVersion:
        if self.settings.current_version:
            return SemanticVersion.parse(self.settings.current_version)
        return installed_version(
            self.settings.exe_path,
            self.settings.tool_name,
            version_flag=self.settings.version_flag,
            timeout=self.settings.verify_timeout,
        )

    def _session(self, ca_file: Optional[str]):
        if self.session is None:
            self.session = build_session(ca_file=ca_file)
        return self.session

    def run(self, options: UpgradeOptions) -> UpgradeResult:
        if options.version is not None:
            # Reject a malformed version before anything else runs.
            SemanticVersion.parse(options.version)
        current = self.current_version()
        target = resolve_target_version(
            current,
            options.version,
            options.force,
            lambda: get_latest_version(self._session(options.ca_file), self.settings, fetcher=self.fetcher),
        )
        if target is None:
            return UpgradeResult(outcome=UpgradeOutcome.ALREADY_CURRENT, version=current, dry_run=options.dry_run)

        release = locate_release(target, self.settings)
        new_exe = self._stage(release, options)

        installed_path: Optional[Path] = None
        if not options.dry_run:
            installed_path = self._install(new_exe, options.output)

        logger.info("Upgrade done successfully%s", " (dry run)" if options.dry_run else "")
        return UpgradeResult(
            outcome=UpgradeOutcome.UPGRADED,
            version=target,
            staged_exe=new_exe,
            installed_path=installed_path,
            dry_run=options.dry_run,
        )

    def _stage(self, release: ReleaseTarget, options: UpgradeOptions) -> Path:
        archive_data = download_package(
            release.url,
            self._session(options.ca_file),
            release.version,
            fetcher=self.fetcher,
            timeout=self.settings.request_timeout,
        )
        unpacker = ArchiveUnpacker(
            self.settings.tool_name,
            self.settings.archive_ext,
            builtin=options.builtin_extract,
        )
        new_exe = unpacker.unpack(archive_data)
        copy_permissions(self.settings.exe_path, new_exe)
        check_exe(
            new_exe,
            self.settings.tool_name,
            release.version,
            version_flag=self.settings.version_flag,
            timeout=self.settings.verify_timeout,
        )
        return new_exe

    def _install(self, new_exe: Path, output: Optional[Path]) -> Path:
        if output is not None:
            write_output(new_exe, output)
            return output
        self.swap_strategy.replace(new_exe, self.settings.exe_path)
        return self.settings.exe_path
