"""Command line entry point for ``selfupgrade``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .core.errors import UpgradeDefect, UpgradeError
from .core.settings import SUPPORTED_ARCHIVE_EXTS, UpgradeSettings
from .updater.service import Upgrader, UpgradeOptions, UpgradeOutcome
from .utils.logger import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
# EX_SOFTWARE: archive or verification defect, never a user-facing error.
EXIT_DEFECT = 70


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="selfupgrade",
        description="Upgrade an executable to the latest (or a given) release.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Download and verify, but do not install")
    parser.add_argument("-f", "--force", action="store_true", help="Reinstall even if already at the target version")
    parser.add_argument("--version", dest="version", help="Version to install instead of the latest release")
    parser.add_argument("--output", type=Path, help="Write the new executable here instead of replacing in place")
    parser.add_argument("--cert", dest="ca_file", help="PEM file with an extra trusted CA certificate")
    parser.add_argument("--exe", dest="exe_path", help="Installed executable to upgrade")
    parser.add_argument("--tool-name", help="Executable name used in archive names and version output")
    parser.add_argument("--current-version", help="Installed version (queried from the executable if omitted)")
    parser.add_argument("--release-url", help="Releases base URL, e.g. https://github.com/owner/repo/releases")
    parser.add_argument("--archive-ext", choices=SUPPORTED_ARCHIVE_EXTS, help="Release archive format")
    parser.add_argument("--target", help="Platform identifier used in the archive name")
    parser.add_argument("--builtin-extract", action="store_true", help="Extract in-process instead of with system tools")
    parser.add_argument("--log-dir", type=Path, help="Also write a log file to this directory")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument("-V", "--self-version", action="version", version=f"selfupgrade {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.debug, log_dir=args.log_dir)

    options = UpgradeOptions(
        dry_run=args.dry_run,
        force=args.force,
        version=args.version,
        output=args.output,
        ca_file=args.ca_file,
        builtin_extract=args.builtin_extract,
    )

    try:
        settings = UpgradeSettings.from_env(
            tool_name=args.tool_name,
            release_url=args.release_url,
            exe_path=args.exe_path,
            current_version=args.current_version,
            archive_ext=args.archive_ext,
            target=args.target,
        )
        result = Upgrader(settings).run(options)
    except UpgradeDefect as e:
        logger.critical("Upgrade aborted: %s", e)
        return EXIT_DEFECT
    except UpgradeError as e:
        logger.error("%s", e)
        return EXIT_FAILURE
    except OSError as e:
        logger.error("I/O error during upgrade: %s", e)
        return EXIT_FAILURE

    if result.outcome is UpgradeOutcome.ALREADY_CURRENT:
        logger.debug("Nothing to do; %s is current", result.version)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
