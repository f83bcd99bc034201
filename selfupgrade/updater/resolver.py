"""Target version resolution: explicit user version or latest published tag."""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from ..core.errors import DownloadError, VersionNotFoundError
from ..core.semver import SemanticVersion
from ..core.settings import UpgradeSettings
from .http_util import FetchRedirect, FetchSuccess, fetch_once

logger = logging.getLogger(__name__)

# A release tag such as ``.../releases/tag/v1.2.3"`` inside HTML or a Location header.
_TAG_RE = re.compile(r"(?:^|(?<=[/\"'=\s]))v(?P<version>\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.+-]*)?)(?=[\"'?#</\s]|$)")


def find_version(text: str) -> str:
    match = _TAG_RE.search(text)
    if not match:
        raise VersionNotFoundError("Cannot read latest tag version")
    return match.group("version")


def get_latest_version(session, settings: UpgradeSettings, fetcher: Callable = fetch_once) -> SemanticVersion:
    logger.info("Checking for latest version")
    url = f"{settings.release_url}/latest"
    outcome = fetcher(session, url, timeout=settings.request_timeout)

    if isinstance(outcome, FetchRedirect):
        text = outcome.location
    elif isinstance(outcome, FetchSuccess):
        text = outcome.body.decode("utf-8", errors="replace")
    else:
        raise DownloadError(f"Unexpected response for {url}: {outcome!r}")

    return SemanticVersion.parse(find_version(text))


def resolve_target_version(
    current: SemanticVersion,
    requested: Optional[str],
    force: bool,
    latest_lookup: Callable[[], SemanticVersion],
) -> Optional[SemanticVersion]:
    """Return the version to install, or None when nothing needs doing.

    An explicit version is parsed before anything else, so a malformed one
    fails without touching the network. ``latest_lookup`` is only called when
    no version was requested.
    """
    if requested is not None:
        target = SemanticVersion.parse(requested)
        if not force and target == current:
            logger.info("Version %s is already installed", target)
            return None
        return target

    latest = latest_lookup()
    if not force and current >= latest:
        logger.info("Local version %s is the most recent release", current)
        return None
    return latest
