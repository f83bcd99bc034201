from __future__ import annotations

import logging
from typing import Callable

from ..core.errors import DownloadError, UpgradeDefect
from ..core.semver import SemanticVersion
from .http_util import FetchNotModified, FetchRedirect, FetchSuccess, fetch_once

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 20


def download_package(
    url: str,
    session,
    version: SemanticVersion,
    *,
    fetcher: Callable = fetch_once,
    timeout: float = 60,
    redirects_left: int = MAX_REDIRECTS,
) -> bytes:
    """Fetch the release archive, following redirects. Returns the full body."""
    logger.info("downloading %s", url)
    try:
        outcome = fetcher(session, url, timeout=timeout)
    except DownloadError:
        logger.error("Version has not been found, aborting")
        raise

    if isinstance(outcome, FetchRedirect):
        if redirects_left <= 0:
            raise DownloadError(f"Too many redirects while downloading {url}")
        return download_package(
            outcome.location,
            session,
            version,
            fetcher=fetcher,
            timeout=timeout,
            redirects_left=redirects_left - 1,
        )
    if isinstance(outcome, FetchSuccess):
        logger.info("Version has been found, upgrading to version %s", version)
        return outcome.body
    if isinstance(outcome, FetchNotModified):
        # Unconditional GET; a 304 means the fetch layer is broken.
        raise UpgradeDefect(f"Unexpected 304 Not Modified for {url}")
    raise UpgradeDefect(f"Unknown fetch outcome for {url}: {outcome!r}")
