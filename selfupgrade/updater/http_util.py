"""Single-request HTTP fetch used by the upgrade workflow.

``fetch_once`` never follows redirects itself; callers decide whether to
follow a ``FetchRedirect``. No authentication headers are ever sent, so
following a redirect to another host cannot leak credentials.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union
from urllib.parse import urljoin

import requests  # type: ignore[import-untyped]

from .. import __version__
from ..core.errors import DownloadError

logger = logging.getLogger(__name__)

USER_AGENT = f"selfupgrade/{__version__}"
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


@dataclass(frozen=True)
class FetchSuccess:
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FetchNotModified:
    pass


@dataclass(frozen=True)
class FetchRedirect:
    location: str
    headers: Mapping[str, str] = field(default_factory=dict)


FetchOutcome = Union[FetchSuccess, FetchNotModified, FetchRedirect]


def build_session(ca_file: Optional[str] = None, user_agent: str = USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    if ca_file:
        if not os.path.isfile(ca_file):
            raise FileNotFoundError(f"CA certificate file not found: {ca_file}")
        session.verify = ca_file
        logger.debug("Trusting CA bundle %s", ca_file)
    return session


def fetch_once(session: requests.Session, url: str, *, timeout: float = 30) -> FetchOutcome:
    try:
        response = session.get(url, timeout=timeout, allow_redirects=False)
    except requests.RequestException as e:
        raise DownloadError(f"Request to {url} failed: {e}") from e

    status = int(response.status_code)
    headers = dict(response.headers)

    if status in REDIRECT_STATUSES:
        location = response.headers.get("Location")
        if not location:
            raise DownloadError(f"HTTP {status} from {url} without a Location header")
        return FetchRedirect(location=urljoin(url, location), headers=headers)
    if status == 304:
        return FetchNotModified()
    if 200 <= status < 300:
        return FetchSuccess(body=response.content, headers=headers)
    raise DownloadError(f"HTTP {status} for {url}")
