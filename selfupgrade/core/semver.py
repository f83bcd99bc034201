from __future__ import annotations

import semver

from .errors import InvalidVersionError


class SemanticVersion(semver.Version):
    """Semver 2.0 version. Build metadata is kept for display only."""

    @classmethod
    def parse(cls, text: str, optional_minor_and_patch: bool = False) -> "SemanticVersion":
        if not isinstance(text, str):
            raise InvalidVersionError(f"Invalid semver: {text!r}")
        try:
            return super().parse(text.strip(), optional_minor_and_patch=optional_minor_and_patch)
        except ValueError as exc:
            raise InvalidVersionError(f"Invalid semver: {text!r}") from exc
