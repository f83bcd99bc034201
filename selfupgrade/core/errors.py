"""Error taxonomy for the upgrade workflow.

Two families:
- ``UpgradeError``: recoverable conditions (bad input, network, missing tag).
  The CLI reports them and exits with status 1.
- ``UpgradeDefect``: conditions that should never happen against a trusted
  release server (corrupt archive, binary that cannot prove its version).
  They are never caught below the CLI, which exits abruptly on them.
"""


class UpgradeError(Exception):
    """Recoverable upgrade failure."""


class InvalidVersionError(UpgradeError, ValueError):
    """A version string is not valid semver."""


class SettingsError(UpgradeError):
    """Required configuration is missing or malformed."""


class VersionNotFoundError(UpgradeError):
    """No release tag could be read from the release page."""


class DownloadError(UpgradeError):
    """Transport failure or non-success HTTP status."""


class UpgradeDefect(Exception):
    """Fatal defect; the process must not continue."""


class ArchiveDefect(UpgradeDefect):
    """Unsupported, corrupt or incomplete release archive."""


class VerificationDefect(UpgradeDefect):
    """Staged executable failed its self-check."""
