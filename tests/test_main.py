import logging
from types import SimpleNamespace

import pytest

from selfupgrade import main as cli
from selfupgrade.core.errors import ArchiveDefect, DownloadError, VerificationDefect, VersionNotFoundError
from selfupgrade.updater.service import UpgradeOutcome


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger().handlers.clear()


def _fake_upgrader(monkeypatch, behaviour, captured=None):
    class _Upgrader:
        def __init__(self, settings):
            if captured is not None:
                captured["settings"] = settings

        def run(self, options):
            if captured is not None:
                captured["options"] = options
            return behaviour()

    monkeypatch.setattr(cli, "Upgrader", _Upgrader)


def _raise(exc):
    def _behaviour():
        raise exc

    return _behaviour


BASE_ARGS = ["--release-url", "https://example.invalid/owner/tool/releases", "--exe", "/opt/tool/bin/tool"]


def test_parser_flags():
    args = cli.build_parser().parse_args(
        ["--dry-run", "-f", "--version", "1.2.3", "--output", "out", "--cert", "ca.pem", "--archive-ext", "gz"]
    )
    assert args.dry_run and args.force
    assert args.version == "1.2.3"
    assert str(args.output) == "out"
    assert args.ca_file == "ca.pem"
    assert args.archive_ext == "gz"


def test_main_success_passes_options(monkeypatch):
    captured = {}
    _fake_upgrader(monkeypatch, lambda: SimpleNamespace(outcome=UpgradeOutcome.UPGRADED, version="1.1.0"), captured)

    code = cli.main(BASE_ARGS + ["--dry-run", "--force", "--version", "1.1.0", "--cert", "ca.pem"])

    assert code == cli.EXIT_OK
    options = captured["options"]
    assert options.dry_run and options.force
    assert options.version == "1.1.0"
    assert options.ca_file == "ca.pem"
    assert captured["settings"].tool_name == "tool"


def test_main_already_current_exits_zero(monkeypatch):
    _fake_upgrader(monkeypatch, lambda: SimpleNamespace(outcome=UpgradeOutcome.ALREADY_CURRENT, version="1.0.0"))
    assert cli.main(BASE_ARGS) == cli.EXIT_OK


@pytest.mark.parametrize(
    "exc",
    [VersionNotFoundError("Cannot read latest tag version"), DownloadError("HTTP 404"), PermissionError("denied")],
)
def test_main_recoverable_errors_exit_one(monkeypatch, exc):
    _fake_upgrader(monkeypatch, _raise(exc))
    assert cli.main(BASE_ARGS) == cli.EXIT_FAILURE


@pytest.mark.parametrize("exc", [ArchiveDefect("corrupt"), VerificationDefect("mismatch")])
def test_main_defects_exit_abruptly(monkeypatch, exc):
    _fake_upgrader(monkeypatch, _raise(exc))
    assert cli.main(BASE_ARGS) == cli.EXIT_DEFECT


def test_main_invalid_version_exits_one_without_upgrading(monkeypatch):
    monkeypatch.delenv("SELFUPGRADE_CURRENT_VERSION", raising=False)
    code = cli.main(BASE_ARGS + ["--current-version", "1.0.0", "--version", "one.two"])
    assert code == cli.EXIT_FAILURE


def test_main_without_release_url_exits_one(monkeypatch):
    monkeypatch.delenv("SELFUPGRADE_RELEASE_URL", raising=False)
    assert cli.main(["--exe", "/opt/tool/bin/tool"]) == cli.EXIT_FAILURE
