import os
import tempfile

import pytest


def _script(output: str, exit_code: int = 0) -> bytes:
    return f"#!/bin/sh\necho '{output}'\nexit {exit_code}\n".encode("utf-8")


@pytest.fixture
def exe_script():
    """Bytes of a POSIX shell script that prints ``output`` and exits."""
    return _script


@pytest.fixture
def make_exe():
    def _make(path, output, exit_code=0):
        path.write_bytes(_script(output, exit_code))
        os.chmod(path, 0o755)
        return path

    return _make


@pytest.fixture
def staging_root(tmp_path, monkeypatch):
    """Keep staging directories created by tempfile.mkdtemp inside tmp_path."""
    root = tmp_path / "staging"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root
