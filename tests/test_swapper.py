import os

import pytest

from selfupgrade.updater.swapper import (
    PosixSwapStrategy,
    SwapStrategy,
    WindowsSwapStrategy,
    move_or_copy,
    select_swap_strategy,
    write_output,
)


def _files(tmp_path):
    old = tmp_path / "install" / "tool"
    new = tmp_path / "staging" / "tool"
    old.parent.mkdir()
    new.parent.mkdir()
    old.write_bytes(b"old")
    new.write_bytes(b"new")
    return old, new


def test_select_swap_strategy():
    assert isinstance(select_swap_strategy("nt"), WindowsSwapStrategy)
    assert isinstance(select_swap_strategy("posix"), PosixSwapStrategy)


def test_posix_swap_replaces_in_place(tmp_path):
    old, new = _files(tmp_path)

    PosixSwapStrategy().replace(new, old)

    assert old.read_bytes() == b"new"
    assert not new.exists()
    assert sorted(p.name for p in old.parent.iterdir()) == ["tool"]


def test_windows_swap_renames_old_aside(tmp_path):
    old, new = _files(tmp_path)
    old = old.rename(old.with_name("tool.exe"))

    WindowsSwapStrategy().replace(new, old)

    assert old.read_bytes() == b"new"
    assert (old.parent / "tool.old.exe").read_bytes() == b"old"


def test_windows_swap_overwrites_stale_old_exe(tmp_path):
    old, new = _files(tmp_path)
    old = old.rename(old.with_name("tool.exe"))
    (old.parent / "tool.old.exe").write_bytes(b"older")

    WindowsSwapStrategy().replace(new, old)

    assert (old.parent / "tool.old.exe").read_bytes() == b"old"


def test_move_or_copy_falls_back_to_copy(tmp_path, monkeypatch):
    _, new = _files(tmp_path)
    dst = tmp_path / "elsewhere"

    def _cross_device(src, dst):
        raise OSError(18, "Invalid cross-device link")

    monkeypatch.setattr(os, "rename", _cross_device)

    move_or_copy(new, dst)

    assert dst.read_bytes() == b"new"
    assert new.exists()


def test_write_output_leaves_installed_exe(tmp_path):
    old, new = _files(tmp_path)
    output = tmp_path / "out-tool"

    write_output(new, output)

    assert output.read_bytes() == b"new"
    assert old.read_bytes() == b"old"


def test_swap_failure_propagates(tmp_path):
    old, new = _files(tmp_path)
    old.unlink()

    with pytest.raises(OSError):
        PosixSwapStrategy().replace(new, old)
    assert new.exists()


def test_swap_strategy_requires_set_aside():
    with pytest.raises(TypeError):
        SwapStrategy()

    class Incomplete(SwapStrategy):
        pass

    with pytest.raises(TypeError):
        Incomplete()
