"""Replacing the installed executable with the verified one.

No rollback is attempted: if a step fails part way, the OSError is raised to
the caller and the filesystem is left as it is.
"""

from __future__ import annotations

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


def move_or_copy(src: Path, dst: Path) -> None:
    # rename fails across devices; the copy leaves src in the staging dir.
    try:
        os.rename(src, dst)
    except OSError as e:
        logger.debug("Rename %s -> %s failed (%s), copying instead", src, dst, e)
        shutil.copy2(src, dst)


def write_output(new_exe: Path, output: Path) -> None:
    move_or_copy(new_exe, output)
    logger.info("Wrote new executable to %s", output)


class SwapStrategy(ABC):
    def replace(self, new_exe: Path, old_exe: Path) -> None:
        self._set_aside(old_exe)
        move_or_copy(new_exe, old_exe)
        logger.info("Replaced %s", old_exe)

    @abstractmethod
    def _set_aside(self, old_exe: Path) -> None:
        """Move the installed executable out of the way."""


class PosixSwapStrategy(SwapStrategy):
    """Unlink the installed file; running processes keep their open inode."""

    def _set_aside(self, old_exe: Path) -> None:
        os.remove(old_exe)


class WindowsSwapStrategy(SwapStrategy):
    """A running executable cannot be overwritten on Windows, but it can be renamed."""

    @staticmethod
    def old_path(old_exe: Path) -> Path:
        return old_exe.with_suffix(".old.exe")

    def _set_aside(self, old_exe: Path) -> None:
        # os.replace so a leftover from a previous upgrade does not block the rename.
        os.replace(old_exe, self.old_path(old_exe))


def select_swap_strategy(os_name: str = os.name) -> SwapStrategy:
    if os_name == "nt":
        return WindowsSwapStrategy()
    return PosixSwapStrategy()
