"""Release archive extraction into a fresh staging directory.

The staging directory is deliberately left on disk after the upgrade so a
failed or suspicious upgrade can be inspected afterwards.
"""

from __future__ import annotations

import gzip
import logging
import os
import stat
import subprocess
import tempfile
import zipfile
import zlib
from pathlib import Path

from ..core.errors import ArchiveDefect
from ..utils.system_binaries import resolve_trusted_binary

logger = logging.getLogger(__name__)

STAGING_PREFIX = "selfupgrade-"

_POWERSHELL_EXTRACT = """& {
  param($Path, $DestinationPath)
  trap { $host.ui.WriteErrorLine($_.Exception); exit 1 }
  Add-Type -AssemblyName System.IO.Compression.FileSystem
  [System.IO.Compression.ZipFile]::ExtractToDirectory($Path, $DestinationPath);
}"""


def staged_exe_name(tool_name: str, os_name: str = os.name) -> str:
    return f"{tool_name}.exe" if os_name == "nt" else tool_name


class ArchiveUnpacker:
    """Extracts the single executable from a ``.gz`` or ``.zip`` release archive.

    By default extraction shells out to the platform tools (``gunzip``,
    ``unzip`` or PowerShell). ``builtin=True`` uses the ``gzip``/``zipfile``
    modules instead, for hosts without those tools.
    """

    def __init__(self, tool_name: str, archive_ext: str, *, builtin: bool = False, os_name: str = os.name):
        self.tool_name = tool_name
        self.archive_ext = archive_ext.lower().lstrip(".")
        self.builtin = builtin
        self.os_name = os_name

    def unpack(self, archive_data: bytes) -> Path:
        temp_dir = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX))
        exe_path = temp_dir / staged_exe_name(self.tool_name, self.os_name)
        if exe_path.exists():
            raise ArchiveDefect(f"Fresh staging directory already contains {exe_path}")

        if self.archive_ext == "gz":
            returncode = self._unpack_gz(archive_data, exe_path)
        elif self.archive_ext == "zip":
            archive_path = temp_dir / f"{self.tool_name}.zip"
            archive_path.write_bytes(archive_data)
            returncode = self._unpack_zip(archive_path, temp_dir)
        else:
            raise ArchiveDefect(f"Unsupported archive type: '{self.archive_ext}'")

        if returncode != 0:
            raise ArchiveDefect(f"Archive extraction failed with exit status {returncode}")
        if not exe_path.is_file():
            raise ArchiveDefect(f"Archive did not contain {exe_path.name}")

        logger.info("Unpacked %s into %s", exe_path.name, temp_dir)
        return exe_path

    # --------------------------
    # gzip
    # --------------------------
    def _unpack_gz(self, archive_data: bytes, exe_path: Path) -> int:
        if self.builtin:
            try:
                payload = gzip.decompress(archive_data)
            except (OSError, EOFError, zlib.error) as e:
                raise ArchiveDefect(f"Corrupt gzip archive: {e}") from e
            exe_path.write_bytes(payload)
            return 0

        gunzip = resolve_trusted_binary("gunzip")
        with open(exe_path, "wb") as exe_file:
            result = subprocess.run([gunzip, "-c"], input=archive_data, stdout=exe_file)
        return result.returncode

    # --------------------------
    # zip
    # --------------------------
    def _unpack_zip(self, archive_path: Path, dest_dir: Path) -> int:
        if self.builtin:
            try:
                with zipfile.ZipFile(archive_path, "r") as zip_ref:
                    self._safe_extract(zip_ref, dest_dir)
            except (zipfile.BadZipFile, zlib.error, EOFError) as e:
                raise ArchiveDefect(f"Corrupt zip archive: {e}") from e
            return 0

        if self.os_name == "nt":
            powershell = resolve_trusted_binary("powershell")
            cmd = [
                powershell,
                "-NoLogo",
                "-NoProfile",
                "-NonInteractive",
                "-Command",
                _POWERSHELL_EXTRACT,
                "-Path",
                f"'{archive_path}'",
                "-DestinationPath",
                f"'{dest_dir}'",
            ]
            return subprocess.run(cmd).returncode

        unzip = resolve_trusted_binary("unzip")
        return subprocess.run([unzip, str(archive_path)], cwd=str(dest_dir)).returncode

    def _safe_extract(self, zip_ref: zipfile.ZipFile, extract_dir: Path) -> None:
        base_path = extract_dir.resolve()
        for member in zip_ref.infolist():
            target = (base_path / member.filename.replace("\\", "/")).resolve()
            is_symlink = stat.S_ISLNK(member.external_attr >> 16)
            if is_symlink or not target.is_relative_to(base_path):
                raise ArchiveDefect(f"Unsafe zip entry detected: {member.filename}")
        zip_ref.extractall(base_path)
