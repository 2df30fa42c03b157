#!/usr/bin/env python3
import os
import errno
import shutil
import logging
import platform
import tempfile
import subprocess

from focusblock.core.exceptions import HostsReadError, HostsWriteError
from focusblock.utils.config import HOSTS_FILE

WINDOWS_PROBE_FILE = r"C:\Windows\System32\focusblock_probe.txt"


class SystemProtection:
    """Privileged access to system files: the privilege check plus whole-file read/write."""

    def __init__(self, hosts_path=HOSTS_FILE):
        self.hosts_path = hosts_path
        self.os_type = platform.system().lower()

    def has_admin_privileges(self):
        """Check whether this process may modify the hosts file"""
        if self.os_type == "windows":
            # No euid on Windows; try writing into System32 instead
            try:
                with open(WINDOWS_PROBE_FILE, "w") as f:
                    f.write("probe")
                os.remove(WINDOWS_PROBE_FILE)
                return True
            except OSError:
                return False

        try:
            if os.geteuid() == 0:
                return True
        except AttributeError:
            pass
        return os.access(self.hosts_path, os.W_OK)

    def read_file(self, path):
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise HostsReadError(f"Error reading hosts file: {e}") from e

    def write_file(self, path, content):
        """Replace the whole file content in one step"""
        try:
            self._write_atomic(path, content)
            return
        except PermissionError as e:
            logging.info(f"Direct write to {path} denied ({e}), trying elevated write")
            self._write_elevated(path, content)
        except OSError as e:
            # Bind-mounted files (containers) cannot be replaced by rename
            if e.errno not in (errno.EBUSY, errno.EXDEV):
                raise HostsWriteError(f"Failed to write to hosts file: {e}") from e
            logging.info(f"Cannot replace {path} ({e}), writing in place")
            self._write_in_place(path, content)
        logging.info(f"Wrote {path}")

    def _write_atomic(self, path, content):
        dir_path = os.path.dirname(os.path.abspath(path))
        try:
            st = os.stat(path)
        except FileNotFoundError:
            st = None

        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile("w", delete=False, dir=dir_path, encoding="utf-8", newline="") as tmp:
                tmp_path = tmp.name
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())
            if st is not None:
                os.chmod(tmp_path, st.st_mode & 0o7777)
                if hasattr(os, "chown") and os.geteuid() == 0:
                    os.chown(tmp_path, st.st_uid, st.st_gid)
            else:
                os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, path)
        except BaseException:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _write_in_place(self, path, content):
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise HostsWriteError(f"Failed to write to hosts file: {e}") from e

    def _write_elevated(self, path, content):
        if self.os_type == "windows":
            cmd = [
                "powershell",
                "-NoProfile",
                "-Command",
                f"$input | Set-Content -Path '{path}'",
            ]
        elif shutil.which("sudo"):
            cmd = ["sudo", "tee", path]
        else:
            raise HostsWriteError(
                f"Failed to write to hosts file {path}: permission denied. "
                "Run with sudo on macOS/Linux or as Administrator on Windows."
            )

        try:
            subprocess.run(cmd, input=content, text=True, stdout=subprocess.DEVNULL,
                           stderr=subprocess.PIPE, check=True)
        except (subprocess.CalledProcessError, OSError) as e:
            detail = getattr(e, "stderr", None) or e
            raise HostsWriteError(
                f"Failed to write to hosts file: {detail}. "
                "Ensure the command is run with sudo on macOS/Linux or as Administrator on Windows."
            ) from e
