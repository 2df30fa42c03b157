#!/usr/bin/env python3
import os
import logging
import contextlib
from dataclasses import dataclass, field
from typing import List

import lockfile

from focusblock.core.exceptions import LockError
from focusblock.file_handlers.block_list import AddResult, BlockListHandler, RemoveResult
from focusblock.file_handlers.hosts_file import HostsFileHandler
from focusblock.utils.config import LOCK_FILE, LOCK_TIMEOUT, ensure_user_dir


@dataclass
class FocusStatus:
    websites: List[str] = field(default_factory=list)
    focus_mode: bool = False


class FocusBlocker:
    """Ties the block list to the hosts file.

    The block list says what would be blocked; the hosts file says whether
    blocking is active. Commands that change either one run under an
    advisory lock shared by all focusblock processes. Other programs editing
    the hosts file are not locked out.
    """

    def __init__(self, block_list_handler=None, hosts_handler=None,
                 lock_path=LOCK_FILE, lock_timeout=LOCK_TIMEOUT):
        self.block_list_handler = block_list_handler or BlockListHandler()
        self.hosts_handler = hosts_handler or HostsFileHandler()
        self.lock_path = lock_path
        self.lock_timeout = lock_timeout

    @contextlib.contextmanager
    def _locked(self):
        ensure_user_dir(os.path.dirname(os.path.abspath(self.lock_path)))
        lock = lockfile.FileLock(self.lock_path)
        try:
            lock.acquire(timeout=self.lock_timeout)
        except lockfile.LockTimeout as e:
            # A run killed with SIGKILL leaves its link behind
            raise LockError(
                f"Another focusblock command is running (lock {lock.lock_file}). "
                f"If no focusblock is running, remove {lock.lock_file} and try again."
            ) from e
        except lockfile.LockError as e:
            raise LockError(f"Failed to acquire lock {lock.lock_file}: {e}") from e
        try:
            yield
        finally:
            lock.release()

    def is_focus_mode_on(self):
        return self.hosts_handler.is_focus_mode_on()

    def status(self):
        return FocusStatus(
            websites=self.block_list_handler.load(),
            focus_mode=self.hosts_handler.is_focus_mode_on(),
        )

    def add_websites(self, websites) -> AddResult:
        """Add websites to the block list, re-applying the hosts block if focus mode is on"""
        with self._locked():
            result = self.block_list_handler.add(websites)
            if result.added and self.hosts_handler.is_focus_mode_on():
                logging.info("Focus mode is on, refreshing hosts block")
                self.hosts_handler.apply(self.block_list_handler.load())
            return result

    def remove_websites(self, websites) -> RemoveResult:
        """Remove websites from the block list, re-applying the hosts block if focus mode is on"""
        with self._locked():
            result = self.block_list_handler.remove(websites)
            if result.matched and self.hosts_handler.is_focus_mode_on():
                logging.info("Focus mode is on, refreshing hosts block")
                self.hosts_handler.apply(self.block_list_handler.load())
            return result

    def focus_on(self):
        """Block everything in the block list. Returns the blocked websites, empty if there was nothing to block."""
        with self._locked():
            websites = self.block_list_handler.load()
            if not websites:
                logging.info("Block list is empty, leaving hosts file alone")
                return []
            self.hosts_handler.apply(websites)
            return websites

    def focus_off(self):
        with self._locked():
            self.hosts_handler.clear()

    def clear(self):
        """Empty the block list and unblock everything"""
        with self._locked():
            self.block_list_handler.clear()
            self.hosts_handler.clear()
