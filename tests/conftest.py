from __future__ import annotations

from pathlib import Path

import pytest

from focusblock.core.blocker import FocusBlocker
from focusblock.core.exceptions import DnsFlushWarning
from focusblock.file_handlers.block_list import BlockListHandler
from focusblock.file_handlers.hosts_file import HostsFileHandler
from focusblock.security.protection import SystemProtection


class FakeDNS:
    """Stands in for DNSHandler; counts flushes and can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.flushes = 0

    def flush_dns_cache(self):
        self.flushes += 1
        if self.fail:
            raise DnsFlushWarning("Could not flush DNS cache (resolvectl flush-caches): unit not found")


@pytest.fixture
def hosts_path(tmp_path: Path) -> Path:
    hosts = tmp_path / "hosts"
    hosts.write_text("127.0.0.1 localhost\n", encoding="utf-8")
    return hosts


@pytest.fixture
def block_list_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "blocklist.json"


@pytest.fixture
def dns() -> FakeDNS:
    return FakeDNS()


@pytest.fixture
def hosts_handler(hosts_path: Path, dns: FakeDNS) -> HostsFileHandler:
    return HostsFileHandler(str(hosts_path), system=SystemProtection(str(hosts_path)), dns=dns)


@pytest.fixture
def block_list(block_list_path: Path) -> BlockListHandler:
    return BlockListHandler(str(block_list_path))


@pytest.fixture
def blocker(block_list, hosts_handler, tmp_path: Path) -> FocusBlocker:
    return FocusBlocker(block_list, hosts_handler, lock_path=str(tmp_path / "state" / "focusblock"), lock_timeout=0.2)
