#!/usr/bin/env python3
"""
Managed block inside the hosts file.

The block looks like::

    # WEBSITE_BLOCKER_START
    127.0.0.1 example.com
    127.0.0.1 www.example.com
    ::1 example.com
    ::1 www.example.com
    # WEBSITE_BLOCKER_END

Whether focus mode is on is read back from this block every time; nothing
else records it. Everything outside the block is left untouched.
"""
import re
import logging
from typing import Iterable, List, Set, Tuple

from focusblock.core.exceptions import DnsFlushWarning
from focusblock.network.dns_handler import DNSHandler
from focusblock.security.protection import SystemProtection
from focusblock.utils.config import BLOCK_IP, BLOCK_IP6, HOSTS_END_MARK, HOSTS_FILE, HOSTS_START_MARK


def _block_pattern(marker_start, marker_end, trailing_newline):
    tail = r"\n?" if trailing_newline else ""
    return re.compile(rf"{re.escape(marker_start)}[\s\S]*?{re.escape(marker_end)}{tail}")


def remove_marked_block(text: str, marker_start=HOSTS_START_MARK,
                        marker_end=HOSTS_END_MARK) -> Tuple[str, bool]:
    """Remove every managed block, each with its trailing newline."""
    new_text, n = _block_pattern(marker_start, marker_end, True).subn("", text)
    return new_text, n > 0


def make_hosts_block(domains: Iterable[str], marker_start=HOSTS_START_MARK,
                     marker_end=HOSTS_END_MARK) -> str:
    lines = [marker_start]
    for dom in domains:
        lines.append(f"{BLOCK_IP} {dom}")
        lines.append(f"{BLOCK_IP} www.{dom}")
        lines.append(f"{BLOCK_IP6} {dom}")
        lines.append(f"{BLOCK_IP6} www.{dom}")
    lines.append(marker_end)
    return "\n".join(lines) + "\n"


def extract_blocked_domains(text: str, marker_start=HOSTS_START_MARK,
                            marker_end=HOSTS_END_MARK) -> Set[str]:
    """Bare domains listed in the first managed block of `text`."""
    match = _block_pattern(marker_start, marker_end, False).search(text)
    section = match.group(0) if match else ""

    domains = set()
    for line in section.split("\n"):
        if BLOCK_IP not in line or marker_start in line or marker_end in line:
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        # Only count the bare entry; its www. twin is implied
        if parts[1].startswith("www."):
            continue
        domains.add(parts[1])
    return domains


def _unique(domains: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for d in domains:
        if d not in seen:
            seen.add(d)
            ordered.append(d)
    return ordered


class HostsFileHandler:
    def __init__(self, hosts_path=HOSTS_FILE, system=None, dns=None,
                 marker_start=HOSTS_START_MARK, marker_end=HOSTS_END_MARK):
        self.hosts_path = hosts_path
        self.system = system if system is not None else SystemProtection(hosts_path)
        self.dns = dns if dns is not None else DNSHandler()
        self.marker_start = marker_start
        self.marker_end = marker_end

    def read_hosts(self) -> str:
        return self.system.read_file(self.hosts_path)

    def currently_blocked_domains(self) -> Set[str]:
        """Domains blocked right now, according to the hosts file on disk"""
        return extract_blocked_domains(self.read_hosts(), self.marker_start, self.marker_end)

    def is_focus_mode_on(self) -> bool:
        return bool(self.currently_blocked_domains())

    def apply(self, domains: Iterable[str]) -> None:
        """Replace the managed block with one for `domains`; an empty list clears it"""
        websites = _unique(domains)
        hosts_content, removed = remove_marked_block(self.read_hosts(), self.marker_start, self.marker_end)
        if removed:
            logging.info("Removed existing block section from hosts file")

        if websites:
            if hosts_content and not hosts_content.endswith("\n"):
                hosts_content += "\n"
            hosts_content += make_hosts_block(websites, self.marker_start, self.marker_end)

        self.system.write_file(self.hosts_path, hosts_content)

        if websites:
            logging.info(f"Blocked {len(websites)} websites in hosts file")
        else:
            logging.info("Removed website blocks from hosts file")

        self._flush_dns()

    def clear(self) -> None:
        self.apply([])

    def _flush_dns(self):
        try:
            self.dns.flush_dns_cache()
        except DnsFlushWarning as e:
            logging.warning(f"{e}. Restarting the browser may be needed for changes to take effect.")
