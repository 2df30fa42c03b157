#!/usr/bin/env python3
import shutil
import logging
import platform
import subprocess

from focusblock.core.exceptions import DnsFlushWarning


class DNSHandler:
    def __init__(self):
        self.os_type = platform.system().lower()

    def _flush_commands(self):
        if self.os_type == "darwin":
            return [["dscacheutil", "-flushcache"], ["killall", "-HUP", "mDNSResponder"]]
        if self.os_type == "windows":
            return [["ipconfig", "/flushdns"]]
        if self.os_type == "linux":
            if shutil.which("resolvectl"):
                return [["resolvectl", "flush-caches"]]
            if shutil.which("systemd-resolve"):
                return [["systemd-resolve", "--flush-caches"]]
            return [["service", "nscd", "restart"]]
        raise DnsFlushWarning(f"DNS cache flush not supported on this system ({self.os_type})")

    def flush_dns_cache(self):
        """Flush the resolver cache so hosts changes take effect immediately"""
        for cmd in self._flush_commands():
            try:
                subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                               text=True, check=True)
            except (subprocess.CalledProcessError, OSError) as e:
                detail = (getattr(e, "stderr", None) or str(e)).strip()
                raise DnsFlushWarning(f"Could not flush DNS cache ({' '.join(cmd)}): {detail}") from e
        logging.info(f"Flushed DNS cache ({self.os_type})")
