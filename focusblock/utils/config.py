#!/usr/bin/env python3
"""Default paths and constants, overridable through FOCUSBLOCK_* environment variables."""

import os
import platform

SYSTEM = platform.system()

# ---------- Hosts file ----------

DEFAULT_HOSTS_FILE = (
    r"C:\Windows\System32\drivers\etc\hosts" if SYSTEM == "Windows" else "/etc/hosts"
)
HOSTS_FILE = os.environ.get("FOCUSBLOCK_HOSTS_FILE", DEFAULT_HOSTS_FILE)

HOSTS_START_MARK = "# WEBSITE_BLOCKER_START"
HOSTS_END_MARK = "# WEBSITE_BLOCKER_END"

BLOCK_IP = "127.0.0.1"
BLOCK_IP6 = "::1"


# ---------- Block list & lock ----------

def user_home():
    """Home of the invoking user, even when running under sudo."""
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        home = os.path.expanduser(f"~{sudo_user}")
        # expanduser leaves the string alone for unknown users
        if not home.startswith("~"):
            return home
    return os.path.expanduser("~")


def sudo_owner():
    """(uid, gid) of the user who invoked sudo, or None outside sudo."""
    try:
        return int(os.environ["SUDO_UID"]), int(os.environ["SUDO_GID"])
    except (KeyError, ValueError):
        return None


def running_as_root():
    return hasattr(os, "geteuid") and os.geteuid() == 0


def hand_to_invoking_user(path):
    """Give a file or directory created under sudo back to the invoking user."""
    owner = sudo_owner()
    if owner is not None and running_as_root():
        os.chown(path, *owner)


def ensure_user_dir(path):
    if os.path.isdir(path):
        return
    os.makedirs(path, exist_ok=True)
    hand_to_invoking_user(path)


STATE_DIR = os.environ.get("FOCUSBLOCK_HOME", os.path.join(user_home(), ".focusblock"))
BLOCK_LIST_FILE = os.environ.get("FOCUSBLOCK_BLOCKLIST", os.path.join(STATE_DIR, "blocklist.json"))
LOCK_FILE = os.path.join(STATE_DIR, "focusblock")
LOCK_TIMEOUT = float(os.environ.get("FOCUSBLOCK_LOCK_TIMEOUT", "10"))

VERSION = "1.0.1"
