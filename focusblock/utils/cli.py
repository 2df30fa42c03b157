#!/usr/bin/env python3
import sys
import argparse
import logging
from typing import Optional, Sequence

from focusblock.core.blocker import FocusBlocker
from focusblock.core.exceptions import FocusBlockError, PrivilegeError
from focusblock.file_handlers.block_list import BlockListHandler
from focusblock.file_handlers.hosts_file import HostsFileHandler
from focusblock.network.dns_handler import DNSHandler
from focusblock.security.protection import SystemProtection
from focusblock.utils import config

PRIVILEGE_MESSAGE = (
    "This command requires administrative privileges. "
    "Run with sudo on macOS/Linux or as Administrator on Windows."
)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="focusblock",
        description="Block distracting websites through the hosts file, with a focus mode toggle",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {config.VERSION}")
    p.add_argument("-v", "--verbose", action="store_true", help="Show progress logging")
    p.add_argument("--log-file", help="Also write logs to this file")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("add", help="Add websites to the block list")
    s.add_argument("websites", nargs="+", help="Domains to block, e.g. youtube.com")

    s = sub.add_parser("remove", help="Remove websites from the block list")
    s.add_argument("websites", nargs="+")

    s = sub.add_parser("focus", help="Turn focus mode on (block) or off (unblock)")
    s.add_argument("state", nargs="?", default="on", type=str.lower, choices=["on", "off"])

    sub.add_parser("print", aliases=["list"], help="Print the block list and focus mode")

    sub.add_parser("clear", help="Clear the block list and unblock all websites")
    return p


def setup_logging(verbose=False, log_file=None):
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def build_blocker():
    system = SystemProtection(config.HOSTS_FILE)
    hosts_handler = HostsFileHandler(config.HOSTS_FILE, system=system, dns=DNSHandler())
    block_list_handler = BlockListHandler(config.BLOCK_LIST_FILE)
    blocker = FocusBlocker(block_list_handler, hosts_handler,
                           lock_path=config.LOCK_FILE, lock_timeout=config.LOCK_TIMEOUT)
    return blocker, system


def require_privileges(system):
    if not system.has_admin_privileges():
        raise PrivilegeError(PRIVILEGE_MESSAGE)


def print_focus_on(websites):
    print("Focus mode is ON")
    print(f"Blocked websites: {', '.join(websites)}")
    print("If the websites are still reachable, restarting the browser may be necessary.")


def cmd_add(blocker, system, args):
    # Writing the hosts file is only needed when focus mode is already on
    if blocker.is_focus_mode_on():
        require_privileges(system)
    result = blocker.add_websites(args.websites)
    if result.already_present:
        print("All provided websites are already in the block list.")
        return
    print(f"Added websites to block list: {', '.join(result.added)}")


def cmd_remove(blocker, system, args):
    if blocker.is_focus_mode_on():
        require_privileges(system)
    result = blocker.remove_websites(args.websites)
    if not result.matched:
        print("No matching websites found in the block list.")
        return
    print(f"Removed websites from block list: {', '.join(result.removed)}")


def cmd_focus(blocker, system, args):
    require_privileges(system)
    if args.state == "off":
        blocker.focus_off()
        print("Focus mode is OFF. All websites unblocked.")
        return
    websites = blocker.focus_on()
    if not websites:
        print('No websites in block list. Add websites using the "add" command.')
        return
    print_focus_on(websites)


def cmd_print(blocker, system, args):
    status = blocker.status()
    if not status.websites:
        print("No websites in the block list.")
        return
    print(f"Block list (Focus mode: {'ON' if status.focus_mode else 'OFF'}):")
    for site in status.websites:
        print(f"- {site}")


def cmd_clear(blocker, system, args):
    require_privileges(system)
    blocker.clear()
    print("Cleared all blocked websites and block list.")


COMMANDS = {
    "add": cmd_add,
    "remove": cmd_remove,
    "focus": cmd_focus,
    "print": cmd_print,
    "list": cmd_print,
    "clear": cmd_clear,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point"""
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    blocker, system = build_blocker()
    try:
        COMMANDS[args.command](blocker, system, args)
    except FocusBlockError as e:
        logging.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
