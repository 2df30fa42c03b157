#!/usr/bin/env python3
"""
focusblock - Block distracting websites while you focus.

Websites go into a block list; focus mode copies that list into the system
hosts file so the domains resolve to localhost, and turning it off removes
them again.

Usage:
    python main.py add youtube.com reddit.com
    sudo python main.py focus on
    python main.py print
    sudo python main.py focus off
"""
import sys

from focusblock.utils.cli import main

if __name__ == "__main__":
    sys.exit(main())
