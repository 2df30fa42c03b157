#!/usr/bin/env python3
import os
import json
import logging
import tempfile
from dataclasses import dataclass, field
from typing import Iterable, List

from focusblock.core.exceptions import InvalidDomainError, StorageReadError, StorageWriteError
from focusblock.utils.config import BLOCK_LIST_FILE, ensure_user_dir, hand_to_invoking_user, running_as_root


@dataclass
class AddResult:
    added: List[str] = field(default_factory=list)
    already_present: bool = False


@dataclass
class RemoveResult:
    removed: List[str] = field(default_factory=list)
    matched: bool = False


def normalize_domain(domain: str) -> str:
    """Trim whitespace and drop a single leading 'www.'; the hosts block adds it back."""
    d = domain.strip()
    # One hosts line per entry; embedded whitespace would smuggle in extra fields or lines
    if any(c.isspace() for c in d):
        raise InvalidDomainError(f"Invalid domain {domain!r}: must not contain whitespace")
    if d.startswith("www."):
        d = d[len("www."):]
    return d


class BlockListHandler:
    def __init__(self, block_list_path=BLOCK_LIST_FILE):
        self.block_list_path = block_list_path

    def load(self) -> List[str]:
        """Read the list of websites to block"""
        try:
            with open(self.block_list_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logging.info(f"No block list at {self.block_list_path}, starting empty")
            return []
        except (OSError, ValueError) as e:
            raise StorageReadError(f"Error reading block list {self.block_list_path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageReadError(f"Error reading block list {self.block_list_path}: expected an object")
        websites = data.get("websites", [])
        if not isinstance(websites, list) or not all(isinstance(w, str) for w in websites):
            raise StorageReadError(
                f"Error reading block list {self.block_list_path}: 'websites' must be a list of strings"
            )
        logging.info(f"Found {len(websites)} websites in block list")
        return websites

    def save(self, websites: Iterable[str]) -> None:
        """Replace the persisted block list"""
        payload = json.dumps({"websites": list(websites)}, indent=2)
        block_list_dir = os.path.dirname(os.path.abspath(self.block_list_path))
        tmp_path = None
        try:
            ensure_user_dir(block_list_dir)
            try:
                st = os.stat(self.block_list_path)
            except FileNotFoundError:
                st = None
            with tempfile.NamedTemporaryFile("w", delete=False, dir=block_list_dir, encoding="utf-8") as tf:
                tf.write(payload + "\n")
                tmp_path = tf.name
            # Keep the list readable by the user whether or not sudo wrote it
            if st is not None:
                os.chmod(tmp_path, st.st_mode & 0o7777)
                if running_as_root():
                    os.chown(tmp_path, st.st_uid, st.st_gid)
            else:
                os.chmod(tmp_path, 0o644)
                hand_to_invoking_user(tmp_path)
            os.replace(tmp_path, self.block_list_path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageWriteError(f"Error writing block list {self.block_list_path}: {e}") from e
        logging.info(f"Saved block list to {self.block_list_path}")

    def add(self, domains: Iterable[str]) -> AddResult:
        """Append domains not already in the block list, keeping input order"""
        current = self.load()
        seen = set(current)
        new_websites = []
        for domain in domains:
            d = normalize_domain(domain)
            if not d or d in seen:
                continue
            seen.add(d)
            new_websites.append(d)

        if not new_websites:
            logging.info("No new websites to add to block list")
            return AddResult(added=[], already_present=True)

        self.save(current + new_websites)
        logging.info(f"Added {len(new_websites)} websites to block list")
        return AddResult(added=new_websites, already_present=False)

    def remove(self, domains: Iterable[str]) -> RemoveResult:
        """Remove websites from the block list"""
        to_remove = {normalize_domain(d) for d in domains}
        current = self.load()
        removed = [site for site in current if site in to_remove]
        if not removed:
            logging.info("No matching websites in block list")
            return RemoveResult(removed=[], matched=False)

        self.save([site for site in current if site not in to_remove])
        logging.info(f"Removed {len(removed)} websites from block list")
        return RemoveResult(removed=removed, matched=True)

    def clear(self) -> None:
        self.save([])
