from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from focusblock.core.exceptions import InvalidDomainError, StorageReadError, StorageWriteError
from focusblock.file_handlers.block_list import BlockListHandler, normalize_domain


def _forbid_save(monkeypatch, handler):
    def fail(websites):
        raise AssertionError("save() should not have been called")

    monkeypatch.setattr(handler, "save", fail)


def test_load_missing_file_returns_empty(block_list):
    assert block_list.load() == []


@pytest.mark.parametrize("websites", [[], ["a.com"], ["b.com", "a.com", "c.org"]])
def test_save_then_load(block_list, websites):
    block_list.save(websites)
    assert block_list.load() == websites


def test_save_writes_websites_record(block_list, block_list_path: Path):
    block_list.save(["a.com", "b.com"])
    assert json.loads(block_list_path.read_text(encoding="utf-8")) == {"websites": ["a.com", "b.com"]}


def test_load_malformed_json_raises(block_list, block_list_path: Path):
    block_list_path.parent.mkdir(parents=True)
    block_list_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageReadError):
        block_list.load()


@pytest.mark.parametrize("content", ['["a.com"]', '{"websites": "a.com"}', '{"websites": [1, 2]}'])
def test_load_wrong_shape_raises(block_list, block_list_path: Path, content):
    block_list_path.parent.mkdir(parents=True)
    block_list_path.write_text(content, encoding="utf-8")
    with pytest.raises(StorageReadError):
        block_list.load()


def test_load_object_without_websites_is_empty(block_list, block_list_path: Path):
    block_list_path.parent.mkdir(parents=True)
    block_list_path.write_text("{}", encoding="utf-8")
    assert block_list.load() == []


def test_save_failure_raises(tmp_path: Path):
    blocker_file = tmp_path / "not_a_dir"
    blocker_file.write_text("", encoding="utf-8")
    handler = BlockListHandler(str(blocker_file / "blocklist.json"))
    with pytest.raises(StorageWriteError):
        handler.save(["a.com"])


def test_add_appends_new_domains_in_order(block_list):
    block_list.save(["a.com"])
    result = block_list.add([" c.com ", "b.com", "a.com", "c.com"])
    assert result.added == ["c.com", "b.com"]
    assert result.already_present is False
    assert block_list.load() == ["a.com", "c.com", "b.com"]


def test_add_only_existing_domains_does_not_write(block_list, monkeypatch):
    block_list.save(["a.com", "b.com"])
    _forbid_save(monkeypatch, block_list)
    result = block_list.add(["b.com", " a.com"])
    assert result.added == []
    assert result.already_present is True


def test_add_is_case_sensitive(block_list):
    block_list.save(["a.com"])
    assert block_list.add(["A.com"]).added == ["A.com"]


def test_add_drops_www_prefix(block_list):
    result = block_list.add(["www.example.com", "example.com"])
    assert result.added == ["example.com"]
    assert block_list.load() == ["example.com"]


def test_add_ignores_blank_entries(block_list, monkeypatch):
    _forbid_save(monkeypatch, block_list)
    assert block_list.add(["", "   "]).already_present is True


def test_remove_matching_domains(block_list):
    block_list.save(["a.com", "b.com", "c.com"])
    result = block_list.remove(["c.com", "a.com", "zzz.com"])
    assert result.matched is True
    assert result.removed == ["a.com", "c.com"]
    assert block_list.load() == ["b.com"]


def test_remove_absent_domain_does_not_write(block_list, monkeypatch):
    block_list.save(["a.com"])
    _forbid_save(monkeypatch, block_list)
    result = block_list.remove(["b.com"])
    assert result.matched is False
    assert result.removed == []


def test_clear_empties_list(block_list):
    block_list.save(["a.com", "b.com"])
    block_list.clear()
    assert block_list.load() == []


def test_normalize_domain():
    assert normalize_domain("  www.news.ycombinator.com\n") == "news.ycombinator.com"
    assert normalize_domain("reddit.com") == "reddit.com"


def test_new_list_is_world_readable(block_list, block_list_path: Path):
    block_list.save(["a.com"])
    assert stat.S_IMODE(os.stat(block_list_path).st_mode) == 0o644


def test_save_keeps_existing_mode(block_list, block_list_path: Path):
    block_list.save(["a.com"])
    os.chmod(block_list_path, 0o640)
    block_list.save(["a.com", "b.com"])
    assert stat.S_IMODE(os.stat(block_list_path).st_mode) == 0o640


def test_save_under_sudo_hands_files_to_invoking_user(block_list, block_list_path: Path, monkeypatch):
    chowned = []
    monkeypatch.setenv("SUDO_UID", "1234")
    monkeypatch.setenv("SUDO_GID", "5678")
    monkeypatch.setattr(os, "geteuid", lambda: 0, raising=False)
    monkeypatch.setattr(os, "chown", lambda path, uid, gid: chowned.append((str(path), uid, gid)), raising=False)

    block_list.save(["a.com"])

    assert chowned[0] == (str(block_list_path.parent), 1234, 5678)
    assert len(chowned) == 2
    assert chowned[1][1:] == (1234, 5678)


@pytest.mark.parametrize("domain", ["a.com\n1.2.3.4 bank.com", "a.com evil.com", "a.com\tb.com"])
def test_add_rejects_embedded_whitespace(block_list, monkeypatch, domain):
    _forbid_save(monkeypatch, block_list)
    with pytest.raises(InvalidDomainError):
        block_list.add(["ok.com", domain])
