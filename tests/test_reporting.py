#!/usr/bin/env python3
"""
Unit tests for reporting.py

Run with: python -m pytest tests/test_reporting.py -v
"""

import json
import os
import sys
import tempfile
from io import StringIO
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add scripts directory to path
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from cleanup_utils import CleanupPaths
from orphan_finder import OrphanSet
from reporting import (
    _allocated_bytes,
    dir_size_kb,
    format_entry_size,
    format_human_size,
    format_total_size,
    json_entry_size,
    print_report,
)


# =============================================================================
# Formatting Tests
# =============================================================================


class TestFormatEntrySize:
    def test_bytes(self):
        assert format_entry_size(500) == "~500B"

    def test_just_below_kilobyte(self):
        assert format_entry_size(1023) == "~1023B"

    def test_kilobytes_truncate(self):
        assert format_entry_size(2048) == "~2K"
        assert format_entry_size(3071) == "~2K"

    def test_zero(self):
        assert format_entry_size(0) == "~0B"


class TestFormatTotalSize:
    def test_kilobytes(self):
        assert format_total_size(0) == "~0K"
        assert format_total_size(1023) == "~1023K"

    def test_megabytes_truncate(self):
        assert format_total_size(1024) == "~1M"
        assert format_total_size(2000) == "~1M"

    def test_gigabytes_truncate(self):
        assert format_total_size(1048575) == "~1023M"
        assert format_total_size(2_000_000) == "~1G"


class TestFormatHumanSize:
    @pytest.mark.parametrize("size_kb,expected", [
        (0, "0"),
        (4, "4.0K"),
        (12, "12K"),
        (1023, "1023K"),
        (1024, "1.0M"),
        (1536, "1.5M"),
        (1126, "1.1M"),
        (20 * 1024, "20M"),
        (3 * 1024 * 1024, "3.0G"),
    ])
    def test_du_style(self, size_kb, expected):
        assert format_human_size(size_kb) == expected


# =============================================================================
# Size Calculation Tests
# =============================================================================


class TestJsonEntrySize:
    def test_compact_serialization(self):
        assert json_entry_size({"a": 1}) == len('{"a":1}')

    def test_null(self):
        assert json_entry_size(None) == 4

    def test_non_ascii_counted_in_bytes(self):
        assert json_entry_size("é") == len('"é"'.encode("utf-8"))


class TestAllocatedBytes:
    def test_uses_blocks(self):
        assert _allocated_bytes(SimpleNamespace(st_blocks=8, st_size=100)) == 4096

    def test_falls_back_to_size(self):
        assert _allocated_bytes(SimpleNamespace(st_size=1500)) == 2048


class TestDirSizeKb:
    def test_counts_file_content(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            folder = Path(tmpdir) / "-project"
            (folder / "sub").mkdir(parents=True)
            (folder / "sub" / "session.jsonl").write_bytes(os.urandom(64 * 1024))
            assert dir_size_kb(folder) >= 64

    def test_missing_dir_is_zero(self):
        assert dir_size_kb(Path("/nonexistent/-project")) == 0

    def test_hard_links_counted_once(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            folder = Path(tmpdir) / "-project"
            folder.mkdir()
            data = folder / "a.jsonl"
            data.write_bytes(os.urandom(256 * 1024))
            before = dir_size_kb(folder)
            os.link(data, folder / "b.jsonl")
            assert dir_size_kb(folder) == before

    def test_symlink_not_followed(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            real = Path(tmpdir) / "real"
            real.mkdir()
            (real / "big.bin").write_bytes(os.urandom(256 * 1024))
            link = Path(tmpdir) / "-link"
            link.symlink_to(real)
            assert dir_size_kb(link) < 256


# =============================================================================
# Report Tests
# =============================================================================


class TestPrintReport:
    def _capture(self, orphans: OrphanSet, paths: CleanupPaths) -> tuple[int, str]:
        captured = StringIO()
        old_stdout = sys.stdout
        sys.stdout = captured
        try:
            total = print_report(orphans, paths)
        finally:
            sys.stdout = old_stdout
        return total, captured.getvalue()

    def test_lists_entries_and_dirs(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            config = root / ".claude.json"
            config.write_text(json.dumps({"projects": {"/nonexistent/old": {"h": "x" * 2100}}}))
            projects = root / "projects"
            (projects / "-stray").mkdir(parents=True)
            (projects / "-stray" / "s.jsonl").write_bytes(os.urandom(8 * 1024))
            paths = CleanupPaths(claude_json=config, projects_dir=projects)

            orphans = OrphanSet(orphaned_paths=["/nonexistent/old"], orphaned_dirs=["-stray"])
            total, output = self._capture(orphans, paths)

            lines = output.splitlines()
            assert lines[0] == "Scanning for orphaned Claude Code project data..."
            assert "entries (path no longer exists):" in output
            assert f"  {'/nonexistent/old':<60} (~2K in JSON)" in lines
            assert "directories:" in output
            assert any(line.startswith(f"  {'-stray':<60} ") for line in lines)
            assert total >= 8
            assert lines[-1] == f"Found 2 orphaned entries. Total reclaimable: {format_total_size(total)}"

    def test_entry_only_report_has_zero_total(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            config = root / ".claude.json"
            config.write_text(json.dumps({"projects": {"/nonexistent/old": {}}}))
            paths = CleanupPaths(claude_json=config, projects_dir=root / "projects")

            total, output = self._capture(OrphanSet(orphaned_paths=["/nonexistent/old"]), paths)
            assert total == 0
            assert "(~2B in JSON)" in output
            assert "directories:" not in output
            assert output.rstrip().endswith("Found 1 orphaned entries. Total reclaimable: ~0K")

    def test_report_is_repeatable(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            config = root / ".claude.json"
            config.write_text(json.dumps({"projects": {"/nonexistent/old": [1, 2]}}))
            (root / "projects" / "-stray").mkdir(parents=True)
            paths = CleanupPaths(claude_json=config, projects_dir=root / "projects")
            orphans = OrphanSet(orphaned_paths=["/nonexistent/old"], orphaned_dirs=["-stray"])

            assert self._capture(orphans, paths) == self._capture(orphans, paths)
