#!/usr/bin/env python3
"""
Size calculation and report output for claude-cleanup.

JSON entries are measured by their serialized length in bytes; folders by
the disk blocks they occupy, the way `du -sk` counts them. All size strings
truncate with integer division: ~2000K is reported as ~1M.
"""

import json
import math
import os
import sys
from pathlib import Path
from typing import Any

# Add scripts directory to path for local imports
script_dir = Path(__file__).parent
if str(script_dir) not in sys.path:
    sys.path.insert(0, str(script_dir))

from cleanup_utils import CleanupPaths, display_path
from orphan_finder import OrphanSet, load_known_projects

NO_ORPHANS_MESSAGE = "No orphaned Claude Code project data found."

# Width of the name column in the orphan listings
NAME_COLUMN_WIDTH = 60

KB = 1024
MB_IN_KB = 1024
GB_IN_KB = 1024 * 1024


# =============================================================================
# Size Calculation
# =============================================================================


def json_entry_size(value: Any) -> int:
    """Size in bytes of a config value serialized as compact JSON."""
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return len(text.encode("utf-8"))


def _allocated_bytes(st: os.stat_result) -> int:
    blocks = getattr(st, "st_blocks", None)
    if blocks is None:
        # No block count on this platform (Windows); round up to whole KB
        return math.ceil(st.st_size / KB) * KB
    return blocks * 512


def dir_size_kb(path: Path) -> int:
    """
    Disk usage of a folder tree in KB, counted like `du -sk`.

    Uses allocated blocks rather than apparent size, includes the
    directories themselves, does not follow symlinks and counts hard-linked
    files once. Entries that vanish mid-walk are skipped.
    """
    seen: set[tuple[int, int]] = set()
    total = 0

    def add(entry: str) -> None:
        nonlocal total
        try:
            st = os.lstat(entry)
        except OSError:
            return
        if st.st_nlink > 1:
            key = (st.st_dev, st.st_ino)
            if key in seen:
                return
            seen.add(key)
        total += _allocated_bytes(st)

    add(str(path))
    if path.is_symlink():
        return math.ceil(total / KB)

    for root, dirs, files in os.walk(path):
        for name in dirs + files:
            add(os.path.join(root, name))

    return math.ceil(total / KB)


# =============================================================================
# Formatting
# =============================================================================


def format_entry_size(size_bytes: int) -> str:
    """Format a JSON entry size: ~500B, ~2K."""
    if size_bytes < KB:
        return f"~{size_bytes}B"
    return f"~{size_bytes // KB}K"


def format_total_size(total_kb: int) -> str:
    """Format a KB total: ~512K, ~1M (for 2000K), ~1G (for 2000000K)."""
    if total_kb < MB_IN_KB:
        return f"~{total_kb}K"
    if total_kb < GB_IN_KB:
        return f"~{total_kb // MB_IN_KB}M"
    return f"~{total_kb // GB_IN_KB}G"


def format_human_size(size_kb: int) -> str:
    """
    Format a KB count the way `du -h` does.

    Values under 10 get one decimal place, everything rounds up.
    Examples: 4 -> 4.0K, 12 -> 12K, 1536 -> 1.5M
    """
    if size_kb <= 0:
        return "0"

    units = "KMGTP"
    value = float(size_kb)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1

    if value < 10:
        rounded = math.ceil(value * 10) / 10
        if rounded < 10:
            return f"{rounded:.1f}{units[unit]}"
        value = rounded

    whole = math.ceil(value)
    if whole >= 1024 and unit < len(units) - 1:
        return f"1.0{units[unit + 1]}"
    return f"{whole}{units[unit]}"


# =============================================================================
# Report
# =============================================================================


def print_report(orphans: OrphanSet, paths: CleanupPaths) -> int:
    """
    Print the orphan listing and the reclaimable total.

    Returns the total reclaimable size of the orphaned folders in KB.
    JSON entry sizes are listed but not added to the total.
    """
    print("Scanning for orphaned Claude Code project data...")
    print()

    if orphans.orphaned_paths:
        projects = load_known_projects(paths.claude_json) or {}
        print(f"Orphaned {display_path(paths.claude_json)} entries (path no longer exists):")
        for path in orphans.orphaned_paths:
            size_str = f"{format_entry_size(json_entry_size(projects.get(path)))} in JSON"
            print(f"  {path:<{NAME_COLUMN_WIDTH}} ({size_str})")
        print()

    total_kb = 0
    if orphans.orphaned_dirs:
        print(f"Orphaned {display_path(paths.projects_dir)}/ directories:")
        for name in orphans.orphaned_dirs:
            size_kb = dir_size_kb(paths.projects_dir / name)
            total_kb += size_kb
            print(f"  {name:<{NAME_COLUMN_WIDTH}} {format_human_size(size_kb)}")
        print()

    print(
        f"Found {orphans.total_count} orphaned entries. "
        f"Total reclaimable: {format_total_size(total_kb)}"
    )
    return total_kb
