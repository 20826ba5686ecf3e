#!/usr/bin/env python3
"""
Destructive cleanup of orphaned Claude Code project data.

Order of operations matters:
1. Copy the config file to its backup (the recovery point)
2. Delete orphaned project folders
3. Rewrite the config from the backup minus the orphaned entries

All destructive operations require explicit confirmation via confirm().
"""

import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

# Add scripts directory to path for local imports
script_dir = Path(__file__).parent
if str(script_dir) not in sys.path:
    sys.path.insert(0, str(script_dir))

from cleanup_utils import CleanupPaths, display_path, load_json_file, save_json_file
from orphan_finder import OrphanSet


@dataclass
class PruneResult:
    """What a prune run actually changed."""
    backup_path: Optional[Path] = None
    removed_dirs: list[str] = field(default_factory=list)
    removed_entries: list[str] = field(default_factory=list)


def confirm(prompt: str, input_func: Callable[[str], str] = input) -> bool:
    """
    Ask a yes/no question, defaulting to no.

    Only "y" or "Y" count as yes. End of input counts as no.
    """
    try:
        answer = input_func(prompt)
    except EOFError:
        print()
        return False
    return answer.strip() in ("y", "Y")


def backup_config(paths: CleanupPaths) -> Optional[Path]:
    """
    Copy the config file to its backup location, replacing any older backup.

    Returns the backup path, or None if there is no config file to back up.
    """
    if not paths.claude_json.is_file():
        return None

    backup = paths.backup_file
    shutil.copy2(paths.claude_json, backup)
    return backup


def remove_orphaned_dirs(paths: CleanupPaths, names: Iterable[str]) -> list[str]:
    """
    Delete the named folders under projects_dir.

    Folders that are already gone are skipped. Symlinks are removed without
    touching their target. Returns the names actually removed.
    """
    removed = []

    for name in names:
        target = paths.projects_dir / name
        try:
            if target.is_symlink():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)
            else:
                continue
        except FileNotFoundError:
            # Removed by something else since the scan
            continue

        print(f"Removed {display_path(target)}")
        removed.append(name)

    return removed


def rewrite_config(paths: CleanupPaths, backup: Path, orphaned_paths: Iterable[str]) -> list[str]:
    """
    Write the config file as the backup minus the orphaned project entries.

    Reads from the backup rather than the live file so the result only ever
    depends on the recovery point. Returns the keys that were removed.
    """
    data = load_json_file(backup)
    if not isinstance(data, dict) or not isinstance(data.get("projects"), dict):
        return []

    projects = data["projects"]
    removed = []
    for path in orphaned_paths:
        if path in projects:
            del projects[path]
            removed.append(path)

    save_json_file(paths.claude_json, data)
    return removed


def prune(orphans: OrphanSet, paths: CleanupPaths) -> PruneResult:
    """
    Remove orphaned folders and config entries.

    The caller is responsible for having confirmed with the user first.
    If the config file doesn't exist the backup and rewrite steps are skipped.
    """
    result = PruneResult()

    result.backup_path = backup_config(paths)
    if result.backup_path:
        print(f"Backed up {display_path(paths.claude_json)} to {display_path(result.backup_path)}")

    result.removed_dirs = remove_orphaned_dirs(paths, orphans.orphaned_dirs)

    if result.backup_path and orphans.orphaned_paths:
        result.removed_entries = rewrite_config(paths, result.backup_path, orphans.orphaned_paths)
        print(f"Removed {len(result.removed_entries)} entries from {display_path(paths.claude_json)}")

    return result
