#!/usr/bin/env python3
"""
Orphan detection for Claude Code project data.

Compares the `projects` object of ~/.claude.json against the per-project
folders in ~/.claude/projects/ and reports which of them no longer belong to
a directory that exists on disk.

Nothing in this module writes to disk. See pruner.py for deletion.
"""

import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

# Add scripts directory to path for local imports
script_dir = Path(__file__).parent
if str(script_dir) not in sys.path:
    sys.path.insert(0, str(script_dir))

from cleanup_utils import CleanupPaths, load_json_file

# Character Claude Code substitutes for path separators in folder names
ENCODED_DELIMITER = "-"

PATH_SEPARATORS = tuple(sep for sep in (os.sep, os.altsep) if sep)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class OrphanSet:
    """Config entries and data folders that no longer map to a live project."""
    orphaned_paths: list[str] = field(default_factory=list)  # ~/.claude.json keys
    orphaned_dirs: list[str] = field(default_factory=list)  # folder names under projects/

    @property
    def total_count(self) -> int:
        return len(self.orphaned_paths) + len(self.orphaned_dirs)

    def __bool__(self) -> bool:
        return self.total_count > 0


# =============================================================================
# Path Encoding
# =============================================================================


def encode_path(path: str) -> str:
    """
    Convert filesystem path to Claude Code's encoded folder name.

    Every path separator becomes a hyphen.

    Example: /home/user/my-project -> -home-user-my-project

    Note: This encoding is LOSSY. /home/user/my-project and
    /home/user/my/project both encode to -home-user-my-project, and no
    escaping is applied to hyphens already in the path.
    """
    encoded = path
    for sep in PATH_SEPARATORS:
        encoded = encoded.replace(sep, ENCODED_DELIMITER)
    return encoded


def encode_path_length_prefixed(path: str) -> str:
    """
    Injective alternative to encode_path.

    Each segment is written as <length>.<segment>, so hyphens inside a
    segment can't be confused with separators. Empty segments (repeated or
    trailing separators) are dropped.

    Example: /home/user/my-project -> -4.home-4.user-10.my-project
    """
    if not path:
        return ""

    pattern = "|".join(re.escape(sep) for sep in PATH_SEPARATORS)
    segments = [s for s in re.split(pattern, path) if s]
    prefix = ENCODED_DELIMITER if path[0] in PATH_SEPARATORS else ""
    return prefix + ENCODED_DELIMITER.join(f"{len(s)}.{s}" for s in segments)


ENCODERS: dict[str, Callable[[str], str]] = {
    "claude": encode_path,
    "length-prefixed": encode_path_length_prefixed,
}


def get_encoder(name: str) -> Callable[[str], str]:
    """Look up a path encoder by name ("claude" or "length-prefixed")."""
    try:
        return ENCODERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown path encoding: {name!r} (expected one of: {', '.join(ENCODERS)})"
        ) from None


# =============================================================================
# Discovery Functions
# =============================================================================


def load_known_projects(claude_json: Path) -> Optional[dict[str, Any]]:
    """
    Read the `projects` mapping from Claude Code's config file.

    Returns None when there is no usable baseline: the file is missing,
    unreadable, not valid JSON, or has no `projects` object. An empty
    `projects` object is still a baseline and comes back as {}.
    """
    data = load_json_file(claude_json)
    if not isinstance(data, dict):
        return None

    projects = data.get("projects")
    if not isinstance(projects, dict):
        return None

    return projects


def list_project_dirs(projects_dir: Path) -> list[str]:
    """
    List the per-project folder names directly under projects_dir.

    Hidden entries and plain files are skipped. Returns [] if the directory
    doesn't exist.
    """
    if not projects_dir.is_dir():
        return []

    names = []
    for entry in projects_dir.iterdir():
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            names.append(entry.name)

    return sorted(names)


def find_orphans(
    project_paths: Iterable[str],
    dir_names: Iterable[str],
    encoder: Callable[[str], str] = encode_path,
) -> OrphanSet:
    """
    Work out which config entries and data folders are orphaned.

    A config path is orphaned when it no longer exists on disk. A folder is
    orphaned when no live (still existing) config path encodes to its name,
    which covers both untracked folders and folders of orphaned paths.
    """
    orphaned_paths = []
    live_encoded: set[str] = set()

    for path in project_paths:
        if os.path.exists(path):
            live_encoded.add(encoder(path))
        else:
            orphaned_paths.append(path)

    orphaned_dirs = [name for name in dir_names if name not in live_encoded]

    return OrphanSet(orphaned_paths=orphaned_paths, orphaned_dirs=orphaned_dirs)


def scan(paths: CleanupPaths) -> OrphanSet:
    """
    Run a full read-only scan for the given locations.

    Without a baseline config there is nothing to compare folders against,
    so the result is empty.
    """
    projects = load_known_projects(paths.claude_json)
    if projects is None:
        return OrphanSet()

    return find_orphans(
        projects.keys(),
        list_project_dirs(paths.projects_dir),
        encoder=get_encoder(paths.encoding),
    )
