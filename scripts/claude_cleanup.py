#!/usr/bin/env python3
"""
Find and remove orphaned Claude Code project data.

Reports entries in ~/.claude.json whose project path no longer exists, and
folders in ~/.claude/projects/ that don't belong to any live project.

Usage:
    python claude_cleanup.py            # Report only, changes nothing
    python claude_cleanup.py --prune    # Report, confirm, then delete

Requirements: Python 3.9+
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional

# Add scripts directory to path for local imports
script_dir = Path(__file__).parent
if str(script_dir) not in sys.path:
    sys.path.insert(0, str(script_dir))

from cleanup_utils import check_python_version, resolve_paths
from orphan_finder import ENCODERS, scan
from pruner import confirm, prune
from reporting import NO_ORPHANS_MESSAGE, format_total_size, print_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find orphaned Claude Code project data and optionally remove it"
    )
    parser.add_argument(
        "--prune",
        action="store_true",
        help="After reporting, ask for confirmation and delete the orphaned data"
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        help="Claude Code config file (default: ~/.claude.json)"
    )
    parser.add_argument(
        "--projects-dir",
        type=Path,
        help="Per-project data directory (default: ~/.claude/projects)"
    )
    parser.add_argument(
        "--encoding",
        choices=sorted(ENCODERS),
        help="How project paths map to folder names (default: claude)"
    )
    return parser


def main(argv: Optional[list[str]] = None, input_func: Callable[[str], str] = input) -> int:
    """Main entry point."""
    check_python_version()

    args = build_parser().parse_args(argv)
    paths = resolve_paths(
        claude_json=args.config_file,
        projects_dir=args.projects_dir,
        encoding=args.encoding,
    )
    if paths.encoding not in ENCODERS:
        print(f"Warning: Unknown pathEncoding {paths.encoding!r} in settings, using 'claude'", file=sys.stderr)
        paths.encoding = "claude"

    orphans = scan(paths)
    if not orphans:
        print(NO_ORPHANS_MESSAGE)
        return 0

    total_kb = print_report(orphans, paths)
    total_human = format_total_size(total_kb)

    if not args.prune:
        print()
        print("Run with --prune to clean up.")
        return 0

    print()
    if not confirm(f"Remove {orphans.total_count} orphaned entries? (y/N) ", input_func):
        print("Aborted.")
        return 0

    prune(orphans, paths)
    print(f"Done. Cleaned up {total_human}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
