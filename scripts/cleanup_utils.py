#!/usr/bin/env python3
"""
Shared utilities for claude-cleanup.

Provides path resolution for Claude Code's config file and project data
directory, settings management, and JSON file helpers. Used by
orphan_finder.py, pruner.py and claude_cleanup.py.

Requirements: Python 3.9+
"""

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

# Minimum Python version required
MIN_PYTHON = (3, 9)

# Environment variable Claude Code uses to relocate its config directory
CLAUDE_CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"


def check_python_version() -> None:
    """Check that Python version meets minimum requirements."""
    if sys.version_info < MIN_PYTHON:
        sys.exit(
            f"Error: Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]}+ required, "
            f"but running {sys.version_info.major}.{sys.version_info.minor}\n"
            f"Install a newer Python version or use pyenv/conda."
        )


def get_claude_dir() -> Path:
    """Get the Claude configuration directory (~/.claude or $CLAUDE_CONFIG_DIR)."""
    override = os.environ.get(CLAUDE_CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".claude"


def get_claude_json_file() -> Path:
    """
    Get Claude Code's global config file.

    Lives next to ~/.claude rather than inside it, unless CLAUDE_CONFIG_DIR
    is set, in which case it moves into that directory.
    """
    override = os.environ.get(CLAUDE_CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser() / ".claude.json"
    return Path.home() / ".claude.json"


def get_projects_dir() -> Path:
    """Get Claude Code's per-project data directory."""
    return get_claude_dir() / "projects"


def get_settings_file() -> Path:
    """Get the cleanup settings file path."""
    return get_claude_dir() / "cleanup-settings.json"


DEFAULT_SETTINGS = {
    "backupSuffix": ".bak",
    "pathEncoding": "claude",
}


@dataclass
class CleanupPaths:
    """Locations and options every cleanup component works against."""
    claude_json: Path
    projects_dir: Path
    backup_suffix: str = ".bak"
    encoding: str = "claude"

    @property
    def backup_file(self) -> Path:
        return self.claude_json.with_name(self.claude_json.name + self.backup_suffix)


def load_settings() -> dict[str, Any]:
    """
    Load cleanup settings from cleanup-settings.json with defaults.

    Returns settings dict with all expected keys populated.
    """
    settings_file = get_settings_file()
    settings = DEFAULT_SETTINGS.copy()

    if settings_file.exists():
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                user_settings = json.load(f)
            if isinstance(user_settings, dict):
                settings = _deep_merge(settings, user_settings)
            else:
                print(f"Warning: Ignoring non-object settings in {settings_file}", file=sys.stderr)
        except (json.JSONDecodeError, IOError) as e:
            print(f"Warning: Could not load settings from {settings_file}: {e}", file=sys.stderr)

    return settings


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override dict into base dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def resolve_paths(
    claude_json: Optional[Path] = None,
    projects_dir: Optional[Path] = None,
    encoding: Optional[str] = None,
    settings: Optional[dict[str, Any]] = None,
) -> CleanupPaths:
    """
    Build the CleanupPaths for a run.

    Explicit arguments win over settings, settings win over the
    home-directory defaults.
    """
    if settings is None:
        settings = load_settings()

    return CleanupPaths(
        claude_json=Path(claude_json).expanduser() if claude_json else get_claude_json_file(),
        projects_dir=Path(projects_dir).expanduser() if projects_dir else get_projects_dir(),
        backup_suffix=_checked_setting(settings, "backupSuffix", _is_valid_suffix),
        encoding=encoding or _checked_setting(settings, "pathEncoding", lambda v: isinstance(v, str)),
    )


def _is_valid_suffix(value: Any) -> bool:
    """A backup suffix must name a sibling file, not the config itself."""
    if not isinstance(value, str) or not value:
        return False
    return not any(sep and sep in value for sep in (os.sep, os.altsep))


def _checked_setting(settings: dict[str, Any], key: str, is_valid) -> Any:
    """Return settings[key], or its default (with a warning) if the value is unusable."""
    default = DEFAULT_SETTINGS[key]
    value = settings.get(key, default)
    if not is_valid(value):
        print(f"Warning: Invalid {key} {value!r} in settings, using {default!r}", file=sys.stderr)
        return default
    return value


def load_json_file(filepath: Path, default: Any = None) -> Any:
    """Load JSON from file with error handling."""
    if not filepath.exists():
        return default
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError, UnicodeDecodeError) as e:
        print(f"Warning: Could not load {filepath}: {e}", file=sys.stderr)
        return default


def save_json_file(filepath: Path, data: Any, indent: int = 2) -> None:
    """
    Save data to JSON file (2-space indent, trailing newline).

    Raises OSError on failure.
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)
        f.write("\n")


def display_path(path: Union[str, Path]) -> str:
    """
    Shorten a path for display by replacing the home directory with ~.

    Example: /home/user/.claude/projects -> ~/.claude/projects
    """
    text = str(path)
    home = str(Path.home())
    if text == home:
        return "~"
    if text.startswith(home + os.sep):
        return "~" + text[len(home):]
    return text


if __name__ == "__main__":
    # Basic self-test
    check_python_version()

    print("Cleanup Utils Self-Test")
    print("=" * 40)
    print(f"Claude dir:     {get_claude_dir()}")
    print(f"Claude json:    {get_claude_json_file()}")
    print(f"Projects dir:   {get_projects_dir()}")
    print(f"Settings file:  {get_settings_file()}")
    print()

    paths = resolve_paths()
    print("Resolved:")
    print(f"  Backup file:   {paths.backup_file}")
    print(f"  Path encoding: {paths.encoding}")
