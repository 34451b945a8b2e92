"""Shared utility helpers for teamcity_dsl."""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Any, List, Optional, Sequence


def format_cli_command(argv: Sequence[Any]) -> str:
    return shlex.join(str(part) for part in argv)


def display_path(path: Path, project_root: Optional[Path]) -> str:
    """Render ``path`` relative to the project root when it lies inside it."""
    absolute = Path(os.path.abspath(path))
    if project_root is None:
        return str(absolute)
    root = Path(os.path.abspath(project_root))
    try:
        return str(absolute.relative_to(root))
    except ValueError:
        return str(absolute)


def resolve_against(root: Path, value: Optional[str]) -> Optional[Path]:
    """Interpret ``value`` relative to ``root`` unless it is absolute."""
    if value is None:
        return None
    candidate = Path(value).expanduser()
    if candidate.is_absolute():
        return candidate
    return root / candidate


def safe_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        normalized = value.strip()
        return normalized or None
    return str(value).strip() or None


def safe_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    result: List[str] = []
    for item in value:
        s = safe_str(item)
        if s:
            result.append(s)
    return result


def first_present(mapping: Any, *keys: str) -> Any:
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None
