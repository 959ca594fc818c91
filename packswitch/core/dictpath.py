# packswitch/core/dictpath.py
from __future__ import annotations
import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

__all__ = ["splitPath", "getByPath", "hasPath"]



# Escaped character, segment separator, or a run of plain characters
_TOKEN_RE = re.compile(r"\\(.)|(\.)|([^.\\]+)", re.DOTALL)



@lru_cache(maxsize=256)
def splitPath(path: str) -> tuple[str, ...]:
    """
    Splits a settings path into keys.

        "paths.managedFolder"   -> ("paths", "managedFolder")
        "paths.mods\\.folder"   -> ("paths", "mods.folder")

    Raises ValueError for empty paths, empty segments and a trailing backslash.
    """
    if not isinstance(path, str) or not path:
        raise ValueError("Path must be a non-empty string")
    if (len(path) - len(path.rstrip("\\"))) % 2:
        raise ValueError(f"Path '{path}' ends with a dangling escape")

    segments = [""]
    for match in _TOKEN_RE.finditer(path):
        escaped, dot, text = match.groups()
        if dot:
            segments.append("")
        else:
            segments[-1] += escaped if escaped is not None else text
    if any(seg == "" for seg in segments):
        raise ValueError(f"Path '{path}' contains empty segment(s)")
    return tuple(segments)



_MISSING = object()

def _lookup(obj: Any, path: str) -> Any:
    try:
        keys = splitPath(path)
    except ValueError:
        return _MISSING
    current = obj
    for key in keys:
        if not isinstance(current, Mapping) or key not in current:
            return _MISSING
        current = current[key]
    return current



def getByPath(obj: Any, path: str, default: Any | None = None) -> Any:
    """Value at `path` inside nested mappings, or `default`. Invalid paths count as missing."""
    value = _lookup(obj, path)
    return default if value is _MISSING else value



def hasPath(obj: Any, path: str) -> bool:
    return _lookup(obj, path) is not _MISSING
