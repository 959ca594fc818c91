# packswitch/core/jsonutils.py
from __future__ import annotations

import json
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

__all__ = ["safeJsonDumps", "serializeError", "jsonSafe"]



STACK_CHAR_LIMIT = 4000



# ------------------------------------------------
#              Error / Exception helpers
# ------------------------------------------------

def _formatStack(err: BaseException) -> str | None:
    tb = err.__traceback__
    if tb is None:
        return None
    text = "".join(traceback.format_tb(tb))
    if len(text) <= STACK_CHAR_LIMIT:
        return text
    # Keep the innermost frames, they point at the failure
    return "[TRUNCATED]" + text[-STACK_CHAR_LIMIT:]



def serializeError(err: Any, *, includeStack: bool = False) -> dict[str, Any]:
    """
    Converts an exception into the structured error dict returned by pack commands.

    Examples:
        ValueError("bad")       -> {"type": "ValueError", "message": "bad"}
        PackNotFoundError(...)  -> {..., "packName": "...", "phase": "preCheck"}
        "error text"            -> {"message": "error text"}
        None                    -> {}

    Switch errors carry their `cause` (serialized recursively) and, for a failed
    rollback, `rollbackErrors` and `pendingSteps`.
    """
    if err is None:
        return {}
    if isinstance(err, str):
        return {"message": err}
    if not isinstance(err, BaseException):
        return {"type": type(err).__name__, "message": repr(err)}

    data: dict[str, Any] = {"type": type(err).__name__, "message": str(err)}
    for attr in ("packName", "phase", "path"):
        value = getattr(err, attr, None)
        if value is not None:
            data[attr] = str(value)

    cause = getattr(err, "cause", None)
    if isinstance(cause, BaseException) and cause is not err:
        data["cause"] = serializeError(cause)

    rollbackErrors = getattr(err, "rollbackErrors", None)
    if rollbackErrors:
        data["rollbackErrors"] = [serializeError(item) for item in rollbackErrors]
    pendingSteps = getattr(err, "pendingSteps", None)
    if pendingSteps:
        data["pendingSteps"] = list(pendingSteps)

    if includeStack:
        stack = _formatStack(err)
        if stack:
            data["stack"] = stack
    return data



# ------------------------------------------------
#                JSON serialization
# ------------------------------------------------

def jsonSafe(obj: Any, *, _active: frozenset[int] = frozenset()) -> Any:
    """
    Turns log payloads (reports, models, paths, sets) into plain JSON values.

    Containers already being converted further up are rendered as
    "<circular_ref Type>"; anything unknown falls back to repr().
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, BaseException):
        return serializeError(obj)
    if isinstance(obj, Enum):
        return jsonSafe(obj.value)
    if isinstance(obj, Path):
        return str(obj)

    if id(obj) in _active:
        return f"<circular_ref {type(obj).__name__}>"
    active = _active | {id(obj)}

    if is_dataclass(obj) and not isinstance(obj, type):
        return jsonSafe(asdict(obj), _active=active)
    if hasattr(obj, "model_dump"):
        return jsonSafe(obj.model_dump(mode="json"), _active=active)
    if isinstance(obj, Mapping):
        return {str(key): jsonSafe(value, _active=active) for key, value in obj.items()}
    if isinstance(obj, (set, frozenset)):
        return [jsonSafe(value, _active=active) for value in sorted(obj, key=str)]
    if isinstance(obj, (list, tuple)):
        return [jsonSafe(value, _active=active) for value in obj]
    return repr(obj)



def safeJsonDumps(obj: object) -> str:
    """Compact single-line JSON, never raising on odd values."""
    return json.dumps(jsonSafe(obj), ensure_ascii=False, separators=(",", ":"))
