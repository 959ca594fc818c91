# packswitch/core/logging/formatters.py
from __future__ import annotations

import logging

from packswitch.core.jsonutils import safeJsonDumps
from .context import getLogContext

# Context keys shown on console lines, in this order
CONSOLE_CONTEXT_KEYS = ("command", "packName", "phase")



class JsonFormatter(logging.Formatter):
    """
    One JSON object per line for the log file.

    The command context (command, packName, phase...) is nested under "ctx" so a
    whole switch can be followed by filtering on ctx.packName.
    """
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": int(record.created * 1000),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "ctx": getLogContext() or {},
            "pid": record.process,
            "thread": record.threadName,
        }
        if record.exc_info and record.exc_info[1] is not None:
            err = record.exc_info[1]
            entry["exc"] = {
                "type": type(err).__name__,
                "message": str(err),
                "stack": self.formatException(record.exc_info),
            }
        return safeJsonDumps(entry)



class DevFormatter(logging.Formatter):
    """Console lines: `LEVEL: [logger] message [command/packName/phase]`."""
    def format(self, record: logging.LogRecord) -> str:
        ctx = getLogContext() or {}
        tags = [str(ctx[key]) for key in CONSOLE_CONTEXT_KEYS if ctx.get(key)]
        line = f"{record.levelname}: [{record.name}] {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        if record.stack_info:
            line += "\n" + self.formatStack(record.stack_info)
        if tags:
            line += " [" + "/".join(tags) + "]"
        return line
