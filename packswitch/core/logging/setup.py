# packswitch/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers
from pathlib import Path

from packswitch.app.settings import settings, settingsBool
from .formatters import DevFormatter, JsonFormatter

__all__ = [
    "NO_PROPAGATE",
    "configureLogging",
]



# Disable propagation from common libraries
NO_PROPAGATE = [
    "uvicorn", "uvicorn.access", "uvicorn.error",
    "fastapi", "asyncio",
]



def configureLogging(*, logFile: Path | str | None = None) -> None:
    """
    Configure the root logger once per process.

    Console lines use DevFormatter, the rotating `logging.file` gets JSON lines.
    `debug.devModeEnabled` lowers both to DEBUG. An empty `logging.file` (or
    `logFile=""`) disables the file handler.
    """
    devMode = settingsBool("debug.devModeEnabled", False)
    rootLevel = logging.DEBUG if devMode else logging.INFO

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(rootLevel)

    for name in NO_PROPAGATE:
        logging.getLogger(name).propagate = False

    consoleHandler = logging.StreamHandler()
    consoleHandler.setLevel(rootLevel)
    consoleHandler.setFormatter(DevFormatter())
    root.addHandler(consoleHandler)

    filePath = logFile if logFile is not None else settings("logging.file", "packswitch.log")
    if filePath:
        fileHandler = logging.handlers.RotatingFileHandler(
            Path(filePath).expanduser(),
            maxBytes=int(settings("logging.maxBytes", 10 * 1024 * 1024)),
            backupCount=int(settings("logging.backupCount", 5)),
            encoding="utf-8"
        )
        fileHandler.setLevel(rootLevel)
        fileHandler.setFormatter(JsonFormatter())
        root.addHandler(fileHandler)

    # Per-logger tweaks (reduce noise)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
