# packswitch/app/settings.py
from __future__ import annotations
import json5, os
from pydantic import JsonValue
from pathlib import Path
from typing import Any
from functools import lru_cache

from packswitch.core.dictpath import getByPath

import logging
logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS_DEFAULTS", "SETTINGS_ENV_VAR", "userSettingsPath",
    "loadUserSettings", "loadSettings", "deepMerge", "settings",
    "settingsBool",
]


SETTINGS_ENV_VAR = "PACKSWITCH_SETTINGS"
SETTINGS_DEFAULTS: JsonValue = {
    "__source": "PACKSWITCH_DEFAULTS",
    "paths": {
        "managedFolder": "~/.packswitch/managed",
        "modsFolderName": "Mods",
        "disabledFolderName": "Disabled",
        "holdingFolderName": "Temp_Mods_Storage",
        "pruneHoldingFolderName": "Temp_Pruned_Storage",
        "manifestFileName": "pack-manifest.json5",
        "modCache": "~/.packswitch/cache",
        "catalogFile": "~/.packswitch/catalog.json5",
    },
    "host": {
        "processNamePrefixes": ["hollow_knight", "Hollow Knight"],
        "terminateTimeoutSec": 10,
    },
    "http": {"host": "127.0.0.1", "port": 8127},
    "logging": {"file": "packswitch.log", "maxBytes": 10 * 1024 * 1024, "backupCount": 5},
    "debug": {"devModeEnabled": False},
}



def userSettingsPath() -> Path:
    """`PACKSWITCH_SETTINGS` if set, else `~/.packswitch/settings.json5`."""
    override = os.environ.get(SETTINGS_ENV_VAR)
    return Path(override or "~/.packswitch/settings.json5").expanduser()



def loadUserSettings() -> JsonValue:
    filePath = userSettingsPath()
    if not filePath.is_file():
        return {}
    try:
        data = json5.loads(filePath.read_text(encoding="utf-8"))
    except (OSError, ValueError) as err:
        logger.error("Ignoring settings file '%s': %s", filePath, err)
        return {}
    if not isinstance(data, dict):
        logger.error("Ignoring settings file '%s': top level must be an object", filePath)
        return {}
    return data



@lru_cache(maxsize=1)
def loadSettings() -> JsonValue:
    """Defaults overlaid with the user file. Call `loadSettings.cache_clear()` to re-read."""
    merged = deepMerge(SETTINGS_DEFAULTS, loadUserSettings())
    logger.debug("Settings loaded from '%s'", userSettingsPath())
    return merged



def deepMerge(first: JsonValue, second: JsonValue) -> JsonValue:
    """
    Overlay `second` on `first` without mutating either.

    Objects merge key by key; any other value in `second` (lists included)
    replaces the one in `first`.
    """
    if not (isinstance(first, dict) and isinstance(second, dict)):
        return second
    out = dict(first)
    for key, value in second.items():
        out[key] = deepMerge(out[key], value) if key in out else value
    return out



# ----- Accessors over merged settings -----

def settings(path: str, default: Any = None) -> Any:
    """Value at dotted `path`, or `default` when missing or null."""
    value = getByPath(loadSettings(), path)
    return default if value is None else value



def settingsBool(path: str, default: bool = False) -> bool:
    value = getByPath(loadSettings(), path)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
