# packswitch/mods/installer.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Protocol

from packswitch.core.errors import InstallError
from packswitch.core.fsops import copyDirectory
from packswitch.mods.catalog import ModDescriptor

logger = logging.getLogger(__name__)

__all__ = [
    "Installer",
    "CacheDirectoryInstaller",
]



class Installer(Protocol):
    """Materializes a mod on disk. Raises InstallError on failure."""

    def install(self, descriptor: ModDescriptor) -> None:
        ...



class CacheDirectoryInstaller:
    """
    Installs mods by copying `<cacheDir>/<name>` into the live mods folder.

    Fetching mods into the cache is somebody else's job; a cache miss is an
    install failure.
    """

    def __init__(self, cacheDir: Path, modsFolder: Path) -> None:
        self._cacheDir = Path(cacheDir).expanduser()
        self._modsFolder = Path(modsFolder)

    def install(self, descriptor: ModDescriptor) -> None:
        source = self._cacheDir / descriptor.name
        destination = self._modsFolder / descriptor.name
        if destination.exists():
            logger.debug("Mod '%s' already present at '%s'", descriptor.name, destination)
            return
        if not source.is_dir():
            raise InstallError(f"Mod '{descriptor.name}' is not in the cache at '{self._cacheDir}'")
        try:
            self._modsFolder.mkdir(parents=True, exist_ok=True)
            result = copyDirectory(source, destination)
        except OSError as err:
            raise InstallError(f"Failed to install mod '{descriptor.name}': {err}", cause=err) from err
        logger.info("Installed mod '%s' (%d files)", descriptor.name, result.fileCount)
