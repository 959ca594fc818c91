# packswitch/packs/store.py
from __future__ import annotations
import logging
from collections.abc import Mapping
from pathlib import Path

import json5
from pydantic import ValidationError

from packswitch.app.paths import ManagedLayout
from packswitch.core.errors import ManifestParseError, PackSaveError
from packswitch.core.fsops import copyDirectory, removeTree
from packswitch.packs.models import InstalledMods, Pack

logger = logging.getLogger(__name__)

__all__ = ["PackStore"]



class PackStore:
    """
    Durable snapshots of the live mods folder.

    Each pack lives in `<managedFolder>/<name>/` as a full copy of the live
    folder plus a manifest describing the installed set.
    """

    def __init__(self, layout: ManagedLayout) -> None:
        self._layout = layout

    @property
    def layout(self) -> ManagedLayout:
        return self._layout

    # ----- Naming -----

    def validatePackName(self, name: str) -> str:
        """Returns the name if it can back a pack folder, raises ValueError otherwise."""
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Pack name cannot be empty")
        if name != name.strip():
            raise ValueError(f"Pack name {name!r} has leading or trailing whitespace")
        if name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
            raise ValueError(f"Pack name {name!r} is not a valid folder name")
        if name in self._layout.reservedFolderNames:
            raise ValueError(f"Pack name {name!r} is reserved")
        return name

    def packDir(self, name: str) -> Path:
        return self._layout.packFolder(name)

    def hasPack(self, name: str) -> bool:
        return self.packDir(name).is_dir()

    # ----- Manifest helpers -----

    def readManifest(self, manifestPath: Path) -> Pack:
        try:
            data = json5.loads(manifestPath.read_text(encoding="utf-8"))
        except (OSError, ValueError) as err:
            raise ManifestParseError(
                f"Cannot read pack manifest '{manifestPath}': {err}", path=str(manifestPath)
            ) from err
        if not isinstance(data, Mapping):
            raise ManifestParseError(f"Pack manifest '{manifestPath}' must be an object", path=str(manifestPath))
        try:
            return Pack.model_validate(data)
        except ValidationError as err:
            raise ManifestParseError(
                f"Invalid pack manifest '{manifestPath}': {err}", path=str(manifestPath)
            ) from err

    def writeManifest(self, pack: Pack) -> Path:
        manifestPath = self._layout.manifestPath(pack.name)
        manifestPath.parent.mkdir(parents=True, exist_ok=True)
        payload = pack.model_dump(mode="json")
        manifestPath.write_text(json5.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        return manifestPath

    # ----- Snapshots -----

    def saveSnapshot(self, name: str, description: str, snapshot: InstalledMods) -> Pack:
        """
        Saves the live folder as pack `name`, replacing any previous pack of that name.

        The live folder is only read. A failure mid-copy leaves the pack folder
        incomplete and raises PackSaveError.
        """
        self.validatePackName(name)
        packFolder = self.packDir(name)
        pack = Pack(name=name, description=description or "", installedMods=snapshot.clone())

        try:
            if removeTree(packFolder):
                logger.debug("Removed previous snapshot of pack '%s'", name)
            if self._layout.modsFolder.is_dir():
                result = copyDirectory(self._layout.modsFolder, packFolder)
                logger.debug("Copied %d files into pack '%s'", result.fileCount, name)
            else:
                packFolder.mkdir(parents=True)
            self.writeManifest(pack)
        except OSError as err:
            raise PackSaveError(f"Failed to save pack '{name}': {err}") from err

        logger.info("Saved pack '%s' (%d mods)", name, len(pack.installedMods.names()))
        return pack

    def loadSnapshot(self, name: str) -> Pack:
        self.validatePackName(name)
        manifestPath = self._layout.manifestPath(name)
        if not manifestPath.is_file():
            raise ManifestParseError(f"Pack '{name}' has no manifest at '{manifestPath}'", path=str(manifestPath))
        return self.readManifest(manifestPath)

    def deletePack(self, name: str) -> bool:
        """
        Removes the pack folder. Returns False when it did not exist.

        Raises ValueError for names that do not denote a pack folder, so the live
        folder, the holding locations and the managed folder itself are never removed.
        """
        self.validatePackName(name)
        packFolder = self.packDir(name)
        if not packFolder.is_dir():
            return False
        removeTree(packFolder)
        logger.info("Deleted pack folder '%s'", packFolder)
        return True
