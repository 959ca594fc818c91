# packswitch/app/paths.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from packswitch.app.settings import settings

__all__ = ["ManagedLayout", "PACKAGE_DIR"]



PACKAGE_DIR = Path(__file__).resolve().parent.parent # packswitch/



def _resolve(path: Path | str) -> Path:
    return Path(path).expanduser().resolve()



@dataclass(frozen=True)
class ManagedLayout:
    """
    Folder layout under one managed folder.

    - modsFolder holds the live mods, disabledFolder lives inside it.
    - Every other direct subfolder of managedFolder is a pack folder, except the
      holding locations used while a switch is in flight.
    - Existence of any of these folders is *not* guaranteed.
    """
    managedFolder: Path
    modsFolderName: str = "Mods"
    disabledFolderName: str = "Disabled"
    holdingFolderName: str = "Temp_Mods_Storage"
    pruneHoldingFolderName: str = "Temp_Pruned_Storage"
    manifestFileName: str = "pack-manifest.json5"

    @classmethod
    def fromSettings(cls, managedFolder: Path | str | None = None) -> ManagedLayout:
        base = managedFolder if managedFolder is not None else settings("paths.managedFolder")
        return cls(
            managedFolder=_resolve(base),
            modsFolderName=str(settings("paths.modsFolderName", "Mods")),
            disabledFolderName=str(settings("paths.disabledFolderName", "Disabled")),
            holdingFolderName=str(settings("paths.holdingFolderName", "Temp_Mods_Storage")),
            pruneHoldingFolderName=str(settings("paths.pruneHoldingFolderName", "Temp_Pruned_Storage")),
            manifestFileName=str(settings("paths.manifestFileName", "pack-manifest.json5")),
        )

    @property
    def modsFolder(self) -> Path:
        return self.managedFolder / self.modsFolderName

    @property
    def disabledFolder(self) -> Path:
        return self.modsFolder / self.disabledFolderName

    @property
    def holdingFolder(self) -> Path:
        return self.managedFolder / self.holdingFolderName

    @property
    def pruneHoldingFolder(self) -> Path:
        return self.managedFolder / self.pruneHoldingFolderName

    @property
    def reservedFolderNames(self) -> frozenset[str]:
        """Direct children of managedFolder that are never pack folders."""
        return frozenset({self.modsFolderName, self.holdingFolderName, self.pruneHoldingFolderName})

    def packFolder(self, name: str) -> Path:
        return self.managedFolder / name

    def manifestPath(self, name: str) -> Path:
        return self.packFolder(name) / self.manifestFileName

    def isMaterialized(self, modName: str) -> bool:
        """A mod is materialized when its folder exists either live or disabled."""
        return (self.modsFolder / modName).is_dir() or (self.disabledFolder / modName).is_dir()
