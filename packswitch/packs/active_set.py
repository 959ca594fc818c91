# packswitch/packs/active_set.py
from __future__ import annotations
import copy
import logging
from collections.abc import Mapping

from pydantic import JsonValue

from packswitch.app.paths import ManagedLayout
from packswitch.core.fsops import listSubdirNames
from packswitch.mods.catalog import ModCatalog
from packswitch.packs.models import InstalledMods

logger = logging.getLogger(__name__)

__all__ = ["ActiveSet"]



class ActiveSet:
    """
    In-memory mirror of the mods that are currently live.

    Holds two disjoint maps, mods known to the catalog and mods installed from
    elsewhere. Snapshots are deep copies, so a snapshot taken before a switch
    stays valid whatever happens to the set afterwards.
    """

    def __init__(
        self,
        mods: Mapping[str, JsonValue] | None = None,
        notInCatalogMods: Mapping[str, JsonValue] | None = None,
    ) -> None:
        self.mods: dict[str, JsonValue] = {}
        self.notInCatalogMods: dict[str, JsonValue] = {}
        self.setMods(mods or {}, notInCatalogMods or {})

    @classmethod
    def fromLiveFolder(cls, layout: ManagedLayout, catalog: ModCatalog) -> ActiveSet:
        """Rebuild the set by looking at what is materialized in the live folders."""
        mods: dict[str, JsonValue] = {}
        notInCatalog: dict[str, JsonValue] = {}
        entries = [(name, True) for name in listSubdirNames(layout.modsFolder) if name != layout.disabledFolderName]
        entries += [(name, False) for name in listSubdirNames(layout.disabledFolder)]
        for name, enabled in entries:
            target = mods if catalog.lookup(name) is not None else notInCatalog
            target.setdefault(name, {"enabled": enabled})
        logger.debug("Active set from live folder: %d mods, %d not in catalog", len(mods), len(notInCatalog))
        return cls(mods, notInCatalog)

    def setMods(self, mods: Mapping[str, JsonValue], notInCatalogMods: Mapping[str, JsonValue]) -> None:
        # Validation happens in InstalledMods (keys must be disjoint)
        snapshot = InstalledMods(mods=dict(mods), notInCatalogMods=dict(notInCatalogMods))
        self.mods = copy.deepcopy(snapshot.mods)
        self.notInCatalogMods = copy.deepcopy(snapshot.notInCatalogMods)

    def snapshot(self) -> InstalledMods:
        return InstalledMods(
            mods=copy.deepcopy(self.mods),
            notInCatalogMods=copy.deepcopy(self.notInCatalogMods),
        )

    def restore(self, snapshot: InstalledMods) -> None:
        self.setMods(snapshot.mods, snapshot.notInCatalogMods)

    def names(self) -> list[str]:
        return sorted(set(self.mods) | set(self.notInCatalogMods))

    def add(self, name: str, metadata: JsonValue, *, inCatalog: bool = True) -> None:
        """Adds `name` unless it is already listed, in either map."""
        if name in self:
            return
        target = self.mods if inCatalog else self.notInCatalogMods
        target[name] = copy.deepcopy(metadata)

    def drop(self, name: str) -> bool:
        removed = name in self
        self.mods.pop(name, None)
        self.notInCatalogMods.pop(name, None)
        return removed

    def __contains__(self, name: object) -> bool:
        return name in self.mods or name in self.notInCatalogMods

    def __len__(self) -> int:
        return len(self.mods) + len(self.notInCatalogMods)

    def __repr__(self) -> str:
        return f"ActiveSet(mods={sorted(self.mods)}, notInCatalogMods={sorted(self.notInCatalogMods)})"
