# packswitch/packs/registry.py
from __future__ import annotations
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from packswitch.core.errors import ManifestParseError
from packswitch.packs.models import Pack
from packswitch.packs.store import PackStore

logger = logging.getLogger(__name__)

__all__ = [
    "PackRegistry",
    "PackRemoval",
    "RegistryListener",
]

RegistryListener = Callable[[tuple[Pack, ...]], None]



@dataclass(frozen=True, slots=True)
class PackRemoval:
    name: str
    entryRemoved: bool
    folderRemoved: bool



def _ordinalKey(pack: Pack) -> str:
    # Python str comparison is by code point, which is ordinal order
    return pack.name



class PackRegistry:
    """
    Sorted catalog of known packs, unique by name.

    Observers only ever see a tuple; the list itself is re-sorted on every
    mutating call.
    """

    def __init__(self, store: PackStore, packs: Iterable[Pack] = ()) -> None:
        self._store = store
        self._packs: list[Pack] = []
        self._listeners: list[RegistryListener] = []
        for pack in packs:
            self._replaceOrAppend(pack)
        self._packs.sort(key=_ordinalKey)

    @classmethod
    def discover(cls, store: PackStore) -> PackRegistry:
        return cls(store, packs=scanPacks(store))

    # ----- Observers -----

    def addListener(self, listener: RegistryListener) -> None:
        self._listeners.append(listener)

    def removeListener(self, listener: RegistryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self) -> None:
        self._packs.sort(key=_ordinalKey)
        view = self.list()
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("Pack registry listener failed")

    # ----- Queries -----

    def list(self) -> tuple[Pack, ...]:
        return tuple(self._packs)

    def findByName(self, name: str) -> Pack | None:
        for pack in self._packs:
            if pack.name == name:
                return pack
        return None

    def __len__(self) -> int:
        return len(self._packs)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.findByName(name) is not None

    # ----- Mutations -----

    def _replaceOrAppend(self, pack: Pack) -> None:
        for idx, existing in enumerate(self._packs):
            if existing.name == pack.name:
                self._packs[idx] = pack
                return
        self._packs.append(pack)

    def upsert(self, pack: Pack) -> None:
        self._replaceOrAppend(pack)
        self._changed()

    def remove(self, name: str) -> PackRemoval:
        """
        Drops the registry entry and, best-effort, the pack folder.

        Neither a missing entry nor a missing folder is an error; both are reported
        in the returned PackRemoval. Raises ValueError, before touching anything,
        when `name` cannot be a pack.
        """
        self._store.validatePackName(name)
        pack = self.findByName(name)
        entryRemoved = pack is not None
        if pack is not None:
            self._packs.remove(pack)

        folderRemoved = False
        try:
            folderRemoved = self._store.deletePack(name)
        except OSError as err:
            logger.warning("Could not delete folder of pack '%s': %s", name, err)

        if entryRemoved:
            self._changed()
        logger.info("Removed pack '%s' (entry=%s, folder=%s)", name, entryRemoved, folderRemoved)
        return PackRemoval(name=name, entryRemoved=entryRemoved, folderRemoved=folderRemoved)

    def refresh(self) -> None:
        """Replace the registry contents with a fresh scan of the managed folder."""
        self._packs = list(scanPacks(self._store))
        self._changed()



def scanPacks(store: PackStore) -> list[Pack]:
    """
    Look through the managed folder for packs.

    A subfolder is accepted when its manifest declares the same name as the
    folder. Unreadable manifests are logged and skipped.
    """
    layout = store.layout
    root = layout.managedFolder
    if not root.is_dir():
        logger.info("Managed folder '%s' does not exist, no packs discovered", root)
        return []

    packs: list[Pack] = []
    for folderPath in sorted(root.iterdir()):
        if not folderPath.is_dir():
            continue
        folder = folderPath.name
        if folder in layout.reservedFolderNames:
            continue

        manifestPath = folderPath / layout.manifestFileName
        if not manifestPath.is_file():
            continue

        try:
            pack = store.readManifest(manifestPath)
        except ManifestParseError as err:
            logger.error("Error reading pack manifest: %s", err)
            continue

        if pack.name != folder:
            logger.warning(
                "Skipping pack folder '%s': manifest declares name %r",
                folder,
                pack.name,
            )
            continue
        packs.append(pack)

    logger.info("Packs discovered: %d in '%s'", len(packs), root)
    return packs
