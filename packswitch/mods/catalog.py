# packswitch/mods/catalog.py
from __future__ import annotations
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

import json5

logger = logging.getLogger(__name__)

__all__ = [
    "ModState",
    "ModDescriptor",
    "ModCatalog",
    "DictCatalog",
    "loadCatalogFile",
]



class ModState(str, Enum):
    """Installation state of a mod as reported by the catalog."""
    INSTALLED = "installed"
    NOT_INSTALLED = "notInstalled"
    NOT_IN_CATALOG = "notInCatalog"     # Installed from elsewhere, the catalog only knows it by name



@dataclass(frozen=True, slots=True)
class ModDescriptor:
    name: str
    dependencies: frozenset[str] = field(default_factory=frozenset)
    state: ModState = ModState.NOT_INSTALLED



class ModCatalog(Protocol):
    """Read-only view of the mod catalog."""

    def lookup(self, name: str) -> ModDescriptor | None:
        ...



class DictCatalog:
    """
    Catalog backed by an in-memory mapping name -> ModDescriptor.

    Mods that exist only outside the catalog (ModState.NOT_IN_CATALOG) are left
    out, so looking them up reports them as unknown.
    """

    def __init__(self, descriptors: Iterable[ModDescriptor] = ()) -> None:
        self._items: dict[str, ModDescriptor] = {}
        for desc in descriptors:
            if desc.state is ModState.NOT_IN_CATALOG:
                continue
            self._items[desc.name] = desc

    @classmethod
    def fromMapping(cls, graph: Mapping[str, Iterable[str]]) -> DictCatalog:
        """Build from a plain name -> dependency names mapping."""
        return cls(
            ModDescriptor(name=name, dependencies=frozenset(deps))
            for name, deps in graph.items()
        )

    def lookup(self, name: str) -> ModDescriptor | None:
        return self._items.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def names(self) -> list[str]:
        return sorted(self._items)



def _parseEntry(raw: Mapping) -> ModDescriptor:
    name = str(raw.get("name") or "").strip()
    if not name:
        raise ValueError("Catalog entry is missing 'name'")
    depsRaw = raw.get("dependencies") or []
    if isinstance(depsRaw, (str, bytes)) or not isinstance(depsRaw, Iterable):
        raise ValueError(f"Catalog entry '{name}' has invalid 'dependencies'")
    stateRaw = str(raw.get("state") or ModState.NOT_INSTALLED.value)
    return ModDescriptor(
        name=name,
        dependencies=frozenset(str(dep).strip() for dep in depsRaw if str(dep).strip()),
        state=ModState(stateRaw),
    )



def loadCatalogFile(path: Path) -> DictCatalog:
    """
    Read a catalog file of the form:

        { mods: [ { name: "A", dependencies: ["B"], state: "installed" }, ... ] }

    Malformed entries are logged and skipped. A missing file is an empty catalog.
    """
    path = Path(path).expanduser()
    if not path.exists():
        logger.info("No catalog file at '%s', using an empty catalog", path)
        return DictCatalog()

    data = json5.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise TypeError(f"Catalog file '{path}' must be an object")

    descriptors: list[ModDescriptor] = []
    for entry in data.get("mods") or []:
        if not isinstance(entry, Mapping):
            logger.warning("Skipping non-object catalog entry in '%s': %r", path, entry)
            continue
        try:
            descriptors.append(_parseEntry(entry))
        except ValueError as err:
            logger.warning("Skipping catalog entry in '%s': %s", path, err)
    return DictCatalog(descriptors)
