# packswitch/mods/resolver.py
from __future__ import annotations
from collections.abc import Iterable

from packswitch.mods.catalog import ModCatalog

__all__ = [
    "computeClosure",
    "missingFromCatalog",
]



def computeClosure(roots: Iterable[str], catalog: ModCatalog) -> set[str]:
    """
    Return `roots` plus every mod reachable through dependency edges.

    Traversal uses an explicit worklist with a visited set, so cycles terminate
    and no mod is expanded twice. A name with no catalog entry is kept as a leaf:
    it is part of the result but has no edges to follow.
    """
    visited: set[str] = set()
    worklist: list[str] = list(roots)

    while worklist:
        name = worklist.pop()
        if name in visited:
            continue
        visited.add(name)

        desc = catalog.lookup(name)
        if desc is None:
            continue
        for dep in desc.dependencies:
            if dep not in visited:
                worklist.append(dep)

    return visited



def missingFromCatalog(names: Iterable[str], catalog: ModCatalog) -> list[str]:
    return sorted(name for name in set(names) if catalog.lookup(name) is None)
