# packswitch/packs/models.py
from __future__ import annotations
import copy

from pydantic import BaseModel, ConfigDict, Field, JsonValue, model_validator

__all__ = ["InstalledMods", "Pack"]



class InstalledMods(BaseModel):
    """
    Snapshot of an installed mod set.

    `mods` holds mods known to the catalog, `notInCatalogMods` mods that were
    installed from elsewhere. Values are opaque per-mod metadata.
    """
    model_config = ConfigDict(extra="forbid")

    mods: dict[str, JsonValue] = Field(default_factory=dict)
    notInCatalogMods: dict[str, JsonValue] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _checkDisjoint(self) -> InstalledMods:
        overlap = set(self.mods) & set(self.notInCatalogMods)
        if overlap:
            raise ValueError(f"Mods listed both in and outside of the catalog: {sorted(overlap)}")
        return self

    def names(self) -> set[str]:
        return set(self.mods) | set(self.notInCatalogMods)

    def clone(self) -> InstalledMods:
        return InstalledMods(
            mods=copy.deepcopy(self.mods),
            notInCatalogMods=copy.deepcopy(self.notInCatalogMods),
        )



class Pack(BaseModel):
    """Represents a validated pack manifest."""
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""
    installedMods: InstalledMods = Field(default_factory=InstalledMods)
