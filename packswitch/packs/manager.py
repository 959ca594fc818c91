# packswitch/packs/manager.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from packswitch.app.paths import ManagedLayout
from packswitch.app.settings import settings
from packswitch.core.errors import ManifestParseError, PackSaveError, PackSwitchError, RollbackFailure
from packswitch.core.jsonutils import serializeError
from packswitch.core.logging import clearLogContext, setLogContext
from packswitch.host.monitor import HostMonitor, HostProcessMonitor
from packswitch.mods.catalog import ModCatalog, loadCatalogFile
from packswitch.mods.installer import CacheDirectoryInstaller, Installer
from packswitch.packs.active_set import ActiveSet
from packswitch.packs.registry import PackRegistry
from packswitch.packs.store import PackStore
from packswitch.packs.switch import ProfileSwitchEngine, SwitchListener

logger = logging.getLogger(__name__)

__all__ = [
    "CommandResult",
    "PackManager",
]



@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one pack command: `data` on success, a structured `error` otherwise."""
    ok: bool
    data: Any = None
    error: dict[str, Any] | None = None

    @classmethod
    def success(cls, data: Any = None) -> CommandResult:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, err: BaseException) -> CommandResult:
        return cls(ok=False, error=serializeError(err))

    @property
    def errorType(self) -> str | None:
        return (self.error or {}).get("type")

    def toJson(self) -> dict[str, Any]:
        out: dict[str, Any] = {"ok": self.ok}
        if self.ok:
            out["data"] = self.data
        else:
            out["error"] = self.error
        return out



class PackManager:
    """
    Command surface over the pack core: list, load, save and remove packs.

    Every command returns a CommandResult. Known pack errors become structured
    errors; anything else propagates. Commands are not thread-safe, callers
    serialize the mutating ones.
    """

    def __init__(
        self,
        *,
        layout: ManagedLayout,
        catalog: ModCatalog,
        installer: Installer,
        monitor: HostMonitor | None = None,
        activeSet: ActiveSet | None = None,
        listeners: tuple[SwitchListener, ...] = (),
    ) -> None:
        self._layout = layout
        self._store = PackStore(layout)
        self._registry = PackRegistry.discover(self._store)
        self._activeSet = activeSet if activeSet is not None else ActiveSet.fromLiveFolder(layout, catalog)
        self._engine = ProfileSwitchEngine(
            registry=self._registry,
            store=self._store,
            catalog=catalog,
            installer=installer,
            monitor=monitor,
            activeSet=self._activeSet,
            listeners=listeners,
        )

    @classmethod
    def fromSettings(
        cls,
        *,
        managedFolder: Path | str | None = None,
        confirmTerminate: Callable[[], bool] | None = None,
    ) -> PackManager:
        layout = ManagedLayout.fromSettings(managedFolder)
        catalog = loadCatalogFile(Path(settings("paths.catalogFile")))
        installer = CacheDirectoryInstaller(Path(settings("paths.modCache")), layout.modsFolder)
        monitor = HostProcessMonitor(confirm=confirmTerminate)
        return cls(layout=layout, catalog=catalog, installer=installer, monitor=monitor)

    # ----- Accessors -----

    @property
    def layout(self) -> ManagedLayout:
        return self._layout

    @property
    def registry(self) -> PackRegistry:
        return self._registry

    @property
    def store(self) -> PackStore:
        return self._store

    @property
    def engine(self) -> ProfileSwitchEngine:
        return self._engine

    @property
    def activeSet(self) -> ActiveSet:
        return self._activeSet

    # ----- Commands -----

    @contextmanager
    def _command(self, name: str, **ctx: Any) -> Iterator[None]:
        setLogContext(command=name, **ctx)
        try:
            yield
        finally:
            clearLogContext()

    def listPacks(self) -> CommandResult:
        with self._command("listPacks"):
            return CommandResult.success([pack.model_dump(mode="json") for pack in self._registry.list()])

    def loadPack(self, name: str) -> CommandResult:
        with self._command("loadPack", packName=name):
            try:
                report = self._engine.switchTo(name)
            except RollbackFailure as err:
                logger.critical("%s", err)
                return CommandResult.failure(err)
            except PackSwitchError as err:
                logger.warning("Could not load pack '%s': %s", name, err)
                return CommandResult.failure(err)
            return CommandResult.success(asdict(report))

    def savePack(self, name: str, description: str | None = None) -> CommandResult:
        """
        Saves the live mods as pack `name`, replacing an existing pack of that name.

        Without a description, an existing pack keeps its own.
        """
        with self._command("savePack", packName=name):
            if description is None:
                existing = self._registry.findByName(name)
                description = existing.description if existing is not None else ""
            try:
                pack = self._store.saveSnapshot(name, description, self._activeSet.snapshot())
            except (PackSaveError, ValueError) as err:
                logger.warning("Could not save pack '%s': %s", name, err)
                return CommandResult.failure(err)
            self._registry.upsert(pack)
            return CommandResult.success(pack.model_dump(mode="json"))

    def removePack(self, name: str) -> CommandResult:
        with self._command("removePack", packName=name):
            try:
                removal = self._registry.remove(name)
            except ValueError as err:
                logger.warning("Could not remove pack %r: %s", name, err)
                return CommandResult.failure(err)
            return CommandResult.success(asdict(removal))

    def reloadPack(self, name: str) -> CommandResult:
        """Re-read one pack's manifest from disk into the registry."""
        with self._command("reloadPack", packName=name):
            try:
                pack = self._store.loadSnapshot(name)
            except ValueError as err:
                logger.warning("Could not reload pack '%s': %s", name, err)
                return CommandResult.failure(err)
            if pack.name != name:
                return CommandResult.failure(
                    ManifestParseError(f"Pack folder '{name}' declares name {pack.name!r}", path=str(self._layout.manifestPath(name)))
                )
            self._registry.upsert(pack)
            return CommandResult.success(pack.model_dump(mode="json"))
