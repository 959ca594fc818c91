# packswitch/packs/switch.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from packswitch.core.errors import (
    CommitIOError,
    GameRunningAbort,
    InstallError,
    PackNotFoundError,
    PackSaveError,
    PackSwitchError,
    PruneIOError,
    RollbackFailure,
    StagingIOError,
    SwitchRolledBack,
)
from packswitch.core.fsops import listSubdirNames, moveDirectory, removeTree
from packswitch.core.logging import setLogContext
from packswitch.host.monitor import HostMonitor
from packswitch.mods.catalog import ModCatalog
from packswitch.mods.installer import Installer
from packswitch.mods.resolver import computeClosure, missingFromCatalog
from packswitch.packs.active_set import ActiveSet
from packswitch.packs.models import InstalledMods, Pack
from packswitch.packs.registry import PackRegistry
from packswitch.packs.store import PackStore

logger = logging.getLogger(__name__)

__all__ = [
    "SwitchState",
    "SwitchListener",
    "SwitchReport",
    "ProfileSwitchEngine",
]



# ------------------------------------------------------------------ #
# States, listeners and results
# ------------------------------------------------------------------ #

class SwitchState(str, Enum):
    """
    Phase of a pack switch.

    idle -> preCheck -> staging -> applying -> installing -> pruning -> committing -> idle
    Any phase from staging to committing can go to rollingBack -> idle.
    """
    IDLE = "idle"
    PRE_CHECK = "preCheck"
    STAGING = "staging"
    APPLYING = "applying"
    INSTALLING = "installing"
    PRUNING = "pruning"
    COMMITTING = "committing"
    ROLLING_BACK = "rollingBack"



class SwitchListener:
    """
    Optional hook interface for systems that want to observe switches.

    Implementations may override any subset of methods. All methods have
    safe no-op defaults.
    """

    def onStateChanged(self, state: SwitchState) -> None:
        return

    def onModDropped(self, packName: str, modName: str) -> None:
        """Called when a requested mod is unknown to the catalog and left out."""
        return

    def onSwitchCompleted(self, report: SwitchReport) -> None:
        return

    def onSwitchFailed(self, error: PackSwitchError) -> None:
        return



@dataclass(frozen=True, slots=True)
class SwitchReport:
    packName: str
    mods: tuple[str, ...]                   # Final active set, sorted
    installed: tuple[str, ...] = ()
    dropped: tuple[str, ...] = ()           # Requested but unknown to the catalog
    protected: tuple[str, ...] = ()         # Dependency closure of installed mods
    pruned: tuple[str, ...] = ()            # Leftovers of the previous pack



# ------------------------------------------------------------------ #
# Compensation journal
# ------------------------------------------------------------------ #

@dataclass(slots=True)
class _Compensation:
    description: str
    action: Callable[[], None]



@dataclass(slots=True)
class _Journal:
    """Compensating actions for every completed step, undone in reverse order."""
    steps: list[_Compensation] = field(default_factory=list)

    def record(self, description: str, action: Callable[[], None]) -> None:
        self.steps.append(_Compensation(description, action))

    def unwind(self) -> tuple[list[BaseException], list[str]]:
        """
        Run compensations last-in first-out.

        Stops at the first failing compensation: later ones assume the earlier
        ones succeeded. Returns the errors and the descriptions left undone.
        """
        errors: list[BaseException] = []
        while self.steps:
            step = self.steps.pop()
            try:
                logger.debug("Rollback: %s", step.description)
                step.action()
            except Exception as err:
                logger.exception("Rollback step failed: %s", step.description)
                errors.append(err)
                pending = [step.description] + [item.description for item in reversed(self.steps)]
                self.steps.clear()
                return errors, pending
        return errors, []



# ------------------------------------------------------------------ #
# ProfileSwitchEngine
# ------------------------------------------------------------------ #

class ProfileSwitchEngine:
    """
    Switches the live mods folder to a saved pack, all or nothing.

    Flow:
        1) preCheck     - find the pack, make sure the game is closed
        2) staging      - move the live folder to the holding location
        3) applying     - move the pack folder into the live location
        4) installing   - install missing mods, drop the ones the catalog does not know
        5) pruning      - remove leftovers that are neither requested nor depended on
        6) committing   - write the resulting set back into the pack

    Every step from 2) on records a compensating action. Any failure unwinds them
    in reverse order and restores the active set, so the caller sees either the
    old state or the new one. Callers serialize switches with other mutating
    operations; the engine does no locking of its own.
    """

    def __init__(
        self,
        *,
        registry: PackRegistry,
        store: PackStore,
        catalog: ModCatalog,
        installer: Installer,
        monitor: HostMonitor | None = None,
        activeSet: ActiveSet | None = None,
        listeners: Iterable[SwitchListener] = (),
    ) -> None:
        self._registry = registry
        self._store = store
        self._layout = store.layout
        self._catalog = catalog
        self._installer = installer
        self._monitor = monitor or HostMonitor()
        self._activeSet = activeSet if activeSet is not None else ActiveSet()
        self._listeners: list[SwitchListener] = list(listeners)
        self._state = SwitchState.IDLE

    # ----- Public API -----

    @property
    def state(self) -> SwitchState:
        return self._state

    @property
    def activeSet(self) -> ActiveSet:
        return self._activeSet

    def addListener(self, listener: SwitchListener) -> None:
        self._listeners.append(listener)

    def switchTo(self, packName: str) -> SwitchReport:
        """
        Make pack `packName` the live mod set.

        Raises:
            PackNotFoundError   - no such pack, nothing changed
            GameRunningAbort    - the game is running and may not be closed, nothing changed
            StagingIOError      - a leftover holding location blocks the switch, nothing changed
            SwitchRolledBack    - the switch failed and everything was restored
            RollbackFailure     - the switch failed and the restore failed too
        """
        if self._state is not SwitchState.IDLE:
            raise RuntimeError(f"A pack switch is already running (state={self._state.value})")

        setLogContext(packName=packName)
        try:
            pack = self._preCheck(packName)
            report = self._runTransaction(pack)
        except PackSwitchError as err:
            self._notify("onSwitchFailed", err)
            raise
        finally:
            self._setState(SwitchState.IDLE)

        logger.info(
            "Switched to pack '%s': %d mods, %d installed, %d dropped, %d pruned",
            report.packName,
            len(report.mods),
            len(report.installed),
            len(report.dropped),
            len(report.pruned),
        )
        self._notify("onSwitchCompleted", report)
        return report

    # ----- State & listeners -----

    def _setState(self, state: SwitchState) -> None:
        if state is self._state:
            return
        self._state = state
        setLogContext(phase=state.value)
        self._notify("onStateChanged", state)

    def _notify(self, method: str, *args) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, method)(*args)
            except Exception:
                # Listener failures must not break the switch.
                logger.exception("Switch listener %r failed in %s", listener, method)

    # ----- 1) PreCheck -----

    def _preCheck(self, packName: str) -> Pack:
        self._setState(SwitchState.PRE_CHECK)
        phase = SwitchState.PRE_CHECK.value

        pack = self._registry.findByName(packName)
        if pack is None:
            raise PackNotFoundError(f"Could not switch pack: pack '{packName}' not found", packName=packName, phase=phase)

        for leftover in (self._layout.holdingFolder, self._layout.pruneHoldingFolder):
            if leftover.exists():
                raise StagingIOError(
                    f"Holding location '{leftover}' is left over from an interrupted switch; "
                    "restore or remove it before switching",
                    packName=packName,
                    phase=phase,
                )

        if self._monitor.isRunning():
            if not self._monitor.confirmTerminate():
                raise GameRunningAbort(
                    "The game is running and was not closed; pack switch cancelled",
                    packName=packName,
                    phase=phase,
                )
            try:
                self._monitor.terminate()
            except Exception as err:
                raise GameRunningAbort(
                    f"Could not close the game: {err}",
                    packName=packName,
                    phase=phase,
                    cause=err,
                ) from err
        return pack

    # ----- Transaction -----

    def _runTransaction(self, pack: Pack) -> SwitchReport:
        journal = _Journal()
        previous = self._activeSet.snapshot()

        try:
            self._stage(pack, journal)
            self._apply(pack, journal)
            installed, dropped, protected = self._install(pack, journal)
            pruned = self._prune(pack, protected, journal)
            self._adoptProtected(protected)
            self._commit(pack, journal)
        except Exception as err:
            self._rollBack(pack, journal, previous, err)

        self._cleanup()
        return SwitchReport(
            packName=pack.name,
            mods=tuple(self._activeSet.names()),
            installed=tuple(installed),
            dropped=tuple(dropped),
            protected=tuple(sorted(protected)),
            pruned=tuple(pruned),
        )

    # ----- 2) Staging -----

    def _stage(self, pack: Pack, journal: _Journal) -> None:
        self._setState(SwitchState.STAGING)
        live = self._layout.modsFolder
        holding = self._layout.holdingFolder
        # A first-time setup may have no live folder yet; one made here is removed on rollback
        createdLive = not live.exists()
        try:
            live.mkdir(parents=True, exist_ok=True)
            moveDirectory(live, holding)
        except OSError as err:
            if createdLive and live.is_dir():
                try:
                    live.rmdir()
                except OSError:
                    logger.warning("Could not remove live folder '%s' created for the switch", live)
            raise StagingIOError(
                f"Could not move live mods to '{holding}': {err}",
                packName=pack.name,
                phase=SwitchState.STAGING.value,
                cause=err,
            ) from err
        journal.record(
            "restore live folder from holding location",
            lambda: self._restoreLiveFromHolding(createdLive),
        )

    def _restoreLiveFromHolding(self, createdLive: bool = False) -> None:
        live = self._layout.modsFolder
        if live.exists():
            removeTree(live)
        moveDirectory(self._layout.holdingFolder, live)
        if createdLive:
            removeTree(live)

    # ----- 3) Applying -----

    def _apply(self, pack: Pack, journal: _Journal) -> None:
        self._setState(SwitchState.APPLYING)
        live = self._layout.modsFolder
        packFolder = self._store.packDir(pack.name)
        try:
            moveDirectory(packFolder, live)
        except OSError as err:
            raise StagingIOError(
                f"Could not move pack '{pack.name}' into the live folder: {err}",
                packName=pack.name,
                phase=SwitchState.APPLYING.value,
                cause=err,
            ) from err
        journal.record(f"return live folder to pack '{pack.name}'", lambda: moveDirectory(live, packFolder))
        self._activeSet.restore(pack.installedMods)

    # ----- 4) Installing -----

    def _materializedDirs(self) -> set[Path]:
        live = self._layout.modsFolder
        disabled = self._layout.disabledFolder
        dirs = {live / name for name in listSubdirNames(live) if name != self._layout.disabledFolderName}
        dirs |= {disabled / name for name in listSubdirNames(disabled)}
        return dirs

    def _install(self, pack: Pack, journal: _Journal) -> tuple[list[str], list[str], set[str]]:
        self._setState(SwitchState.INSTALLING)
        phase = SwitchState.INSTALLING.value
        installed: list[str] = []
        dropped: list[str] = []
        protected: set[str] = set()

        unknown = missingFromCatalog(self._activeSet.names(), self._catalog)
        if unknown:
            logger.debug("Pack '%s' lists mods unknown to the catalog: %s", pack.name, ", ".join(unknown))

        before = self._materializedDirs()

        def _removeInstalled() -> None:
            for path in sorted(self._materializedDirs() - before):
                removeTree(path)

        journal.record("remove mods installed during the switch", _removeInstalled)

        for modName in self._activeSet.names():
            if self._layout.isMaterialized(modName):
                continue

            desc = self._catalog.lookup(modName)
            if desc is None:
                # Unknown to the catalog, cannot be installed: keep the rest of the pack
                self._activeSet.drop(modName)
                dropped.append(modName)
                logger.info("Dropping mod '%s' from pack '%s': not in catalog", modName, pack.name)
                self._notify("onModDropped", pack.name, modName)
                continue

            try:
                self._installer.install(desc)
            except InstallError as err:
                err.packName = err.packName or pack.name
                err.phase = phase
                raise
            except Exception as err:
                raise InstallError(
                    f"Failed to install mod '{modName}': {err}",
                    packName=pack.name,
                    phase=phase,
                    cause=err,
                ) from err

            installed.append(modName)
            protected |= computeClosure({modName}, self._catalog)

        return installed, dropped, protected

    # ----- 5) Pruning -----

    def _prune(self, pack: Pack, protected: set[str], journal: _Journal) -> list[str]:
        self._setState(SwitchState.PRUNING)
        keep = set(self._activeSet.names()) | protected
        reserved = self._layout.disabledFolderName
        pruneRoot = self._layout.pruneHoldingFolder
        moved: list[tuple[Path, Path]] = []

        def _restorePruned() -> None:
            while moved:
                original, held = moved.pop()
                moveDirectory(held, original)
            removeTree(pruneRoot)

        journal.record("restore pruned mods", _restorePruned)

        pruned: set[str] = set()
        try:
            for tag, location in (("live", self._layout.modsFolder), ("disabled", self._layout.disabledFolder)):
                for modName in listSubdirNames(location):
                    if modName == reserved or modName in keep:
                        continue
                    held = pruneRoot / tag / modName
                    held.parent.mkdir(parents=True, exist_ok=True)
                    moveDirectory(location / modName, held)
                    moved.append((location / modName, held))
                    pruned.add(modName)
        except OSError as err:
            raise PruneIOError(
                f"Could not remove leftover mods: {err}",
                packName=pack.name,
                phase=SwitchState.PRUNING.value,
                cause=err,
            ) from err

        if pruned:
            logger.info("Pruned %d leftover mods: %s", len(pruned), ", ".join(sorted(pruned)))
        return sorted(pruned)

    def _adoptProtected(self, protected: set[str]) -> None:
        """
        Record kept dependencies in the active set, so the committed pack lists
        everything left on disk and the next switch keeps them too.
        """
        live = self._layout.modsFolder
        adopted: list[str] = []
        for modName in sorted(protected):
            if modName in self._activeSet or modName == self._layout.disabledFolderName:
                continue
            if (live / modName).is_dir():
                enabled = True
            elif (self._layout.disabledFolder / modName).is_dir():
                enabled = False
            else:
                continue
            self._activeSet.add(modName, {"enabled": enabled}, inCatalog=self._catalog.lookup(modName) is not None)
            adopted.append(modName)
        if adopted:
            logger.info("Added %d dependencies to the active set: %s", len(adopted), ", ".join(adopted))

    # ----- 6) Committing -----

    def _commit(self, pack: Pack, journal: _Journal) -> None:
        self._setState(SwitchState.COMMITTING)
        packFolder = self._store.packDir(pack.name)
        journal.record(f"remove partial snapshot of pack '{pack.name}'", lambda: removeTree(packFolder))
        try:
            committed = self._store.saveSnapshot(pack.name, pack.description, self._activeSet.snapshot())
        except (PackSaveError, OSError, ValueError) as err:
            raise CommitIOError(
                f"Could not save the resulting mods into pack '{pack.name}': {err}",
                packName=pack.name,
                phase=SwitchState.COMMITTING.value,
                cause=err,
            ) from err
        self._registry.upsert(committed)

    def _cleanup(self) -> None:
        """Past the commit point: leftovers are logged, never raised."""
        for folder in (self._layout.holdingFolder, self._layout.pruneHoldingFolder):
            try:
                removeTree(folder)
            except OSError as err:
                logger.warning("Could not delete '%s' after switching; remove it manually: %s", folder, err)

    # ----- Rollback -----

    def _rollBack(self, pack: Pack, journal: _Journal, previous: InstalledMods, err: Exception) -> None:
        failedPhase = getattr(err, "phase", None) or self._state.value
        self._setState(SwitchState.ROLLING_BACK)
        logger.error("Switch to pack '%s' failed during %s: %s; rolling back", pack.name, failedPhase, err)

        errors, pending = journal.unwind()
        self._activeSet.restore(previous)

        if errors:
            raise RollbackFailure(
                f"Switch to pack '{pack.name}' failed during {failedPhase} ({err}) and could not be "
                f"rolled back; manual recovery needed. Not undone: {'; '.join(pending)}",
                packName=pack.name,
                phase=failedPhase,
                cause=err,
                rollbackErrors=errors,
                pendingSteps=pending,
            ) from err
        raise SwitchRolledBack(
            f"An error occurred when activating pack '{pack.name}' during {failedPhase}: {err}. "
            "The previous mods were restored",
            packName=pack.name,
            phase=failedPhase,
            cause=err,
        ) from err
