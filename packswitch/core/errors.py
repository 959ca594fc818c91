# packswitch/core/errors.py
from __future__ import annotations

__all__ = [
    "PackSwitchError",
    "PackNotFoundError",
    "GameRunningAbort",
    "StagingIOError",
    "InstallError",
    "PruneIOError",
    "CommitIOError",
    "SwitchRolledBack",
    "RollbackFailure",
    "ManifestParseError",
    "PackSaveError",
]



# ------------------------------------------------------------------ #
# Switch errors
# ------------------------------------------------------------------ #

class PackSwitchError(RuntimeError):
    """
    Base class for pack switch errors.

    A failed switch surfaces exactly one of these to the caller. `phase` names the
    SwitchState in which the failure happened, `cause` the underlying exception.
    """

    def __init__(
        self,
        message: str,
        *,
        packName: str | None = None,
        phase: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.packName: str | None = packName
        self.phase: str | None = phase
        self.cause: BaseException | None = cause



class PackNotFoundError(PackSwitchError):
    """Raised when the requested pack is not in the registry. Nothing was mutated."""



class GameRunningAbort(PackSwitchError):
    """Raised when the user declined to close the running game. Nothing was mutated."""



class StagingIOError(PackSwitchError):
    """Raised when moving the live folder or the pack folder fails."""



class InstallError(PackSwitchError):
    """Raised by installers when a mod could not be materialized."""



class PruneIOError(PackSwitchError):
    """Raised when a leftover mod could not be removed from the live folders."""



class CommitIOError(PackSwitchError):
    """Raised when the resulting set could not be persisted back into the pack."""



class SwitchRolledBack(PackSwitchError):
    """
    Raised when a switch failed after mutation started and was fully rolled back.

    The live folder, the pack folder and the active set are back to their
    pre-switch state; retrying is safe. `cause` holds the typed phase error.
    """



class RollbackFailure(PackSwitchError):
    """
    Raised when rollback could not restore the pre-switch state.

    The filesystem needs manual recovery. `rollbackErrors` holds the compensation
    errors, `pendingSteps` the compensations that were not run because an earlier
    one failed.
    """

    def __init__(
        self,
        message: str,
        *,
        packName: str | None = None,
        phase: str | None = None,
        cause: BaseException | None = None,
        rollbackErrors: list[BaseException] | None = None,
        pendingSteps: list[str] | None = None,
    ) -> None:
        super().__init__(message, packName=packName, phase=phase, cause=cause)
        self.rollbackErrors: list[BaseException] = list(rollbackErrors or [])
        self.pendingSteps: list[str] = list(pendingSteps or [])



# ------------------------------------------------------------------ #
# Storage errors
# ------------------------------------------------------------------ #

class ManifestParseError(ValueError):
    """Raised when a pack manifest is missing, unreadable or malformed."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path: str | None = path



class PackSaveError(OSError):
    """Raised when a snapshot could not be fully written. The live folder is untouched."""
