# packswitch/packs/__init__.py
from .models import InstalledMods, Pack
from .active_set import ActiveSet
from .store import PackStore
from .registry import PackRegistry, PackRemoval
from .switch import ProfileSwitchEngine, SwitchListener, SwitchReport, SwitchState
from .manager import CommandResult, PackManager

__all__ = [
    "InstalledMods",
    "Pack",
    "ActiveSet",
    "PackStore",
    "PackRegistry",
    "PackRemoval",
    "ProfileSwitchEngine",
    "SwitchListener",
    "SwitchReport",
    "SwitchState",
    "CommandResult",
    "PackManager",
]
