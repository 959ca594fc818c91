# tests/helpers.py
from pathlib import Path

from packswitch.app.paths import ManagedLayout
from packswitch.core.errors import InstallError
from packswitch.host.monitor import HostMonitor
from packswitch.mods.catalog import ModDescriptor
from packswitch.mods.resolver import computeClosure
from packswitch.packs.models import InstalledMods, Pack
from packswitch.packs.store import PackStore



# ----- Filesystem helpers -----

def makeModDirs(base: Path, *names: str) -> None:
    for name in names:
        modDir = base / name
        modDir.mkdir(parents=True, exist_ok=True)
        (modDir / f"{name}.dll").write_text(f"binary of {name}", encoding="utf-8")



def treeOf(path: Path) -> set[str]:
    """Every file and directory under `path`, relative, with file contents for files."""
    if not path.exists():
        return set()
    out: set[str] = set()
    for child in path.rglob("*"):
        rel = child.relative_to(path).as_posix()
        if child.is_file():
            out.add(f"{rel}={child.read_text(encoding='utf-8')}")
        else:
            out.add(f"{rel}/")
    return out



def makePack(
    store: PackStore,
    name: str,
    *,
    dirs: tuple[str, ...] = (),
    mods: dict | None = None,
    notInCatalogMods: dict | None = None,
    description: str = "",
) -> Pack:
    """Write a pack folder by hand, without going through the live folder."""
    makeModDirs(store.packDir(name), *dirs)
    store.packDir(name).mkdir(parents=True, exist_ok=True)
    pack = Pack(
        name=name,
        description=description,
        installedMods=InstalledMods(mods=mods or {}, notInCatalogMods=notInCatalogMods or {}),
    )
    store.writeManifest(pack)
    return pack



# ----- Collaborator fakes -----

class FakeInstaller:
    """
    Materializes mods as folders in the live folder; fails on request.

    With a catalog, missing dependencies are materialized along with the mod,
    the way a real mod installer pulls them in.
    """

    def __init__(self, layout: ManagedLayout, *, failOn: set[str] | None = None, catalog=None) -> None:
        self.layout = layout
        self.failOn = set(failOn or ())
        self.catalog = catalog
        self.calls: list[str] = []

    def install(self, descriptor: ModDescriptor) -> None:
        self.calls.append(descriptor.name)
        if descriptor.name in self.failOn:
            raise InstallError(f"download of '{descriptor.name}' failed")
        names = {descriptor.name}
        if self.catalog is not None:
            names = computeClosure(names, self.catalog)
        makeModDirs(self.layout.modsFolder, *sorted(name for name in names if not self.layout.isMaterialized(name)))



class FakeMonitor(HostMonitor):
    def __init__(self, *, running: bool = False, confirm=None) -> None:
        self.running = running
        self.confirm = confirm
        self.confirmAsked = 0
        self.terminated = False

    def isRunning(self) -> bool:
        return self.running

    def confirmTerminate(self) -> bool:
        self.confirmAsked += 1
        return bool(self.confirm()) if self.confirm is not None else False

    def terminate(self) -> None:
        self.terminated = True
        self.running = False



