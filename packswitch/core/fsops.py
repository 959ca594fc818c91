# packswitch/core/fsops.py
from __future__ import annotations
import shutil
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "CopyResult",
    "copyDirectory",
    "moveDirectory",
    "removeTree",
    "listSubdirNames",
]



@dataclass(frozen=True, slots=True)
class CopyResult:
    source: Path
    destination: Path
    fileCount: int
    bytesCopied: int



def copyDirectory(source: Path, destination: Path) -> CopyResult:
    """
    Recursively copies `source` into a new directory `destination`.

    The copy is one-way: `source` is only read. `destination` must not exist yet.
    A failure mid-copy leaves `destination` incomplete and raises the OSError.
    """
    source = Path(source)
    destination = Path(destination)
    if not source.is_dir():
        raise FileNotFoundError(f"Source directory not found: {source}")

    fileCount = 0
    bytesCopied = 0

    def _copyCounting(src: str, dst: str) -> str:
        nonlocal fileCount, bytesCopied
        out = shutil.copy2(src, dst)
        fileCount += 1
        bytesCopied += Path(src).stat().st_size
        return out

    shutil.copytree(source, destination, copy_function=_copyCounting)
    return CopyResult(source=source, destination=destination, fileCount=fileCount, bytesCopied=bytesCopied)



def moveDirectory(source: Path, destination: Path) -> None:
    """
    Renames `source` to `destination` in one step.

    Both paths must be on the same volume. Refuses to move onto an existing path,
    since a rename onto an empty directory would silently replace it on POSIX.
    """
    source = Path(source)
    destination = Path(destination)
    if destination.exists():
        raise FileExistsError(f"Cannot move '{source}' to '{destination}': destination exists")
    source.rename(destination)



def removeTree(path: Path) -> bool:
    """Deletes a directory tree. Returns False when there was nothing to delete."""
    path = Path(path)
    if not path.exists():
        return False
    shutil.rmtree(path)
    return True



def listSubdirNames(path: Path) -> list[str]:
    """Names of direct subdirectories, sorted. A missing directory has none."""
    path = Path(path)
    if not path.is_dir():
        return []
    return sorted(child.name for child in path.iterdir() if child.is_dir())
