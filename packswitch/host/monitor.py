# packswitch/host/monitor.py
from __future__ import annotations
import logging
from collections.abc import Callable, Iterable

import psutil

from packswitch.app.settings import settings

logger = logging.getLogger(__name__)

__all__ = ["HostMonitor", "HostProcessMonitor"]



class HostMonitor:
    """
    Interface the switch engine uses to make sure the game is closed.

    Defaults describe a host that is never running.
    """

    def isRunning(self) -> bool:
        return False

    def confirmTerminate(self) -> bool:
        return False

    def terminate(self) -> None:
        return



class HostProcessMonitor(HostMonitor):
    """
    Finds the game among running processes by name prefix.

    `confirm` is asked before killing; without one, termination is declined.
    """

    def __init__(
        self,
        processNamePrefixes: Iterable[str] | None = None,
        *,
        confirm: Callable[[], bool] | None = None,
        terminateTimeoutSec: float | None = None,
    ) -> None:
        prefixes = processNamePrefixes if processNamePrefixes is not None else settings("host.processNamePrefixes", [])
        self._prefixes = tuple(str(prefix) for prefix in prefixes if str(prefix))
        self._confirm = confirm
        self._timeoutSec = float(
            terminateTimeoutSec if terminateTimeoutSec is not None else settings("host.terminateTimeoutSec", 10)
        )

    def _matches(self, name: str | None) -> bool:
        return bool(name) and any(name.startswith(prefix) for prefix in self._prefixes)

    def findProcesses(self) -> list[psutil.Process]:
        found: list[psutil.Process] = []
        for proc in psutil.process_iter(["name"]):
            try:
                name = proc.info.get("name")
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
            if self._matches(name):
                found.append(proc)
        return found

    def isRunning(self) -> bool:
        return bool(self.findProcesses())

    def confirmTerminate(self) -> bool:
        if self._confirm is None:
            logger.info("Game is running and no confirmation handler is set, declining to close it")
            return False
        return bool(self._confirm())

    def terminate(self) -> None:
        procs = self.findProcesses()
        for proc in procs:
            try:
                logger.info("Closing game process %s (pid %d)", proc.info.get("name"), proc.pid)
                proc.kill()
            except psutil.NoSuchProcess:
                pass
        if procs:
            _gone, alive = psutil.wait_procs(procs, timeout=self._timeoutSec)
            if alive:
                raise RuntimeError(f"Game processes still running after kill: {[proc.pid for proc in alive]}")
