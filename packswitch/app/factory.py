# packswitch/app/factory.py
from __future__ import annotations
import asyncio
import logging
from collections.abc import Sequence

from fastapi import APIRouter, FastAPI

from packswitch.app.web import RequestConfirmation, router as webRouter
from packswitch.packs.manager import PackManager

__all__ = ["createApp"]



def createApp(
    manager: PackManager | None = None,
    *,
    confirmation: RequestConfirmation | None = None,
    extraRouters: Sequence[APIRouter] = (),
) -> FastAPI:
    """
    Build the HTTP app around a PackManager.

    Without a manager, one is built from settings and logging is configured.
    An injected manager should have been built with `confirmation` as its
    terminate-confirmation handler so `?terminateHost=` reaches the engine.
    """
    confirmation = confirmation or RequestConfirmation()
    if manager is None:
        from packswitch.core.logging import configureLogging
        configureLogging()
        manager = PackManager.fromSettings(confirmTerminate=confirmation)

    logger = logging.getLogger(__name__)
    logger.info(
        "Pack manager ready: %d packs in '%s'",
        len(manager.registry),
        manager.layout.managedFolder,
    )

    app = FastAPI(title="packswitch")
    app.state.packManager = manager
    app.state.confirmation = confirmation
    app.state.writeLock = asyncio.Lock()

    app.include_router(webRouter)
    for router in extraRouters:
        app.include_router(router)
    return app
