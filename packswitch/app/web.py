# packswitch/app/web.py
from __future__ import annotations
import asyncio
import time
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from packswitch.packs.manager import CommandResult, PackManager

router = APIRouter()

__all__ = ["router", "SavePackBody", "RequestConfirmation"]

# Error type -> HTTP status. Other failures are reported with 200 and ok=false.
_STATUS_BY_ERROR = {
    "PackNotFoundError": 404,
    "GameRunningAbort": 409,
    "RollbackFailure": 500,
}



class SavePackBody(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None



class RequestConfirmation:
    """
    Answers the engine's "close the game?" question with the caller's choice.

    Set right before a load, under the write lock, so it always belongs to the
    request being served.
    """
    def __init__(self) -> None:
        self.allow = False

    def __call__(self) -> bool:
        return self.allow



def _manager(request: Request) -> PackManager:
    return request.app.state.packManager



def _respond(result: CommandResult) -> JSONResponse:
    status = 200 if result.ok else _STATUS_BY_ERROR.get(result.errorType or "", 200)
    return JSONResponse(result.toJson(), status_code=status)



async def _mutate(request: Request, fn, *args: Any) -> CommandResult:
    # Single writer: pack commands are serialized here, the core does no locking.
    lock: asyncio.Lock = request.app.state.writeLock
    async with lock:
        return await asyncio.to_thread(fn, *args)



@router.get("/health")
async def health():
    return {"ok": True, "ts": int(time.time() * 1000)}



@router.get("/packs")
async def listPacks(request: Request):
    return _respond(_manager(request).listPacks())



@router.post("/packs")
async def savePack(request: Request, body: SavePackBody):
    manager = _manager(request)
    return _respond(await _mutate(request, manager.savePack, body.name, body.description))



@router.post("/packs/{name}/load")
async def loadPack(request: Request, name: str, terminateHost: bool = False):
    manager = _manager(request)
    confirmation: RequestConfirmation = request.app.state.confirmation
    lock: asyncio.Lock = request.app.state.writeLock
    async with lock:
        confirmation.allow = terminateHost
        try:
            result = await asyncio.to_thread(manager.loadPack, name)
        finally:
            confirmation.allow = False
    return _respond(result)



@router.delete("/packs/{name}")
async def removePack(request: Request, name: str):
    manager = _manager(request)
    return _respond(await _mutate(request, manager.removePack, name))



@router.get("/active")
async def activeMods(request: Request):
    # A running switch edits the active set in place; read it between commands
    lock: asyncio.Lock = request.app.state.writeLock
    async with lock:
        snapshot = _manager(request).activeSet.snapshot()
    return {"ok": True, "data": snapshot.model_dump(mode="json")}
