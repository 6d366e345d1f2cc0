"""
GET /status
Liveness probe for the relay service.
"""
from fastapi import APIRouter

from crashlog import __version__

router = APIRouter()


@router.get("/status")
async def get_status():
    return {"status": "ok", "version": __version__}
