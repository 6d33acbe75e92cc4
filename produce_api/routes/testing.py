from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..errors import StorageError
from ..logs import LogContext
from ..repository import ProduceRepository
from .produce import get_repository

# Mounted only when settings.enable_test_routes is on
router = APIRouter()


@router.post("/__test/reset")
def api_test_reset(repo: ProduceRepository = Depends(get_repository)):
    log = LogContext("TEST_RESET")
    try:
        repo.clear_all()
    except StorageError as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
    log.write("OK")
    return {"ok": True}
