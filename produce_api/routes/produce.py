from __future__ import annotations

import re
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import Response

from ..errors import StorageError, ValidationError
from ..logs import LogContext
from ..models import parse_create, parse_patch
from ..repository import ProduceRepository

router = APIRouter()

ID_PATTERN = re.compile(r"[+-]?\d+(\.\d*)?", re.ASCII)


def get_repository(request: Request) -> ProduceRepository:
    return request.app.state.repository


def parse_id(raw: str) -> int:
    """Plain decimal literal with an integral value: "7", "+7", "7.0". Anything else is a 400."""
    if not ID_PATTERN.fullmatch(raw or ""):
        raise ValidationError(f"invalid id: {raw!r}")
    value = Decimal(raw)
    if value != value.to_integral_value():
        raise ValidationError(f"invalid id: {raw!r}")
    return int(value)


@router.post("/produce", status_code=201)
def api_produce_create(body: Any = Body(None), repo: ProduceRepository = Depends(get_repository)):
    log = LogContext("CREATE_PRODUCE")
    try:
        log.set_payload(body)
        item = parse_create(body)
        created = repo.create(item.name, item.type, item.price_per_kg)
    except ValidationError as ve:
        log.write("REJECTED", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except StorageError as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
    out = created.to_json()
    log.set_entity("produce", created.id)
    log.set_after(out)
    log.write("OK")
    return out


@router.get("/produce")
def api_produce_list(repo: ProduceRepository = Depends(get_repository)):
    try:
        return [p.to_json() for p in repo.list()]
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/produce/{produce_id}")
def api_produce_get(produce_id: str, repo: ProduceRepository = Depends(get_repository)):
    try:
        item = repo.get_by_id(parse_id(produce_id))
    except ValidationError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if item is None:
        raise HTTPException(status_code=404, detail="not found")
    return item.to_json()


@router.put("/produce/{produce_id}")
def api_produce_update(produce_id: str, body: Any = Body(None), repo: ProduceRepository = Depends(get_repository)):
    log = LogContext("UPDATE_PRODUCE")
    log.set_entity("produce", produce_id)
    try:
        pid = parse_id(produce_id)
        log.set_payload(body)
        patch = parse_patch(body)
        updated = repo.update(pid, patch.changes())
    except ValidationError as ve:
        log.write("REJECTED", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except StorageError as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
    if updated is None:
        log.write("NOT_FOUND")
        raise HTTPException(status_code=404, detail="not found")
    out = updated.to_json()
    log.set_after(out)
    log.write("OK")
    return out


@router.delete("/produce/{produce_id}", status_code=204)
def api_produce_delete(produce_id: str, repo: ProduceRepository = Depends(get_repository)):
    log = LogContext("DELETE_PRODUCE")
    log.set_entity("produce", produce_id)
    try:
        deleted = repo.delete(parse_id(produce_id))
    except ValidationError as ve:
        log.write("REJECTED", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except StorageError as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
    if not deleted:
        log.write("NOT_FOUND")
        raise HTTPException(status_code=404, detail="not found")
    log.write("OK")
    return Response(status_code=204)
