# -*- coding: utf-8 -*-
"""Record write — API endpoints."""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from ..config import settings
from ..errors import UnknownType
from ..records.mapper import RecordMapper
from ..schema.types import registry
from ..sinks.sqlite import SqliteRecordSink
from .models import (
    ExpandTypesRequest,
    TypeListResponse,
    WriteRecordsRequest,
    WriteResultResponse,
)
from .service import WriteService

router = APIRouter(prefix="/api/records", tags=["Records"])


@lru_cache(maxsize=1)
def get_write_service() -> WriteService:
    mapper = RecordMapper(registry=registry, platform=settings.platform)
    sink = SqliteRecordSink(settings.db_path, settings.origin, settings.platform, settings.sink_timeout)
    return WriteService(mapper, sink)


@router.post("/write", response_model=WriteResultResponse, summary="Decode, validate and persist a batch of records")
def write_records(request: WriteRecordsRequest, service: WriteService = Depends(get_write_service)):
    """Always answers 200 with the classified outcome; per-record problems are in ``validationFailures``."""
    result = service.write_records(request.records)
    return WriteResultResponse.from_result(result)


@router.get("/types", response_model=TypeListResponse, summary="List types writable on this platform")
def list_types(include_unsupported: bool = False):
    if include_unsupported:
        names = registry.all_names()
    else:
        names = registry.supported_names(settings.platform)
    return TypeListResponse(types=sorted(names), count=len(names))


@router.post("/types/expand", response_model=TypeListResponse, summary="Expand composite types into their components")
def expand_types(request: ExpandTypesRequest):
    try:
        names = registry.expand_names(request.types)
    except UnknownType as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return TypeListResponse(types=names, count=len(names))
