"""Notification feed: GET /predictions/{prediction_id}/events."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.database import get_db_session
from src.ps_common.response import ApiResponse, respond
from src.ps_events.application.service import EventFeedService
from src.ps_gateway.auth.dependencies import get_current_identity

router = APIRouter(prefix="/predictions", tags=["events"])

_service = EventFeedService()


@router.get("/{prediction_id}/events")
async def list_events(
    prediction_id: int,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cursor: str | None = Query(None, description="Id cursor of the last event seen"),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    result = await _service.list_events(db, prediction_id, cursor, limit)
    return respond(request, result.model_dump())
