"""GET /reputation/{identity} — public score lookup."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.database import get_db_session
from src.ps_common.response import ApiResponse, respond
from src.ps_gateway.auth.dependencies import get_current_identity
from src.ps_reputation.application.service import ReputationTracker

router = APIRouter(prefix="/reputation", tags=["reputation"])

_service = ReputationTracker()


@router.get("/{identity}")
async def get_reputation(
    identity: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get(db, identity)
    return respond(request, result.model_dump())
