"""ps_stake REST endpoints.

POST /predictions/{prediction_id}/stakes     — stake on a side (debits the caller)
GET  /predictions/{prediction_id}/stakes/me  — caller's balances on both sides
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.database import get_db_session
from src.ps_common.response import ApiResponse, respond
from src.ps_gateway.auth.dependencies import get_current_identity
from src.ps_stake.application.schemas import StakeRequest
from src.ps_stake.application.service import StakeApplicationService

router = APIRouter(prefix="/predictions", tags=["stakes"])

_service = StakeApplicationService()


@router.post("/{prediction_id}/stakes")
async def stake(
    prediction_id: int,
    body: StakeRequest,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    receipt = await _service.stake(db, prediction_id, identity, body.side, body.amount)
    return respond(request, receipt.model_dump(mode="json"), message="Staked")


@router.get("/{prediction_id}/stakes/me")
async def my_positions(
    prediction_id: int,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_positions(db, prediction_id, identity)
    return respond(request, result.model_dump())
