"""ps_settlement REST endpoints.

POST /predictions/{prediction_id}/resolve     — creator resolves (once)
POST /predictions/{prediction_id}/claim       — caller pulls their payout
POST /predictions/{prediction_id}/distribute  — push the next payout batch
GET  /predictions/{prediction_id}/settlement  — pool, paid, owed, dust
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.database import get_db_session
from src.ps_common.response import ApiResponse, respond
from src.ps_gateway.auth.dependencies import get_current_identity
from src.ps_settlement.application.schemas import DistributeRequest, ResolveRequest
from src.ps_settlement.application.service import ResolutionEngine

router = APIRouter(prefix="/predictions", tags=["settlement"])

_service = ResolutionEngine()


@router.post("/{prediction_id}/resolve")
async def resolve(
    prediction_id: int,
    body: ResolveRequest,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve(db, prediction_id, body.outcome, identity)
    return respond(request, result.model_dump(mode="json"), message="Prediction resolved")


@router.post("/{prediction_id}/claim")
async def claim(
    prediction_id: int,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.claim(db, prediction_id, identity)
    return respond(request, result.model_dump(mode="json"), message="Payout claimed")


@router.post("/{prediction_id}/distribute")
async def distribute(
    prediction_id: int,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    body: DistributeRequest | None = None,
) -> ApiResponse:
    limit = body.limit if body is not None else None
    result = await _service.distribute(db, prediction_id, limit)
    return respond(request, result.model_dump())


@router.get("/{prediction_id}/settlement")
async def get_settlement(
    prediction_id: int,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_settlement(db, prediction_id)
    return respond(request, result.model_dump(mode="json"))
