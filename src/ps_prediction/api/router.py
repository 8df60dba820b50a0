"""ps_prediction REST endpoints.

POST /predictions                  — post a prediction (caller is the creator)
GET  /predictions                  — newest first, cursor pagination
GET  /predictions/{prediction_id}  — read view
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.database import get_db_session
from src.ps_common.response import ApiResponse, respond
from src.ps_gateway.auth.dependencies import get_current_identity
from src.ps_prediction.application.schemas import PostPredictionRequest
from src.ps_prediction.application.service import PredictionApplicationService

router = APIRouter(prefix="/predictions", tags=["predictions"])

_service = PredictionApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_prediction(
    body: PostPredictionRequest,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.post_prediction(db, identity, body.text)
    return respond(request, result.model_dump(), message="Prediction posted")


@router.get("")
async def list_predictions(
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_predictions(db, cursor, limit)
    return respond(request, result.model_dump())


@router.get("/{prediction_id}")
async def get_prediction(
    prediction_id: int,
    request: Request,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_prediction(db, prediction_id)
    return respond(request, result.model_dump())
