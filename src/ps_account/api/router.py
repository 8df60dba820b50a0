"""ps_account REST API — all endpoints require a bearer token."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_account.application.schemas import DepositRequest, WithdrawRequest
from src.ps_account.application.service import AccountApplicationService
from src.ps_common.database import get_db_session
from src.ps_common.response import ApiResponse, respond
from src.ps_gateway.auth.dependencies import get_current_identity

router = APIRouter(prefix="/account", tags=["account"])

_service = AccountApplicationService()


@router.get("/balance")
async def get_balance(
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, identity)
    return respond(request, data.model_dump())


@router.post("/deposit")
async def deposit(
    body: DepositRequest,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.deposit(db, identity, body.amount)
    return respond(request, data.model_dump())


@router.post("/withdraw")
async def withdraw(
    body: WithdrawRequest,
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.withdraw(db, identity, body.amount)
    return respond(request, data.model_dump())


@router.post("/close")
async def close_account(
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.close(db, identity)
    return respond(request, data.model_dump(), message="Account closed")


@router.get("/ledger")
async def list_ledger(
    identity: Annotated[str, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    entry_type: str | None = Query(None, description="Filter by LedgerEntryType"),
) -> ApiResponse:
    data = await _service.list_ledger(db, identity, cursor, limit, entry_type)
    return respond(request, data.model_dump())
