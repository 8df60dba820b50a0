"""AccountApplicationService — thin composition layer.

Mutations commit on success and roll back on any error; reads run
without an explicit transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_account.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    MovementResponse,
)
from src.ps_account.domain.models import Account, LedgerEntry
from src.ps_account.domain.repository import AccountRepositoryProtocol
from src.ps_account.infrastructure.persistence import AccountRepository
from src.ps_common.amounts import amount_to_display
from src.ps_common.errors import AccountNotFoundError
from src.ps_common.pagination import cursor_decode, cursor_encode

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def get_balance(self, db: AsyncSession, identity: str) -> BalanceResponse:
        account = await self._repo.get_account(db, identity)
        if account is None:
            raise AccountNotFoundError(identity)
        return BalanceResponse.from_account(account)

    async def deposit(self, db: AsyncSession, identity: str, amount: int) -> MovementResponse:
        try:
            account, entry = await self._repo.deposit(db, identity, amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Deposit: identity=%s amount=%d", identity, amount)
        return _movement(account, entry, amount)

    async def withdraw(self, db: AsyncSession, identity: str, amount: int) -> MovementResponse:
        try:
            account, entry = await self._repo.withdraw(db, identity, amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Withdraw: identity=%s amount=%d", identity, amount)
        return _movement(account, entry, amount)

    async def close(self, db: AsyncSession, identity: str) -> BalanceResponse:
        try:
            account = await self._repo.close(db, identity)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Account closed: identity=%s", identity)
        return BalanceResponse.from_account(account)

    async def list_ledger(
        self,
        db: AsyncSession,
        identity: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, identity, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )


def _movement(account: Account, entry: LedgerEntry, amount: int) -> MovementResponse:
    return MovementResponse(
        amount=amount,
        available_balance=account.available_balance,
        available_balance_display=amount_to_display(account.available_balance),
        ledger_entry_id=entry.id,
    )
