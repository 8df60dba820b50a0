"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_account.domain.models import Account, LedgerEntry


class AccountRepositoryProtocol(Protocol):
    async def get_account(self, db: AsyncSession, identity: str) -> Account | None: ...

    async def deposit(
        self, db: AsyncSession, identity: str, amount: int
    ) -> tuple[Account, LedgerEntry]: ...

    async def withdraw(
        self, db: AsyncSession, identity: str, amount: int
    ) -> tuple[Account, LedgerEntry]: ...

    async def debit_stake(
        self, db: AsyncSession, identity: str, amount: int, prediction_id: int
    ) -> tuple[Account, LedgerEntry]:
        """Raises InsufficientBalanceError when the account cannot cover amount."""
        ...

    async def credit_payout(
        self, db: AsyncSession, identity: str, amount: int, prediction_id: int
    ) -> tuple[Account, LedgerEntry]:
        """Raises TransferFailureError when the account is missing or closed."""
        ...

    async def close(self, db: AsyncSession, identity: str) -> Account: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        identity: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
