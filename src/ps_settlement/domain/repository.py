"""Repository Protocols for settlements and payout records."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_settlement.domain.models import PayoutRecord, Settlement


class SettlementRepositoryProtocol(Protocol):
    async def create(self, db: AsyncSession, settlement: Settlement) -> Settlement: ...

    async def get(self, db: AsyncSession, prediction_id: int) -> Settlement | None: ...

    async def advance_cursor(self, db: AsyncSession, prediction_id: int, seq: int) -> None: ...


class PayoutRepositoryProtocol(Protocol):
    async def get(
        self, db: AsyncSession, prediction_id: int, depositor: str
    ) -> PayoutRecord | None: ...

    async def record_paid(
        self, db: AsyncSession, prediction_id: int, depositor: str, amount: int
    ) -> PayoutRecord: ...

    async def record_owed(
        self, db: AsyncSession, prediction_id: int, depositor: str, amount: int, reason: str
    ) -> PayoutRecord: ...

    async def totals(self, db: AsyncSession, prediction_id: int) -> tuple[int, int]:
        """(sum of PAID amounts, sum of OWED amounts)."""
        ...
