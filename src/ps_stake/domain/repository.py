"""Repository Protocols for the StakeLedger and the StakerRegistry.

Both are keyed by prediction and side; the registry keeps an
insertion-ordered set of depositors and is the only way settlement
enumerates who staked.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.enums import Side
from src.ps_stake.domain.models import Positions, StakerEntry


class StakeLedgerProtocol(Protocol):
    async def add(
        self, db: AsyncSession, prediction_id: int, side: Side, depositor: str, amount: int
    ) -> int:
        """Accumulate amount; returns the new cumulative balance."""
        ...

    async def get_balance(
        self, db: AsyncSession, prediction_id: int, side: Side, depositor: str
    ) -> int: ...

    async def get_positions(
        self, db: AsyncSession, prediction_id: int, depositor: str
    ) -> Positions: ...

    async def entitlement_totals(
        self,
        db: AsyncSession,
        prediction_id: int,
        side: Side,
        pool: int,
        total_winning: int,
    ) -> tuple[int, int]:
        """(stakers on side, sum of floor(amount * pool / total_winning)) in one pass."""
        ...


class StakerRegistryProtocol(Protocol):
    async def register(
        self, db: AsyncSession, prediction_id: int, side: Side, depositor: str
    ) -> bool:
        """Insert depositor if absent; returns True when newly added."""
        ...

    async def list_stakers(
        self,
        db: AsyncSession,
        prediction_id: int,
        side: Side,
        after_seq: int | None,
        limit: int,
    ) -> list[StakerEntry]:
        """Members in insertion order, starting after after_seq."""
        ...
