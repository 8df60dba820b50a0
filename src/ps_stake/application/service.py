"""StakeApplicationService — the stake operation.

One stake = one transaction under the prediction's lock:
  1. row-lock the prediction and check it accepts the stake
  2. debit the depositor's account
  3. accumulate the ledger balance, register the depositor on first stake
  4. bump the side's count/amount and total_stake
  5. append the Staked notification
Any failure rolls everything back.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_account.domain.repository import AccountRepositoryProtocol
from src.ps_account.infrastructure.persistence import AccountRepository
from src.ps_common.enums import EventType, Side
from src.ps_common.errors import InvalidPredictionError
from src.ps_common.locks import PredictionLocks, prediction_locks
from src.ps_events.domain.repository import EventLogProtocol
from src.ps_events.infrastructure.persistence import EventLog
from src.ps_prediction.application.schemas import PredictionView
from src.ps_prediction.domain.repository import PredictionRepositoryProtocol
from src.ps_prediction.infrastructure.persistence import PredictionRepository
from src.ps_stake.application.schemas import PositionsResponse, StakeReceipt
from src.ps_stake.domain.repository import StakeLedgerProtocol, StakerRegistryProtocol
from src.ps_stake.domain.rules import check_stake_allowed
from src.ps_stake.infrastructure.persistence import (
    StakeLedgerRepository,
    StakerRegistryRepository,
)

logger = logging.getLogger(__name__)


class StakeApplicationService:
    def __init__(
        self,
        predictions: PredictionRepositoryProtocol | None = None,
        ledger: StakeLedgerProtocol | None = None,
        registry: StakerRegistryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
        events: EventLogProtocol | None = None,
        locks: PredictionLocks | None = None,
    ) -> None:
        self._predictions: PredictionRepositoryProtocol = predictions or PredictionRepository()
        self._ledger: StakeLedgerProtocol = ledger or StakeLedgerRepository()
        self._registry: StakerRegistryProtocol = registry or StakerRegistryRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._events: EventLogProtocol = events or EventLog()
        self._locks = locks or prediction_locks

    async def stake(
        self,
        db: AsyncSession,
        prediction_id: int,
        depositor: str,
        side: Side,
        amount: int,
    ) -> StakeReceipt:
        async with self._locks.for_prediction(prediction_id):
            try:
                locked = await self._predictions.get_for_update(db, prediction_id)
                check_stake_allowed(prediction_id, locked, amount)
                account, _ = await self._accounts.debit_stake(
                    db, depositor, amount, prediction_id
                )
                side_balance = await self._ledger.add(db, prediction_id, side, depositor, amount)
                first_stake = await self._registry.register(db, prediction_id, side, depositor)
                prediction = await self._predictions.record_stake(db, prediction_id, side, amount)
                await self._events.append(
                    db,
                    prediction_id,
                    EventType.STAKED,
                    {
                        "id": prediction_id,
                        "depositor": depositor,
                        "side": side.value,
                        "amount": amount,
                    },
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Stake applied: prediction=%d depositor=%s side=%s amount=%d new_staker=%s",
            prediction_id, depositor, side.value, amount, first_stake,
        )
        return StakeReceipt(
            prediction=PredictionView.from_domain(prediction),
            depositor=depositor,
            side=side,
            amount=amount,
            side_balance=side_balance,
            available_balance=account.available_balance,
        )

    async def get_positions(
        self, db: AsyncSession, prediction_id: int, depositor: str
    ) -> PositionsResponse:
        if await self._predictions.get(db, prediction_id) is None:
            raise InvalidPredictionError(prediction_id)
        positions = await self._ledger.get_positions(db, prediction_id, depositor)
        return PositionsResponse.from_domain(positions)
