"""ResolutionEngine — one-shot resolution and pull-based payouts.

resolve() is O(1) in the number of stakers: it locks the prediction,
flips it to resolved, freezes the pool into a settlements row and adjusts
the creator's reputation. Nobody is paid inside resolve.

Value leaves the pool through two bounded paths:
  - claim():      one depositor pulls their own payout
  - distribute(): anyone pushes the next batch of the winning registry,
                  in insertion order, at most `limit` depositors per call

A transfer that cannot be delivered is recorded as OWED and never blocks
other depositors or reopens the resolution; the depositor can claim later.
In distribute() each depositor is paid inside its own SAVEPOINT, so a
database error on one account rolls back only that depositor's writes.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ps_account.domain.repository import AccountRepositoryProtocol
from src.ps_account.infrastructure.persistence import AccountRepository
from src.ps_common.enums import EventType, PayoutStatus
from src.ps_common.errors import (
    AlreadyResolvedError,
    InternalError,
    InvalidPredictionError,
    NothingToClaimError,
    PayoutAlreadyClaimedError,
    PredictionNotResolvedError,
    TransferFailureError,
    UnauthorizedResolverError,
)
from src.ps_common.locks import PredictionLocks, prediction_locks
from src.ps_events.domain.repository import EventLogProtocol
from src.ps_events.infrastructure.persistence import EventLog
from src.ps_prediction.application.schemas import PredictionView
from src.ps_prediction.domain.models import Prediction
from src.ps_prediction.domain.repository import PredictionRepositoryProtocol
from src.ps_prediction.infrastructure.persistence import PredictionRepository
from src.ps_reputation.application.service import ReputationTracker
from src.ps_reputation.domain.score import resolution_delta
from src.ps_settlement.application.schemas import (
    DistributionResponse,
    PayoutResponse,
    ResolutionResponse,
    SettlementResponse,
)
from src.ps_settlement.domain.invariants import verify_settlement_conservation
from src.ps_settlement.domain.models import DistributionReport, PayoutRecord, Settlement
from src.ps_settlement.domain.payout import entitlement, freeze_settlement, summarize
from src.ps_settlement.domain.repository import (
    PayoutRepositoryProtocol,
    SettlementRepositoryProtocol,
)
from src.ps_settlement.infrastructure.persistence import PayoutRepository, SettlementRepository
from src.ps_stake.domain.repository import StakeLedgerProtocol, StakerRegistryProtocol
from src.ps_stake.infrastructure.persistence import (
    StakeLedgerRepository,
    StakerRegistryRepository,
)

logger = logging.getLogger(__name__)


class ResolutionEngine:
    def __init__(
        self,
        predictions: PredictionRepositoryProtocol | None = None,
        ledger: StakeLedgerProtocol | None = None,
        registry: StakerRegistryProtocol | None = None,
        settlements: SettlementRepositoryProtocol | None = None,
        payouts: PayoutRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
        reputation: ReputationTracker | None = None,
        events: EventLogProtocol | None = None,
        locks: PredictionLocks | None = None,
    ) -> None:
        self._predictions: PredictionRepositoryProtocol = predictions or PredictionRepository()
        self._ledger: StakeLedgerProtocol = ledger or StakeLedgerRepository()
        self._registry: StakerRegistryProtocol = registry or StakerRegistryRepository()
        self._settlements: SettlementRepositoryProtocol = settlements or SettlementRepository()
        self._payouts: PayoutRepositoryProtocol = payouts or PayoutRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._reputation = reputation or ReputationTracker()
        self._events: EventLogProtocol = events or EventLog()
        self._locks = locks or prediction_locks

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve(
        self, db: AsyncSession, prediction_id: int, outcome: bool, caller: str
    ) -> ResolutionResponse:
        async with self._locks.for_prediction(prediction_id):
            try:
                prediction = await self._predictions.get_for_update(db, prediction_id)
                if prediction is None:
                    raise InvalidPredictionError(prediction_id)
                if prediction.resolved:
                    raise AlreadyResolvedError(prediction_id)
                if caller != prediction.creator:
                    raise UnauthorizedResolverError(prediction_id)

                resolved = await self._predictions.mark_resolved(db, prediction_id, outcome)
                settlement = await self._settlements.create(db, freeze_settlement(resolved))
                score = await self._reputation.adjust(
                    db, resolved.creator, resolution_delta(outcome)
                )
                await self._events.append(
                    db,
                    prediction_id,
                    EventType.PREDICTION_RESOLVED,
                    {"id": prediction_id, "outcome": outcome},
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        if settlement.total_winning_amount == 0 and settlement.pool > 0:
            logger.warning(
                "Prediction %d resolved with no stake on %s: pool %d retained",
                prediction_id, settlement.winning_side.value, settlement.pool,
            )
        logger.info(
            "Prediction resolved: id=%d outcome=%s pool=%d winning_total=%d",
            prediction_id, outcome, settlement.pool, settlement.total_winning_amount,
        )
        return ResolutionResponse(
            prediction=PredictionView.from_domain(resolved),
            winning_side=settlement.winning_side,
            pool=settlement.pool,
            total_winning_amount=settlement.total_winning_amount,
            creator_reputation=score,
        )

    # ------------------------------------------------------------------
    # Pull payment
    # ------------------------------------------------------------------

    async def claim(
        self, db: AsyncSession, prediction_id: int, depositor: str
    ) -> PayoutResponse:
        """Pay depositor's share of a resolved pool.

        A failed transfer is committed as OWED and then re-raised as
        TransferFailureError so the caller learns the claim did not land.
        """
        failure: TransferFailureError | None = None
        async with self._locks.for_prediction(prediction_id):
            try:
                settlement = await self._locked_settlement(db, prediction_id)
                stake = await self._ledger.get_balance(
                    db, prediction_id, settlement.winning_side, depositor
                )
                if stake <= 0:
                    raise NothingToClaimError(prediction_id, depositor)
                existing = await self._payouts.get(db, prediction_id, depositor)
                if existing is not None and existing.status is PayoutStatus.PAID:
                    raise PayoutAlreadyClaimedError(prediction_id, depositor)

                amount = entitlement(settlement, stake)
                try:
                    record = await self._pay(db, settlement, depositor, amount)
                except TransferFailureError as exc:
                    record = await self._defer(db, settlement, depositor, amount, exc.reason)
                    failure = exc
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        if failure is not None:
            _log_deferred(prediction_id, depositor, amount, failure.reason)
            raise failure
        logger.info(
            "Payout claimed: prediction=%d depositor=%s amount=%d",
            prediction_id, depositor, amount,
        )
        return PayoutResponse.from_record(record)

    # ------------------------------------------------------------------
    # Bounded push
    # ------------------------------------------------------------------

    async def distribute(
        self, db: AsyncSession, prediction_id: int, limit: int | None = None
    ) -> DistributionResponse:
        batch_size = limit or settings.PAYOUT_BATCH_SIZE
        async with self._locks.for_prediction(prediction_id):
            try:
                settlement = await self._locked_settlement(db, prediction_id)
                # Fetch batch_size+1 to detect has_more
                stakers = await self._registry.list_stakers(
                    db,
                    prediction_id,
                    settlement.winning_side,
                    settlement.distribution_cursor,
                    batch_size + 1,
                )
                has_more = len(stakers) > batch_size
                batch = stakers[:batch_size]
                report = DistributionReport(
                    prediction_id=prediction_id,
                    processed=len(batch),
                    paid=0,
                    paid_amount=0,
                    deferred=0,
                    skipped=0,
                    has_more=has_more,
                )

                deferred: list[tuple[str, int, str]] = []
                for entry in batch:
                    existing = await self._payouts.get(db, prediction_id, entry.depositor)
                    if existing is not None and existing.status is PayoutStatus.PAID:
                        report.skipped += 1
                        continue
                    amount = entitlement(settlement, entry.amount)
                    reason: str | None = None
                    try:
                        async with db.begin_nested():
                            await self._pay(db, settlement, entry.depositor, amount)
                    except TransferFailureError as exc:
                        reason = exc.reason
                    except SQLAlchemyError as exc:
                        reason = f"database error: {type(exc).__name__}"
                    if reason is None:
                        report.paid += 1
                        report.paid_amount += amount
                    else:
                        await self._defer(db, settlement, entry.depositor, amount, reason)
                        deferred.append((entry.depositor, amount, reason))
                        report.deferred += 1

                if batch:
                    await self._settlements.advance_cursor(db, prediction_id, batch[-1].seq)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        for depositor, amount, reason in deferred:
            _log_deferred(prediction_id, depositor, amount, reason)
        logger.info(
            "Distributed prediction=%d paid=%d deferred=%d skipped=%d has_more=%s",
            prediction_id, report.paid, report.deferred, report.skipped, report.has_more,
        )
        return DistributionResponse.from_report(report)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def get_settlement(self, db: AsyncSession, prediction_id: int) -> SettlementResponse:
        prediction = await self._predictions.get(db, prediction_id)
        settlement = await self._settlement_of(db, prediction_id, prediction)

        winning_stakers, total_entitled = await self._ledger.entitlement_totals(
            db,
            prediction_id,
            settlement.winning_side,
            settlement.pool,
            settlement.total_winning_amount,
        )
        total_paid, total_deferred = await self._payouts.totals(db, prediction_id)
        summary = summarize(settlement, winning_stakers, total_entitled, total_paid, total_deferred)
        verify_settlement_conservation(summary)
        return SettlementResponse.from_summary(summary)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _locked_settlement(self, db: AsyncSession, prediction_id: int) -> Settlement:
        prediction = await self._predictions.get_for_update(db, prediction_id)
        return await self._settlement_of(db, prediction_id, prediction)

    async def _settlement_of(
        self, db: AsyncSession, prediction_id: int, prediction: Prediction | None
    ) -> Settlement:
        if prediction is None:
            raise InvalidPredictionError(prediction_id)
        if not prediction.resolved:
            raise PredictionNotResolvedError(prediction_id)
        settlement = await self._settlements.get(db, prediction_id)
        if settlement is None:
            raise InternalError(f"Resolved prediction {prediction_id} has no settlement")
        return settlement

    async def _pay(
        self, db: AsyncSession, settlement: Settlement, depositor: str, amount: int
    ) -> PayoutRecord:
        # A zero share (tiny stake against a tiny pool) is settled without a ledger row.
        if amount > 0:
            await self._accounts.credit_payout(db, depositor, amount, settlement.prediction_id)
        record = await self._payouts.record_paid(
            db, settlement.prediction_id, depositor, amount
        )
        await self._events.append(
            db,
            settlement.prediction_id,
            EventType.PAYOUT_PAID,
            {"id": settlement.prediction_id, "depositor": depositor, "amount": amount},
        )
        return record

    async def _defer(
        self,
        db: AsyncSession,
        settlement: Settlement,
        depositor: str,
        amount: int,
        reason: str,
    ) -> PayoutRecord:
        record = await self._payouts.record_owed(
            db, settlement.prediction_id, depositor, amount, reason
        )
        await self._events.append(
            db,
            settlement.prediction_id,
            EventType.PAYOUT_DEFERRED,
            {
                "id": settlement.prediction_id,
                "depositor": depositor,
                "amount": amount,
                "reason": reason,
            },
        )
        return record


def _log_deferred(prediction_id: int, depositor: str, amount: int, reason: str) -> None:
    logger.warning(
        "Payout deferred: prediction=%d depositor=%s amount=%d reason=%s",
        prediction_id, depositor, amount, reason,
    )
