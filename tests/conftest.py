"""Shared test fixtures.

In-memory fakes conform to the repository Protocols so services can be
exercised without PostgreSQL. They mirror the SQL repositories' guards
(WHERE NOT resolved, WHERE status = 'OWED', is_active checks).
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")

from dataclasses import replace
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.ps_account.domain.models import Account, LedgerEntry
from src.ps_common.amounts import BIGINT_MAX, proportional_share
from src.ps_common.enums import EventType, LedgerEntryType, PayoutStatus, Side
from src.ps_common.errors import (
    AccountNotFoundError,
    AlreadyResolvedError,
    BalanceLimitError,
    InsufficientBalanceError,
    TransferFailureError,
)
from src.ps_common.locks import PredictionLocks
from src.ps_events.domain.models import PredictionEvent
from src.ps_prediction.application.service import PredictionApplicationService
from src.ps_prediction.domain.models import Prediction
from src.ps_reputation.application.service import ReputationTracker
from src.ps_reputation.domain.score import apply_delta
from src.ps_settlement.application.service import ResolutionEngine
from src.ps_settlement.domain.models import PayoutRecord, Settlement
from src.ps_stake.application.service import StakeApplicationService
from src.ps_stake.domain.models import Positions, StakerEntry


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakePredictionRepository:
    def __init__(self) -> None:
        self.rows: list[Prediction] = []

    async def create(self, db: Any, creator: str, text: str) -> Prediction:
        prediction = Prediction(
            id=len(self.rows), creator=creator, text=text, created_at=datetime.now(UTC)
        )
        self.rows.append(prediction)
        return replace(prediction)

    async def get(self, db: Any, prediction_id: int) -> Prediction | None:
        if 0 <= prediction_id < len(self.rows):
            return replace(self.rows[prediction_id])
        return None

    async def get_for_update(self, db: Any, prediction_id: int) -> Prediction | None:
        return await self.get(db, prediction_id)

    async def list_predictions(
        self, db: Any, cursor_id: int | None, limit: int
    ) -> list[Prediction]:
        newest_first = [
            replace(p) for p in reversed(self.rows) if cursor_id is None or p.id < cursor_id
        ]
        return newest_first[:limit]

    async def record_stake(
        self, db: Any, prediction_id: int, side: Side, amount: int
    ) -> Prediction:
        p = self.rows[prediction_id]
        if p.resolved:
            raise AlreadyResolvedError(prediction_id)
        if side is Side.AGREE:
            p.agree_count += 1
            p.agree_amount += amount
        else:
            p.disagree_count += 1
            p.disagree_amount += amount
        p.total_stake += amount
        return replace(p)

    async def mark_resolved(self, db: Any, prediction_id: int, outcome: bool) -> Prediction:
        p = self.rows[prediction_id]
        if p.resolved:
            raise AlreadyResolvedError(prediction_id)
        p.resolved = True
        p.outcome = outcome
        p.resolved_at = datetime.now(UTC)
        return replace(p)


class FakeStakeLedger:
    def __init__(self) -> None:
        self.balances: dict[tuple[int, Side, str], int] = {}

    async def add(
        self, db: Any, prediction_id: int, side: Side, depositor: str, amount: int
    ) -> int:
        key = (prediction_id, side, depositor)
        self.balances[key] = self.balances.get(key, 0) + amount
        return self.balances[key]

    async def get_balance(
        self, db: Any, prediction_id: int, side: Side, depositor: str
    ) -> int:
        return self.balances.get((prediction_id, side, depositor), 0)

    async def get_positions(self, db: Any, prediction_id: int, depositor: str) -> Positions:
        return Positions(
            prediction_id=prediction_id,
            depositor=depositor,
            agree_amount=self.balances.get((prediction_id, Side.AGREE, depositor), 0),
            disagree_amount=self.balances.get((prediction_id, Side.DISAGREE, depositor), 0),
        )

    async def entitlement_totals(
        self, db: Any, prediction_id: int, side: Side, pool: int, total_winning: int
    ) -> tuple[int, int]:
        amounts = [
            amount
            for (pid, s, _), amount in self.balances.items()
            if pid == prediction_id and s is side
        ]
        entitled = sum(proportional_share(a, pool, total_winning) for a in amounts)
        return len(amounts), entitled


class FakeStakerRegistry:
    def __init__(self, ledger: FakeStakeLedger) -> None:
        self._ledger = ledger
        self._next_seq = 1
        self.members: list[tuple[int, int, Side, str]] = []  # (seq, prediction, side, depositor)

    async def register(self, db: Any, prediction_id: int, side: Side, depositor: str) -> bool:
        if any(m[1:] == (prediction_id, side, depositor) for m in self.members):
            return False
        self.members.append((self._next_seq, prediction_id, side, depositor))
        self._next_seq += 1
        return True

    async def list_stakers(
        self,
        db: Any,
        prediction_id: int,
        side: Side,
        after_seq: int | None,
        limit: int,
    ) -> list[StakerEntry]:
        entries = [
            StakerEntry(
                seq=seq,
                prediction_id=pid,
                side=s,
                depositor=d,
                amount=self._ledger.balances[(pid, s, d)],
            )
            for seq, pid, s, d in self.members
            if pid == prediction_id and s is side and (after_seq is None or seq > after_seq)
        ]
        return entries[:limit]


class FakeAccountRepository:
    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.ledger: list[LedgerEntry] = []

    def balance(self, identity: str) -> int:
        account = self.accounts.get(identity)
        return account.available_balance if account else 0

    async def get_account(self, db: Any, identity: str) -> Account | None:
        account = self.accounts.get(identity)
        return replace(account) if account else None

    async def deposit(self, db: Any, identity: str, amount: int) -> tuple[Account, LedgerEntry]:
        account = self.accounts.get(identity)
        if account is None:
            account = Account(identity=identity, available_balance=0, is_active=True, version=0)
            self.accounts[identity] = account
        if account.available_balance > BIGINT_MAX - amount:
            raise BalanceLimitError(identity, amount)
        account.available_balance += amount
        account.is_active = True
        account.version += 1
        return replace(account), self._write(account, LedgerEntryType.DEPOSIT, amount, None)

    async def withdraw(self, db: Any, identity: str, amount: int) -> tuple[Account, LedgerEntry]:
        account = self._debit(identity, amount)
        return replace(account), self._write(account, LedgerEntryType.WITHDRAW, -amount, None)

    async def debit_stake(
        self, db: Any, identity: str, amount: int, prediction_id: int
    ) -> tuple[Account, LedgerEntry]:
        account = self._debit(identity, amount)
        entry = self._write(account, LedgerEntryType.STAKE_DEBIT, -amount, prediction_id)
        return replace(account), entry

    async def credit_payout(
        self, db: Any, identity: str, amount: int, prediction_id: int
    ) -> tuple[Account, LedgerEntry]:
        account = self.accounts.get(identity)
        if account is None:
            raise TransferFailureError(identity, "no account")
        if not account.is_active:
            raise TransferFailureError(identity, "account closed")
        if account.available_balance > BIGINT_MAX - amount:
            raise TransferFailureError(identity, "balance limit")
        account.available_balance += amount
        entry = self._write(account, LedgerEntryType.SETTLEMENT_PAYOUT, amount, prediction_id)
        return replace(account), entry

    async def close(self, db: Any, identity: str) -> Account:
        account = self.accounts.get(identity)
        if account is None:
            raise AccountNotFoundError(identity)
        account.is_active = False
        return replace(account)

    async def list_ledger_entries(
        self,
        db: Any,
        identity: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        rows = [
            e
            for e in reversed(self.ledger)
            if e.identity == identity
            and (cursor_id is None or e.id < cursor_id)
            and (entry_type is None or e.entry_type == entry_type)
        ]
        return rows[:limit]

    def _debit(self, identity: str, amount: int) -> Account:
        account = self.accounts.get(identity)
        if account is None or not account.is_active or account.available_balance < amount:
            available = account.available_balance if account and account.is_active else 0
            raise InsufficientBalanceError(amount, available)
        account.available_balance -= amount
        account.version += 1
        return account

    def _write(
        self, account: Account, entry_type: LedgerEntryType, amount: int, prediction_id: int | None
    ) -> LedgerEntry:
        entry = LedgerEntry(
            id=len(self.ledger) + 1,
            identity=account.identity,
            entry_type=entry_type.value,
            amount=amount,
            balance_after=account.available_balance,
            reference_type="PREDICTION" if prediction_id is not None else "WALLET",
            reference_id=str(prediction_id) if prediction_id is not None else None,
            created_at=datetime.now(UTC),
        )
        self.ledger.append(entry)
        return entry


class FakeSettlementRepository:
    def __init__(self) -> None:
        self.rows: dict[int, Settlement] = {}

    async def create(self, db: Any, settlement: Settlement) -> Settlement:
        self.rows[settlement.prediction_id] = replace(settlement, created_at=datetime.now(UTC))
        return replace(self.rows[settlement.prediction_id])

    async def get(self, db: Any, prediction_id: int) -> Settlement | None:
        row = self.rows.get(prediction_id)
        return replace(row) if row else None

    async def advance_cursor(self, db: Any, prediction_id: int, seq: int) -> None:
        self.rows[prediction_id].distribution_cursor = seq


class FakePayoutRepository:
    def __init__(self) -> None:
        self.rows: dict[tuple[int, str], PayoutRecord] = {}

    async def get(self, db: Any, prediction_id: int, depositor: str) -> PayoutRecord | None:
        row = self.rows.get((prediction_id, depositor))
        return replace(row) if row else None

    async def record_paid(
        self, db: Any, prediction_id: int, depositor: str, amount: int
    ) -> PayoutRecord:
        key = (prediction_id, depositor)
        existing = self.rows.get(key)
        attempts = existing.attempts + 1 if existing else 1
        self.rows[key] = PayoutRecord(
            prediction_id=prediction_id,
            depositor=depositor,
            amount=amount,
            status=PayoutStatus.PAID,
            attempts=attempts,
            paid_at=datetime.now(UTC),
        )
        return replace(self.rows[key])

    async def record_owed(
        self, db: Any, prediction_id: int, depositor: str, amount: int, reason: str
    ) -> PayoutRecord:
        key = (prediction_id, depositor)
        existing = self.rows.get(key)
        attempts = existing.attempts + 1 if existing else 1
        self.rows[key] = PayoutRecord(
            prediction_id=prediction_id,
            depositor=depositor,
            amount=amount,
            status=PayoutStatus.OWED,
            attempts=attempts,
            last_error=reason,
        )
        return replace(self.rows[key])

    async def totals(self, db: Any, prediction_id: int) -> tuple[int, int]:
        rows = [r for (pid, _), r in self.rows.items() if pid == prediction_id]
        paid = sum(r.amount for r in rows if r.status is PayoutStatus.PAID)
        owed = sum(r.amount for r in rows if r.status is PayoutStatus.OWED)
        return paid, owed


class FakeReputationRepository:
    def __init__(self) -> None:
        self.scores: dict[str, int] = {}

    async def get_score(self, db: Any, identity: str) -> int:
        return self.scores.get(identity, 0)

    async def add_score(
        self, db: Any, identity: str, delta: int, lower: int, upper: int
    ) -> int:
        self.scores[identity] = apply_delta(self.scores.get(identity, 0), delta, lower, upper)
        return self.scores[identity]


class FakeEventLog:
    def __init__(self) -> None:
        self.events: list[PredictionEvent] = []

    async def append(
        self,
        db: Any,
        prediction_id: int,
        event_type: EventType,
        payload: dict[str, Any],
    ) -> None:
        self.events.append(
            PredictionEvent(
                id=len(self.events) + 1,
                prediction_id=prediction_id,
                event_type=event_type.value,
                payload=dict(payload),
                created_at=datetime.now(UTC),
            )
        )

    async def list_for_prediction(
        self, db: Any, prediction_id: int, after_id: int | None, limit: int
    ) -> list[PredictionEvent]:
        rows = [
            e
            for e in self.events
            if e.prediction_id == prediction_id and (after_id is None or e.id > after_id)
        ]
        return rows[:limit]

    def types(self, prediction_id: int | None = None) -> list[str]:
        return [
            e.event_type
            for e in self.events
            if prediction_id is None or e.prediction_id == prediction_id
        ]


class Fakes:
    """One in-memory world shared by every service built from it."""

    def __init__(self) -> None:
        self.predictions = FakePredictionRepository()
        self.ledger = FakeStakeLedger()
        self.registry = FakeStakerRegistry(self.ledger)
        self.accounts = FakeAccountRepository()
        self.settlements = FakeSettlementRepository()
        self.payouts = FakePayoutRepository()
        self.reputation = FakeReputationRepository()
        self.events = FakeEventLog()
        self.locks = PredictionLocks()

    def prediction_service(self) -> PredictionApplicationService:
        return PredictionApplicationService(repo=self.predictions, events=self.events)

    def stake_service(self) -> StakeApplicationService:
        return StakeApplicationService(
            predictions=self.predictions,
            ledger=self.ledger,
            registry=self.registry,
            accounts=self.accounts,
            events=self.events,
            locks=self.locks,
        )

    def reputation_tracker(self) -> ReputationTracker:
        return ReputationTracker(repo=self.reputation)

    def engine(self) -> ResolutionEngine:
        return ResolutionEngine(
            predictions=self.predictions,
            ledger=self.ledger,
            registry=self.registry,
            settlements=self.settlements,
            payouts=self.payouts,
            accounts=self.accounts,
            reputation=self.reputation_tracker(),
            events=self.events,
            locks=self.locks,
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fakes() -> Fakes:
    return Fakes()


def session_mock() -> AsyncMock:
    """AsyncSession mock with a working begin_nested() savepoint."""
    session = AsyncMock()
    savepoint = AsyncMock()
    savepoint.__aenter__ = AsyncMock(return_value=None)
    savepoint.__aexit__ = AsyncMock(return_value=False)
    session.begin_nested = MagicMock(return_value=savepoint)
    return session


@pytest.fixture
def db() -> AsyncMock:
    return session_mock()


@pytest.fixture
def predictions(fakes: Fakes) -> PredictionApplicationService:
    return fakes.prediction_service()


@pytest.fixture
def stakes(fakes: Fakes) -> StakeApplicationService:
    return fakes.stake_service()


@pytest.fixture
def engine(fakes: Fakes) -> ResolutionEngine:
    return fakes.engine()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    from src.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
