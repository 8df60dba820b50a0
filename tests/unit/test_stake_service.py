"""Unit tests for StakeApplicationService backed by in-memory fakes."""

import logging

import pytest

from src.ps_common.enums import EventType, Side
from src.ps_common.errors import (
    AlreadyResolvedError,
    InsufficientBalanceError,
    InvalidPredictionError,
    ZeroAmountError,
)
from src.ps_prediction.domain.models import Prediction
from src.ps_stake.domain.rules import check_stake_allowed


@pytest.fixture
async def open_prediction(fakes, predictions, db):
    for identity in ("bob", "carol", "dave"):
        await fakes.accounts.deposit(db, identity, 10_000)
    return await predictions.post_prediction(db, "alice", "it ships on time")


class TestCheckStakeAllowed:
    def test_missing_prediction_wins_over_bad_amount(self) -> None:
        with pytest.raises(InvalidPredictionError):
            check_stake_allowed(9, None, 0)

    def test_bad_amount_wins_over_resolved(self) -> None:
        p = Prediction(id=0, creator="a", text="t", resolved=True, outcome=True)
        with pytest.raises(ZeroAmountError):
            check_stake_allowed(0, p, 0)

    def test_resolved(self) -> None:
        p = Prediction(id=0, creator="a", text="t", resolved=True, outcome=False)
        with pytest.raises(AlreadyResolvedError):
            check_stake_allowed(0, p, 5)

    def test_open_prediction_passes(self) -> None:
        p = Prediction(id=0, creator="a", text="t")
        assert check_stake_allowed(0, p, 5) is p


class TestStake:
    async def test_updates_totals_and_counts(self, stakes, open_prediction, db) -> None:
        await stakes.stake(db, 0, "bob", Side.AGREE, 100)
        await stakes.stake(db, 0, "carol", Side.AGREE, 300)
        receipt = await stakes.stake(db, 0, "dave", Side.DISAGREE, 400)

        view = receipt.prediction
        assert view.agree_count == 2
        assert view.disagree_count == 1
        assert view.total_stake == 800

    async def test_debits_account_and_returns_balances(
        self, stakes, fakes, open_prediction, db
    ) -> None:
        receipt = await stakes.stake(db, 0, "bob", Side.AGREE, 100)
        assert receipt.side_balance == 100
        assert receipt.available_balance == 9_900
        assert fakes.accounts.balance("bob") == 9_900

    async def test_repeat_stake_accumulates_and_registers_once(
        self, stakes, fakes, open_prediction, db
    ) -> None:
        await stakes.stake(db, 0, "bob", Side.AGREE, 100)
        receipt = await stakes.stake(db, 0, "bob", Side.AGREE, 50)

        assert receipt.side_balance == 150
        assert receipt.prediction.agree_count == 2  # counts stake events
        stakers = await fakes.registry.list_stakers(db, 0, Side.AGREE, None, 10)
        assert [(s.depositor, s.amount) for s in stakers] == [("bob", 150)]

    async def test_both_sides_tracked_separately(self, stakes, open_prediction, db) -> None:
        await stakes.stake(db, 0, "bob", Side.AGREE, 100)
        await stakes.stake(db, 0, "bob", Side.DISAGREE, 40)
        positions = await stakes.get_positions(db, 0, "bob")
        assert positions.agree_amount == 100
        assert positions.disagree_amount == 40

    async def test_emits_staked_event(self, stakes, fakes, open_prediction, db) -> None:
        await stakes.stake(db, 0, "bob", Side.AGREE, 100)
        event = fakes.events.events[-1]
        assert event.event_type == EventType.STAKED.value
        assert event.payload == {"id": 0, "depositor": "bob", "side": "AGREE", "amount": 100}
        db.commit.assert_awaited()

    @pytest.mark.parametrize("amount", [0, -5])
    async def test_non_positive_amount(self, stakes, fakes, open_prediction, db, amount) -> None:
        with pytest.raises(ZeroAmountError):
            await stakes.stake(db, 0, "bob", Side.AGREE, amount)
        assert fakes.accounts.balance("bob") == 10_000
        db.rollback.assert_awaited()

    async def test_unknown_prediction(self, stakes, fakes, open_prediction, db) -> None:
        with pytest.raises(InvalidPredictionError):
            await stakes.stake(db, 1, "bob", Side.AGREE, 100)
        assert fakes.accounts.balance("bob") == 10_000

    async def test_insufficient_balance(self, stakes, fakes, open_prediction, db) -> None:
        with pytest.raises(InsufficientBalanceError):
            await stakes.stake(db, 0, "bob", Side.AGREE, 10_001)
        prediction = await fakes.predictions.get(db, 0)
        assert prediction.total_stake == 0

    async def test_amount_beyond_bigint_is_insufficient_balance(
        self, stakes, fakes, open_prediction, db
    ) -> None:
        with pytest.raises(InsufficientBalanceError):
            await stakes.stake(db, 0, "bob", Side.AGREE, 2**63)
        assert fakes.accounts.balance("bob") == 10_000

    async def test_unknown_ids_leave_no_lock_behind(
        self, stakes, fakes, open_prediction, db
    ) -> None:
        for prediction_id in (1, 2**63, 10**20):
            with pytest.raises(InvalidPredictionError):
                await stakes.stake(db, prediction_id, "bob", Side.AGREE, 100)
        await stakes.stake(db, 0, "bob", Side.AGREE, 100)
        assert fakes.locks.active() == 0

    async def test_logged_only_once_committed(
        self, stakes, fakes, open_prediction, db, caplog
    ) -> None:
        caplog.set_level(logging.INFO, logger="src.ps_stake.application.service")
        with pytest.raises(InsufficientBalanceError):
            await stakes.stake(db, 0, "bob", Side.AGREE, 10_001)
        assert "Stake applied" not in caplog.text

        await stakes.stake(db, 0, "bob", Side.AGREE, 100)
        assert "Stake applied: prediction=0 depositor=bob" in caplog.text

    async def test_resolved_prediction_leaves_everything_unchanged(
        self, stakes, engine, fakes, open_prediction, db
    ) -> None:
        await stakes.stake(db, 0, "bob", Side.AGREE, 100)
        await engine.resolve(db, 0, True, "alice")
        events_before = len(fakes.events.events)

        with pytest.raises(AlreadyResolvedError):
            await stakes.stake(db, 0, "carol", Side.DISAGREE, 100)

        prediction = await fakes.predictions.get(db, 0)
        assert prediction.total_stake == 100
        assert prediction.disagree_count == 0
        assert fakes.accounts.balance("carol") == 10_000
        assert await fakes.ledger.get_balance(db, 0, Side.DISAGREE, "carol") == 0
        assert len(fakes.events.events) == events_before


class TestGetPositions:
    async def test_no_stake_is_zero(self, stakes, open_prediction, db) -> None:
        positions = await stakes.get_positions(db, 0, "nobody")
        assert positions.agree_amount == 0
        assert positions.disagree_amount == 0

    async def test_unknown_prediction(self, stakes, db) -> None:
        with pytest.raises(InvalidPredictionError):
            await stakes.get_positions(db, 0, "bob")
