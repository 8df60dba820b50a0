"""Unit tests for PredictionApplicationService backed by in-memory fakes."""

import pytest

from config.settings import settings
from src.ps_common.enums import EventType
from src.ps_common.errors import InvalidPredictionError, InvalidPredictionTextError
from src.ps_prediction.application.service import normalize_text


class TestNormalizeText:
    def test_strips_whitespace(self) -> None:
        assert normalize_text("  ETH above 5k by June  ") == "ETH above 5k by June"

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_empty_rejected(self, text: str) -> None:
        with pytest.raises(InvalidPredictionTextError):
            normalize_text(text)

    def test_too_long_rejected(self) -> None:
        with pytest.raises(InvalidPredictionTextError):
            normalize_text("x" * (settings.MAX_PREDICTION_TEXT_LENGTH + 1))

    def test_max_length_accepted(self) -> None:
        text = "x" * settings.MAX_PREDICTION_TEXT_LENGTH
        assert normalize_text(text) == text


class TestPostPrediction:
    async def test_ids_are_dense_from_zero(self, predictions, db) -> None:
        first = await predictions.post_prediction(db, "alice", "first")
        second = await predictions.post_prediction(db, "bob", "second")
        assert first.id == 0
        assert second.id == 1

    async def test_new_prediction_is_open_and_empty(self, predictions, db) -> None:
        view = await predictions.post_prediction(db, "alice", "BTC flips ETH")
        assert view.creator == "alice"
        assert view.text == "BTC flips ETH"
        assert view.agree_count == 0
        assert view.disagree_count == 0
        assert view.total_stake == 0
        assert view.resolved is False
        assert view.outcome is None
        db.commit.assert_awaited_once()

    async def test_emits_posted_event(self, predictions, fakes, db) -> None:
        await predictions.post_prediction(db, "alice", "it rains tomorrow")
        event = fakes.events.events[-1]
        assert event.event_type == EventType.PREDICTION_POSTED.value
        assert event.payload == {"id": 0, "creator": "alice", "text": "it rains tomorrow"}

    async def test_invalid_text_creates_nothing(self, predictions, fakes, db) -> None:
        with pytest.raises(InvalidPredictionTextError):
            await predictions.post_prediction(db, "alice", "   ")
        assert fakes.predictions.rows == []
        assert fakes.events.events == []


class TestGetPrediction:
    async def test_returns_view(self, predictions, db) -> None:
        await predictions.post_prediction(db, "alice", "one")
        view = await predictions.get_prediction(db, 0)
        assert view.id == 0
        assert view.text == "one"

    async def test_id_equal_to_store_size_is_invalid(self, predictions, db) -> None:
        await predictions.post_prediction(db, "alice", "one")
        with pytest.raises(InvalidPredictionError):
            await predictions.get_prediction(db, 1)

    async def test_negative_id_is_invalid(self, predictions, db) -> None:
        with pytest.raises(InvalidPredictionError):
            await predictions.get_prediction(db, -1)


class TestListPredictions:
    async def test_newest_first_with_cursor(self, predictions, db) -> None:
        for i in range(5):
            await predictions.post_prediction(db, "alice", f"p{i}")

        page1 = await predictions.list_predictions(db, None, 2)
        assert [p.id for p in page1.items] == [4, 3]
        assert page1.has_more is True

        page2 = await predictions.list_predictions(db, page1.next_cursor, 2)
        assert [p.id for p in page2.items] == [2, 1]

        page3 = await predictions.list_predictions(db, page2.next_cursor, 2)
        assert [p.id for p in page3.items] == [0]
        assert page3.has_more is False
        assert page3.next_cursor is None

    async def test_empty_store(self, predictions, db) -> None:
        page = await predictions.list_predictions(db, None, 20)
        assert page.items == []
        assert page.has_more is False
