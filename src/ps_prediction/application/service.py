"""PredictionApplicationService — the PredictionStore operations.

post_prediction commits its own transaction; reads run without one.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ps_common.enums import EventType
from src.ps_common.errors import InvalidPredictionError, InvalidPredictionTextError
from src.ps_common.pagination import cursor_decode, cursor_encode
from src.ps_events.domain.repository import EventLogProtocol
from src.ps_events.infrastructure.persistence import EventLog
from src.ps_prediction.application.schemas import PredictionListResponse, PredictionView
from src.ps_prediction.domain.repository import PredictionRepositoryProtocol
from src.ps_prediction.infrastructure.persistence import PredictionRepository

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Strip surrounding whitespace and enforce non-empty, bounded text."""
    stripped = text.strip()
    if not stripped:
        raise InvalidPredictionTextError("text must not be empty")
    if len(stripped) > settings.MAX_PREDICTION_TEXT_LENGTH:
        raise InvalidPredictionTextError(
            f"text longer than {settings.MAX_PREDICTION_TEXT_LENGTH} characters"
        )
    return stripped


class PredictionApplicationService:
    def __init__(
        self,
        repo: PredictionRepositoryProtocol | None = None,
        events: EventLogProtocol | None = None,
    ) -> None:
        self._repo: PredictionRepositoryProtocol = repo or PredictionRepository()
        self._events: EventLogProtocol = events or EventLog()

    async def post_prediction(
        self, db: AsyncSession, creator: str, text: str
    ) -> PredictionView:
        body = normalize_text(text)
        try:
            prediction = await self._repo.create(db, creator, body)
            await self._events.append(
                db,
                prediction.id,
                EventType.PREDICTION_POSTED,
                {"id": prediction.id, "creator": creator, "text": body},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Prediction posted: id=%d creator=%s", prediction.id, creator)
        return PredictionView.from_domain(prediction)

    async def get_prediction(self, db: AsyncSession, prediction_id: int) -> PredictionView:
        prediction = await self._repo.get(db, prediction_id)
        if prediction is None:
            raise InvalidPredictionError(prediction_id)
        return PredictionView.from_domain(prediction)

    async def list_predictions(
        self, db: AsyncSession, cursor: str | None, limit: int
    ) -> PredictionListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without COUNT(*)
        predictions = await self._repo.list_predictions(db, cursor_id, limit + 1)
        has_more = len(predictions) > limit
        page = predictions[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return PredictionListResponse(
            items=[PredictionView.from_domain(p) for p in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
