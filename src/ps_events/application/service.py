"""EventFeedService — read-only access to a prediction's notifications."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.errors import InvalidPredictionError
from src.ps_common.pagination import cursor_decode, cursor_encode
from src.ps_events.application.schemas import EventFeedResponse, EventItem
from src.ps_events.domain.repository import EventLogProtocol
from src.ps_events.infrastructure.persistence import EventLog
from src.ps_prediction.domain.repository import PredictionRepositoryProtocol
from src.ps_prediction.infrastructure.persistence import PredictionRepository


class EventFeedService:
    def __init__(
        self,
        events: EventLogProtocol | None = None,
        predictions: PredictionRepositoryProtocol | None = None,
    ) -> None:
        self._events: EventLogProtocol = events or EventLog()
        self._predictions: PredictionRepositoryProtocol = predictions or PredictionRepository()

    async def list_events(
        self, db: AsyncSession, prediction_id: int, cursor: str | None, limit: int
    ) -> EventFeedResponse:
        if await self._predictions.get(db, prediction_id) is None:
            raise InvalidPredictionError(prediction_id)
        after_id = cursor_decode(cursor)
        events = await self._events.list_for_prediction(db, prediction_id, after_id, limit + 1)
        has_more = len(events) > limit
        page = events[:limit]
        # An exhausted feed still hands back a cursor so observers can poll for more.
        next_cursor = cursor_encode(page[-1].id) if page else cursor
        return EventFeedResponse(
            prediction_id=prediction_id,
            items=[EventItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
