"""Pydantic schemas for the notification feed.

Cursor is the id of the last event seen; the feed is oldest first so an
observer can tail it.
"""

from typing import Any

from pydantic import BaseModel

from src.ps_events.domain.models import PredictionEvent


class EventItem(BaseModel):
    id: int
    event_type: str
    payload: dict[str, Any]
    created_at: str | None

    @classmethod
    def from_domain(cls, e: PredictionEvent) -> "EventItem":
        return cls(
            id=e.id,
            event_type=e.event_type,
            payload=e.payload,
            created_at=e.created_at.isoformat() if e.created_at else None,
        )


class EventFeedResponse(BaseModel):
    prediction_id: int
    items: list[EventItem]
    next_cursor: str | None
    has_more: bool
