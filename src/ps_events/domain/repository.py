"""Event log Protocol — appended to inside the producing transaction."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.enums import EventType
from src.ps_events.domain.models import PredictionEvent


class EventLogProtocol(Protocol):
    async def append(
        self,
        db: AsyncSession,
        prediction_id: int,
        event_type: EventType,
        payload: dict[str, Any],
    ) -> None: ...

    async def list_for_prediction(
        self,
        db: AsyncSession,
        prediction_id: int,
        after_id: int | None,
        limit: int,
    ) -> list[PredictionEvent]: ...
