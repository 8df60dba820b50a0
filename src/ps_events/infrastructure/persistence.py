"""DB helpers for prediction_events.

append() is called by the services within their transaction, so a
notification exists if and only if the operation that produced it committed.
It does not log; the services log once their commit has succeeded.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.enums import EventType
from src.ps_events.domain.models import PredictionEvent

_INSERT_EVENT_SQL = text("""
    INSERT INTO prediction_events (prediction_id, event_type, payload)
    VALUES (:prediction_id, :event_type, CAST(:payload AS JSONB))
""")

_LIST_EVENTS_SQL = text("""
    SELECT id, prediction_id, event_type, payload, created_at
    FROM prediction_events
    WHERE prediction_id = :prediction_id
      AND (CAST(:after_id AS BIGINT) IS NULL OR id > :after_id)
    ORDER BY id ASC
    LIMIT :limit
""")


class EventLog:
    async def append(
        self,
        db: AsyncSession,
        prediction_id: int,
        event_type: EventType,
        payload: dict[str, Any],
    ) -> None:
        await db.execute(
            _INSERT_EVENT_SQL,
            {
                "prediction_id": prediction_id,
                "event_type": event_type.value,
                "payload": json.dumps(payload),
            },
        )

    async def list_for_prediction(
        self,
        db: AsyncSession,
        prediction_id: int,
        after_id: int | None,
        limit: int,
    ) -> list[PredictionEvent]:
        result = await db.execute(
            _LIST_EVENTS_SQL,
            {"prediction_id": prediction_id, "after_id": after_id, "limit": limit},
        )
        return [
            PredictionEvent(
                id=row.id,  # type: ignore[attr-defined]
                prediction_id=row.prediction_id,  # type: ignore[attr-defined]
                event_type=row.event_type,  # type: ignore[attr-defined]
                payload=row.payload,  # type: ignore[attr-defined]
                created_at=row.created_at,  # type: ignore[attr-defined]
            )
            for row in result.fetchall()
        ]
