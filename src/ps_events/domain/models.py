"""Notification records emitted for external observers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class PredictionEvent:
    id: int
    prediction_id: int
    event_type: str              # EventType value
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
