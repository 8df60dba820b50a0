# src/ps_prediction/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.enums import Side
from src.ps_prediction.domain.models import Prediction


class PredictionRepositoryProtocol(Protocol):
    async def create(self, db: AsyncSession, creator: str, text: str) -> Prediction: ...

    async def get(self, db: AsyncSession, prediction_id: int) -> Prediction | None: ...

    async def get_for_update(
        self, db: AsyncSession, prediction_id: int
    ) -> Prediction | None:
        """Row-locked read; the lock is held until the caller's transaction ends."""
        ...

    async def list_predictions(
        self, db: AsyncSession, cursor_id: int | None, limit: int
    ) -> list[Prediction]: ...

    async def record_stake(
        self, db: AsyncSession, prediction_id: int, side: Side, amount: int
    ) -> Prediction: ...

    async def mark_resolved(
        self, db: AsyncSession, prediction_id: int, outcome: bool
    ) -> Prediction: ...
