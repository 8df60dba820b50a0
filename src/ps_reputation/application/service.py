"""ReputationTracker — per-creator score.

adjust() runs inside the caller's transaction (resolution) and never
commits on its own. The read, add and write happen in one SQL statement.
"""

import logging

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ps_reputation.domain.repository import ReputationRepositoryProtocol
from src.ps_reputation.infrastructure.persistence import ReputationRepository

logger = logging.getLogger(__name__)


class ReputationView(BaseModel):
    identity: str
    score: int


class ReputationTracker:
    def __init__(self, repo: ReputationRepositoryProtocol | None = None) -> None:
        self._repo: ReputationRepositoryProtocol = repo or ReputationRepository()

    async def adjust(self, db: AsyncSession, creator: str, delta: int) -> int:
        lower, upper = settings.REPUTATION_MIN, settings.REPUTATION_MAX
        updated = await self._repo.add_score(db, creator, delta, lower, upper)
        if (delta > 0 and updated == upper) or (delta < 0 and updated == lower):
            logger.warning(
                "Reputation saturated: identity=%s delta=%d -> %d", creator, delta, updated
            )
        return updated

    async def get(self, db: AsyncSession, identity: str) -> ReputationView:
        score = await self._repo.get_score(db, identity)
        return ReputationView(identity=identity, score=score)
