"""Repository Protocol for per-identity reputation scores."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession


class ReputationRepositoryProtocol(Protocol):
    async def get_score(self, db: AsyncSession, identity: str) -> int:
        """0 for identities with no recorded score."""
        ...

    async def add_score(
        self, db: AsyncSession, identity: str, delta: int, lower: int, upper: int
    ) -> int:
        """Atomically add delta (a missing row counts as 0), saturate to
        [lower, upper] and return the stored score."""
        ...
