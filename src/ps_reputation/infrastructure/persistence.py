"""ReputationRepository — one row per identity in reputation_scores."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_GET_SQL = text("SELECT score FROM reputation_scores WHERE identity = :identity")

# One statement, so concurrent adjustments of the same identity serialize on
# the row (or on the conflicting insert) instead of overwriting each other.
# The sum is taken in NUMERIC and clamped before it is stored as BIGINT.
_ADD_SQL = text("""
    INSERT INTO reputation_scores (identity, score)
    VALUES (
        :identity,
        LEAST(GREATEST(CAST(:delta AS BIGINT), CAST(:lower AS BIGINT)), CAST(:upper AS BIGINT))
    )
    ON CONFLICT (identity) DO UPDATE
        SET score = LEAST(
                GREATEST(
                    CAST(reputation_scores.score AS NUMERIC) + CAST(:delta AS BIGINT),
                    CAST(:lower AS BIGINT)
                ),
                CAST(:upper AS BIGINT)
            ),
            updated_at = NOW()
    RETURNING score
""")


class ReputationRepository:
    async def get_score(self, db: AsyncSession, identity: str) -> int:
        score = (await db.execute(_GET_SQL, {"identity": identity})).scalar_one_or_none()
        return int(score) if score is not None else 0

    async def add_score(
        self, db: AsyncSession, identity: str, delta: int, lower: int, upper: int
    ) -> int:
        result = await db.execute(
            _ADD_SQL,
            {"identity": identity, "delta": delta, "lower": lower, "upper": upper},
        )
        return int(result.scalar_one())
