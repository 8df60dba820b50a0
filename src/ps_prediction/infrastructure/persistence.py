"""PredictionRepository — raw SQL against the predictions table.

Ids are dense insertion indexes handed out by the single-row
prediction_sequence table. Unlike a SEQUENCE, the counter update rolls back
with a failed transaction, so no id is ever skipped.

record_stake and mark_resolved only touch unresolved rows; zero rows
returned means the prediction was resolved concurrently.

Ids outside the BIGINT column range cannot name a row, so lookups answer
None for them without binding the value.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.amounts import BIGINT_MAX
from src.ps_common.enums import Side
from src.ps_common.errors import AlreadyResolvedError
from src.ps_prediction.domain.models import Prediction

_COLUMNS = """
    id, creator, text,
    agree_count, disagree_count, agree_amount, disagree_amount, total_stake,
    resolved, outcome, created_at, resolved_at
"""

_NEXT_ID_SQL = text("""
    UPDATE prediction_sequence
    SET next_id = next_id + 1
    RETURNING next_id - 1 AS id
""")

_INSERT_SQL = text(f"""
    INSERT INTO predictions (id, creator, text)
    VALUES (:id, :creator, :text)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM predictions WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM predictions WHERE id = :id FOR UPDATE")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM predictions
    WHERE (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_RECORD_AGREE_SQL = text(f"""
    UPDATE predictions
    SET agree_count = agree_count + 1,
        agree_amount = agree_amount + :amount,
        total_stake = total_stake + :amount
    WHERE id = :id AND NOT resolved
    RETURNING {_COLUMNS}
""")

_RECORD_DISAGREE_SQL = text(f"""
    UPDATE predictions
    SET disagree_count = disagree_count + 1,
        disagree_amount = disagree_amount + :amount,
        total_stake = total_stake + :amount
    WHERE id = :id AND NOT resolved
    RETURNING {_COLUMNS}
""")

_RESOLVE_SQL = text(f"""
    UPDATE predictions
    SET resolved = TRUE,
        outcome = :outcome,
        resolved_at = NOW()
    WHERE id = :id AND NOT resolved
    RETURNING {_COLUMNS}
""")


def _row_to_prediction(row: object) -> Prediction:
    return Prediction(
        id=row.id,  # type: ignore[attr-defined]
        creator=row.creator,  # type: ignore[attr-defined]
        text=row.text,  # type: ignore[attr-defined]
        agree_count=row.agree_count,  # type: ignore[attr-defined]
        disagree_count=row.disagree_count,  # type: ignore[attr-defined]
        agree_amount=int(row.agree_amount),  # type: ignore[attr-defined]
        disagree_amount=int(row.disagree_amount),  # type: ignore[attr-defined]
        total_stake=int(row.total_stake),  # type: ignore[attr-defined]
        resolved=row.resolved,  # type: ignore[attr-defined]
        outcome=row.outcome,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
    )


def _storable_id(prediction_id: int) -> bool:
    return 0 <= prediction_id <= BIGINT_MAX


class PredictionRepository:
    async def create(self, db: AsyncSession, creator: str, text: str) -> Prediction:
        next_id = (await db.execute(_NEXT_ID_SQL)).scalar_one()
        result = await db.execute(_INSERT_SQL, {"id": next_id, "creator": creator, "text": text})
        return _row_to_prediction(result.fetchone())

    async def get(self, db: AsyncSession, prediction_id: int) -> Prediction | None:
        if not _storable_id(prediction_id):
            return None
        row = (await db.execute(_GET_SQL, {"id": prediction_id})).fetchone()
        return _row_to_prediction(row) if row else None

    async def get_for_update(
        self, db: AsyncSession, prediction_id: int
    ) -> Prediction | None:
        if not _storable_id(prediction_id):
            return None
        row = (await db.execute(_GET_FOR_UPDATE_SQL, {"id": prediction_id})).fetchone()
        return _row_to_prediction(row) if row else None

    async def list_predictions(
        self, db: AsyncSession, cursor_id: int | None, limit: int
    ) -> list[Prediction]:
        result = await db.execute(_LIST_SQL, {"cursor_id": cursor_id, "limit": limit})
        return [_row_to_prediction(row) for row in result.fetchall()]

    async def record_stake(
        self, db: AsyncSession, prediction_id: int, side: Side, amount: int
    ) -> Prediction:
        sql = _RECORD_AGREE_SQL if side is Side.AGREE else _RECORD_DISAGREE_SQL
        row = (await db.execute(sql, {"id": prediction_id, "amount": amount})).fetchone()
        if row is None:
            raise AlreadyResolvedError(prediction_id)
        return _row_to_prediction(row)

    async def mark_resolved(
        self, db: AsyncSession, prediction_id: int, outcome: bool
    ) -> Prediction:
        row = (await db.execute(_RESOLVE_SQL, {"id": prediction_id, "outcome": outcome})).fetchone()
        if row is None:
            raise AlreadyResolvedError(prediction_id)
        return _row_to_prediction(row)
