"""Settlement and payout repositories — raw SQL.

settlements: one row per resolved prediction, written in the resolving
transaction. payouts: one row per (prediction, depositor) once a transfer
has been attempted; PAID is terminal, OWED can be retried.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.enums import PayoutStatus, Side
from src.ps_settlement.domain.models import PayoutRecord, Settlement

_SETTLEMENT_COLUMNS = """
    prediction_id, outcome, winning_side, pool, total_winning_amount,
    distribution_cursor, created_at
"""

_INSERT_SETTLEMENT_SQL = text(f"""
    INSERT INTO settlements (prediction_id, outcome, winning_side, pool, total_winning_amount)
    VALUES (:prediction_id, :outcome, :winning_side, :pool, :total_winning_amount)
    RETURNING {_SETTLEMENT_COLUMNS}
""")

_GET_SETTLEMENT_SQL = text(
    f"SELECT {_SETTLEMENT_COLUMNS} FROM settlements WHERE prediction_id = :prediction_id"
)

_ADVANCE_CURSOR_SQL = text("""
    UPDATE settlements
    SET distribution_cursor = :seq
    WHERE prediction_id = :prediction_id
""")

_PAYOUT_COLUMNS = "prediction_id, depositor, amount, status, attempts, last_error, paid_at"

_GET_PAYOUT_SQL = text(f"""
    SELECT {_PAYOUT_COLUMNS} FROM payouts
    WHERE prediction_id = :prediction_id AND depositor = :depositor
""")

_UPSERT_PAID_SQL = text(f"""
    INSERT INTO payouts (prediction_id, depositor, amount, status, attempts, paid_at)
    VALUES (:prediction_id, :depositor, :amount, 'PAID', 1, NOW())
    ON CONFLICT (prediction_id, depositor) DO UPDATE
        SET status = 'PAID',
            amount = EXCLUDED.amount,
            attempts = payouts.attempts + 1,
            last_error = NULL,
            paid_at = NOW()
        WHERE payouts.status = 'OWED'
    RETURNING {_PAYOUT_COLUMNS}
""")

_UPSERT_OWED_SQL = text(f"""
    INSERT INTO payouts (prediction_id, depositor, amount, status, attempts, last_error)
    VALUES (:prediction_id, :depositor, :amount, 'OWED', 1, :reason)
    ON CONFLICT (prediction_id, depositor) DO UPDATE
        SET attempts = payouts.attempts + 1,
            last_error = EXCLUDED.last_error
        WHERE payouts.status = 'OWED'
    RETURNING {_PAYOUT_COLUMNS}
""")

_TOTALS_SQL = text("""
    SELECT
        COALESCE(SUM(amount) FILTER (WHERE status = 'PAID'), 0) AS paid,
        COALESCE(SUM(amount) FILTER (WHERE status = 'OWED'), 0) AS owed
    FROM payouts
    WHERE prediction_id = :prediction_id
""")


def _row_to_settlement(row: object) -> Settlement:
    return Settlement(
        prediction_id=row.prediction_id,  # type: ignore[attr-defined]
        outcome=row.outcome,  # type: ignore[attr-defined]
        winning_side=Side(row.winning_side),  # type: ignore[attr-defined]
        pool=int(row.pool),  # type: ignore[attr-defined]
        total_winning_amount=int(row.total_winning_amount),  # type: ignore[attr-defined]
        distribution_cursor=row.distribution_cursor,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_payout(row: object) -> PayoutRecord:
    return PayoutRecord(
        prediction_id=row.prediction_id,  # type: ignore[attr-defined]
        depositor=row.depositor,  # type: ignore[attr-defined]
        amount=int(row.amount),  # type: ignore[attr-defined]
        status=PayoutStatus(row.status),  # type: ignore[attr-defined]
        attempts=row.attempts,  # type: ignore[attr-defined]
        last_error=row.last_error,  # type: ignore[attr-defined]
        paid_at=row.paid_at,  # type: ignore[attr-defined]
    )


class SettlementRepository:
    async def create(self, db: AsyncSession, settlement: Settlement) -> Settlement:
        result = await db.execute(
            _INSERT_SETTLEMENT_SQL,
            {
                "prediction_id": settlement.prediction_id,
                "outcome": settlement.outcome,
                "winning_side": settlement.winning_side.value,
                "pool": settlement.pool,
                "total_winning_amount": settlement.total_winning_amount,
            },
        )
        return _row_to_settlement(result.fetchone())

    async def get(self, db: AsyncSession, prediction_id: int) -> Settlement | None:
        row = (await db.execute(_GET_SETTLEMENT_SQL, {"prediction_id": prediction_id})).fetchone()
        return _row_to_settlement(row) if row else None

    async def advance_cursor(self, db: AsyncSession, prediction_id: int, seq: int) -> None:
        await db.execute(_ADVANCE_CURSOR_SQL, {"prediction_id": prediction_id, "seq": seq})


class PayoutRepository:
    async def get(
        self, db: AsyncSession, prediction_id: int, depositor: str
    ) -> PayoutRecord | None:
        row = (
            await db.execute(
                _GET_PAYOUT_SQL, {"prediction_id": prediction_id, "depositor": depositor}
            )
        ).fetchone()
        return _row_to_payout(row) if row else None

    async def record_paid(
        self, db: AsyncSession, prediction_id: int, depositor: str, amount: int
    ) -> PayoutRecord:
        result = await db.execute(
            _UPSERT_PAID_SQL,
            {"prediction_id": prediction_id, "depositor": depositor, "amount": amount},
        )
        return _row_to_payout(result.fetchone())

    async def record_owed(
        self, db: AsyncSession, prediction_id: int, depositor: str, amount: int, reason: str
    ) -> PayoutRecord:
        result = await db.execute(
            _UPSERT_OWED_SQL,
            {
                "prediction_id": prediction_id,
                "depositor": depositor,
                "amount": amount,
                "reason": reason,
            },
        )
        return _row_to_payout(result.fetchone())

    async def totals(self, db: AsyncSession, prediction_id: int) -> tuple[int, int]:
        row = (await db.execute(_TOTALS_SQL, {"prediction_id": prediction_id})).fetchone()
        return int(row.paid), int(row.owed)  # type: ignore[union-attr]
