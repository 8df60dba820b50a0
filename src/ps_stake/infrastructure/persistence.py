"""StakeLedger and StakerRegistry — raw SQL repositories.

stake_balances holds one row per (prediction, side, depositor);
staker_registry holds one row per distinct depositor per (prediction, side)
with a BIGSERIAL seq giving insertion order. Callers hold the prediction
row lock, so neither table needs its own locking.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ps_common.enums import Side
from src.ps_stake.domain.models import Positions, StakerEntry

_ADD_BALANCE_SQL = text("""
    INSERT INTO stake_balances (prediction_id, side, depositor, amount)
    VALUES (:prediction_id, :side, :depositor, :amount)
    ON CONFLICT (prediction_id, side, depositor) DO UPDATE
        SET amount = stake_balances.amount + EXCLUDED.amount,
            updated_at = NOW()
    RETURNING amount
""")

_GET_BALANCE_SQL = text("""
    SELECT amount FROM stake_balances
    WHERE prediction_id = :prediction_id AND side = :side AND depositor = :depositor
""")

_GET_POSITIONS_SQL = text("""
    SELECT side, amount FROM stake_balances
    WHERE prediction_id = :prediction_id AND depositor = :depositor
""")

# DIV truncates, which is floor for the non-negative operands here. An empty
# side sums to 0 without evaluating the division.
_ENTITLEMENT_TOTALS_SQL = text("""
    SELECT COUNT(*) AS stakers,
           COALESCE(
               SUM(DIV(amount * CAST(:pool AS NUMERIC), CAST(:total_winning AS NUMERIC))), 0
           ) AS entitled
    FROM stake_balances
    WHERE prediction_id = :prediction_id AND side = :side
""")

_REGISTER_SQL = text("""
    INSERT INTO staker_registry (prediction_id, side, depositor)
    VALUES (:prediction_id, :side, :depositor)
    ON CONFLICT (prediction_id, side, depositor) DO NOTHING
    RETURNING seq
""")

_LIST_STAKERS_SQL = text("""
    SELECT r.seq, r.depositor, b.amount
    FROM staker_registry r
    JOIN stake_balances b
      ON b.prediction_id = r.prediction_id
     AND b.side = r.side
     AND b.depositor = r.depositor
    WHERE r.prediction_id = :prediction_id
      AND r.side = :side
      AND (CAST(:after_seq AS BIGINT) IS NULL OR r.seq > :after_seq)
    ORDER BY r.seq ASC
    LIMIT :limit
""")


class StakeLedgerRepository:
    async def add(
        self, db: AsyncSession, prediction_id: int, side: Side, depositor: str, amount: int
    ) -> int:
        result = await db.execute(
            _ADD_BALANCE_SQL,
            {
                "prediction_id": prediction_id,
                "side": side.value,
                "depositor": depositor,
                "amount": amount,
            },
        )
        return int(result.scalar_one())

    async def get_balance(
        self, db: AsyncSession, prediction_id: int, side: Side, depositor: str
    ) -> int:
        result = await db.execute(
            _GET_BALANCE_SQL,
            {"prediction_id": prediction_id, "side": side.value, "depositor": depositor},
        )
        amount = result.scalar_one_or_none()
        return int(amount) if amount is not None else 0

    async def get_positions(
        self, db: AsyncSession, prediction_id: int, depositor: str
    ) -> Positions:
        result = await db.execute(
            _GET_POSITIONS_SQL, {"prediction_id": prediction_id, "depositor": depositor}
        )
        positions = Positions(prediction_id=prediction_id, depositor=depositor)
        for side, amount in result.fetchall():
            if side == Side.AGREE.value:
                positions.agree_amount = int(amount)
            else:
                positions.disagree_amount = int(amount)
        return positions

    async def entitlement_totals(
        self,
        db: AsyncSession,
        prediction_id: int,
        side: Side,
        pool: int,
        total_winning: int,
    ) -> tuple[int, int]:
        result = await db.execute(
            _ENTITLEMENT_TOTALS_SQL,
            {
                "prediction_id": prediction_id,
                "side": side.value,
                "pool": pool,
                "total_winning": total_winning,
            },
        )
        row = result.fetchone()
        return int(row.stakers), int(row.entitled)  # type: ignore[union-attr]


class StakerRegistryRepository:
    async def register(
        self, db: AsyncSession, prediction_id: int, side: Side, depositor: str
    ) -> bool:
        result = await db.execute(
            _REGISTER_SQL,
            {"prediction_id": prediction_id, "side": side.value, "depositor": depositor},
        )
        return result.fetchone() is not None

    async def list_stakers(
        self,
        db: AsyncSession,
        prediction_id: int,
        side: Side,
        after_seq: int | None,
        limit: int,
    ) -> list[StakerEntry]:
        result = await db.execute(
            _LIST_STAKERS_SQL,
            {
                "prediction_id": prediction_id,
                "side": side.value,
                "after_seq": after_seq,
                "limit": limit,
            },
        )
        return [
            StakerEntry(
                seq=row.seq,  # type: ignore[attr-defined]
                prediction_id=prediction_id,
                side=side,
                depositor=row.depositor,  # type: ignore[attr-defined]
                amount=int(row.amount),  # type: ignore[attr-defined]
            )
            for row in result.fetchall()
        ]
