"""004: create stake_balances and staker_registry tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE stake_balances (
            prediction_id   BIGINT          NOT NULL REFERENCES predictions (id),
            side            VARCHAR(10)     NOT NULL,
            depositor       VARCHAR(128)    NOT NULL,
            amount          NUMERIC(78,0)   NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (prediction_id, side, depositor),
            CONSTRAINT ck_stake_balances_side CHECK (side IN ('AGREE', 'DISAGREE')),
            CONSTRAINT ck_stake_balances_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_stake_balances_updated_at
            BEFORE UPDATE ON stake_balances
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE staker_registry (
            seq             BIGSERIAL       PRIMARY KEY,
            prediction_id   BIGINT          NOT NULL REFERENCES predictions (id),
            side            VARCHAR(10)     NOT NULL,
            depositor       VARCHAR(128)    NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_staker_registry UNIQUE (prediction_id, side, depositor),
            CONSTRAINT ck_staker_registry_side CHECK (side IN ('AGREE', 'DISAGREE'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_staker_registry_walk
        ON staker_registry (prediction_id, side, seq);
    """)
    op.execute("COMMENT ON TABLE staker_registry IS 'Distinct depositors per side, insertion ordered';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS staker_registry CASCADE;")
    op.execute("DROP TABLE IF EXISTS stake_balances CASCADE;")
