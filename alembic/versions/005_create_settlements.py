"""005: create settlements and payouts tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settlements (
            prediction_id         BIGINT          PRIMARY KEY REFERENCES predictions (id),
            outcome               BOOLEAN         NOT NULL,
            winning_side          VARCHAR(10)     NOT NULL,
            pool                  NUMERIC(78,0)   NOT NULL,
            total_winning_amount  NUMERIC(78,0)   NOT NULL,
            distribution_cursor   BIGINT,
            created_at            TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settlements_side CHECK (winning_side IN ('AGREE', 'DISAGREE')),
            CONSTRAINT ck_settlements_winning_lte_pool CHECK (total_winning_amount <= pool)
        );
    """)
    op.execute("""
        CREATE TABLE payouts (
            prediction_id   BIGINT          NOT NULL REFERENCES settlements (prediction_id),
            depositor       VARCHAR(128)    NOT NULL,
            amount          NUMERIC(78,0)   NOT NULL,
            status          VARCHAR(10)     NOT NULL,
            attempts        INTEGER         NOT NULL DEFAULT 1,
            last_error      VARCHAR(200),
            paid_at         TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (prediction_id, depositor),
            CONSTRAINT ck_payouts_status CHECK (status IN ('PAID', 'OWED')),
            CONSTRAINT ck_payouts_amount_gte_0 CHECK (amount >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_payouts_owed ON payouts (prediction_id) WHERE status = 'OWED';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payouts CASCADE;")
    op.execute("DROP TABLE IF EXISTS settlements CASCADE;")
