"""003: create predictions and prediction_sequence tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Single-row counter: ids are dense and start at 0.
    op.execute("""
        CREATE TABLE prediction_sequence (
            singleton   BOOLEAN PRIMARY KEY DEFAULT TRUE,
            next_id     BIGINT  NOT NULL,
            CONSTRAINT ck_prediction_sequence_singleton CHECK (singleton)
        );
    """)
    op.execute("INSERT INTO prediction_sequence (singleton, next_id) VALUES (TRUE, 0);")
    op.execute("""
        CREATE TABLE predictions (
            id                BIGINT        PRIMARY KEY,
            creator           VARCHAR(128)  NOT NULL,
            text              TEXT          NOT NULL,
            agree_count       BIGINT        NOT NULL DEFAULT 0,
            disagree_count    BIGINT        NOT NULL DEFAULT 0,
            agree_amount      NUMERIC(78,0) NOT NULL DEFAULT 0,
            disagree_amount   NUMERIC(78,0) NOT NULL DEFAULT 0,
            total_stake       NUMERIC(78,0) NOT NULL DEFAULT 0,
            resolved          BOOLEAN       NOT NULL DEFAULT FALSE,
            outcome           BOOLEAN,
            created_at        TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            resolved_at       TIMESTAMPTZ,
            CONSTRAINT ck_predictions_text_not_empty CHECK (length(btrim(text)) > 0),
            CONSTRAINT ck_predictions_total CHECK (total_stake = agree_amount + disagree_amount),
            CONSTRAINT ck_predictions_outcome CHECK (resolved = (outcome IS NOT NULL))
        );
    """)
    op.execute("CREATE INDEX idx_predictions_creator ON predictions (creator, id DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS predictions CASCADE;")
    op.execute("DROP TABLE IF EXISTS prediction_sequence CASCADE;")
