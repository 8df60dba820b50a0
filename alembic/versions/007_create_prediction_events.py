"""007: create prediction_events table

Revision ID: 007
Revises: 006
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE prediction_events (
            id              BIGSERIAL       PRIMARY KEY,
            prediction_id   BIGINT          NOT NULL REFERENCES predictions (id),
            event_type      VARCHAR(30)     NOT NULL,
            payload         JSONB           NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_prediction_event_type CHECK (
                event_type IN (
                    'PredictionPosted',
                    'Staked',
                    'PredictionResolved',
                    'PayoutPaid',
                    'PayoutDeferred'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_prediction_events_feed ON prediction_events (prediction_id, id);")
    op.execute("COMMENT ON TABLE prediction_events IS 'Append-only notification feed';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS prediction_events CASCADE;")
