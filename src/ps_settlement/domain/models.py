"""Domain models for ps_settlement — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.ps_common.enums import PayoutStatus, Side


@dataclass
class Settlement:
    """Pool frozen at resolution; the basis of every payout of the prediction."""

    prediction_id: int
    outcome: bool
    winning_side: Side
    pool: int                           # total_stake at resolution
    total_winning_amount: int           # value staked on winning_side
    distribution_cursor: int | None = None  # last registry seq handled by distribute
    created_at: datetime | None = None


@dataclass
class PayoutRecord:
    prediction_id: int
    depositor: str
    amount: int
    status: PayoutStatus
    attempts: int = 1
    last_error: str | None = None
    paid_at: datetime | None = None


@dataclass
class SettlementSummary:
    prediction_id: int
    winning_side: Side
    pool: int
    total_winning_amount: int
    winning_stakers: int
    total_entitled: int     # sum of floor shares over the winning registry
    total_paid: int
    total_owed: int         # entitled but not paid yet (never tried or deferred)
    total_deferred: int     # part of total_owed whose transfer already failed
    dust: int               # truncation remainder kept by the engine
    unclaimable: int        # whole pool when nobody backed the winning side


@dataclass
class DistributionReport:
    prediction_id: int
    processed: int
    paid: int
    paid_amount: int
    deferred: int
    skipped: int            # already paid through claim
    has_more: bool
