"""Domain models for ps_prediction — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.ps_common.enums import Side


@dataclass
class Prediction:
    id: int                      # insertion index, starts at 0
    creator: str
    text: str
    agree_count: int = 0         # stake events, not distinct depositors
    disagree_count: int = 0
    agree_amount: int = 0        # value staked per side
    disagree_amount: int = 0
    total_stake: int = 0         # == agree_amount + disagree_amount
    resolved: bool = False
    outcome: bool | None = None  # meaningful only when resolved
    created_at: datetime | None = None
    resolved_at: datetime | None = None

    def side_amount(self, side: Side) -> int:
        return self.agree_amount if side is Side.AGREE else self.disagree_amount
