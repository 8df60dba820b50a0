"""Pydantic schemas for ps_prediction API.

PredictionView is the read contract handed to the presentation layer:
aggregate counts and totals only, never per-depositor ledger data.
"""

from pydantic import BaseModel, ConfigDict

from src.ps_common.amounts import amount_to_display
from src.ps_prediction.domain.models import Prediction


class PostPredictionRequest(BaseModel):
    text: str


class PredictionView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    creator: str
    text: str
    agree_count: int
    disagree_count: int
    total_stake: int
    total_stake_display: str
    resolved: bool
    outcome: bool | None

    @classmethod
    def from_domain(cls, p: Prediction) -> "PredictionView":
        return cls(
            id=p.id,
            creator=p.creator,
            text=p.text,
            agree_count=p.agree_count,
            disagree_count=p.disagree_count,
            total_stake=p.total_stake,
            total_stake_display=amount_to_display(p.total_stake),
            resolved=p.resolved,
            outcome=p.outcome if p.resolved else None,
        )


class PredictionListResponse(BaseModel):
    items: list[PredictionView]
    next_cursor: str | None
    has_more: bool
