"""Pydantic schemas for ps_stake API.

amount is deliberately unconstrained here: a non-positive amount must reach
the engine and fail with ZeroAmount (4001), not a generic validation error.
"""

from pydantic import BaseModel

from src.ps_common.enums import Side
from src.ps_prediction.application.schemas import PredictionView
from src.ps_stake.domain.models import Positions


class StakeRequest(BaseModel):
    side: Side
    amount: int


class StakeReceipt(BaseModel):
    prediction: PredictionView
    depositor: str
    side: Side
    amount: int
    side_balance: int          # depositor's cumulative stake on this side
    available_balance: int     # depositor's account after the debit


class PositionsResponse(BaseModel):
    prediction_id: int
    depositor: str
    agree_amount: int
    disagree_amount: int

    @classmethod
    def from_domain(cls, p: Positions) -> "PositionsResponse":
        return cls(
            prediction_id=p.prediction_id,
            depositor=p.depositor,
            agree_amount=p.agree_amount,
            disagree_amount=p.disagree_amount,
        )
