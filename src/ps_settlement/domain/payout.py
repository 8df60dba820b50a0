"""Proportional payout rules.

payout(d) = floor(stake(d) * pool / total_winning_amount)

The divisor is the value staked on the winning side, never the number of
stake events. Python ints do not overflow, so the product is exact.
"""

from src.ps_common.amounts import proportional_share
from src.ps_common.enums import Side
from src.ps_prediction.domain.models import Prediction
from src.ps_settlement.domain.models import Settlement, SettlementSummary


def freeze_settlement(prediction: Prediction) -> Settlement:
    """Build the settlement of a just-resolved prediction."""
    if not prediction.resolved or prediction.outcome is None:
        raise ValueError(f"Prediction {prediction.id} is not resolved")
    winning_side = Side.winning(prediction.outcome)
    return Settlement(
        prediction_id=prediction.id,
        outcome=prediction.outcome,
        winning_side=winning_side,
        pool=prediction.total_stake,
        total_winning_amount=prediction.side_amount(winning_side),
    )


def entitlement(settlement: Settlement, stake: int) -> int:
    return proportional_share(stake, settlement.pool, settlement.total_winning_amount)


def summarize(
    settlement: Settlement,
    winning_stakers: int,
    total_entitled: int,
    total_paid: int,
    total_deferred: int,
) -> SettlementSummary:
    nobody_won = settlement.total_winning_amount == 0
    return SettlementSummary(
        prediction_id=settlement.prediction_id,
        winning_side=settlement.winning_side,
        pool=settlement.pool,
        total_winning_amount=settlement.total_winning_amount,
        winning_stakers=winning_stakers,
        total_entitled=total_entitled,
        total_paid=total_paid,
        total_owed=total_entitled - total_paid,
        total_deferred=total_deferred,
        dust=0 if nobody_won else settlement.pool - total_entitled,
        unclaimable=settlement.pool if nobody_won else 0,
    )
