"""Pre-conditions of a stake, checked on the row-locked prediction.

Order matters: an unknown id wins over a bad amount, which wins over a
closed prediction.
"""

from src.ps_common.errors import AlreadyResolvedError, InvalidPredictionError, ZeroAmountError
from src.ps_prediction.domain.models import Prediction


def check_stake_allowed(
    prediction_id: int, prediction: Prediction | None, amount: int
) -> Prediction:
    if prediction is None:
        raise InvalidPredictionError(prediction_id)
    if amount <= 0:
        raise ZeroAmountError(amount)
    if prediction.resolved:
        raise AlreadyResolvedError(prediction_id)
    return prediction
