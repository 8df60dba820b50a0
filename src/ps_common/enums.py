"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class Side(str, Enum):
    AGREE = "AGREE"
    DISAGREE = "DISAGREE"

    @classmethod
    def winning(cls, outcome: bool) -> "Side":
        """Side that wins when the prediction resolves to ``outcome``."""
        return cls.AGREE if outcome else cls.DISAGREE


class PayoutStatus(str, Enum):
    PAID = "PAID"
    OWED = "OWED"


class LedgerEntryType(str, Enum):
    # External wallet movements
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    # Value moved into a prediction pool
    STAKE_DEBIT = "STAKE_DEBIT"
    # Value paid out of a resolved pool
    SETTLEMENT_PAYOUT = "SETTLEMENT_PAYOUT"


class EventType(str, Enum):
    PREDICTION_POSTED = "PredictionPosted"
    STAKED = "Staked"
    PREDICTION_RESOLVED = "PredictionResolved"
    PAYOUT_PAID = "PayoutPaid"
    PAYOUT_DEFERRED = "PayoutDeferred"
