"""Domain models for ps_stake — StakeLedger balances and StakerRegistry entries."""

from dataclasses import dataclass

from src.ps_common.enums import Side


@dataclass
class StakerEntry:
    """One registry member joined with its ledger balance.

    seq orders members of the same (prediction, side) by first stake.
    """

    seq: int
    prediction_id: int
    side: Side
    depositor: str
    amount: int


@dataclass
class Positions:
    prediction_id: int
    depositor: str
    agree_amount: int = 0
    disagree_amount: int = 0
