"""Pydantic schemas for ps_account API."""

from pydantic import BaseModel, Field

from src.ps_account.domain.models import Account, LedgerEntry
from src.ps_common.amounts import BIGINT_MAX, amount_to_display

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepositRequest(BaseModel):
    amount: int = Field(..., gt=0, le=BIGINT_MAX, description="Amount to deposit in minor units")


class WithdrawRequest(BaseModel):
    amount: int = Field(..., gt=0, le=BIGINT_MAX, description="Amount to withdraw in minor units")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    identity: str
    available_balance: int
    available_balance_display: str
    is_active: bool

    @classmethod
    def from_account(cls, account: Account) -> "BalanceResponse":
        return cls(
            identity=account.identity,
            available_balance=account.available_balance,
            available_balance_display=amount_to_display(account.available_balance),
            is_active=account.is_active,
        )


class MovementResponse(BaseModel):
    """Result of a deposit or withdrawal."""

    amount: int
    available_balance: int
    available_balance_display: str
    ledger_entry_id: int


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    amount_display: str
    balance_after: int
    reference_type: str | None
    reference_id: str | None
    description: str | None
    created_at: str

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            entry_type=e.entry_type,
            amount=e.amount,
            amount_display=amount_to_display(e.amount),
            balance_after=e.balance_after,
            reference_type=e.reference_type,
            reference_id=e.reference_id,
            description=e.description,
            created_at=e.created_at.isoformat() if e.created_at else "",
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
