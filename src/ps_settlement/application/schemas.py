"""Pydantic schemas for ps_settlement API."""

from pydantic import BaseModel, Field, StrictBool

from src.ps_common.amounts import amount_to_display
from src.ps_common.enums import PayoutStatus, Side
from src.ps_prediction.application.schemas import PredictionView
from src.ps_settlement.domain.models import DistributionReport, PayoutRecord, SettlementSummary


class ResolveRequest(BaseModel):
    outcome: StrictBool


class DistributeRequest(BaseModel):
    limit: int | None = Field(None, ge=1, le=1000, description="Max depositors this call")


class ResolutionResponse(BaseModel):
    prediction: PredictionView
    winning_side: Side
    pool: int
    total_winning_amount: int
    creator_reputation: int


class PayoutResponse(BaseModel):
    prediction_id: int
    depositor: str
    amount: int
    amount_display: str
    status: PayoutStatus
    attempts: int

    @classmethod
    def from_record(cls, r: PayoutRecord) -> "PayoutResponse":
        return cls(
            prediction_id=r.prediction_id,
            depositor=r.depositor,
            amount=r.amount,
            amount_display=amount_to_display(r.amount),
            status=r.status,
            attempts=r.attempts,
        )


class SettlementResponse(BaseModel):
    prediction_id: int
    winning_side: Side
    pool: int
    total_winning_amount: int
    winning_stakers: int
    total_entitled: int
    total_paid: int
    total_owed: int
    total_deferred: int
    dust: int
    unclaimable: int

    @classmethod
    def from_summary(cls, s: SettlementSummary) -> "SettlementResponse":
        return cls(
            prediction_id=s.prediction_id,
            winning_side=s.winning_side,
            pool=s.pool,
            total_winning_amount=s.total_winning_amount,
            winning_stakers=s.winning_stakers,
            total_entitled=s.total_entitled,
            total_paid=s.total_paid,
            total_owed=s.total_owed,
            total_deferred=s.total_deferred,
            dust=s.dust,
            unclaimable=s.unclaimable,
        )


class DistributionResponse(BaseModel):
    prediction_id: int
    processed: int
    paid: int
    paid_amount: int
    deferred: int
    skipped: int
    has_more: bool

    @classmethod
    def from_report(cls, r: DistributionReport) -> "DistributionResponse":
        return cls(
            prediction_id=r.prediction_id,
            processed=r.processed,
            paid=r.paid,
            paid_amount=r.paid_amount,
            deferred=r.deferred,
            skipped=r.skipped,
            has_more=r.has_more,
        )
