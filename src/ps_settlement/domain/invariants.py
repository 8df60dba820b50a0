"""Settlement conservation checks. Raise AssertionError if violated.

INV-S1: total_paid + total_owed + dust + unclaimable == pool
INV-S2: total_entitled <= pool
INV-S3: dust < number of winning stakers (each floor loses less than 1)
INV-S4: 0 <= total_deferred <= total_owed
"""

import logging

from src.ps_settlement.domain.models import SettlementSummary

logger = logging.getLogger(__name__)


def verify_settlement_conservation(s: SettlementSummary) -> None:
    accounted = s.total_paid + s.total_owed + s.dust + s.unclaimable
    assert accounted == s.pool, (
        f"INV-S1 violated: paid({s.total_paid}) + owed({s.total_owed}) + dust({s.dust})"
        f" + unclaimable({s.unclaimable}) = {accounted} != pool={s.pool}"
    )
    assert s.total_entitled <= s.pool, (
        f"INV-S2 violated: entitled={s.total_entitled} > pool={s.pool}"
    )
    if s.winning_stakers:
        assert 0 <= s.dust < s.winning_stakers, (
            f"INV-S3 violated: dust={s.dust} with {s.winning_stakers} winning stakers"
        )
    assert 0 <= s.total_deferred <= s.total_owed, (
        f"INV-S4 violated: deferred={s.total_deferred} owed={s.total_owed}"
    )
    logger.debug(
        "Settlement invariants OK: prediction=%d pool=%d paid=%d owed=%d dust=%d",
        s.prediction_id, s.pool, s.total_paid, s.total_owed, s.dust,
    )
