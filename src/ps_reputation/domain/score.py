"""Reputation arithmetic: signed, saturating, never wrapping."""

from config.settings import settings
from src.ps_common.amounts import clamp


def resolution_delta(outcome: bool) -> int:
    """Score change for a creator whose prediction resolved to ``outcome``."""
    if outcome:
        return settings.REPUTATION_RESOLVE_TRUE_DELTA
    return settings.REPUTATION_RESOLVE_FALSE_DELTA


def apply_delta(
    score: int,
    delta: int,
    lower: int | None = None,
    upper: int | None = None,
) -> int:
    """score + delta, saturated to [lower, upper] (defaults: BIGINT bounds)."""
    lo = settings.REPUTATION_MIN if lower is None else lower
    hi = settings.REPUTATION_MAX if upper is None else upper
    return clamp(score + delta, lo, hi)
