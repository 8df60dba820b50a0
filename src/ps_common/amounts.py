"""Integer arithmetic for stake amounts.

All amounts, pools and balances are int minor units. No float, no Decimal.
Python ints are arbitrary precision, so ``stake * pool`` never overflows.
"""

# Largest value a PostgreSQL BIGINT column (account balances, ids) can hold.
BIGINT_MAX = 2**63 - 1


def amount_to_display(amount: int) -> str:
    """Render minor units with two decimals: 6500 -> '65.00', -1200 -> '-12.00'."""
    if amount < 0:
        return f"-{amount_to_display(-amount)}"
    return f"{amount // 100:,}.{amount % 100:02d}"


def proportional_share(stake: int, pool: int, total_winning: int) -> int:
    """floor(stake * pool / total_winning); 0 when nobody backed the winning side."""
    if total_winning <= 0 or stake <= 0:
        return 0
    return stake * pool // total_winning


def clamp(value: int, lower: int, upper: int) -> int:
    """Saturate value into [lower, upper]."""
    return max(lower, min(upper, value))
