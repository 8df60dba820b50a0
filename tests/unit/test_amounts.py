"""Unit tests for integer amount helpers."""

from src.ps_common.amounts import amount_to_display, clamp, proportional_share


class TestAmountToDisplay:
    def test_basic(self) -> None:
        assert amount_to_display(6500) == "65.00"

    def test_small(self) -> None:
        assert amount_to_display(5) == "0.05"

    def test_thousands_separator(self) -> None:
        assert amount_to_display(123456789) == "1,234,567.89"

    def test_negative(self) -> None:
        assert amount_to_display(-1200) == "-12.00"


class TestProportionalShare:
    def test_exact_division(self) -> None:
        assert proportional_share(100, 800, 400) == 200
        assert proportional_share(300, 800, 400) == 600

    def test_floors(self) -> None:
        # 1 * 10 / 3 = 3.33 -> 3
        assert proportional_share(1, 10, 3) == 3

    def test_zero_winning_total(self) -> None:
        assert proportional_share(100, 800, 0) == 0

    def test_zero_stake(self) -> None:
        assert proportional_share(0, 800, 400) == 0

    def test_large_values_do_not_overflow(self) -> None:
        stake = 2**200
        pool = 2**201
        assert proportional_share(stake, pool, stake) == pool


class TestClamp:
    def test_inside(self) -> None:
        assert clamp(5, 0, 10) == 5

    def test_below(self) -> None:
        assert clamp(-5, 0, 10) == 0

    def test_above(self) -> None:
        assert clamp(15, 0, 10) == 10
