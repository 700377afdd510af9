"""
Tests for novi_sdk.split module.

Tests exact cent allocation of split totals and the decimal conversions
between user amounts, cents and asset base units.
"""

from decimal import Decimal

import pytest

from novi_sdk.split import (
    allocate,
    cents_to_amount,
    from_base_units,
    shortfall,
    to_base_units,
    to_cents,
    to_decimal,
    uniform_share,
)


class TestAllocate:
    """Tests for allocate function."""

    def test_three_way_split(self):
        """Test that the extra cent goes to the first share."""
        assert allocate("10.00", 3) == [334, 333, 333]

    def test_four_way_split(self):
        """Test a remainder of three cents."""
        assert allocate("9.99", 4) == [250, 250, 250, 249]

    def test_even_split(self):
        """Test a total that divides evenly."""
        assert allocate("12.00", 4) == [300, 300, 300, 300]

    def test_single_participant(self):
        """Test that one participant receives the whole total."""
        assert allocate("5", 1) == [500]

    def test_zero_total(self):
        """Test that a zero total yields zero shares."""
        assert allocate(0, 3) == [0, 0, 0]

    def test_fewer_cents_than_participants(self):
        """Test that some shares may be zero for tiny totals."""
        assert allocate("0.01", 3) == [1, 0, 0]

    def test_accepts_decimal_and_float(self):
        """Test numeric input types."""
        assert allocate(Decimal("10.00"), 3) == [334, 333, 333]
        assert allocate(10.0, 3) == [334, 333, 333]
        assert allocate(0.3, 3) == [10, 10, 10]

    @pytest.mark.parametrize("total", ["0.01", "1", "7.77", "100.03", "12345.67", "0.99"])
    @pytest.mark.parametrize("split_count", [1, 2, 3, 4, 5, 6, 7, 13])
    def test_shares_sum_to_total(self, total, split_count):
        """Test that shares always sum to the total and differ by at most one cent."""
        shares = allocate(total, split_count)

        assert len(shares) == split_count
        assert sum(shares) == to_cents(total)
        assert max(shares) - min(shares) <= 1
        assert shares == sorted(shares, reverse=True)

    @pytest.mark.parametrize("split_count", [0, -1])
    def test_rejects_non_positive_count(self, split_count):
        """Test that split_count must be at least one."""
        with pytest.raises(ValueError):
            allocate("10.00", split_count)

    @pytest.mark.parametrize("split_count", ["3", 2.0, True])
    def test_rejects_non_integer_count(self, split_count):
        """Test that split_count must be an int."""
        with pytest.raises(ValueError):
            allocate("10.00", split_count)

    def test_rejects_negative_total(self):
        """Test that negative totals are rejected."""
        with pytest.raises(ValueError):
            allocate("-1.00", 2)


class TestConversions:
    """Tests for decimal, cents and base unit conversions."""

    def test_to_cents_rounds_half_up(self):
        """Test rounding of sub-cent amounts."""
        assert to_cents("10.005") == 1001
        assert to_cents("10.004") == 1000

    def test_to_cents_avoids_float_error(self):
        """Test that binary float noise does not leak into cents."""
        assert to_cents(0.1) == 10
        assert to_cents(19.99) == 1999
        assert to_cents(1.005) == 101

    def test_to_decimal_rejects_garbage(self):
        """Test that non-numbers raise ValueError."""
        with pytest.raises(ValueError):
            to_decimal("abc")

    @pytest.mark.parametrize("value", [float("inf"), float("nan"), "Infinity"])
    def test_to_decimal_rejects_non_finite(self, value):
        """Test that infinities and NaN raise ValueError."""
        with pytest.raises(ValueError):
            to_decimal(value)

    def test_cents_to_amount(self):
        """Test cents rendered as a two-place Decimal."""
        assert cents_to_amount(334) == Decimal("3.34")
        assert str(cents_to_amount(1000)) == "10.00"
        assert str(cents_to_amount(5)) == "0.05"

    def test_uniform_share_and_shortfall(self):
        """Test the shared-link base share and what it leaves uncollected."""
        assert uniform_share("10.00", 3) == 333
        assert shortfall("10.00", 3) == 1
        assert shortfall("9.99", 4) == 3
        assert shortfall("12.00", 4) == 0

    def test_to_base_units(self):
        """Test conversion to USDC base units."""
        assert to_base_units(Decimal("3.34"), 6) == 3_340_000
        assert to_base_units("6.00", 6) == 6_000_000
        assert to_base_units(1, 0) == 1

    def test_to_base_units_rounds_down(self):
        """Test that fractions of a base unit are dropped."""
        assert to_base_units("0.0000019", 6) == 1
        assert to_base_units("0.0000009", 6) == 0

    def test_from_base_units(self):
        """Test conversion from base units back to whole units."""
        assert from_base_units(3_340_000, 6) == Decimal("3.34")
        assert from_base_units(1, 6) == Decimal("0.000001")
