"""
Unit tests for quote totals and discounts.
"""

from decimal import Decimal

import pytest

from gutterworks.core.exceptions import BusinessValidationError, InvalidInputError
from gutterworks.services.pricing import compute_quote_totals, final_value, validate_discount


class TestQuoteTotals:
    """Tests for area aggregation and pricing."""

    def test_reference_scenario(self):
        """2.45 m² x R$ 50 = R$ 122,50."""
        totals = compute_quote_totals([Decimal("2.45")], Decimal("50"))
        assert totals.total_area_m2 == Decimal("2.4500")
        assert totals.price_per_m2 == Decimal("50.00")
        assert totals.total_value == Decimal("122.50")

    def test_sums_bend_areas(self):
        totals = compute_quote_totals(
            [Decimal("1.2500"), Decimal("0.3333"), Decimal("0.5")], "45,90"
        )
        assert totals.total_area_m2 == Decimal("2.0833")
        assert totals.total_value == Decimal("95.62")

    def test_empty_quote_is_zero(self):
        totals = compute_quote_totals([], Decimal("50"))
        assert totals.total_area_m2 == Decimal("0")
        assert totals.total_value == Decimal("0.00")


class TestDiscount:
    """Tests for discount validation and final value."""

    def test_final_value_after_discount(self):
        """R$ 122,50 - R$ 22,50 = R$ 100,00."""
        discount = validate_discount(Decimal("122.50"), Decimal("22.50"), "Cliente antigo")
        assert final_value(Decimal("122.50"), discount) == Decimal("100.00")

    def test_final_value_without_discount(self):
        assert final_value(Decimal("80.00"), None) == Decimal("80.00")

    def test_final_value_never_negative(self):
        assert final_value(Decimal("10.00"), Decimal("15.00")) == Decimal("0.00")

    def test_discount_equal_to_total_is_allowed(self):
        discount = validate_discount(Decimal("50.00"), "50", "Cortesia")
        assert final_value(Decimal("50.00"), discount) == Decimal("0.00")

    @pytest.mark.parametrize("amount", ["0", "-1", "abc", "nan", "inf", "0.004"])
    def test_discount_must_be_positive(self, amount):
        with pytest.raises(InvalidInputError):
            validate_discount(Decimal("100.00"), amount, "Motivo")

    def test_discount_rounding_to_zero_is_rejected(self):
        """R$ 0,004 arredonda para R$ 0,00 e não conta como desconto."""
        with pytest.raises(InvalidInputError):
            validate_discount(Decimal("122.50"), "0.004", "Motivo")
        assert validate_discount(Decimal("122.50"), "0.005", "Motivo") == Decimal("0.01")

    def test_huge_discount_is_invalid_input(self):
        """Valor grande demais para 2 casas decimais é entrada inválida, não erro interno."""
        with pytest.raises(InvalidInputError):
            validate_discount(Decimal("122.50"), "1e30", "Motivo")

    def test_discount_above_total(self):
        with pytest.raises(BusinessValidationError) as exc_info:
            validate_discount(Decimal("100.00"), Decimal("100.01"), "Motivo")
        assert exc_info.value.error_code == "DISCOUNT_EXCEEDS_TOTAL"

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reason_is_required(self, reason):
        with pytest.raises(BusinessValidationError) as exc_info:
            validate_discount(Decimal("100.00"), Decimal("10"), reason)
        assert exc_info.value.error_code == "DISCOUNT_REASON_REQUIRED"
