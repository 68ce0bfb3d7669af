"""
Tests for moving-average costing and rounding.
"""

from decimal import Decimal

import pytest
from django.test import override_settings

from stockledger import StockError, StockValidationError

from stockledger.costing import (
    convert_amount,
    line_amount,
    quantize_amount,
    quantize_cost,
    validate_qty,
    weighted_average_cost,
)


class TestWeightedAverageCost:

    def test_blends_receipts(self):
        """100 @ 10 plus 50 @ 16 gives 150 @ 12."""
        assert weighted_average_cost(
            Decimal('100'), Decimal('10'), Decimal('50'), Decimal('16'),
        ) == Decimal('12')

    def test_first_receipt_takes_new_cost(self):
        assert weighted_average_cost(0, 0, Decimal('10'), Decimal('7.5')) == Decimal('7.5')

    def test_zero_total_takes_new_cost(self):
        assert weighted_average_cost(0, Decimal('3'), 0, Decimal('9')) == Decimal('9')

    def test_result_is_rounded_to_cost_precision(self):
        # (1*1 + 2*2) / 3 = 1.6666...
        assert weighted_average_cost(1, 1, 2, 2) == Decimal('1.666667')

    def test_float_input_uses_its_decimal_text(self):
        assert weighted_average_cost(0, 0, 1, 0.1) == Decimal('0.1')


class TestRounding:

    def test_half_even_amount(self):
        assert quantize_amount(Decimal('2.345')) == Decimal('2.34')
        assert quantize_amount(Decimal('2.355')) == Decimal('2.36')

    @override_settings(STOCKLEDGER={'ROUNDING': 'ROUND_HALF_UP'})
    def test_rounding_mode_from_settings(self):
        assert quantize_amount(Decimal('2.345')) == Decimal('2.35')

    @override_settings(STOCKLEDGER={'COST_DECIMAL_PLACES': 2})
    def test_cost_places_from_settings(self):
        assert quantize_cost(Decimal('1.23456')) == Decimal('1.23')


class TestAmounts:

    def test_line_amount(self):
        assert line_amount(Decimal('3'), Decimal('1.005')) == Decimal('3.02')

    def test_convert_with_rate(self):
        assert convert_amount(Decimal('100'), Decimal('1.25')) == Decimal('125.00')

    def test_convert_without_rate(self):
        assert convert_amount(Decimal('100')) == Decimal('100.00')

    def test_convert_ignores_non_positive_rate(self):
        assert convert_amount(Decimal('100'), Decimal('0')) == Decimal('100.00')


class TestValidateQty:

    def test_accepts_four_places(self):
        assert validate_qty('1.2345') == Decimal('1.2345')

    @pytest.mark.parametrize('qty', ['0', '-1', '0.00001', '3.14159'])
    def test_rejects_unstorable(self, qty):
        with pytest.raises(StockValidationError) as exc:
            validate_qty(qty)

        assert exc.value.code == 'INVALID_QUANTITY'


class TestErrorData:

    def test_data_may_use_any_key(self):
        """Keyword data never collides with the positional error code."""
        error = StockError('MOVEMENT_TYPE_NOT_FOUND', code='X', message_id=1)

        assert error.code == 'MOVEMENT_TYPE_NOT_FOUND'
        assert error.data == {'code': 'X', 'message_id': 1}
