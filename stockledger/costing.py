"""
Costing: moving weighted-average cost and money rounding.

Pure decimal arithmetic, no database access. Precision and rounding mode
come from settings (COST_DECIMAL_PLACES, AMOUNT_DECIMAL_PLACES, ROUNDING).

Example:
    >>> weighted_average_cost(Decimal('100'), Decimal('10'), Decimal('50'), Decimal('16'))
    Decimal('12.000000')
"""

import decimal
from decimal import Decimal

from stockledger.conf import stockledger_settings
from stockledger.exceptions import StockValidationError

# decimal_places of the quantity columns
QTY_DECIMAL_PLACES = 4


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def _exponent(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def _rounding() -> str:
    return getattr(decimal, stockledger_settings.ROUNDING)


def quantize_cost(value) -> Decimal:
    """Round a unit cost to COST_DECIMAL_PLACES."""
    return _to_decimal(value).quantize(
        _exponent(stockledger_settings.COST_DECIMAL_PLACES),
        rounding=_rounding(),
    )


def quantize_amount(value) -> Decimal:
    """Round a money amount to the currency minor unit (AMOUNT_DECIMAL_PLACES)."""
    return _to_decimal(value).quantize(
        _exponent(stockledger_settings.AMOUNT_DECIMAL_PLACES),
        rounding=_rounding(),
    )


def validate_qty(value) -> Decimal:
    """
    Return value as a Decimal movement quantity.

    Raises:
        StockValidationError('INVALID_QUANTITY'): not positive, or finer
            than QTY_DECIMAL_PLACES (it would be stored as a different number)
    """
    qty = _to_decimal(value)
    if qty <= 0 or qty != qty.quantize(_exponent(QTY_DECIMAL_PLACES)):
        raise StockValidationError('INVALID_QUANTITY', requested=qty)
    return qty


def weighted_average_cost(old_qty, old_cost, new_qty, new_cost) -> Decimal:
    """
    Blend an incoming receipt into the existing average cost.

        total = old_qty + new_qty
        avg   = (old_qty*old_cost + new_qty*new_cost) / total   if total > 0
              = new_cost                                        otherwise
    """
    old_qty, old_cost = _to_decimal(old_qty), _to_decimal(old_cost)
    new_qty, new_cost = _to_decimal(new_qty), _to_decimal(new_cost)

    total_qty = old_qty + new_qty
    if total_qty <= 0:
        return quantize_cost(new_cost)
    return quantize_cost((old_qty * old_cost + new_qty * new_cost) / total_qty)


def line_amount(qty, unit_cost) -> Decimal:
    """amount = qty * unit_cost, rounded to the currency minor unit."""
    return quantize_amount(_to_decimal(qty) * _to_decimal(unit_cost))


def convert_amount(amount, exchange_rate=None) -> Decimal:
    """
    Convert a transaction-currency amount to base currency.

    Without a positive exchange rate the amount is returned unchanged.
    """
    amount = _to_decimal(amount)
    if exchange_rate is None:
        return quantize_amount(amount)
    rate = _to_decimal(exchange_rate)
    if rate <= 0:
        return quantize_amount(amount)
    return quantize_amount(amount * rate)
