from decimal import Decimal, DecimalException

from money_manager.core.errors import InvalidOperation

CENTS = Decimal("0.01")


def parse_amount(value) -> Decimal:
    """Validate a strictly positive, finite amount with at most two decimals."""
    if isinstance(value, bool):
        raise InvalidOperation("Invalid amount")
    try:
        amount = Decimal(str(value).strip())
    except (DecimalException, ValueError, TypeError):
        raise InvalidOperation("Invalid amount")
    if not amount.is_finite() or amount <= 0:
        raise InvalidOperation("Invalid amount")
    if amount != amount.quantize(CENTS):
        raise InvalidOperation("Amounts support at most 2 decimal places")
    return amount.quantize(CENTS)
