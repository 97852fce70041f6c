"""Input normalization and validation helpers."""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

from cloudminer.models.types import MONEY_LIMIT, MONEY_SCALE
from cloudminer.utils.exceptions import InvalidAmount


def normalize_email(raw: str) -> str:
    """
    Normalize email for lookup and uniqueness checks.

    Args:
        raw: Email as typed by the user

    Returns:
        Lowercased, trimmed email
    """
    return (raw or "").strip().lower()


def normalize_referral_code(raw: str | None) -> str:
    """
    Normalize referral code for lookup.

    Args:
        raw: Referral code as typed by the user

    Returns:
        Uppercased, trimmed code ("" when missing)
    """
    return (raw or "").strip().upper()


def to_decimal(value: Decimal | int | str) -> Decimal:
    """
    Convert a user-supplied amount to Decimal.

    Floats are converted through their string form so 0.1 stays 0.1.

    Raises:
        InvalidAmount: If the value is not a finite number
    """
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmount(f"Invalid amount: {value!r}") from exc
    if not result.is_finite():
        raise InvalidAmount(f"Invalid amount: {value!r}")
    return result


def decimal_places(value: Decimal) -> int:
    """Count significant digits after the decimal point (trailing zeros ignored)."""
    _, digits, exponent = value.as_tuple()
    trailing = len(digits) - len("".join(map(str, digits)).rstrip("0"))
    if trailing == len(digits):
        return 0
    return max(0, -(exponent + trailing))


def validate_money(
    value: Decimal | int | str,
    scale: int = MONEY_SCALE,
    limit: Decimal = MONEY_LIMIT,
) -> Decimal:
    """
    Validate that an amount fits a money column exactly.

    Args:
        value: Amount (any sign)
        scale: Allowed digits after the decimal point
        limit: Exclusive upper bound of the absolute value

    Returns:
        Amount as Decimal

    Raises:
        InvalidAmount: If the amount is not a number, has more decimal
            places than the column stores or is out of range
    """
    amount = to_decimal(value)
    if abs(amount) >= limit:
        raise InvalidAmount(f"Amount {amount} is out of range.")
    if decimal_places(amount) > scale:
        raise InvalidAmount(
            f"Amount {amount} has more than {scale} decimal places."
        )
    return amount


def validate_positive_amount(
    value: Decimal | int | str,
    scale: int = MONEY_SCALE,
    limit: Decimal = MONEY_LIMIT,
) -> Decimal:
    """
    Validate that an amount is strictly positive and storable.

    Raises:
        InvalidAmount: If the amount is zero, negative, not a number,
            too precise or too large
    """
    amount = validate_money(value, scale=scale, limit=limit)
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than zero.")
    return amount


def quantize_money(value: Decimal, scale: int = MONEY_SCALE) -> Decimal:
    """Truncate a computed amount to the column scale."""
    return value.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_DOWN)
