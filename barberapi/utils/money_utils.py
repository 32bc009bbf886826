"""금액 처리 유틸리티 - 모든 금액은 Decimal, 소수점 2자리"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Numeric(12, 2) 컬럼에 저장 가능한 최대 금액
MAX_MONEY = Decimal("9999999999.99")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, TypeError):
            raise ValueError(f"Not a monetary amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount


def to_money(value: Any) -> Decimal:
    """
    Decimal로 변환 후 0.01 단위로 반올림

    Raises:
        ValueError: 숫자가 아니거나 절대값이 MAX_MONEY를 넘는 경우
    """
    amount = _to_decimal(value)
    if abs(amount) > MAX_MONEY:
        raise ValueError(f"Amount out of range: {value!r}")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Amount out of range: {value!r}")


def parse_money(value: Any) -> Optional[Decimal]:
    """변환 가능하면 Decimal, 아니면 None"""
    if value is None:
        return None
    try:
        return to_money(value)
    except ValueError:
        return None


def parse_money_or_zero(value: Any) -> Decimal:
    """Missing or non-numeric input counts as zero; oversized input is capped at MAX_MONEY."""
    if value is None:
        return ZERO
    try:
        amount = _to_decimal(value)
    except ValueError:
        return ZERO
    if amount > MAX_MONEY:
        return MAX_MONEY
    if amount < -MAX_MONEY:
        return -MAX_MONEY
    return to_money(amount)


def format_money(amount: Decimal) -> str:
    return f"¥{to_money(amount):.2f}"
