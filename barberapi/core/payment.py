"""
결제 수단 및 잔액/기타 결제 분할 규칙

- balance: 잔액 전액 결제 (잔액 부족 시 실패)
- mixed: min(지정 금액, 잔액, 총액)만큼 잔액 차감, 나머지는 기타 결제
- cash/wechat/alipay/card: 전액 기타 결제
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from barberapi.core.exceptions import InsufficientBalanceError, ValidationError
from barberapi.utils.money_utils import ZERO, format_money, parse_money_or_zero, to_money


class PaymentMethod(str, Enum):
    BALANCE = "balance"  # 회원 잔액
    CASH = "cash"  # 현금
    WECHAT = "wechat"  # 위챗페이
    ALIPAY = "alipay"  # 알리페이
    CARD = "card"  # 카드
    MIXED = "mixed"  # 잔액 + 기타


RECHARGE_METHODS = frozenset(
    {PaymentMethod.CASH, PaymentMethod.WECHAT, PaymentMethod.ALIPAY, PaymentMethod.CARD}
)
CHECKOUT_METHODS = frozenset(PaymentMethod)


def coerce_method(value: Union[str, PaymentMethod], allowed=CHECKOUT_METHODS) -> PaymentMethod:
    try:
        method = PaymentMethod(value)
    except ValueError:
        raise ValidationError(f"Unsupported payment method: {value}")
    if method not in allowed:
        raise ValidationError(
            f"Payment method '{method.value}' is not allowed here",
            details={"allowed": sorted(m.value for m in allowed)},
        )
    return method


@dataclass(frozen=True)
class PaymentSplit:
    total_amount: Decimal
    balance_paid: Decimal
    other_paid: Decimal


def split_payment(
    total_amount: Decimal,
    method: Union[str, PaymentMethod],
    member_balance: Decimal,
    balance_override: Any = None,
) -> PaymentSplit:
    """
    결제 금액을 잔액 차감분과 기타 결제분으로 분할

    Args:
        total_amount: 장바구니 총액
        method: 결제 수단
        member_balance: 회원의 현재 잔액
        balance_override: mixed 결제 시 잔액에서 차감할 희망 금액
            (없거나 숫자가 아니면 0, 음수는 0으로 취급)

    Returns:
        PaymentSplit: balance_paid + other_paid == total_amount

    Raises:
        InsufficientBalanceError: balance 결제인데 잔액이 총액보다 적은 경우
    """
    total = to_money(total_amount)
    balance = to_money(member_balance)
    method = coerce_method(method)

    if method == PaymentMethod.BALANCE:
        if balance < total:
            raise InsufficientBalanceError(
                f"Insufficient balance. Current balance: {format_money(balance)}",
                details={
                    "current_balance": str(balance),
                    "required": str(total),
                },
            )
        balance_paid = total
    elif method == PaymentMethod.MIXED:
        requested = max(parse_money_or_zero(balance_override), ZERO)
        balance_paid = max(min(requested, balance, total), ZERO)
    else:
        balance_paid = ZERO

    return PaymentSplit(
        total_amount=total,
        balance_paid=balance_paid,
        other_paid=total - balance_paid,
    )
