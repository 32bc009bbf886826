"""
충전 보너스 규칙 엔진

규칙 집합은 항상 인자로 전달받는다 (전역 상태 없음).
금액 이하의 기준 금액 중 가장 큰 규칙의 보너스를 적용하고,
해당하는 규칙이 없으면 보너스는 0이다.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from barberapi.utils.money_utils import ZERO, to_money


@dataclass(frozen=True)
class BonusRule:
    threshold: Decimal
    bonus: Decimal
    is_active: bool = True

    @classmethod
    def from_model(cls, rule: Any) -> "BonusRule":
        """RechargeRule 모델/스키마에서 변환"""
        return cls(
            threshold=to_money(rule.recharge_amount),
            bonus=to_money(rule.bonus_amount),
            is_active=bool(getattr(rule, "is_active", True)),
        )


def sort_rules(rules: Iterable[BonusRule]) -> List[BonusRule]:
    """활성 규칙만 기준 금액 내림차순으로 정렬 (동일 기준은 입력 순서 유지)"""
    return sorted(
        (r for r in rules if r.is_active), key=lambda r: r.threshold, reverse=True
    )


def find_rule(amount: Decimal, rules: Iterable[BonusRule]) -> Optional[BonusRule]:
    for rule in sort_rules(rules):
        if rule.threshold <= amount:
            return rule
    return None


def select_bonus(amount: Decimal, rules: Iterable[BonusRule]) -> Decimal:
    """
    충전 금액에 적용되는 보너스 계산

    Args:
        amount: 충전 금액 (양수)
        rules: 보너스 규칙 집합

    Returns:
        Decimal: 보너스 금액 (규칙 미해당 시 0)

    Example:
        rules = {(100, 10), (300, 50), (500, 100)}
        300 -> 50, 299 -> 10, 50 -> 0
    """
    rule = find_rule(to_money(amount), rules)
    return rule.bonus if rule else ZERO
