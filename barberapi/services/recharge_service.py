"""
충전 서비스

충전 워크플로우:
1. 금액 검증 (양수)
2. 회원 / 활성 보너스 규칙 조회
3. 보너스 계산, 적립액 = 충전액 + 보너스
4. 충전 원장 기록
5. 회원 잔액(+적립액), 누적 충전액(+충전액) 갱신

2~5는 하나의 트랜잭션이며, 회원 갱신이 버전 충돌이면 2단계부터 재시도한다.
"""

import logging
from decimal import Decimal
from typing import Any, Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from barberapi.config import Settings
from barberapi.core.bonus_rules import BonusRule, select_bonus
from barberapi.core.exceptions import (
    BaseAPIException,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from barberapi.core.payment import RECHARGE_METHODS, PaymentMethod, coerce_method
from barberapi.database.session import run_in_transaction, session_scope
from barberapi.repositories.member_repository import MemberRepository
from barberapi.repositories.recharge_repository import (
    RechargeRecordRepository,
    RechargeRuleRepository,
)
from barberapi.schemas.recharge import (
    BonusPreviewResponse,
    RechargeResponse,
    RechargeRuleCreate,
    RechargeRuleSchema,
    RechargeRuleUpdate,
)
from barberapi.utils.money_utils import MAX_MONEY, ZERO, to_money

logger = logging.getLogger(__name__)


def parse_positive_amount(value: Any) -> Decimal:
    """충전 금액 검증 - 숫자가 아니거나 0 이하이면 ValidationError"""
    try:
        amount = to_money(value)
    except ValueError:
        raise ValidationError(f"Invalid amount: {value!r}")
    if amount <= ZERO:
        raise ValidationError("Amount must be greater than zero", details={"amount": str(amount)})
    return amount


def parse_bonus_amount(value: Any) -> Decimal:
    """보너스 금액 검증 - 0 이상"""
    try:
        bonus = to_money(value)
    except ValueError:
        raise ValidationError(f"Invalid bonus amount: {value!r}")
    if bonus < ZERO:
        raise ValidationError("Bonus amount cannot be negative")
    return bonus


class RechargeService:
    """충전 및 보너스 규칙 관리 비즈니스 로직"""

    def __init__(self, session_factory: Callable[[], Session], settings: Settings):
        self.session_factory = session_factory
        self.settings = settings

    # -----------------------------
    # Bonus rules
    # -----------------------------
    def list_rules(self, active_only: bool = True) -> List[RechargeRuleSchema]:
        try:
            with session_scope(self.session_factory) as db:
                return RechargeRuleRepository(db).list_rules(active_only=active_only)
        except SQLAlchemyError as e:
            logger.error(f"Failed to list recharge rules: {str(e)}")
            raise StoreError(f"Failed to list recharge rules: {str(e)}")

    def create_rule(self, request: RechargeRuleCreate) -> RechargeRuleSchema:
        """보너스 규칙 추가 - 동일 기준 금액은 허용하지 않음"""
        recharge_amount = parse_positive_amount(request.recharge_amount)
        bonus_amount = parse_bonus_amount(request.bonus_amount)

        try:
            with session_scope(self.session_factory) as db:
                repo = RechargeRuleRepository(db)
                if repo.amount_taken(recharge_amount):
                    raise ConflictError(
                        f"A recharge rule for {recharge_amount} already exists"
                    )
                rule = repo.create(
                    recharge_amount=recharge_amount,
                    bonus_amount=bonus_amount,
                    is_active=request.is_active,
                )
                result = RechargeRuleSchema.model_validate(rule)
            logger.info(f"Created recharge rule {result.recharge_amount} -> +{result.bonus_amount}")
            return result
        except IntegrityError:
            raise ConflictError(f"A recharge rule for {recharge_amount} already exists")
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to create recharge rule: {str(e)}")
            raise StoreError(f"Failed to create recharge rule: {str(e)}")

    def update_rule(self, rule_id: int, request: RechargeRuleUpdate) -> RechargeRuleSchema:
        fields = {}
        if request.recharge_amount is not None:
            fields["recharge_amount"] = parse_positive_amount(request.recharge_amount)
        if request.bonus_amount is not None:
            fields["bonus_amount"] = parse_bonus_amount(request.bonus_amount)
        if request.is_active is not None:
            fields["is_active"] = request.is_active

        try:
            with session_scope(self.session_factory) as db:
                repo = RechargeRuleRepository(db)
                if "recharge_amount" in fields and repo.amount_taken(
                    fields["recharge_amount"], exclude_id=rule_id
                ):
                    raise ConflictError(
                        f"A recharge rule for {fields['recharge_amount']} already exists"
                    )
                rule = repo.update(rule_id, **fields)
                if rule is None:
                    raise NotFoundError(f"Recharge rule not found: {rule_id}")
                return RechargeRuleSchema.model_validate(rule)
        except IntegrityError:
            raise ConflictError("A recharge rule with this amount already exists")
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to update recharge rule {rule_id}: {str(e)}")
            raise StoreError(f"Failed to update recharge rule: {str(e)}")

    def delete_rule(self, rule_id: int) -> None:
        # 충전 원장은 보너스 금액을 복사해 두므로 규칙 삭제는 이력에 영향 없음
        try:
            with session_scope(self.session_factory) as db:
                if not RechargeRuleRepository(db).delete(rule_id):
                    raise NotFoundError(f"Recharge rule not found: {rule_id}")
            logger.info(f"Deleted recharge rule {rule_id}")
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete recharge rule {rule_id}: {str(e)}")
            raise StoreError(f"Failed to delete recharge rule: {str(e)}")

    def preview_bonus(self, amount: Any) -> BonusPreviewResponse:
        """보너스 미리보기 (기록 없음)"""
        amt = parse_positive_amount(amount)
        rules = [BonusRule.from_model(r) for r in self.list_rules(active_only=True)]
        bonus = select_bonus(amt, rules)
        return BonusPreviewResponse(amount=amt, bonus=bonus, total_credited=amt + bonus)

    # -----------------------------
    # Recharge workflow
    # -----------------------------
    def recharge(
        self,
        member_id: int,
        amount: Any,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        operator_name: Optional[str] = None,
    ) -> RechargeResponse:
        """
        회원 잔액 충전

        Args:
            member_id: 회원 ID
            amount: 충전 금액 (양수)
            payment_method: 결제 수단 (cash, wechat, alipay, card)
            operator_name: 처리 점원 이름

        Returns:
            RechargeResponse: 보너스, 적립액, 충전 후 잔액

        Raises:
            ValidationError: 금액이 올바르지 않거나 허용되지 않는 결제 수단
            NotFoundError: 회원이 존재하지 않음
            ConflictError: 동시 수정 충돌이 재시도 한도를 넘은 경우
            StoreError: 저장소 오류
        """
        amt = parse_positive_amount(amount)
        method = coerce_method(payment_method, allowed=RECHARGE_METHODS)
        operator = (operator_name or "").strip() or self.settings.DEFAULT_OPERATOR_NAME

        def _work(db: Session) -> RechargeResponse:
            members = MemberRepository(db)
            member = members.get_model(member_id)
            if member is None:
                raise NotFoundError(f"Member not found: {member_id}")

            rules = [
                BonusRule.from_model(r)
                for r in RechargeRuleRepository(db).list_rules(active_only=True)
            ]
            bonus = select_bonus(amt, rules)
            total_credited = amt + bonus
            if (
                member.balance + total_credited > MAX_MONEY
                or member.total_recharged + amt > MAX_MONEY
            ):
                raise ValidationError(
                    "Recharge would exceed the maximum balance",
                    details={"current_balance": str(member.balance), "max_balance": str(MAX_MONEY)},
                )

            record = RechargeRecordRepository(db).add_record(
                member_id=member.id,
                amount=amt,
                bonus=bonus,
                payment_method=method.value,
                operator_name=operator,
            )
            members.apply_ledger_delta(
                member, balance_delta=total_credited, recharged_delta=amt
            )
            return RechargeResponse(
                record_id=record.id,
                member_id=member.id,
                amount=amt,
                bonus=bonus,
                total_credited=total_credited,
                new_balance=to_money(member.balance),
                total_recharged=to_money(member.total_recharged),
                operator_name=operator,
            )

        try:
            result = run_in_transaction(
                self.session_factory,
                _work,
                max_attempts=self.settings.LEDGER_MAX_RETRIES,
                label=f"recharge member={member_id}",
            )
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to recharge member {member_id}: {str(e)}")
            raise StoreError(f"Recharge failed: {str(e)}")

        logger.info(
            f"Recharged member {member_id}: amount={result.amount} bonus={result.bonus} "
            f"balance={result.new_balance} by {operator}"
        )
        return result
