"""
결제(소비) 서비스

결제 워크플로우:
1. 장바구니 검증 (비어 있으면 실패)
2. 회원 조회, 카탈로그 항목 스냅샷 조회
3. 결제 분할 (잔액 차감분 / 기타 결제분)
4. 소비 원장 + 소비 항목 기록
5. 회원 잔액(-잔액 차감분), 누적 소비액(+총액) 갱신

2~5는 하나의 트랜잭션이다. 재시도 시 잔액을 다시 읽고 분할도 다시 계산하므로
동시에 들어온 결제가 서로의 차감을 덮어쓰지 않는다.
"""

import logging
from typing import Any, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barberapi.config import Settings
from barberapi.core.cart import Cart
from barberapi.core.exceptions import (
    BaseAPIException,
    NotFoundError,
    StoreError,
    ValidationError,
)
from barberapi.core.payment import CHECKOUT_METHODS, PaymentMethod, coerce_method, split_payment
from barberapi.database.session import run_in_transaction
from barberapi.repositories.consumption_repository import ConsumptionRepository
from barberapi.repositories.member_repository import MemberRepository
from barberapi.repositories.service_item_repository import ServiceItemRepository
from barberapi.schemas.checkout import CartLineRequest, CheckoutResponse
from barberapi.schemas.ledger import ConsumptionItemSchema
from barberapi.utils.money_utils import MAX_MONEY, to_money

logger = logging.getLogger(__name__)


class CheckoutService:
    """장바구니 결제 비즈니스 로직"""

    def __init__(self, session_factory: Callable[[], Session], settings: Settings):
        self.session_factory = session_factory
        self.settings = settings

    def build_cart(self, db: Session, lines: List[CartLineRequest]) -> Cart:
        """
        요청 라인으로 장바구니 구성 - 카탈로그 항목은 현재 활성 상태의 이름/가격 사용

        Raises:
            NotFoundError: 비활성 또는 존재하지 않는 서비스 ID
            ValidationError: 직접 입력 항목이 올바르지 않음
        """
        catalog = ServiceItemRepository(db).active_by_ids(
            line.service_id for line in lines if line.service_id is not None
        )
        cart = Cart()
        for line in lines:
            if line.service_id is not None:
                service = catalog.get(line.service_id)
                if service is None:
                    raise NotFoundError(
                        f"Service item not found or inactive: {line.service_id}"
                    )
                cart.add_catalog_item(service, quantity=line.quantity)
            else:
                try:
                    cart.add_custom_item(line.name, line.unit_price, quantity=line.quantity)
                except ValueError as e:
                    raise ValidationError(f"Invalid custom item: {e}")
        return cart

    def checkout(
        self,
        member_id: int,
        lines: List[CartLineRequest],
        payment_method: PaymentMethod = PaymentMethod.BALANCE,
        balance_override: Any = None,
        operator_name: Optional[str] = None,
    ) -> CheckoutResponse:
        """
        장바구니 결제

        Args:
            member_id: 회원 ID
            lines: 장바구니 라인
            payment_method: 결제 수단
            balance_override: mixed 결제 시 잔액에서 차감할 금액
            operator_name: 처리 점원 이름

        Returns:
            CheckoutResponse: 분할 결과, 결제 후 잔액, 기록된 항목

        Raises:
            ValidationError: 장바구니가 비어 있음
            NotFoundError: 회원 또는 서비스 항목이 존재하지 않음
            InsufficientBalanceError: 잔액 결제인데 잔액 부족
            ConflictError: 동시 수정 충돌이 재시도 한도를 넘은 경우
            StoreError: 저장소 오류
        """
        if not lines:
            raise ValidationError("Cart is empty")
        method = coerce_method(payment_method, allowed=CHECKOUT_METHODS)
        operator = (operator_name or "").strip() or self.settings.DEFAULT_OPERATOR_NAME

        def _work(db: Session) -> CheckoutResponse:
            members = MemberRepository(db)
            member = members.get_model(member_id)
            if member is None:
                raise NotFoundError(f"Member not found: {member_id}")

            cart = self.build_cart(db, lines)
            if cart.is_empty:
                raise ValidationError("Cart is empty")
            if cart.total > MAX_MONEY or member.total_spent + cart.total > MAX_MONEY:
                raise ValidationError(
                    "Order total is out of range", details={"max_amount": str(MAX_MONEY)}
                )

            split = split_payment(cart.total, method, member.balance, balance_override)

            consumptions = ConsumptionRepository(db)
            record = consumptions.add_record(
                member_id=member.id,
                total_amount=split.total_amount,
                balance_paid=split.balance_paid,
                other_paid=split.other_paid,
                payment_method=method.value,
                operator_name=operator,
            )
            items = consumptions.add_items(record.id, cart.lines)
            members.apply_ledger_delta(
                member,
                balance_delta=-split.balance_paid,
                spent_delta=split.total_amount,
            )
            return CheckoutResponse(
                consumption_id=record.id,
                member_id=member.id,
                total_amount=split.total_amount,
                balance_paid=split.balance_paid,
                other_paid=split.other_paid,
                payment_method=method.value,
                new_balance=to_money(member.balance),
                total_spent=to_money(member.total_spent),
                operator_name=operator,
                items=[ConsumptionItemSchema.model_validate(item) for item in items],
            )

        try:
            result = run_in_transaction(
                self.session_factory,
                _work,
                max_attempts=self.settings.LEDGER_MAX_RETRIES,
                label=f"checkout member={member_id}",
            )
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to check out member {member_id}: {str(e)}")
            raise StoreError(f"Checkout failed: {str(e)}")

        logger.info(
            f"Checkout member {member_id}: total={result.total_amount} "
            f"balance_paid={result.balance_paid} other_paid={result.other_paid} "
            f"method={result.payment_method} by {operator}"
        )
        return result
