from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, Field, model_validator

from barberapi.core.payment import PaymentMethod
from barberapi.utils.money_utils import MAX_MONEY
from barberapi.schemas.ledger import ConsumptionItemSchema


class CartLineRequest(BaseModel):
    """
    장바구니 라인

    카탈로그 항목이면 service_id, 직접 입력 항목이면 name + unit_price
    """

    service_id: Optional[int] = Field(None, gt=0, description="카탈로그 서비스 ID")
    name: Optional[str] = Field(None, max_length=100, description="직접 입력 항목명")
    unit_price: Optional[Decimal] = Field(None, gt=0, le=MAX_MONEY, description="직접 입력 단가")
    quantity: int = Field(1, ge=1, description="수량")

    @model_validator(mode="after")
    def check_line_kind(self) -> "CartLineRequest":
        if self.service_id is None and (not self.name or self.unit_price is None):
            raise ValueError("Either service_id or name + unit_price is required")
        return self


class CheckoutRequest(BaseModel):
    """결제 요청"""

    member_id: int = Field(..., gt=0, description="회원 ID")
    items: List[CartLineRequest] = Field(default_factory=list, description="장바구니")
    payment_method: PaymentMethod = Field(PaymentMethod.BALANCE, description="결제 수단")
    # mixed 결제에서만 사용, 숫자가 아니면 0으로 처리
    balance_override: Optional[Union[Decimal, str]] = Field(
        None, description="잔액에서 차감할 금액 (mixed)"
    )


class CheckoutResponse(BaseModel):
    """결제 처리 결과"""

    consumption_id: int
    member_id: int
    total_amount: Decimal
    balance_paid: Decimal
    other_paid: Decimal
    payment_method: str
    new_balance: Decimal
    total_spent: Decimal
    operator_name: str
    items: List[ConsumptionItemSchema] = Field(default_factory=list)
