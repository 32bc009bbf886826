from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from barberapi.core.payment import PaymentMethod
from barberapi.utils.money_utils import MAX_MONEY


class RechargeRuleSchema(BaseModel):
    """충전 보너스 규칙"""

    id: int
    recharge_amount: Decimal = Field(..., description="기준 충전 금액")
    bonus_amount: Decimal = Field(..., description="보너스 금액")
    is_active: bool = True

    class Config:
        from_attributes = True


class RechargeRuleCreate(BaseModel):
    recharge_amount: Decimal = Field(..., gt=0, le=MAX_MONEY, description="기준 충전 금액")
    bonus_amount: Decimal = Field(Decimal("0"), ge=0, le=MAX_MONEY, description="보너스 금액")
    is_active: bool = True


class RechargeRuleUpdate(BaseModel):
    recharge_amount: Optional[Decimal] = Field(None, gt=0, le=MAX_MONEY)
    bonus_amount: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY)
    is_active: Optional[bool] = None


class RechargeRequest(BaseModel):
    """충전 요청"""

    member_id: int = Field(..., gt=0, description="회원 ID")
    amount: Decimal = Field(..., description="충전 금액 (양수)")
    payment_method: PaymentMethod = Field(
        PaymentMethod.CASH, description="결제 수단 (cash, wechat, alipay, card)"
    )


class RechargeResponse(BaseModel):
    """충전 처리 결과"""

    record_id: int
    member_id: int
    amount: Decimal
    bonus: Decimal
    total_credited: Decimal = Field(..., description="실제 적립 금액 (충전 + 보너스)")
    new_balance: Decimal
    total_recharged: Decimal
    operator_name: str


class BonusPreviewResponse(BaseModel):
    amount: Decimal
    bonus: Decimal
    total_credited: Decimal
