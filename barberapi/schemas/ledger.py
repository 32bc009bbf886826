"""충전/소비 원장 레코드 스키마"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class RechargeRecordSchema(BaseModel):
    id: int
    member_id: int
    amount: Decimal = Field(..., description="충전 금액")
    bonus: Decimal = Field(..., description="보너스 금액")
    payment_method: str
    operator_name: str
    created_at: datetime
    member_name: Optional[str] = None
    member_no: Optional[str] = None

    class Config:
        from_attributes = True


class ConsumptionItemSchema(BaseModel):
    id: int
    consumption_id: int
    service_name: str
    price: Decimal
    quantity: int

    class Config:
        from_attributes = True


class ConsumptionRecordSchema(BaseModel):
    id: int
    member_id: int
    total_amount: Decimal
    balance_paid: Decimal
    other_paid: Decimal
    payment_method: str
    operator_name: str
    is_refunded: bool = False
    refund_note: Optional[str] = None
    created_at: datetime
    items: List[ConsumptionItemSchema] = Field(default_factory=list)
    member_name: Optional[str] = None
    member_no: Optional[str] = None

    class Config:
        from_attributes = True
