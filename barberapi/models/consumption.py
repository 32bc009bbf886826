"""
소비(결제) 관련 데이터 모델

ConsumptionRecord 한 건은 여러 ConsumptionItem을 가진다.
ConsumptionItem은 결제 시점의 서비스명/가격 스냅샷이며 카탈로그를 참조하지 않는다.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from barberapi.models.base import BaseModel, IdType


class ConsumptionRecord(BaseModel):
    __tablename__ = "consumption_records"
    __table_args__ = (
        Index("idx_consumption_records_member", "member_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("members.id"), nullable=False
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # balance_paid + other_paid == total_amount
    balance_paid: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    other_paid: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    operator_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # status only, never reverses balance or total_spent
    is_refunded: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    refund_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ConsumptionItem(BaseModel):
    __tablename__ = "consumption_items"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    consumption_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("consumption_records.id"), nullable=False, index=True
    )
    service_name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
