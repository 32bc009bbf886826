"""
충전 관련 데이터 모델

- RechargeRule: 충전 금액 구간별 보너스 규칙 (관리자 관리)
- RechargeRecord: 충전 원장 - 한번 생성되면 수정되지 않음 (append-only)
"""

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from barberapi.models.base import BaseModel, IdType


class RechargeRule(BaseModel):
    __tablename__ = "recharge_rules"
    __table_args__ = (
        # duplicate thresholds would make bonus precedence ambiguous
        UniqueConstraint("recharge_amount", name="uq_recharge_rules_amount"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    recharge_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    bonus_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<RechargeRule(recharge_amount={self.recharge_amount}, bonus_amount={self.bonus_amount})>"


class RechargeRecord(BaseModel):
    __tablename__ = "recharge_records"
    __table_args__ = (Index("idx_recharge_records_member", "member_id", "created_at"),)

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("members.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    bonus: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    operator_name: Mapped[str] = mapped_column(String(100), nullable=False)
