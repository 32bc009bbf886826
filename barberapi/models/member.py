"""
회원 모델

회원은 선불 잔액(balance)과 누적 충전/소비 금액을 보유한다.
잔액은 충전/결제 워크플로우에서만 변경되며, version_id 컬럼으로
낙관적 동시성 제어(compare-and-swap)를 수행한다.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from barberapi.models.base import BaseModel, IdType


class Member(BaseModel):
    __tablename__ = "members"
    __table_args__ = (
        Index("idx_members_phone", "phone"),
        Index("idx_members_name", "name"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    member_no: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    total_recharged: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    total_spent: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # UPDATE ... WHERE version_id = :seen; 0 rows matched raises StaleDataError
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self):
        return f"<Member(id={self.id}, member_no={self.member_no}, balance={self.balance})>"
