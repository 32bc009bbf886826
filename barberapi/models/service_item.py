from decimal import Decimal

from sqlalchemy import Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from barberapi.models.base import BaseModel, IdType


class ServiceItem(BaseModel):
    """서비스 카탈로그 항목 - 삭제 대신 is_active=False로 비활성화"""

    __tablename__ = "service_items"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<ServiceItem(id={self.id}, name={self.name}, price={self.price})>"
