from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from barberapi.utils.money_utils import MAX_MONEY


class ServiceItemSchema(BaseModel):
    id: int
    name: str
    price: Decimal
    sort_order: int
    is_active: bool = True

    class Config:
        from_attributes = True


class ServiceItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., gt=0, le=MAX_MONEY)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if v.strip() == "":
            raise ValueError("Name cannot be blank")
        return v.strip()


class ServiceItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, gt=0, le=MAX_MONEY)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.strip() == "":
            raise ValueError("Name cannot be blank")
        return v.strip() if v is not None else v
