from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from barberapi.schemas.ledger import ConsumptionRecordSchema, RechargeRecordSchema


class Member(BaseModel):
    """회원 정보 응답"""

    id: int = Field(..., description="회원 ID")
    member_no: str = Field(..., description="회원 번호")
    name: str = Field(..., description="이름")
    phone: str = Field(..., description="휴대폰 번호")
    balance: Decimal = Field(..., description="현재 잔액")
    total_recharged: Decimal = Field(..., description="누적 충전 금액 (보너스 제외)")
    total_spent: Decimal = Field(..., description="누적 소비 금액")
    notes: Optional[str] = Field(None, description="메모")
    created_at: Optional[datetime] = Field(None, description="가입 시간")
    updated_at: Optional[datetime] = Field(None, description="수정 시간")

    class Config:
        from_attributes = True


class MemberCreate(BaseModel):
    """회원 등록 요청"""

    name: str = Field(..., min_length=1, max_length=100, description="이름")
    phone: str = Field(..., min_length=1, max_length=32, description="휴대폰 번호")
    notes: Optional[str] = Field(None, description="메모")

    @field_validator("name", "phone")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if v.strip() == "":
            raise ValueError("Field cannot be blank")
        return v.strip()


class MemberUpdate(BaseModel):
    """회원 정보 수정 요청 - 잔액/누적 금액은 수정할 수 없음"""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=32)
    notes: Optional[str] = None

    @field_validator("name", "phone")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.strip() == "":
            raise ValueError("Field cannot be blank")
        return v.strip() if v is not None else v


class MemberDetail(BaseModel):
    """회원 상세 - 충전/소비 내역 포함 (최신순)"""

    member: Member
    recharges: List[RechargeRecordSchema] = Field(default_factory=list)
    consumptions: List[ConsumptionRecordSchema] = Field(default_factory=list)


class MemberLedgerIntegrityResponse(BaseModel):
    """회원 잔액 정합성 검증 응답"""

    status: str = Field(..., description="검증 상태 (OK, MISMATCH)")
    member_id: int
    recorded_balance: Decimal
    calculated_balance: Decimal
    recorded_total_recharged: Decimal
    calculated_total_recharged: Decimal
    recorded_total_spent: Decimal
    calculated_total_spent: Decimal
    recharge_count: int
    consumption_count: int
    verified_at: datetime
