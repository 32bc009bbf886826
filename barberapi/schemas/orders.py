from typing import Optional

from pydantic import BaseModel, Field


class RefundRequest(BaseModel):
    """환불 표시 요청 - 잔액은 되돌리지 않음"""

    note: Optional[str] = Field(None, max_length=500, description="환불 메모")


class RefundResponse(BaseModel):
    consumption_id: int
    is_refunded: bool
    refund_note: Optional[str] = None
