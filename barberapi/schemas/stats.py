from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class DashboardStats(BaseModel):
    """대시보드 통계 (매장 현지 날짜 기준, 환불된 소비는 제외)"""

    as_of: date
    today_recharge: Decimal = Field(..., description="오늘 충전 합계")
    today_consumption: Decimal = Field(..., description="오늘 소비 합계")
    month_recharge: Decimal = Field(..., description="이번 달 충전 합계")
    month_consumption: Decimal = Field(..., description="이번 달 소비 합계")
    new_members_today: int
    new_members_month: int
    total_members: int
