from pydantic import BaseModel, Field
from typing import Generic, TypeVar, Optional, List

T = TypeVar('T')


class PaginationParams(BaseModel):
    """기본 페이지네이션 파라미터"""
    limit: Optional[int] = Field(None, ge=1, description="페이지당 항목 수")
    offset: Optional[int] = Field(0, ge=0, description="시작 오프셋")


class DirectPaginatedResponse(BaseModel, Generic[T]):
    """직접 응답하는 페이지네이션"""
    data: List[T]
    total_count: int
    has_next: bool
    limit: int
    offset: int


# 엔드포인트별 페이지네이션 제한
class PaginationLimits:
    MEMBER_LIST = {"min": 1, "max": 100, "default": 15}
    ORDER_HISTORY = {"min": 1, "max": 100, "default": 100}
