"""
주문 내역 API 라우터

- GET /orders/consumptions: 소비 내역 (날짜/회원 필터)
- GET /orders/recharges: 충전 내역 (날짜/회원/회원 번호 검색)
- POST /orders/consumptions/{consumption_id}/refund: 환불 표시
"""

from datetime import date
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends, Path, Query

from barberapi.containers import Container
from barberapi.core.auth_middleware import get_current_operator
from barberapi.schemas.ledger import ConsumptionRecordSchema, RechargeRecordSchema
from barberapi.schemas.operator import Operator
from barberapi.schemas.orders import RefundRequest, RefundResponse
from barberapi.schemas.pagination import DirectPaginatedResponse, PaginationLimits
from barberapi.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/consumptions", response_model=DirectPaginatedResponse[ConsumptionRecordSchema])
@inject
def list_consumptions(
    date_from: Optional[date] = Query(None, description="시작일 (매장 현지 기준)"),
    date_to: Optional[date] = Query(None, description="종료일 (해당일 포함)"),
    member_id: Optional[int] = Query(None, gt=0),
    limit: int = Query(
        PaginationLimits.ORDER_HISTORY["default"],
        ge=PaginationLimits.ORDER_HISTORY["min"],
        le=PaginationLimits.ORDER_HISTORY["max"],
    ),
    offset: int = Query(0, ge=0),
    operator: Operator = Depends(get_current_operator),
    order_service: OrderService = Depends(Provide[Container.services.order_service]),
) -> DirectPaginatedResponse[ConsumptionRecordSchema]:
    return order_service.list_consumptions(
        date_from=date_from, date_to=date_to, member_id=member_id, limit=limit, offset=offset
    )


@router.get("/recharges", response_model=DirectPaginatedResponse[RechargeRecordSchema])
@inject
def list_recharges(
    date_from: Optional[date] = Query(None, description="시작일 (매장 현지 기준)"),
    date_to: Optional[date] = Query(None, description="종료일 (해당일 포함)"),
    member_id: Optional[int] = Query(None, gt=0),
    search: Optional[str] = Query(None, description="회원 번호 검색어"),
    limit: int = Query(
        PaginationLimits.ORDER_HISTORY["default"],
        ge=PaginationLimits.ORDER_HISTORY["min"],
        le=PaginationLimits.ORDER_HISTORY["max"],
    ),
    offset: int = Query(0, ge=0),
    operator: Operator = Depends(get_current_operator),
    order_service: OrderService = Depends(Provide[Container.services.order_service]),
) -> DirectPaginatedResponse[RechargeRecordSchema]:
    return order_service.list_recharges(
        date_from=date_from,
        date_to=date_to,
        member_id=member_id,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.post("/consumptions/{consumption_id}/refund", response_model=RefundResponse)
@inject
def mark_refunded(
    consumption_id: int = Path(..., gt=0),
    request: Optional[RefundRequest] = Body(None),
    operator: Operator = Depends(get_current_operator),
    order_service: OrderService = Depends(Provide[Container.services.order_service]),
) -> RefundResponse:
    """
    환불 표시 - 환불 상태와 메모만 기록하며 잔액은 되돌리지 않는다

    HTTP Status:
        200: 처리 완료
        404: 소비 내역 없음
        409: 이미 환불됨
    """
    return order_service.mark_refunded(
        consumption_id,
        note=request.note if request else None,
        operator_name=operator.name,
    )
