"""
충전 API 라우터

- GET /recharge/rules: 활성 보너스 규칙
- POST/PUT/DELETE /recharge/rules[/{rule_id}]: 규칙 관리 (관리자)
- GET /recharge/bonus-preview?amount=: 보너스 미리보기
- POST /recharge: 충전
"""

from typing import List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Path, Query, Response, status

from barberapi.containers import Container
from barberapi.core.auth_middleware import get_current_operator, require_admin
from barberapi.schemas.operator import Operator
from barberapi.schemas.recharge import (
    BonusPreviewResponse,
    RechargeRequest,
    RechargeResponse,
    RechargeRuleCreate,
    RechargeRuleSchema,
    RechargeRuleUpdate,
)
from barberapi.services.recharge_service import RechargeService

router = APIRouter(prefix="/recharge", tags=["recharge"])


@router.get("/rules", response_model=List[RechargeRuleSchema])
@inject
def list_rules(
    include_inactive: bool = Query(False, description="비활성 규칙 포함 여부"),
    operator: Operator = Depends(get_current_operator),
    recharge_service: RechargeService = Depends(Provide[Container.services.recharge_service]),
) -> List[RechargeRuleSchema]:
    return recharge_service.list_rules(active_only=not include_inactive)


@router.post("/rules", response_model=RechargeRuleSchema, status_code=status.HTTP_201_CREATED)
@inject
def create_rule(
    request: RechargeRuleCreate,
    admin: Operator = Depends(require_admin),
    recharge_service: RechargeService = Depends(Provide[Container.services.recharge_service]),
) -> RechargeRuleSchema:
    return recharge_service.create_rule(request)


@router.put("/rules/{rule_id}", response_model=RechargeRuleSchema)
@inject
def update_rule(
    request: RechargeRuleUpdate,
    rule_id: int = Path(..., gt=0),
    admin: Operator = Depends(require_admin),
    recharge_service: RechargeService = Depends(Provide[Container.services.recharge_service]),
) -> RechargeRuleSchema:
    return recharge_service.update_rule(rule_id, request)


@router.delete("/rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
@inject
def delete_rule(
    rule_id: int = Path(..., gt=0),
    admin: Operator = Depends(require_admin),
    recharge_service: RechargeService = Depends(Provide[Container.services.recharge_service]),
) -> Response:
    recharge_service.delete_rule(rule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/bonus-preview", response_model=BonusPreviewResponse)
@inject
def preview_bonus(
    amount: str = Query(..., description="충전 예정 금액"),
    operator: Operator = Depends(get_current_operator),
    recharge_service: RechargeService = Depends(Provide[Container.services.recharge_service]),
) -> BonusPreviewResponse:
    """입력 중인 금액에 적용될 보너스 (기록하지 않음)"""
    return recharge_service.preview_bonus(amount)


@router.post("", response_model=RechargeResponse)
@inject
def recharge(
    request: RechargeRequest,
    operator: Operator = Depends(get_current_operator),
    recharge_service: RechargeService = Depends(Provide[Container.services.recharge_service]),
) -> RechargeResponse:
    """
    회원 잔액 충전

    HTTP Status:
        200: 충전 완료
        404: 회원 없음
        409: 동시 수정 충돌
        422: 금액/결제 수단 오류
    """
    return recharge_service.recharge(
        member_id=request.member_id,
        amount=request.amount,
        payment_method=request.payment_method,
        operator_name=operator.name,
    )
