from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from barberapi.containers import Container
from barberapi.core.auth_middleware import get_current_operator
from barberapi.schemas.checkout import CheckoutRequest, CheckoutResponse
from barberapi.schemas.operator import Operator
from barberapi.services.checkout_service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("", response_model=CheckoutResponse)
@inject
def checkout(
    request: CheckoutRequest,
    operator: Operator = Depends(get_current_operator),
    checkout_service: CheckoutService = Depends(Provide[Container.services.checkout_service]),
) -> CheckoutResponse:
    """
    장바구니 결제

    HTTP Status:
        200: 결제 완료
        400: 잔액 부족 (BALANCE_001)
        404: 회원 또는 서비스 항목 없음
        409: 동시 수정 충돌
        422: 빈 장바구니 / 요청 형식 오류
    """
    return checkout_service.checkout(
        member_id=request.member_id,
        lines=request.items,
        payment_method=request.payment_method,
        balance_override=request.balance_override,
        operator_name=operator.name,
    )
