"""
회원 API 라우터

- POST /members: 회원 등록
- GET /members: 회원 검색 (회원 번호/휴대폰/이름)
- GET /members/{member_id}: 회원 조회
- PUT /members/{member_id}: 회원 정보 수정
- GET /members/{member_id}/detail: 충전/소비 내역 포함 상세
- GET /members/{member_id}/integrity: 잔액 정합성 검증 (관리자)
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Path, Query, status

from barberapi.containers import Container
from barberapi.core.auth_middleware import get_current_operator, require_admin
from barberapi.schemas.member import (
    Member,
    MemberCreate,
    MemberDetail,
    MemberLedgerIntegrityResponse,
    MemberUpdate,
)
from barberapi.schemas.operator import Operator
from barberapi.schemas.pagination import DirectPaginatedResponse, PaginationLimits
from barberapi.services.member_service import MemberService

router = APIRouter(prefix="/members", tags=["members"])


@router.post("", response_model=Member, status_code=status.HTTP_201_CREATED)
@inject
def register_member(
    request: MemberCreate,
    operator: Operator = Depends(get_current_operator),
    member_service: MemberService = Depends(Provide[Container.services.member_service]),
) -> Member:
    """회원 등록 - 회원 번호 자동 발급, 잔액 0에서 시작"""
    return member_service.register(request)


@router.get("", response_model=DirectPaginatedResponse[Member])
@inject
def search_members(
    q: Optional[str] = Query(None, description="회원 번호/휴대폰/이름 검색어"),
    limit: int = Query(
        PaginationLimits.MEMBER_LIST["default"],
        ge=PaginationLimits.MEMBER_LIST["min"],
        le=PaginationLimits.MEMBER_LIST["max"],
        description="페이지 크기",
    ),
    offset: int = Query(0, ge=0, description="오프셋"),
    operator: Operator = Depends(get_current_operator),
    member_service: MemberService = Depends(Provide[Container.services.member_service]),
) -> DirectPaginatedResponse[Member]:
    return member_service.search(keyword=q, limit=limit, offset=offset)


@router.get("/{member_id}", response_model=Member)
@inject
def get_member(
    member_id: int = Path(..., gt=0),
    operator: Operator = Depends(get_current_operator),
    member_service: MemberService = Depends(Provide[Container.services.member_service]),
) -> Member:
    return member_service.get(member_id)


@router.put("/{member_id}", response_model=Member)
@inject
def update_member(
    request: MemberUpdate,
    member_id: int = Path(..., gt=0),
    operator: Operator = Depends(get_current_operator),
    member_service: MemberService = Depends(Provide[Container.services.member_service]),
) -> Member:
    """이름/휴대폰/메모 수정 - 잔액 관련 필드는 변경 불가"""
    return member_service.update(member_id, request)


@router.get("/{member_id}/detail", response_model=MemberDetail)
@inject
def get_member_detail(
    member_id: int = Path(..., gt=0),
    operator: Operator = Depends(get_current_operator),
    member_service: MemberService = Depends(Provide[Container.services.member_service]),
) -> MemberDetail:
    return member_service.get_detail(member_id)


@router.get("/{member_id}/integrity", response_model=MemberLedgerIntegrityResponse)
@inject
def verify_member_ledger(
    member_id: int = Path(..., gt=0),
    admin: Operator = Depends(require_admin),
    member_service: MemberService = Depends(Provide[Container.services.member_service]),
) -> MemberLedgerIntegrityResponse:
    """
    회원 잔액 정합성 검증 (관리자)

    충전/소비 원장으로 잔액과 누적 금액을 다시 계산해 저장된 값과 비교한다.
    """
    return member_service.verify_ledger(member_id)
