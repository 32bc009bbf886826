import secrets
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from barberapi.config import Settings, get_settings
from barberapi.core.exceptions import AuthenticationError, AuthorizationError
from barberapi.schemas.operator import Operator, OperatorRole

# Bearer 토큰 스킴 (토큰이 없을 때 직접 401 처리)
security = HTTPBearer(auto_error=False)

OPERATOR_NAME_HEADER = "X-Operator-Name"


def _token_matches(token: str, expected: Optional[str]) -> bool:
    if not expected:
        return False
    return secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


def resolve_role(token: Optional[str], settings: Settings) -> OperatorRole:
    """
    토큰으로 점원 권한 판별

    토큰이 하나도 설정되지 않은 로컬 환경에서는 모든 호출자를 관리자로 취급한다.
    production 환경에서는 토큰 미설정 시 모든 호출을 거부한다.

    Raises:
        AuthenticationError: 토큰이 없거나 일치하지 않음
    """
    if not settings.auth_enabled:
        if settings.is_production:
            raise AuthenticationError("Authentication is not configured")
        return OperatorRole.ADMIN
    if not token:
        raise AuthenticationError("Authentication required")
    if _token_matches(token, settings.ADMIN_API_TOKEN):
        return OperatorRole.ADMIN
    if _token_matches(token, settings.STAFF_API_TOKEN):
        return OperatorRole.STAFF
    raise AuthenticationError("Invalid token")


def get_current_operator(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Operator:
    """필수 점원 인증 - 이름은 X-Operator-Name 헤더, 없으면 기본값"""
    token = credentials.credentials if credentials else None
    role = resolve_role(token, settings)
    name = (request.headers.get(OPERATOR_NAME_HEADER) or "").strip()
    return Operator(name=name or settings.DEFAULT_OPERATOR_NAME, role=role)


def require_admin(
    operator: Operator = Depends(get_current_operator),
) -> Operator:
    """관리자 권한이 필요한 엔드포인트용 의존성"""
    if not operator.is_admin:
        raise AuthorizationError("Admin access required")
    return operator
