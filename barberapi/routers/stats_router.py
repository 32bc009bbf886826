from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from barberapi.containers import Container
from barberapi.core.auth_middleware import get_current_operator
from barberapi.schemas.operator import Operator
from barberapi.schemas.stats import DashboardStats
from barberapi.services.stats_service import StatsService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/dashboard", response_model=DashboardStats)
@inject
def dashboard(
    operator: Operator = Depends(get_current_operator),
    stats_service: StatsService = Depends(Provide[Container.services.stats_service]),
) -> DashboardStats:
    """오늘/이번 달 충전·소비 합계 및 회원 수"""
    return stats_service.dashboard()
