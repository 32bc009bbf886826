import logging

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from barberapi.config import Settings
from barberapi.containers import Container
from barberapi.database.session import session_scope
from barberapi.schemas.health import HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
@inject
def health_check(
    settings: Settings = Depends(Provide[Container.config.config]),
    session_factory=Depends(Provide[Container.database.session_factory]),
) -> HealthCheckResponse:
    """Health check endpoint - 데이터베이스 연결까지 확인"""
    try:
        with session_scope(session_factory) as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database probe failed: {str(e)}")
        return HealthCheckResponse(
            status="unhealthy",
            environment=settings.ENVIRONMENT,
            database="unavailable",
            error=str(e),
        )

    return HealthCheckResponse(environment=settings.ENVIRONMENT, database="ok")
