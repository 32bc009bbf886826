import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from mangum import Mangum
from starlette.middleware.cors import CORSMiddleware

load_dotenv("barberapi/.env")

from barberapi import containers  # noqa: E402
from barberapi.config import get_settings  # noqa: E402
from barberapi.core.exception_handlers import register_exception_handlers  # noqa: E402
from barberapi.core.logging_middleware import LoggingMiddleware  # noqa: E402
from barberapi.logging_config import setup_logging  # noqa: E402
from barberapi.routers import (  # noqa: E402
    catalog_router,
    checkout_router,
    health_router,
    member_router,
    order_router,
    recharge_router,
    stats_router,
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, json_format=settings.ENVIRONMENT == "production")

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)
    app.container = containers.Container()  # type: ignore

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router.router)
    for module in (
        member_router,
        recharge_router,
        checkout_router,
        catalog_router,
        order_router,
        stats_router,
    ):
        app.include_router(module.router, prefix=settings.API_V1_STR)

    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    return app


app = create_app()

handler = Mangum(app)
