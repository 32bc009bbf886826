from dependency_injector import containers, providers

from barberapi.config import get_settings
from barberapi.database.connection import create_db_engine, create_session_factory
from barberapi.services.catalog_service import CatalogService
from barberapi.services.checkout_service import CheckoutService
from barberapi.services.member_service import MemberService
from barberapi.services.order_service import OrderService
from barberapi.services.recharge_service import RechargeService
from barberapi.services.stats_service import StatsService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class DatabaseModule(containers.DeclarativeContainer):
    """Engine and per-workflow session factory."""

    config = providers.DependenciesContainer()

    engine = providers.Singleton(create_db_engine, settings=config.config)
    session_factory = providers.Singleton(create_session_factory, engine=engine)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies."""

    config = providers.DependenciesContainer()
    database = providers.DependenciesContainer()

    member_service = providers.Factory(
        MemberService, session_factory=database.session_factory, settings=config.config
    )
    recharge_service = providers.Factory(
        RechargeService, session_factory=database.session_factory, settings=config.config
    )
    checkout_service = providers.Factory(
        CheckoutService, session_factory=database.session_factory, settings=config.config
    )
    order_service = providers.Factory(
        OrderService, session_factory=database.session_factory, settings=config.config
    )
    catalog_service = providers.Factory(
        CatalogService, session_factory=database.session_factory, settings=config.config
    )
    stats_service = providers.Factory(
        StatsService, session_factory=database.session_factory, settings=config.config
    )


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "barberapi.routers.health_router",
            "barberapi.routers.member_router",
            "barberapi.routers.recharge_router",
            "barberapi.routers.checkout_router",
            "barberapi.routers.catalog_router",
            "barberapi.routers.order_router",
            "barberapi.routers.stats_router",
        ],
    )

    config = providers.Container(ConfigModule)
    database = providers.Container(DatabaseModule, config=config)
    services = providers.Container(
        ServiceModule, config=config, database=database
    )
