from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from barberapi.config import Settings, settings


def create_db_engine(settings: Settings) -> Engine:
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG and settings.LOG_LEVEL.upper() == "DEBUG",
        )
    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # 연결 유효성 검사
        pool_recycle=3600,  # 1시간마다 연결 재생성
        echo=settings.DEBUG and settings.LOG_LEVEL.upper() == "DEBUG",
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False keeps loaded rows readable after the workflow commits.
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )


engine = create_db_engine(settings)
SessionLocal = create_session_factory(engine)
