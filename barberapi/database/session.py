import logging
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from barberapi.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def session_scope(session_factory: Callable[[], Session]) -> Iterator[Session]:
    """컨텍스트 매니저를 사용한 데이터베이스 세션 관리 (성공 시 commit, 실패 시 rollback)"""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def run_in_transaction(
    session_factory: Callable[[], Session],
    work: Callable[[Session], T],
    max_attempts: int = 3,
    label: str = "transaction",
) -> T:
    """
    work(db)를 하나의 트랜잭션으로 실행하고, 버전 충돌 시 처음부터 재시도

    Args:
        session_factory: 세션 팩토리
        work: 세션을 받아 조회-계산-쓰기를 모두 수행하는 함수
        max_attempts: 최대 시도 횟수
        label: 로그용 작업 이름

    Raises:
        ConflictError: max_attempts 만큼 시도해도 동시 수정 충돌이 계속된 경우
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            with session_scope(session_factory) as db:
                return work(db)
        except StaleDataError as e:
            logger.warning(
                f"{label}: concurrent update detected (attempt {attempt}/{attempts}): {e}"
            )
    raise ConflictError(
        f"{label} failed: the record was modified concurrently, please retry",
        details={"attempts": attempts},
    )
