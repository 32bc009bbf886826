import pytest
from decimal import Decimal

from sqlalchemy import create_engine

from barberapi.config import Settings
from barberapi.database.connection import create_session_factory
from barberapi.database.session import session_scope
from barberapi.models import Base, Member, RechargeRule, ServiceItem


@pytest.fixture
def settings():
    """토큰이 없는 로컬 설정 (.env 무시)"""
    return Settings(
        _env_file=None,
        STAFF_API_TOKEN=None,
        ADMIN_API_TOKEN=None,
        LEDGER_MAX_RETRIES=3,
    )


@pytest.fixture
def engine(tmp_path):
    # 파일 DB를 사용해야 세션마다 별도 커넥션으로 동시 수정을 재현할 수 있음
    db_engine = create_engine(
        f"sqlite:///{tmp_path / 'barberapi_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def make_member(session_factory):
    """회원 생성 헬퍼 - 생성된 회원 ID 반환"""
    counter = {"seq": 0}

    def _make(name="张三", phone=None, balance="0"):
        counter["seq"] += 1
        with session_scope(session_factory) as db:
            member = Member(
                member_no=f"T{counter['seq']:04d}",
                name=name,
                phone=phone or f"1380000{counter['seq']:04d}",
                balance=Decimal(balance),
                total_recharged=Decimal("0"),
                total_spent=Decimal("0"),
            )
            db.add(member)
            db.flush()
            return member.id

    return _make


@pytest.fixture
def default_rules(session_factory):
    """기본 보너스 규칙 {(100,10), (300,50), (500,100)}"""
    with session_scope(session_factory) as db:
        for amount, bonus in (("100", "10"), ("300", "50"), ("500", "100")):
            db.add(RechargeRule(recharge_amount=Decimal(amount), bonus_amount=Decimal(bonus)))


@pytest.fixture
def make_service_item(session_factory):
    def _make(name="洗剪吹", price="38", sort_order=1, is_active=True):
        with session_scope(session_factory) as db:
            item = ServiceItem(
                name=name, price=Decimal(price), sort_order=sort_order, is_active=is_active
            )
            db.add(item)
            db.flush()
            return item.id

    return _make


@pytest.fixture
def load_member(session_factory):
    def _load(member_id):
        with session_scope(session_factory) as db:
            return db.get(Member, member_id)

    return _load


@pytest.fixture
def bump_member_balance(session_factory):
    """다른 단말에서의 회원 수정을 흉내냄 (버전 증가)"""

    def _bump(member_id, delta):
        with session_scope(session_factory) as db:
            member = db.get(Member, member_id)
            member.balance = member.balance + Decimal(delta)

    return _bump
