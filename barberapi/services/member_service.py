from typing import Callable, Optional
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from barberapi.config import Settings
from barberapi.core.exceptions import (
    BaseAPIException,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from barberapi.database.session import session_scope
from barberapi.repositories.consumption_repository import ConsumptionRepository
from barberapi.repositories.member_repository import MemberRepository
from barberapi.repositories.recharge_repository import RechargeRecordRepository
from barberapi.schemas.member import (
    Member as MemberSchema,
    MemberCreate,
    MemberDetail,
    MemberLedgerIntegrityResponse,
    MemberUpdate,
)
from barberapi.schemas.pagination import DirectPaginatedResponse
from barberapi.utils.money_utils import to_money
from barberapi.utils.timezone_utils import get_store_today, utcnow

logger = logging.getLogger(__name__)

# 같은 날 동시에 가입하면 회원 번호가 겹칠 수 있으므로 재발급 횟수 제한
MEMBER_NO_ATTEMPTS = 5


class MemberService:
    """회원 관련 비즈니스 로직을 담당하는 서비스"""

    def __init__(self, session_factory: Callable[[], Session], settings: Settings):
        self.session_factory = session_factory
        self.settings = settings

    def register(self, request: MemberCreate) -> MemberSchema:
        """
        회원 등록 - 잔액/누적 금액은 0으로 시작

        Raises:
            ConflictError: 회원 번호 발급이 계속 충돌한 경우
            StoreError: 저장소 오류
        """
        for attempt in range(1, MEMBER_NO_ATTEMPTS + 1):
            try:
                with session_scope(self.session_factory) as db:
                    repo = MemberRepository(db)
                    member_no = repo.next_member_no(
                        self.settings.MEMBER_NO_PREFIX,
                        get_store_today(),
                    )
                    member = repo.create_member(
                        member_no=member_no,
                        name=request.name,
                        phone=request.phone,
                        notes=request.notes,
                    )
                    result = MemberSchema.model_validate(member)
                logger.info(f"Registered member {result.member_no} (id={result.id})")
                return result
            except IntegrityError as e:
                logger.warning(
                    f"Member number collision (attempt {attempt}/{MEMBER_NO_ATTEMPTS}): {e}"
                )
            except SQLAlchemyError as e:
                logger.error(f"Failed to register member: {str(e)}")
                raise StoreError(f"Failed to register member: {str(e)}")

        raise ConflictError("Could not allocate a member number, please retry")

    def update(self, member_id: int, request: MemberUpdate) -> MemberSchema:
        """회원 정보 수정 (이름/휴대폰/메모만)"""
        try:
            with session_scope(self.session_factory) as db:
                repo = MemberRepository(db)
                member = repo.get_model(member_id)
                if member is None:
                    raise NotFoundError(f"Member not found: {member_id}")
                repo.update_profile(
                    member, name=request.name, phone=request.phone, notes=request.notes
                )
                return MemberSchema.model_validate(member)
        except BaseAPIException:
            raise
        except StaleDataError:
            raise ConflictError("Member was modified concurrently, please retry")
        except SQLAlchemyError as e:
            logger.error(f"Failed to update member {member_id}: {str(e)}")
            raise StoreError(f"Failed to update member: {str(e)}")

    def get(self, member_id: int) -> MemberSchema:
        try:
            with session_scope(self.session_factory) as db:
                member = MemberRepository(db).get_by_id(member_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get member {member_id}: {str(e)}")
            raise StoreError(f"Failed to get member: {str(e)}")
        if member is None:
            raise NotFoundError(f"Member not found: {member_id}")
        return member

    def search(
        self, keyword: Optional[str] = None, limit: Optional[int] = None, offset: int = 0
    ) -> DirectPaginatedResponse[MemberSchema]:
        """회원 번호/휴대폰/이름 검색 (최신 가입순)"""
        limit = limit or self.settings.DEFAULT_PAGE_SIZE
        if limit < 1 or offset < 0:
            raise ValidationError("limit must be >= 1 and offset must be >= 0")
        limit = min(limit, self.settings.MAX_PAGE_SIZE)

        try:
            with session_scope(self.session_factory) as db:
                members, total = MemberRepository(db).search(keyword, limit, offset)
        except SQLAlchemyError as e:
            logger.error(f"Failed to search members: {str(e)}")
            raise StoreError(f"Failed to search members: {str(e)}")

        return DirectPaginatedResponse[MemberSchema](
            data=members,
            total_count=total,
            has_next=offset + len(members) < total,
            limit=limit,
            offset=offset,
        )

    def get_detail(self, member_id: int) -> MemberDetail:
        """회원 상세 - 충전/소비 내역 포함"""
        try:
            with session_scope(self.session_factory) as db:
                member = MemberRepository(db).get_by_id(member_id)
                if member is None:
                    raise NotFoundError(f"Member not found: {member_id}")
                recharges, _ = RechargeRecordRepository(db).list_records(member_id=member_id)
                consumptions, _ = ConsumptionRepository(db).list_records(member_id=member_id)
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to get member detail {member_id}: {str(e)}")
            raise StoreError(f"Failed to get member detail: {str(e)}")

        return MemberDetail(member=member, recharges=recharges, consumptions=consumptions)

    def verify_ledger(self, member_id: int) -> MemberLedgerIntegrityResponse:
        """
        회원 잔액 정합성 검증

        잔액 = Σ(충전 + 보너스) - Σ(잔액 차감분)
        누적 충전 = Σ충전, 누적 소비 = Σ소비 총액 (환불은 잔액을 되돌리지 않으므로 포함)

        Args:
            member_id: 회원 ID

        Returns:
            MemberLedgerIntegrityResponse: OK 또는 MISMATCH
        """
        try:
            with session_scope(self.session_factory) as db:
                member = MemberRepository(db).get_by_id(member_id)
                if member is None:
                    raise NotFoundError(f"Member not found: {member_id}")
                recharged, bonus, recharge_count = RechargeRecordRepository(
                    db
                ).member_totals(member_id)
                spent, balance_paid, consumption_count = ConsumptionRepository(
                    db
                ).member_totals(member_id)
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to verify member ledger {member_id}: {str(e)}")
            raise StoreError(f"Failed to verify member ledger: {str(e)}")

        calculated_balance = to_money(recharged + bonus - balance_paid)
        calculated_recharged = to_money(recharged)
        calculated_spent = to_money(spent)
        matched = (
            to_money(member.balance) == calculated_balance
            and to_money(member.total_recharged) == calculated_recharged
            and to_money(member.total_spent) == calculated_spent
        )
        status = "OK" if matched else "MISMATCH"

        if matched:
            logger.info(f"Ledger verified for member {member_id}")
        else:
            logger.warning(
                f"Ledger mismatch for member {member_id}: recorded balance "
                f"{member.balance}, calculated {calculated_balance}"
            )

        return MemberLedgerIntegrityResponse(
            status=status,
            member_id=member_id,
            recorded_balance=to_money(member.balance),
            calculated_balance=calculated_balance,
            recorded_total_recharged=to_money(member.total_recharged),
            calculated_total_recharged=calculated_recharged,
            recorded_total_spent=to_money(member.total_spent),
            calculated_total_spent=calculated_spent,
            recharge_count=recharge_count,
            consumption_count=consumption_count,
            verified_at=utcnow(),
        )
