"""
회원 리포지토리

잔액/누적 금액 변경은 apply_ledger_delta 하나로만 수행한다.
Member.version_id가 버전 컬럼이므로 flush 시점의 UPDATE는
"WHERE version_id = 읽은 값" 조건을 가지며, 다른 단말이 먼저 수정했다면
StaleDataError가 발생한다.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session

from barberapi.models.member import Member as MemberModel
from barberapi.repositories.base import LIKE_ESCAPE, BaseRepository, like_pattern
from barberapi.schemas.member import Member as MemberSchema
from barberapi.utils.money_utils import ZERO


class MemberRepository(BaseRepository[MemberModel, MemberSchema]):
    def __init__(self, db: Session):
        super().__init__(MemberModel, MemberSchema, db)

    def search(
        self, keyword: Optional[str], limit: int, offset: int = 0
    ) -> Tuple[List[MemberSchema], int]:
        """
        회원 번호/휴대폰/이름 부분 일치 검색 (최신 가입순)

        Returns:
            (회원 목록, 전체 건수)
        """
        query = self.db.query(self.model_class)
        if keyword:
            pattern = like_pattern(keyword)
            query = query.filter(
                or_(
                    self.model_class.member_no.ilike(pattern, escape=LIKE_ESCAPE),
                    self.model_class.phone.ilike(pattern, escape=LIKE_ESCAPE),
                    self.model_class.name.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        total = query.count()
        rows = (
            query.order_by(desc(self.model_class.created_at), desc(self.model_class.id))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows), total

    def next_member_no(self, prefix: str, day: date) -> str:
        """해당 일자의 다음 회원 번호 (예: M202610190001)"""
        day_prefix = f"{prefix}{day.strftime('%Y%m%d')}"
        latest = (
            self.db.query(func.max(self.model_class.member_no))
            .filter(self.model_class.member_no.like(f"{day_prefix}%"))
            .scalar()
        )
        seq = 1
        if latest:
            try:
                seq = int(latest[len(day_prefix):]) + 1
            except ValueError:
                seq = self.count() + 1
        return f"{day_prefix}{seq:04d}"

    def create_member(
        self, member_no: str, name: str, phone: str, notes: Optional[str] = None
    ) -> MemberModel:
        return self.create(
            member_no=member_no,
            name=name,
            phone=phone,
            notes=notes,
            balance=ZERO,
            total_recharged=ZERO,
            total_spent=ZERO,
        )

    def update_profile(
        self,
        member: MemberModel,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> MemberModel:
        """이름/휴대폰/메모만 수정"""
        if name is not None:
            member.name = name
        if phone is not None:
            member.phone = phone
        if notes is not None:
            member.notes = notes
        self.db.flush()
        return member

    def apply_ledger_delta(
        self,
        member: MemberModel,
        balance_delta: Decimal = ZERO,
        recharged_delta: Decimal = ZERO,
        spent_delta: Decimal = ZERO,
    ) -> MemberModel:
        """
        잔액/누적 금액 증감 (버전 조건부 UPDATE)

        Raises:
            StaleDataError: 읽은 이후 다른 트랜잭션이 회원을 수정한 경우
        """
        member.balance = member.balance + balance_delta
        member.total_recharged = member.total_recharged + recharged_delta
        member.total_spent = member.total_spent + spent_delta
        self.db.flush()
        return member

    def count_created_between(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> int:
        query = self.db.query(func.count(self.model_class.id))
        if start is not None:
            query = query.filter(self.model_class.created_at >= start)
        if end is not None:
            query = query.filter(self.model_class.created_at < end)
        return query.scalar() or 0
