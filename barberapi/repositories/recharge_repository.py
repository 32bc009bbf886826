"""충전 규칙 / 충전 원장 리포지토리"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session

from barberapi.models.member import Member
from barberapi.models.recharge import RechargeRecord, RechargeRule
from barberapi.repositories.base import LIKE_ESCAPE, BaseRepository, like_pattern
from barberapi.schemas.ledger import RechargeRecordSchema
from barberapi.schemas.recharge import RechargeRuleSchema
from barberapi.utils.money_utils import ZERO


class RechargeRuleRepository(BaseRepository[RechargeRule, RechargeRuleSchema]):
    def __init__(self, db: Session):
        super().__init__(RechargeRule, RechargeRuleSchema, db)

    def list_rules(self, active_only: bool = True) -> List[RechargeRuleSchema]:
        """충전 금액 오름차순 규칙 목록"""
        query = self.db.query(self.model_class)
        if active_only:
            query = query.filter(self.model_class.is_active.is_(True))
        rows = query.order_by(asc(self.model_class.recharge_amount)).all()
        return self._to_schemas(rows)

    def amount_taken(self, recharge_amount: Decimal, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(self.model_class).filter(
            self.model_class.recharge_amount == recharge_amount
        )
        if exclude_id is not None:
            query = query.filter(self.model_class.id != exclude_id)
        return query.first() is not None


class RechargeRecordRepository(BaseRepository[RechargeRecord, RechargeRecordSchema]):
    def __init__(self, db: Session):
        super().__init__(RechargeRecord, RechargeRecordSchema, db)

    def _row_to_schema(self, row) -> RechargeRecordSchema:
        record, member_name, member_no = row
        schema = RechargeRecordSchema.model_validate(record)
        schema.member_name = member_name
        schema.member_no = member_no
        return schema

    def add_record(
        self,
        member_id: int,
        amount: Decimal,
        bonus: Decimal,
        payment_method: str,
        operator_name: str,
    ) -> RechargeRecord:
        """충전 원장 기록 (append-only)"""
        return self.create(
            member_id=member_id,
            amount=amount,
            bonus=bonus,
            payment_method=payment_method,
            operator_name=operator_name,
        )

    def list_records(
        self,
        member_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        member_no_keyword: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[RechargeRecordSchema], int]:
        """
        충전 내역 조회 (최신순) - 회원 정보가 없는 레코드는 제외

        Returns:
            (충전 내역, 전체 건수)
        """
        query = self.db.query(self.model_class, Member.name, Member.member_no).join(
            Member, Member.id == self.model_class.member_id
        )
        if member_id is not None:
            query = query.filter(self.model_class.member_id == member_id)
        if start is not None:
            query = query.filter(self.model_class.created_at >= start)
        if end is not None:
            query = query.filter(self.model_class.created_at < end)
        if member_no_keyword:
            query = query.filter(
                Member.member_no.ilike(like_pattern(member_no_keyword), escape=LIKE_ESCAPE)
            )

        total = query.count()
        query = query.order_by(
            desc(self.model_class.created_at), desc(self.model_class.id)
        ).offset(offset)
        if limit:
            query = query.limit(limit)
        return [self._row_to_schema(row) for row in query.all()], total

    def sum_amount(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(self.model_class.amount), 0))
        if start is not None:
            query = query.filter(self.model_class.created_at >= start)
        if end is not None:
            query = query.filter(self.model_class.created_at < end)
        return Decimal(str(query.scalar() or ZERO))

    def member_totals(self, member_id: int) -> Tuple[Decimal, Decimal, int]:
        """회원별 (충전 합계, 보너스 합계, 건수)"""
        amount, bonus, count = (
            self.db.query(
                func.coalesce(func.sum(self.model_class.amount), 0),
                func.coalesce(func.sum(self.model_class.bonus), 0),
                func.count(self.model_class.id),
            )
            .filter(self.model_class.member_id == member_id)
            .one()
        )
        return Decimal(str(amount)), Decimal(str(bonus)), int(count)
