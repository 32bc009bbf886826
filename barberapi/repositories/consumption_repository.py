"""소비 원장 / 소비 항목 리포지토리"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from barberapi.core.cart import CartLine
from barberapi.models.consumption import ConsumptionItem, ConsumptionRecord
from barberapi.models.member import Member
from barberapi.repositories.base import BaseRepository
from barberapi.schemas.ledger import ConsumptionItemSchema, ConsumptionRecordSchema
from barberapi.utils.money_utils import ZERO


class ConsumptionRepository(BaseRepository[ConsumptionRecord, ConsumptionRecordSchema]):
    def __init__(self, db: Session):
        super().__init__(ConsumptionRecord, ConsumptionRecordSchema, db)

    def add_record(
        self,
        member_id: int,
        total_amount: Decimal,
        balance_paid: Decimal,
        other_paid: Decimal,
        payment_method: str,
        operator_name: str,
    ) -> ConsumptionRecord:
        """소비 원장 기록 - flush 후 생성된 ID 사용 가능"""
        return self.create(
            member_id=member_id,
            total_amount=total_amount,
            balance_paid=balance_paid,
            other_paid=other_paid,
            payment_method=payment_method,
            operator_name=operator_name,
            is_refunded=False,
        )

    def add_items(self, consumption_id: int, lines: Iterable[CartLine]) -> List[ConsumptionItem]:
        """장바구니 라인마다 소비 항목 1건 (이름/가격 스냅샷)"""
        items = [
            ConsumptionItem(
                consumption_id=consumption_id,
                service_name=line.name,
                price=line.unit_price,
                quantity=line.quantity,
            )
            for line in lines
        ]
        self.db.add_all(items)
        self.db.flush()
        return items

    def items_by_consumption_ids(
        self, consumption_ids: List[int]
    ) -> Dict[int, List[ConsumptionItemSchema]]:
        if not consumption_ids:
            return {}
        rows = (
            self.db.query(ConsumptionItem)
            .filter(ConsumptionItem.consumption_id.in_(consumption_ids))
            .order_by(ConsumptionItem.id)
            .all()
        )
        grouped: Dict[int, List[ConsumptionItemSchema]] = defaultdict(list)
        for row in rows:
            grouped[row.consumption_id].append(ConsumptionItemSchema.model_validate(row))
        return grouped

    def list_records(
        self,
        member_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[ConsumptionRecordSchema], int]:
        """
        소비 내역 조회 (최신순, 항목 포함) - 회원 정보가 없는 레코드는 제외

        Returns:
            (소비 내역, 전체 건수)
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

        total = query.count()
        query = query.order_by(
            desc(self.model_class.created_at), desc(self.model_class.id)
        ).offset(offset)
        if limit:
            query = query.limit(limit)
        rows = query.all()

        items = self.items_by_consumption_ids([record.id for record, _, _ in rows])
        records = []
        for record, member_name, member_no in rows:
            schema = ConsumptionRecordSchema.model_validate(record)
            schema.items = items.get(record.id, [])
            schema.member_name = member_name
            schema.member_no = member_no
            records.append(schema)
        return records, total

    def mark_refunded(self, record: ConsumptionRecord, note: Optional[str]) -> ConsumptionRecord:
        """환불 상태/메모만 변경"""
        record.is_refunded = True
        record.refund_note = note
        self.db.flush()
        return record

    def sum_total(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        exclude_refunded: bool = True,
    ) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(self.model_class.total_amount), 0))
        if exclude_refunded:
            query = query.filter(self.model_class.is_refunded.is_(False))
        if start is not None:
            query = query.filter(self.model_class.created_at >= start)
        if end is not None:
            query = query.filter(self.model_class.created_at < end)
        return Decimal(str(query.scalar() or ZERO))

    def member_totals(self, member_id: int) -> Tuple[Decimal, Decimal, int]:
        """회원별 (소비 합계, 잔액 차감 합계, 건수) - 환불 여부와 무관"""
        total, balance_paid, count = (
            self.db.query(
                func.coalesce(func.sum(self.model_class.total_amount), 0),
                func.coalesce(func.sum(self.model_class.balance_paid), 0),
                func.count(self.model_class.id),
            )
            .filter(self.model_class.member_id == member_id)
            .one()
        )
        return Decimal(str(total)), Decimal(str(balance_paid)), int(count)
