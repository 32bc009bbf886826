from typing import Dict, Iterable, List

from sqlalchemy import asc, func
from sqlalchemy.orm import Session

from barberapi.models.service_item import ServiceItem
from barberapi.repositories.base import BaseRepository
from barberapi.schemas.service_item import ServiceItemSchema


class ServiceItemRepository(BaseRepository[ServiceItem, ServiceItemSchema]):
    def __init__(self, db: Session):
        super().__init__(ServiceItem, ServiceItemSchema, db)

    def list_active(self) -> List[ServiceItemSchema]:
        """활성 서비스 목록 (sort_order 순)"""
        rows = (
            self.db.query(self.model_class)
            .filter(self.model_class.is_active.is_(True))
            .order_by(asc(self.model_class.sort_order), asc(self.model_class.id))
            .all()
        )
        return self._to_schemas(rows)

    def active_by_ids(self, ids: Iterable[int]) -> Dict[int, ServiceItemSchema]:
        """결제 시점의 카탈로그 스냅샷"""
        ids = list(set(ids))
        if not ids:
            return {}
        rows = (
            self.db.query(self.model_class)
            .filter(self.model_class.id.in_(ids), self.model_class.is_active.is_(True))
            .all()
        )
        return {row.id: self._to_schema(row) for row in rows}

    def next_sort_order(self) -> int:
        current = self.db.query(func.max(self.model_class.sort_order)).scalar()
        return (current or 0) + 1
