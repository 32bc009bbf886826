"""주문(충전/소비) 내역 조회 및 환불 표시 서비스"""

import logging
from datetime import date
from typing import Callable, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

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
from barberapi.repositories.recharge_repository import RechargeRecordRepository
from barberapi.schemas.ledger import ConsumptionRecordSchema, RechargeRecordSchema
from barberapi.schemas.orders import RefundResponse
from barberapi.schemas.pagination import DirectPaginatedResponse, PaginationLimits
from barberapi.utils.timezone_utils import local_day_range_utc

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, session_factory: Callable[[], Session], settings: Settings):
        self.session_factory = session_factory
        self.settings = settings

    def _page(self, limit: Optional[int], offset: int) -> Tuple[int, int]:
        limits = PaginationLimits.ORDER_HISTORY
        limit = limit or limits["default"]
        if limit < limits["min"] or offset < 0:
            raise ValidationError("limit must be >= 1 and offset must be >= 0")
        return min(limit, limits["max"]), offset

    @staticmethod
    def _date_range(date_from: Optional[date], date_to: Optional[date]):
        if date_from and date_to and date_from > date_to:
            raise ValidationError("Start date must be before or equal to end date")
        return local_day_range_utc(date_from, date_to)

    def list_consumptions(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        member_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> DirectPaginatedResponse[ConsumptionRecordSchema]:
        """
        소비 내역 (최신순, 항목 포함)

        Args:
            date_from: 매장 현지 기준 시작일
            date_to: 매장 현지 기준 종료일 (해당일 포함)
            member_id: 회원 필터
        """
        limit, offset = self._page(limit, offset)
        start, end = self._date_range(date_from, date_to)
        try:
            with session_scope(self.session_factory) as db:
                records, total = ConsumptionRepository(db).list_records(
                    member_id=member_id, start=start, end=end, limit=limit, offset=offset
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to list consumptions: {str(e)}")
            raise StoreError(f"Failed to list consumptions: {str(e)}")

        return DirectPaginatedResponse[ConsumptionRecordSchema](
            data=records,
            total_count=total,
            has_next=offset + len(records) < total,
            limit=limit,
            offset=offset,
        )

    def list_recharges(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        member_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> DirectPaginatedResponse[RechargeRecordSchema]:
        """충전 내역 (최신순) - search는 회원 번호 부분 일치"""
        limit, offset = self._page(limit, offset)
        start, end = self._date_range(date_from, date_to)
        try:
            with session_scope(self.session_factory) as db:
                records, total = RechargeRecordRepository(db).list_records(
                    member_id=member_id,
                    start=start,
                    end=end,
                    member_no_keyword=search,
                    limit=limit,
                    offset=offset,
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to list recharges: {str(e)}")
            raise StoreError(f"Failed to list recharges: {str(e)}")

        return DirectPaginatedResponse[RechargeRecordSchema](
            data=records,
            total_count=total,
            has_next=offset + len(records) < total,
            limit=limit,
            offset=offset,
        )

    def mark_refunded(
        self, consumption_id: int, note: Optional[str] = None, operator_name: Optional[str] = None
    ) -> RefundResponse:
        """
        소비 내역을 환불로 표시

        환불 상태와 메모만 기록하며 회원 잔액/누적 소비액은 변경하지 않는다.

        Raises:
            NotFoundError: 소비 내역이 없음
            ConflictError: 이미 환불 처리됨
        """
        note = note.strip() if note else None
        try:
            with session_scope(self.session_factory) as db:
                repo = ConsumptionRepository(db)
                record = repo.get_model(consumption_id)
                if record is None:
                    raise NotFoundError(f"Consumption record not found: {consumption_id}")
                if record.is_refunded:
                    raise ConflictError(
                        f"Consumption record {consumption_id} is already refunded"
                    )
                repo.mark_refunded(record, note)
                result = RefundResponse(
                    consumption_id=record.id,
                    is_refunded=record.is_refunded,
                    refund_note=record.refund_note,
                )
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to mark consumption {consumption_id} refunded: {str(e)}")
            raise StoreError(f"Failed to mark refund: {str(e)}")

        operator = (operator_name or "").strip() or self.settings.DEFAULT_OPERATOR_NAME
        logger.info(f"Consumption {consumption_id} marked refunded by {operator}")
        return result
