import logging
from datetime import timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barberapi.config import Settings
from barberapi.core.exceptions import StoreError
from barberapi.database.session import session_scope
from barberapi.repositories.consumption_repository import ConsumptionRepository
from barberapi.repositories.member_repository import MemberRepository
from barberapi.repositories.recharge_repository import RechargeRecordRepository
from barberapi.schemas.stats import DashboardStats
from barberapi.utils.money_utils import to_money
from barberapi.utils.timezone_utils import get_store_today, local_midnight_utc, month_start

logger = logging.getLogger(__name__)


class StatsService:
    def __init__(self, session_factory: Callable[[], Session], settings: Settings):
        self.session_factory = session_factory
        self.settings = settings

    def dashboard(self) -> DashboardStats:
        """
        오늘/이번 달 충전·소비 합계와 회원 수

        날짜 경계는 매장 현지 기준이며, 환불된 소비는 합계에서 제외한다.
        """
        today = get_store_today()
        today_start = local_midnight_utc(today)
        month_begin = local_midnight_utc(month_start(today))
        tomorrow_start = local_midnight_utc(today + timedelta(days=1))

        try:
            with session_scope(self.session_factory) as db:
                recharges = RechargeRecordRepository(db)
                consumptions = ConsumptionRepository(db)
                members = MemberRepository(db)
                stats = DashboardStats(
                    as_of=today,
                    today_recharge=to_money(recharges.sum_amount(today_start, tomorrow_start)),
                    today_consumption=to_money(
                        consumptions.sum_total(today_start, tomorrow_start)
                    ),
                    month_recharge=to_money(recharges.sum_amount(month_begin, tomorrow_start)),
                    month_consumption=to_money(
                        consumptions.sum_total(month_begin, tomorrow_start)
                    ),
                    new_members_today=members.count_created_between(today_start, tomorrow_start),
                    new_members_month=members.count_created_between(month_begin, tomorrow_start),
                    total_members=members.count(),
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to build dashboard stats: {str(e)}")
            raise StoreError(f"Failed to build dashboard stats: {str(e)}")

        return stats
