"""
타임존 유틸리티

매장 현지 시간(STORE_TIMEZONE) 기준의 날짜 경계를 UTC로 변환한다.
DB에는 항상 UTC가 저장되며, naive datetime은 UTC로 간주한다.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

import pytz

from barberapi.config import settings


def get_store_tz():
    return pytz.timezone(settings.STORE_TIMEZONE)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def get_store_now() -> datetime:
    """현재 매장 현지 시간을 반환합니다."""
    return datetime.now(get_store_tz())


def get_store_today() -> date:
    return get_store_now().date()


def to_store_time(dt: datetime) -> datetime:
    """UTC 또는 다른 타임존의 datetime을 매장 현지 시간으로 변환합니다."""
    if dt.tzinfo is None:
        # naive datetime은 UTC로 가정
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(get_store_tz())


def local_midnight_utc(day: date) -> datetime:
    """매장 현지 기준 해당 날짜 00:00을 UTC로 반환합니다."""
    local = get_store_tz().localize(datetime.combine(day, time.min))
    return local.astimezone(timezone.utc)


def local_day_range_utc(
    date_from: Optional[date], date_to: Optional[date]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    날짜 필터를 UTC 반개구간 [start, end)로 변환

    date_to는 해당 일자 종료 시각까지 포함된다.
    """
    start = local_midnight_utc(date_from) if date_from else None
    end = local_midnight_utc(date_to + timedelta(days=1)) if date_to else None
    return start, end


def month_start(day: date) -> date:
    return day.replace(day=1)
