# utils/date_utils.py
# 날짜 관련 유틸리티 함수들을 제공합니다.

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .constants import DateFormats
from .logger import get_logger

logger = get_logger(__name__)

# 새 예약에서 종료일을 자동으로 맞출 때 사용하는 시각 (18:00:00)
END_OF_DAY_HOUR = 18

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """현재 시각을 UTC 기준으로 반환합니다."""
    return datetime.now(timezone.utc)


def resolve_time_zone(name: Optional[str]) -> Optional[ZoneInfo]:
    """
    IANA 시간대 이름을 ZoneInfo로 변환합니다.

    알 수 없는 이름이면 경고를 남기고 None(시스템 시간대)을 반환합니다.
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"알 수 없는 시간대 힌트, 시스템 시간대를 사용합니다: {name}")
        return None


def wall_clock_now(clock: Optional[Clock] = None, time_zone: Optional[str] = None) -> datetime:
    """
    주어진 시간대의 벽시계 시각을 시간대 정보 없이 반환합니다.

    datetime-local 입력값은 시간대가 없으므로 같은 기준으로 비교하기 위해 사용합니다.
    """
    now = (clock or system_clock)()
    zone = resolve_time_zone(time_zone)
    if zone is not None:
        return now.astimezone(zone).replace(tzinfo=None)
    return now.astimezone().replace(tzinfo=None)


def to_wall_clock(value: datetime, time_zone: Optional[str] = None) -> datetime:
    """시간대가 있는 값을 주어진 시간대의 벽시계 시각으로 바꿉니다."""
    if value.tzinfo is None:
        return value
    zone = resolve_time_zone(time_zone)
    if zone is not None:
        return value.astimezone(zone).replace(tzinfo=None)
    return value.astimezone().replace(tzinfo=None)


def format_input_value(value: datetime) -> str:
    """datetime-local 입력 형식(초 없이 분 단위)으로 변환합니다."""
    return value.strftime(DateFormats.DATETIME_INPUT)


def split_input_value(value: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """'YYYY-MM-DDTHH:MM' 값을 datepicker/timepicker 값으로 나눕니다."""
    if not value:
        return None, None
    parsed = DateParser.parse_input(value)
    return parsed.strftime(DateFormats.ISO_DATE), parsed.strftime(DateFormats.TIME_24H)


def join_input_value(date_str: Optional[str], time_str: Optional[str]) -> Optional[str]:
    """datepicker/timepicker 값을 'YYYY-MM-DDTHH:MM' 값으로 합칩니다."""
    if not date_str or not time_str:
        return None
    return f"{date_str}T{time_str}"


def default_booking_period(
    clock: Optional[Clock] = None,
    time_zone: Optional[str] = None
) -> Tuple[str, str]:
    """
    새 예약의 기본 기간을 반환합니다.

    시작은 현재 시각 기준 다음 10분 단위, 종료는 같은 날 18:00입니다.
    시작이 18:00 이후이면 종료는 시작 1시간 뒤입니다.
    """
    now = wall_clock_now(clock, time_zone).replace(second=0, microsecond=0)
    future_time = now + timedelta(minutes=10)
    # 10분 단위로 올림
    remainder = future_time.minute % 10
    if remainder:
        future_time += timedelta(minutes=10 - remainder)

    end_time = future_time.replace(hour=END_OF_DAY_HOUR, minute=0)
    if end_time <= future_time:
        end_time = future_time + timedelta(hours=1)
    return format_input_value(future_time), format_input_value(end_time)


def on_start_date_change(
    new_start: str,
    current_end: Optional[str],
    is_new_booking: bool
) -> Optional[str]:
    """
    시작일이 바뀌었을 때 새 종료일을 계산합니다.

    새 예약이고 현재 종료일이 있을 때만 동작합니다. 새 시작일이 현재 종료일보다
    늦으면 시작일과 같은 날 18:00을 분 단위 문자열로 반환하고, 그렇지 않으면
    None(변경 없음)을 반환합니다. 종료일 변경은 시작일에 영향을 주지 않습니다.

    Args:
        new_start: 새 시작일 (검증된 datetime-local 문자열)
        current_end: 현재 종료일 값
        is_new_booking: 새 예약 여부

    Returns:
        Optional[str]: 새 종료일 또는 None
    """
    if not is_new_booking or not current_end:
        return None

    start_dt = DateParser.parse_input(new_start)
    end_dt = DateParser.parse_input(current_end)
    if start_dt <= end_dt:
        return None

    adjusted = start_dt.replace(hour=END_OF_DAY_HOUR, minute=0, second=0, microsecond=0)
    logger.debug(f"종료일 자동 조정: {current_end} -> {format_input_value(adjusted)}")
    return format_input_value(adjusted)


class DateParser:
    """날짜 파싱 관련 유틸리티 클래스"""

    @staticmethod
    def parse_input(text: str) -> datetime:
        """
        datetime-local 형식의 문자열을 datetime으로 파싱합니다.

        Args:
            text: 'YYYY-MM-DDTHH:MM' (초, 시간대 오프셋이 있어도 허용)

        Returns:
            datetime: 파싱된 날짜

        Raises:
            ValueError: 형식이 올바르지 않을 때
        """
        text = text.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)

    @staticmethod
    def display(value: Optional[str]) -> str:
        """사용자에게 보여줄 'YYYY-MM-DD HH:MM' 문자열"""
        if not value:
            return "-"
        try:
            return DateParser.parse_input(value).strftime(DateFormats.DATETIME_DISPLAY)
        except ValueError:
            return value
