# models/__init__.py
# 데이터 모델과 타입 정의를 담당하는 패키지입니다.

from .booking import (
    Booking,
    BookingAction,
    BookingFlags,
    BookingIntent,
    BookingStatus,
    TeamMember,
    resolve_team_member_name,
)
from .user_context import Organization, Role, UserContext

__all__ = [
    "Booking",
    "BookingAction",
    "BookingFlags",
    "BookingIntent",
    "BookingStatus",
    "TeamMember",
    "resolve_team_member_name",
    "Organization",
    "Role",
    "UserContext",
]
