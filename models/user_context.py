# models/user_context.py
# 현재 사용자와 조직 정보를 담는 타입을 정의합니다.

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional


class Role(Enum):
    """조직 내 사용자 역할"""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    SELF_SERVICE = "SELF_SERVICE"
    BASE = "BASE"


@dataclass
class Organization:
    """현재 조직 정보와 커스터디 공개 설정"""
    id: str
    self_service_can_see_custody: bool = False
    base_user_can_see_custody: bool = False


@dataclass
class UserContext:
    """폼을 보고 있는 사용자"""
    user_id: str
    roles: FrozenSet[Role] = field(default_factory=frozenset)
    organization: Optional[Organization] = None
    # IANA 시간대 (Slack 프로필의 tz)
    time_zone: Optional[str] = None

    @property
    def is_base(self) -> bool:
        return Role.BASE in self.roles

    @property
    def is_self_service(self) -> bool:
        return Role.SELF_SERVICE in self.roles

    @property
    def is_base_or_self_service(self) -> bool:
        return self.is_base or self.is_self_service
