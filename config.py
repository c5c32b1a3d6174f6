# config.py
# 프로젝트의 모든 설정 정보를 중앙에서 관리합니다.

import json
import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from models.user_context import Organization, Role


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class NotionConfig:
    """Notion 관련 설정 (팀 멤버 명단 DB)"""
    api_key: str
    team_member_database_id: str
    api_call_delay: float = 0.4

    @classmethod
    def from_env(cls) -> "NotionConfig":
        """환경변수에서 설정을 로드합니다."""
        return cls(
            api_key=os.environ["NOTION_API_KEY"],
            team_member_database_id=os.environ["NOTION_TEAM_MEMBER_DATABASE_ID"]
        )


@dataclass
class SlackConfig:
    """Slack 관련 설정"""
    bot_token: str
    app_token: str

    @classmethod
    def from_env(cls) -> "SlackConfig":
        """환경변수에서 설정을 로드합니다."""
        return cls(
            bot_token=os.environ["SLACK_BOT_TOKEN"],
            app_token=os.environ["SLACK_APP_TOKEN"],
        )


@dataclass
class BookingApiConfig:
    """예약 백엔드(제출 대상) 설정"""
    base_url: str
    api_token: Optional[str] = None
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "BookingApiConfig":
        """환경변수에서 설정을 로드합니다."""
        return cls(
            base_url=os.environ["BOOKING_API_URL"].rstrip("/"),
            api_token=os.environ.get("BOOKING_API_TOKEN"),
            timeout=float(os.environ.get("BOOKING_API_TIMEOUT", "10")),
        )


@dataclass
class OrganizationConfig:
    """조직 정보와 Slack 사용자별 역할"""
    organization_id: str
    default_role: Role = Role.BASE
    # Slack 사용자 ID -> 역할 목록
    user_roles: Dict[str, FrozenSet[Role]] = field(default_factory=dict)
    self_service_can_see_custody: bool = False
    base_user_can_see_custody: bool = False

    @classmethod
    def from_env(cls) -> "OrganizationConfig":
        """
        환경변수에서 설정을 로드합니다.

        BOOKING_USER_ROLES는 {"U123": ["ADMIN"], ...} 형태의 JSON입니다.
        """
        raw_roles = json.loads(os.environ.get("BOOKING_USER_ROLES", "{}"))
        user_roles = {
            user_id: frozenset(Role(role) for role in roles)
            for user_id, roles in raw_roles.items()
        }
        return cls(
            organization_id=os.environ.get("BOOKING_ORGANIZATION_ID", "default"),
            default_role=Role(os.environ.get("BOOKING_DEFAULT_ROLE", Role.BASE.value)),
            user_roles=user_roles,
            self_service_can_see_custody=_env_flag("SELF_SERVICE_CAN_SEE_CUSTODY"),
            base_user_can_see_custody=_env_flag("BASE_USER_CAN_SEE_CUSTODY"),
        )

    def roles_for(self, user_id: str) -> FrozenSet[Role]:
        """사용자의 역할을 반환합니다 (설정이 없으면 기본 역할)."""
        return self.user_roles.get(user_id, frozenset({self.default_role}))

    def to_organization(self) -> Organization:
        return Organization(
            id=self.organization_id,
            self_service_can_see_custody=self.self_service_can_see_custody,
            base_user_can_see_custody=self.base_user_can_see_custody,
        )


class AppConfig:
    """애플리케이션 전체 설정"""

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")
    # 빈 문자열이면 파일 로그를 남기지 않습니다
    LOG_FILE: str = os.environ.get("LOG_FILE", "app.log")

    # 커스터디언 검색 시 한 번에 보여줄 팀 멤버 수
    TEAM_MEMBER_PAGE_SIZE: int = 12

    # Notion 팀 멤버 DB 속성 매핑
    NOTION_PROPS: Dict[str, str] = {
        "name": "Name",              # 팀 멤버 이름 (Title 타입)
        "user_id": "User ID",        # 연결된 사용자 ID (Text 타입)
        "first_name": "First name",  # 사용자 이름 (Text 타입)
        "last_name": "Last name",    # 사용자 성 (Text 타입)
        "email": "Email",            # 이메일 (Email 타입)
        "deleted": "Deleted",        # 삭제 여부 (Checkbox 타입)
    }

    # 역할별 예약 권한 (entity -> 허용된 action)
    ROLE_PERMISSIONS: Dict[Role, Dict[str, FrozenSet[str]]] = {
        Role.OWNER: {
            "booking": frozenset({"read", "create", "update", "delete", "checkout", "checkin", "archive", "cancel"}),
        },
        Role.ADMIN: {
            "booking": frozenset({"read", "create", "update", "delete", "checkout", "checkin", "archive", "cancel"}),
        },
        Role.SELF_SERVICE: {
            "booking": frozenset({"read", "create", "update", "checkout", "checkin", "cancel"}),
        },
        Role.BASE: {
            "booking": frozenset({"read", "create", "update"}),
        },
    }


# 전역 설정 인스턴스들
def get_notion_config() -> NotionConfig:
    """Notion 설정을 반환합니다."""
    return NotionConfig.from_env()


def get_slack_config() -> SlackConfig:
    """Slack 설정을 반환합니다."""
    return SlackConfig.from_env()


def get_booking_api_config() -> BookingApiConfig:
    """예약 백엔드 설정을 반환합니다."""
    return BookingApiConfig.from_env()


def get_organization_config() -> OrganizationConfig:
    """조직 설정을 반환합니다."""
    return OrganizationConfig.from_env()
