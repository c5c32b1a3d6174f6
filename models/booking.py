# models/booking.py
# 예약 관련 데이터 모델과 타입을 정의합니다.

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class BookingStatus(Enum):
    """예약 상태를 나타내는 열거형"""
    DRAFT = "DRAFT"
    RESERVED = "RESERVED"
    ONGOING = "ONGOING"
    OVERDUE = "OVERDUE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    ARCHIVED = "ARCHIVED"

    @property
    def is_draft(self) -> bool:
        return self is BookingStatus.DRAFT

    @property
    def is_reserved(self) -> bool:
        return self is BookingStatus.RESERVED

    @property
    def is_ongoing(self) -> bool:
        return self is BookingStatus.ONGOING

    @property
    def is_overdue(self) -> bool:
        return self is BookingStatus.OVERDUE

    @property
    def is_completed(self) -> bool:
        return self is BookingStatus.COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self is BookingStatus.CANCELLED

    @property
    def is_archived(self) -> bool:
        return self is BookingStatus.ARCHIVED

    @property
    def is_final(self) -> bool:
        """더 이상 저장할 수 없는 종료 상태인지 확인"""
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.ARCHIVED)


class BookingAction(Enum):
    """검증 스키마를 고를 때 쓰는 요청 액션"""
    NEW = "new"
    SAVE = "save"
    RESERVE = "reserve"


class BookingIntent(Enum):
    """백엔드로 제출할 때 함께 보내는 intent 값"""
    SAVE = "save"
    RESERVE = "reserve"
    CREATE = "create"
    SCAN = "scan"
    CHECK_OUT = "checkOut"
    CHECK_IN = "checkIn"
    CANCEL = "cancel"
    ARCHIVE = "archive"

    @property
    def is_lifecycle(self) -> bool:
        """필드 수정 없이 예약 상태만 바꾸는 intent (체크아웃, 체크인, 취소, 보관)"""
        return self in (
            BookingIntent.CHECK_OUT,
            BookingIntent.CHECK_IN,
            BookingIntent.CANCEL,
            BookingIntent.ARCHIVE,
        )


@dataclass
class BookingFlags:
    """자산 구성에 따라 상태 전환 가능 여부를 알려주는 플래그"""
    has_assets: bool = False
    has_unavailable_assets: bool = False
    has_checked_out_assets: bool = False
    has_already_booked_assets: bool = False
    has_assets_in_custody: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BookingFlags":
        """백엔드 응답(camelCase)에서 플래그를 만듭니다."""
        data = data or {}
        return cls(
            has_assets=bool(data.get("hasAssets", False)),
            has_unavailable_assets=bool(data.get("hasUnavailableAssets", False)),
            has_checked_out_assets=bool(data.get("hasCheckedOutAssets", False)),
            has_already_booked_assets=bool(data.get("hasAlreadyBookedAssets", False)),
            has_assets_in_custody=bool(data.get("hasAssetsInCustody", False)),
        )

    def to_dict(self) -> Dict[str, bool]:
        return {
            "hasAssets": self.has_assets,
            "hasUnavailableAssets": self.has_unavailable_assets,
            "hasCheckedOutAssets": self.has_checked_out_assets,
            "hasAlreadyBookedAssets": self.has_already_booked_assets,
            "hasAssetsInCustody": self.has_assets_in_custody,
        }


@dataclass
class Booking:
    """폼에 채워 넣을 예약 정보 (이 컴포넌트에서는 읽기 전용)"""
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    # 팀 멤버 ID 또는 사용자 ID 중 하나
    custodian_ref: Optional[str] = None
    # datetime-local 형식 문자열 (YYYY-MM-DDTHH:MM)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[BookingStatus] = None
    asset_ids: Optional[List[str]] = None
    booking_flags: BookingFlags = field(default_factory=BookingFlags)
    is_archived: bool = False

    @property
    def is_new(self) -> bool:
        """ID가 없으면 아직 저장되지 않은 새 예약"""
        return not self.id

    def has_status(self, *statuses: BookingStatus) -> bool:
        return self.status in statuses

    @property
    def archived(self) -> bool:
        """보관 플래그 또는 ARCHIVED 상태"""
        return self.is_archived or self.status is BookingStatus.ARCHIVED

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Booking":
        """백엔드 응답(camelCase)에서 예약을 만듭니다."""
        status = data.get("status")
        asset_ids = data.get("assetIds")
        return cls(
            id=data.get("id") or None,
            name=data.get("name"),
            description=data.get("description"),
            custodian_ref=data.get("custodianRef"),
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            status=BookingStatus(status) if status else None,
            asset_ids=list(asset_ids) if asset_ids is not None else None,
            booking_flags=BookingFlags.from_dict(data.get("bookingFlags")),
            is_archived=bool(data.get("isArchived", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (camelCase)"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "custodianRef": self.custodian_ref,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "status": self.status.value if self.status else None,
            "assetIds": self.asset_ids,
            "bookingFlags": self.booking_flags.to_dict(),
            "isArchived": self.is_archived,
        }


@dataclass
class TeamMember:
    """커스터디언으로 선택할 수 있는 팀 멤버"""
    id: str
    name: str
    user_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def has_user(self) -> bool:
        return bool(self.user_id)

    def to_custodian_json(self) -> str:
        """커스터디언 필드에 들어갈 JSON 문자열"""
        return json.dumps({
            "id": self.id,
            "name": resolve_team_member_name(self),
            "userId": self.user_id,
        })


def resolve_team_member_name(member: TeamMember, include_email: bool = False) -> str:
    """
    팀 멤버의 표시 이름을 반환합니다.

    연결된 사용자 계정이 있으면 사용자의 이름을, 없으면 팀 멤버 이름을 씁니다.
    """
    if member.has_user:
        full_name = " ".join(part for part in (member.first_name, member.last_name) if part)
        name = full_name or member.name
        if include_email and member.email:
            return f"{name} ({member.email})"
        return name
    return member.name
