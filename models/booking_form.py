# models/booking_form.py
# 예약 폼 입력값 검증 모델을 정의합니다.
#
# 컨텍스트(model_validate(..., context=...))로 받는 값:
#   clock     - 현재 시각을 돌려주는 함수
#   time_zone - "현재"를 계산할 IANA 시간대

import json
from datetime import datetime
from typing import Any, ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from utils.constants import ErrorMessages
from utils.date_utils import DateParser, to_wall_clock, wall_clock_now


class CustodianRef(BaseModel):
    """파싱된 커스터디언 필드"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    name: str
    user_id: Optional[str] = Field(default=None, alias="userId")

    def to_json(self) -> str:
        """제출용 JSON 문자열"""
        return json.dumps({"id": self.id, "name": self.name, "userId": self.user_id})


class BookingForm(BaseModel):
    """모든 경우에 공통인 기본 스키마 (날짜 규칙 없음)"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    check_future_start: ClassVar[bool] = False
    check_date_order: ClassVar[bool] = False

    name: str
    asset_ids: Optional[List[str]] = Field(default=None, alias="assetIds")
    description: Optional[str] = None
    custodian: CustodianRef
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        if len(value) < 2:
            raise PydanticCustomError("name_required", ErrorMessages.NAME_REQUIRED)
        return value

    @field_validator("custodian", mode="before")
    @classmethod
    def parse_custodian(cls, value: Any, info: ValidationInfo) -> Any:
        # 선택 목록은 JSON 문자열로 값을 넘깁니다
        if isinstance(value, (dict, CustodianRef)):
            return value
        if value is None and not cls.model_fields[info.field_name].is_required():
            return None
        if value is None or value == "":
            raise PydanticCustomError("custodian_required", ErrorMessages.CUSTODIAN_REQUIRED)
        if not isinstance(value, str):
            raise PydanticCustomError("custodian_unreadable", ErrorMessages.CUSTODIAN_UNREADABLE)
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            raise PydanticCustomError("custodian_unreadable", ErrorMessages.CUSTODIAN_UNREADABLE)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or value == "":
            if cls.model_fields[info.field_name].is_required():
                raise PydanticCustomError("missing", ErrorMessages.FIELD_REQUIRED)
            return None
        if isinstance(value, str):
            try:
                value = DateParser.parse_input(value)
            except ValueError:
                raise PydanticCustomError("invalid_date", ErrorMessages.INVALID_DATE)
        if isinstance(value, datetime):
            # 입력값은 시간대 없는 벽시계 시각으로 맞춥니다
            return to_wall_clock(value, _context(info).get("time_zone"))
        raise PydanticCustomError("invalid_date", ErrorMessages.INVALID_DATE)

    @field_validator("start_date")
    @classmethod
    def check_start_in_future(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        if value is None or not cls.check_future_start:
            return value
        context = _context(info)
        now = wall_clock_now(context.get("clock"), context.get("time_zone"))
        if not value > now:
            raise PydanticCustomError("start_date_in_past", ErrorMessages.START_DATE_IN_PAST)
        return value

    @field_validator("end_date")
    @classmethod
    def check_end_after_start(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        if value is None or not cls.check_date_order:
            return value
        # 시작일 검증이 실패했으면 info.data에 없으므로 비교하지 않습니다
        start_date = info.data.get("start_date")
        if start_date is not None and not value > start_date:
            raise PydanticCustomError("end_before_start", ErrorMessages.END_BEFORE_START)
        return value


class StatusRestrictedBookingForm(BookingForm):
    """예약됨/진행중/연체 상태의 저장: 이름, 설명, 커스터디언만 바뀝니다."""

    custodian: Optional[CustodianRef] = None


class NewBookingForm(BookingForm):
    """새 예약: 모든 필드가 필수이고 날짜 규칙이 적용됩니다."""

    check_future_start: ClassVar[bool] = True
    check_date_order: ClassVar[bool] = True

    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")


class FullBookingFormWithId(NewBookingForm):
    """예약 확정 또는 초안 저장: 새 예약 규칙 + id 필수"""

    id: str = Field(min_length=1)


def _context(info: ValidationInfo) -> dict:
    return info.context or {}
