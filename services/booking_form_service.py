# services/booking_form_service.py
# 예약 폼 모달의 입력값을 읽어 검증하고 제출 내용으로 바꾸는 핵심 로직을 처리합니다.

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from exceptions import ValidationError
from models.booking import Booking, BookingFlags, BookingIntent, BookingStatus, TeamMember
from utils.constants import ActionIds, BlockIds, ErrorMessages, FIELD_BLOCKS
from utils.date_utils import Clock, join_input_value, on_start_date_change, system_clock
from utils.error_handler import handle_exceptions
from utils.logger import LoggerMixin, get_logger

from .booking_api import BookingApiClient, BookingSubmission
from .validation_service import BookingFormResult, ClientHints, select_schema

logger = get_logger(__name__)


@dataclass
class FormMetadata:
    """모달 private_metadata에 보관하는 값 (화면에 입력으로 보이지 않는 필드)"""
    booking_id: Optional[str] = None
    status: Optional[BookingStatus] = None
    asset_ids: Optional[List[str]] = None
    booking_flags: BookingFlags = field(default_factory=BookingFlags)
    # 비활성화된 커스터디언 선택 대신 제출할 기본값 (JSON 문자열)
    custodian: Optional[str] = None
    custodian_ref: Optional[str] = None
    is_archived: bool = False
    # 날짜 입력을 다시 그릴 때마다 올리는 블록 버전
    revision: int = 0

    @property
    def is_new_booking(self) -> bool:
        return not self.booking_id

    @classmethod
    def from_booking(cls, booking: Booking, custodian: Optional[str] = None, revision: int = 0) -> "FormMetadata":
        return cls(
            booking_id=booking.id,
            status=booking.status,
            asset_ids=booking.asset_ids,
            booking_flags=booking.booking_flags,
            custodian=custodian,
            custodian_ref=booking.custodian_ref,
            is_archived=booking.is_archived,
            revision=revision,
        )

    def encode(self) -> str:
        return json.dumps({
            "id": self.booking_id,
            "status": self.status.value if self.status else None,
            "assetIds": self.asset_ids,
            "bookingFlags": self.booking_flags.to_dict(),
            "custodian": self.custodian,
            "custodianRef": self.custodian_ref,
            "isArchived": self.is_archived,
            "rev": self.revision,
        })

    @classmethod
    def decode(cls, raw: Optional[str]) -> "FormMetadata":
        if not raw:
            return cls()
        data = json.loads(raw)
        status = data.get("status")
        return cls(
            booking_id=data.get("id") or None,
            status=BookingStatus(status) if status else None,
            asset_ids=data.get("assetIds"),
            booking_flags=BookingFlags.from_dict(data.get("bookingFlags")),
            custodian=data.get("custodian"),
            custodian_ref=data.get("custodianRef"),
            is_archived=bool(data.get("isArchived", False)),
            revision=int(data.get("rev", 0)),
        )


@dataclass
class PreparedSubmission:
    """검증 결과와 (성공 시) 제출 내용"""
    intent: BookingIntent
    result: BookingFormResult
    submission: Optional[BookingSubmission] = None

    @property
    def is_valid(self) -> bool:
        return not self.result.errors and self.submission is not None


def find_action_state(view: Dict[str, Any], action_id: str) -> Optional[Dict[str, Any]]:
    """
    블록 ID와 무관하게 action_id로 입력 상태를 찾습니다.

    날짜 블록은 다시 그릴 때 블록 ID에 버전이 붙으므로 action_id로 찾습니다.
    """
    values = view.get("state", {}).get("values", {})
    for block_state in values.values():
        if action_id in block_state:
            return block_state[action_id]
    return None


def find_block_id(view: Dict[str, Any], prefix: str) -> Optional[str]:
    """현재 모달에서 접두사로 시작하는 블록 ID를 찾습니다."""
    for block in view.get("blocks", []):
        block_id = block.get("block_id", "")
        if block_id == prefix or block_id.startswith(f"{prefix}:"):
            return block_id
    return None


def extract_form_values(view: Dict[str, Any], metadata: FormMetadata) -> Dict[str, Any]:
    """
    모달 상태에서 폼 필드 값을 꺼냅니다 (필드명은 제출 형식과 같은 camelCase).

    모달에 입력으로 없는(비활성화된) 필드는 제출하지 않습니다.
    커스터디언만은 비활성화된 경우에도 기본값을 함께 보냅니다.
    """
    values: Dict[str, Any] = {}

    if metadata.booking_id:
        values["id"] = metadata.booking_id
    if metadata.asset_ids is not None:
        values["assetIds"] = list(metadata.asset_ids)

    name_state = find_action_state(view, ActionIds.NAME_INPUT)
    if name_state is not None:
        values["name"] = name_state.get("value") or ""

    description_state = find_action_state(view, ActionIds.DESCRIPTION_INPUT)
    if description_state is not None and description_state.get("value") is not None:
        values["description"] = description_state["value"]

    custodian_state = find_action_state(view, ActionIds.CUSTODIAN_SELECT)
    if custodian_state is not None:
        selected = custodian_state.get("selected_option")
        values["custodian"] = selected["value"] if selected else ""
    elif metadata.custodian:
        values["custodian"] = metadata.custodian

    for field_name, date_action, time_action in (
        ("startDate", ActionIds.START_DATE, ActionIds.START_TIME),
        ("endDate", ActionIds.END_DATE, ActionIds.END_TIME),
    ):
        date_state = find_action_state(view, date_action)
        time_state = find_action_state(view, time_action)
        if date_state is None and time_state is None:
            continue
        values[field_name] = join_input_value(
            (date_state or {}).get("selected_date"),
            (time_state or {}).get("selected_time"),
        ) or ""

    return values


def custodian_from_json(raw: Optional[str]) -> Optional[TeamMember]:
    """커스터디언 필드 값(JSON)에서 팀 멤버를 복원합니다. 읽을 수 없으면 None."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("커스터디언 값을 읽지 못했습니다")
        return None
    if not isinstance(data, dict) or not data.get("id"):
        return None
    return TeamMember(id=data["id"], name=data.get("name") or "", user_id=data.get("userId"))


def schema_action_for(intent: BookingIntent, metadata: FormMetadata) -> str:
    """제출 intent에 맞는 검증 액션을 고릅니다. (상태 전환 intent는 필드 검증을 거치지 않습니다)"""
    if intent in (BookingIntent.CREATE, BookingIntent.SCAN):
        return "new"
    if intent is BookingIntent.SAVE:
        return "new" if metadata.is_new_booking else "save"
    if intent is BookingIntent.RESERVE:
        return "reserve"
    return intent.value


def errors_to_blocks(errors: Dict[str, str], view: Dict[str, Any]) -> Dict[str, str]:
    """
    필드별 에러를 Slack response_action="errors" 형식(블록 ID -> 메시지)으로 바꿉니다.

    모달에 해당 블록이 없으면 이름 블록(없으면 첫 입력 블록)에 필드명과 함께 붙입니다.
    """
    block_errors: Dict[str, str] = {}
    fallback = find_block_id(view, BlockIds.NAME) or next(
        (block["block_id"] for block in view.get("blocks", []) if block.get("type") == "input"),
        None,
    )
    for field_name, message in errors.items():
        block_id = None
        if field_name in FIELD_BLOCKS:
            block_id = find_block_id(view, FIELD_BLOCKS[field_name])
        if block_id is None:
            block_id = fallback
            message = f"{field_name}: {message}"
        if block_id is None:
            continue
        if block_id in block_errors:
            block_errors[block_id] = f"{block_errors[block_id]} / {message}"
        else:
            block_errors[block_id] = message
    return block_errors


class BookingFormService(LoggerMixin):
    """예약 폼 서비스 클래스"""

    def __init__(self, api: Optional[BookingApiClient] = None, clock: Optional[Clock] = None):
        """
        Args:
            api: 예약 백엔드 클라이언트 (제출할 때만 필요)
            clock: 현재 시각 함수
        """
        self.api = api
        self.clock = clock or system_clock

    def prepare(
        self,
        view: Dict[str, Any],
        intent: BookingIntent,
        hints: Optional[ClientHints] = None
    ) -> PreparedSubmission:
        """
        모달 입력값을 검증하고 제출 내용을 만듭니다.

        사용자 입력 오류는 예외가 아니라 result.errors로 돌려줍니다.

        Args:
            view: Slack 모달 뷰 데이터
            intent: 제출 intent
            hints: 사용자 시간대 힌트

        Returns:
            PreparedSubmission: 검증 결과와 제출 내용

        Raises:
            StatusRequiredError: 기존 예약의 상태를 알 수 없을 때
        """
        metadata = FormMetadata.decode(view.get("private_metadata"))
        if intent.is_lifecycle:
            return self._prepare_lifecycle(intent, metadata)
        values = extract_form_values(view, metadata)

        schema = select_schema(
            schema_action_for(intent, metadata),
            status=metadata.status,
            hints=hints,
            clock=self.clock,
        )
        result = schema.validate(values)
        if not result.is_valid:
            self.log_info("예약 폼 입력값 오류", intent=intent.value, fields=sorted(result.errors))
            return PreparedSubmission(intent=intent, result=result)

        data = result.data
        submission = BookingSubmission(
            intent=intent,
            id=metadata.booking_id,
            name=data.name,
            description=data.description,
            custodian=data.custodian.to_json() if data.custodian else None,
            start_date=values.get("startDate") if data.start_date else None,
            end_date=values.get("endDate") if data.end_date else None,
            asset_ids=list(data.asset_ids or []),
        )
        if not metadata.is_new_booking:
            submission.name_change_only = "no" if metadata.status is BookingStatus.DRAFT else "yes"
        return PreparedSubmission(intent=intent, result=result, submission=submission)

    def _prepare_lifecycle(self, intent: BookingIntent, metadata: FormMetadata) -> PreparedSubmission:
        """체크아웃, 체크인, 취소, 보관은 저장된 예약의 id와 intent만 보냅니다."""
        if metadata.is_new_booking:
            self.log_info("예약 ID 없이 상태 전환 요청", intent=intent.value)
            return PreparedSubmission(
                intent=intent,
                result=BookingFormResult(errors={"id": ErrorMessages.FIELD_REQUIRED}),
            )
        return PreparedSubmission(
            intent=intent,
            result=BookingFormResult(),
            submission=BookingSubmission(intent=intent, id=metadata.booking_id),
        )

    @handle_exceptions(default_message="예약 제출에 실패했습니다")
    def submit(self, prepared: PreparedSubmission) -> Dict[str, Any]:
        """
        검증을 통과한 제출 내용을 백엔드로 보냅니다.

        Raises:
            ValidationError: 검증을 통과하지 않은 내용을 보내려 할 때
            SubmissionError: 백엔드 요청 실패 시
        """
        if not prepared.is_valid:
            raise ValidationError(ErrorMessages.FORM_INVALID, prepared.result.errors)
        if self.api is None:
            raise ValueError("BookingApiClient가 설정되지 않았습니다")
        return self.api.submit(prepared.submission)

    def adjust_end_date(self, view: Dict[str, Any]) -> Optional[str]:
        """
        시작일이 바뀐 모달에서 새 종료일을 계산합니다 (변경이 없으면 None).
        """
        metadata = FormMetadata.decode(view.get("private_metadata"))
        values = extract_form_values(view, metadata)
        new_start = values.get("startDate")
        if not new_start:
            return None
        return on_start_date_change(new_start, values.get("endDate"), metadata.is_new_booking)

    def current_custodian(self, view: Dict[str, Any]) -> Optional[TeamMember]:
        """모달에서 선택된 커스터디언 (선택 입력이 없으면 메타데이터의 기본값)"""
        metadata = FormMetadata.decode(view.get("private_metadata"))
        return custodian_from_json(extract_form_values(view, metadata).get("custodian"))

    def current_booking(self, view: Dict[str, Any], base: Optional[Booking] = None) -> Booking:
        """
        모달의 현재 입력값으로 Booking을 다시 만듭니다 (모달을 다시 그릴 때 사용).

        읽기 전용으로 그려진 필드는 제출되지 않으므로 base 예약의 값을 그대로 씁니다.
        """
        metadata = FormMetadata.decode(view.get("private_metadata"))
        values = extract_form_values(view, metadata)
        base = base or Booking()
        custodian = custodian_from_json(values.get("custodian"))
        custodian_ref = custodian.id if custodian else (metadata.custodian_ref or base.custodian_ref)
        return Booking(
            id=metadata.booking_id,
            name=values.get("name", base.name),
            description=values.get("description", base.description),
            custodian_ref=custodian_ref,
            start_date=values.get("startDate", base.start_date) or None,
            end_date=values.get("endDate", base.end_date) or None,
            status=metadata.status,
            asset_ids=metadata.asset_ids,
            booking_flags=metadata.booking_flags,
            is_archived=metadata.is_archived,
        )
