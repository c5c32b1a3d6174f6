# services/validation_service.py
# 요청 액션과 예약 상태에 맞는 폼 검증 스키마를 고르고 실행합니다.

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

from pydantic import ValidationError as PydanticValidationError

from exceptions import StatusRequiredError
from models.booking import BookingAction, BookingStatus
from models.booking_form import (
    BookingForm,
    FullBookingFormWithId,
    NewBookingForm,
    StatusRestrictedBookingForm,
)
from utils.constants import ErrorMessages
from utils.date_utils import Clock, system_clock
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClientHints:
    """클라이언트가 알려준 환경 정보"""
    time_zone: Optional[str] = None


# (액션, 상태) -> 검증 모델
# save 이외의 액션은 상태와 무관하므로 None 키를 씁니다.
SCHEMA_RULES: Dict[Tuple[BookingAction, Optional[BookingStatus]], Type[BookingForm]] = {
    (BookingAction.NEW, None): NewBookingForm,
    (BookingAction.RESERVE, None): FullBookingFormWithId,
    (BookingAction.SAVE, BookingStatus.DRAFT): FullBookingFormWithId,
    (BookingAction.SAVE, BookingStatus.RESERVED): StatusRestrictedBookingForm,
    (BookingAction.SAVE, BookingStatus.ONGOING): StatusRestrictedBookingForm,
    (BookingAction.SAVE, BookingStatus.OVERDUE): StatusRestrictedBookingForm,
    (BookingAction.SAVE, BookingStatus.COMPLETED): BookingForm,
    (BookingAction.SAVE, BookingStatus.CANCELLED): BookingForm,
    (BookingAction.SAVE, BookingStatus.ARCHIVED): BookingForm,
}

# 필드가 아예 없을 때 보여줄 메시지
MISSING_FIELD_MESSAGES = {
    "name": ErrorMessages.NAME_REQUIRED,
    "custodian": ErrorMessages.CUSTODIAN_REQUIRED,
}


@dataclass
class BookingFormResult:
    """검증 결과: 성공하면 data, 실패하면 필드별 에러"""
    data: Optional[BookingForm] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.data is not None and not self.errors


@dataclass(frozen=True)
class BookingFormSchema:
    """선택된 검증 모델과 "현재" 계산에 필요한 정보"""
    model: Type[BookingForm]
    hints: ClientHints = ClientHints()
    clock: Clock = system_clock

    @property
    def checks_dates(self) -> bool:
        return self.model.check_future_start or self.model.check_date_order

    def validate(self, values: Mapping[str, Any]) -> BookingFormResult:
        """
        폼 값을 검증합니다. 사용자 입력 오류는 예외 대신 필드별 에러로 반환합니다.

        Args:
            values: 폼 필드명(camelCase) -> 값

        Returns:
            BookingFormResult: 검증 결과
        """
        try:
            data = self.model.model_validate(
                dict(values),
                context={"clock": self.clock, "time_zone": self.hints.time_zone},
            )
        except PydanticValidationError as e:
            errors = collect_field_errors(e)
            logger.info(f"예약 폼 검증 실패 ({self.model.__name__}): {sorted(errors)}")
            return BookingFormResult(errors=errors)
        return BookingFormResult(data=data)


def collect_field_errors(error: PydanticValidationError) -> Dict[str, str]:
    """pydantic 에러를 {필드명: 첫 번째 메시지} 형태로 바꿉니다."""
    errors: Dict[str, str] = {}
    for item in error.errors():
        loc = item.get("loc") or ("",)
        field_name = str(loc[0])
        if field_name in errors:
            continue
        if item.get("type") == "missing" and field_name in MISSING_FIELD_MESSAGES:
            errors[field_name] = MISSING_FIELD_MESSAGES[field_name]
        else:
            errors[field_name] = item.get("msg", ErrorMessages.FORM_INVALID)
    return errors


def select_schema(
    action: Union[BookingAction, str],
    status: Optional[Union[BookingStatus, str]] = None,
    hints: Optional[ClientHints] = None,
    clock: Optional[Clock] = None,
) -> BookingFormSchema:
    """
    요청 액션과 예약 상태에 맞는 검증 스키마를 반환합니다.

    - new: 모든 필드 검증, 시작일은 미래, 종료일 > 시작일
    - reserve: new와 같고 id 필수
    - save: DRAFT는 reserve와 같고, RESERVED/ONGOING/OVERDUE는 이름/설명/커스터디언만,
      COMPLETED/CANCELLED/ARCHIVED는 기본 스키마
    - 그 밖의 액션: 기본 스키마

    Args:
        action: 요청 액션
        status: 예약 상태 (save일 때 필수)
        hints: 시간대 힌트
        clock: 현재 시각 함수 (테스트에서 고정 시각 주입)

    Returns:
        BookingFormSchema: 선택된 스키마

    Raises:
        StatusRequiredError: save 액션인데 상태가 없을 때
    """
    hints = hints or ClientHints()
    clock = clock or system_clock

    try:
        booking_action = BookingAction(action)
    except ValueError:
        logger.debug(f"알 수 없는 액션 '{action}', 기본 스키마를 사용합니다")
        return BookingFormSchema(model=BookingForm, hints=hints, clock=clock)

    if booking_action is BookingAction.SAVE:
        if status is None or status == "":
            raise StatusRequiredError(ErrorMessages.STATUS_REQUIRED)
        key = (booking_action, BookingStatus(status))
    else:
        key = (booking_action, None)

    model = SCHEMA_RULES[key]
    logger.debug(f"검증 스키마 선택: {key[0].value}/{key[1].value if key[1] else '-'} -> {model.__name__}")
    return BookingFormSchema(model=model, hints=hints, clock=clock)
