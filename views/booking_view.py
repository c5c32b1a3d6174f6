# views/booking_view.py
# 예약 생성/수정 모달(Block Kit)을 생성합니다.

from typing import Any, Dict, List, Optional

from models.booking import Booking, BookingIntent, TeamMember, resolve_team_member_name
from services.booking_controls import BookingFormControls, ControlState
from services.booking_form_service import FormMetadata
from utils.constants import ActionIds, BlockIds, CallbackIds
from utils.date_utils import DateParser, split_input_value

CUSTODY_PERIOD_HELP = (
    "Within this period the assets in this booking will be in custody "
    "and unavailable for other bookings."
)
CUSTODIAN_HELP = (
    "The person that will be in custody of or responsible for the assets "
    "during the duration of the booking period."
)
PROCESS_INFO = (
    "ℹ️ Your reservation request will be reviewed by an administrator. "
    "You will be notified when it is approved."
)


def _plain(text: str) -> Dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _context(text: str) -> Dict[str, Any]:
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": text}]}


def _versioned(block_id: str, revision: int) -> str:
    # 블록 ID가 바뀌어야 Slack이 새 initial 값을 반영합니다
    return f"{block_id}:{revision}" if revision else block_id


def _read_only(label: str, value: str) -> Dict[str, Any]:
    return {
        "type": "section",
        "text": {"type": "mrkdwn", "text": f"*{label}*\n{value or '-'}"},
    }


def _button(control: ControlState, action_id: str, intent: BookingIntent, style: Optional[str] = None) -> Dict[str, Any]:
    button = {
        "type": "button",
        "text": _plain(control.label or intent.value),
        "action_id": action_id,
        "value": intent.value,
    }
    if style:
        button["style"] = style
    return button


def _disabled_note(control: ControlState) -> Optional[Dict[str, Any]]:
    if not control.reason:
        return None
    return _context(f"🚫 *{control.label}*: {control.reason}")


def build_custodian_option(member: TeamMember, can_see_custodian: bool = True) -> Dict[str, Any]:
    """커스터디언 선택 옵션 (값은 JSON 문자열)"""
    label = resolve_team_member_name(member, include_email=True) if can_see_custodian else "Private"
    return {"text": _plain(label[:75]), "value": member.to_custodian_json()}


def build_header_actions(controls: BookingFormControls) -> List[Dict[str, Any]]:
    """수정 모달 상단의 워크플로 버튼 블록"""
    elements: List[Dict[str, Any]] = []
    notes: List[Dict[str, Any]] = []

    for control, action_id, intent, style in (
        (controls.reserve, ActionIds.RESERVE, BookingIntent.RESERVE, "primary"),
        (controls.check_out, ActionIds.CHECK_OUT, BookingIntent.CHECK_OUT, "primary"),
        (controls.check_in, ActionIds.CHECK_IN, BookingIntent.CHECK_IN, "primary"),
    ):
        if not control.visible:
            continue
        if control.disabled:
            note = _disabled_note(control)
            if note:
                notes.append(note)
            continue
        elements.append(_button(control, action_id, intent, style))

    menu_options = [
        {"text": _plain(control.label), "value": intent.value}
        for control, intent in (
            (controls.cancel, BookingIntent.CANCEL),
            (controls.archive, BookingIntent.ARCHIVE),
        )
        if control.enabled
    ]
    if menu_options:
        elements.append({
            "type": "overflow",
            "action_id": ActionIds.ACTIONS_MENU,
            "options": menu_options,
        })

    blocks: List[Dict[str, Any]] = []
    if elements:
        blocks.append({"type": "actions", "block_id": BlockIds.HEADER_ACTIONS, "elements": elements})
    blocks.extend(notes)
    return blocks


def _date_blocks(
    label: str,
    value: Optional[str],
    date_block: str,
    time_block: str,
    date_action: str,
    time_action: str,
    revision: int,
    dispatch: bool,
) -> List[Dict[str, Any]]:
    date_str, time_str = split_input_value(value)
    date_element: Dict[str, Any] = {
        "type": "datepicker",
        "action_id": date_action,
        "placeholder": _plain("Select a date"),
    }
    time_element: Dict[str, Any] = {
        "type": "timepicker",
        "action_id": time_action,
        "placeholder": _plain("Select a time"),
    }
    if date_str:
        date_element["initial_date"] = date_str
    if time_str:
        time_element["initial_time"] = time_str

    return [
        {
            "type": "input",
            "block_id": _versioned(date_block, revision),
            "dispatch_action": dispatch,
            "element": date_element,
            "label": _plain(label),
        },
        {
            "type": "input",
            "block_id": _versioned(time_block, revision),
            "dispatch_action": dispatch,
            "element": time_element,
            "label": _plain(f"{label} time"),
        },
    ]


def build_booking_modal(
    booking: Booking,
    controls: BookingFormControls,
    custodian: Optional[TeamMember] = None,
    revision: int = 0,
    errors: Optional[Dict[str, str]] = None,
    calendar_url: Optional[str] = None,
    notice: Optional[str] = None,
) -> Dict[str, Any]:
    """
    예약 생성/수정 모달을 생성합니다.

    비활성화된 필드는 입력 블록 대신 읽기 전용 섹션으로 그려서 제출되지 않게 합니다.

    Args:
        booking: 폼에 채울 예약 (id가 없으면 새 예약)
        controls: build_form_controls 결과
        custodian: 현재 커스터디언 (선택 목록의 초기값)
        revision: 날짜 블록 버전 (종료일을 자동 조정한 뒤 다시 그릴 때 증가)
        errors: 필드별 에러 메시지 (버튼 액션 검증 실패 시 인라인 표시)
        calendar_url: cal.ics 다운로드 URL
        notice: 모달 상단에 표시할 안내 문구

    Returns:
        Dict[str, Any]: Slack 모달 뷰
    """
    errors = errors or {}
    is_new = booking.is_new
    # 저장할 수 없는 사용자는 모든 필드를 읽기 전용으로 봅니다
    read_only = not is_new and not controls.save.visible

    metadata = FormMetadata.from_booking(
        booking,
        custodian=custodian.to_custodian_json() if custodian else None,
        revision=revision,
    )
    modal: Dict[str, Any] = {
        "type": "modal",
        "callback_id": CallbackIds.BOOKING_NEW if is_new else CallbackIds.BOOKING_EDIT,
        "title": _plain("New booking" if is_new else "Booking"),
        "close": _plain("Cancel" if is_new else "Close"),
        "private_metadata": metadata.encode(),
        "blocks": [],
    }
    blocks: List[Dict[str, Any]] = modal["blocks"]

    if is_new:
        if controls.create.visible and not controls.create.disabled:
            modal["submit"] = _plain(controls.create.label)
    elif controls.save.visible and not controls.save.disabled:
        modal["submit"] = _plain(controls.save.label)

    if notice:
        blocks.append(_context(notice))

    if not is_new and controls.can_see_actions:
        if controls.show_process_info:
            blocks.append(_context(PROCESS_INFO))
        blocks.extend(build_header_actions(controls))
        if booking.status:
            blocks.append(_context(f"Status: *{booking.status.value.title()}*"))
        blocks.append({"type": "divider"})

    # 이름
    if controls.name_disabled or read_only:
        blocks.append(_read_only("Name", booking.name or ""))
    else:
        name_element: Dict[str, Any] = {
            "type": "plain_text_input",
            "action_id": ActionIds.NAME_INPUT,
            "placeholder": _plain("Booking"),
        }
        if booking.name:
            name_element["initial_value"] = booking.name
        blocks.append({
            "type": "input",
            "block_id": BlockIds.NAME,
            "element": name_element,
            "label": _plain("Name"),
        })
    _append_error(blocks, errors, "name")

    # 기간
    if controls.dates_disabled or read_only:
        blocks.append(_read_only("Start Date", DateParser.display(booking.start_date)))
        _append_error(blocks, errors, "startDate")
        blocks.append(_read_only("End Date", DateParser.display(booking.end_date)))
    else:
        start_blocks = _date_blocks(
            "Start Date", booking.start_date,
            BlockIds.START_DATE, BlockIds.START_TIME,
            ActionIds.START_DATE, ActionIds.START_TIME,
            revision, dispatch=is_new,
        )
        end_blocks = _date_blocks(
            "End Date", booking.end_date,
            BlockIds.END_DATE, BlockIds.END_TIME,
            ActionIds.END_DATE, ActionIds.END_TIME,
            revision, dispatch=False,
        )
        blocks.extend(start_blocks)
        _append_error(blocks, errors, "startDate")
        blocks.extend(end_blocks)
    _append_error(blocks, errors, "endDate")
    blocks.append(_context(CUSTODY_PERIOD_HELP))

    # 커스터디언
    if controls.custodian_disabled or read_only:
        if custodian is None:
            label = "-"
        elif controls.can_see_custodian:
            label = resolve_team_member_name(custodian)
        else:
            label = "Private"
        blocks.append(_read_only("Custodian", label))
    else:
        custodian_element: Dict[str, Any] = {
            "type": "external_select",
            "action_id": ActionIds.CUSTODIAN_SELECT,
            "placeholder": _plain("Select a team member"),
            "min_query_length": 0,
        }
        if custodian is not None:
            custodian_element["initial_option"] = build_custodian_option(custodian, controls.can_see_custodian)
        blocks.append({
            "type": "input",
            "block_id": BlockIds.CUSTODIAN,
            "element": custodian_element,
            "label": _plain("Custodian"),
        })
    _append_error(blocks, errors, "custodian")
    blocks.append(_context(CUSTODIAN_HELP))

    # 설명
    if controls.description_disabled or read_only:
        blocks.append(_read_only("Description", booking.description or ""))
    else:
        description_element: Dict[str, Any] = {
            "type": "plain_text_input",
            "action_id": ActionIds.DESCRIPTION_INPUT,
            "multiline": True,
            "placeholder": _plain("Add a description..."),
        }
        if booking.description:
            description_element["initial_value"] = booking.description
        blocks.append({
            "type": "input",
            "block_id": BlockIds.DESCRIPTION,
            "element": description_element,
            "label": _plain("Description"),
            "optional": True,
        })
    _append_error(blocks, errors, "description")

    # 나머지 필드 에러 (예: id)
    for field_name, message in errors.items():
        if field_name not in ("name", "startDate", "endDate", "custodian", "description"):
            blocks.append(_context(f"⚠️ {field_name}: {message}"))

    if not is_new and controls.add_to_calendar.visible:
        blocks.extend(_calendar_blocks(controls.add_to_calendar, calendar_url))

    if is_new and controls.scan.visible and not controls.scan.disabled:
        blocks.append({
            "type": "actions",
            "block_id": BlockIds.FOOTER_ACTIONS,
            "elements": [_button(controls.scan, ActionIds.SCAN, BookingIntent.SCAN)],
        })

    return modal


def _append_error(blocks: List[Dict[str, Any]], errors: Dict[str, str], field_name: str) -> None:
    if field_name in errors:
        blocks.append(_context(f"⚠️ {errors[field_name]}"))


def _calendar_blocks(control: ControlState, calendar_url: Optional[str]) -> List[Dict[str, Any]]:
    if control.disabled or not calendar_url:
        return [_context(f"📅 {control.reason}")]
    return [
        {
            "type": "actions",
            "elements": [{
                "type": "button",
                "text": _plain(f"📅 {control.label}"),
                "action_id": ActionIds.ADD_TO_CALENDAR,
                "url": calendar_url,
            }],
        },
        _context(control.reason),
    ]


def build_error_modal(error_text: str) -> Dict[str, Any]:
    """오류 안내 모달"""
    return {
        "type": "modal",
        "title": _plain("Error"),
        "close": _plain("Close"),
        "blocks": [
            {"type": "section", "text": {"type": "mrkdwn", "text": f":warning: {error_text}"}}
        ],
    }
