# utils/constants.py
# 프로젝트 전체에서 사용하는 상수들을 정의합니다.


class SlackCommands:
    """Slack 슬래시 커맨드 상수"""
    BOOKING = "/booking"


class DateFormats:
    """날짜 형식 상수"""
    ISO_DATE = "%Y-%m-%d"
    TIME_24H = "%H:%M"
    DATETIME_INPUT = "%Y-%m-%dT%H:%M"
    DATETIME_DISPLAY = "%Y-%m-%d %H:%M"


class CallbackIds:
    """콜백 ID 상수"""
    BOOKING_NEW = "booking_new_submit"
    BOOKING_EDIT = "booking_edit_submit"


class BlockIds:
    """모달 블록 ID 상수 (날짜 블록은 버전 접미사가 붙습니다)"""
    NAME = "name_block"
    START_DATE = "start_date_block"
    START_TIME = "start_time_block"
    END_DATE = "end_date_block"
    END_TIME = "end_time_block"
    CUSTODIAN = "custodian_block"
    DESCRIPTION = "description_block"
    HEADER_ACTIONS = "header_actions_block"
    FOOTER_ACTIONS = "footer_actions_block"


class ActionIds:
    """액션 ID 상수"""
    NAME_INPUT = "name_input"
    START_DATE = "start_date_action"
    START_TIME = "start_time_action"
    END_DATE = "end_date_action"
    END_TIME = "end_time_action"
    CUSTODIAN_SELECT = "custodian_select"
    DESCRIPTION_INPUT = "description_input"
    RESERVE = "booking_reserve"
    CHECK_OUT = "booking_check_out"
    CHECK_IN = "booking_check_in"
    SCAN = "booking_scan"
    ACTIONS_MENU = "booking_actions_menu"
    ADD_TO_CALENDAR = "booking_add_to_calendar"


# 폼 필드명 -> 에러를 표시할 블록 ID
FIELD_BLOCKS = {
    "name": BlockIds.NAME,
    "startDate": BlockIds.START_DATE,
    "endDate": BlockIds.END_DATE,
    "custodian": BlockIds.CUSTODIAN,
    "description": BlockIds.DESCRIPTION,
}


class ErrorMessages:
    """에러 메시지 상수"""
    NAME_REQUIRED = "Name is required"
    CUSTODIAN_REQUIRED = "Please select a custodian"
    CUSTODIAN_UNREADABLE = "Custodian could not be read"
    INVALID_DATE = "Invalid date"
    FIELD_REQUIRED = "Field required"
    START_DATE_IN_PAST = "Start date must be in the future"
    END_BEFORE_START = "End date cannot be earlier than start date"
    STATUS_REQUIRED = "Status is required for save action."
    FORM_INVALID = "Please fix the highlighted fields"
    MODAL_OPEN_FAILED = "😥 Could not open the booking form"
    BOOKING_LOAD_FAILED = "😥 Could not load the booking"
    BOOKING_SUBMIT_FAILED = "😥 Could not submit the booking. Please try again in a moment"
    BOOKING_PROCESSING_FAILED = "😥 Something went wrong while handling your request"
    MESSAGE_SEND_FAILED = "Failed to deliver the error message"


class DisabledReasons:
    """비활성화된 버튼의 안내 문구"""
    UNAVAILABLE_ASSETS = (
        "You have some assets in your booking that are marked as unavailable. "
        "Either remove the assets from this booking or make them available again"
    )
    ALREADY_BOOKED_ASSETS = (
        "Your booking has assets that are already booked for the desired period. "
        "You need to resolve that before you can reserve"
    )
    NO_ASSETS = "You need to add assets to your booking before you can reserve it"
    ASSETS_IN_CUSTODY = (
        "Some assets in this booking are currently in custody. "
        "You need to resolve that before you can check-out"
    )
    ASSETS_NOT_AVAILABLE = (
        "Some assets in this booking are not Available because "
        "they’re part of an Ongoing or Overdue booking"
    )
    CALENDAR_UNAVAILABLE = "Not possible to add to calendar due to booking status"
    CALENDAR_AVAILABLE = "Download this booking as a calendar event"


class SuccessMessages:
    """성공 메시지 상수"""
    BOOKING_CREATED = "✅ Booking created"
    BOOKING_SAVED = "✅ Booking saved"
    BOOKING_SUBMITTED = "✅ Your request was sent"
