# app.py
# Slack Bolt 앱을 소켓 모드로 초기화하고, 예약 폼 관련 요청을 처리하는 메인 파일입니다.

from typing import Any, Dict, Optional

from slack_bolt.adapter.socket_mode import SocketModeHandler
from slack_bolt import App
from dotenv import load_dotenv

# .env 파일에서 환경 변수 로드
load_dotenv()

# 설정 및 유틸리티 임포트
from config import AppConfig, get_organization_config, get_slack_config
from utils.logger import setup_logging, get_logger
from utils.error_handler import ErrorHandler
from utils.date_utils import default_booking_period
from utils.constants import ActionIds, CallbackIds, ErrorMessages, SlackCommands, SuccessMessages

# 서비스, 뷰, 모델, 예외 임포트
from models.booking import Booking, BookingIntent, TeamMember
from models.user_context import UserContext
from views.booking_view import build_booking_modal, build_custodian_option
from services import (
    BookingApiClient,
    BookingFormService,
    ClientHints,
    FormMetadata,
    TeamMemberService,
    build_form_controls,
    slack_service,
)
from services.booking_form_service import errors_to_blocks
from exceptions import StatusRequiredError

# 로깅 설정
setup_logging(AppConfig.LOG_LEVEL, log_file=AppConfig.LOG_FILE or None)
logger = get_logger(__name__)

# 설정 로드
slack_config = get_slack_config()
organization_config = get_organization_config()

# Bolt 앱과 서비스 초기화
app = App(token=slack_config.bot_token)
booking_api = BookingApiClient()
booking_form_service = BookingFormService(api=booking_api)
team_member_service = TeamMemberService()


def get_user_context(client, user_id: str) -> UserContext:
    """Slack 사용자와 조직 설정으로 UserContext를 만듭니다."""
    return UserContext(
        user_id=user_id,
        roles=organization_config.roles_for(user_id),
        organization=organization_config.to_organization(),
        time_zone=slack_service.get_user_time_zone(client, user_id),
    )


def render_booking_modal(
    booking: Booking,
    user: UserContext,
    custodian: Optional[TeamMember] = None,
    revision: int = 0,
    errors: Optional[Dict[str, str]] = None,
    notice: Optional[str] = None,
) -> Dict[str, Any]:
    """예약과 사용자에 맞는 컨트롤 상태를 계산해 모달을 만듭니다."""
    if custodian is None:
        custodian = team_member_service.find_by_ref(booking.custodian_ref)
    controls = build_form_controls(booking, user, custodian=custodian)
    return build_booking_modal(
        booking,
        controls,
        custodian=custodian,
        revision=revision,
        errors=errors,
        calendar_url=booking_api.calendar_url(booking.id) if booking.id else None,
        notice=notice,
    )


def new_booking_for(user: UserContext) -> Booking:
    """새 예약 기본값: 다음 10분 단위 시작, 18:00 종료"""
    start_date, end_date = default_booking_period(time_zone=user.time_zone)
    booking = Booking(start_date=start_date, end_date=end_date)
    # 셀프서비스/기본 사용자는 본인이 커스터디언입니다
    if user.is_base_or_self_service:
        booking.custodian_ref = user.user_id
    return booking


# --- Slack Command Handlers ---
@app.command(SlackCommands.BOOKING)
def handle_booking_command(ack, body, client):
    """예약 모달을 여는 명령어를 처리합니다. (/booking [예약 ID])"""
    ack()

    user_id = body["user_id"]
    trigger_id = body["trigger_id"]
    booking_id = body.get("text", "").strip()

    try:
        user = get_user_context(client, user_id)
        booking = booking_api.get_booking(booking_id) if booking_id else new_booking_for(user)
        client.views_open(trigger_id=trigger_id, view=render_booking_modal(booking, user))
        logger.info(f"예약 모달 열기 성공 - 사용자: {user_id}, 예약: {booking_id or 'new'}")

    except Exception as e:
        ErrorHandler.handle_modal_error(
            user_id=user_id,
            trigger_id=trigger_id,
            error=e,
            send_error_modal_func=slack_service.send_error_message,
            context="예약 모달 열기"
        )


# --- Slack View Handlers ---
def _handle_submission(ack, body, client, intent: BookingIntent, success_message: str):
    view = body["view"]
    user_id = body["user"]["id"]
    hints = ClientHints(time_zone=slack_service.get_user_time_zone(client, user_id))

    try:
        prepared = booking_form_service.prepare(view, intent, hints)
    except StatusRequiredError as e:
        # 상태 없이 저장 요청: 모달을 닫고 임시 메시지로 알립니다
        ack()
        ErrorHandler.handle_slack_command_error(
            user_id=user_id,
            error=e,
            send_message_func=slack_service.send_ephemeral_message,
            context="예약 저장"
        )
        return

    if not prepared.is_valid:
        # 입력값 오류: 모달을 닫지 않고 필드에 오류 메시지 표시
        ack(response_action="errors", errors=errors_to_blocks(prepared.result.errors, view))
        logger.info(f"입력값 오류로 모달 유지 - 사용자: {user_id}: {sorted(prepared.result.errors)}")
        return

    # 검증 성공 시 즉시 모달 닫기
    ack()
    try:
        booking_form_service.submit(prepared)
        slack_service.send_ephemeral_message(user_id, success_message)
        logger.info(f"예약 제출 완료 - 사용자: {user_id}, intent: {intent.value}")
    except Exception as e:
        ErrorHandler.handle_slack_command_error(
            user_id=user_id,
            error=e,
            send_message_func=slack_service.send_ephemeral_message,
            context="예약 제출"
        )


@app.view(CallbackIds.BOOKING_NEW)
def handle_new_booking_submission(ack, body, client):
    """새 예약 모달 제출을 처리합니다."""
    _handle_submission(ack, body, client, BookingIntent.CREATE, SuccessMessages.BOOKING_CREATED)


@app.view(CallbackIds.BOOKING_EDIT)
def handle_edit_booking_submission(ack, body, client):
    """예약 수정 모달 제출(저장)을 처리합니다."""
    _handle_submission(ack, body, client, BookingIntent.SAVE, SuccessMessages.BOOKING_SAVED)


# --- Modal Action Handlers ---
@app.action(ActionIds.START_DATE)
@app.action(ActionIds.START_TIME)
def handle_start_date_change(ack, body, client):
    """새 예약의 시작일이 종료일을 넘어서면 종료일을 같은 날 18:00으로 맞춥니다."""
    ack()

    view = body["view"]
    user_id = body["user"]["id"]

    try:
        new_end = booking_form_service.adjust_end_date(view)
        if new_end is None:
            return

        booking = booking_form_service.current_booking(view)
        booking.end_date = new_end
        metadata = FormMetadata.decode(view.get("private_metadata"))

        user = get_user_context(client, user_id)
        slack_service.update_view(
            client,
            view,
            render_booking_modal(
                booking,
                user,
                custodian=booking_form_service.current_custodian(view),
                revision=metadata.revision + 1,
            ),
        )
        logger.info(f"종료일 자동 조정 - 사용자: {user_id}, 종료일: {new_end}")

    except Exception as e:
        logger.error(f"종료일 자동 조정 실패 - 사용자: {user_id}: {e}", exc_info=True)


def _handle_workflow_action(body, client, intent: BookingIntent):
    """모달 안의 워크플로 버튼(확정, 체크아웃, 체크인, 스캔, 취소, 보관)을 처리합니다."""
    view = body["view"]
    user_id = body["user"]["id"]

    try:
        user = get_user_context(client, user_id)
        prepared = booking_form_service.prepare(view, intent, ClientHints(time_zone=user.time_zone))
        metadata = FormMetadata.decode(view.get("private_metadata"))

        if not prepared.is_valid:
            # 버튼 액션은 response_action을 쓸 수 없으므로 모달에 인라인으로 표시합니다
            stored = booking_api.get_booking(metadata.booking_id) if metadata.booking_id else None
            slack_service.update_view(
                client,
                view,
                render_booking_modal(
                    booking_form_service.current_booking(view, base=stored),
                    user,
                    custodian=booking_form_service.current_custodian(view),
                    revision=metadata.revision + 1,
                    errors=prepared.result.errors,
                    notice=f"⚠️ {ErrorMessages.FORM_INVALID}",
                ),
            )
            return

        booking_form_service.submit(prepared)
        logger.info(f"예약 워크플로 요청 완료 - 사용자: {user_id}, intent: {intent.value}")

        if metadata.booking_id:
            booking = booking_api.get_booking(metadata.booking_id)
        else:
            booking = booking_form_service.current_booking(view)
        slack_service.update_view(
            client,
            view,
            render_booking_modal(booking, user, revision=metadata.revision + 1, notice=SuccessMessages.BOOKING_SUBMITTED),
        )

    except Exception as e:
        ErrorHandler.handle_slack_command_error(
            user_id=user_id,
            error=e,
            send_message_func=slack_service.send_ephemeral_message,
            context=f"예약 {intent.value}"
        )


@app.action(ActionIds.RESERVE)
def handle_reserve(ack, body, client):
    """예약 확정(Reserve / Request reservation) 버튼"""
    ack()
    _handle_workflow_action(body, client, BookingIntent.RESERVE)


@app.action(ActionIds.CHECK_OUT)
def handle_check_out(ack, body, client):
    """체크아웃 버튼"""
    ack()
    _handle_workflow_action(body, client, BookingIntent.CHECK_OUT)


@app.action(ActionIds.CHECK_IN)
def handle_check_in(ack, body, client):
    """체크인 버튼"""
    ack()
    _handle_workflow_action(body, client, BookingIntent.CHECK_IN)


@app.action(ActionIds.SCAN)
def handle_scan(ack, body, client):
    """QR 코드 스캔 버튼 (자산 목록이 아직 없는 새 예약)"""
    ack()
    _handle_workflow_action(body, client, BookingIntent.SCAN)


@app.action(ActionIds.ACTIONS_MENU)
def handle_actions_menu(ack, body, client):
    """예약 취소/보관 메뉴"""
    ack()
    intent = BookingIntent(body["actions"][0]["selected_option"]["value"])
    _handle_workflow_action(body, client, intent)


@app.action(ActionIds.ADD_TO_CALENDAR)
def handle_add_to_calendar(ack):
    """캘린더 버튼은 URL 버튼이므로 요청만 승인합니다."""
    ack()


# --- Options Handlers ---
@app.options(ActionIds.CUSTODIAN_SELECT)
def handle_custodian_options(ack, body):
    """커스터디언 선택 목록을 팀 멤버 명단에서 검색합니다."""
    query = body.get("value", "")

    try:
        page = team_member_service.search(query=query)
        total = team_member_service.count(query=query) if page.has_more else len(page.items)
        ack(option_groups=[{
            "label": {"type": "plain_text", "text": f"Team members ({len(page.items)} of {total})"},
            "options": [build_custodian_option(member) for member in page.items],
        }])
    except Exception as e:
        logger.error(f"커스터디언 검색 실패 - 검색어: {query}: {e}", exc_info=True)
        ack(options=[])


# --- Main Execution ---
if __name__ == "__main__":
    logger.info("🚀 자산 예약 폼 시작")

    try:
        handler = SocketModeHandler(app, slack_config.app_token)
        handler.start()
    except KeyboardInterrupt:
        logger.info("👋 시스템 종료 요청")
    except Exception as e:
        logger.error(f"❌ 시스템 시작 실패: {e}", exc_info=True)
    finally:
        logger.info("🔚 자산 예약 폼 종료")
