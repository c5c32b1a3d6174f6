# services/slack_service.py
# Slack API와 통신하는 로직을 담당합니다.

import os
from typing import Any, Dict, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from utils.logger import get_logger
from views.booking_view import build_error_modal

logger = get_logger(__name__)

# Slack 클라이언트 초기화
client = WebClient(token=os.environ.get("SLACK_BOT_TOKEN"))


def send_ephemeral_message(user_id: str, text: str):
    """사용자에게만 보이는 임시 메시지를 전송합니다."""
    try:
        return client.chat_postEphemeral(channel=user_id, user=user_id, text=text)
    except SlackApiError as e:
        logger.error(f"Slack 임시 메시지 전송 실패 (user: {user_id}): {e.response['error']}")
        raise


def send_error_message(user_id: str, trigger_id: str, error_text: str):
    """오류 발생 시 사용자에게 오류 Modal을 엽니다."""
    try:
        client.views_open(trigger_id=trigger_id, view=build_error_modal(error_text))
    except SlackApiError as e:
        logger.error(f"Slack 오류 Modal 전송 실패 (user: {user_id}): {e.response['error']}")


def get_user_time_zone(web_client: WebClient, user_id: str) -> Optional[str]:
    """
    Slack 프로필에서 사용자의 IANA 시간대를 조회합니다.

    조회에 실패하면 None을 반환하고 시스템 시간대를 사용하게 합니다.
    """
    try:
        response = web_client.users_info(user=user_id)
    except SlackApiError as e:
        logger.warning(f"사용자 시간대 조회 실패 (user: {user_id}): {e.response['error']}")
        return None
    return (response.get("user") or {}).get("tz")


def update_view(web_client: WebClient, view: Dict[str, Any], new_view: Dict[str, Any]):
    """열려 있는 모달을 새 뷰로 교체합니다 (hash로 동시 수정 충돌을 막습니다)."""
    try:
        return web_client.views_update(view_id=view["id"], hash=view.get("hash"), view=new_view)
    except SlackApiError as e:
        logger.error(f"모달 업데이트 실패 (view: {view.get('id')}): {e.response['error']}")
        raise
