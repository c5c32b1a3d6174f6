# utils/error_handler.py
# 예약 폼 처리 중 발생한 에러를 로깅하고 Slack 사용자에게 알릴 문구로 바꿉니다.

from functools import wraps
from typing import Any, Callable, Optional

from .constants import ErrorMessages
from .logger import get_logger
from exceptions import (
    BookingFormError,
    NotionError,
    StatusRequiredError,
    SubmissionError,
    ValidationError,
)

logger = get_logger(__name__)


class ErrorHandler:
    """Slack 핸들러에서 잡은 에러를 사용자 메시지로 전달합니다."""

    @staticmethod
    def user_message(error: Exception, fallback: str = ErrorMessages.BOOKING_PROCESSING_FAILED) -> str:
        """
        에러 종류에 맞는 사용자 안내 문구를 만듭니다.

        입력값 에러는 필드별 상세 내용을, 그 밖의 에러는 안내 문구 뒤에 원인을 붙입니다.
        """
        if isinstance(error, ValidationError):
            return error.get_detailed_message()
        if isinstance(error, SubmissionError):
            return f"{ErrorMessages.BOOKING_SUBMIT_FAILED}: {error}"
        return f"{fallback}: {error}"

    @staticmethod
    def _log(error: Exception, user_id: str, context: str) -> None:
        if isinstance(error, ValidationError):
            logger.warning(f"사용자 입력 오류 - 사용자: {user_id}, 컨텍스트: {context}: {error}")
        elif isinstance(error, StatusRequiredError):
            logger.critical(f"예약 상태 누락 - 사용자: {user_id}, 컨텍스트: {context}: {error}")
        elif isinstance(error, (SubmissionError, NotionError)):
            logger.error(
                f"{type(error).__name__} - 사용자: {user_id}, 컨텍스트: {context}: {error}",
                exc_info=error,
            )
        else:
            logger.error(f"{context} 중 예상치 못한 오류 - 사용자: {user_id}", exc_info=error)

    @staticmethod
    def handle_slack_command_error(
        user_id: str,
        error: Exception,
        send_message_func: Callable[[str, str], None],
        context: str = "명령 처리"
    ) -> None:
        """
        Slack 명령어/액션 처리 중 발생한 에러를 임시 메시지로 알립니다.

        Args:
            user_id: 사용자 ID
            error: 발생한 에러
            send_message_func: 메시지 전송 함수
            context: 에러 발생 컨텍스트
        """
        ErrorHandler._log(error, user_id, context)
        try:
            send_message_func(user_id, ErrorHandler.user_message(error))
        except Exception as slack_error:
            logger.error(f"{ErrorMessages.MESSAGE_SEND_FAILED}: {slack_error}", exc_info=True)

    @staticmethod
    def handle_modal_error(
        user_id: str,
        trigger_id: str,
        error: Exception,
        send_error_modal_func: Callable[[str, str, str], None],
        context: str = "모달 처리"
    ) -> None:
        """
        모달을 열지 못했을 때 오류 모달로 알립니다.

        예약을 불러오지 못한 경우(SubmissionError)는 조회 실패 문구를 씁니다.
        """
        ErrorHandler._log(error, user_id, context)
        if isinstance(error, SubmissionError):
            message = f"{ErrorMessages.BOOKING_LOAD_FAILED}: {error}"
        else:
            message = ErrorHandler.user_message(error, fallback=ErrorMessages.MODAL_OPEN_FAILED)
        send_error_modal_func(user_id, trigger_id, message)


def handle_exceptions(
    logger_name: Optional[str] = None,
    default_message: str = "처리 중 오류가 발생했습니다"
):
    """
    서비스 메서드용 데코레이터: 예외를 로깅하고 도메인 예외로 맞춥니다.

    BookingFormError 계열은 그대로 다시 던지고, 그 밖의 예외는
    BookingFormError로 감싸서 던집니다 (원인은 __cause__에 남습니다).

    Args:
        logger_name: 로거 이름 (None이면 함수 모듈명 사용)
        default_message: 감쌀 때 쓰는 에러 메시지
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            func_logger = get_logger(logger_name or func.__module__)
            try:
                return func(*args, **kwargs)
            except ValidationError as e:
                func_logger.warning(f"{func.__name__} 에서 입력값 에러: {e}")
                raise
            except StatusRequiredError:
                func_logger.critical(f"{func.__name__} 에서 상태 없이 save 스키마 요청", exc_info=True)
                raise
            except BookingFormError as e:
                func_logger.error(f"{func.__name__} 에서 {type(e).__name__}: {e}")
                raise
            except Exception as e:
                func_logger.error(f"{func.__name__} 에서 예상치 못한 에러", exc_info=True)
                raise BookingFormError(f"{default_message}: {e}") from e
        return wrapper
    return decorator
