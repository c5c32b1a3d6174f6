# utils/logger.py
# 통합 로깅 시스템을 제공합니다.

import logging
import sys
from typing import Any, Dict, Optional

# LogRecord 기본 속성 (extra로 넘긴 필드만 골라내기 위해 사용)
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

# 요청마다 INFO 로그를 많이 남기는 외부 라이브러리
_NOISY_LOGGERS = ("slack_bolt", "slack_sdk", "urllib3", "httpx", "notion_client")


class ExtraFieldsFormatter(logging.Formatter):
    """log_info(..., booking_id=...) 처럼 넘긴 필드를 메시지 뒤에 붙이는 포매터"""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        fields = {
            key: value for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if not fields:
            return message
        rendered = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
        return f"{message} [{rendered}]"


def setup_logging(
    level: str = "WARNING",
    format_string: Optional[str] = None,
    log_file: Optional[str] = "app.log",
) -> None:
    """
    프로젝트 전체의 로깅을 설정합니다.

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: 로그 포맷 문자열
        log_file: 로그 파일 경로 (None이면 파일 로그를 남기지 않음)
    """
    if format_string is None:
        format_string = (
            "%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
        )

    formatter = ExtraFieldsFormatter(format_string)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=getattr(logging, level.upper()), handlers=handlers, force=True)

    # Slack/HTTP 라이브러리 로그는 경고부터만 남깁니다
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    모듈별 로거를 반환합니다.

    Args:
        name: 로거 이름 (보통 __name__)

    Returns:
        logging.Logger: 설정된 로거 인스턴스
    """
    return logging.getLogger(name)


class LoggerMixin:
    """로깅 기능을 제공하는 믹스인 클래스 (키워드 인자는 로그 필드로 남습니다)"""

    @property
    def logger(self) -> logging.Logger:
        """클래스별 로거 반환"""
        return get_logger(self.__class__.__module__ + "." + self.__class__.__name__)

    def _log(self, level: int, message: str, fields: Dict[str, Any], exc_info: bool = False) -> None:
        self.logger.log(level, message, exc_info=exc_info, extra=fields)

    def log_info(self, message: str, **kwargs) -> None:
        """정보 로그"""
        self._log(logging.INFO, message, kwargs)

    def log_error(self, message: str, exc_info: bool = True, **kwargs) -> None:
        """에러 로그"""
        self._log(logging.ERROR, message, kwargs, exc_info=exc_info)

    def log_warning(self, message: str, **kwargs) -> None:
        """경고 로그"""
        self._log(logging.WARNING, message, kwargs)

    def log_debug(self, message: str, **kwargs) -> None:
        """디버그 로그"""
        self._log(logging.DEBUG, message, kwargs)
