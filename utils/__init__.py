# utils/__init__.py
# 공통 유틸리티 함수들을 담당하는 패키지입니다.

from .logger import LoggerMixin, setup_logging, get_logger
from .error_handler import ErrorHandler, handle_exceptions
from .date_utils import (
    DateParser,
    on_start_date_change,
    system_clock,
    wall_clock_now,
)

__all__ = [
    'LoggerMixin',
    'setup_logging',
    'get_logger',
    'ErrorHandler',
    'handle_exceptions',
    'DateParser',
    'on_start_date_change',
    'system_clock',
    'wall_clock_now',
]
