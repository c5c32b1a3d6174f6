# exceptions.py
# 프로젝트에서 사용할 사용자 정의 예외를 정의합니다.

from typing import Dict, Optional


class BookingFormError(Exception):
    """예약 폼 처리 중 발생하는 예외의 기본 클래스"""
    pass


class ValidationError(BookingFormError):
    """입력값 유효성 검사 실패 시 발생하는 예외"""

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        """
        Args:
            message: 기본 에러 메시지
            field_errors: 필드별 에러 메시지 (필드명 -> 메시지)
        """
        super().__init__(message)
        self.field_errors = field_errors or {}

    def get_detailed_message(self) -> str:
        """필드별 에러를 포함한 상세 메시지를 반환합니다."""
        if not self.field_errors:
            return str(self)

        lines = [str(self)]
        for field, message in self.field_errors.items():
            lines.append(f"• {field}: {message}")
        return "\n".join(lines)


class StatusRequiredError(BookingFormError):
    """save 스키마를 요청했지만 예약 상태가 주어지지 않은 경우 (호출 측 버그)"""
    pass


class NotionError(BookingFormError):
    """Notion API 관련 작업 실패 시 발생하는 예외"""
    pass


class SubmissionError(BookingFormError):
    """예약 백엔드로의 요청이 실패했을 때 발생하는 예외"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
