# services/booking_api.py
# 예약 백엔드(제출 대상)와 HTTP로 통신하는 로직을 담당합니다.

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from config import BookingApiConfig, get_booking_api_config
from exceptions import SubmissionError
from models.booking import Booking, BookingIntent
from utils.error_handler import handle_exceptions
from utils.logger import LoggerMixin


@dataclass
class BookingSubmission:
    """백엔드로 보낼 폼 제출 내용"""
    intent: BookingIntent
    name: Optional[str] = None
    custodian: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    id: Optional[str] = None
    description: Optional[str] = None
    asset_ids: List[str] = field(default_factory=list)
    name_change_only: Optional[str] = None

    def to_form(self) -> Dict[str, str]:
        """
        form-urlencoded 필드로 변환합니다.

        assetIds는 assetIds[0], assetIds[1] ... 처럼 인덱스를 붙여 보냅니다.
        """
        form: Dict[str, str] = {}
        if self.id:
            form["id"] = self.id
        if self.name is not None:
            form["name"] = self.name
        if self.description is not None:
            form["description"] = self.description
        if self.custodian is not None:
            form["custodian"] = self.custodian
        if self.start_date is not None:
            form["startDate"] = self.start_date
        if self.end_date is not None:
            form["endDate"] = self.end_date
        for index, asset_id in enumerate(self.asset_ids):
            form[f"assetIds[{index}]"] = asset_id
        if self.name_change_only is not None:
            form["nameChangeOnly"] = self.name_change_only
        form["intent"] = self.intent.value
        return form


class BookingApiClient(LoggerMixin):
    """예약 백엔드 클라이언트"""

    def __init__(self, config: Optional[BookingApiConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or get_booking_api_config()
        self.session = session or requests.Session()
        if self.config.api_token:
            self.session.headers["Authorization"] = f"Bearer {self.config.api_token}"

    def booking_url(self, booking_id: Optional[str] = None) -> str:
        """예약 페이지 URL (새 예약이면 /bookings/new)"""
        if booking_id:
            return f"{self.config.base_url}/bookings/{booking_id}"
        return f"{self.config.base_url}/bookings/new"

    def calendar_url(self, booking_id: str) -> str:
        """예약 페이지 기준 상대 경로 cal.ics의 절대 URL"""
        return urljoin(self.booking_url(booking_id) + "/", "cal.ics")

    @handle_exceptions(default_message="예약 정보를 불러오지 못했습니다")
    def get_booking(self, booking_id: str) -> Booking:
        """
        예약을 조회합니다.

        Args:
            booking_id: 예약 ID

        Returns:
            Booking: 조회된 예약

        Raises:
            SubmissionError: 요청 실패 시
        """
        data = self._request("GET", f"{self.config.base_url}/api/bookings/{booking_id}")
        booking = Booking.from_dict(data.get("booking", data))
        self.log_info("예약 조회 완료", booking_id=booking_id)
        return booking

    @handle_exceptions(default_message="예약 제출에 실패했습니다")
    def submit(self, submission: BookingSubmission) -> Dict[str, Any]:
        """
        검증된 폼 내용을 예약 페이지 주소로 POST 합니다.

        Args:
            submission: 제출 내용

        Returns:
            Dict[str, Any]: 백엔드 응답 (JSON이 아니면 빈 딕셔너리)

        Raises:
            SubmissionError: 요청 실패 시
        """
        url = self.booking_url(submission.id)
        result = self._request("POST", url, data=submission.to_form())
        self.log_info("예약 제출 완료", intent=submission.intent.value, booking_id=submission.id)
        return result

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.exceptions.Timeout:
            raise SubmissionError(f"요청 시간 초과: {url}")
        except requests.exceptions.ConnectionError:
            raise SubmissionError(f"연결 실패: {url}")

        if not response.ok:
            self.log_warning(f"예약 백엔드 오류 응답: {response.status_code}", url=url)
            raise SubmissionError(
                f"{method} {url} 실패 ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            return {}
