# services/team_member_service.py
# Notion 팀 멤버 DB에서 커스터디언 후보를 조회하는 로직을 담당합니다.

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from notion_client import APIResponseError, Client

from config import AppConfig, NotionConfig, get_notion_config
from exceptions import NotionError
from models.booking import TeamMember
from utils.error_handler import handle_exceptions
from utils.logger import LoggerMixin, get_logger

logger = get_logger(__name__)


@dataclass
class TeamMemberPage:
    """팀 멤버 검색 결과 한 페이지"""
    items: List[TeamMember] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False


class TeamMemberService(LoggerMixin):
    """Notion 팀 멤버 명단 서비스 클래스"""

    def __init__(self, config: Optional[NotionConfig] = None, client: Optional[Any] = None):
        """
        팀 멤버 서비스 초기화

        Args:
            config: Notion 설정 (None이면 환경변수에서 로드)
            client: Notion 클라이언트 (테스트에서 주입)
        """
        self.config = config or get_notion_config()
        self.client = client or Client(auth=self.config.api_key)
        self.props = AppConfig.NOTION_PROPS

    @handle_exceptions(default_message="팀 멤버 검색에 실패했습니다")
    def search(
        self,
        query: str = "",
        page_size: Optional[int] = None,
        start_cursor: Optional[str] = None
    ) -> TeamMemberPage:
        """
        이름으로 팀 멤버를 검색합니다 (삭제된 멤버 제외).

        Args:
            query: 이름에 포함될 문자열 (빈 문자열이면 전체)
            page_size: 페이지 크기 (None이면 AppConfig.TEAM_MEMBER_PAGE_SIZE)
            start_cursor: 다음 페이지 커서

        Returns:
            TeamMemberPage: 검색 결과 페이지

        Raises:
            NotionError: Notion API 에러 발생 시
        """
        params: Dict[str, Any] = {
            "database_id": self.config.team_member_database_id,
            "filter": self._build_search_filter(query),
            "sorts": [{"property": self.props["name"], "direction": "ascending"}],
            "page_size": page_size or AppConfig.TEAM_MEMBER_PAGE_SIZE,
        }
        if start_cursor:
            params["start_cursor"] = start_cursor

        try:
            response = self.client.databases.query(**params)
        except Exception as e:
            self.log_error("팀 멤버 조회 중 오류", query=query)
            raise NotionError(f"Notion DB 조회에 실패했습니다: {e}")

        items = [self._parse_team_member(page) for page in response.get("results", [])]
        self.log_info(f"팀 멤버 검색 완료: {len(items)}명", query=query)
        return TeamMemberPage(
            items=items,
            next_cursor=response.get("next_cursor"),
            has_more=bool(response.get("has_more")),
        )

    @handle_exceptions(default_message="팀 멤버 수를 세지 못했습니다")
    def count(self, query: str = "") -> int:
        """
        검색 조건에 맞는 팀 멤버 수를 반환합니다.

        Notion은 개수 API가 없으므로 모든 페이지를 순회합니다.
        """
        total = 0
        cursor = None
        while True:
            page = self.search(query=query, page_size=100, start_cursor=cursor)
            total += len(page.items)
            if not page.has_more or not page.next_cursor:
                return total
            cursor = page.next_cursor
            # Notion API 요청 제한
            time.sleep(self.config.api_call_delay)

    @handle_exceptions(default_message="커스터디언 조회에 실패했습니다")
    def find_by_ref(self, custodian_ref: Optional[str]) -> Optional[TeamMember]:
        """
        커스터디언 참조(팀 멤버 ID 또는 사용자 ID)에 해당하는 팀 멤버를 찾습니다.

        Args:
            custodian_ref: 팀 멤버 ID 또는 사용자 ID

        Returns:
            Optional[TeamMember]: 찾은 팀 멤버 (없으면 None)
        """
        if not custodian_ref:
            return None

        try:
            response = self.client.databases.query(
                database_id=self.config.team_member_database_id,
                filter={
                    "property": self.props["user_id"],
                    "rich_text": {"equals": custodian_ref},
                },
                page_size=1,
            )
        except Exception as e:
            self.log_error("커스터디언 조회 중 오류", custodian_ref=custodian_ref)
            raise NotionError(f"Notion DB 조회에 실패했습니다: {e}")

        results = response.get("results", [])
        if results:
            return self._parse_team_member(results[0])

        try:
            page = self.client.pages.retrieve(page_id=custodian_ref)
        except APIResponseError as e:
            # 팀 멤버 ID가 아닌 값으로 페이지를 조회하면 Notion이 404를 돌려줍니다
            self.log_warning(f"커스터디언을 찾지 못했습니다: {e}", custodian_ref=custodian_ref)
            return None

        if not page or page.get("archived"):
            return None
        return self._parse_team_member(page)

    def _build_search_filter(self, query: str) -> Dict[str, Any]:
        """검색 조건 필터를 생성합니다."""
        conditions: List[Dict[str, Any]] = [
            {"property": self.props["deleted"], "checkbox": {"equals": False}}
        ]
        if query and query.strip():
            conditions.append(
                {"property": self.props["name"], "title": {"contains": query.strip()}}
            )
        return {"and": conditions}

    def _parse_team_member(self, page: Dict[str, Any]) -> TeamMember:
        """Notion 페이지를 TeamMember로 변환합니다."""
        props = page.get("properties", {})
        return TeamMember(
            id=page["id"],
            name=self._plain_text(props.get(self.props["name"]), "title") or "",
            user_id=self._plain_text(props.get(self.props["user_id"]), "rich_text"),
            first_name=self._plain_text(props.get(self.props["first_name"]), "rich_text"),
            last_name=self._plain_text(props.get(self.props["last_name"]), "rich_text"),
            email=(props.get(self.props["email"]) or {}).get("email"),
        )

    @staticmethod
    def _plain_text(prop: Optional[Dict[str, Any]], kind: str) -> Optional[str]:
        if not prop or not prop.get(kind):
            return None
        text = "".join(part.get("plain_text", "") for part in prop[kind])
        return text or None
