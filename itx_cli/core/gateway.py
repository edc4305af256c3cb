"""API 게이트웨이 프로토콜

활동 집계기가 의존하는 최소 조회 계약.
ItxClient가 구현하며, 테스트에서는 AsyncMock으로 대체한다.
"""
from typing import Optional, Protocol

from itx_cli.core.models import Activity, Ticket


class HelpdeskGateway(Protocol):
    """헬프데스크 게이트웨이 프로토콜"""

    async def fetch_ticket(
        self,
        seq_no: int,
        include_comments: bool = False,
        include_members: bool = False,
    ) -> Optional[Ticket]:
        """티켓 번호로 조회 (없으면 None)"""
        ...

    async def search_tickets_by_activity_id(
        self,
        eact_ids: list[int],
    ) -> list[Ticket]:
        """eactId로 티켓 검색 (링크 그래프 포함)"""
        ...

    async def search_activities_by_ids(
        self,
        eact_ids: list[int],
        include_members: bool = False,
    ) -> list[Activity]:
        """eactId 일괄 활동 조회"""
        ...

    async def search_activities_by_link(
        self,
        eact_ids: list[int],
        link_type: int,
        direction: str,
        include_members: bool = False,
    ) -> list[Activity]:
        """링크로 연결된 활동 조회"""
        ...

    async def fetch_email_body(self, eact_id: int) -> str:
        """이메일 원본 HTML 본문"""
        ...
