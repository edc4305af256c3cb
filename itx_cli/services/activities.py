"""티켓 활동 집계 서비스

티켓 하나의 커뮤니케이션 이력을 시간순으로 구성한다.

파이프라인:
1. 티켓 조회 (eactId + 코멘트)
2. 전체 티켓 레코드 조회 (링크 그래프)
3. Case 링크 → 연결된 활동 ID
4. 활동 일괄 조회 (멤버 포함)
5. 이메일 대화(컨테이너) → 개별 이메일로 확장 (1단계만)
6. 생성 시각 오름차순 정렬 (시각 없음 = epoch)
7. 이메일 본문 병렬 조회 + 평문 변환 (개별 실패는 빈 본문)

1~5단계 실패는 전체 집계를 중단시키고, 7단계만 이메일 단위로 실패를 흡수한다.
"""
import asyncio
from typing import Optional

from itx_cli.core.errors import EmailBodyUnavailable, ItxError, TicketNotFoundError
from itx_cli.core.formatting import sort_key
from itx_cli.core.gateway import HelpdeskGateway
from itx_cli.core.models import (
    LINK_DIRECTION_FROM,
    Activity,
    Comment,
    LinkType,
    Ticket,
    TicketActivities,
)
from itx_cli.utils.html import html_to_text
from itx_cli.utils.logger import get_logger

logger = get_logger(__name__)


class ActivityAggregator:
    """티켓 활동 집계기"""

    def __init__(self, gateway: HelpdeskGateway):
        self.gateway = gateway

    async def aggregate(self, seq_no: int) -> TicketActivities:
        """
        티켓 활동 집계

        Args:
            seq_no: 티켓 번호

        Returns:
            정렬/본문 보강된 활동 목록 + 원본 코멘트 목록

        Raises:
            TicketNotFoundError: 티켓 없음
            UpstreamError: 필수 조회 실패
        """
        ticket = await self._load_ticket(seq_no)
        comments = list(ticket.texts)

        linked_ids = await self._linked_activity_ids(ticket.eact_id)

        activities: list[Activity] = []
        if linked_ids:
            activities = await self._load_activities(linked_ids)
            activities = await self._expand_conversations(activities)

        activities = self._sort(activities)
        await self._attach_email_bodies(activities)

        logger.debug(
            "Aggregated ticket activities",
            seq_no=seq_no,
            activities=len(activities),
            comments=len(comments),
        )
        return TicketActivities(activities=activities, comments=comments)

    # ===== 단계 =====

    async def _load_ticket(self, seq_no: int) -> Ticket:
        ticket = await self.gateway.fetch_ticket(seq_no, include_comments=True)
        if ticket is None:
            raise TicketNotFoundError(seq_no)
        return ticket

    async def _linked_activity_ids(self, ticket_eact_id: Optional[int]) -> list[int]:
        """티켓을 대상으로 하는 Case 링크의 출발 활동 ID"""
        if ticket_eact_id is None:
            return []

        full_tickets = await self.gateway.search_tickets_by_activity_id([ticket_eact_id])
        full_ticket = full_tickets[0] if full_tickets else None
        if full_ticket is None:
            return []

        linked_ids = []
        for link in full_ticket.links:
            if link.type != LinkType.CASE:
                continue
            if not link.target or link.target.eact_id != ticket_eact_id:
                continue
            if link.source and link.source.eact_id is not None:
                linked_ids.append(link.source.eact_id)
        return linked_ids

    async def _load_activities(self, eact_ids: list[int]) -> list[Activity]:
        return await self.gateway.search_activities_by_ids(eact_ids, include_members=True)

    async def _expand_conversations(self, activities: list[Activity]) -> list[Activity]:
        """이메일 대화 컨테이너를 개별 이메일로 교체 (중첩 컨테이너는 확장하지 않음)"""
        conversations = [a for a in activities if a.is_email_conversation]

        working = list(activities)
        for conversation in conversations:
            emails = await self.gateway.search_activities_by_link(
                [conversation.eact_id],
                LinkType.CONVERSATION,
                LINK_DIRECTION_FROM,
                include_members=True,
            )
            working = [a for a in working if a.eact_id != conversation.eact_id]
            working.extend(emails)
            logger.debug(
                "Expanded email conversation",
                eact_id=conversation.eact_id,
                emails=len(emails),
            )
        return working

    @staticmethod
    def _sort(activities: list[Activity]) -> list[Activity]:
        return sorted(activities, key=lambda a: sort_key(a.creation_ts))

    async def _attach_email_bodies(self, activities: list[Activity]) -> None:
        """이메일 본문 병렬 조회 (모두 완료될 때까지 대기, 실패는 빈 본문)"""
        emails = [a for a in activities if a.is_email]
        if not emails:
            return

        results = await asyncio.gather(
            *(self._fetch_body(email) for email in emails),
            return_exceptions=True,
        )

        bodies: dict[Optional[int], str] = {}
        for email, result in zip(emails, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.debug(
                    "Email content unavailable",
                    eact_id=email.eact_id,
                    error=str(result),
                )
                bodies[email.eact_id] = ""
            else:
                bodies[email.eact_id] = result

        for email in emails:
            email.email_body = bodies.get(email.eact_id, "")

    async def _fetch_body(self, email: Activity) -> str:
        if email.eact_id is None:
            raise EmailBodyUnavailable(0, "activity has no eactId")
        try:
            html = await self.gateway.fetch_email_body(email.eact_id)
        except ItxError as e:
            raise EmailBodyUnavailable(email.eact_id, str(e)) from e
        return html_to_text(html) if isinstance(html, str) else ""
