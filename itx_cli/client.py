"""ITX Portal API 클라이언트

주요 기능:
- SSO 클러스터에서 세션별 활성 엔드포인트 해석 (/rest/api/state)
- 인증 토큰(tokenv2/rcntrl/ccntrl)을 쿼리 파라미터로 전달하는 요청
- 티켓/활동/링크/이메일 본문 조회 (HelpdeskGateway 구현)
- 티켓 생성/수정, 코멘트 등록, 사용자 검색

재시도/캐시 없음. 실패는 UpstreamError로 전파하고, 사용자에게 보일 한 줄 메시지는
커맨드가 출력하므로 여기서는 debug 로그만 남긴다.
"""
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from itx_cli.config import Settings, get_settings
from itx_cli.core.errors import NotAuthenticatedError, UpstreamError
from itx_cli.core.models import (
    Activity,
    Ticket,
    User,
)
from itx_cli.store import ConfigStore, ItxConfig
from itx_cli.utils.logger import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _first(result: Any) -> Optional[dict]:
    """배열 응답이면 첫 요소, 객체면 그대로"""
    if isinstance(result, list):
        result = result[0] if result else None
    return result if isinstance(result, dict) and result else None


def _as_list(result: Any) -> list[dict]:
    if result is None:
        return []
    if isinstance(result, dict):
        return [result]
    if isinstance(result, list):
        return [item for item in result if isinstance(item, dict)]
    return []


def _validate(model: type[ModelT], data: dict) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise UpstreamError(f"Unexpected {model.__name__} payload: {e}") from e


class ItxClient:
    """ITX Portal REST API 클라이언트"""

    def __init__(
        self,
        config: Optional[ItxConfig] = None,
        store: Optional[ConfigStore] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: 저장된 설정 (없으면 store에서 로드)
            store: 활성 엔드포인트를 저장할 설정 저장소
            settings: 프로세스 설정 (타임아웃)
            transport: httpx 트랜스포트 (테스트용)
        """
        self.store = store or ConfigStore()
        config = config or self.store.load()

        if not config.tokenv2:
            raise NotAuthenticatedError()

        self.settings = settings or get_settings()
        self.sso_endpoint = config.sso_endpoint
        self.endpoint = config.active_endpoint or config.sso_endpoint
        self.resolved = bool(config.active_endpoint)
        self.auth_params = {
            "tokenv2": config.tokenv2,
            "rcntrl": config.rcntrl,
            "ccntrl": config.ccntrl,
        }
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            transport=self._transport,
        )

    # ===== 엔드포인트 =====

    async def resolve_endpoint(self) -> str:
        """
        SSO 클러스터에서 활성 API 엔드포인트 조회

        결과는 설정에 저장되어 이후 호출에서 재사용된다.

        Returns:
            활성 엔드포인트 (끝 슬래시 제거)
        """
        sso_url = self.sso_endpoint.rstrip("/")

        try:
            async with self._http() as client:
                response = await client.get(
                    f"{sso_url}/rest/api/state",
                    params=self.auth_params,
                )
        except httpx.HTTPError as e:
            logger.debug("Endpoint resolution failed", sso=sso_url, error=str(e))
            raise UpstreamError(f"Failed to resolve active endpoint: {e}") from e

        if not response.is_success:
            raise UpstreamError(
                f"Failed to resolve active endpoint: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
            )

        try:
            state = response.json()
        except ValueError:
            state = {}

        endpoint = state.get("endpoint") if isinstance(state, dict) else None
        if not endpoint:
            raise UpstreamError(
                "No active endpoint returned from /rest/api/state. Check your SSO endpoint."
            )

        active_endpoint = str(endpoint).rstrip("/")
        self.store.update(active_endpoint=active_endpoint)
        self.endpoint = active_endpoint
        self.resolved = True
        logger.info("Resolved active endpoint", endpoint=active_endpoint)
        return active_endpoint

    # ===== HTTP =====

    async def request(
        self,
        path: str,
        method: str = "GET",
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        """
        인증된 API 요청

        첫 호출 시 활성 엔드포인트가 없으면 먼저 해석한다.

        Args:
            path: API 경로 (/rest/...)
            method: HTTP 메서드
            params: 추가 쿼리 파라미터 (None 값은 제외)
            body: JSON 본문

        Returns:
            JSON 응답은 디코딩된 값, 그 외는 텍스트
        """
        if not self.resolved:
            await self.resolve_endpoint()

        query = dict(self.auth_params)
        for key, value in (params or {}).items():
            if value is not None:
                query[key] = _query_value(value)

        url = f"{self.endpoint}{path}"
        logger.debug("ITX API request", method=method, path=path)

        try:
            async with self._http() as client:
                response = await client.request(
                    method=method,
                    url=url,
                    params=query,
                    headers={
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                    },
                    json=body,
                )
        except httpx.HTTPError as e:
            logger.debug("ITX API request failed", method=method, path=path, error=str(e))
            raise UpstreamError(f"Request to {path} failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "ITX API error",
                status=response.status_code,
                path=path,
                body=response.text[:500],
            )
            raise UpstreamError(
                f"API error {response.status_code} {response.reason_phrase}: {response.text}",
                status=response.status_code,
            )

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as e:
                raise UpstreamError(f"Invalid JSON from {path}") from e

        return response.text

    # ===== 사용자 =====

    async def get_active_user(self) -> Any:
        """연결 확인용 현재 사용자 조회"""
        return await self.request("/rest/core/activeuser")

    async def search_users(self) -> list[User]:
        result = await self.request("/rest/core/users/search", method="POST", body={})
        return [_validate(User, item) for item in _as_list(result)]

    # ===== 티켓 =====

    async def list_tickets(self, limit: int = 25, offset: int = 0) -> list[Ticket]:
        result = await self.request(
            "/rest/itxems/cases",
            params={"getMembers": True, "limitFrom": offset, "limitTo": limit},
        )
        return [_validate(Ticket, item) for item in _as_list(result)]

    async def fetch_ticket(
        self,
        seq_no: int,
        include_comments: bool = False,
        include_members: bool = False,
    ) -> Optional[Ticket]:
        """
        티켓 번호(seqNo)로 조회

        Returns:
            티켓 또는 None (없음)
        """
        params: dict[str, Any] = {"seqNo": seq_no}
        if include_comments:
            params["getComments"] = True
        if include_members:
            params["getMembers"] = True

        data = _first(await self.request("/rest/itxems/cases", params=params))
        return _validate(Ticket, data) if data else None

    async def search_tickets_by_activity_id(self, eact_ids: list[int]) -> list[Ticket]:
        result = await self.request(
            "/rest/itxems/cases/search",
            method="POST",
            body={"eactIds": list(eact_ids)},
        )
        return [_validate(Ticket, item) for item in _as_list(result)]

    async def create_ticket(self, subject: str) -> Ticket:
        result = await self.request(
            "/rest/itxems/cases",
            method="POST",
            body={"description": subject},
        )
        return _validate(Ticket, _first(result) or {})

    async def update_ticket(self, seq_no: int, fields: dict[str, Any]) -> Any:
        """티켓 수정 (seqNo + 변경 필드)"""
        return await self.request(
            "/rest/itxems/cases",
            method="PUT",
            body={"seqNo": seq_no, **fields},
        )

    # ===== 활동 =====

    async def search_activities_by_ids(
        self,
        eact_ids: list[int],
        include_members: bool = False,
    ) -> list[Activity]:
        body: dict[str, Any] = {"eactIds": list(eact_ids)}
        if include_members:
            body["getMembers"] = True
        result = await self.request("/rest/itxems/activities/search", method="POST", body=body)
        return [_validate(Activity, item) for item in _as_list(result)]

    async def search_activities_by_link(
        self,
        eact_ids: list[int],
        link_type: int,
        direction: str,
        include_members: bool = False,
    ) -> list[Activity]:
        body: dict[str, Any] = {
            "activityLinkFilters": [
                {
                    "eactIds": list(eact_ids),
                    "linkTypes": [int(link_type)],
                    "linkDirection": direction,
                }
            ],
        }
        if include_members:
            body["getMembers"] = True
        result = await self.request("/rest/itxems/activities/search", method="POST", body=body)
        return [_validate(Activity, item) for item in _as_list(result)]

    async def fetch_email_body(self, eact_id: int) -> str:
        """이메일 원본 HTML (문자열이 아니면 빈 문자열)"""
        result = await self.request("/rest/itxems/emailcontent", params={"eactId": eact_id})
        return result if isinstance(result, str) else ""

    async def add_activity_text(
        self,
        eact_id: int,
        text: str,
        tags: Optional[list[dict[str, Any]]] = None,
    ) -> Any:
        """
        활동 텍스트(코멘트) 등록

        Args:
            eact_id: 티켓 eactId
            text: HTML 본문
            tags: 멘션 태그 목록 (startIndex, length, type, data)
        """
        body: dict[str, Any] = {"text": text, "activity": {"eactId": eact_id}}
        if tags:
            body["data"] = {"tags": tags}
        return await self.request("/rest/itxems/activitytexts", method="POST", body=body)
