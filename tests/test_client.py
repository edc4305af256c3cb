"""ITX API 클라이언트 테스트 (httpx.MockTransport)"""
import httpx
import pytest

from itx_cli.client import ItxClient
from itx_cli.core.errors import NotAuthenticatedError, UpstreamError
from itx_cli.core.models import LinkType
from itx_cli.store import ConfigStore, ItxConfig

SSO = "https://sso.example.com"
ACTIVE = "https://api7.example.com"


@pytest.fixture
def store():
    return ConfigStore()


def make_client(api, store, **overrides) -> ItxClient:
    config = ItxConfig(
        sso_endpoint=SSO,
        tokenv2="test-token",
        rcntrl="rc-val",
        ccntrl="cc-val",
        **overrides,
    )
    return ItxClient(config=config, store=store, transport=api.transport)


class TestClientInit:
    def test_requires_token(self, store):
        with pytest.raises(NotAuthenticatedError) as exc_info:
            ItxClient(config=ItxConfig(sso_endpoint=SSO), store=store)
        assert "itx login" in str(exc_info.value)

    def test_uses_stored_active_endpoint(self, api, store):
        client = make_client(api, store, active_endpoint=ACTIVE)
        assert client.endpoint == ACTIVE
        assert client.resolved is True

    def test_falls_back_to_sso_endpoint(self, api, store):
        client = make_client(api, store)
        assert client.endpoint == SSO
        assert client.resolved is False


class TestResolveEndpoint:
    @pytest.mark.asyncio
    async def test_resolves_and_persists(self, api, store):
        api.add("GET", "/rest/api/state", {"endpoint": ACTIVE + "/"})
        client = make_client(api, store)

        endpoint = await client.resolve_endpoint()

        assert endpoint == ACTIVE
        assert client.endpoint == ACTIVE
        assert store.load().active_endpoint == ACTIVE
        request = api.requests[0]
        assert request.url.host == "sso.example.com"
        assert request.url.params["tokenv2"] == "test-token"
        assert request.url.params["rcntrl"] == "rc-val"
        assert request.url.params["ccntrl"] == "cc-val"

    @pytest.mark.asyncio
    async def test_http_failure(self, api, store):
        api.add("GET", "/rest/api/state", {"error": "nope"}, status=401)
        client = make_client(api, store)

        with pytest.raises(UpstreamError) as exc_info:
            await client.resolve_endpoint()

        assert str(exc_info.value) == "Failed to resolve active endpoint: 401 Unauthorized"
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_missing_endpoint(self, api, store):
        api.add("GET", "/rest/api/state", {"state": "ok"})
        client = make_client(api, store)

        with pytest.raises(UpstreamError) as exc_info:
            await client.resolve_endpoint()

        assert "No active endpoint returned" in str(exc_info.value)
        assert store.load().active_endpoint == ""

    @pytest.mark.asyncio
    async def test_first_request_resolves_once(self, api, store):
        api.add("GET", "/rest/api/state", {"endpoint": ACTIVE})
        api.add("GET", "/rest/core/activeuser", {"userId": 1})
        client = make_client(api, store)

        await client.get_active_user()
        await client.get_active_user()

        assert len(api.calls("GET", "/rest/api/state")) == 1
        user_calls = api.calls("GET", "/rest/core/activeuser")
        assert len(user_calls) == 2
        assert all(r.url.host == "api7.example.com" for r in user_calls)


class TestRequest:
    @pytest.fixture
    def client(self, api, store):
        return make_client(api, store, active_endpoint=ACTIVE)

    @pytest.mark.asyncio
    async def test_auth_and_extra_params(self, api, client):
        api.add("GET", "/rest/itxems/cases", [])

        await client.request("/rest/itxems/cases", params={"seqNo": 5, "getComments": True, "skip": None})

        params = api.requests[0].url.params
        assert params["tokenv2"] == "test-token"
        assert params["seqNo"] == "5"
        assert params["getComments"] == "true"
        assert "skip" not in params

    @pytest.mark.asyncio
    async def test_error_status_raises(self, api, client):
        api.add("GET", "/rest/itxems/cases", text="boom", status=500)

        with pytest.raises(UpstreamError) as exc_info:
            await client.request("/rest/itxems/cases")

        assert str(exc_info.value) == "API error 500 Internal Server Error: boom"
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, store):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        config = ItxConfig(sso_endpoint=SSO, tokenv2="t", active_endpoint=ACTIVE)
        client = ItxClient(config=config, store=store, transport=httpx.MockTransport(handler))

        with pytest.raises(UpstreamError) as exc_info:
            await client.request("/rest/core/activeuser")

        assert "connection refused" in str(exc_info.value)
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_non_json_returns_text(self, api, client):
        api.add("GET", "/rest/itxems/emailcontent", text="<p>Hi</p>")

        assert await client.request("/rest/itxems/emailcontent") == "<p>Hi</p>"


class TestEndpoints:
    @pytest.fixture
    def client(self, api, store):
        return make_client(api, store, active_endpoint=ACTIVE)

    @pytest.mark.asyncio
    async def test_fetch_ticket(self, api, client):
        api.add("GET", "/rest/itxems/cases", [{"eactId": 1000, "seqNo": 42, "texts": []}])

        ticket = await client.fetch_ticket(42, include_comments=True)

        assert ticket.eact_id == 1000
        assert ticket.seq_no == 42
        params = api.requests[0].url.params
        assert params["seqNo"] == "42"
        assert params["getComments"] == "true"
        assert "getMembers" not in params

    @pytest.mark.asyncio
    async def test_fetch_ticket_not_found(self, api, client):
        api.add("GET", "/rest/itxems/cases", [])

        assert await client.fetch_ticket(999) is None

    @pytest.mark.asyncio
    async def test_list_tickets_paging(self, api, client):
        api.add("GET", "/rest/itxems/cases", [{"seqNo": 1}, {"seqNo": 2}])

        tickets = await client.list_tickets(limit=10, offset=20)

        assert [t.seq_no for t in tickets] == [1, 2]
        params = api.requests[0].url.params
        assert params["limitFrom"] == "20"
        assert params["limitTo"] == "10"
        assert params["getMembers"] == "true"

    @pytest.mark.asyncio
    async def test_search_tickets_by_activity_id(self, api, client):
        api.add("POST", "/rest/itxems/cases/search", [{"eactId": 1000, "links": []}])

        tickets = await client.search_tickets_by_activity_id([1000])

        assert tickets[0].eact_id == 1000
        assert api.body(api.requests[0]) == {"eactIds": [1000]}

    @pytest.mark.asyncio
    async def test_search_activities_by_ids(self, api, client):
        api.add("POST", "/rest/itxems/activities/search", [{"eactId": 2000, "activityType": {"eatyId": 4}}])

        activities = await client.search_activities_by_ids([2000, 2001], include_members=True)

        assert activities[0].is_call
        assert api.body(api.requests[0]) == {"eactIds": [2000, 2001], "getMembers": True}

    @pytest.mark.asyncio
    async def test_search_activities_by_link(self, api, client):
        api.add("POST", "/rest/itxems/activities/search", [])

        await client.search_activities_by_link([3000], LinkType.CONVERSATION, "FROM", include_members=True)

        assert api.body(api.requests[0]) == {
            "activityLinkFilters": [
                {"eactIds": [3000], "linkTypes": [13], "linkDirection": "FROM"}
            ],
            "getMembers": True,
        }

    @pytest.mark.asyncio
    async def test_fetch_email_body(self, api, client):
        api.add("GET", "/rest/itxems/emailcontent", text="<div>Mail</div>")

        assert await client.fetch_email_body(11) == "<div>Mail</div>"
        assert api.requests[0].url.params["eactId"] == "11"

    @pytest.mark.asyncio
    async def test_fetch_email_body_json_is_empty(self, api, client):
        api.add("GET", "/rest/itxems/emailcontent", {"unexpected": True})

        assert await client.fetch_email_body(11) == ""

    @pytest.mark.asyncio
    async def test_create_ticket(self, api, client):
        api.add("POST", "/rest/itxems/cases", {"seqNo": 77, "description": "Printer on fire"})

        ticket = await client.create_ticket("Printer on fire")

        assert ticket.seq_no == 77
        assert api.body(api.requests[0]) == {"description": "Printer on fire"}

    @pytest.mark.asyncio
    async def test_update_ticket(self, api, client):
        api.add("PUT", "/rest/itxems/cases", {"seqNo": 77})

        await client.update_ticket(77, {"description": "New"})

        assert api.body(api.requests[0]) == {"seqNo": 77, "description": "New"}

    @pytest.mark.asyncio
    async def test_add_activity_text_with_tags(self, api, client):
        api.add("POST", "/rest/itxems/activitytexts", {"ok": True})
        tags = [{"startIndex": 4, "length": 4, "type": "user", "data": {"userId": 7}}]

        await client.add_activity_text(1000, "<p>hi</p>", tags=tags)

        assert api.body(api.requests[0]) == {
            "text": "<p>hi</p>",
            "activity": {"eactId": 1000},
            "data": {"tags": tags},
        }

    @pytest.mark.asyncio
    async def test_search_users(self, api, client):
        api.add("POST", "/rest/core/users/search", [{"userId": 7, "firstName": "Anna", "email": "anna@x.io"}])

        users = await client.search_users()

        assert users[0].user_id == 7
        assert users[0].first_name == "Anna"
        assert api.body(api.requests[0]) == {}

    @pytest.mark.asyncio
    async def test_invalid_payload_raises_upstream_error(self, api, client):
        api.add("POST", "/rest/itxems/cases/search", [{"eactId": "not-a-number"}])

        with pytest.raises(UpstreamError):
            await client.search_tickets_by_activity_id([1])
