"""공통 테스트 픽스처

- 임시 설정 디렉터리 (ITX_CONFIG_DIR)
- httpx.MockTransport 기반 가짜 ITX API
"""
import json
from typing import Any, Optional

import httpx
import pytest
import structlog

from itx_cli.config import get_settings
from itx_cli.store import set_config


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    """테스트마다 격리된 설정 파일 위치"""
    path = tmp_path / "itx-cli"
    monkeypatch.setenv("ITX_CONFIG_DIR", str(path))
    monkeypatch.delenv("ITX_ENCRYPTION_KEY", raising=False)
    monkeypatch.delenv("ITX_LOG_LEVEL", raising=False)
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def configured():
    """인증 정보 + 해석된 엔드포인트 저장"""
    set_config(
        sso_endpoint="https://sso.example.com",
        active_endpoint="https://sso.example.com",
        tokenv2="test-token",
        rcntrl="rc-val",
        ccntrl="cc-val",
    )


class FakeApi:
    """(method, path) 라우팅 가짜 API

    같은 경로에 여러 응답을 넣으면 순서대로 소비하고 마지막 응답은 유지된다.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        text: Optional[str] = None,
        status: int = 200,
    ) -> "FakeApi":
        if text is not None:
            canned = {"status_code": status, "text": text, "headers": {"content-type": "text/html"}}
        else:
            canned = {"status_code": status, "json": json_body}
        self.routes.setdefault((method, path), []).append(canned)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, text="no route")
        canned = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(**canned)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def api():
    return FakeApi()
