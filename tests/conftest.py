from typing import Any, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from gemini_proxy import llm
from gemini_proxy.main import app

from .helpers import gemini_answer


class FakeUpstream:
    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Any = gemini_answer("ok")
        self.exc: Optional[Exception] = None

    def reply(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def upstream(monkeypatch):
    fake = FakeUpstream()
    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(fake.handler), **kwargs)

    monkeypatch.setattr(llm.httpx, "AsyncClient", client_factory)
    return fake


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def client():
    return TestClient(app)
