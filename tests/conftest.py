import json
from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from chainrelay.api.app import create_app
from chainrelay.configuration.config import Settings

TRACKER_URL = "https://tracker.test"

PROVIDER_KEYS = {
    "ALCHEMY_API_KEY": "alchemy-key",
    "PIMLICO_API_KEY": "pimlico-key",
    "SCROLLSCAN_API_KEY": "scrollscan-key",
    "BASESCAN_API_KEY": "basescan-key",
    "POLYGONSCAN_API_KEY": "polygonscan-key",
    "ARBISCAN_API_KEY": "arbiscan-key",
    "OPTIMISTIC_API_KEY": "optimistic-key",
}


class RecordingUpstream:
    """Mock transport handler that records outbound requests and answers with a fixed response."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.content = b'{"jsonrpc":"2.0","id":1,"result":"0x10d4f"}'
        self.error: Optional[Exception] = None
        self.responder: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def respond_with(self, status_code: int, content: bytes) -> None:
        self.status_code = status_code
        self.content = content

    def respond_json(self, status_code: int, payload: object) -> None:
        self.respond_with(status_code, json.dumps(payload).encode())

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.responder is not None:
            return self.responder(request)
        return httpx.Response(
            self.status_code,
            content=self.content,
            headers={"content-type": "application/json"},
        )

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_settings(**overrides) -> Settings:
    values = {
        "TRACKER_API_URL": TRACKER_URL,
        "provider_credentials": dict(PROVIDER_KEYS),
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


@pytest.fixture
def http_client(upstream: RecordingUpstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def client(settings: Settings, http_client: httpx.AsyncClient) -> TestClient:
    app = create_app(settings, http_client=http_client)
    return TestClient(app)


@pytest.fixture
def client_factory(http_client: httpx.AsyncClient) -> Callable[..., TestClient]:
    """Build a client with custom settings sharing the recording transport."""

    def _build(**overrides) -> TestClient:
        return TestClient(create_app(make_settings(**overrides), http_client=http_client))

    return _build
