'''
Shared test fixtures for sourceauth.

Provides a controllable clock, a mock HTTP router plugged into the HTTP
client through httpx.MockTransport, a fast-KDF vault and a wired session
manager.
'''

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qs

import httpx
import pytest

from sourceauth.auth import CredentialVault, SessionStore, SourceAuthManager
from sourceauth.core import HTTPConfig, SessionConfig, Settings, VaultConfig
from sourceauth.models import Credentials, Source
from sourceauth.utils import HTTPClient

TEST_SECRET = 'test-master-key-that-is-at-least-32-characters'


class FakeClock:
    '''
    Clock that only moves when told to.
    '''

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


Handler = Callable[[httpx.Request], httpx.Response]


class MockRouter:
    '''
    Routes requests by (method, url) and records every call.
    '''

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.calls: List[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        status: int = 200,
        json: Any = None,
        headers: Optional[Union[Dict[str, str], List[Tuple[str, str]]]] = None,
        handler: Optional[Handler] = None,
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json, headers=headers)
        self.routes[(method.upper(), url)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get((request.method, str(request.url)))
        if handler is None:
            return httpx.Response(404)
        return handler(request)

    def calls_to(self, url: str) -> List[httpx.Request]:
        return [call for call in self.calls if str(call.url) == url]

    @staticmethod
    def form(request: httpx.Request) -> Dict[str, str]:
        return form_of(request)


def form_of(request: httpx.Request) -> Dict[str, str]:
    '''
    Decode a form-encoded request body into a flat dict.
    '''
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def router() -> MockRouter:
    return MockRouter()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment='testing',
        vault=VaultConfig(encryption_key=TEST_SECRET, kdf_iterations=1000),
        session=SessionConfig(ttl=3600, cleanup_interval=300),
        http=HTTPConfig(timeout=10.0, max_retries=0, retry_delay=0),
    )


@pytest.fixture
def vault(settings: Settings) -> CredentialVault:
    return CredentialVault.from_settings(settings)


@pytest.fixture
async def http_client(router: MockRouter, settings: Settings):
    client = HTTPClient(transport=httpx.MockTransport(router), settings=settings)
    yield client
    await client.close()


@pytest.fixture
def store(clock: FakeClock) -> SessionStore:
    return SessionStore(clock=clock)


@pytest.fixture
def manager(
    http_client: HTTPClient,
    vault: CredentialVault,
    store: SessionStore,
    settings: Settings,
    clock: FakeClock,
) -> SourceAuthManager:
    return SourceAuthManager(
        http_client=http_client,
        vault=vault,
        store=store,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def make_source(vault: CredentialVault) -> Callable[..., Source]:
    '''
    Build a source whose credentials are sealed with the test vault.
    '''

    def _make(
        source_id: str = 'src-1',
        metadata: Optional[Dict[str, str]] = None,
        credentials: Optional[Dict[str, Any]] = None,
        requires_authentication: bool = True,
        source_type: str = 'website',
        url: Optional[str] = 'https://x.test/',
    ) -> Source:
        return Source(
            id=source_id,
            name=f'Source {source_id}',
            url=url,
            type=source_type,
            requires_authentication=requires_authentication,
            credentials=vault.encrypt(Credentials.model_validate(credentials)) if credentials else None,
            metadata=metadata or {},
        )

    return _make
