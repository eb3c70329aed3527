'''
Unit tests for the async HTTP client wrapper.
'''

from __future__ import annotations

import httpx
import pytest

from sourceauth.core import NetworkError
from sourceauth.utils import HTTPClient


class TestHTTPClient:
    '''
    Test retries, error mapping and request defaults.
    '''

    async def test_timeout_becomes_network_error(self, router, settings) -> None:
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout('timed out', request=request)

        router.add('GET', 'https://x.test/slow', handler=slow)

        async with HTTPClient(transport=httpx.MockTransport(router), settings=settings) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get('https://x.test/slow')

        assert exc_info.value.error_code == 'network_failure'
        assert exc_info.value.details['url'] == 'https://x.test/slow'

    async def test_retries_transient_status(self, router, settings) -> None:
        statuses = iter([503, 200])

        def flaky(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses))

        router.add('GET', 'https://x.test/flaky', handler=flaky)

        async with HTTPClient(
            transport=httpx.MockTransport(router),
            settings=settings,
            max_retries=1,
            retry_delay=0,
        ) as client:
            response = await client.get('https://x.test/flaky')

        assert response.status_code == 200
        assert len(router.calls) == 2

    async def test_retries_connection_errors(self, router, settings) -> None:
        attempts = []

        def unreachable(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ConnectError('refused', request=request)

        router.add('POST', 'https://x.test/token', handler=unreachable)

        async with HTTPClient(
            transport=httpx.MockTransport(router),
            settings=settings,
            max_retries=2,
            retry_delay=0,
        ) as client:
            with pytest.raises(NetworkError):
                await client.post('https://x.test/token', data={'grant_type': 'client_credentials'})

        assert len(attempts) == 3

    async def test_per_call_retry_budget(self, router, settings) -> None:
        router.add('POST', 'https://x.test/token', status=503)

        async with HTTPClient(
            transport=httpx.MockTransport(router),
            settings=settings,
            max_retries=2,
            retry_delay=0,
        ) as client:
            response = await client.post('https://x.test/token', data={'a': '1'}, retries=0)

        assert response.status_code == 503
        assert len(router.calls) == 1

    async def test_client_errors_are_returned_not_raised(self, http_client, router) -> None:
        router.add('GET', 'https://x.test/private', status=401)

        response = await http_client.get('https://x.test/private')

        assert response.status_code == 401

    async def test_cookies_do_not_leak_between_requests(self, http_client, router) -> None:
        router.add('POST', 'https://x.test/login', headers={'Set-Cookie': 'sid=secret; Path=/'})
        router.add('GET', 'https://x.test/other', status=200)

        await http_client.post('https://x.test/login', data={'username': 'u'})
        await http_client.get('https://x.test/other')

        assert 'cookie' not in router.calls_to('https://x.test/other')[0].headers

    async def test_user_agent_from_settings(self, http_client, router) -> None:
        router.add('GET', 'https://x.test/', status=200)

        await http_client.get('https://x.test/')

        assert router.calls[0].headers['User-Agent'] == 'sourceauth/0.1.0'
