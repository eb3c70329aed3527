'''
Unit tests for the header translator.
'''

from __future__ import annotations

import pytest

from sourceauth.auth import to_headers
from sourceauth.models import (
    ApiKeySessionData,
    AuthType,
    BasicSessionData,
    BearerSessionData,
    CookieSessionData,
    OAuthSessionData,
)


@pytest.mark.parametrize('auth_type, data, expected', [
    (AuthType.BASIC, BasicSessionData(token='dTpw'), {'Authorization': 'Basic dTpw'}),
    (AuthType.BEARER, BearerSessionData(token='T'), {'Authorization': 'Bearer T'}),
    (AuthType.OAUTH, OAuthSessionData(token='O'), {'Authorization': 'Bearer O'}),
    (
        AuthType.API_KEY,
        ApiKeySessionData(api_key='k', header_name='X-Custom-Key'),
        {'X-Custom-Key': 'k'},
    ),
    (AuthType.API_KEY, ApiKeySessionData(api_key='k'), {'X-API-Key': 'k'}),
    (AuthType.COOKIE, CookieSessionData(cookies='a=1; b=2'), {'Cookie': 'a=1; b=2'}),
])
def test_headers_per_auth_type(auth_type, data, expected) -> None:
    assert to_headers(auth_type, data) == expected


def test_accepts_plain_string_auth_type() -> None:
    assert to_headers('basic', BasicSessionData(token='x')) == {'Authorization': 'Basic x'}


def test_unknown_auth_type_gives_no_headers() -> None:
    assert to_headers('kerberos', BasicSessionData(token='x')) == {}


def test_translation_is_pure() -> None:
    data = CookieSessionData(cookies='a=1')
    before = data.model_dump()

    first = to_headers(AuthType.COOKIE, data)
    first['Cookie'] = 'changed'

    assert to_headers(AuthType.COOKIE, data) == {'Cookie': 'a=1'}
    assert data.model_dump() == before
