"""Unit tests for helper functions in helpers.py.

Test coverage includes:

1. base_url() correct extraction
   - Ensures URLs include the stage (e.g., `/Prod`) when invoked via AWS.
   - Ensures URLs do NOT include stage information for custom domains.
   - Confirms a localhost fallback is returned when no domain is present.

2. Request metadata
   - Ensures header lookup is case-insensitive.
   - Ensures client_ip() prefers the API Gateway source IP over X-Forwarded-For.

3. Input parsing
   - Ensures validate_target_url() accepts absolute http(s) URLs only.
   - Ensures parse_datetime() returns aware UTC datetimes.

4. Decorators
   - Ensures require_environment() rejects missing or empty env vars.
   - Ensures guarantee_500_response() turns exceptions into 500 responses outside local runs.
"""

import json
from datetime import datetime, UTC

import pytest

from snaplink.constants import Default
from snaplink.exceptions import InvalidURLError
from snaplink.utils.helpers import (
    base_url,
    header,
    client_ip,
    validate_target_url,
    parse_datetime,
    require_environment,
    guarantee_500_response,
)


# -------------------------------
# 1. base_url() correct extraction
# -------------------------------


@pytest.mark.parametrize(
    'domain, stage, expected',
    [
        ('abc123.execute-api.us-east-1.amazonaws.com', 'Dev', 'https://abc123.execute-api.us-east-1.amazonaws.com/Dev'),
        ('abc123.execute-api.us-east-1.amazonaws.com', 'Prod', 'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'),
        ('sl.ink', 'Prod', 'https://sl.ink'),
    ],
)
def test_base_url(domain, stage, expected):
    event = {'requestContext': {'domainName': domain, 'stage': stage}}
    assert base_url(event) == expected


@pytest.mark.parametrize('event', [{}, {'requestContext': {}}, {'requestContext': {'stage': 'Prod'}}])
def test_base_url_falls_back_to_localhost(event):
    assert base_url(event) == Default.BASE_URL


# -------------------------------
# 2. Request metadata
# -------------------------------


def test_header_is_case_insensitive():
    event = {'headers': {'user-agent': 'curl/8.5.0', 'Referer': 'https://news.ycombinator.com/'}}

    assert header(event, 'User-Agent') == 'curl/8.5.0'
    assert header(event, 'referer') == 'https://news.ycombinator.com/'
    assert header(event, 'X-Missing') is None
    assert header({'headers': None}, 'User-Agent') is None


def test_client_ip_prefers_source_ip():
    event = {
        'requestContext': {'identity': {'sourceIp': '203.0.113.9'}},
        'headers': {'X-Forwarded-For': '198.51.100.1, 10.0.0.1'},
    }
    assert client_ip(event) == '203.0.113.9'


def test_client_ip_from_forwarded_header():
    event = {'headers': {'x-forwarded-for': '198.51.100.1, 10.0.0.1'}}
    assert client_ip(event) == '198.51.100.1'


def test_client_ip_missing():
    assert client_ip({}) is None


# -------------------------------
# 3. Input parsing
# -------------------------------


@pytest.mark.parametrize('url', ['https://example.com', 'http://example.com/a?b=c#d', '  https://example.com/padded  '])
def test_validate_target_url_accepts_absolute_http_urls(url):
    assert validate_target_url(url) == url.strip()


@pytest.mark.parametrize('url', ['', '   ', None, 42, 'example.com', '/relative/path', 'ftp://example.com', 'javascript:alert(1)', 'https://'])
def test_validate_target_url_rejects_bad_urls(url):
    with pytest.raises(InvalidURLError):
        validate_target_url(url)


@pytest.mark.parametrize(
    'value, expected',
    [
        ('2025-10-15T12:00:00Z', datetime(2025, 10, 15, 12, tzinfo=UTC)),
        ('2025-10-15T12:00:00+00:00', datetime(2025, 10, 15, 12, tzinfo=UTC)),
        ('2025-10-15T12:00:00', datetime(2025, 10, 15, 12, tzinfo=UTC)),
        ('2025-10-15T14:00:00+02:00', datetime(2025, 10, 15, 12, tzinfo=UTC)),
    ],
)
def test_parse_datetime(value, expected):
    parsed = parse_datetime(value)
    assert parsed == expected
    assert parsed.tzinfo is not None


# -------------------------------
# 4. Decorators
# -------------------------------


def test_require_environment_passes(monkeypatch):
    monkeypatch.setenv('FOO', 'bar')

    @require_environment('FOO')
    def func():
        return 'ok'

    assert func() == 'ok'


def test_require_environment_missing(monkeypatch):
    monkeypatch.delenv('FOO', raising=False)
    monkeypatch.setenv('BAR', '')

    @require_environment('FOO', 'BAR')
    def func():
        return 'ok'

    with pytest.raises(KeyError, match="'FOO', 'BAR'"):
        func()


def test_guarantee_500_response_returns_500(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'prod')
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)

    @guarantee_500_response
    def handler(event, context):
        raise RuntimeError('boom')

    response = handler({}, None)
    body = json.loads(response['body'])

    assert response['statusCode'] == 500
    assert body['message'] == 'Internal Server Error'
    assert body['errorCode'] == 'UNKNOWN_INTERNAL_SERVER_ERROR'


def test_guarantee_500_response_reraises_locally(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'local')

    @guarantee_500_response
    def handler(event, context):
        raise RuntimeError('boom')

    with pytest.raises(RuntimeError, match='boom'):
        handler({}, None)


def test_guarantee_500_response_passes_through(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'prod')

    @guarantee_500_response
    def handler(event, context):
        return {'statusCode': 200}

    assert handler({}, None) == {'statusCode': 200}
