import json
from datetime import datetime, UTC
from typing import cast

import pytest
from pytest import MonkeyPatch

from snaplink.types import LambdaEvent, LambdaContext
from snaplink.lambdas.link_preview import app
from snaplink.models import ShortURLModel, ClickEvent
from snaplink.dao.memory import ShortURLMemoryDAO


CLICKED_AT = datetime(2025, 10, 15, 9, 30, tzinfo=UTC)


def make_event(shortcode: str | None = 'abc123') -> LambdaEvent:
    return cast(LambdaEvent, {
        'resource': '/v1/preview/{shortcode}',
        'httpMethod': 'GET',
        'pathParameters': {'shortcode': shortcode} if shortcode else None,
        'requestContext': {'domainName': 'sl.ink', 'stage': 'Prod'},
    })  # fmt: skip


class TestLinkPreviewHandler:

    @pytest.fixture
    def context(self) -> LambdaContext:
        return cast(LambdaContext, {'function_name': 'link_preview'})

    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch, context: LambdaContext) -> None:
        self.dao = ShortURLMemoryDAO()
        self.dao.insert(ShortURLModel(id='f3a1', target='https://example.com', shortcode='abc123', created_at=datetime(2025, 10, 1, tzinfo=UTC)))
        self.dao.insert(ShortURLModel(id='b2c3', target='https://example.org', shortcode='old123', expires_at=datetime(2025, 1, 1, tzinfo=UTC)))
        self.dao.insert(ShortURLModel(id='c3d4', target='https://example.net', shortcode='off123'))
        self.dao.deactivate('c3d4')
        self.dao.record_click('f3a1', ClickEvent(timestamp=CLICKED_AT))

        monkeypatch.setenv('APP_ENV', 'test')
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: {'active_backend': 'memory', 'memory': {}, 'settings': {}})
        monkeypatch.setattr(app, 'build_short_url_dao', lambda *a, **kw: self.dao)
        self.context = context

    def test_lambda_handler(self) -> None:
        response = app.lambda_handler(make_event(), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 200
        assert body == {
            'short_url': 'https://sl.ink/abc123',
            'shortcode': 'abc123',
            'target_url': 'https://example.com',
            'click_count': 1,
            'last_clicked_at': '2025-10-15T09:30:00+00:00',
            'created_at': '2025-10-01T00:00:00+00:00',
            'expires_at': None,
            'is_expired': False,
        }

    def test_lambda_handler_does_not_record_a_click(self) -> None:
        app.lambda_handler(make_event(), self.context)
        app.lambda_handler(make_event(), self.context)

        assert self.dao.get('f3a1').click_count == 1

    def test_lambda_handler_with_expired_link(self) -> None:
        response = app.lambda_handler(make_event('old123'), self.context)

        assert response['statusCode'] == 200
        assert json.loads(response['body'])['is_expired'] is True

    @pytest.mark.parametrize('shortcode', ['missing', 'off123'])
    def test_lambda_handler_with_unknown_or_inactive_link(self, shortcode) -> None:
        response = app.lambda_handler(make_event(shortcode), self.context)

        assert response['statusCode'] == 404
        assert json.loads(response['body'])['errorCode'] == 'link_preview:short_url_not_found'

    def test_lambda_handler_requires_shortcode(self) -> None:
        response = app.lambda_handler(make_event(None), self.context)

        assert response['statusCode'] == 400
        assert json.loads(response['body'])['errorCode'] == 'link_preview:missing_shortcode'
