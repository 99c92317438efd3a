"""API Gateway Lambda Proxy response builders."""

import json
from typing import Any


CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type,Authorization',
    'Access-Control-Allow-Methods': 'OPTIONS,POST,GET',
}

NO_CACHE_HEADERS = {
    'Cache-Control': 'no-store, no-cache, must-revalidate, proxy-revalidate',
    'Pragma': 'no-cache',
    'Expires': '0',
}


def _error_body(base: str, message: str | None, error_code: str | None) -> dict[str, Any]:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return body


def response_json(status_code: int, body: dict[str, Any], headers: dict[str, str] | None = None) -> dict:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **CORS_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def response_302(*, location: str) -> dict:
    return {
        'statusCode': 302,
        'headers': {'Location': location, **NO_CACHE_HEADERS, **CORS_HEADERS},
        'body': json.dumps({}),  # no body needed for redirects
    }


def response_400(message: str | None = None, error_code: str | None = None) -> dict:
    return response_json(400, _error_body('Bad Request', message, error_code))


def response_401(message: str | None = None) -> dict:
    return response_json(401, _error_body('Unauthorized', message, None))


def response_404(message: str | None = None, error_code: str | None = None) -> dict:
    return response_json(404, _error_body('Not Found', message, error_code))


def response_409(message: str | None = None, error_code: str | None = None) -> dict:
    return response_json(409, _error_body('Conflict', message, error_code))


def response_410(message: str | None = None, error_code: str | None = None) -> dict:
    return response_json(410, _error_body('Gone', message, error_code))


def response_500(message: str | None = None, error_code: str | None = None) -> dict:
    return response_json(500, _error_body('Internal Server Error', message, error_code))


def response_503(message: str | None = None, error_code: str | None = None) -> dict:
    return response_json(503, _error_body('Service Unavailable', message, error_code), headers={'Retry-After': '1'})
