"""Helper utilities for AWS lambda functions.

Functions:
    base_url(event) -> str
        Extract correct public base URL from API Gateway event
    header(event, name) -> str | None
        Case-insensitive lookup of a request header
    client_ip(event) -> str | None
        Extract the visitor's IP address from API Gateway event
    validate_target_url(url) -> str
        Ensure a destination URL is an absolute http(s) URL
    parse_datetime(value) -> datetime
        Parse an ISO-8601 timestamp into an aware UTC datetime
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected handler exceptions into a 500 response
"""

import os
import logging
import functools
import urllib.parse
from datetime import datetime, UTC
from typing import Any
from collections.abc import Callable

from snaplink.constants import Default, UNKNOWN_INTERNAL_SERVER_ERROR
from snaplink.exceptions import InvalidURLError
from snaplink.utils.runtime import running_locally
from snaplink.utils.responses import response_500


logger = logging.getLogger(__name__)


def base_url(event: dict[str, Any]) -> str:
    """Extract public base URL from API Gateway event

    If a custom domain is configured, the stage name is omitted.
    If using the default AWS execute-api domain, the stage name is included.

    Returns:
        str: Base URL, e.g.:
             - "https://sl.ink"
             - "https://abc123.execute-api.us-east-1.amazonaws.com/Prod"
    """
    request_context = event.get('requestContext', {})
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain and 'execute-api' not in domain:
        return f'https://{domain}'
    elif domain:
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return Default.BASE_URL


def header(event: dict[str, Any], name: str) -> str | None:
    headers = event.get('headers') or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def client_ip(event: dict[str, Any]) -> str | None:
    """Extract the visitor's IP, preferring the API Gateway source IP over X-Forwarded-For"""
    source_ip = event.get('requestContext', {}).get('identity', {}).get('sourceIp')
    if source_ip:
        return source_ip

    forwarded = header(event, 'X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return None


def validate_target_url(url: Any) -> str:
    """Ensure a destination URL is a well-formed absolute http(s) URL

    Raises:
        InvalidURLError: if the URL is missing, relative or uses another scheme.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError('Target URL must be a non-empty string.')

    url = url.strip()
    components = urllib.parse.urlparse(url)
    if components.scheme not in {'http', 'https'} or not components.netloc:
        raise InvalidURLError(f'Target URL must be an absolute http(s) URL (given value: {url!r}).')
    return url


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC"""
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Raises:
        KeyError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        KeyError: "Missing required environment variables: 'APPCONFIG_APP_ID'"
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise KeyError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with a 500 instead of crashing the lambda

    When running locally the original exception is re-raised for debugging.
    """

    @functools.wraps(handler)
    def wrapper(event: dict, context: Any) -> dict:
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception('Unhandled exception in lambda handler. Responding with 500.', extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR})
            return response_500(error_code=UNKNOWN_INTERNAL_SERVER_ERROR)

    return wrapper
