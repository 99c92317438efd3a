"""Utility functions for application configuration management.

Configuration lives in **AWS AppConfig**. Each environment (`APP_ENV`)
has a dedicated AppConfig *Environment* within the shared AppConfig
*Application* identified by `APP_NAME`. The JSON document looks like this:

    {
        "active_backend": "redis",
        "configs": {
            "shorten_url": {
                "redis": {"host": "...", "port": 6379, "db": 0}
            },
            "redirect_url": {
                "redis": { ... }
            },
            "link_analytics": {
                "redis": { ... }
            }
        },
        "settings": {
            "base_url": "https://sl.ink",
            "shortcode_length": 6,
            "recent_clicks_limit": 1000,
            "daily_stats_limit": 365,
            "background_workers": 2
        }
    }

`"active_backend"` is either `"redis"` or `"memory"`. The memory backend
needs no section of its own and keeps its data for the lifetime of the process.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`), defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    load_config(lambda_name: str) -> dict
        Load one lambda's section of the AppConfig document. In SAM, load it
        from a local AppConfig agent instead.

    load_settings(app_config: dict) -> ShortenerSettings
        Validate the `"settings"` section of a loaded configuration.

Example:
    >>> from snaplink.utils.config import load_config, load_settings
    >>> app_config = load_config('shorten_url')
    >>> app_config['active_backend']
    'redis'
    >>> load_settings(app_config).shortcode_length
    6
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from dataclasses import dataclass
from typing import Any
from collections.abc import Callable

import boto3

from snaplink.constants import ENV, Default, Limit
from snaplink.exceptions import BadConfigurationError
from snaplink.types import LambdaConfiguration
from snaplink.utils.helpers import require_environment
from snaplink.utils.runtime import running_locally


logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = frozenset({'redis', 'memory'})
LOCAL_AGENT_HOSTS = frozenset({'localhost', '127.0.0.1', 'host.docker.internal'})
LOCAL_AGENT_PORT = 2772


@dataclass(frozen=True)
class ShortenerSettings:
    """Validated runtime settings shared by all lambdas"""

    base_url: str | None = None
    shortcode_length: int = Default.SHORTCODE_LENGTH
    recent_clicks_limit: int = Limit.RECENT_CLICKS
    daily_stats_limit: int = Limit.DAILY_STATS
    background_workers: int = Default.BACKGROUND_WORKERS

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> 'ShortenerSettings':
        data = data or {}
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise BadConfigurationError(f'Unknown settings: {", ".join(sorted(unknown))}.')

        settings = cls(**data)
        settings._validate()
        return settings

    def _validate(self) -> None:
        if self.base_url is not None and not urllib.parse.urlparse(self.base_url).netloc:
            raise BadConfigurationError(f'base_url must be an absolute URL (given value: {self.base_url!r}).')
        if not _is_int(self.shortcode_length) or not Limit.SHORTCODE_MIN_LENGTH <= self.shortcode_length <= Limit.SHORTCODE_MAX_LENGTH:
            raise BadConfigurationError(
                f'shortcode_length must be between {Limit.SHORTCODE_MIN_LENGTH} and {Limit.SHORTCODE_MAX_LENGTH} '
                f'(given value: {self.shortcode_length!r}).'
            )
        for name in ('recent_clicks_limit', 'daily_stats_limit', 'background_workers'):
            value = getattr(self, name)
            if not _is_int(value) or value < 1:
                raise BadConfigurationError(f'{name} must be a positive integer (given value: {value!r}).')


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'snaplink'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'snaplink:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def lambda_section(document: dict[str, Any], lambda_name: str) -> LambdaConfiguration:
    """Extract one lambda's configuration from a full AppConfig document

    Returns:
        dict: {'active_backend': <name>, <name>: {...backend config...}, 'settings': {...}}

    Raises:
        BadConfigurationError: if the document lacks the backend or the lambda section.
    """
    try:
        backend = document['active_backend']
        backend_config = document.get('configs', {}).get(lambda_name, {}).get(backend, {})
    except (KeyError, AttributeError) as e:
        raise BadConfigurationError(f"AppConfig document has no usable section for '{lambda_name}'.") from e

    if backend not in SUPPORTED_BACKENDS:
        raise BadConfigurationError(f"Unsupported backend '{backend}'. Expected one of: {', '.join(sorted(SUPPORTED_BACKENDS))}.")
    if backend != 'memory' and not backend_config:
        raise BadConfigurationError(f"AppConfig document has no '{backend}' section for '{lambda_name}'.")

    return {
        'active_backend': backend,
        backend: backend_config,
        'settings': document.get('settings', {}),
    }


def load_settings(app_config: LambdaConfiguration) -> ShortenerSettings:
    return ShortenerSettings.from_dict(app_config.get('settings'))


def _validate_agent_url(url: str | None) -> str:
    if not url:
        return ''
    components = urllib.parse.urlparse(url)
    if components.scheme not in {'http', 'https'}:
        raise ValueError(f'Bad scheme {url}')
    if components.hostname not in LOCAL_AGENT_HOSTS:
        raise ValueError(f'Bad host {url}')
    if components.port not in {LOCAL_AGENT_PORT, None}:
        raise ValueError(f'Bad port {url}')
    return url


def _sam_load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` points to
          a local agent, fetch the configuration document from that agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     – Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  – Optional profile name (default: "backend-config").
    """

    @functools.wraps(func)
    def wrapper(lambda_name: str, *args, **kwargs) -> dict:
        agent_url = _validate_agent_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(lambda_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return lambda_section(document, lambda_name)

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: The lambda's config section (see `lambda_section()`).

    Example:
        >>> app_config = load_config('shorten_url')
        >>> app_config['redis']['host']
        'redis-15501.host.docker.internal'
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    appconfig = boto3.client('appconfigdata')

    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    document = json.loads(response['Configuration'].read().decode('utf-8'))

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return lambda_section(document, lambda_name)
