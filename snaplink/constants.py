from enum import StrEnum


class Limit:
    """Bounds for stored analytics and short codes."""

    RECENT_CLICKS = 1000  # Sliding window of most recent click events
    DAILY_STATS = 365  # One rollup entry per day, at most one year
    SHORTCODE_MIN_LENGTH = 4
    SHORTCODE_MAX_LENGTH = 10
    SHORTCODE_GENERATION_ATTEMPTS = 50


class Default:
    """Default runtime settings."""

    SHORTCODE_LENGTH = 6
    FALLBACK_SHORTCODE_MIN_LENGTH = 8
    BACKGROUND_WORKERS = 2
    BACKGROUND_DRAIN_TIMEOUT = 0.5  # seconds a handler waits for background tasks before responding
    BASE_URL = 'http://localhost:3000'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
