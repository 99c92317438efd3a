from snaplink.utils.config import app_env, app_name, app_prefix, load_config, load_settings, ShortenerSettings
from snaplink.utils.helpers import base_url, client_ip, header, validate_target_url, parse_datetime, require_environment
from snaplink.utils.shortener import generate_shortcode, validate_shortcode
from snaplink.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'validate_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'load_settings',
    'ShortenerSettings',
    'base_url',
    'client_ip',
    'header',
    'validate_target_url',
    'parse_datetime',
    'require_environment',
    'initialize_logging',
]
