# Structured log events / error codes
INVALID_JSON_BODY = 'shorten_url:invalid_json_body'
MISSING_TARGET_URL = 'shorten_url:missing_target_url'
SHORTCODE_UNAVAILABLE = 'shorten_url:shortcode_unavailable'
OWNER_URL_CONFLICT = 'shorten_url:owner_url_conflict'
COLLISION_RETRY_FAILED = 'shorten_url:collision_retry_failed'
GENERATION_EXHAUSTED = 'shorten_url:generation_exhausted'
LINK_CREATED = 'shorten_url:link_created'
LINK_REUSED = 'shorten_url:link_reused'
