# Structured log events / error codes
MISSING_SHORTCODE = 'redirect_url:missing_shortcode'
SHORT_URL_NOT_FOUND = 'redirect_url:short_url_not_found'
SHORT_URL_INACTIVE = 'redirect_url:short_url_inactive'
SHORT_URL_EXPIRED = 'redirect_url:short_url_expired'
CLICK_NOT_RECORDED = 'redirect_url:click_not_recorded'
REDIRECT_SUCCESS = 'redirect_url:redirect_success'
