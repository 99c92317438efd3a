# Structured log events / error codes
MISSING_SHORTCODE = 'link_preview:missing_shortcode'
SHORT_URL_NOT_FOUND = 'link_preview:short_url_not_found'
PREVIEW_SUCCESS = 'link_preview:preview_success'
