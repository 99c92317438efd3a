# Structured log events / error codes
INVALID_JSON_BODY = 'bulk_clicks:invalid_json_body'
INVALID_CLICKS = 'bulk_clicks:invalid_clicks'
CLICKS_RECORDED = 'bulk_clicks:clicks_recorded'
