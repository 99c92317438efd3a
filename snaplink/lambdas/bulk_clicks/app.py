import json
import logging
from typing import Any

from snaplink.types import LambdaEvent, LambdaContext, LambdaResponse
from snaplink.dao.factory import build_short_url_dao, build_account_dao
from snaplink.services import ClickRecorder, default_runner
from snaplink.utils import load_config, load_settings, parse_datetime
from snaplink.utils.helpers import guarantee_500_response
from snaplink.utils.responses import response_json, response_400, response_401
from snaplink.lambdas.bulk_clicks.constants import INVALID_JSON_BODY, INVALID_CLICKS, CLICKS_RECORDED


logger = logging.getLogger(__name__)

OPTIONAL_TEXT_FIELDS = ('ip', 'user_agent', 'referer')


def _parse_click(index: int, click: Any) -> dict[str, Any]:
    """Validate one click of the request body, raising ValueError with a client-facing message"""
    if not isinstance(click, dict):
        raise ValueError(f'clicks[{index}] must be a JSON object')

    link_id = click.get('link_id')
    if not isinstance(link_id, str) or not link_id:
        raise ValueError(f"clicks[{index}] is missing 'link_id'")

    parsed = {'link_id': link_id}
    for name in OPTIONAL_TEXT_FIELDS:
        value = click.get(name)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"clicks[{index}].{name} must be a string")
        parsed[name] = value

    timestamp = click.get('timestamp')
    if timestamp is not None:
        try:
            parsed['timestamp'] = parse_datetime(timestamp)
        except (TypeError, ValueError, AttributeError) as e:
            raise ValueError(f'clicks[{index}].timestamp must be an ISO-8601 timestamp') from e
    return parsed


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Record a batch of clicks collected outside the redirect path

    POST /v1/analytics/bulk-clicks
    Body: {"clicks": [{"link_id": "...", "timestamp"?: "...", "ip"?: "...", "user_agent"?: "...", "referer"?: "..."}]}

    Clicks are grouped per link and recorded through the same atomic update
    as redirects. Unknown or deactivated links are skipped; a link whose
    update fails is reported and does not affect the others.

    HTTP responses:
        200: Batch processed (see links_updated / links_skipped / links_failed)
        400: Invalid JSON body or click entries
        401: Missing identity
        500: Internal server error
    """
    app_config = load_config('bulk_clicks')
    settings = load_settings(app_config)

    claims = (event.get('requestContext') or {}).get('authorizer', {}).get('claims', {})
    if not claims.get('sub'):
        logger.info("Missing 'sub' in JWT claims. Responding with 401.")
        return response_401(message="missing 'sub' in JWT claims")

    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    raw_clicks = request_body.get('clicks') if isinstance(request_body, dict) else None
    if not isinstance(raw_clicks, list) or not raw_clicks:
        logger.info("Missing 'clicks' in body. Responding with 400.", extra={'event': INVALID_CLICKS})
        return response_400(message="'clicks' must be a non-empty JSON array", error_code=INVALID_CLICKS)

    try:
        clicks = [_parse_click(index, click) for index, click in enumerate(raw_clicks)]
    except ValueError as e:
        logger.info('Invalid click entry. Responding with 400.', extra={'event': INVALID_CLICKS, 'reason': str(e)})
        return response_400(message=str(e), error_code=INVALID_CLICKS)

    background = default_runner(settings.background_workers)
    recorder = ClickRecorder(build_short_url_dao(app_config, settings), build_account_dao(app_config), background)
    result = recorder.record_clicks(clicks)
    background.drain()

    logger.info('Processed click batch. Responding with 200.', extra={'event': CLICKS_RECORDED, 'totalClicks': result.total_clicks})
    return response_json(
        200,
        {
            'message': f'Processed {result.total_clicks} clicks',
            'total_clicks': result.total_clicks,
            'links_updated': len(result.links_updated),
            'links_skipped': list(result.links_skipped),
            'links_failed': list(result.links_failed),
        },
    )
