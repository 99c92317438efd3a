import logging

from snaplink.types import LambdaEvent, LambdaContext, LambdaResponse
from snaplink.dao.factory import build_short_url_dao
from snaplink.dao.exceptions import ShortURLNotFoundError
from snaplink.services import AnalyticsReader
from snaplink.utils import load_config, load_settings, base_url
from snaplink.utils.helpers import guarantee_500_response
from snaplink.utils.responses import response_json, response_400, response_404
from snaplink.lambdas.link_preview.constants import MISSING_SHORTCODE, SHORT_URL_NOT_FOUND, PREVIEW_SUCCESS


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Describe a short URL without redirecting or recording a click

    GET /v1/preview/{shortcode}

    HTTP responses:
        200: Preview of the link (target URL, click count, last click, expiry)
        400: Missing shortcode in path parameters
        404: Unknown or deactivated short URL
        500: Internal server error

    Expired links are still previewed, with "is_expired": true.
    """
    app_config = load_config('link_preview')
    settings = load_settings(app_config)

    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return response_400(message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)

    reader = AnalyticsReader(build_short_url_dao(app_config, settings))
    try:
        preview = reader.get_preview(shortcode)
    except ShortURLNotFoundError:
        logger.info('Short URL record not found. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return response_404(message=f"short code '{shortcode}' doesn't exist", error_code=SHORT_URL_NOT_FOUND)

    short_url = f'{(settings.base_url or base_url(event)).rstrip("/")}/{preview.shortcode}'
    logger.info('Previewed short URL. Responding with 200.', extra={'shortcode': shortcode, 'event': PREVIEW_SUCCESS})
    return response_json(200, {'short_url': short_url, **preview.to_dict()})
