import logging
from datetime import datetime, UTC

from snaplink.types import LambdaEvent, LambdaContext, LambdaResponse
from snaplink.dao.factory import build_short_url_dao, build_account_dao
from snaplink.dao.exceptions import ShortURLNotFoundError
from snaplink.services import ClickRecorder, default_runner
from snaplink.utils import load_config, load_settings, client_ip, header
from snaplink.utils.helpers import guarantee_500_response
from snaplink.utils.responses import response_302, response_400, response_404, response_410
from snaplink.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    SHORT_URL_INACTIVE,
    SHORT_URL_EXPIRED,
    CLICK_NOT_RECORDED,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Get short URL record from database and check it is usable
    - Step 3: Record the click (best effort)
    - Step 4: Redirect client to target URL

    HTTP responses:
        302: Successful redirect (Location: target URL, never cached)
        400: Missing shortcode in path parameters
        404: Unknown or deactivated short URL
        410: Expired short URL
        500: Internal server error

    Example:
        >>> event = {'pathParameters': {'shortcode': 'q_3Zr-'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 0- Get application's config
    app_config = load_config('redirect_url')
    settings = load_settings(app_config)

    # 1- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return response_400(message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)

    # 2- Get short_url record from database
    short_url_dao = build_short_url_dao(app_config, settings)
    try:
        short_url = short_url_dao.get_by_shortcode(shortcode)
    except ShortURLNotFoundError:
        logger.info('Short URL record not found. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return response_404(message=f"short code '{shortcode}' doesn't exist", error_code=SHORT_URL_NOT_FOUND)

    if not short_url.is_active:
        logger.info('Short URL is deactivated. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_INACTIVE})
        return response_404(message=f"short code '{shortcode}' doesn't exist", error_code=SHORT_URL_NOT_FOUND)

    if short_url.is_expired(datetime.now(UTC)):
        logger.info('Short URL has expired. Responding with 410.', extra={'shortcode': shortcode, 'event': SHORT_URL_EXPIRED})
        return response_410(message=f"short code '{shortcode}' has expired", error_code=SHORT_URL_EXPIRED)

    # 3- Record the click; analytics never block a redirect
    background = default_runner(settings.background_workers)
    try:
        recorder = ClickRecorder(short_url_dao, build_account_dao(app_config), background)
        click_count = recorder.record_click(
            short_url.id,
            ip=client_ip(event),
            user_agent=header(event, 'User-Agent'),
            referer=header(event, 'Referer'),
        )
    except Exception:
        logger.exception('Failed to record click. Redirecting anyway.', extra={'shortcode': shortcode, 'event': CLICK_NOT_RECORDED})
    else:
        logger.debug('Recorded click.', extra={'shortcode': shortcode, 'clickCount': click_count})
        background.drain()

    # 4- Redirect client to target URL
    logger.info('Redirecting client to target URL. Responding with 302.', extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS})
    return response_302(location=short_url.target)
