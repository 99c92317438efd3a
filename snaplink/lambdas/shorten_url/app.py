import json
import logging

from snaplink.types import LambdaEvent, LambdaContext, LambdaResponse
from snaplink.dao.factory import build_short_url_dao, build_account_dao
from snaplink.dao.exceptions import DuplicateOwnerURLError
from snaplink.exceptions import (
    ValidationError,
    InvalidExpiryError,
    ShortCodeUnavailableError,
    ShortCodeCollisionRetryFailedError,
    GenerationExhaustedError,
)
from snaplink.services import LinkService, default_runner
from snaplink.utils import load_config, load_settings, base_url, parse_datetime
from snaplink.utils.helpers import guarantee_500_response
from snaplink.utils.responses import response_json, response_400, response_409, response_500, response_503
from snaplink.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    MISSING_TARGET_URL,
    SHORTCODE_UNAVAILABLE,
    OWNER_URL_CONFLICT,
    COLLISION_RETRY_FAILED,
    GENERATION_EXHAUSTED,
    LINK_CREATED,
    LINK_REUSED,
)


logger = logging.getLogger(__name__)


def _parse_expiry(value):
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except (TypeError, ValueError, AttributeError) as e:
        raise InvalidExpiryError(f'Expiry date must be an ISO-8601 timestamp (given value: {value!r}).') from e


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Resolve the owner from Cognito claims (absent = anonymous link)
    - Step 2: Extract target URL, custom code and expiry date from request body
    - Step 3: Create the short URL record (or reuse the owner's existing one)
    - Step 4: Respond with the short URL

    HTTP responses:
        201: Short URL created
        200: The owner already has an active short URL for the same target URL
        400: Invalid JSON body, target URL, custom code or expiry date
        409: Custom code already taken
        503: Short code collided twice on insert; safe to retry
        500: No unique short code could be generated, or an internal error occurred

    Example:
        >>> event = {'body': '{"target_url": "https://example.com/my-page"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['short_url']
        'https://sl.ink/q_3Zr-'
    """
    # 0- Get application's config
    app_config = load_config('shorten_url')
    settings = load_settings(app_config)

    # 1- Extract owner id from Cognito
    claims = (event.get('requestContext') or {}).get('authorizer', {}).get('claims', {})
    owner_id = claims.get('sub') or None

    # 2- Extract request parameters from body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    if not isinstance(request_body, dict) or not request_body.get('target_url'):
        logger.info("Missing 'target_url' in body. Responding with 400.", extra={'event': MISSING_TARGET_URL})
        return response_400(message="missing 'target_url' in JSON body", error_code=MISSING_TARGET_URL)

    service = LinkService(
        short_url_dao=build_short_url_dao(app_config, settings),
        account_dao=build_account_dao(app_config),
        background=default_runner(settings.background_workers),
        base_url=settings.base_url or base_url(event),
        shortcode_length=settings.shortcode_length,
    )

    # 3- Create short URL record
    try:
        result = service.shorten(
            target=request_body['target_url'],
            owner_id=owner_id,
            custom_code=request_body.get('custom_code'),
            expires_at=_parse_expiry(request_body.get('expires_at')),
        )
    except ValidationError as e:
        logger.info('Rejected request. Responding with 400.', extra={'event': e.error_code, 'reason': str(e)})
        return response_400(message=str(e), error_code=e.error_code)
    except ShortCodeUnavailableError as e:
        logger.info('Custom short code is taken. Responding with 409.', extra={'event': SHORTCODE_UNAVAILABLE})
        return response_409(message=str(e), error_code=SHORTCODE_UNAVAILABLE)
    except DuplicateOwnerURLError as e:
        logger.info('Owner URL slot changed concurrently. Responding with 409.', extra={'event': OWNER_URL_CONFLICT})
        return response_409(message=str(e), error_code=OWNER_URL_CONFLICT)
    except ShortCodeCollisionRetryFailedError as e:
        logger.warning('Short code collided twice. Responding with 503.', extra={'event': COLLISION_RETRY_FAILED})
        return response_503(message=str(e), error_code=COLLISION_RETRY_FAILED)
    except GenerationExhaustedError:
        logger.exception('Short code space exhausted. Responding with 500.', extra={'event': GENERATION_EXHAUSTED})
        return response_500(error_code=GENERATION_EXHAUSTED)

    # 4- Return successful response to user
    service.background.drain()
    short_url = result.record
    short_url_string = service.short_url(short_url)
    if result.created:
        status, message = 201, f'Successfully shortened {short_url.target} to {short_url_string}'
        logger.info('Shortened URL. Responding with 201.', extra={'event': LINK_CREATED, 'shortcode': short_url.shortcode})
    else:
        status, message = 200, f'URL already exists: {short_url.target} is shortened to {short_url_string}'
        logger.info('Reused existing short URL. Responding with 200.', extra={'event': LINK_REUSED, 'shortcode': short_url.shortcode})

    return response_json(
        status,
        {
            'message': message,
            'link_id': short_url.id,
            'target_url': short_url.target,
            'short_url': short_url_string,
            'shortcode': short_url.shortcode,
            'expires_at': short_url.expires_at.isoformat() if short_url.expires_at else None,
        },
    )
