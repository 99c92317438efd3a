import logging

from snaplink.types import LambdaEvent, LambdaContext, LambdaResponse
from snaplink.dao.factory import build_short_url_dao
from snaplink.dao.exceptions import ShortURLNotFoundError
from snaplink.services import AnalyticsReader
from snaplink.utils import load_config, load_settings
from snaplink.utils.helpers import guarantee_500_response
from snaplink.utils.responses import response_json, response_400, response_401, response_404


logger = logging.getLogger(__name__)

MISSING_LINK_ID = 'link_analytics:missing_link_id'
LINK_NOT_FOUND = 'link_analytics:link_not_found'


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Return click analytics for one of the caller's links

    GET /v1/links/{link_id}/analytics

    Links owned by other accounts are reported as 404 so their existence is not disclosed.
    """
    app_config = load_config('link_analytics')
    settings = load_settings(app_config)

    claims = (event.get('requestContext') or {}).get('authorizer', {}).get('claims', {})
    owner_id = claims.get('sub')
    if not owner_id:
        logger.info("Missing 'sub' in JWT claims. Responding with 401.")
        return response_401(message="missing 'sub' in JWT claims")

    link_id = (event.get('pathParameters') or {}).get('link_id')
    if not link_id:
        logger.info('Missing "link_id" in path. Responding with 400.', extra={'event': MISSING_LINK_ID})
        return response_400(message="missing 'link_id' in path", error_code=MISSING_LINK_ID)

    reader = AnalyticsReader(build_short_url_dao(app_config, settings))
    try:
        summary = reader.get_analytics(link_id, owner_id=owner_id)
    except ShortURLNotFoundError:
        logger.info('Link not found for owner. Responding with 404.', extra={'linkId': link_id, 'event': LINK_NOT_FOUND})
        return response_404(message=f"link '{link_id}' doesn't exist", error_code=LINK_NOT_FOUND)

    return response_json(200, {'link_id': link_id, **summary.to_dict()})
