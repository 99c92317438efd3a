from snaplink.services.background import BackgroundTaskRunner, default_runner
from snaplink.services.link_service import LinkService, ShortenResult
from snaplink.services.click_recorder import ClickRecorder, BulkClickResult
from snaplink.services.analytics import AnalyticsReader, summarize


__all__ = [
    'BackgroundTaskRunner',
    'default_runner',
    'LinkService',
    'ShortenResult',
    'ClickRecorder',
    'BulkClickResult',
    'AnalyticsReader',
    'summarize',
]
