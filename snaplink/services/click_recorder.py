import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any

from snaplink.models import ClickEvent
from snaplink.dao.base import ShortURLBaseDAO, AccountBaseDAO
from snaplink.dao.exceptions import ShortURLNotFoundError
from snaplink.services.background import BackgroundTaskRunner, default_runner


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkClickResult:
    total_clicks: int
    links_updated: tuple[str, ...]
    links_skipped: tuple[str, ...]  # unknown or deactivated
    links_failed: tuple[str, ...]


class ClickRecorder:
    """Record redirects against a short URL record

    The record update (counter, recent clicks window, daily rollup) is one
    atomic store operation. The owner's aggregate click counter is updated
    afterwards in the background and may lag or miss clicks on failure.
    """

    def __init__(
        self,
        short_url_dao: ShortURLBaseDAO,
        account_dao: AccountBaseDAO | None = None,
        background: BackgroundTaskRunner | None = None,
    ):
        self.short_url_dao = short_url_dao
        self.account_dao = account_dao
        self.background = background or default_runner()

    def record_click(
        self,
        link_id: str,
        ip: str | None = None,
        user_agent: str | None = None,
        referer: str | None = None,
        timestamp: datetime | None = None,
    ) -> int:
        """Record one click and return the record's updated click count

        Raises:
            ShortURLNotFoundError: if the record does not exist.
            DataStoreError: if the store is unreachable.

        Example:
            >>> recorder.record_click('f3a1', ip='203.0.113.9', referer='https://news.ycombinator.com/')
            42
        """
        click = ClickEvent(
            timestamp=timestamp or datetime.now(UTC),
            ip=ip,
            user_agent=user_agent,
            referer=referer or None,
        )
        click_count, owner_id = self.short_url_dao.record_click(link_id, click)

        if owner_id is not None and self.account_dao is not None:
            self.background.submit(self.account_dao.increment_total_clicks, owner_id, description='increment_total_clicks')
        return click_count

    def record_clicks(self, clicks: Iterable[Mapping[str, Any]]) -> BulkClickResult:
        """Record a batch of clicks collected elsewhere, e.g. by an edge cache

        Clicks are grouped by `link_id` and each one goes through the same
        atomic update as record_click(). A link that fails does not stop the
        other links; clicks already recorded for it before the failure stay.

        Args:
            clicks (Iterable[Mapping[str, Any]]):
                Mappings with a `link_id` and the optional record_click() keywords
                `ip`, `user_agent`, `referer` and `timestamp`.

        Example:
            >>> recorder.record_clicks([{'link_id': 'f3a1'}, {'link_id': 'f3a1', 'ip': '203.0.113.9'}])
            BulkClickResult(total_clicks=2, links_updated=('f3a1',), links_skipped=(), links_failed=())
        """
        grouped: dict[str, list[Mapping[str, Any]]] = defaultdict(list)
        for click in clicks:
            grouped[click['link_id']].append(click)

        updated, skipped, failed = [], [], []
        for link_id, link_clicks in grouped.items():
            try:
                if not self.short_url_dao.get(link_id).is_active:
                    skipped.append(link_id)
                    continue
                for click in link_clicks:
                    self.record_click(
                        link_id,
                        ip=click.get('ip'),
                        user_agent=click.get('user_agent'),
                        referer=click.get('referer'),
                        timestamp=click.get('timestamp'),
                    )
            except ShortURLNotFoundError:
                skipped.append(link_id)
            except Exception:
                logger.exception('Failed to record clicks for link.', extra={'linkId': link_id, 'clicks': len(link_clicks)})
                failed.append(link_id)
            else:
                updated.append(link_id)

        result = BulkClickResult(
            total_clicks=sum(len(link_clicks) for link_clicks in grouped.values()),
            links_updated=tuple(updated),
            links_skipped=tuple(skipped),
            links_failed=tuple(failed),
        )
        logger.info(
            'Recorded click batch.',
            extra={'totalClicks': result.total_clicks, 'linksUpdated': len(updated), 'linksSkipped': len(skipped), 'linksFailed': len(failed)},
        )
        return result
