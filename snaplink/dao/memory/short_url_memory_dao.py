"""In-memory implementation of ShortURLBaseDAO.

Used for local runs (`"active_backend": "memory"`) and as the reference
backend in tests. It enforces the same uniqueness constraints and the same
single-step click update as the Redis DAO. Every operation holds one
process-wide lock, which plays the role of Redis' single-threaded script
execution.

Internal schema:
    self._records = {
        link_id: {
            "record": ShortURLModel,        # scalar fields, analytics left empty
            "clicks": deque[ClickEvent],    # sliding window, trimmed to recent_clicks_limit
            "daily": dict[date, int],       # kept in chronological order
        }
    }
    self._shortcodes = {shortcode: link_id}
    self._owner_urls = {(owner_id, target): link_id}   # active records only
"""

import threading
from collections import deque
from dataclasses import replace
from datetime import datetime, UTC
from typing import Any

from beartype import beartype

from snaplink.models import ShortURLModel, ClickEvent, DailyStat
from snaplink.dao.base import ShortURLBaseDAO
from snaplink.dao.exceptions import DuplicateShortCodeError, DuplicateOwnerURLError, ShortURLNotFoundError


class ShortURLMemoryDAO(ShortURLBaseDAO):
    def __init__(self, recent_clicks_limit: int | None = None, daily_stats_limit: int | None = None):
        if recent_clicks_limit is not None:
            self.recent_clicks_limit = recent_clicks_limit
        if daily_stats_limit is not None:
            self.daily_stats_limit = daily_stats_limit

        self._lock = threading.Lock()
        self._records: dict[str, dict[str, Any]] = {}
        self._shortcodes: dict[str, str] = {}
        self._owner_urls: dict[tuple[str, str], str] = {}

    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> ShortURLModel:
        stored = ShortURLModel(
            id=short_url.id,
            target=short_url.target,
            shortcode=short_url.shortcode,
            owner_id=short_url.owner_id,
            is_active=short_url.is_active,
            expires_at=short_url.expires_at,
            created_at=short_url.created_at or datetime.now(UTC),
        )
        owner_url = (stored.owner_id, stored.target) if stored.owner_id is not None and stored.is_active else None

        with self._lock:
            if stored.shortcode in self._shortcodes:
                raise DuplicateShortCodeError(f"Short URL with code '{stored.shortcode}' already exists.")
            if owner_url is not None and owner_url in self._owner_urls:
                raise DuplicateOwnerURLError(
                    f"Owner '{stored.owner_id}' already has an active short URL for '{stored.target}'.",
                    existing_id=self._owner_urls[owner_url],
                )

            self._shortcodes[stored.shortcode] = stored.id
            if owner_url is not None:
                self._owner_urls[owner_url] = stored.id
            self._records[stored.id] = {
                'record': stored,
                'clicks': deque(),
                'daily': {},
            }
        return stored

    @beartype
    def get(self, link_id: str, **kwargs) -> ShortURLModel:
        with self._lock:
            return self._snapshot(link_id)

    @beartype
    def get_by_shortcode(self, shortcode: str, **kwargs) -> ShortURLModel:
        with self._lock:
            link_id = self._shortcodes.get(shortcode)
            if link_id is None:
                raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
            return self._snapshot(link_id)

    @beartype
    def find_active_by_owner_url(self, owner_id: str, target: str, **kwargs) -> ShortURLModel | None:
        with self._lock:
            link_id = self._owner_urls.get((owner_id, target))
            return None if link_id is None else self._snapshot(link_id)

    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        with self._lock:
            return shortcode in self._shortcodes

    @beartype
    def record_click(self, link_id: str, click: ClickEvent, **kwargs) -> tuple[int, str | None]:
        day = click.timestamp.astimezone(UTC).date()

        with self._lock:
            entry = self._entry(link_id)
            record = entry['record']
            entry['record'] = record = replace(record, click_count=record.click_count + 1, last_clicked_at=click.timestamp)

            clicks = entry['clicks']
            clicks.append(click)
            while len(clicks) > self.recent_clicks_limit:
                clicks.popleft()

            daily = entry['daily']
            if day in daily:
                daily[day] += 1
            else:
                newest = next(reversed(daily), None)
                daily[day] = 1
                if newest is not None and day < newest:
                    # a click from before midnight committed after the first click of the next day
                    entry['daily'] = daily = dict(sorted(daily.items()))
                while len(daily) > self.daily_stats_limit:
                    del daily[next(iter(daily))]

            return record.click_count, record.owner_id

    @beartype
    def deactivate(self, link_id: str, **kwargs) -> None:
        with self._lock:
            entry = self._entry(link_id)
            record = entry['record']
            entry['record'] = replace(record, is_active=False)

            owner_url = (record.owner_id, record.target)
            if self._owner_urls.get(owner_url) == link_id:
                del self._owner_urls[owner_url]

    def _entry(self, link_id: str) -> dict[str, Any]:
        entry = self._records.get(link_id)
        if entry is None:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")
        return entry

    def _snapshot(self, link_id: str) -> ShortURLModel:
        entry = self._entry(link_id)
        return replace(
            entry['record'],
            recent_clicks=tuple(entry['clicks']),
            daily_stats=tuple(DailyStat(day=day, clicks=clicks) for day, clicks in entry['daily'].items()),
        )
