from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


@dataclass(frozen=True)
class ClickEvent:
    """A single recorded redirect.

    Attributes:
        timestamp (datetime):
            Moment the click was recorded (UTC).
        ip (str | None):
            Origin IP address of the visitor.
        user_agent (str | None):
            Visitor's User-Agent header.
        referer (str | None):
            Visitor's Referer header, if any.
    """

    timestamp: datetime
    ip: str | None = None
    user_agent: str | None = None
    referer: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'ip': self.ip,
            'user_agent': self.user_agent,
            'referer': self.referer,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'ClickEvent':
        return cls(
            timestamp=datetime.fromisoformat(data['timestamp']),
            ip=data.get('ip'),
            user_agent=data.get('user_agent'),
            referer=data.get('referer'),
        )


# fmt: off
@dataclass(frozen=True)
class DailyStat:
    day: date     # Calendar day (UTC), unique within a record's daily stats
    clicks: int   # Number of clicks recorded on that day
# fmt: on


@dataclass(frozen=True)
class ShortURLModel:
    """Represent a shortened URL record and its click analytics.

    Attributes:
        id (str):
            Opaque unique identifier, assigned at creation.
        target (str):
            The original long URL that the short code redirects to.
        shortcode (str):
            Globally unique short identifier over [A-Za-z0-9_-].
        owner_id (str | None):
            Owning account, None for anonymous links.
        click_count (int):
            Total number of recorded clicks. Never decremented by eviction.
        last_clicked_at (datetime | None):
            Timestamp of the most recent recorded click.
        is_active (bool):
            Soft-delete flag.
        expires_at (datetime | None):
            The link is usable only while this is None or in the future.
        created_at (datetime | None):
            Creation timestamp (UTC).
        recent_clicks (tuple[ClickEvent, ...]):
            Most recent click events in chronological order (bounded).
        daily_stats (tuple[DailyStat, ...]):
            Per-day click rollups in chronological order (bounded).

    Example:
        >>> url = ShortURLModel(id='f3a1', target='https://example.com', shortcode='abc123')
        >>> url.click_count
        0
        >>> url.short_url('https://sl.ink')
        'https://sl.ink/abc123'
    """

    id: str
    target: str
    shortcode: str
    owner_id: str | None = None
    click_count: int = 0
    last_clicked_at: datetime | None = None
    is_active: bool = True
    expires_at: datetime | None = None
    created_at: datetime | None = None
    recent_clicks: tuple[ClickEvent, ...] = field(default_factory=tuple)
    daily_stats: tuple[DailyStat, ...] = field(default_factory=tuple)

    def short_url(self, base_url: str) -> str:
        return f'{base_url.rstrip("/")}/{self.shortcode}'

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def is_usable(self, now: datetime) -> bool:
        return self.is_active and not self.is_expired(now)
