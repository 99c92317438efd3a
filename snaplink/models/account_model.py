from dataclasses import dataclass


# fmt: off
@dataclass(frozen=True)
class AccountStatsModel:
    owner_id: str           # Account identifier issued by the identity provider
    total_clicks: int = 0   # Clicks across all links owned by the account
    url_count: int = 0      # Number of links created by the account
# fmt: on
