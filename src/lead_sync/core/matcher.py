"""Entity Matcher - pairs lead lists with campaigns by case-insensitive name."""

from __future__ import annotations

from typing import Any, Iterable

from lead_sync.core.models import DestinationEntity, SourceUnit
from lead_sync.utils.logger import get_logger

logger = get_logger(__name__)


def normalize(name: str) -> str:
    """Match key for a list or campaign name."""
    return name.lower()


class EntityMatcher:
    """
    Name lookup over one fetch of the campaign collection.

    When two campaigns share a normalized name the later one in fetch order
    wins. Build a new matcher for every run; campaigns change between runs.
    """

    def __init__(self, campaigns: Iterable[DestinationEntity]) -> None:
        self._by_key: dict[str, DestinationEntity] = {}
        for campaign in campaigns:
            key = normalize(campaign.name)
            if key in self._by_key:
                logger.debug(
                    "Campaign name collision on %r: %s replaces %s",
                    key,
                    campaign.id,
                    self._by_key[key].id,
                )
            self._by_key[key] = campaign

    @classmethod
    def from_api(cls, items: Iterable[dict[str, Any]]) -> "EntityMatcher":
        """Build from raw campaign items, ignoring ones without a name."""
        campaigns = []
        for item in items:
            campaign = DestinationEntity.from_api(item) if isinstance(item, dict) else None
            if campaign is None:
                logger.debug("Ignoring campaign without a name: %r", item)
                continue
            campaigns.append(campaign)
        return cls(campaigns)

    def __len__(self) -> int:
        return len(self._by_key)

    def match(self, unit: SourceUnit) -> DestinationEntity | None:
        if not unit.name:
            return None
        return self._by_key.get(normalize(unit.name))
