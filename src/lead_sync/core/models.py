"""
Domain records shared by the sync components.

Source lists and campaigns keep their raw API dictionaries alongside the
few attributes the engine relies on.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

# Raw lead dictionary as returned by the source API
SourceRecord = dict[str, Any]


@dataclass
class SourceUnit:
    """An Amplemarket lead list."""

    id: str | None
    name: str | None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SourceUnit":
        """Build from a lead-list item, keeping missing id/name as None."""
        list_id = data.get("id")
        name = data.get("name")
        return cls(
            id=str(list_id) if list_id not in (None, "") else None,
            name=name if isinstance(name, str) and name else None,
            raw=data,
        )

    @property
    def display_name(self) -> str:
        return self.name or "Unknown"


@dataclass
class DestinationEntity:
    """An Instantly campaign."""

    id: str
    name: str
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "DestinationEntity | None":
        """Build from a campaign item; None when the item has no usable name."""
        name = data.get("name")
        if not isinstance(name, str):
            return None
        return cls(id=str(data.get("id", "")), name=name, raw=data)


@dataclass
class CustomVariables:
    """Provenance carried with every lead sent to Instantly."""

    list_id: str = ""
    lead_id: str = ""
    source: str = "amplemarket"


@dataclass
class DestinationRecord:
    """A lead in the shape the Instantly import endpoint expects."""

    email: str
    first_name: str = ""
    last_name: str = ""
    company_name: str = ""
    title: str = ""
    linkedin_url: str = ""
    custom_variables: CustomVariables = field(default_factory=CustomVariables)

    def to_payload(self) -> dict[str, Any]:
        """Convert to the JSON body item."""
        return asdict(self)
