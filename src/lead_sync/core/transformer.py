"""
Record Transformer - Maps Amplemarket leads onto the Instantly lead shape.

Amplemarket has changed field names between API versions and export
producers (``email`` vs ``work_email``, ``first_name`` vs ``firstName``,
...). Each Instantly field is filled from the first non-empty alias in an
ordered chain; unknown values become empty strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from lead_sync.core.models import CustomVariables, DestinationRecord, SourceRecord

SOURCE_TAG = "amplemarket"

# Ordered alias chains per destination field, first non-empty wins
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "email": ("email", "work_email"),
    "first_name": ("first_name", "firstName"),
    "last_name": ("last_name", "lastName"),
    "company_name": ("company", "company_name", "organization"),
    "title": ("title", "job_title"),
    "linkedin_url": ("linkedin", "linkedin_url", "social_url"),
}


def _scalar_text(value: Any) -> str:
    """Render a scalar attribute as text; anything else counts as empty."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def first_present(record: SourceRecord, aliases: Iterable[str]) -> str:
    """Value of the first alias holding a non-empty scalar, or ""."""
    for alias in aliases:
        text = _scalar_text(record.get(alias))
        if text:
            return text
    return ""


@dataclass
class TransformResult:
    """Outcome of transforming one list's leads."""

    records: list[DestinationRecord] = field(default_factory=list)
    rejected: int = 0

    @property
    def received(self) -> int:
        return len(self.records) + self.rejected


class RecordTransformer:
    """
    Converts source lead dictionaries into destination records.

    A lead is rejected when every email alias is empty.
    """

    def __init__(
        self,
        aliases: dict[str, tuple[str, ...]] | None = None,
        source_tag: str = SOURCE_TAG,
    ) -> None:
        self.aliases = aliases or FIELD_ALIASES
        self.source_tag = source_tag

    def transform(
        self,
        record: SourceRecord,
        list_id: str = "",
    ) -> DestinationRecord | None:
        """
        Transform one lead.

        Args:
            record: Raw lead dictionary
            list_id: Id of the list being synced, used when the lead
                does not carry its own ``list_id``

        Returns:
            DestinationRecord, or None if the lead has no email
        """
        fields = {
            name: first_present(record, aliases)
            for name, aliases in self.aliases.items()
        }
        if not fields.get("email"):
            return None

        return DestinationRecord(
            **fields,
            custom_variables=CustomVariables(
                source=self.source_tag,
                list_id=_scalar_text(record.get("list_id")) or list_id,
                lead_id=_scalar_text(record.get("id")),
            ),
        )

    def transform_all(
        self,
        records: Iterable[SourceRecord],
        list_id: str = "",
    ) -> TransformResult:
        """Transform a list's leads, dropping and counting rejected ones."""
        result = TransformResult()
        for record in records:
            transformed = (
                self.transform(record, list_id) if isinstance(record, dict) else None
            )
            if transformed is None:
                result.rejected += 1
            else:
                result.records.append(transformed)
        return result
