"""
Sync Engine - Main orchestration for a sync run.

Coordinates all components to push Amplemarket leads into Instantly:
- Paginated fetch of lead lists and campaigns
- Name matching between lists and campaigns
- Idempotency tracking across runs
- Lead transformation and chunked import

Every list moves through validate, dedup check, match, fetch leads,
transform and write, commit. A failure inside one list is recorded in the
report and the run continues with the next list. Only a failure to read
the list or campaign collections aborts the run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol

from lead_sync.config import Settings
from lead_sync.core.matcher import EntityMatcher
from lead_sync.core.models import DestinationEntity, SourceUnit
from lead_sync.core.tracker import IdempotencyTracker
from lead_sync.core.transformer import RecordTransformer
from lead_sync.core.writer import BatchWriter, LeadImporter
from lead_sync.utils.logger import get_logger

logger = get_logger(__name__)

MISSING_PROPERTIES = "List missing required properties (id or name)"
NO_LISTS_FOUND = "No lists found in Amplemarket or unexpected response format"


class SkipReason(str, Enum):
    """Why a list was not synced."""

    ALREADY_PROCESSED = "Already processed"
    NO_MATCHING_DESTINATION = "No matching destination"
    NO_RECORDS = "No leads in list"


class SourceApi(Protocol):
    async def list_lead_lists(self) -> list[dict[str, Any]]: ...

    async def list_leads(self, list_id: str) -> list[dict[str, Any]]: ...


class DestinationApi(LeadImporter, Protocol):
    async def list_campaigns(self) -> list[dict[str, Any]]: ...


@dataclass
class ProcessedEntry:
    list_name: str
    list_id: str
    campaign_name: str
    campaign_id: str
    leads_count: int
    rejected_count: int
    import_result: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "listName": self.list_name,
            "listId": self.list_id,
            "campaignName": self.campaign_name,
            "campaignId": self.campaign_id,
            "leadsCount": self.leads_count,
            "rejectedCount": self.rejected_count,
            "importResult": self.import_result,
        }


@dataclass
class SkippedEntry:
    list_name: str
    reason: SkipReason
    processed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "listName": self.list_name,
            "reason": self.reason.value,
        }
        if self.processed_at:
            data["processedAt"] = self.processed_at
        return data


@dataclass
class ErrorEntry:
    list_name: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"listName": self.list_name, "error": self.error}


@dataclass
class RunReport:
    """Structured summary of one sync run."""

    processed: list[ProcessedEntry] = field(default_factory=list)
    skipped: list[SkippedEntry] = field(default_factory=list)
    errors: list[ErrorEntry] = field(default_factory=list)
    general_errors: list[str] = field(default_factory=list)
    total_leads: int = 0
    lists_total: int = 0
    campaigns_total: int = 0
    sample_list: dict[str, Any] | None = None
    dry_run: bool = False
    lists_done: int = 0
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors or self.general_errors)

    @property
    def duration_seconds(self) -> float:
        if self.end_time and self.start_time:
            return self.end_time - self.start_time
        if self.start_time:
            return time.time() - self.start_time
        return 0.0

    def add_processed(self, entry: ProcessedEntry) -> None:
        self.processed.append(entry)
        self.total_leads += entry.leads_count

    def to_dict(self) -> dict[str, Any]:
        """JSON contract returned by the entrypoints."""
        data: dict[str, Any] = {
            "processed": [entry.to_dict() for entry in self.processed],
            "skipped": [entry.to_dict() for entry in self.skipped],
            "errors": [entry.to_dict() for entry in self.errors]
            + [{"general": message} for message in self.general_errors],
            "totalLeads": self.total_leads,
            "debug": {
                "listsCount": self.lists_total,
                "campaignsCount": self.campaigns_total,
                "sampleList": self.sample_list,
            },
        }
        if self.dry_run:
            data["dryRun"] = True
        return data


# Progress callback type
ProgressCallback = Callable[[RunReport], None]


class SyncEngine:
    """
    Runs one Amplemarket to Instantly synchronization.

    Example:
        engine = SyncEngine(settings, amplemarket, instantly, tracker)
        report = await engine.run(
            on_progress=lambda r: print(f"{r.lists_done}/{r.lists_total}")
        )
    """

    def __init__(
        self,
        settings: Settings,
        source: SourceApi,
        destination: DestinationApi,
        tracker: IdempotencyTracker | None = None,
        transformer: RecordTransformer | None = None,
    ) -> None:
        """
        Initialize sync engine.

        Args:
            settings: Application settings
            source: Amplemarket client
            destination: Instantly client
            tracker: Processed-list tracker (None disables skipping)
            transformer: Lead transformer (defaults to the standard aliases)
        """
        self.settings = settings
        self.source = source
        self.destination = destination
        self.tracker = tracker or IdempotencyTracker()
        self.transformer = transformer or RecordTransformer()
        self.writer = BatchWriter(
            destination,
            max_chunk_size=settings.destination.max_leads_per_request,
            skip_if_in_workspace=settings.destination.skip_if_in_workspace,
            dry_run=settings.sync.dry_run,
        )

    async def run(self, on_progress: ProgressCallback | None = None) -> RunReport:
        """
        Sync every lead list into its matching campaign.

        Returns:
            RunReport covering every list

        Raises:
            FetchFailure: If the list or campaign collection cannot be read
        """
        report = RunReport(dry_run=self.settings.sync.dry_run)
        report.start_time = time.time()

        logger.info("Fetching Amplemarket lists...")
        lead_lists = await self.source.list_lead_lists()
        report.lists_total = len(lead_lists)
        report.sample_list = lead_lists[0] if lead_lists else None

        logger.info("Fetching Instantly campaigns...")
        campaigns = await self.destination.list_campaigns()
        report.campaigns_total = len(campaigns)

        if not lead_lists:
            logger.warning(NO_LISTS_FOUND)
            report.general_errors.append(NO_LISTS_FOUND)

        matcher = EntityMatcher.from_api(campaigns)
        logger.info(
            "Found %d list(s) and %d campaign(s)", len(lead_lists), len(campaigns)
        )

        if on_progress:
            on_progress(report)

        for item in lead_lists:
            unit = SourceUnit.from_api(item if isinstance(item, dict) else {})
            await self._process_unit(unit, matcher, report)
            report.lists_done += 1
            if on_progress:
                on_progress(report)

        report.end_time = time.time()
        logger.info(
            "Sync finished: %d processed, %d skipped, %d errors, %d leads",
            len(report.processed),
            len(report.skipped),
            len(report.errors),
            report.total_leads,
        )
        return report

    async def _process_unit(
        self,
        unit: SourceUnit,
        matcher: EntityMatcher,
        report: RunReport,
    ) -> None:
        if not unit.id or not unit.name:
            report.errors.append(ErrorEntry(unit.display_name, MISSING_PROPERTIES))
            return

        try:
            processed_at = self.tracker.processed_at(unit.id)
        except Exception as e:
            logger.error("List %r: processed-state lookup failed: %s", unit.name, e)
            report.errors.append(ErrorEntry(unit.name, f"State lookup failed: {e}"))
            return

        if processed_at:
            report.skipped.append(
                SkippedEntry(unit.name, SkipReason.ALREADY_PROCESSED, processed_at)
            )
            return

        campaign = matcher.match(unit)
        if campaign is None:
            report.skipped.append(
                SkippedEntry(unit.name, SkipReason.NO_MATCHING_DESTINATION)
            )
            return

        try:
            entry = await self._sync_unit(unit.id, unit.name, campaign)
        except Exception as e:
            logger.error("List %r failed: %s", unit.name, e)
            report.errors.append(ErrorEntry(unit.name, str(e)))
            return

        if entry is None:
            report.skipped.append(SkippedEntry(unit.name, SkipReason.NO_RECORDS))
            return

        report.add_processed(entry)
        if self.settings.sync.dry_run:
            return

        try:
            self.tracker.mark_processed(unit.id)
        except Exception as e:
            # Leads are already in Instantly; the list stays processed
            logger.error("List %r: could not record as processed: %s", unit.name, e)
            report.errors.append(
                ErrorEntry(unit.name, f"Leads sent but not recorded as processed: {e}")
            )

    async def _sync_unit(
        self,
        list_id: str,
        list_name: str,
        campaign: DestinationEntity,
    ) -> ProcessedEntry | None:
        """Fetch, transform and write one list; None when the list is empty."""
        leads = await self.source.list_leads(list_id)
        if not leads:
            return None

        result = self.transformer.transform_all(leads, list_id=list_id)
        if result.rejected:
            logger.info(
                "List %r: dropped %d lead(s) without an email", list_name, result.rejected
            )

        outcome = await self.writer.write(campaign.id, result.records)
        logger.info(
            "List %r -> campaign %r: %d lead(s) in %d chunk(s)",
            list_name,
            campaign.name,
            outcome.total_leads,
            outcome.chunks,
        )

        return ProcessedEntry(
            list_name=list_name,
            list_id=list_id,
            campaign_name=campaign.name,
            campaign_id=campaign.id,
            leads_count=outcome.total_leads,
            rejected_count=result.rejected,
            import_result=outcome.to_dict(),
        )
