"""Tests for chunking and the batch writer."""

import pytest

from conftest import FakeDestination
from lead_sync.core.chunker import LeadChunker
from lead_sync.core.models import DestinationRecord
from lead_sync.core.writer import NOTHING_TO_SEND, BatchWriter
from lead_sync.errors import WriteFailure


def records(count: int) -> list[DestinationRecord]:
    return [DestinationRecord(email=f"lead{i}@example.com") for i in range(count)]


class TestLeadChunker:
    """Tests for LeadChunker."""

    def test_chunk_sizes(self) -> None:
        chunks = list(LeadChunker(1000).chunk(records(2500)))

        assert [c.size for c in chunks] == [1000, 1000, 500]
        assert chunks[1].start_offset == 1000
        assert chunks[2].end_offset == 2499

    def test_exact_multiple(self) -> None:
        chunks = list(LeadChunker(1000).chunk(records(2000)))
        assert [c.size for c in chunks] == [1000, 1000]

    def test_empty(self) -> None:
        assert list(LeadChunker(10).chunk([])) == []

    def test_estimate(self) -> None:
        chunker = LeadChunker(1000)
        assert chunker.estimate_chunks_needed(0) == 0
        assert chunker.estimate_chunks_needed(1) == 1
        assert chunker.estimate_chunks_needed(1001) == 2

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            LeadChunker(0)


class TestBatchWriter:
    """Tests for BatchWriter."""

    @pytest.mark.asyncio
    async def test_one_call_per_chunk(self) -> None:
        destination = FakeDestination([])
        outcome = await BatchWriter(destination, max_chunk_size=1000).write("c1", records(2001))

        assert len(destination.calls) == 3
        assert [len(c["leads"]) for c in destination.calls] == [1000, 1000, 1]
        assert all(c["campaign_id"] == "c1" for c in destination.calls)
        assert all(c["skip_if_in_workspace"] is True for c in destination.calls)
        assert outcome.chunks == 3
        assert outcome.total_leads == 2001
        assert len(outcome.results) == 3

    @pytest.mark.asyncio
    async def test_payload_shape(self) -> None:
        destination = FakeDestination([])
        await BatchWriter(destination).write("c1", records(1))

        lead = destination.calls[0]["leads"][0]
        assert lead["email"] == "lead0@example.com"
        assert lead["custom_variables"]["source"] == "amplemarket"

    @pytest.mark.asyncio
    async def test_nothing_to_send(self) -> None:
        destination = FakeDestination([])
        outcome = await BatchWriter(destination).write("c1", [])

        assert destination.calls == []
        assert outcome.to_dict() == {"message": NOTHING_TO_SEND}
        assert outcome.total_leads == 0

    @pytest.mark.asyncio
    async def test_failure_stops_remaining_chunks(self) -> None:
        destination = FakeDestination([], statuses=[200, 500, 200])
        writer = BatchWriter(destination, max_chunk_size=10)

        with pytest.raises(WriteFailure) as exc_info:
            await writer.write("c1", records(30))

        assert len(destination.calls) == 2
        assert exc_info.value.status == 500
        assert exc_info.value.chunks_sent == 1

    @pytest.mark.asyncio
    async def test_dry_run_sends_nothing(self) -> None:
        destination = FakeDestination([])
        outcome = await BatchWriter(destination, max_chunk_size=10, dry_run=True).write(
            "c1", records(25)
        )

        assert destination.calls == []
        assert outcome.chunks == 3
        assert outcome.total_leads == 25
        assert outcome.to_dict()["dryRun"] is True
