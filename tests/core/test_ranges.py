"""Tests for byte-range planning."""

import pytest

from chunkgate.core.ranges import (
    ChunkRange,
    parse_content_length,
    parse_content_range,
    plan_chunks,
    plan_remaining,
    total_chunks,
)

MB = 1024 * 1024


class TestChunkRange:
    """Tests for ChunkRange dataclass."""

    def test_length_is_inclusive(self) -> None:
        """A range [0, 9] covers 10 bytes."""
        assert ChunkRange(index=0, start=0, end=9).length == 10

    def test_header(self) -> None:
        """Should format the Range request header."""
        assert ChunkRange(index=1, start=100, end=199).header == "bytes=100-199"

    def test_single_byte_range(self) -> None:
        """start == end is one byte."""
        assert ChunkRange(index=0, start=5, end=5).length == 1

    def test_rejects_inverted_range(self) -> None:
        """end before start is invalid."""
        with pytest.raises(ValueError):
            ChunkRange(index=0, start=10, end=9)

    def test_rejects_negative_start(self) -> None:
        """Negative offsets are invalid."""
        with pytest.raises(ValueError):
            ChunkRange(index=0, start=-1, end=9)

    def test_narrowed_keeps_end_and_index(self) -> None:
        """Narrowing moves only the start."""
        narrowed = ChunkRange(index=2, start=200, end=299).narrowed(250)
        assert narrowed == ChunkRange(index=2, start=250, end=299)


class TestPlanChunks:
    """Tests for the chunk grid."""

    @pytest.mark.parametrize(
        ("total", "chunk"),
        [(1, 1), (10, 3), (10, 10), (10, 11), (1000, 7), (4096, 1024), (12345, 100)],
    )
    def test_ranges_cover_resource_exactly(self, total: int, chunk: int) -> None:
        """Ranges are contiguous, non-overlapping and cover [0, total-1]."""
        ranges = plan_chunks(total, chunk)

        assert len(ranges) == -(-total // chunk)
        assert ranges[0].start == 0
        assert ranges[-1].end == total - 1
        for previous, current in zip(ranges, ranges[1:]):
            assert current.start == previous.end + 1
        assert sum(r.length for r in ranges) == total

    def test_indices_sequential(self) -> None:
        """Chunk indices should be sequential starting from 0."""
        ranges = plan_chunks(100, 30)
        assert [r.index for r in ranges] == [0, 1, 2, 3]

    def test_last_chunk_is_short(self) -> None:
        """The final range is clipped to the resource size."""
        ranges = plan_chunks(100, 30)
        assert ranges[-1] == ChunkRange(index=3, start=90, end=99)

    def test_empty_resource_has_no_chunks(self) -> None:
        """Zero bytes need zero requests."""
        assert plan_chunks(0, 1024) == []

    def test_ten_megabytes_in_two_megabyte_chunks(self) -> None:
        """10 MiB in 2 MiB chunks gives five exact ranges."""
        ranges = [(r.start, r.end) for r in plan_chunks(10 * MB, 2 * MB)]
        assert ranges == [
            (0, 2097151),
            (2097152, 4194303),
            (4194304, 6291455),
            (6291456, 8388607),
            (8388608, 10485759),
        ]

    def test_total_chunks_rejects_zero_chunk_size(self) -> None:
        """chunk_size must be positive."""
        with pytest.raises(ValueError):
            total_chunks(100, 0)


class TestPlanRemaining:
    """Tests for resume planning."""

    def test_nothing_on_disk_plans_everything(self) -> None:
        """With no local bytes the plan is the full grid."""
        assert list(plan_remaining(100, 30, 0)) == plan_chunks(100, 30)

    def test_resume_on_chunk_boundary(self) -> None:
        """Whole chunks on disk are skipped."""
        remaining = list(plan_remaining(10 * MB, 2 * MB, 4 * MB))
        assert [(r.start, r.end) for r in remaining] == [
            (4194304, 6291455),
            (6291456, 8388607),
            (8388608, 10485759),
        ]

    def test_resume_mid_chunk_narrows_start(self) -> None:
        """A partially written chunk restarts at the persisted boundary."""
        remaining = list(plan_remaining(100, 30, 45))
        assert remaining[0] == ChunkRange(index=1, start=45, end=59)
        assert remaining[1:] == plan_chunks(100, 30)[2:]

    @pytest.mark.parametrize("local", [1, 29, 30, 31, 59, 60, 99])
    def test_remaining_covers_the_rest_exactly(self, local: int) -> None:
        """The remaining ranges cover [local, total-1] with no gaps."""
        remaining = list(plan_remaining(100, 30, local))
        assert remaining[0].start == local
        assert remaining[-1].end == 99
        for previous, current in zip(remaining, remaining[1:]):
            assert current.start == previous.end + 1

    def test_complete_file_plans_nothing(self) -> None:
        """Nothing remains once every byte is on disk."""
        assert list(plan_remaining(100, 30, 100)) == []


class TestParseContentRange:
    """Tests for Content-Range parsing."""

    def test_parse_with_total(self) -> None:
        """Should parse start, end and total."""
        assert parse_content_range("bytes 0-99/1000") == (0, 99, 1000)

    def test_parse_unknown_total(self) -> None:
        """An asterisk total parses as None."""
        assert parse_content_range("bytes 10-19/*") == (10, 19, None)

    @pytest.mark.parametrize(
        "value",
        ["", "bytes", "items 0-9/10", "bytes 0-/10", "bytes a-9/10", "bytes 0-9/x"],
    )
    def test_malformed(self, value: str) -> None:
        """Malformed headers raise ValueError."""
        with pytest.raises(ValueError):
            parse_content_range(value)


class TestParseContentLength:
    """Tests for Content-Length parsing."""

    def test_plain_digits(self) -> None:
        assert parse_content_length("10485760") == 10485760
        assert parse_content_length("0") == 0

    @pytest.mark.parametrize("value", ["", "+10", " 10 ", "1_0", "-1", "10.0", "١٠"])
    def test_rejects_anything_but_ascii_digits(self, value: str) -> None:
        """Signs, padding, separators and non-ASCII digits are rejected."""
        with pytest.raises(ValueError):
            parse_content_length(value)
