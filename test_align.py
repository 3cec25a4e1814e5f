"""Test nearest, union and positional alignment."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from conftest import make_channel
from lapexport.errors import InvalidTimestamp, MasterChannelMissing
from lapexport.schemas.channels import ChannelFamily
from lapexport.schemas.options import AlignmentMode, ExportOptions
from lapexport.transform.align import (
    NearestAligner,
    PositionalAligner,
    UnionAligner,
    build_aligner,
    nearest_indices,
)


def column_values(frame, name):
    """Aligned values of a channel as a list, None where absent."""
    column = next(c for key, c in frame.columns.items() if key.name == name)
    return [float(v) if p else None for v, p in zip(column.values, column.present)]


class TestNearest:
    """Master timestamps define the rows."""

    def test_slave_takes_nearest_sample(self):
        master = make_channel("M", [0.0, 1.0, 2.0], [0.0, 1.0, 2.0])
        slave = make_channel("S", [0.4, 1.6], [100.0, 200.0], channel_id=1)

        frame = NearestAligner("M").align([master, slave], lap_index=0)

        assert frame.axis.tolist() == [0.0, 1.0, 2.0]
        assert column_values(frame, "M") == [0.0, 1.0, 2.0]
        assert column_values(frame, "S") == [100.0, 100.0, 200.0]

    def test_tie_goes_to_earlier_sample(self):
        master = make_channel("M", [1.0], [0.0])
        slave = make_channel("S", [0.0, 2.0], [5.0, 7.0], channel_id=1)

        frame = NearestAligner("M").align([master, slave], lap_index=0)

        assert column_values(frame, "S") == [5.0]

    def test_master_missing_raises(self):
        slave = make_channel("S", [0.0, 1.0], [1.0, 2.0])

        with pytest.raises(MasterChannelMissing) as excinfo:
            NearestAligner("M").align([slave], lap_index=3)

        assert excinfo.value.lap_index == 3
        assert excinfo.value.channel == "M"

    def test_empty_selection_gives_empty_frame(self):
        frame = NearestAligner("M").align([], lap_index=0)

        assert len(frame) == 0
        assert frame.columns == {}

    def test_empty_slave_is_absent(self):
        master = make_channel("M", [0.0, 1.0], [1.0, 2.0])
        slave = make_channel("S", [], [], channel_id=1)

        frame = NearestAligner("M").align([master, slave], lap_index=0)

        assert column_values(frame, "S") == [None, None]

    def test_nan_value_is_absent(self):
        master = make_channel("M", [0.0, 1.0], [1.0, 2.0])
        slave = make_channel("S", [0.0, 1.0], [np.nan, 9.0], channel_id=1)

        frame = NearestAligner("M").align([master, slave], lap_index=0)

        assert column_values(frame, "S") == [None, 9.0]

    def test_master_matched_by_name_in_raw_family(self):
        raw = make_channel("M", [0.0, 0.5], [1.0, 2.0], family=ChannelFamily.RAW)

        frame = NearestAligner("M").align([raw], lap_index=0)

        assert frame.axis.tolist() == [0.0, 0.5]
        assert column_values(frame, "M") == [1.0, 2.0]


class TestNearestIndices:
    """Binary search against a brute-force scan."""

    def brute_force(self, times, targets):
        result = []
        for target in targets:
            distances = np.abs(times - target)
            # argmin returns the first minimum, i.e. the earliest tied sample
            result.append(int(np.argmin(distances)))
        return result

    def test_matches_linear_scan(self):
        rng = np.random.default_rng(42)

        for _ in range(50):
            times = np.sort(rng.integers(0, 200, size=rng.integers(1, 30))).astype(np.int64)
            targets = rng.integers(-20, 220, size=40).astype(np.int64)

            assert nearest_indices(times, targets).tolist() == self.brute_force(times, targets)

    def test_duplicate_timestamps_pick_first(self):
        times = np.array([0, 10, 10, 10, 20], dtype=np.int64)
        targets = np.array([9, 10, 11, 14, 15, 16], dtype=np.int64)

        assert nearest_indices(times, targets).tolist() == [1, 1, 1, 1, 1, 4]

    def test_empty_times(self):
        targets = np.array([1, 2], dtype=np.int64)

        assert nearest_indices(np.empty(0, dtype=np.int64), targets).tolist() == [-1, -1]


class TestTimestampValidation:
    """Non-finite and decreasing timestamps are fatal."""

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_timestamp(self, bad):
        channel = make_channel("M", [0.0, bad, 2.0], [1.0, 2.0, 3.0])

        with pytest.raises(InvalidTimestamp) as excinfo:
            UnionAligner().align([channel], lap_index=2)

        assert excinfo.value.lap_index == 2
        assert excinfo.value.channel == "M"

    def test_decreasing_timestamp(self):
        channel = make_channel("M", [0.0, 2.0, 1.0], [1.0, 2.0, 3.0])

        with pytest.raises(InvalidTimestamp, match="decreases at sample 2"):
            NearestAligner("M").align([channel], lap_index=0)

    def test_repeated_timestamp_is_allowed(self):
        channel = make_channel("M", [0.0, 1.0, 1.0], [1.0, 2.0, 3.0])

        frame = NearestAligner("M").align([channel], lap_index=0)

        assert len(frame) == 3

    def test_length_mismatch_is_truncated(self):
        channel = make_channel("M", [0.0, 1.0, 2.0], [1.0, 2.0])

        frame = NearestAligner("M").align([channel], lap_index=0)

        assert frame.axis.tolist() == [0.0, 1.0]
        assert column_values(frame, "M") == [1.0, 2.0]


class TestUnion:
    """Rows from the union of timestamps, exact matches only."""

    def test_union_axis_and_exact_matches(self):
        a = make_channel("A", [0.0, 1.0, 2.0], [10.0, 11.0, 12.0])
        b = make_channel("B", [0.4, 1.0], [100.0, 200.0], channel_id=1)

        frame = UnionAligner().align([a, b], lap_index=0)

        assert frame.axis.tolist() == [0.0, 0.4, 1.0, 2.0]
        assert column_values(frame, "A") == [10.0, None, 11.0, 12.0]
        assert column_values(frame, "B") == [None, 100.0, 200.0, None]

    def test_sub_microsecond_difference_matches(self):
        a = make_channel("A", [1.0], [1.0])
        b = make_channel("B", [1.0000001], [2.0], channel_id=1)

        frame = UnionAligner().align([a, b], lap_index=0)

        assert frame.axis.tolist() == [1.0]
        assert column_values(frame, "B") == [2.0]

    def test_ten_microseconds_apart_do_not_match(self):
        a = make_channel("A", [1.0], [1.0])
        b = make_channel("B", [1.00001], [2.0], channel_id=1)

        frame = UnionAligner().align([a, b], lap_index=0)

        assert len(frame) == 2
        assert column_values(frame, "A") == [1.0, None]
        assert column_values(frame, "B") == [None, 2.0]

    def test_rows_without_any_value_are_dropped(self):
        a = make_channel("A", [0.0, 1.0], [np.nan, 1.0])
        b = make_channel("B", [0.0, 2.0], [np.nan, 2.0], channel_id=1)

        frame = UnionAligner().align([a, b], lap_index=0)

        assert frame.axis.tolist() == [1.0, 2.0]

    def test_every_value_comes_from_its_channel(self):
        rng = np.random.default_rng(7)
        a_times = np.sort(rng.integers(0, 1000, size=25)) / 100.0
        b_times = np.sort(rng.integers(0, 1000, size=25)) / 100.0
        a = make_channel("A", a_times, rng.normal(size=25))
        b = make_channel("B", b_times, rng.normal(size=25), channel_id=1)

        frame = UnionAligner().align([a, b], lap_index=0)

        for channel in (a, b):
            samples = dict(zip(np.rint(channel.timestamps * 1e6).tolist(), channel.values.tolist()))
            for t, value in zip(frame.axis, column_values(frame, channel.name)):
                micros = int(np.rint(t * 1e6))
                if value is None:
                    assert micros not in samples
                else:
                    # Duplicate timestamps: the first sample is taken
                    first = channel.values[np.rint(channel.timestamps * 1e6) == micros][0]
                    assert value == first

    def test_empty_selection(self):
        frame = UnionAligner().align([], lap_index=0)

        assert len(frame) == 0


class TestPositional:
    """Deprecated index-based rows."""

    def test_rows_by_index(self):
        with pytest.warns(DeprecationWarning):
            aligner = PositionalAligner()

        a = make_channel("A", [0.0, 5.0, 9.0], [1.0, 2.0, 3.0])
        b = make_channel("B", [0.5], [7.0], channel_id=1)

        frame = aligner.align([a, b], lap_index=0)

        assert not frame.timed
        assert frame.axis.tolist() == [0, 1, 2]
        assert column_values(frame, "B") == [7.0, None, None]


def test_rows_are_keyed_by_label():
    master = make_channel("Speed", [0.0], [1.0])
    raw = make_channel("Speed", [0.0], [2.0], family=ChannelFamily.RAW)

    frame = NearestAligner("Speed").align([master, raw], lap_index=0)
    row = next(frame.rows())

    assert row.axis == 0.0
    assert row.values == {"Speed": 1.0, "Speed [raw]": 2.0}


@pytest.mark.parametrize(
    "mode,aligner_type",
    [
        (AlignmentMode.NEAREST, NearestAligner),
        (AlignmentMode.UNION, UnionAligner),
    ],
)
def test_build_aligner(mode, aligner_type):
    options = ExportOptions(alignment_mode=mode, master_channel="M")

    assert isinstance(build_aligner(options), aligner_type)


def test_build_positional_aligner_warns():
    options = ExportOptions(alignment_mode=AlignmentMode.POSITIONAL)

    with pytest.warns(DeprecationWarning):
        assert isinstance(build_aligner(options), PositionalAligner)
