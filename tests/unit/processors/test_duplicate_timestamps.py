"""
Tests for duplicated timestamp resolution.
"""

import pytest
import pandas as pd
import numpy as np

from track_repair.processors.duplicate_timestamps import DuplicateTimestampResolver
from track_repair.utils.error_handling import InvalidTrackError, MultipleTrackIdsError


def make_track(times, errors=None):
    """Create a planar track with the given times."""
    track = pd.DataFrame({
        'id': 'track-1',
        'time': times,
        'x': np.arange(len(times), dtype=float),
        'y': np.zeros(len(times))
    })
    if errors is not None:
        track['error'] = errors
    return track


class TestDuplicateTimestampResolver:
    """Test cases for DuplicateTimestampResolver."""

    def setup_method(self):
        """Set up test fixtures."""
        self.resolver = DuplicateTimestampResolver()

    def test_duplicate_moved_after_predecessor(self):
        """Test that a duplicate gets its predecessor's time plus one step."""
        result = self.resolver.process(make_track([0, 1, 1, 3]))

        assert result['time'].tolist() == [0.0, 1.0, 2.0, 3.0]
        assert result['error'].tolist() == ['OK', 'OK', 'timeDUP', 'OK']

    def test_taken_slot_becomes_null(self):
        """Test that a duplicate whose corrected time is taken becomes null."""
        result = self.resolver.process(make_track([0, 1, 1, 2]))

        assert np.isnan(result.loc[2, 'time'])
        assert result['error'].tolist() == ['OK', 'OK', 'OK', 'OK']

    def test_run_of_duplicates(self):
        """Test that a run of duplicates is resolved in track order."""
        resolver = DuplicateTimestampResolver(step=1)
        result = resolver.process(make_track([0, 1, 1, 1, 4]))

        assert result['time'].tolist() == [0.0, 1.0, 2.0, 3.0, 4.0]
        assert result['error'].tolist() == ['OK', 'OK', 'timeDUP', 'timeDUP', 'OK']

    def test_decimal_times_taken_slot(self):
        """Test that a candidate equal to a stored time up to rounding is taken."""
        resolver = DuplicateTimestampResolver(step=0.1)
        result = resolver.process(make_track([0.0, 0.1, 0.2, 0.2, 0.3]))

        # 0.2 + 0.1 is 0.30000000000000004, the slot of the stored 0.3
        assert np.isnan(result.loc[3, 'time'])
        assert result.loc[3, 'error'] == 'OK'

    def test_decimal_times_free_slot(self):
        """Test that a free decimal slot is still used."""
        resolver = DuplicateTimestampResolver(step=0.1)
        result = resolver.process(make_track([0.0, 0.1, 0.2, 0.2, 0.4]))

        assert result.loc[3, 'time'] == pytest.approx(0.3)
        assert result.loc[3, 'error'] == 'timeDUP'

    def test_null_predecessor(self):
        """Test that a duplicate after a null time cannot be resolved."""
        resolver = DuplicateTimestampResolver(step=1)
        result = resolver.process(make_track([0, 1, np.nan, 1, 3]))

        assert np.isnan(result.loc[3, 'time'])
        assert result.loc[3, 'error'] == 'OK'

    def test_previous_labels_kept_on_downgrade(self):
        """Test that a withdrawn label restores the earlier label."""
        result = self.resolver.process(make_track([0, 1, 1, 2], ['OK', 'locNA', 'locNA', 'OK']))

        assert result['error'].tolist() == ['OK', 'locNA', 'locNA', 'OK']

    def test_labels_accumulate(self):
        """Test that the label is added to earlier labels."""
        result = self.resolver.process(make_track([0, 1, 1, 3], ['OK', 'OK', 'locSEQ', 'OK']))
        assert result.loc[2, 'error'] == 'locSEQ,timeDUP'

    def test_datetime_track(self):
        """Test resolution on a datetime track."""
        times = pd.Series(pd.date_range('2024-01-01', periods=5, freq='1s'))
        times[2] = times[1]
        result = self.resolver.process(make_track(times))

        assert result.loc[2, 'time'] == pd.Timestamp('2024-01-01 00:00:02')
        assert result.loc[2, 'error'] == 'timeDUP'
        assert not result['time'].duplicated().any()

    def test_no_duplicates_left(self):
        """Test that non-null timestamps are unique after resolution."""
        result = self.resolver.process(make_track([0, 1, 1, 2, 2, 2, 6, 7]))
        times = result['time'].dropna()

        assert not times.duplicated().any()

    def test_idempotent(self):
        """Test that a second run changes nothing."""
        once = self.resolver.process(make_track([0, 1, 1, 3, 3, 5, 6]))
        twice = self.resolver.process(once)

        pd.testing.assert_frame_equal(once, twice)

    def test_input_not_modified(self):
        """Test that the caller's table is left untouched."""
        track = make_track([0, 1, 1, 3])
        self.resolver.process(track)

        assert track['time'].tolist() == [0, 1, 1, 3]
        assert 'error' not in track.columns

    def test_invalid_input(self):
        """Test failures on invalid input."""
        with pytest.raises(InvalidTrackError):
            self.resolver.process(pd.DataFrame({'time': [0, 1]}))

        track = make_track([0, 1, 2])
        track['id'] = ['a', 'a', 'b']
        with pytest.raises(MultipleTrackIdsError):
            self.resolver.process(track)
