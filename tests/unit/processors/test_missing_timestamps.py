"""
Tests for null timestamp interpolation.
"""

import pytest
import pandas as pd
import numpy as np

from track_repair.processors.missing_timestamps import MissingTimestampInterpolator


def make_track(times):
    """Create a planar track with the given times."""
    n = len(times)
    return pd.DataFrame({'id': 1, 'time': times, 'x': np.zeros(n), 'y': np.ones(n)})


class TestMissingTimestampInterpolator:
    """Test cases for MissingTimestampInterpolator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.interpolator = MissingTimestampInterpolator()

    def test_linear_interpolation(self):
        """Test that bracketed null times are filled along the index."""
        result = self.interpolator.process(make_track([0.0, 1.0, np.nan, 3.0, np.nan, np.nan, 6.0]))

        np.testing.assert_allclose(result['time'].to_numpy(), np.arange(7, dtype=float))
        assert result['error'].tolist() == ['OK', 'OK', 'timeNA', 'OK', 'timeNA', 'timeNA', 'OK']

    def test_boundary_nulls_stay_null(self):
        """Test that leading and trailing nulls are tagged but not filled."""
        result = self.interpolator.process(make_track([np.nan, 1.0, 2.0, np.nan]))

        assert result['time'].isna().tolist() == [True, False, False, True]
        assert result['error'].tolist() == ['timeNA', 'OK', 'OK', 'timeNA']

    def test_spline_interpolation(self):
        """Test cubic spline filling."""
        times = np.arange(7, dtype=float) ** 2
        times[3] = np.nan

        result = MissingTimestampInterpolator(spline=True).process(make_track(times))
        assert result.loc[3, 'time'] == pytest.approx(9.0)

    def test_spline_from_config(self):
        """Test that the spline option is read from the configuration."""
        interpolator = MissingTimestampInterpolator({'use_spline_interpolation': True})
        assert interpolator.spline

    def test_datetime_track(self):
        """Test filling on a datetime track."""
        times = pd.Series(pd.date_range('2024-01-01', periods=6, freq='1min'))
        expected = times.copy()
        times[2] = pd.NaT
        times[3] = pd.NaT

        result = self.interpolator.process(make_track(times))

        assert (result['time'] == expected).all()
        assert result['error'].tolist() == ['OK', 'OK', 'timeNA', 'timeNA', 'OK', 'OK']

    def test_nothing_to_fill(self):
        """Test that a track without null times is unchanged."""
        result = self.interpolator.process(make_track([0.0, 1.0, 2.0]))
        assert (result['error'] == 'OK').all()
