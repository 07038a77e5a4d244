"""
Tests for inconsistent location correction.
"""

import pytest
import pandas as pd
import numpy as np

from track_repair.processors.location_sequence import LocationSequenceCorrector
from track_repair.utils.error_handling import InsufficientDataError


class TestLocationSequenceCorrector:
    """Test cases for LocationSequenceCorrector."""

    def setup_method(self):
        """Set up test fixtures."""
        self.corrector = LocationSequenceCorrector({'location_outlier_scale': 6.0})

    def create_test_track(self, num_samples=100):
        """Create a straight track sampled every second."""
        t = np.arange(num_samples, dtype=float)
        return pd.DataFrame({
            'id': 'walker',
            'time': t,
            'x': 2.0 * t,
            'y': 0.5 * t + 10.0
        })

    def test_spike_replaced(self):
        """Test that a position far off the path is flagged and re-estimated."""
        track = self.create_test_track()
        # 100 times the typical displacement between fixes
        track.loc[50, 'x'] += 200.0

        result = self.corrector.process(track)

        assert 'locSEQ' in result.loc[50, 'error']
        assert result.loc[50, 'x'] == pytest.approx(100.0)
        assert result.loc[50, 'y'] == pytest.approx(35.0)
        np.testing.assert_allclose(result['x'], 2.0 * result['time'], atol=1e-6)
        np.testing.assert_allclose(result['y'], 0.5 * result['time'] + 10.0, atol=1e-6)
        # Genuine fixes whose local window holds the spike are re-estimated too
        flagged = result.index[result['error'] != 'OK'].tolist()
        assert flagged == [48, 49, 50, 51, 52]
        assert (result.loc[flagged, 'error'] == 'locSEQ').all()

    def test_smooth_track_untouched(self):
        """Test that a smooth path has no flagged positions."""
        result = self.corrector.process(self.create_test_track())
        assert (result['error'] == 'OK').all()

    def test_idempotent(self):
        """Test that a corrected track is not flagged again."""
        track = self.create_test_track()
        track.loc[50, 'x'] += 200.0

        once = self.corrector.process(track)
        twice = self.corrector.process(once)

        assert twice['error'].tolist() == once['error'].tolist()
        np.testing.assert_allclose(twice['x'], once['x'])

    def test_labels_accumulate(self):
        """Test that the label is appended to earlier labels."""
        track = self.create_test_track()
        track['error'] = 'OK'
        track.loc[50, 'error'] = 'timeDUP'
        track.loc[50, 'y'] -= 100.0

        result = self.corrector.process(track)
        assert result.loc[50, 'error'] == 'timeDUP,locSEQ'

    def test_noisy_track(self):
        """Test detection of a spike among noisy positions."""
        rng = np.random.default_rng(42)
        track = self.create_test_track()
        track['x'] = track['time'] + rng.normal(0, 0.05, len(track))
        track['y'] = -track['time'] + rng.normal(0, 0.05, len(track))
        track.loc[60, 'x'] += 100.0

        result = self.corrector.process(track)

        assert 'locSEQ' in result.loc[60, 'error']
        assert abs(result.loc[60, 'x'] - 60.0) < 0.5

    def test_geo_track(self):
        """Test correction on a longitude/latitude track."""
        t = np.arange(80, dtype=float)
        track = pd.DataFrame({
            'id': 3,
            'time': pd.date_range('2024-06-01', periods=80, freq='5s'),
            'lon': 4.35 + 1e-4 * t,
            'lat': 50.85 + 5e-5 * t
        })
        track.loc[30, 'lat'] += 0.5

        result = self.corrector.process(track)

        assert result.loc[30, 'error'] == 'locSEQ'
        assert result.loc[30, 'lat'] == pytest.approx(50.85 + 5e-5 * 30)

    def test_null_positions_ignored(self):
        """Test that null positions neither fail nor get flagged."""
        track = self.create_test_track()
        track.loc[20, ['x', 'y']] = np.nan

        result = self.corrector.process(track)
        assert result.loc[20, 'error'] == 'OK'

    def test_too_few_positions(self):
        """Test failure on tracks too short for the local fit."""
        with pytest.raises(InsufficientDataError):
            self.corrector.process(self.create_test_track(3))
