"""
Duplicated timestamp resolution.

Every observation that repeats the timestamp of an earlier observation is
tagged ``timeDUP`` and moved one step after its predecessor. When that time
is already taken the timestamp is set to null instead, leaving it to the
missing timestamp interpolation.
"""

import logging

import numpy as np
import pandas as pd

from .base import BaseTimestampCorrector
from ..utils.error_labels import TIME_DUP

logger = logging.getLogger(__name__)


class DuplicateTimestampResolver(BaseTimestampCorrector):
    """Detects and resolves repeated timestamps."""

    label = TIME_DUP

    def detect(self, track: pd.DataFrame) -> np.ndarray:
        """
        Find observations repeating an earlier non-null timestamp.

        Args:
            track: Validated track

        Returns:
            Row positions of the duplicates, first occurrences excluded
        """
        times = track['time']
        duplicated = times.duplicated(keep='first') & times.notna()
        return np.flatnonzero(duplicated.to_numpy())

    def process(self, track: pd.DataFrame) -> pd.DataFrame:
        """
        Resolve duplicated timestamps.

        Args:
            track: Trajectory table of a single id

        Returns:
            Track without repeated non-null timestamps
        """
        track = self.prepare(track)

        positions = self.detect(track)
        logger.debug(f"Found {len(positions)} duplicated timestamps")

        return self.correct_timestamps(track, positions)
