"""Null location interpolation."""

from typing import Dict, Any, Optional
import logging

import numpy as np
import pandas as pd

from .base import BaseRepairPass
from ..utils.error_labels import LOC_NA
from ..utils.interpolation import fill_locations
from ..utils.validation import coordinate_columns

logger = logging.getLogger(__name__)


def missing_location_mask(track: pd.DataFrame) -> np.ndarray:
    """Rows where either coordinate is null."""
    x_col, y_col = coordinate_columns(track)
    return (track[x_col].isna() | track[y_col].isna()).to_numpy()


class MissingLocationInterpolator(BaseRepairPass):
    """Tags null positions ``locNA`` and interpolates them against time."""

    label = LOC_NA

    def __init__(self, config: Optional[Dict[str, Any]] = None, spline: Optional[bool] = None):
        """
        Initialize the interpolator.

        Args:
            config: Optional configuration dictionary
            spline: Use cubic spline interpolation (config default if None)
        """
        super().__init__(config)
        self.spline = self.use_spline if spline is None else spline

    def process(self, track: pd.DataFrame) -> pd.DataFrame:
        """
        Fill null positions bracketed in time by known ones.

        A position missing on one axis is treated as missing on both.

        Args:
            track: Trajectory table of a single id

        Returns:
            Track with interpolated positions
        """
        track = self.prepare(track)

        missing = missing_location_mask(track)
        if not missing.any():
            return track

        track['error'] = self.tagger.tag(track['error'], missing)
        track = fill_locations(track, missing, self.spline)

        logger.info(f"Interpolated null positions at {int(missing.sum())} observations")
        return track
