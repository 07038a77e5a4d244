"""Null timestamp interpolation."""

from typing import Dict, Any, Optional
import logging

import numpy as np
import pandas as pd

from .base import BaseRepairPass
from ..utils.error_labels import TIME_NA
from ..utils.interpolation import interpolate_missing
from ..utils.time_utils import numeric_to_time, time_to_numeric

logger = logging.getLogger(__name__)


class MissingTimestampInterpolator(BaseRepairPass):
    """Tags null timestamps ``timeNA`` and interpolates them along the index."""

    label = TIME_NA

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
        Fill null timestamps bracketed by non-null ones.

        Args:
            track: Trajectory table of a single id

        Returns:
            Track with interpolated timestamps; leading and trailing nulls stay null
        """
        track = self.prepare(track)

        missing = track['time'].isna().to_numpy()
        if not missing.any():
            return track

        track['error'] = self.tagger.tag(track['error'], missing)

        filled = interpolate_missing(time_to_numeric(track['time']), spline=self.spline)
        interpolated = numeric_to_time(filled, track['time'])
        track['time'] = track['time'].mask(missing, interpolated)

        unresolved = int(np.isnan(filled).sum())
        logger.info(f"Interpolated {int(missing.sum()) - unresolved}/{int(missing.sum())} "
                    f"null timestamps")
        if unresolved:
            logger.warning(f"{unresolved} timestamps outside the observed range remain null")

        return track
