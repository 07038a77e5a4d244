"""
Inconsistent location correction.

Positions should trace a smooth path over time. Each coordinate axis is fitted
against time with a locally weighted quadratic regression, refitted once with
inverse-residual weights, and fixes whose residuals stand out are tagged
``locSEQ`` and replaced by interpolation from the remaining fixes.
"""

from typing import Dict, Any, Optional
import logging

import numpy as np
import pandas as pd

from .base import BaseRepairPass
from ..utils.error_handling import InsufficientDataError
from ..utils.error_labels import LOC_SEQ
from ..utils.interpolation import fill_locations
from ..utils.statistics import iqr_outliers, reweighted_local_residuals
from ..utils.time_utils import time_to_numeric
from ..utils.validation import coordinate_columns

logger = logging.getLogger(__name__)


class LocationSequenceCorrector(BaseRepairPass):
    """Detects positions far from the locally fitted path and interpolates them."""

    label = LOC_SEQ

    def __init__(self, config: Optional[Dict[str, Any]] = None, scale: Optional[float] = None,
                 spline: Optional[bool] = None):
        """
        Initialize the corrector.

        Args:
            config: Optional configuration dictionary
            scale: IQR multiple of the outlier rule; higher values flag fewer
                positions (``location_outlier_scale`` if None)
            spline: Use cubic spline interpolation (config default if None)
        """
        super().__init__(config)
        self.scale = scale if scale is not None else self.config.get('location_outlier_scale', 6.0)
        self.spline = self.use_spline if spline is None else spline
        self.span = self.config.get('local_fit_span', 0.05)
        self.degree = self.config.get('local_fit_degree', 2)
        self.min_observations = self.config.get('min_observations', 4)

    def detect(self, track: pd.DataFrame) -> np.ndarray:
        """
        Flag positions with outlying residuals on either axis.

        Args:
            track: Validated track

        Returns:
            Boolean mask over the rows of the track

        Raises:
            InsufficientDataError: If too few rows have both a time and a position
        """
        columns = coordinate_columns(track)
        times = time_to_numeric(track['time'])

        usable = ~np.isnan(times)
        for col in columns:
            usable &= track[col].notna().to_numpy()
        rows = np.flatnonzero(usable)

        if len(rows) < self.min_observations:
            raise InsufficientDataError(
                f"Location sequence check needs at least {self.min_observations} "
                f"timed positions, got {len(rows)}"
            )

        flagged = np.zeros(len(track), dtype=bool)

        for col in columns:
            values = track[col].to_numpy(dtype=float)[rows]
            residuals = reweighted_local_residuals(times[rows], values, self.span, self.degree)
            outliers = iqr_outliers(np.sqrt(np.abs(residuals)), self.scale, two_sided=False)
            flagged[rows[outliers]] = True
            logger.debug(f"Axis '{col}': {int(outliers.sum())} outlying positions")

        return flagged

    def process(self, track: pd.DataFrame) -> pd.DataFrame:
        """
        Replace outlying positions by interpolation in time.

        Args:
            track: Trajectory table of a single id

        Returns:
            Track with outlying positions replaced
        """
        track = self.prepare(track)

        flagged = self.detect(track)
        if not flagged.any():
            return track

        track['error'] = self.tagger.tag(track['error'], flagged)
        track = fill_locations(track, flagged, self.spline)

        logger.info(f"Corrected {int(flagged.sum())} inconsistent positions")
        return track
