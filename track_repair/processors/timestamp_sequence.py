"""
Inconsistent timestamp correction.

Timestamps should grow roughly linearly with the observation index. A robust
linear fit of time against index exposes corrupted timestamps as large
residuals; these are tagged ``timeSEQ`` and moved one step after their
predecessor, or set to null when that time is already taken.
"""

from typing import Dict, Any, Optional
import logging

import numpy as np
import pandas as pd

from .base import BaseTimestampCorrector
from ..utils.error_handling import InsufficientDataError
from ..utils.error_labels import TIME_SEQ
from ..utils.statistics import iqr_outliers, robust_linear_residuals
from ..utils.time_utils import Step, time_to_numeric

logger = logging.getLogger(__name__)


class TimestampSequenceCorrector(BaseTimestampCorrector):
    """Detects timestamps inconsistent with a linear progression of time."""

    label = TIME_SEQ

    def __init__(self, config: Optional[Dict[str, Any]] = None, step: Optional[Step] = None,
                 scale: Optional[float] = None):
        """
        Initialize the corrector.

        Args:
            config: Optional configuration dictionary
            step: Expected interval between observations (modal step if None)
            scale: IQR multiple of the outlier rule (``time_outlier_scale`` if None)
        """
        super().__init__(config, step)
        self.scale = scale if scale is not None else self.config.get('time_outlier_scale', 3.0)
        self.max_iter = self.config.get('robust_max_iter', 200)
        self.min_observations = self.config.get('min_observations', 4)

    def detect(self, track: pd.DataFrame) -> np.ndarray:
        """
        Find timestamps with outlying residuals against a robust linear fit.

        Only non-null timestamps enter the fit. The square roots of the
        absolute residuals are screened with a two-sided IQR rule.

        Args:
            track: Validated track

        Returns:
            Row positions of inconsistent timestamps

        Raises:
            InsufficientDataError: If too few non-null timestamps exist
        """
        numeric = time_to_numeric(track['time'])
        positions = np.flatnonzero(~np.isnan(numeric))

        if len(positions) < self.min_observations:
            raise InsufficientDataError(
                f"Timestamp sequence check needs at least {self.min_observations} "
                f"non-null timestamps, got {len(positions)}"
            )

        residuals = robust_linear_residuals(positions + 1, numeric[positions], self.max_iter)
        outliers = iqr_outliers(np.sqrt(np.abs(residuals)), self.scale, two_sided=True)

        return positions[outliers]

    def process(self, track: pd.DataFrame) -> pd.DataFrame:
        """
        Correct inconsistent timestamps.

        Args:
            track: Trajectory table of a single id

        Returns:
            Track with inconsistent timestamps corrected or nulled
        """
        track = self.prepare(track)

        flagged = self.detect(track)
        # The first observation has no predecessor to correct from
        flagged = flagged[flagged != 0]
        logger.debug(f"Found {len(flagged)} inconsistent timestamps")

        return self.correct_timestamps(track, flagged)
