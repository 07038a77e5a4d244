"""
Missing observation completion.

Re-grids a track onto its full expected timeline ``begin, begin + step, ...,
end``. Slots without an observation become new rows labelled ``MISSING``
whose positions are then interpolated, like any other null position.
"""

from typing import Dict, Any, Optional, Union
import logging

import numpy as np
import pandas as pd

from .base import BaseRepairPass
from .missing_locations import missing_location_mask
from ..utils.error_handling import InsufficientDataError
from ..utils.error_labels import MISSING
from ..utils.interpolation import fill_locations
from ..utils.time_utils import (
    STEP_MATCH_TOLERANCE, Step, coerce_step, is_datetime_time, is_positive_step, modal_step,
    slot_key
)
from ..utils.validation import coordinate_columns

logger = logging.getLogger(__name__)

TimeValue = Union[pd.Timestamp, float, int, str]


def build_timeline(begin, end, step: Step, datetime_like: bool) -> pd.Series:
    """
    Build the regular timeline from ``begin`` to ``end`` inclusive.

    Args:
        begin: First time of the timeline
        end: Last admissible time of the timeline
        step: Interval between consecutive times
        datetime_like: Whether times are datetimes

    Returns:
        Series of times ``begin + k * step`` not exceeding ``end``
    """
    count = int(np.floor((end - begin) / step + STEP_MATCH_TOLERANCE)) + 1

    if datetime_like:
        return pd.Series(pd.date_range(start=begin, periods=count, freq=step))

    return pd.Series(begin + step * np.arange(count, dtype=float))


def occupied_slots(timeline: pd.Series, times: pd.Series, step: Step) -> np.ndarray:
    """
    Mark the timeline slots already holding an observation.

    Numeric slots match observations up to float rounding, so ``0.1 * 3``
    finds an observation stored as ``0.3``.

    Args:
        timeline: Regular timeline from :func:`build_timeline`
        times: Non-null times of the track
        step: Interval between consecutive slots

    Returns:
        Boolean array aligned with ``timeline``
    """
    observed = {slot_key(value, step) for value in times}
    return np.array([slot_key(value, step) in observed for value in timeline], dtype=bool)


class MissingObservationCompleter(BaseRepairPass):
    """Inserts the samples missing from a regularly sampled track."""

    label = MISSING

    def __init__(self, config: Optional[Dict[str, Any]] = None, begin: Optional[TimeValue] = None,
                 end: Optional[TimeValue] = None, step: Optional[Step] = None,
                 spline: Optional[bool] = None):
        """
        Initialize the completer.

        Args:
            config: Optional configuration dictionary
            begin: Start of the expected timeline (earliest timestamp if None)
            end: End of the expected timeline (latest timestamp if None)
            step: Expected interval between observations (modal step if None)
            spline: Use cubic spline interpolation (config default if None)
        """
        super().__init__(config)
        self.begin = begin
        self.end = end
        self.step = step
        self.spline = self.use_spline if spline is None else spline

    def _as_time(self, value: TimeValue, times: pd.Series):
        if is_datetime_time(times):
            value = pd.Timestamp(value)
            if times.dt.tz is not None and value.tz is None:
                value = value.tz_localize(times.dt.tz)
            return value
        return float(value)

    def process(self, track: pd.DataFrame) -> pd.DataFrame:
        """
        Complete a track with its missing observations.

        Args:
            track: Trajectory table of a single id

        Returns:
            Track sorted by time with one row per timeline slot (plus any
            observations outside the timeline); rows with null time come last
        """
        track = self.prepare(track)
        times = track['time']
        valid = times.dropna()

        if valid.empty:
            raise InsufficientDataError("Cannot complete a track without timestamps")

        step = coerce_step(self.step, times) if self.step is not None else modal_step(times)
        if not is_positive_step(step):
            raise ValueError(f"step must be positive, got {step}")

        begin = self._as_time(self.begin, times) if self.begin is not None else valid.min()
        end = self._as_time(self.end, times) if self.end is not None else valid.max()
        if end < begin:
            raise ValueError(f"end ({end}) must not precede begin ({begin})")

        timeline = build_timeline(begin, end, step, is_datetime_time(times))
        absent = timeline[~occupied_slots(timeline, valid, step)]
        logger.debug(f"Timeline from {begin} to {end} every {step}: "
                     f"{len(timeline)} slots, {len(absent)} without observation")

        if len(absent):
            x_col, y_col = coordinate_columns(track)
            ids = track['id'].dropna()
            additions = pd.DataFrame({
                'id': ids.iloc[0] if len(ids) else np.nan,
                'time': absent.reset_index(drop=True),
                x_col: np.nan,
                y_col: np.nan,
                'error': MISSING,
            })
            track = pd.concat([track, additions], ignore_index=True)
            track = track.sort_values('time', kind='mergesort', na_position='last')
            track = track.reset_index(drop=True)

            logger.info(f"Added {len(absent)} missing observations")

        missing = missing_location_mask(track)
        return fill_locations(track, missing, self.spline)
