"""Time conversion and sampling interval utilities."""

from collections import Counter
from typing import Optional, Union
import logging

import numpy as np
import pandas as pd

from .error_handling import InsufficientDataError

logger = logging.getLogger(__name__)

Step = Union[pd.Timedelta, float, int]

# Numeric times closer than this fraction of the step share a sampling slot
STEP_MATCH_TOLERANCE = 1e-6

# Numeric differences closer than this fraction of the time magnitude are equal
DIFF_RESOLUTION = 1e-12


def is_datetime_time(times: pd.Series) -> bool:
    """Return True when the time column holds datetimes rather than numbers."""
    return pd.api.types.is_datetime64_any_dtype(times)


def _epoch(times: pd.Series) -> pd.Timestamp:
    return pd.Timestamp('1970-01-01', tz=times.dt.tz)


def time_to_numeric(times: pd.Series) -> np.ndarray:
    """
    Convert a time column to floats.

    Datetimes become seconds since the Unix epoch, numeric times are cast to
    float. Null times become NaN.

    Args:
        times: Time column of a track

    Returns:
        Float array aligned with the input
    """
    if is_datetime_time(times):
        seconds = (times - _epoch(times)) / pd.Timedelta(seconds=1)
        return seconds.to_numpy(dtype=float)

    return pd.to_numeric(times, errors='coerce').to_numpy(dtype=float)


def numeric_to_time(values: np.ndarray, like: pd.Series) -> pd.Series:
    """
    Convert floats produced by :func:`time_to_numeric` back to track times.

    Args:
        values: Float array (NaN for null)
        like: Original time column, used for dtype, timezone and index

    Returns:
        Series of times with the same index as ``like``
    """
    if is_datetime_time(like):
        offsets = pd.to_timedelta(pd.Series(values, index=like.index), unit='s').dt.round('us')
        return (_epoch(like) + offsets).astype(like.dtype)

    return pd.Series(values, index=like.index, dtype=float)


def coerce_step(step: Step, times: pd.Series) -> Step:
    """
    Express a user supplied step in the unit of the time column.

    Plain numbers given for a datetime track are read as seconds.

    Args:
        step: Requested step
        times: Time column of the track

    Returns:
        Timedelta for datetime tracks, float for numeric tracks
    """
    if is_datetime_time(times):
        if isinstance(step, (int, float, np.number)):
            return pd.Timedelta(seconds=float(step))
        return pd.Timedelta(step)

    if isinstance(step, (pd.Timedelta, np.timedelta64)):
        raise ValueError("A duration step requires a datetime time column")
    return float(step)


def is_positive_step(step: Step) -> bool:
    """Return True for a strictly positive step of either unit."""
    if isinstance(step, (pd.Timedelta, np.timedelta64)):
        return pd.Timedelta(step) > pd.Timedelta(0)
    return step > 0


def slot_key(value, step: Step):
    """
    Hashable key identifying the sampling slot of a time.

    Datetimes are their own key. Numeric times are rounded to a grid of
    ``STEP_MATCH_TOLERANCE * step`` so that float rounding (``0.1 + 0.2``
    against ``0.3``) does not separate equal times.

    Args:
        value: Non-null time
        step: Sampling step of the track

    Returns:
        Key that compares equal for times in the same slot
    """
    if isinstance(value, (pd.Timestamp, np.datetime64)) or not is_positive_step(step):
        return value
    return int(round(float(value) / (float(step) * STEP_MATCH_TOLERANCE)))


def modal_step(times: Optional[pd.Series]) -> Step:
    """
    Infer the dominant sampling interval of a track.

    Differences between successive non-null timestamps are counted by exact
    value (numeric differences up to float rounding) and the most frequent
    one is returned. When several differences are equally frequent the one
    encountered first along the track wins.

    Args:
        times: Time column of a track

    Returns:
        Timedelta for datetime tracks, number for numeric tracks

    Raises:
        InsufficientDataError: If fewer than two non-null timestamps exist
    """
    if times is None:
        raise InsufficientDataError("Cannot infer a time step without timestamps")

    valid = times.dropna()
    if len(valid) < 2:
        raise InsufficientDataError(
            f"Cannot infer a time step from {len(valid)} non-null timestamp(s)"
        )

    diffs = valid.diff().dropna()
    if is_datetime_time(valid):
        keys = diffs.tolist()
    else:
        resolution = DIFF_RESOLUTION * max(1.0, float(valid.abs().max()))
        keys = np.round(diffs.to_numpy(dtype=float) / resolution).tolist()

    key, count = Counter(keys).most_common(1)[0]
    step = diffs.iloc[keys.index(key)]

    logger.debug(f"Modal step {step} observed {count}/{len(diffs)} times")
    return step
