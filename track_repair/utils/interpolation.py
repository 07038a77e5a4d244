"""
Interpolation utilities for filling null timestamps and positions.

Only values bracketed by non-null anchors are filled; nulls before the first
or after the last anchor are left null.
"""

from typing import Optional
import logging

import numpy as np
import pandas as pd
from scipy import interpolate

from .time_utils import time_to_numeric
from .validation import coordinate_columns

logger = logging.getLogger(__name__)


def interpolate_missing(y: np.ndarray, x: Optional[np.ndarray] = None,
                        spline: bool = False) -> np.ndarray:
    """
    Fill NaN entries of ``y`` from its non-null anchors.

    Args:
        y: Values with NaN where missing
        x: Abscissa of each value (position in the sequence if None)
        spline: Use a cubic spline instead of piecewise-linear interpolation

    Returns:
        Copy of ``y`` with bracketed NaN entries filled
    """
    y = np.array(y, dtype=float)
    positions = np.arange(len(y), dtype=float) if x is None else np.asarray(x, dtype=float)

    anchors = ~np.isnan(y) & ~np.isnan(positions)
    targets = np.isnan(y) & ~np.isnan(positions)

    if not targets.any() or anchors.sum() < 2:
        return y

    # Anchors sharing an abscissa are averaged
    anchor_x, inverse = np.unique(positions[anchors], return_inverse=True)
    anchor_y = np.bincount(inverse, weights=y[anchors]) / np.bincount(inverse)

    if len(anchor_x) < 2:
        return y

    inside = targets & (positions >= anchor_x[0]) & (positions <= anchor_x[-1])

    if spline:
        y[inside] = interpolate.CubicSpline(anchor_x, anchor_y)(positions[inside])
    else:
        y[inside] = np.interp(positions[inside], anchor_x, anchor_y)

    return y


def fill_locations(track: pd.DataFrame, mask: np.ndarray, spline: bool = False) -> pd.DataFrame:
    """
    Replace the coordinates of masked observations by interpolation in time.

    Both coordinates of every masked observation are nulled, then estimated
    against time from all remaining non-null positions. Observations without
    bracketing anchors (or without a timestamp) keep null coordinates.

    Args:
        track: Validated track
        mask: Boolean array of observations to fill
        spline: Use cubic spline interpolation

    Returns:
        Track with the masked coordinates replaced
    """
    track = track.copy()
    mask = np.asarray(mask, dtype=bool)
    if not mask.any():
        return track

    times = time_to_numeric(track['time'])

    for col in coordinate_columns(track):
        values = track[col].to_numpy(dtype=float, copy=True)
        values[mask] = np.nan
        filled = interpolate_missing(values, times, spline)
        track[col] = np.where(mask, filled, track[col].to_numpy(dtype=float))

    unresolved = int(track.loc[mask, coordinate_columns(track)[0]].isna().sum())
    if unresolved:
        logger.warning(f"{unresolved}/{int(mask.sum())} positions could not be interpolated "
                       f"(no bracketing anchors)")

    return track
