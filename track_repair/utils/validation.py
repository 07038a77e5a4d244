"""
Track validation utilities.

A track is a DataFrame holding one trajectory: an ``id`` column, a ``time``
column, one coordinate pair (``x``/``y`` or ``lon``/``lat``) and an optional
``error`` column of defect labels.
"""

import pandas as pd
from typing import Tuple

from .error_handling import InvalidTrackError, MultipleTrackIdsError

PLANAR_COLUMNS = ('x', 'y')
GEO_COLUMNS = ('lon', 'lat')

OK_LABEL = 'OK'


def is_geo(track: pd.DataFrame) -> bool:
    """Return True when the track uses longitude/latitude coordinates."""
    return all(col in track.columns for col in GEO_COLUMNS)


def is_track(track) -> bool:
    """
    Check whether an object looks like a trajectory table.

    Args:
        track: Object to check

    Returns:
        True if it is a non-empty DataFrame with id, time and exactly one
        coordinate convention
    """
    if not isinstance(track, pd.DataFrame) or track.empty:
        return False

    if 'id' not in track.columns or 'time' not in track.columns:
        return False

    times = track['time']
    if not (pd.api.types.is_datetime64_any_dtype(times) or pd.api.types.is_numeric_dtype(times)):
        return False

    planar = all(col in track.columns for col in PLANAR_COLUMNS)
    geo = is_geo(track)

    return planar != geo


def coordinate_columns(track: pd.DataFrame) -> Tuple[str, str]:
    """Return the (horizontal, vertical) coordinate column names of a track."""
    return GEO_COLUMNS if is_geo(track) else PLANAR_COLUMNS


def validate_track(track: pd.DataFrame) -> pd.DataFrame:
    """
    Validate a track and return a working copy with an ``error`` column.

    Args:
        track: Trajectory table

    Returns:
        Copy of the track with a fresh RangeIndex where missing error
        labels are set to OK

    Raises:
        InvalidTrackError: If the input is not a trajectory table
        MultipleTrackIdsError: If the table holds more than one trajectory id
    """
    if not is_track(track):
        raise InvalidTrackError(
            "track should be a trajectory table with id, time and x/y or lon/lat columns"
        )

    ids = track['id'].dropna().unique()
    if len(ids) > 1:
        raise MultipleTrackIdsError(
            f"track should have the same id for all observations, found {len(ids)}"
        )

    track = track.reset_index(drop=True)

    # Integer times cannot hold nulls
    if pd.api.types.is_integer_dtype(track['time']):
        track['time'] = track['time'].astype(float)

    for col in coordinate_columns(track):
        track[col] = pd.to_numeric(track[col], errors='coerce').astype(float)

    if 'error' not in track.columns:
        track['error'] = OK_LABEL
    else:
        track['error'] = track['error'].fillna(OK_LABEL).astype(str)

    return track
