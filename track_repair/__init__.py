"""
Track Repair - detection and correction of defects in movement tracks.

This package repairs time-stamped trajectories (GPS or vision tracking fixes)
with duplicated, inconsistent or missing timestamps, outlying or missing
positions, and samples missing from a regular sampling grid.
"""

__version__ = "1.0.0"
__author__ = "Track Repair Team"

from .config import RepairConfig
from .pipeline import TrackRepairPipeline
from .processors import (
    DuplicateTimestampResolver, TimestampSequenceCorrector,
    MissingTimestampInterpolator, LocationSequenceCorrector,
    MissingLocationInterpolator, MissingObservationCompleter
)

__all__ = [
    "RepairConfig", "TrackRepairPipeline",
    "DuplicateTimestampResolver", "TimestampSequenceCorrector",
    "MissingTimestampInterpolator", "LocationSequenceCorrector",
    "MissingLocationInterpolator", "MissingObservationCompleter"
]
