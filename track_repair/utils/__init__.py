"""
Shared utilities for trajectory repair.

This module contains:
- Track validation and error labels
- Time conversion and modal step inference
- Robust and local regression statistics
- Interpolation helpers
- Repair reporting
"""

from .error_handling import (
    TrackRepairError, InvalidTrackError, MultipleTrackIdsError,
    InsufficientDataError, RobustErrorHandler
)
from .error_labels import ErrorTagger, merge_error_labels
from .time_utils import modal_step
from .validation import is_track, is_geo, validate_track
from .data_quality import RepairReport, RepairReporter, summarize_repairs

__all__ = [
    "TrackRepairError", "InvalidTrackError", "MultipleTrackIdsError",
    "InsufficientDataError", "RobustErrorHandler",
    "ErrorTagger", "merge_error_labels", "modal_step",
    "is_track", "is_geo", "validate_track",
    "RepairReport", "RepairReporter", "summarize_repairs"
]
