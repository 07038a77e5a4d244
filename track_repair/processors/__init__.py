"""
Repair passes for trajectory tables.

This module contains passes for:
- Duplicated timestamp resolution
- Inconsistent timestamp correction
- Null timestamp interpolation
- Inconsistent location correction
- Null location interpolation
- Missing observation completion
"""

from .base import BaseRepairPass
from .duplicate_timestamps import DuplicateTimestampResolver
from .timestamp_sequence import TimestampSequenceCorrector
from .missing_timestamps import MissingTimestampInterpolator
from .location_sequence import LocationSequenceCorrector
from .missing_locations import MissingLocationInterpolator
from .missing_observations import MissingObservationCompleter

__all__ = [
    "BaseRepairPass",
    "DuplicateTimestampResolver",
    "TimestampSequenceCorrector",
    "MissingTimestampInterpolator",
    "LocationSequenceCorrector",
    "MissingLocationInterpolator",
    "MissingObservationCompleter"
]
