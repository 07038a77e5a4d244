"""
Base classes for repair passes.

Defines the common interface of the detection/correction passes applied to
a trajectory table.
"""

from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, Any, Optional, List
import logging

import numpy as np
import pandas as pd

from ..utils.error_labels import ErrorTagger
from ..utils.time_utils import (
    Step, coerce_step, is_datetime_time, is_positive_step, modal_step, slot_key
)
from ..utils.validation import is_track, validate_track

logger = logging.getLogger(__name__)


class BaseRepairPass(ABC):
    """Abstract base class for repair passes."""

    #: Defect label written by the pass
    label: str = ''

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the pass with optional configuration.

        Args:
            config: Optional configuration dictionary (see ``RepairConfig``)
        """
        self.config = config or {}
        self.tagger = ErrorTagger(self.label)

    @property
    def name(self) -> str:
        """Short name of the pass used in logs and reports."""
        return type(self).__name__

    @property
    def use_spline(self) -> bool:
        """Whether interpolation should use cubic splines."""
        return bool(self.config.get('use_spline_interpolation', False))

    @abstractmethod
    def process(self, track: pd.DataFrame) -> pd.DataFrame:
        """
        Repair a track and return the repaired copy.

        Args:
            track: Trajectory table of a single id

        Returns:
            Repaired trajectory table
        """
        pass

    def validate_input(self, track: pd.DataFrame) -> bool:
        """
        Check that the input looks like a trajectory table.

        Args:
            track: Input DataFrame

        Returns:
            True if the input is a trajectory table, False otherwise
        """
        return is_track(track)

    def prepare(self, track: pd.DataFrame) -> pd.DataFrame:
        """Validate the track and return a working copy with error labels."""
        return validate_track(track)

    def __call__(self, track: pd.DataFrame) -> pd.DataFrame:
        return self.process(track)


class BaseTimestampCorrector(BaseRepairPass):
    """Base class for passes that move a bad timestamp one step after its predecessor."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, step: Optional[Step] = None):
        """
        Initialize the corrector.

        Args:
            config: Optional configuration dictionary
            step: Expected interval between observations (modal step if None)
        """
        super().__init__(config)
        self.step = step

    def resolve_step(self, times: pd.Series) -> Step:
        """Return the configured step in track units, or infer the modal step."""
        if self.step is not None:
            return coerce_step(self.step, times)
        return modal_step(times)

    def correct_timestamps(self, track: pd.DataFrame, positions: List[int]) -> pd.DataFrame:
        """
        Tag and correct the timestamps at the given row positions.

        Each flagged timestamp becomes its predecessor's time plus one step,
        unless that time is already used by another observation (or the
        predecessor has no time). Such observations get a null timestamp and
        lose the label this pass just attached. Numeric times within float
        rounding of each other count as the same time.

        Args:
            track: Validated track
            positions: Row positions of flagged timestamps, in track order

        Returns:
            Track with corrected timestamps and updated error labels
        """
        if not len(positions):
            return track

        step = self.resolve_step(track['time'])
        if not is_positive_step(step):
            logger.warning(f"{self.name}: non-positive step {step}, timestamps cannot be resolved")

        null_time = pd.NaT if is_datetime_time(track['time']) else np.nan
        previous_errors = track['error'].copy()
        track['error'] = self.tagger.tag(track['error'], list(positions))

        counts = Counter(slot_key(value, step) for value in track['time'].dropna())
        unresolved = []

        for position in positions:
            current = track.at[position, 'time']
            previous = track.at[position - 1, 'time'] if position > 0 else None

            candidate = None
            if previous is not None and not pd.isna(previous):
                candidate = previous + step
                used_elsewhere = counts.get(slot_key(candidate, step), 0)
                if not pd.isna(current) and slot_key(current, step) == slot_key(candidate, step):
                    used_elsewhere -= 1
                if used_elsewhere > 0:
                    candidate = None

            if not pd.isna(current):
                counts[slot_key(current, step)] -= 1

            if candidate is None:
                track.at[position, 'time'] = null_time
                unresolved.append(position)
            else:
                track.at[position, 'time'] = candidate
                counts[slot_key(candidate, step)] += 1

        track['error'] = self.tagger.downgrade(track['error'], previous_errors, unresolved)

        logger.info(f"{self.name}: corrected {len(positions) - len(unresolved)}/{len(positions)} "
                    f"timestamps, {len(unresolved)} set to null")
        return track
