"""
Repair pipeline for trajectory tables.

Applies a caller-chosen sequence of repair passes to a track, or to every
track of a multi-trajectory table.
"""

from typing import List, Optional, Union
import logging

import pandas as pd

from .config import RepairConfig
from .processors import (
    BaseRepairPass, DuplicateTimestampResolver, TimestampSequenceCorrector,
    MissingTimestampInterpolator, LocationSequenceCorrector,
    MissingLocationInterpolator, MissingObservationCompleter
)
from .utils.data_quality import RepairReport, summarize_repairs
from .utils.error_handling import InvalidTrackError, RobustErrorHandler
from .utils.validation import OK_LABEL, is_track, validate_track

PASS_REGISTRY = {
    'time_dup': DuplicateTimestampResolver,
    'time_seq': TimestampSequenceCorrector,
    'time_na': MissingTimestampInterpolator,
    'loc_seq': LocationSequenceCorrector,
    'loc_na': MissingLocationInterpolator,
    'missing': MissingObservationCompleter,
}

DEFAULT_PASSES = ['time_dup', 'time_seq', 'time_na', 'loc_seq', 'loc_na']

PassLike = Union[str, BaseRepairPass]


class TrackRepairPipeline:
    """Applies repair passes to trajectory tables in the order given."""

    def __init__(self, config: Optional[RepairConfig] = None,
                 passes: Optional[List[PassLike]] = None, fail_fast: bool = False):
        """
        Initialize the repair pipeline.

        Args:
            config: Repair configuration. If None, uses default config.
            passes: Pass names (see ``PASS_REGISTRY``) or pass instances, in
                the order they should run. Defaults to ``DEFAULT_PASSES``.
            fail_fast: In ``repair_many``, raise on the first failing track
                instead of returning it unrepaired
        """
        self.config = config or RepairConfig()
        self.logger = self._setup_logging()
        self.fail_fast = fail_fast

        entries = DEFAULT_PASSES if passes is None else passes
        self.passes = [self._build_pass(entry) for entry in entries]

        self.error_handler = RobustErrorHandler()
        self.last_report: Optional[RepairReport] = None

    def _build_pass(self, entry: PassLike) -> BaseRepairPass:
        """Instantiate a pass from its registry name, or accept an instance."""
        if isinstance(entry, BaseRepairPass):
            return entry

        if entry not in PASS_REGISTRY:
            raise ValueError(f"Unknown repair pass '{entry}', "
                             f"expected one of {sorted(PASS_REGISTRY)}")

        return PASS_REGISTRY[entry](self.config.to_dict())

    def repair(self, track: pd.DataFrame) -> pd.DataFrame:
        """
        Repair a single track.

        Args:
            track: Trajectory table of a single id

        Returns:
            Repaired trajectory table
        """
        original = validate_track(track)
        repaired = original

        self.logger.info(f"Repairing track with {len(original)} observations "
                         f"through {len(self.passes)} passes")

        for repair_pass in self.passes:
            with self.error_handler.handle_processing_errors(repair_pass.name, critical=True):
                repaired = repair_pass.process(repaired)

        self.last_report = summarize_repairs(original, repaired,
                                             [p.name for p in self.passes])
        self.logger.info(f"Repair finished: {self.last_report.flagged_samples} observations "
                         f"flagged, {self.last_report.added_samples} added")
        return repaired

    def repair_many(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Repair every trajectory of a multi-id table independently.

        Args:
            table: Trajectory table that may hold several ids

        Returns:
            Concatenation of the repaired tracks, in order of first appearance
        """
        if not is_track(table):
            raise InvalidTrackError(
                "table should be a trajectory table with id, time and x/y or lon/lat columns"
            )

        results = []
        for track_id, group in table.groupby('id', sort=False, dropna=False):
            repaired = None
            with self.error_handler.handle_processing_errors(f"track {track_id}",
                                                             critical=self.fail_fast):
                repaired = self.repair(group)

            if repaired is None:
                self.logger.warning(f"Track {track_id} returned unrepaired")
                repaired = group.reset_index(drop=True)
                if 'error' not in repaired.columns:
                    repaired['error'] = OK_LABEL

            results.append(repaired)

        self.logger.info(f"Repaired {len(results)} tracks")
        return pd.concat(results, ignore_index=True)

    def _setup_logging(self) -> logging.Logger:
        """Set up logging configuration."""
        logger = logging.getLogger('track_repair')

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        logger.setLevel(logging.INFO if self.config.verbose else logging.WARNING)

        return logger
