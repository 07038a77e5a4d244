"""
Repair quality reporting utilities.

Summarizes the defect labels and unresolved values of a repaired track.
"""

import pandas as pd
from typing import Dict, Any, Optional, List
import logging
from dataclasses import dataclass, field
from datetime import datetime
import json

from .error_labels import split_error_labels
from .validation import coordinate_columns

logger = logging.getLogger(__name__)


@dataclass
class RepairReport:
    """Repair metrics container."""

    # Basic metrics
    input_samples: int = 0
    output_samples: int = 0
    added_samples: int = 0

    # Defect labels
    label_counts: Dict[str, int] = field(default_factory=dict)
    flagged_samples: int = 0

    # Unresolved values
    null_times: int = 0
    null_positions: int = 0

    # Passes applied, in order
    passes: List[str] = field(default_factory=list)

    @property
    def flagged_ratio(self) -> float:
        """Fraction of output observations carrying at least one label."""
        return self.flagged_samples / self.output_samples if self.output_samples else 0.0


def count_error_labels(errors: pd.Series) -> Dict[str, int]:
    """
    Count observations per defect label.

    An observation with a combined label counts once for each of its labels.

    Args:
        errors: Error column of a track

    Returns:
        Mapping of label to number of observations carrying it
    """
    counts: Dict[str, int] = {}
    for value in errors:
        for label in split_error_labels(value):
            counts[label] = counts.get(label, 0) + 1
    return counts


def summarize_repairs(before: pd.DataFrame, after: pd.DataFrame,
                      passes: Optional[List[str]] = None) -> RepairReport:
    """
    Build a repair report by comparing a track before and after repair.

    Args:
        before: Track as given to the repair passes
        after: Repaired track
        passes: Names of the passes applied

    Returns:
        RepairReport for the repair
    """
    report = RepairReport(passes=list(passes or []))
    report.input_samples = len(before)
    report.output_samples = len(after)
    report.added_samples = max(0, len(after) - len(before))

    if 'error' in after.columns:
        report.label_counts = count_error_labels(after['error'])
        report.flagged_samples = int(after['error'].map(lambda v: bool(split_error_labels(v))).sum())

    report.null_times = int(after['time'].isna().sum())
    x_col, y_col = coordinate_columns(after)
    report.null_positions = int((after[x_col].isna() | after[y_col].isna()).sum())

    if report.null_times or report.null_positions:
        logger.warning(f"Unresolved after repair: {report.null_times} null timestamps, "
                       f"{report.null_positions} null positions")

    return report


class RepairReporter:
    """Generate repair reports."""

    def generate_report(self, report: RepairReport,
                        output_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Generate a repair report dictionary.

        Args:
            report: RepairReport object
            output_path: Optional path to save the report as JSON

        Returns:
            Dictionary with the complete report
        """
        result = {
            'report_metadata': {
                'generated_at': datetime.now().isoformat(),
                'report_version': '1.0'
            },
            'summary': {
                'input_samples': report.input_samples,
                'output_samples': report.output_samples,
                'added_samples': report.added_samples,
                'flagged_samples': report.flagged_samples,
                'flagged_ratio': report.flagged_ratio
            },
            'labels': dict(report.label_counts),
            'unresolved': {
                'null_times': report.null_times,
                'null_positions': report.null_positions
            },
            'passes': list(report.passes)
        }

        if output_path:
            with open(output_path, 'w') as f:
                json.dump(result, f, indent=2)
            logger.info(f"Repair report saved to {output_path}")

        return result
