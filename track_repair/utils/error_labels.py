"""
Per-observation defect labels.

Labels accumulate: an observation flagged by several passes carries all of
their labels, comma-joined in the order they were first attached
(``"timeDUP,locSEQ"``). ``OK`` marks an observation with no recorded defect.
"""

from typing import List
import logging

import pandas as pd

from .validation import OK_LABEL

logger = logging.getLogger(__name__)

LABEL_SEPARATOR = ','

TIME_DUP = 'timeDUP'
TIME_SEQ = 'timeSEQ'
TIME_NA = 'timeNA'
LOC_SEQ = 'locSEQ'
LOC_NA = 'locNA'
MISSING = 'MISSING'


def split_error_labels(label) -> List[str]:
    """Split a (possibly combined) label into its distinct non-OK parts."""
    if label is None or (isinstance(label, float) and pd.isna(label)):
        return []

    parts = []
    for part in str(label).split(LABEL_SEPARATOR):
        part = part.strip()
        if part and part != OK_LABEL and part not in parts:
            parts.append(part)
    return parts


def merge_error_labels(existing, new: str) -> str:
    """
    Merge a newly detected defect label into an existing label.

    Args:
        existing: Current label of the observation (``OK`` or combined labels)
        new: Label to add

    Returns:
        Combined label preserving every distinct label in first-seen order
    """
    parts = split_error_labels(existing)
    for part in split_error_labels(new):
        if part not in parts:
            parts.append(part)

    return LABEL_SEPARATOR.join(parts) if parts else OK_LABEL


class ErrorTagger:
    """Attaches one pass's defect label to observations of a track."""

    def __init__(self, label: str):
        """
        Initialize the tagger.

        Args:
            label: Defect label written by the owning pass
        """
        self.label = label

    def tag(self, errors: pd.Series, mask) -> pd.Series:
        """
        Merge the label into the errors of the masked observations.

        Args:
            errors: Error column of a track
            mask: Boolean mask (or index labels) of observations to tag

        Returns:
            Updated error column
        """
        errors = errors.copy()
        selected = errors.loc[mask]
        if len(selected) == 0:
            return errors

        errors.loc[selected.index] = [merge_error_labels(value, self.label) for value in selected]
        logger.debug(f"Tagged {len(selected)} observations with {self.label}")
        return errors

    def downgrade(self, errors: pd.Series, previous: pd.Series, mask) -> pd.Series:
        """
        Withdraw this pass's label from the masked observations.

        The masked observations get back the label they carried before the
        pass tagged them, so labels written by earlier passes survive.

        Args:
            errors: Error column after tagging
            previous: Error column before tagging
            mask: Boolean mask (or index labels) of observations to restore

        Returns:
            Updated error column
        """
        errors = errors.copy()
        selected = errors.loc[mask]
        if len(selected) == 0:
            return errors

        errors.loc[selected.index] = previous.loc[selected.index]
        logger.debug(f"Withdrew {self.label} from {len(selected)} observations")
        return errors
