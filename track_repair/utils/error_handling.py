"""
Error handling utilities for trajectory repair.

Provides the exception hierarchy for precondition failures and a handler that
records errors raised while repairing batches of tracks.
"""

from typing import Dict, Any, List
from contextlib import contextmanager
import logging
import traceback

logger = logging.getLogger(__name__)


class TrackRepairError(Exception):
    """Base exception for trajectory repair errors."""
    pass


class InvalidTrackError(TrackRepairError):
    """Exception raised when the input is not a valid trajectory table."""
    pass


class MultipleTrackIdsError(TrackRepairError):
    """Exception raised when a single-trajectory table holds several ids."""
    pass


class InsufficientDataError(TrackRepairError):
    """Exception raised when there are too few observations for a statistic."""
    pass


class RobustErrorHandler:
    """Records errors raised while repairing tracks."""

    def __init__(self):
        """Initialize error handler with an empty error log."""
        self.error_log: List[Dict[str, Any]] = []

    @contextmanager
    def handle_processing_errors(self, operation_name: str, critical: bool = False):
        """
        Context manager for handling repair errors.

        Args:
            operation_name: Name of the operation being performed
            critical: Whether the operation is critical (raises on failure)
        """
        try:
            logger.debug(f"Starting operation: {operation_name}")
            yield
            logger.debug(f"Completed operation: {operation_name}")
        except Exception as e:
            error_info = {
                'operation': operation_name,
                'error_type': type(e).__name__,
                'error_message': str(e),
                'traceback': traceback.format_exc()
            }
            self.error_log.append(error_info)

            logger.error(f"Error in {operation_name}: {e}")
            logger.debug(f"Full traceback: {traceback.format_exc()}")

            if critical:
                if isinstance(e, TrackRepairError):
                    raise
                raise TrackRepairError(f"Critical error in {operation_name}: {e}") from e
            else:
                logger.warning(f"Non-critical error in {operation_name}, continuing...")

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get a summary of all errors encountered.

        Returns:
            Dictionary with error statistics and details
        """
        if not self.error_log:
            return {'total_errors': 0, 'error_types': {}, 'operations': {}}

        error_types = {}
        operations = {}

        for error in self.error_log:
            error_type = error['error_type']
            operation = error['operation']

            error_types[error_type] = error_types.get(error_type, 0) + 1
            operations[operation] = operations.get(operation, 0) + 1

        return {
            'total_errors': len(self.error_log),
            'error_types': error_types,
            'operations': operations,
            'recent_errors': self.error_log[-5:]
        }
