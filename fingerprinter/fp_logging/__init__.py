"""
Structured logging for fingerprinter.

JSON logs with timestamp, event_type, run_id and signal context.
Use get_logger() in every module for aggregation-friendly output.
"""

from fingerprinter.fp_logging.logger import get_logger, new_run_id, run_context

__all__ = ["get_logger", "new_run_id", "run_context"]
