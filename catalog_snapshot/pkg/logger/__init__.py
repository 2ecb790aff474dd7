"""
Logger package.
"""
from .logger import (
    setup_logging,
    get_logger,
    set_run_id,
    get_run_id,
    StructuredLogger,
    StructuredFormatter,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_run_id",
    "get_run_id",
    "StructuredLogger",
    "StructuredFormatter",
]
