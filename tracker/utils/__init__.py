"""
Utilities package for the parcel tracker.

Exports shared helpers for cross-cutting concerns such as logging.
Keep this package lightweight and free of domain-specific logic.
"""

from tracker.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
