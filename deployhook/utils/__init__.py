"""Utility functions for deployhook."""

from deployhook.utils.logging import configure_logging, delivery_context, get_logger

__all__ = [
    "configure_logging",
    "delivery_context",
    "get_logger",
]
