"""Utility helpers for iecs."""

from iecs.utils.structured_logging import JSONFormatter, setup_structured_logging

__all__ = ["JSONFormatter", "setup_structured_logging"]
