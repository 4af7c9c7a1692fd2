"""Logging utilities for signal-plan."""

from signal_plan.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
