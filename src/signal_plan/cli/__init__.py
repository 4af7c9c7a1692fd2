"""Command line utilities for signal-plan."""

from signal_plan.cli.app import main, run_cli

__all__ = ["main", "run_cli"]
