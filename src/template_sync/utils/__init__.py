"""Shared utilities for configuration, logging and console output"""

from template_sync.utils.console import StatusReporter

__all__ = ["StatusReporter"]
