"""
Core utilities and configuration for Agent SNS.

This package provides core functionality including logging configuration,
database setup, wallet security helpers and other shared utilities.
"""

from agent_sns.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
