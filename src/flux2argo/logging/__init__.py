"""Logging configuration for flux2argo."""

from flux2argo.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
