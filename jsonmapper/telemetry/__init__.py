"""Convenience exports for jsonmapper telemetry utilities."""

from . import logger

__all__ = ["logger"]
