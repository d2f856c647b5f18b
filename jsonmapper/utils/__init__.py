"""Shared helpers for configuration and text handling."""
