"""Shared helpers for Subnet Scanner."""

from .log_setup import configure_logging

__all__ = ["configure_logging"]
