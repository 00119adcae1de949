"""Attendance portal integration with retry logic."""

from .client import PortalClient, lookback_days
from .retry import portal_retry

__all__ = ["PortalClient", "lookback_days", "portal_retry"]
