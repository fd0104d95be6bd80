"""Database model exports."""

from .deals import DealRecord, ScrapeLog

__all__ = ["DealRecord", "ScrapeLog"]
