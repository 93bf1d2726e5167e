"""Scheduling of periodic scrape cycles."""

from .apsched_adapter import SCRAPE_JOB_ID, APSchedulerAdapter

__all__ = ["APSchedulerAdapter", "SCRAPE_JOB_ID"]
