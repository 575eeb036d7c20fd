"""Structured logging utilities."""

from .audit import JsonlAuditLogger, PipelineEvent, new_event, utc_timestamp
from .console import configure_logging

__all__ = [
    "JsonlAuditLogger",
    "PipelineEvent",
    "configure_logging",
    "new_event",
    "utc_timestamp",
]
