"""Error taxonomy shared across the delta packaging pipeline."""

from __future__ import annotations


class DeltaPackError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, reason: str, hint: str = "") -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


class InvalidInputError(DeltaPackError):
    """Raised when repository path, revision count, or config is invalid."""


class DiffUnavailableError(DeltaPackError):
    """Raised when the revision comparison cannot be produced."""


class ToolMissingError(DeltaPackError):
    """Raised when a required external command is absent on the host."""

    def __init__(self, tool: str, reason: str, hint: str = "") -> None:
        super().__init__(reason, hint)
        self.tool = tool


class BuildFailedError(DeltaPackError):
    """Describes one build unit that did not produce its artifact."""

    def __init__(self, unit_name: str, reason: str, hint: str = "") -> None:
        super().__init__(reason, hint)
        self.unit_name = unit_name


class CopyFailedError(DeltaPackError):
    """Raised when a destination directory or file cannot be written."""

    def __init__(self, path: str, reason: str, hint: str = "") -> None:
        super().__init__(reason, hint)
        self.path = path
