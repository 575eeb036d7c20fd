"""Build-unit discovery and descriptor classification."""

from .descriptor import (
    DEFAULT_RULE,
    ModernProjectRule,
    classify_descriptor,
    classify_descriptor_file,
)
from .models import BuildKind, BuildUnit
from .resolver import find_descriptor, resolve_units

__all__ = [
    "BuildKind",
    "BuildUnit",
    "DEFAULT_RULE",
    "ModernProjectRule",
    "classify_descriptor",
    "classify_descriptor_file",
    "find_descriptor",
    "resolve_units",
]
