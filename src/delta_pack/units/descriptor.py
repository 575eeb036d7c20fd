"""Classify build-unit descriptors as modern (self-contained) or legacy."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass
from pathlib import Path

from delta_pack.units.models import BuildKind


@dataclass(slots=True, frozen=True)
class ModernProjectRule:
    """Marker that identifies a self-contained build graph in a descriptor.

    A descriptor is modern when its root element is ``root_element`` and it
    carries ``marker_attribute``, or when any direct child is a
    ``marker_element`` or an ``Import`` naming ``marker_attribute``. Text that
    does not parse as XML falls back to a plain pattern match on the root
    element opening tag.
    """

    root_element: str = "Project"
    marker_attribute: str = "Sdk"
    marker_element: str = "Sdk"

    def fallback_pattern(self) -> re.Pattern[str]:
        return re.compile(
            rf"<\s*{re.escape(self.root_element)}\b[^>]*\b{re.escape(self.marker_attribute)}\s*=",
            re.IGNORECASE,
        )


DEFAULT_RULE = ModernProjectRule()


def classify_descriptor(text: str, rule: ModernProjectRule = DEFAULT_RULE) -> BuildKind:
    """Return MODERN when the descriptor carries the rule's marker, else LEGACY."""
    try:
        root = ElementTree.fromstring(text.lstrip("\ufeff"))
    except ElementTree.ParseError:
        if rule.fallback_pattern().search(text):
            return BuildKind.MODERN
        return BuildKind.LEGACY

    if _local_name(root.tag) != rule.root_element:
        return BuildKind.LEGACY
    if rule.marker_attribute in root.attrib:
        return BuildKind.MODERN
    for child in root:
        name = _local_name(child.tag)
        if name == rule.marker_element:
            return BuildKind.MODERN
        if name == "Import" and rule.marker_attribute in child.attrib:
            return BuildKind.MODERN
    return BuildKind.LEGACY


def classify_descriptor_file(path: Path, rule: ModernProjectRule = DEFAULT_RULE) -> BuildKind:
    """Read a descriptor from disk and classify it."""
    return classify_descriptor(path.read_text(encoding="utf-8-sig", errors="replace"), rule)


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]
