"""Traversal caps used by the matchers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ClassifierLimits:
    """Upper bounds on how much of the tree each check may visit.

    Attributes:
        date_scope_levels: Ancestor levels climbed to find the row that
            may hold a date marker.
        date_scope_nodes: Descendants of that ancestor inspected.
        date_text_length: Longest text still considered a date marker.
        date_tolerance_px: Overlap allowed between a marker's right edge
            and the candidate's left edge.
        sibling_scan: Preceding siblings checked for date-like text.
        sibling_text_length: Sibling texts must be shorter than this.
        color_levels: Levels (the node itself included) walked upwards by
            the color check.
        color_descendants: Descendants inspected per level for green icons.
        class_levels: Levels (the node itself included) searched for an
            active class name.
    """

    date_scope_levels: int = 4
    date_scope_nodes: int = 800
    date_text_length: int = 20
    date_tolerance_px: float = 6.0
    sibling_scan: int = 6
    sibling_text_length: int = 30
    color_levels: int = 5
    color_descendants: int = 20
    class_levels: int = 6


DEFAULT_LIMITS = ClassifierLimits()
