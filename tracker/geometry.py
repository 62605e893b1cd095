"""Date-to-the-left heuristic.

On the CTT timeline the current event is the row that carries its date and
time in a column to the left of the status text.
"""

from __future__ import annotations

import logging
import re
from itertools import islice

from .candidates import Candidate
from .limits import DEFAULT_LIMITS, ClassifierLimits
from .snapshot import Node, Rect

LOGGER = logging.getLogger(__name__)

_MONTHS = (
    "jan|fev|mar|abr|mai|jun|jul|ago|set|out|nov|dez"
    "|feb|apr|may|aug|sep|sept|oct|dec"
)

# "12 Out", "3Mar" or any day followed by a word, and times like "10h30"
DATE_RE = re.compile(
    rf"\b\d{{1,2}}\s*(?:(?:{_MONTHS})\.?|[A-Za-z]{{3,}})\b|\b\d{{1,2}}h\d{{2}}\b",
    re.IGNORECASE,
)


def looks_like_date(text: str) -> bool:
    return bool(text) and DATE_RE.search(text) is not None


def scope_root(node: Node, levels: int) -> Node:
    """Climb at most ``levels`` ancestors from ``node``."""
    current = node
    for _ in range(levels):
        parent = current.parent
        if parent is None:
            break
        current = parent
    return current


def has_date_to_left(
    candidate: Candidate, limits: ClassifierLimits = DEFAULT_LIMITS
) -> bool:
    """Return True if a date marker sits left of the candidate on its row."""
    try:
        return _has_date_to_left(candidate.node, limits)
    except Exception as exc:
        LOGGER.debug("Date check failed for %r: %s", candidate.matched_keyword, exc)
        return False


def _has_date_to_left(node: Node, limits: ClassifierLimits) -> bool:
    rect = node.rect
    if rect is not None and rect.is_empty:
        return False
    if rect is not None and _has_marker_on_row(node, rect, limits):
        return True

    # Flex/grid rows may report rectangles that never line up.
    for sibling in islice(node.previous_siblings(), limits.sibling_scan):
        text = sibling.text
        if text and len(text) < limits.sibling_text_length and looks_like_date(text):
            LOGGER.debug("Date sibling %r precedes %r", text, node.text)
            return True

    return False


def _has_marker_on_row(node: Node, rect: Rect, limits: ClassifierLimits) -> bool:
    scope = scope_root(node, limits.date_scope_levels)
    for other in islice(scope.iter_descendants(), limits.date_scope_nodes):
        text = other.text
        if not text or len(text) > limits.date_text_length:
            continue
        if not looks_like_date(text):
            continue
        other_rect = other.rect
        if other_rect is None:
            continue
        if other_rect.right <= rect.left + limits.date_tolerance_px:
            if other_rect.overlaps_vertically(rect):
                LOGGER.debug("Date %r left of %r", text, node.text)
                return True
    return False
