"""Green-dominance heuristic.

The CTT timeline paints the current step green: the status text itself, a
badge behind it, or an SVG icon next to it.
"""

from __future__ import annotations

import logging
from itertools import islice
from typing import Callable, Optional, Sequence

from .candidates import Candidate
from .limits import DEFAULT_LIMITS, ClassifierLimits
from .snapshot import RGB, Node, parse_rgb

LOGGER = logging.getLogger(__name__)

GreenPredicate = Callable[[Optional[RGB]], bool]

_BLACK = RGB(0, 0, 0)


def is_green_strict(rgb: Optional[RGB]) -> bool:
    if rgb is None:
        return False
    r, g, b = rgb
    return g > r + 18 and g > b + 18 and g >= 90


def is_green_soft(rgb: Optional[RGB]) -> bool:
    if rgb is None:
        return False
    r, g, b = rgb
    return g > r + 8 and g > b + 8 and g >= 70


def green_score(rgb: Optional[RGB]) -> float:
    """How saturated a green is; missing colors score as black."""
    r, g, b = rgb or _BLACK
    return g - (r + b) / 2


def is_active_by_color(
    candidate: Candidate,
    limits: ClassifierLimits = DEFAULT_LIMITS,
    predicate: GreenPredicate = is_green_strict,
) -> bool:
    """Return True if the candidate or its neighborhood is painted green."""
    try:
        return _is_active_by_color(candidate.node, limits, predicate)
    except Exception as exc:
        LOGGER.debug("Color check failed for %r: %s", candidate.matched_keyword, exc)
        return False


def _is_active_by_color(
    node: Node, limits: ClassifierLimits, predicate: GreenPredicate
) -> bool:
    if predicate(node.style.color):
        return True

    current: Optional[Node] = node
    for _ in range(limits.color_levels):
        if current is None:
            break
        style = current.style
        if predicate(style.background_color) or predicate(style.color):
            return True
        for descendant in islice(current.iter_descendants(), limits.color_descendants):
            if _has_green_paint(descendant, predicate):
                return True
        current = current.parent

    return False


def _has_green_paint(node: Node, predicate: GreenPredicate) -> bool:
    style = node.style
    if predicate(style.background_color) or predicate(style.color):
        return True
    fill = style.fill or parse_rgb(node.attributes.get("fill"))
    stroke = style.stroke or parse_rgb(node.attributes.get("stroke"))
    return predicate(fill) or predicate(stroke)


def has_own_color(candidate: Candidate, predicate: GreenPredicate) -> bool:
    """Check only the candidate's own text color."""
    try:
        return predicate(candidate.node.style.color)
    except Exception as exc:
        LOGGER.debug("Color check failed for %r: %s", candidate.matched_keyword, exc)
        return False


def rank_by_green(candidates: Sequence[Candidate]) -> Optional[Candidate]:
    """Pick the candidate whose own text color is the most saturated green.

    Ties go to the earliest candidate.
    """
    if not candidates:
        return None
    return max(candidates, key=lambda c: green_score(c.node.style.color))
