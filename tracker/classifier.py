"""Decide which shipment state a tracking page currently shows.

Signals are tried in a fixed order and the first one that singles out a
candidate decides:

1. no candidates at all -> unknown
2. a date/time printed to the left of the status (``date``)
3. a strict green paint on or around the status (``color``)
4. a softer green on the status text itself (``soft-color``)
5. an ``active``/``current``/``selected`` class on the status or its
   ancestors (``active-class``)
6. a lone candidate (``sole-candidate``)
7. unknown

``ArbitrationPolicy.COLOR_FIRST`` swaps steps 2 and 3-4.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .candidates import Candidate, extract_candidates
from .color import has_own_color, is_active_by_color, is_green_soft, rank_by_green
from .geometry import has_date_to_left
from .limits import DEFAULT_LIMITS, ClassifierLimits
from .snapshot import Snapshot
from .status import StatusLabel

LOGGER = logging.getLogger(__name__)

ACTIVE_CLASS_RE = re.compile(r"(active|current|selected|is-active|--active)", re.IGNORECASE)


class ArbitrationPolicy(str, Enum):
    """Which signal outranks the other."""

    DATE_FIRST = "date-first"
    COLOR_FIRST = "color-first"

    @classmethod
    def parse(cls, value: Optional[str], default: Optional[ArbitrationPolicy] = None) -> ArbitrationPolicy:
        fallback = default or cls.DATE_FIRST
        if not value:
            return fallback
        candidate = value.strip().lower().replace("_", "-")
        try:
            return cls(candidate)
        except ValueError:
            LOGGER.warning(
                "Unknown policy '%s'; falling back to %s.", value, fallback.value
            )
            return fallback


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Outcome of one classification."""

    label: StatusLabel
    candidate: Optional[Candidate] = None
    signal: str = "none"

    @property
    def token(self) -> str:
        return self.label.token


UNKNOWN_RESULT = ClassificationResult(label=StatusLabel.UNKNOWN)


def _decided(candidate: Candidate, signal: str) -> ClassificationResult:
    return ClassificationResult(label=candidate.label, candidate=candidate, signal=signal)


def _by_date(
    candidates: Sequence[Candidate], limits: ClassifierLimits
) -> Optional[ClassificationResult]:
    for candidate in candidates:
        if has_date_to_left(candidate, limits):
            return _decided(candidate, "date")
    return None


def _by_color(
    candidates: Sequence[Candidate], limits: ClassifierLimits
) -> Optional[ClassificationResult]:
    active = [c for c in candidates if is_active_by_color(c, limits)]
    if active:
        return _decided(rank_by_green(active), "color")

    softly_active = [c for c in candidates if has_own_color(c, is_green_soft)]
    if softly_active:
        return _decided(rank_by_green(softly_active), "soft-color")
    return None


def _by_active_class(
    candidates: Sequence[Candidate], limits: ClassifierLimits
) -> Optional[ClassificationResult]:
    for candidate in candidates:
        try:
            current = candidate.node
            for _ in range(limits.class_levels):
                if current is None:
                    break
                if current.class_name and ACTIVE_CLASS_RE.search(current.class_name):
                    return _decided(candidate, "active-class")
                current = current.parent
        except Exception as exc:
            LOGGER.debug("Class check failed for %r: %s", candidate.matched_keyword, exc)
    return None


def _by_sole_candidate(
    candidates: Sequence[Candidate], limits: ClassifierLimits
) -> Optional[ClassificationResult]:
    if len(candidates) == 1:
        return _decided(candidates[0], "sole-candidate")
    return None


_POLICY_STEPS = {
    ArbitrationPolicy.DATE_FIRST: (_by_date, _by_color, _by_active_class, _by_sole_candidate),
    ArbitrationPolicy.COLOR_FIRST: (_by_color, _by_date, _by_active_class, _by_sole_candidate),
}


def arbitrate(
    candidates: Sequence[Candidate],
    *,
    policy: ArbitrationPolicy = ArbitrationPolicy.DATE_FIRST,
    limits: ClassifierLimits = DEFAULT_LIMITS,
) -> ClassificationResult:
    """Run the fallback chain over already extracted candidates."""
    if not candidates:
        return UNKNOWN_RESULT

    for step in _POLICY_STEPS[policy]:
        result = step(candidates, limits)
        if result is not None:
            return result
    return UNKNOWN_RESULT


def classify(
    snapshot: Snapshot,
    *,
    policy: ArbitrationPolicy = ArbitrationPolicy.DATE_FIRST,
    limits: ClassifierLimits = DEFAULT_LIMITS,
) -> ClassificationResult:
    """Classify a snapshot. Never raises; failures yield an unknown result."""
    try:
        candidates = extract_candidates(snapshot)
        result = arbitrate(candidates, policy=policy, limits=limits)
    except Exception as exc:
        LOGGER.warning("Classification failed: %s", exc)
        return UNKNOWN_RESULT

    LOGGER.debug(
        "Classified %s as %s (signal=%s, policy=%s)",
        snapshot.url or "<snapshot>",
        result.label.value,
        result.signal,
        policy.value,
    )
    return result
