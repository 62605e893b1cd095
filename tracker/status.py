"""Canonical shipment states and keyword normalization."""

from __future__ import annotations

import re
import unicodedata
from enum import Enum
from typing import Dict, List, Tuple


class StatusLabel(str, Enum):
    """Closed set of states the classifier can report."""

    DELIVERED = "delivered"
    IN_TRANSIT = "in_transit"
    PENDING = "pending"
    UNKNOWN = "unknown"

    @property
    def token(self) -> str:
        """Token printed by the CLI."""
        return _TOKENS[self]

    @classmethod
    def from_token(cls, token: str) -> StatusLabel:
        """Inverse of ``token``; unrecognised tokens map to UNKNOWN."""
        folded = fold_accents(token or "").strip().lower()
        for label, value in _TOKENS.items():
            if fold_accents(value).lower() == folded:
                return label
        return cls.UNKNOWN


_TOKENS: Dict[StatusLabel, str] = {
    StatusLabel.DELIVERED: "Entregue",
    StatusLabel.IN_TRANSIT: "Em trânsito",
    StatusLabel.PENDING: "Em espera",
    StatusLabel.UNKNOWN: "unknown",
}

# Checked in this order; the first keyword found in a node's text wins.
KEYWORDS: Tuple[str, ...] = (
    "Entregue",
    "Em trânsito",
    "Em transito",
    "Em espera",
)

_KEYWORD_LABELS: Dict[str, StatusLabel] = {
    "entregue": StatusLabel.DELIVERED,
    "em transito": StatusLabel.IN_TRANSIT,
    "em espera": StatusLabel.PENDING,
}

# Stages of the CTT timeline, latest first.
_STAGE_PATTERNS: List[Tuple[int, re.Pattern]] = [
    (5, re.compile(r"entregue")),
    (4, re.compile(r"\bem\s*espera\b")),
    (3, re.compile(r"\bem\s*transito\b")),
    (2, re.compile(r"\baceite\b")),
    (1, re.compile(r"aguarda\s+entrada\s+nos\s+ctt")),
]

PROGRESS_FLAGS: Tuple[str, ...] = (
    "waiting_ctt",
    "accepted",
    "in_transit",
    "waiting",
    "delivered",
)


def fold_accents(text: str) -> str:
    """Strip combining marks, so ``trânsito`` becomes ``transito``."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def label_for_keyword(keyword: str) -> StatusLabel:
    """Map a matched keyword to its canonical label, ignoring accents and case."""
    folded = " ".join(fold_accents(keyword or "").lower().split())
    return _KEYWORD_LABELS.get(folded, StatusLabel.UNKNOWN)


def progress_stage(label_text: str) -> int:
    """Return the timeline stage (0-5) a status text corresponds to."""
    folded = fold_accents(label_text or "").lower()
    for stage, pattern in _STAGE_PATTERNS:
        if pattern.search(folded):
            return stage
    return 0


def progress_flags(label_text: str) -> Dict[str, bool]:
    """Expand a status text into cumulative timeline flags.

    A delivered parcel was also accepted, in transit and so on, so every
    flag up to the reached stage is set.
    """
    stage = progress_stage(label_text)
    return {name: stage >= index for index, name in enumerate(PROGRESS_FLAGS, 1)}
