"""Find short page elements that mention a known status keyword."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .snapshot import Node, Snapshot
from .status import KEYWORDS, StatusLabel, label_for_keyword

LOGGER = logging.getLogger(__name__)

# Longer texts belong to containers that merely include a status somewhere.
MAX_CANDIDATE_TEXT = 80


@dataclass(frozen=True, slots=True, eq=False)
class Candidate:
    """A node whose text matched a status keyword.

    ``root`` holds the page tree so the node's weak parent links stay
    resolvable after the Snapshot itself is gone.
    """

    node: Node
    matched_keyword: str
    label: StatusLabel
    root: Optional[Node] = field(default=None, repr=False)


def extract_candidates(
    snapshot: Snapshot,
    keywords: Sequence[str] = KEYWORDS,
    *,
    max_text_length: int = MAX_CANDIDATE_TEXT,
) -> List[Candidate]:
    """Return one Candidate per qualifying node, in document order."""
    lowered = [(keyword, keyword.lower()) for keyword in keywords]
    candidates: List[Candidate] = []

    for node in snapshot.iter_nodes():
        try:
            text = node.text
            if not text or len(text) > max_text_length:
                continue
            haystack = text.lower()
            for keyword, needle in lowered:
                if needle in haystack:
                    candidates.append(
                        Candidate(
                            node=node,
                            matched_keyword=keyword,
                            label=label_for_keyword(keyword),
                            root=snapshot.root,
                        )
                    )
                    break
        except Exception as exc:
            LOGGER.debug("Skipping unreadable node %r: %s", node.tag, exc)

    LOGGER.debug("Extracted %d candidate(s)", len(candidates))
    return candidates
