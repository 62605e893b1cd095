"""Data structures representing a captured tracking page.

A snapshot is the read-only tree the classifier works on: every element's
text, bounding rectangle and resolved colors, captured once from a rendered
page (see ``tracker.capture``) or loaded back from a JSON dump.
"""

from __future__ import annotations

import logging
import math
import re
import unicodedata
import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

LOGGER = logging.getLogger(__name__)

_RGB_RE = re.compile(r"rgba?\s*\(\s*(\d+)[^\d]+(\d+)[^\d]+(\d+)", re.IGNORECASE)

_RECT_FIELDS = ("top", "left", "right", "bottom", "width", "height")

# JSON key -> Style attribute
_STYLE_KEYS = {
    "color": "color",
    "backgroundColor": "background_color",
    "fill": "fill",
    "stroke": "stroke",
}


class SnapshotError(ValueError):
    """Raised when a snapshot document cannot be read at all."""


class RGB(NamedTuple):
    r: int
    g: int
    b: int


def parse_rgb(value: Any) -> Optional[RGB]:
    """Parse ``rgb(...)``/``rgba(...)`` strings; anything else yields None."""
    if isinstance(value, RGB):
        return value
    if not isinstance(value, str) or not value:
        return None
    match = _RGB_RE.search(value)
    if not match:
        return None
    return RGB(*(int(part) for part in match.groups()))


def format_rgb(value: Optional[RGB]) -> Optional[str]:
    if value is None:
        return None
    return f"rgb({value.r}, {value.g}, {value.b})"


@dataclass(frozen=True, slots=True)
class Rect:
    """Bounding rectangle in CSS pixels."""

    top: float
    left: float
    right: float
    bottom: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in _RECT_FIELDS:
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"Rect.{name} must be finite")

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0

    def overlaps_vertically(self, other: Rect) -> bool:
        return not (self.bottom < other.top or self.top > other.bottom)

    @classmethod
    def from_box(cls, left: float, top: float, width: float, height: float) -> Rect:
        return cls(
            top=top,
            left=left,
            right=left + width,
            bottom=top + height,
            width=width,
            height=height,
        )


@dataclass(frozen=True, slots=True)
class Style:
    """Resolved colors of an element."""

    color: Optional[RGB] = None
    background_color: Optional[RGB] = None
    fill: Optional[RGB] = None
    stroke: Optional[RGB] = None


@dataclass(eq=False)
class Node:
    """One element of the captured page.

    ``text`` is the element's whole trimmed text content, descendants
    included. Children are owned by their parent; the parent link is weak.
    """

    tag: str = ""
    text: str = ""
    rect: Optional[Rect] = None
    style: Style = field(default_factory=Style)
    class_name: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List[Node] = field(default_factory=list)
    _parent: Optional[weakref.ReferenceType] = field(
        default=None, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self.text = unicodedata.normalize("NFC", (self.text or "").strip())
        for child in self.children:
            child._parent = weakref.ref(self)

    @property
    def parent(self) -> Optional[Node]:
        return self._parent() if self._parent is not None else None

    def iter_descendants(self) -> Iterator[Node]:
        """Yield descendants in document order, excluding this node."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def previous_siblings(self) -> Iterator[Node]:
        """Yield preceding siblings, nearest first."""
        parent = self.parent
        if parent is None:
            return
        siblings = parent.children
        for index, sibling in enumerate(siblings):
            if sibling is self:
                yield from reversed(siblings[:index])
                return


@dataclass(frozen=True)
class Snapshot:
    """Immutable captured page; ``root`` is None for an empty page."""

    root: Optional[Node] = None
    url: str = ""

    def iter_nodes(self) -> Iterator[Node]:
        if self.root is None:
            return
        yield self.root
        yield from self.root.iter_descendants()

    def node_count(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "root": _node_to_dict(self.root) if self.root is not None else None,
        }


def snapshot_from_dict(data: Any) -> Snapshot:
    """Build a Snapshot from the JSON shape produced by the capture script.

    Raises:
        SnapshotError: If ``data`` is not a mapping.
    """
    if not isinstance(data, dict):
        raise SnapshotError(
            f"Snapshot document must be an object, got {type(data).__name__}"
        )
    raw_root = data.get("root")
    root = node_from_dict(raw_root) if isinstance(raw_root, dict) else None
    return Snapshot(root=root, url=str(data.get("url") or ""))


def node_from_dict(data: Dict[str, Any]) -> Node:
    raw_children = data.get("children") or []
    children = [
        node_from_dict(child)
        for child in raw_children
        if isinstance(child, dict)
    ]
    text = data.get("text")
    class_name = data.get("className")
    return Node(
        tag=str(data.get("tag") or "").lower(),
        text=text if isinstance(text, str) else "",
        rect=_rect_from_dict(data.get("rect")),
        style=_style_from_dict(data.get("style")),
        class_name=class_name if isinstance(class_name, str) else "",
        attributes=_attributes_from_dict(data.get("attrs")),
        children=children,
    )


def _rect_from_dict(data: Any) -> Optional[Rect]:
    if not isinstance(data, dict):
        return None
    try:
        values = {name: float(data[name]) for name in _RECT_FIELDS}
        return Rect(**values)
    except (KeyError, TypeError, ValueError) as exc:
        LOGGER.debug("Dropping unreadable rect %r: %s", data, exc)
        return None


def _style_from_dict(data: Any) -> Style:
    if not isinstance(data, dict):
        return Style()
    return Style(**{attr: parse_rgb(data.get(key)) for key, attr in _STYLE_KEYS.items()})


def _attributes_from_dict(data: Any) -> Dict[str, str]:
    if not isinstance(data, dict):
        return {}
    return {
        str(key): value
        for key, value in data.items()
        if isinstance(value, str) and value
    }


def _node_to_dict(node: Node) -> Dict[str, Any]:
    rect = node.rect
    return {
        "tag": node.tag,
        "text": node.text,
        "rect": (
            {name: getattr(rect, name) for name in _RECT_FIELDS}
            if rect is not None
            else None
        ),
        "style": {
            key: format_rgb(getattr(node.style, attr))
            for key, attr in _STYLE_KEYS.items()
        },
        "className": node.class_name,
        "attrs": dict(node.attributes),
        "children": [_node_to_dict(child) for child in node.children],
    }
