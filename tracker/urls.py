"""Tracking URL and tracking code helpers."""

from __future__ import annotations

import os
import re
from typing import Optional
from urllib.parse import quote

DEFAULT_TRACKING_BASE_URL = "https://appserver.ctt.pt/CustomerArea/PublicArea_Detail"

# e.g. RT160260734PT
TRACKING_CODE_RE = re.compile(r"\b([A-Z]{2}\d{7,15}[A-Z]{2})\b")

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def is_url(value: str) -> bool:
    return bool(_URL_RE.match(value or ""))


def build_tracking_url(value: str, base_url: Optional[str] = None) -> str:
    """Return ``value`` if it is already a URL, else the public tracking page for it.

    The base URL falls back to ``CTT_TRACKING_BASE_URL`` and then to the CTT
    public area.
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("Tracking code or URL must not be empty")
    if is_url(value):
        return value

    base = base_url or os.getenv("CTT_TRACKING_BASE_URL") or DEFAULT_TRACKING_BASE_URL
    code = quote(value, safe="")
    return (
        f"{base}?ObjectCodeInput={code}&SearchInput={code}&IsFromPublicArea=true"
    )


def extract_tracking_code(text: str) -> Optional[str]:
    """Find a tracking code in free text or a URL."""
    match = TRACKING_CODE_RE.search(text or "")
    return match.group(1) if match else None
