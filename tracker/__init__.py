"""Shipment status detection for CTT public tracking pages.

The tracking page carries no machine-readable status, so the current state
is recovered from what a person would look at: which status line has its
date printed next to it, which one is painted green, which one is marked
active. This module provides:

- Classification of an already captured page (``classify_snapshot``)
- Single tracking checks, from code or URL to label (``check_status``)
- Batch checks over many codes (``check_statuses``)

Example usage:

    from tracker import check_status, check_statuses

    check = check_status("RT160347308PT")
    print(check.token)  # "Entregue", "Em trânsito", "Em espera" or "unknown"

    for check in check_statuses(["RT160347308PT", "RT160329508PT"]):
        print(check.code, check.token, check.flags)

    # Offline, from a saved snapshot
    import json
    from tracker import classify_snapshot, snapshot_from_dict

    with open("page.json", encoding="utf-8") as fh:
        snapshot = snapshot_from_dict(json.load(fh))
    print(classify_snapshot(snapshot).token)
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import List, Optional, Sequence, Union

from crawl4ai import AsyncWebCrawler

from .candidates import Candidate, extract_candidates
from .capture import CaptureError, capture_with_crawler, capture_snapshot_async
from .classifier import ArbitrationPolicy, ClassificationResult, arbitrate, classify
from .config import CaptureOptions, build_browser_config, load_options_from_env
from .document import TrackingCheck
from .limits import ClassifierLimits
from .snapshot import Node, Rect, RGB, Snapshot, SnapshotError, Style, snapshot_from_dict
from .status import KEYWORDS, StatusLabel, label_for_keyword, progress_flags
from .urls import build_tracking_url, extract_tracking_code

LOGGER = logging.getLogger(__name__)

__all__ = [
    # Snapshot model
    "Node",
    "Rect",
    "RGB",
    "Snapshot",
    "SnapshotError",
    "Style",
    "snapshot_from_dict",
    # Classification
    "ArbitrationPolicy",
    "Candidate",
    "ClassificationResult",
    "ClassifierLimits",
    "KEYWORDS",
    "StatusLabel",
    "arbitrate",
    "classify",
    "classify_snapshot",
    "extract_candidates",
    "label_for_keyword",
    "progress_flags",
    # Capture
    "CaptureError",
    "CaptureOptions",
    "capture_snapshot_async",
    # Tracking checks
    "TrackingCheck",
    "build_tracking_url",
    "extract_tracking_code",
    "check_status",
    "check_status_async",
    "check_statuses",
    "check_statuses_async",
]

PolicyInput = Union[ArbitrationPolicy, str, None]


def resolve_policy(policy: PolicyInput = None) -> ArbitrationPolicy:
    """Explicit policy first, then ``CTT_STATUS_POLICY``, then date-first."""
    if isinstance(policy, ArbitrationPolicy):
        return policy
    return ArbitrationPolicy.parse(policy or os.getenv("CTT_STATUS_POLICY"))


def classify_snapshot(
    snapshot: Snapshot,
    *,
    policy: PolicyInput = None,
    limits: Optional[ClassifierLimits] = None,
) -> ClassificationResult:
    """Classify a captured page."""
    kwargs = {"limits": limits} if limits is not None else {}
    return classify(snapshot, policy=resolve_policy(policy), **kwargs)


async def _check_with_crawler(
    crawler: AsyncWebCrawler,
    target: str,
    *,
    options: CaptureOptions,
    policy: ArbitrationPolicy,
) -> TrackingCheck:
    try:
        url = build_tracking_url(target)
    except ValueError as exc:
        return TrackingCheck.failed(target, "", str(exc))

    try:
        snapshot = await capture_with_crawler(crawler, url, options=options)
    except Exception as exc:
        LOGGER.warning("Capture failed for %s: %s", target, exc)
        return TrackingCheck.failed(target, url, str(exc))

    return TrackingCheck.from_result(target, url, classify(snapshot, policy=policy))


async def check_status_async(
    target: str,
    *,
    options: Optional[CaptureOptions] = None,
    policy: PolicyInput = None,
) -> TrackingCheck:
    """
    Render the tracking page for a code or URL and classify it.

    Args:
        target: A bare tracking code or a full tracking URL.
        options: Optional CaptureOptions; defaults come from the environment.
        policy: Arbitration policy name or enum.

    Returns:
        TrackingCheck. Failures never raise: they come back with
        status="failed", an unknown label and error_message set.
    """
    results = await check_statuses_async([target], options=options, policy=policy)
    return results[0]


def check_status(
    target: str,
    *,
    options: Optional[CaptureOptions] = None,
    policy: PolicyInput = None,
) -> TrackingCheck:
    """Synchronous wrapper for check_status_async."""
    return asyncio.run(check_status_async(target, options=options, policy=policy))


async def check_statuses_async(
    targets: Sequence[str],
    *,
    options: Optional[CaptureOptions] = None,
    policy: PolicyInput = None,
    delay: float = 0.2,
) -> List[TrackingCheck]:
    """
    Check several codes or URLs through one browser session.

    Pages are rendered one after another with ``delay`` seconds between
    them. Results keep the order of ``targets``.
    """
    if not targets:
        return []

    capture_options = options or load_options_from_env()
    resolved_policy = resolve_policy(policy)
    checks: List[TrackingCheck] = []

    try:
        async with AsyncWebCrawler(config=build_browser_config(capture_options)) as crawler:
            for index, target in enumerate(targets):
                if index and delay > 0:
                    await asyncio.sleep(delay)
                check = await _check_with_crawler(
                    crawler,
                    target,
                    options=capture_options,
                    policy=resolved_policy,
                )
                LOGGER.info("%s -> %s", check.code or target, check.token)
                checks.append(check)
    except Exception as exc:
        LOGGER.warning("Browser session failed: %s", exc)
        done = len(checks)
        for target in targets[done:]:
            try:
                url = build_tracking_url(target)
            except ValueError:
                url = ""
            checks.append(TrackingCheck.failed(target, url, str(exc)))

    return checks


def check_statuses(
    targets: Sequence[str],
    *,
    options: Optional[CaptureOptions] = None,
    policy: PolicyInput = None,
    delay: float = 0.2,
) -> List[TrackingCheck]:
    """Synchronous wrapper for check_statuses_async."""
    return asyncio.run(
        check_statuses_async(targets, options=options, policy=policy, delay=delay)
    )
