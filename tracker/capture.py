"""Render a tracking page and capture it as a Snapshot.

The page is loaded through Crawl4AI; once it has settled, a script running in
the page walks ``document.body`` and records each element's text, bounding
rectangle and computed colors. The result is turned into a
:class:`~tracker.snapshot.Snapshot` for the classifier.

Example usage:

    from tracker.capture import capture_snapshot_async

    snapshot = await capture_snapshot_async(
        "https://appserver.ctt.pt/CustomerArea/PublicArea_Detail?..."
    )
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from crawl4ai import AsyncWebCrawler
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .config import CaptureOptions, build_browser_config, build_run_config
from .snapshot import Snapshot, SnapshotError, snapshot_from_dict

LOGGER = logging.getLogger(__name__)

# Text is cut here; anything this long is far past the candidate ceiling.
MAX_CAPTURED_TEXT = 256

SNAPSHOT_JS = """
(maxText) => {
  const SKIP = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE']);
  function capture(el) {
    const node = { tag: el.tagName.toLowerCase(), text: '', rect: null,
                   style: {}, className: '', attrs: {}, children: [] };
    try {
      node.text = (el.textContent || '').trim().slice(0, maxText);
    } catch (e) {}
    try {
      const r = el.getBoundingClientRect();
      node.rect = { top: r.top, left: r.left, right: r.right,
                    bottom: r.bottom, width: r.width, height: r.height };
    } catch (e) {}
    try {
      const cs = window.getComputedStyle(el);
      node.style = { color: cs.color, backgroundColor: cs.backgroundColor,
                     fill: cs.fill, stroke: cs.stroke };
    } catch (e) {}
    try {
      node.className = el.getAttribute('class') || '';
      for (const name of ['fill', 'stroke']) {
        const value = el.getAttribute(name);
        if (value) node.attrs[name] = value;
      }
    } catch (e) {}
    for (const child of el.children) {
      if (SKIP.has(child.tagName)) continue;
      try { node.children.push(capture(child)); } catch (e) {}
    }
    return node;
  }
  return { url: window.location.href,
           root: document.body ? capture(document.body) : null };
}
"""


class CaptureError(RuntimeError):
    """Raised when the tracking page could not be rendered or captured."""

    def __init__(self, message: str, url: str = ""):
        self.url = url
        super().__init__(message)


async def capture_snapshot_async(
    url: str,
    *,
    options: Optional[CaptureOptions] = None,
) -> Snapshot:
    """Render ``url`` headlessly and return its Snapshot.

    Raises:
        CaptureError: If the page fails to load or cannot be serialized.
    """
    async with AsyncWebCrawler(config=build_browser_config(options)) as crawler:
        return await capture_with_crawler(crawler, url, options=options)


async def capture_with_crawler(
    crawler: AsyncWebCrawler,
    url: str,
    *,
    options: Optional[CaptureOptions] = None,
) -> Snapshot:
    """Capture ``url`` with an already started crawler."""
    captured: Dict[str, Any] = {}

    async def _before_return_html(page: Page, context=None, html=None, **kwargs) -> Page:
        try:
            captured["data"] = await page.evaluate(SNAPSHOT_JS, MAX_CAPTURED_TEXT)
        except PlaywrightError as exc:
            captured["error"] = str(exc)
        return page

    crawler.crawler_strategy.set_hook("before_return_html", _before_return_html)

    LOGGER.info("Rendering %s", url)
    container = await crawler.arun(url=url, config=build_run_config(options))

    try:
        result = container[0]
    except (IndexError, TypeError):
        result = container

    if result is None or not getattr(result, "success", False):
        reason = getattr(result, "error_message", None) or "no result"
        raise CaptureError(f"Failed to render {url}: {reason}", url=url)

    if "data" not in captured:
        reason = captured.get("error") or "snapshot script did not run"
        raise CaptureError(f"Failed to capture {url}: {reason}", url=url)

    try:
        snapshot = snapshot_from_dict(captured["data"])
    except SnapshotError as exc:
        raise CaptureError(f"Unreadable snapshot for {url}: {exc}", url=url) from exc

    if not snapshot.url:
        snapshot = Snapshot(root=snapshot.root, url=str(getattr(result, "url", "") or url))

    LOGGER.debug("Captured %d node(s) from %s", snapshot.node_count(), snapshot.url)
    return snapshot


def capture_snapshot(
    url: str,
    *,
    options: Optional[CaptureOptions] = None,
) -> Snapshot:
    """Synchronous wrapper for capture_snapshot_async."""
    return asyncio.run(capture_snapshot_async(url, options=options))
