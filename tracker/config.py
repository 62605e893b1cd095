"""Factory functions for the Crawl4AI configuration used to render tracking pages."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import List, Optional

from crawl4ai import BrowserConfig, CrawlerRunConfig
from crawl4ai.async_configs import CacheMode

LOGGER = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 Chrome/120 Safari/537.36"
)

# The tracking page needs these to start inside containers.
DEFAULT_BROWSER_ARGS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
]

WAIT_UNTIL_CHOICES = ("load", "domcontentloaded", "networkidle", "commit")


@dataclass
class CaptureOptions:
    """How a tracking page is rendered before it is snapshotted."""

    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1400
    viewport_height: int = 1000
    wait_until: str = "networkidle"
    page_timeout_ms: int = 30000
    # Client-side rendering keeps filling the timeline after network idle.
    settle_delay: float = 1.4
    extra_args: List[str] = field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    verbose: bool = False


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        LOGGER.warning("Ignoring %s=%r: not a number.", name, raw)
        return None


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    LOGGER.warning("Ignoring %s=%r: not a boolean.", name, raw)
    return None


def load_options_from_env(base: Optional[CaptureOptions] = None) -> CaptureOptions:
    """Apply ``CTT_PAGE_TIMEOUT_MS``, ``CTT_RENDER_DELAY`` and ``CTT_HEADLESS``.

    Variables are read at call time so late ``.env`` loading is honoured.
    """
    options = base or CaptureOptions()

    timeout = _env_float("CTT_PAGE_TIMEOUT_MS")
    if timeout is not None:
        options = replace(options, page_timeout_ms=int(timeout))

    delay = _env_float("CTT_RENDER_DELAY")
    if delay is not None:
        options = replace(options, settle_delay=max(0.0, delay))

    headless = _env_bool("CTT_HEADLESS")
    if headless is not None:
        options = replace(options, headless=headless)

    return options


def build_browser_config(options: Optional[CaptureOptions] = None) -> BrowserConfig:
    """Headless Chromium configuration for the tracking page."""
    options = options or CaptureOptions()
    return BrowserConfig(
        browser_type="chromium",
        headless=options.headless,
        user_agent=options.user_agent,
        viewport_width=options.viewport_width,
        viewport_height=options.viewport_height,
        extra_args=list(options.extra_args),
        use_persistent_context=False,
        verbose=options.verbose,
    )


def build_run_config(options: Optional[CaptureOptions] = None) -> CrawlerRunConfig:
    """Run configuration: wait for the page to settle, never serve from cache."""
    options = options or CaptureOptions()
    if options.wait_until not in WAIT_UNTIL_CHOICES:
        LOGGER.warning(
            "Unknown wait_until '%s'; falling back to networkidle.", options.wait_until
        )
        wait_until = "networkidle"
    else:
        wait_until = options.wait_until
    return CrawlerRunConfig(
        verbose=options.verbose,
        wait_until=wait_until,
        page_timeout=options.page_timeout_ms,
        delay_before_return_html=options.settle_delay,
        cache_mode=CacheMode.BYPASS,
    )
