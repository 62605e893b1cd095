"""Tests for tracker.capture module."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from tracker.capture import (
    MAX_CAPTURED_TEXT,
    SNAPSHOT_JS,
    CaptureError,
    capture_snapshot,
    capture_snapshot_async,
    capture_with_crawler,
)
from tracker.config import CaptureOptions
from tracker.snapshot import Snapshot

PAGE_DATA = {
    "url": "https://track.test/d?ObjectCodeInput=RT160347308PT",
    "root": {
        "tag": "body",
        "text": "Entregue",
        "rect": {"top": 0, "left": 0, "right": 1400, "bottom": 1000, "width": 1400, "height": 1000},
        "style": {"color": "rgb(0, 0, 0)"},
        "className": "",
        "attrs": {},
        "children": [{"tag": "span", "text": "Entregue"}],
    },
}


def _build_crawler_mocks(
    data=None,
    evaluate_error=None,
    success=True,
    error_message=None,
    wrap_in_list=True,
):
    """Build a crawler whose arun fires the registered before_return_html hook."""
    hooks = {}

    mock_page = MagicMock()
    if evaluate_error is not None:
        mock_page.evaluate = AsyncMock(side_effect=evaluate_error)
    else:
        mock_page.evaluate = AsyncMock(return_value=data)

    mock_crawler = MagicMock()
    mock_crawler.crawler_strategy.set_hook.side_effect = (
        lambda name, hook: hooks.__setitem__(name, hook)
    )

    async def _arun(url, config):
        await hooks["before_return_html"](page=mock_page, context=None, html="<html/>")
        result = SimpleNamespace(success=success, url=url, error_message=error_message)
        return [result] if wrap_in_list else result

    mock_crawler.arun = AsyncMock(side_effect=_arun)
    return mock_crawler, mock_page


class TestCaptureWithCrawler:
    @pytest.mark.asyncio
    async def test_success(self):
        crawler, page = _build_crawler_mocks(data=PAGE_DATA)
        snapshot = await capture_with_crawler(crawler, PAGE_DATA["url"])

        assert snapshot.url == PAGE_DATA["url"]
        assert snapshot.root.tag == "body"
        assert snapshot.root.children[0].text == "Entregue"
        page.evaluate.assert_awaited_once_with(SNAPSHOT_JS, MAX_CAPTURED_TEXT)

    @pytest.mark.asyncio
    async def test_run_config_follows_options(self):
        crawler, _ = _build_crawler_mocks(data=PAGE_DATA)
        options = CaptureOptions(page_timeout_ms=5000, settle_delay=0.0)
        await capture_with_crawler(crawler, "https://track.test", options=options)

        config = crawler.arun.call_args.kwargs["config"]
        assert config.page_timeout == 5000
        assert config.delay_before_return_html == 0.0

    @pytest.mark.asyncio
    async def test_url_falls_back_to_result(self):
        data = dict(PAGE_DATA, url="")
        crawler, _ = _build_crawler_mocks(data=data)
        snapshot = await capture_with_crawler(crawler, "https://track.test/final")
        assert snapshot.url == "https://track.test/final"

    @pytest.mark.asyncio
    async def test_single_result(self):
        crawler, _ = _build_crawler_mocks(data=PAGE_DATA, wrap_in_list=False)
        snapshot = await capture_with_crawler(crawler, PAGE_DATA["url"])
        assert snapshot.root is not None

    @pytest.mark.asyncio
    async def test_render_failure(self):
        crawler, _ = _build_crawler_mocks(
            data=PAGE_DATA, success=False, error_message="net::ERR_TIMED_OUT"
        )
        with pytest.raises(CaptureError) as excinfo:
            await capture_with_crawler(crawler, "https://track.test")
        assert "ERR_TIMED_OUT" in str(excinfo.value)
        assert excinfo.value.url == "https://track.test"

    @pytest.mark.asyncio
    async def test_script_failure(self):
        crawler, _ = _build_crawler_mocks(evaluate_error=PlaywrightError("Target closed"))
        with pytest.raises(CaptureError, match="Target closed"):
            await capture_with_crawler(crawler, "https://track.test")

    @pytest.mark.asyncio
    async def test_unreadable_data(self):
        crawler, _ = _build_crawler_mocks(data=["not", "a", "snapshot"])
        with pytest.raises(CaptureError, match="Unreadable"):
            await capture_with_crawler(crawler, "https://track.test")

    @pytest.mark.asyncio
    async def test_empty_page(self):
        crawler, _ = _build_crawler_mocks(data={"url": "https://track.test", "root": None})
        snapshot = await capture_with_crawler(crawler, "https://track.test")
        assert snapshot.root is None


class TestCaptureSnapshotAsync:
    @pytest.mark.asyncio
    async def test_opens_browser_session(self):
        crawler, _ = _build_crawler_mocks(data=PAGE_DATA)
        mock_cm = AsyncMock()
        mock_cm.__aenter__ = AsyncMock(return_value=crawler)
        mock_cm.__aexit__ = AsyncMock(return_value=None)

        with patch("tracker.capture.AsyncWebCrawler", return_value=mock_cm) as mock_cls:
            snapshot = await capture_snapshot_async(
                PAGE_DATA["url"], options=CaptureOptions(headless=False)
            )

        assert snapshot.root.text == "Entregue"
        browser_config = mock_cls.call_args.kwargs["config"]
        assert browser_config.headless is False
        mock_cm.__aexit__.assert_awaited_once()


class TestCaptureSnapshotSync:
    def test_sync_wrapper(self):
        expected = Snapshot(url="https://track.test")
        with patch(
            "tracker.capture.capture_snapshot_async",
            new=AsyncMock(return_value=expected),
        ) as mock_async:
            assert capture_snapshot("https://track.test") is expected
        mock_async.assert_awaited_once_with("https://track.test", options=None)
