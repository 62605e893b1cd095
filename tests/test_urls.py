"""Tests for tracker.urls module."""

from __future__ import annotations

import pytest

from tracker.urls import (
    DEFAULT_TRACKING_BASE_URL,
    build_tracking_url,
    extract_tracking_code,
    is_url,
)


class TestBuildTrackingUrl:
    def test_code(self, monkeypatch):
        monkeypatch.delenv("CTT_TRACKING_BASE_URL", raising=False)
        url = build_tracking_url("RT160347308PT")
        assert url == (
            f"{DEFAULT_TRACKING_BASE_URL}?ObjectCodeInput=RT160347308PT"
            "&SearchInput=RT160347308PT&IsFromPublicArea=true"
        )

    def test_url_passes_through(self):
        url = "https://appserver.ctt.pt/CustomerArea/PublicArea_Detail?ObjectCodeInput=X"
        assert build_tracking_url(f"  {url} ") == url

    def test_code_is_quoted(self):
        url = build_tracking_url("AB 12/3", base_url="https://track.test/detail")
        assert url.startswith("https://track.test/detail?ObjectCodeInput=AB%2012%2F3&")

    def test_env_base_url(self, monkeypatch):
        monkeypatch.setenv("CTT_TRACKING_BASE_URL", "https://mirror.test/detail")
        assert build_tracking_url("RT1PT").startswith("https://mirror.test/detail?")

    def test_explicit_base_beats_env(self, monkeypatch):
        monkeypatch.setenv("CTT_TRACKING_BASE_URL", "https://mirror.test/detail")
        url = build_tracking_url("RT1PT", base_url="https://other.test/d")
        assert url.startswith("https://other.test/d?")

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty(self, value):
        with pytest.raises(ValueError):
            build_tracking_url(value)


class TestIsUrl:
    def test_schemes(self):
        assert is_url("https://a.test")
        assert is_url("HTTP://a.test")
        assert not is_url("RT160347308PT")
        assert not is_url("")


class TestExtractTrackingCode:
    def test_bare_code(self):
        assert extract_tracking_code("RT160347308PT") == "RT160347308PT"

    def test_from_url(self):
        url = build_tracking_url("RT160329508PT", base_url="https://track.test/d")
        assert extract_tracking_code(url) == "RT160329508PT"

    def test_no_code(self):
        assert extract_tracking_code("https://example.test/page") is None
        assert extract_tracking_code("") is None
        assert extract_tracking_code(None) is None
