"""Shared pytest hooks: tests must not silently skip or xfail."""

from __future__ import annotations

from collections import Counter

_OUTCOMES: Counter = Counter()


def pytest_deselected(items):  # pragma: no cover - pytest hook
    _OUTCOMES["deselected"] += len(items)


def pytest_runtest_logreport(report):  # pragma: no cover - pytest hook
    if report.when == "teardown":
        return
    if getattr(report, "wasxfail", False):
        _OUTCOMES["xfailed" if report.skipped else "xpassed"] += 1
    elif report.skipped:
        _OUTCOMES["skipped"] += 1


def pytest_sessionfinish(session, exitstatus):  # pragma: no cover - pytest hook
    counts = {name: count for name, count in _OUTCOMES.items() if count}
    if not counts:
        return

    summary = ", ".join(f"{name}={count}" for name, count in sorted(counts.items()))
    reporter = session.config.pluginmanager.get_plugin("terminalreporter")
    if reporter:
        reporter.write_sep("=", f"Tracking tests must all run ({summary})")
    session.exitstatus = 1
