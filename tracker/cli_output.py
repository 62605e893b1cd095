"""Output and formatting helpers for CLI commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .document import TrackingCheck
from .snapshot import Snapshot


def check_to_dict(check: TrackingCheck) -> Dict[str, Any]:
    """Convert a check to a JSON-serializable dict."""
    return {
        "target": check.target,
        "code": check.code,
        "url": check.url,
        "status": check.status,
        "label": check.label.value,
        "token": check.token,
        "signal": check.signal,
        "flags": dict(check.flags),
        "error_message": check.error_message,
    }


def format_check_line(check: TrackingCheck) -> str:
    return f"{check.code or check.target}\t{check.token}"


def write_check(check: TrackingCheck, json_output: bool) -> None:
    """Print a single check: the bare token, or its JSON form."""
    if json_output:
        print(json.dumps(check_to_dict(check), indent=2, ensure_ascii=False))
    else:
        print(check.token)


def write_checks(
    checks: List[TrackingCheck],
    output: Optional[str],
    json_output: bool,
) -> None:
    """Write batch results to stdout or a file."""
    if json_output:
        text = json.dumps(
            [check_to_dict(check) for check in checks], indent=2, ensure_ascii=False
        )
    else:
        text = "\n".join(format_check_line(check) for check in checks)

    if output is None:
        print(text)
        return

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
    logging.info("Wrote %d result(s) to %s", len(checks), path)


def write_snapshot(snapshot: Snapshot, output: str) -> None:
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    logging.info("Wrote snapshot to %s", path)


def read_snapshot_file(path: str) -> Any:
    with open(Path(path).expanduser(), "r", encoding="utf-8") as fh:
        return json.load(fh)


def read_targets_file(path: str) -> List[str]:
    """Read one target per line, skipping blanks and ``#`` comments."""
    lines = Path(path).expanduser().read_text(encoding="utf-8").splitlines()
    return [
        line.strip()
        for line in lines
        if line.strip() and not line.strip().startswith("#")
    ]
