"""Data structures returned by tracking checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .classifier import ClassificationResult
from .status import StatusLabel, progress_flags
from .urls import extract_tracking_code


@dataclass(slots=True)
class TrackingCheck:
    """Outcome of checking one tracking code or URL."""

    target: str
    url: str
    status: str  # success, failed
    label: StatusLabel = StatusLabel.UNKNOWN
    signal: str = "none"
    code: Optional[str] = None
    error_message: Optional[str] = None
    flags: Dict[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.code is None:
            self.code = extract_tracking_code(self.target) or extract_tracking_code(
                self.url
            )
        if not self.flags:
            self.flags = progress_flags(self.label.token)

    @property
    def token(self) -> str:
        return self.label.token

    @classmethod
    def from_result(
        cls, target: str, url: str, result: ClassificationResult
    ) -> TrackingCheck:
        return cls(
            target=target,
            url=url,
            status="success",
            label=result.label,
            signal=result.signal,
        )

    @classmethod
    def failed(cls, target: str, url: str, error_message: str) -> TrackingCheck:
        return cls(target=target, url=url, status="failed", error_message=error_message)
