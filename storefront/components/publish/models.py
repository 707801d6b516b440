"""
Publish validator models.

An issue is either blocking ("error") or informational ("warning").
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Literal

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class PublishIssue:
    """A single finding about an entity's readiness to publish."""

    field: str
    message: str
    severity: Severity

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class PublishReport:
    """Validator output split by severity."""

    errors: list[PublishIssue]
    warnings: list[PublishIssue]

    @property
    def can_publish(self) -> bool:
        return not self.errors
