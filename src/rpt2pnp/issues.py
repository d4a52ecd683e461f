"""Reportable, non-fatal problems found while parsing or sequencing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class IssueKind(Enum):
    """Category of a reported issue."""

    CONFIGURATION = "configuration"
    FEEDER_EXHAUSTED = "feeder_exhausted"
    LOOKUP_FAILURE = "lookup_failure"
    MALFORMED_LINE = "malformed_line"


@dataclass(frozen=True)
class Issue:
    """One reported problem: its kind, a message and where it happened."""

    kind: IssueKind
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        if not self.context:
            return f"[{self.kind.value}] {self.message}"
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"[{self.kind.value}] {self.message} ({details})"

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, "context": dict(self.context)}


def report(
    issues: List[Issue],
    kind: IssueKind,
    message: str,
    context: Optional[Dict[str, Any]] = None,
) -> Issue:
    """Record an issue in ``issues`` and log it at WARNING level."""
    issue = Issue(kind, message, dict(context or {}))
    issues.append(issue)
    logger.warning("%s", issue)
    return issue
