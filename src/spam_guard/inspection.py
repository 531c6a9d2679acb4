"""Scoring engine seam.

The orchestrator only depends on two narrow protocols:

- ``InspectionPlan.create_inspection(request_context)`` builds a fresh,
  invocation-scoped ``Inspection``.
- ``Inspection.inspect(content, change)`` updates accumulated topic scores,
  which ``Inspection.get_score(topic)`` reads back.

Alternative scoring engines only need to satisfy those protocols. The module
also ships a default engine (``WeightedInspectionPlan`` and
``ScoringInspection``) that runs pluggable ``Inspector`` checks and
accumulates their weighted findings. No concrete checks are included.

Scores are on the ``[-1.0, 1.0]`` scale and start at ``0.0``. Failed checks
lower the score, so a LOWER score means MORE suspicious content.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from spam_guard.changes import Change

logger = logging.getLogger(__name__)

MIN_SCORE = -1.0
MAX_SCORE = 1.0


class Topic(Enum):
    """Scoring topics tracked by an inspection."""

    SPAM = "spam"


class Inspection(Protocol):
    """Invocation-scoped scoring context."""

    def inspect(self, content: str, change: Change) -> None:
        """Score one submitted value, updating the accumulated topic scores."""
        ...

    def get_score(self, topic: Topic) -> float:
        """Return the accumulated score for a topic."""
        ...


class InspectionPlan(Protocol):
    """Read-only description of the checks an inspection runs."""

    def create_inspection(self, request_context: Any) -> Inspection:
        """Create a fresh inspection bound to a request context."""
        ...


class FindingResult(Enum):
    """Outcome of one check."""

    PASSED = "passed"
    FAILED = "failed"
    NO_EFFECT = "no_effect"


@dataclass(frozen=True)
class Finding:
    """Result reported by an inspector for one topic."""

    topic: Topic
    result: FindingResult
    message: str = ""


class Inspector(Protocol):
    """A single pluggable check run by ScoringInspection."""

    @property
    def name(self) -> str:
        """Stable name used for configuration (e.g. weight overrides)."""
        ...

    def inspect(
        self, inspection: ScoringInspection, content: str, change: Change
    ) -> Sequence[Finding]:
        """Check one submitted value.

        Args:
            inspection: The running inspection, giving access to the request
                context and the scores accumulated so far.
            content: The raw submitted value.
            change: The classified change for the value.

        Returns:
            Findings for the value. An empty sequence has no effect.

        """
        ...


@dataclass(frozen=True)
class WeightedInspector:
    """An inspector paired with the weight of its findings."""

    inspector: Inspector
    weight: float = 1.0


@dataclass(frozen=True)
class WeightedInspectionPlan:
    """Default InspectionPlan: ordered inspectors with finding weights."""

    inspectors: tuple[WeightedInspector, ...] = ()

    def create_inspection(self, request_context: Any) -> ScoringInspection:
        """Create a fresh ScoringInspection for one invocation."""
        return ScoringInspection(self, request_context)


@dataclass
class ScoringInspection:
    """Default Inspection accumulating weighted inspector findings.

    Each PASSED finding adds the inspector's weight to its topic score and
    each FAILED finding subtracts it. Scores are clamped to the scale bounds.
    Not thread safe; one instance per invocation.
    """

    plan: WeightedInspectionPlan
    request_context: Any = None
    _scores: dict[Topic, float] = field(default_factory=dict, init=False)
    _findings: list[Finding] = field(default_factory=list, init=False)

    def inspect(self, content: str, change: Change) -> None:
        """Run every inspector in plan order against one value."""
        for weighted in self.plan.inspectors:
            findings = weighted.inspector.inspect(self, content, change)
            for finding in findings:
                self._apply(finding, weighted.weight)
                self._findings.append(finding)

    def get_score(self, topic: Topic) -> float:
        """Return the accumulated score for a topic (0.0 if never scored)."""
        return self._scores.get(topic, 0.0)

    def findings(self) -> list[Finding]:
        """Return every finding recorded so far, in order."""
        return list(self._findings)

    def _apply(self, finding: Finding, weight: float) -> None:
        if finding.result is FindingResult.NO_EFFECT:
            return

        delta = weight if finding.result is FindingResult.PASSED else -weight
        current = self._scores.get(finding.topic, 0.0)
        self._scores[finding.topic] = min(MAX_SCORE, max(MIN_SCORE, current + delta))

        logger.debug(
            "Finding %s for topic %s (%s): score %.3f -> %.3f",
            finding.result.value,
            finding.topic.value,
            finding.message or "no message",
            current,
            self._scores[finding.topic],
        )
