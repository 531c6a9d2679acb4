"""Shared fixtures and test doubles for spam-guard tests."""

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from spam_guard.changes import Change
from spam_guard.configuration import DEFAULT_CONTENT_FIELDS
from spam_guard.fields import FieldExtractor
from spam_guard.handlers import HandlerRegistry, spam_protect
from spam_guard.inspection import (
    Finding,
    FindingResult,
    ScoringInspection,
    Topic,
)
from spam_guard.validation import ValidationErrors

# =============================================================================
# Action Classes
# =============================================================================


class CommentAction:
    """Action with a protected save handler and an unprotected view handler."""

    def __init__(self, subject: object = "Hello", content: object = "Nice page") -> None:
        self.subject = subject
        self.content = content

    @spam_protect("subject", "content")
    def save(self) -> None:
        pass

    def view(self) -> None:
        pass


class ContentOnlyAction:
    """Action protecting a field it does not define."""

    @spam_protect("content")
    def save(self) -> None:
        pass


# =============================================================================
# Scoring Engine Doubles
# =============================================================================


class ScriptedInspection:
    """Inspection whose spam score follows a script, one entry per inspect()."""

    def __init__(self, scores: Sequence[float]) -> None:
        self._scores = list(scores)
        self._current = 0.0
        self.inspected: list[tuple[str, Change]] = []

    def inspect(self, content: str, change: Change) -> None:
        self.inspected.append((content, change))
        self._current = self._scores[len(self.inspected) - 1]

    def get_score(self, topic: Topic) -> float:
        return self._current


class ScriptedPlan:
    """InspectionPlan creating ScriptedInspections and remembering them."""

    def __init__(self, scores: Sequence[float]) -> None:
        self.scores = list(scores)
        self.created: list[ScriptedInspection] = []
        self.request_contexts: list[Any] = []

    def create_inspection(self, request_context: Any) -> ScriptedInspection:
        inspection = ScriptedInspection(self.scores)
        self.created.append(inspection)
        self.request_contexts.append(request_context)
        return inspection


class StubPlanProvider:
    """InspectionPlanProvider returning a fixed plan, threshold and content fields."""

    def __init__(
        self,
        plan: Any,
        threshold: float,
        content_fields: Sequence[str] = DEFAULT_CONTENT_FIELDS,
    ) -> None:
        self.plan = plan
        self.threshold = threshold
        self.content_fields = tuple(content_fields)
        self.plan_requests: list[Mapping[str, Any]] = []

    def get_inspection_plan(self, properties: Mapping[str, Any]) -> Any:
        self.plan_requests.append(properties)
        return self.plan

    def get_spam_threshold(self) -> float:
        return self.threshold

    def get_content_fields(self) -> tuple[str, ...]:
        return self.content_fields


class KeywordInspector:
    """Inspector failing any value containing a keyword, passing nothing."""

    def __init__(self, keyword: str = "viagra", name: str = "keyword") -> None:
        self.keyword = keyword
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def inspect(
        self, inspection: ScoringInspection, content: str, change: Change
    ) -> Sequence[Finding]:
        if self.keyword in content.lower():
            return [Finding(Topic.SPAM, FindingResult.FAILED, f"contains {self.keyword}")]
        return [Finding(Topic.SPAM, FindingResult.NO_EFFECT)]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry() -> HandlerRegistry:
    """Provide a registry with the test action classes indexed."""
    registry = HandlerRegistry()
    registry.index_all([CommentAction, ContentOnlyAction])
    return registry


@pytest.fixture
def extractor() -> FieldExtractor:
    """Provide a field extractor with no accessor tables."""
    return FieldExtractor()


@pytest.fixture
def errors() -> ValidationErrors:
    """Provide an empty error collection."""
    return ValidationErrors()
