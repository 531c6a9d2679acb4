"""Tests for SpamInterceptor."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import Mock

import pytest

from spam_guard.errors import HandlerMetadataError
from spam_guard.fields import FieldExtractor
from spam_guard.handlers import HandlerRegistry
from spam_guard.interceptor import SpamInterceptor
from spam_guard.orchestrator import SpamProtectionOrchestrator
from spam_guard.validation import ValidationErrors

from .conftest import CommentAction, ScriptedPlan, StubPlanProvider


@dataclass
class FakeExecutionContext:
    """Minimal ExecutionContext for a single invocation."""

    action: object
    handler: Callable[..., Any]
    request_context: Any = None
    validation_errors: ValidationErrors = field(default_factory=ValidationErrors)
    resolution: Any = None
    events: list[str] = field(default_factory=list)

    def proceed(self) -> Any:
        self.events.append("proceed")
        return self.resolution


def make_interceptor(
    registry: HandlerRegistry, scores: list[float], threshold: float = 0.5
) -> tuple[SpamInterceptor, ScriptedPlan]:
    """Create an interceptor backed by a scripted scoring engine."""
    plan = ScriptedPlan(scores)
    orchestrator = SpamProtectionOrchestrator(
        registry=registry,
        extractor=FieldExtractor(),
        provider=StubPlanProvider(plan, threshold),
    )
    return SpamInterceptor(orchestrator), plan


class TestSpamInterceptor:
    """Tests for interception of framework invocations."""

    def test_spam_errors_land_in_context_errors(self, registry: HandlerRegistry) -> None:
        """Spam is reported through the context's validation errors."""
        # Arrange
        interceptor, _ = make_interceptor(registry, [0.2, 0.2])
        action = CommentAction()
        context = FakeExecutionContext(action, action.save)

        # Act
        result = interceptor.intercept(context)

        # Assert
        assert result is None
        assert context.validation_errors.field_names() == ["subject", "content"]

    def test_clean_submission_leaves_errors_empty(
        self, registry: HandlerRegistry
    ) -> None:
        """Nothing recorded means the framework proceeds."""
        interceptor, _ = make_interceptor(registry, [0.8, 0.8])
        action = CommentAction()
        context = FakeExecutionContext(action, action.save)

        result = interceptor.intercept(context)

        assert result is None
        assert not context.validation_errors

    def test_resolution_from_proceed_short_circuits(
        self, registry: HandlerRegistry
    ) -> None:
        """If another interceptor resolved the request, no inspection runs."""
        interceptor, plan = make_interceptor(registry, [0.0, 0.0])
        action = CommentAction()
        redirect = object()
        context = FakeExecutionContext(action, action.save, resolution=redirect)

        result = interceptor.intercept(context)

        assert result is redirect
        assert plan.created == []
        assert not context.validation_errors

    def test_proceeds_before_inspecting(self) -> None:
        """Other interceptors of the stage run first."""
        orchestrator = Mock(spec=SpamProtectionOrchestrator)
        context = FakeExecutionContext(CommentAction(), CommentAction.save)

        def record(*args: object) -> Mock:
            context.events.append("inspect")
            return Mock(allowed=True)

        orchestrator.inspect_invocation.side_effect = record

        SpamInterceptor(orchestrator).intercept(context)

        assert context.events == ["proceed", "inspect"]
        orchestrator.inspect_invocation.assert_called_once_with(
            context.action, context.handler, None, context.validation_errors
        )

    def test_missing_metadata_propagates(self) -> None:
        """Wiring defects are not turned into validation errors."""
        interceptor, _ = make_interceptor(HandlerRegistry(), [0.0])

        def unknown() -> None:
            pass

        context = FakeExecutionContext(CommentAction(), unknown)

        with pytest.raises(HandlerMetadataError):
            interceptor.intercept(context)

        assert not context.validation_errors
