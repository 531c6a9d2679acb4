"""Spam protection decision pipeline.

For one action invocation the orchestrator:

1. Looks up the handler's protection metadata (unprotected → ALLOW).
2. Extracts the protected field values (nothing resolved → ALLOW).
3. Obtains the inspection plan, spam threshold and content field names,
   and creates a fresh inspection bound to the request context.
4. Scores each field in declared order. The spam score is read after each
   field and is cumulative across the invocation, so later fields are judged
   in the context of earlier ones.
5. Records a ``message.spam`` error for every field whose score is AT OR
   BELOW the threshold. Lower scores mean more suspicious content.

Validation outcomes are recorded, never raised. Missing handler metadata and
scoring engine failures are raised and end the invocation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from spam_guard.changes import Change, ChangeClassifier
from spam_guard.configuration import InspectionPlanProvider
from spam_guard.errors import InspectionError
from spam_guard.fields import FieldExtractor
from spam_guard.handlers import HandlerRegistry
from spam_guard.inspection import Inspection, Topic
from spam_guard.validation import LocalizableError, ValidationErrors

logger = logging.getLogger(__name__)


class Decision(Enum):
    """Terminal state of an invocation."""

    ALLOW = "allow"
    BLOCK = "block"


@dataclass(frozen=True)
class InspectionOutcome:
    """Result of inspecting one invocation."""

    decision: Decision
    inspected_fields: tuple[str, ...] = ()
    scores: Mapping[str, float] = field(default_factory=dict)
    """Spam score read immediately after each inspected field."""

    errors: tuple[LocalizableError, ...] = ()
    """Errors recorded by this invocation."""

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOW


_ALLOW = InspectionOutcome(decision=Decision.ALLOW)


def is_spam(score: float, threshold: float) -> bool:
    """Return whether a spam score indicates spam.

    Scores at or below the threshold are spam; a lower score means the
    content is more suspicious.
    """
    return score <= threshold


class SpamProtectionOrchestrator:
    """Runs protected action invocations through the scoring engine.

    Example:
        ```python
        orchestrator = SpamProtectionOrchestrator(
            registry=registry,
            extractor=FieldExtractor(),
            provider=SpamInspectionFactory(inspectors),
            properties=app_properties,
        )
        errors = ValidationErrors()
        outcome = orchestrator.inspect_invocation(
            action, type(action).save, request_context, errors
        )
        if not outcome.allowed:
            return render_form(errors)
        ```

    """

    def __init__(
        self,
        registry: HandlerRegistry,
        extractor: FieldExtractor,
        provider: InspectionPlanProvider,
        classifier: ChangeClassifier | None = None,
        properties: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialise orchestrator.

        Args:
            registry: Handler metadata registry.
            extractor: Resolves field values from action instances.
            provider: Supplies the inspection plan, spam threshold and
                content field names.
            classifier: Change classifier (defaults to one without page lookup).
            properties: Application properties passed to the provider.

        """
        self._registry = registry
        self._extractor = extractor
        self._provider = provider
        self._classifier = classifier or ChangeClassifier()
        self._properties: Mapping[str, Any] = MappingProxyType(dict(properties or {}))

    def inspect_invocation(
        self,
        action: object,
        handler: Callable[..., Any],
        request_context: Any,
        errors: ValidationErrors,
    ) -> InspectionOutcome:
        """Inspect one action invocation and record spam errors.

        Args:
            action: The action instance with bound request parameters.
            handler: The event handler being invoked.
            request_context: Opaque request context for the scoring engine.
            errors: The invocation's error collection; spam errors are appended.

        Returns:
            InspectionOutcome with BLOCK if any error was recorded.

        Raises:
            HandlerMetadataError: If the handler has no registry entry.
            InspectionError: If plan retrieval or scoring fails.

        """
        info = self._registry.get_info(type(action), handler)
        if not info.is_protected:
            return _ALLOW

        values = self._extractor.extract(action, info.protected_fields)
        if not values:
            logger.debug("No protected fields resolved for %s", info.handler_id)
            return _ALLOW

        inspection, threshold, content_fields = self._prepare(request_context)

        scores: dict[str, float] = {}
        recorded: list[LocalizableError] = []
        for name, value in values.items():
            score = self._score(
                inspection, request_context, name, value, name in content_fields
            )
            scores[name] = score

            if is_spam(score, threshold):
                recorded.append(errors.add(name, LocalizableError()))
                logger.info(
                    "Spam detected in field '%s' of %s (score %.3f <= limit %.3f)",
                    name,
                    info.handler_id,
                    score,
                    threshold,
                )

        return InspectionOutcome(
            decision=Decision.BLOCK if recorded else Decision.ALLOW,
            inspected_fields=tuple(values),
            scores=MappingProxyType(scores),
            errors=tuple(recorded),
        )

    def _prepare(
        self, request_context: Any
    ) -> tuple[Inspection, float, frozenset[str]]:
        try:
            plan = self._provider.get_inspection_plan(self._properties)
            threshold = self._provider.get_spam_threshold()
            content_fields = frozenset(self._provider.get_content_fields())
            inspection = plan.create_inspection(request_context)
        except Exception as e:
            logger.error("Failed to prepare spam inspection: %s", e)
            raise InspectionError(f"Failed to prepare spam inspection: {e}") from e
        return inspection, threshold, content_fields

    def _score(
        self,
        inspection: Inspection,
        request_context: Any,
        name: str,
        value: str,
        is_content: bool,
    ) -> float:
        try:
            change = self._classify(request_context, value, is_content)
            inspection.inspect(value, change)
            return inspection.get_score(Topic.SPAM)
        except Exception as e:
            logger.error("Spam inspection of field '%s' failed: %s", name, e)
            raise InspectionError(
                f"Spam inspection of field '{name}' failed: {e}"
            ) from e

    def _classify(self, request_context: Any, value: str, is_content: bool) -> Change:
        if is_content:
            return self._classifier.page_change(request_context, value)
        return self._classifier.text_change(value)
