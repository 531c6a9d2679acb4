"""Request lifecycle interceptor applying spam protection.

The interceptor runs at the custom validation stage of a web framework's
request lifecycle: after the action and event handler have been resolved and
request parameters bound, but before any other custom validation runs.
Frameworks adapt their own execution context to the ``ExecutionContext``
protocol.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from spam_guard.orchestrator import InspectionOutcome, SpamProtectionOrchestrator
from spam_guard.validation import ValidationErrors

logger = logging.getLogger(__name__)


class ExecutionContext(Protocol):
    """Framework view of one action invocation."""

    @property
    def action(self) -> object:
        """The action instance with bound request parameters."""
        ...

    @property
    def handler(self) -> Callable[..., Any]:
        """The resolved event handler."""
        ...

    @property
    def request_context(self) -> Any:
        """Request context handed to the scoring engine."""
        ...

    @property
    def validation_errors(self) -> ValidationErrors:
        """The invocation's validation error collection."""
        ...

    def proceed(self) -> Any | None:
        """Run the remaining interceptors for this stage.

        Returns:
            A resolution that short-circuits the request, or None.

        """
        ...


class SpamInterceptor:
    """Validates spam protected fields of every intercepted invocation."""

    def __init__(self, orchestrator: SpamProtectionOrchestrator) -> None:
        """Initialise interceptor with the orchestrator it delegates to."""
        self._orchestrator = orchestrator

    def intercept(self, context: ExecutionContext) -> Any | None:
        """Inspect the invocation once the other interceptors have run.

        Spam errors are added to ``context.validation_errors``; the framework
        halts normal processing when that collection is not empty.

        Args:
            context: The invocation's execution context.

        Returns:
            The resolution returned by ``context.proceed()`` if there was one,
            otherwise None.

        Raises:
            HandlerMetadataError: If the handler has no registry entry.
            InspectionError: If plan retrieval or scoring fails.

        """
        resolution = context.proceed()
        if resolution is not None:
            return resolution

        outcome: InspectionOutcome = self._orchestrator.inspect_invocation(
            context.action,
            context.handler,
            context.request_context,
            context.validation_errors,
        )
        if not outcome.allowed:
            logger.debug(
                "Blocked invocation: spam errors in fields %s",
                [error.field_name for error in outcome.errors],
            )
        return None
