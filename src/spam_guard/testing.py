"""Testing utilities for spam-guard scoring engines.

Provides contract tests that alternative ``Inspection`` implementations can
inherit to verify they behave the way the orchestrator relies on.
"""

from typing import Any

import pytest

from spam_guard.changes import Change, ChangeKind
from spam_guard.inspection import InspectionPlan, Topic


class InspectionContractTests:
    """Abstract contract tests that all InspectionPlan implementations must pass.

    Required Fixtures:
        plan: InspectionPlan instance to test
        spam_content: A value the plan's checks are expected to flag

    Contract Requirements:
        1. create_inspection() returns a new inspection on every call
        2. get_score() works before anything has been inspected
        3. inspect() of flagged content does not raise the spam score
        4. Inspections created from the same plan do not share scores

    Usage Pattern:
        class TestMyPlan(InspectionContractTests):
            @pytest.fixture
            def plan(self) -> InspectionPlan:
                return MyPlan(...)

            @pytest.fixture
            def spam_content(self) -> str:
                return "buy cheap pills"

            # All contract tests run automatically

    Design Decision:
        Abstract fixtures raise NotImplementedError instead of calling
        pytest.skip so inheriting classes are forced to provide them.

    """

    @pytest.fixture
    def plan(self) -> InspectionPlan:
        """Provide the InspectionPlan instance to test.

        Raises:
            NotImplementedError: If subclass doesn't override this fixture

        """
        raise NotImplementedError(
            "Subclass must provide 'plan' fixture with InspectionPlan instance"
        )

    @pytest.fixture
    def spam_content(self) -> str:
        """Provide a value the plan's checks flag as spam.

        Raises:
            NotImplementedError: If subclass doesn't override this fixture

        """
        raise NotImplementedError(
            "Subclass must provide 'spam_content' fixture with flagged content"
        )

    @pytest.fixture
    def request_context(self) -> Any:
        """Provide the request context inspections are bound to."""
        return None

    # CONTRACT TEST 1
    def test_create_inspection_returns_fresh_instance(
        self, plan: InspectionPlan, request_context: Any
    ) -> None:
        """Verify every invocation gets its own inspection."""
        first = plan.create_inspection(request_context)
        second = plan.create_inspection(request_context)

        assert first is not None
        assert first is not second, "Inspections must not be reused across invocations"

    # CONTRACT TEST 2
    def test_get_score_before_inspect_returns_float(
        self, plan: InspectionPlan, request_context: Any
    ) -> None:
        """Verify scores can be read before any value is inspected."""
        inspection = plan.create_inspection(request_context)

        assert isinstance(inspection.get_score(Topic.SPAM), float)

    # CONTRACT TEST 3
    def test_inspecting_spam_does_not_raise_score(
        self, plan: InspectionPlan, request_context: Any, spam_content: str
    ) -> None:
        """Verify flagged content moves the spam score down (more suspicious)."""
        inspection = plan.create_inspection(request_context)
        before = inspection.get_score(Topic.SPAM)

        inspection.inspect(spam_content, _text_change(spam_content))

        assert inspection.get_score(Topic.SPAM) <= before

    # CONTRACT TEST 4
    def test_inspections_do_not_share_scores(
        self, plan: InspectionPlan, request_context: Any, spam_content: str
    ) -> None:
        """Verify scoring one inspection leaves another untouched."""
        scored = plan.create_inspection(request_context)
        untouched = plan.create_inspection(request_context)
        baseline = untouched.get_score(Topic.SPAM)

        scored.inspect(spam_content, _text_change(spam_content))

        assert untouched.get_score(Topic.SPAM) == baseline


def _text_change(content: str) -> Change:
    return Change(kind=ChangeKind.TEXT, content=content, adds=1)
