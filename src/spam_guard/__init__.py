"""spam-guard - spam protection for request-handling pipelines.

This package gates selected action handlers behind a content-inspection
check and turns suspicious submissions into field-attributed validation
errors before business logic runs.
"""

__version__ = "0.1.0"

from spam_guard.changes import Change, ChangeClassifier, ChangeKind
from spam_guard.configuration import (
    InspectionPlanProvider,
    SpamGuardConfiguration,
    SpamInspectionFactory,
)
from spam_guard.errors import (
    FieldNotFoundError,
    HandlerMetadataError,
    InspectionError,
    SpamGuardConfigurationError,
    SpamGuardError,
)
from spam_guard.fields import FieldAccessors, FieldExtractor, FieldSource
from spam_guard.handlers import HandlerId, HandlerInfo, HandlerRegistry, spam_protect
from spam_guard.inspection import (
    Finding,
    FindingResult,
    Inspection,
    InspectionPlan,
    Inspector,
    ScoringInspection,
    Topic,
    WeightedInspectionPlan,
    WeightedInspector,
)
from spam_guard.interceptor import ExecutionContext, SpamInterceptor
from spam_guard.orchestrator import (
    Decision,
    InspectionOutcome,
    SpamProtectionOrchestrator,
    is_spam,
)
from spam_guard.validation import LocalizableError, ValidationErrors

__all__ = [
    # Version
    "__version__",
    # Handler metadata
    "HandlerId",
    "HandlerInfo",
    "HandlerRegistry",
    "spam_protect",
    # Field extraction
    "FieldAccessors",
    "FieldExtractor",
    "FieldSource",
    # Change classification
    "Change",
    "ChangeClassifier",
    "ChangeKind",
    # Scoring engine
    "Finding",
    "FindingResult",
    "Inspection",
    "InspectionPlan",
    "Inspector",
    "ScoringInspection",
    "Topic",
    "WeightedInspectionPlan",
    "WeightedInspector",
    # Configuration
    "InspectionPlanProvider",
    "SpamGuardConfiguration",
    "SpamInspectionFactory",
    # Orchestration
    "Decision",
    "ExecutionContext",
    "InspectionOutcome",
    "SpamInterceptor",
    "SpamProtectionOrchestrator",
    "is_spam",
    # Validation errors
    "LocalizableError",
    "ValidationErrors",
    # Errors
    "FieldNotFoundError",
    "HandlerMetadataError",
    "InspectionError",
    "SpamGuardConfigurationError",
    "SpamGuardError",
]
