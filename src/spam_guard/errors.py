"""Error classes for spam-guard.

This module provides:
- SpamGuardError: Base exception class for all library errors
- HandlerMetadataError: Handler missing from the metadata registry
- FieldNotFoundError: Field cannot be resolved on an action instance
- InspectionError: Inspection plan retrieval or scoring failed
- SpamGuardConfigurationError: Invalid configuration or registration
"""


class SpamGuardError(Exception):
    """Base exception for all spam-guard errors."""

    pass


class HandlerMetadataError(SpamGuardError):
    """Raised when an invoked handler has no entry in the metadata registry.

    This indicates a wiring defect, not a user-facing validation failure.
    """

    pass


class FieldNotFoundError(SpamGuardError, LookupError):
    """Raised by field sources when a named field cannot be resolved."""

    def __init__(self, field_name: str) -> None:
        """Initialise with the name of the unresolvable field."""
        super().__init__(f"No such field: {field_name}")
        self.field_name = field_name


class InspectionError(SpamGuardError):
    """Raised when obtaining the inspection plan or scoring a field fails."""

    pass


class SpamGuardConfigurationError(SpamGuardError):
    """Raised when configuration or handler registration is invalid."""

    pass
