"""Field-attributed validation errors collected for one invocation."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SPAM_MESSAGE_KEY = "message.spam"


class LocalizableError(BaseModel):
    """A validation error rendered by looking up its message key.

    The field name is filled in when the error is added to a
    ``ValidationErrors`` collection.
    """

    model_config = ConfigDict(frozen=True)

    message_key: str = Field(
        default=SPAM_MESSAGE_KEY,
        min_length=1,
        description="Key of the localised message bundle entry",
    )
    field_name: str | None = Field(
        default=None, description="Field the error is attributed to"
    )
    parameters: tuple[Any, ...] = Field(
        default=(), description="Positional message parameters"
    )


class ValidationErrors:
    """Append-only, ordered collection of field-attributed errors.

    Errors are kept in the order they were added so messages shown to the
    user follow the order fields were declared in.
    """

    def __init__(self) -> None:
        """Initialise an empty collection."""
        self._errors: list[LocalizableError] = []

    def add(self, field_name: str, error: LocalizableError) -> LocalizableError:
        """Attribute an error to a field and append it.

        Returns:
            The stored error, carrying the field name.

        """
        stored = error.model_copy(update={"field_name": field_name})
        self._errors.append(stored)
        return stored

    def for_field(self, field_name: str) -> list[LocalizableError]:
        """Return the errors attributed to one field."""
        return [error for error in self._errors if error.field_name == field_name]

    def field_names(self) -> list[str]:
        """Return the names of fields with errors, in first-error order."""
        names: dict[str, None] = {}
        for error in self._errors:
            if error.field_name is not None:
                names.setdefault(error.field_name)
        return list(names)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self) -> Iterator[LocalizableError]:
        return iter(list(self._errors))

    def __bool__(self) -> bool:
        return self.has_errors

    def __repr__(self) -> str:
        return f"ValidationErrors({self._errors!r})"
