"""Field extraction from action instances.

Field values are resolved through one of three explicit mechanisms, checked
in order:

1. The action implements the ``FieldSource`` capability protocol.
2. A ``FieldAccessors`` table has been registered for the action's type.
3. An attribute accessor compiled from the declared field name. Dotted
   names walk nested attributes; a ``None`` along the way resolves to ``None``.

A field that cannot be resolved is left out of the result. It never aborts
extraction of the other fields.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from operator import attrgetter
from typing import Any, Protocol, TypeAlias, runtime_checkable

from spam_guard.errors import FieldNotFoundError, SpamGuardConfigurationError

logger = logging.getLogger(__name__)

FieldGetter: TypeAlias = Callable[[Any], object]

# Lookup failures that mean "this field does not exist on this instance"
_UNRESOLVABLE = (FieldNotFoundError, AttributeError, KeyError)


def attribute_path(name: str) -> FieldGetter:
    """Build a getter for a (possibly dotted) attribute path.

    A ``None`` found part-way along a dotted path yields ``None`` for the
    whole path. Missing attributes still raise ``AttributeError``.
    """
    if "." not in name:
        return attrgetter(name)

    getters = [attrgetter(part) for part in name.split(".")]

    def get(instance: object) -> object:
        value: object = instance
        for getter in getters:
            if value is None:
                return None
            value = getter(value)
        return value

    return get


@runtime_checkable
class FieldSource(Protocol):
    """Capability interface for actions that resolve their own fields."""

    def get_field(self, name: str) -> object:
        """Return the current value of a field.

        Raises:
            FieldNotFoundError: If the action has no such field.

        """
        ...


class FieldAccessors:
    """Explicit table of field getters for one action type.

    Example:
        ```python
        accessors = FieldAccessors({
            "subject": lambda action: action.form["subject"],
            "content": lambda action: action.form["body"],
        })
        extractor.register_accessors(CommentAction, accessors)
        ```

    """

    def __init__(self, getters: Mapping[str, FieldGetter]) -> None:
        """Initialise with a mapping of field name to getter."""
        self._getters = dict(getters)

    @classmethod
    def for_attributes(cls, *names: str) -> FieldAccessors:
        """Build accessors that read (possibly dotted) attribute paths."""
        return cls({name: attribute_path(name) for name in names})

    def __contains__(self, name: object) -> bool:
        return name in self._getters

    def resolve(self, instance: object, name: str) -> object:
        """Resolve one field on an instance.

        Raises:
            FieldNotFoundError: If the table has no getter for the field.

        """
        getter = self._getters.get(name)
        if getter is None:
            raise FieldNotFoundError(name)
        return getter(instance)


class FieldExtractor:
    """Resolves named field values from action instances."""

    def __init__(self) -> None:
        """Initialise with no registered accessor tables."""
        self._accessors: dict[type, FieldAccessors] = {}
        self._attribute_getters: dict[str, FieldGetter] = {}
        self._lock = threading.Lock()

    def register_accessors(self, action_type: type, accessors: FieldAccessors) -> None:
        """Register the accessor table used for instances of an action type.

        Raises:
            SpamGuardConfigurationError: If a table is already registered for
                the type.

        """
        with self._lock:
            if action_type in self._accessors:
                raise SpamGuardConfigurationError(
                    f"Field accessors already registered for {action_type.__qualname__}"
                )
            self._accessors[action_type] = accessors
        logger.debug("Registered field accessors for %s", action_type.__qualname__)

    def extract(self, instance: object, field_names: Iterable[str]) -> dict[str, str]:
        """Resolve the values of the named fields.

        Args:
            instance: The action instance holding the submitted values.
            field_names: Field names to resolve, in declared order.

        Returns:
            Ordered mapping of field name to text value for every field that
            resolved. ``None`` values become empty strings.

        """
        values: dict[str, str] = {}
        for name in field_names:
            try:
                value = self._resolve(instance, name)
            except _UNRESOLVABLE as e:
                logger.debug(
                    "Ignoring unresolvable field '%s' on %s: %s",
                    name,
                    type(instance).__qualname__,
                    e,
                )
                continue
            values[name] = "" if value is None else str(value)
        return values

    def _resolve(self, instance: object, name: str) -> object:
        if isinstance(instance, FieldSource):
            return instance.get_field(name)

        accessors = self._accessors_for(type(instance))
        if accessors is not None:
            return accessors.resolve(instance, name)

        return self._attribute_getter(name)(instance)

    def _accessors_for(self, action_type: type) -> FieldAccessors | None:
        for klass in action_type.__mro__:
            accessors = self._accessors.get(klass)
            if accessors is not None:
                return accessors
        return None

    def _attribute_getter(self, name: str) -> FieldGetter:
        getter = self._attribute_getters.get(name)
        if getter is None:
            with self._lock:
                getter = self._attribute_getters.setdefault(name, attribute_path(name))
        return getter
