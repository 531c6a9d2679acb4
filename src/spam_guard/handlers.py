"""Handler metadata registry for spam protection.

Action classes declare which of their event handlers are protected with the
``spam_protect`` decorator. The decorator only marks the function; the
``HandlerRegistry`` turns those marks into an immutable capability table the
first time a class is indexed (normally at application startup), so request
handling never inspects functions itself.

Example:
    ```python
    class CommentAction:
        subject: str
        content: str

        @spam_protect("subject", "content")
        def save(self) -> None: ...

        def preview(self) -> None: ...

    registry = HandlerRegistry()
    registry.index(CommentAction)

    info = registry.get_info(CommentAction, CommentAction.save)
    assert info.protected_fields == ("subject", "content")
    ```

"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeVar

from spam_guard.errors import HandlerMetadataError, SpamGuardConfigurationError

logger = logging.getLogger(__name__)

SPAM_PROTECT_ATTRIBUTE = "__spam_protect__"
"""Function attribute holding the field names declared by ``spam_protect``."""


@dataclass(frozen=True)
class HandlerId:
    """Identity of one event handler on one action class."""

    action: str
    """Fully qualified name of the action class."""

    event: str
    """Name of the handler method."""

    @classmethod
    def of(cls, action_type: type, handler: Callable[..., Any]) -> HandlerId:
        """Build the identifier for a handler of an action class."""
        return cls(
            action=f"{action_type.__module__}.{action_type.__qualname__}",
            event=_unwrap(handler).__name__,
        )

    def __str__(self) -> str:
        return f"{self.action}#{self.event}"


@dataclass(frozen=True)
class HandlerInfo:
    """Static protection metadata for one event handler."""

    handler_id: HandlerId
    is_protected: bool = False
    protected_fields: tuple[str, ...] = ()


F = TypeVar("F", bound=Callable[..., Any])


def spam_protect(*fields: str) -> Callable[[F], F]:
    """Mark an event handler as spam protected.

    Args:
        *fields: Names of the action fields whose submitted values must be
            inspected, in the order they should be scored. Dotted names
            (``"page.text"``) address nested attributes.

    Returns:
        Decorator that records the field names on the handler function.

    Raises:
        SpamGuardConfigurationError: If a field name is empty or not a string.

    """
    for field in fields:
        if not isinstance(field, str) or not field.strip():
            raise SpamGuardConfigurationError(
                f"spam_protect field names must be non-empty strings, got: {field!r}"
            )

    declared = tuple(fields)

    def decorator(handler: F) -> F:
        setattr(handler, SPAM_PROTECT_ATTRIBUTE, declared)
        return handler

    return decorator


def _unwrap(handler: Callable[..., Any]) -> Callable[..., Any]:
    # Bound methods share metadata with the function they wrap
    return getattr(handler, "__func__", handler)


class HandlerRegistry:
    """Capability table mapping event handlers to their protection metadata.

    Tables are built once per action class and never mutated in place, so
    lookups are safe from concurrent request threads. Building (and explicit
    registration) is serialised by a lock.
    """

    def __init__(self) -> None:
        """Initialise an empty registry."""
        self._tables: dict[type, Mapping[Callable[..., Any], HandlerInfo]] = {}
        self._lock = threading.Lock()

    def index(self, action_type: type) -> Mapping[Callable[..., Any], HandlerInfo]:
        """Build (or return the existing) handler table for an action class.

        Every public function defined on the class or its bases is treated as
        an event handler. Overrides in subclasses take precedence over the
        base class definition.

        Args:
            action_type: The action class to index.

        Returns:
            Read-only mapping of handler function to HandlerInfo.

        """
        table = self._tables.get(action_type)
        if table is not None:
            return table

        with self._lock:
            table = self._tables.get(action_type)
            if table is None:
                table = MappingProxyType(self._build_table(action_type))
                self._tables[action_type] = table
                logger.debug(
                    "Indexed %d handlers for %s (%d spam protected)",
                    len(table),
                    action_type.__qualname__,
                    sum(1 for info in table.values() if info.is_protected),
                )
        return table

    def index_all(self, action_types: Iterable[type]) -> None:
        """Index several action classes, typically at startup."""
        for action_type in action_types:
            self.index(action_type)

    def register(
        self,
        action_type: type,
        handler: Callable[..., Any],
        fields: Iterable[str] = (),
        protected: bool = True,
    ) -> HandlerInfo:
        """Explicitly register protection metadata for a handler.

        Used for handlers that cannot carry the ``spam_protect`` decorator.
        An explicit registration replaces any declared metadata.

        Args:
            action_type: The action class the handler belongs to.
            handler: The handler function (bound or unbound).
            fields: Field names to inspect, in scoring order.
            protected: Whether the handler is protected.

        Returns:
            The registered HandlerInfo.

        Raises:
            SpamGuardConfigurationError: If fields are given for an
                unprotected handler.

        """
        field_names = tuple(fields)
        if field_names and not protected:
            raise SpamGuardConfigurationError(
                f"Handler {HandlerId.of(action_type, handler)} is not protected "
                "but declares protected fields"
            )

        self.index(action_type)
        function = _unwrap(handler)
        info = HandlerInfo(
            handler_id=HandlerId.of(action_type, function),
            is_protected=protected,
            protected_fields=field_names,
        )

        with self._lock:
            updated = dict(self._tables[action_type])
            updated[function] = info
            self._tables[action_type] = MappingProxyType(updated)

        logger.debug("Registered handler metadata for %s", info.handler_id)
        return info

    def get_info(self, action_type: type, handler: Callable[..., Any]) -> HandlerInfo:
        """Look up the protection metadata for a handler.

        Args:
            action_type: The class of the action instance being invoked.
            handler: The handler function (bound or unbound) being invoked.

        Returns:
            The HandlerInfo for the handler. The same instance is returned on
            every call.

        Raises:
            HandlerMetadataError: If the handler is not part of the indexed
                table for the action class.

        """
        table = self.index(action_type)
        info = table.get(_unwrap(handler))
        if info is None:
            message = (
                f"Event handler method {HandlerId.of(action_type, handler)} does not "
                "have associated handler metadata. This should not happen."
            )
            logger.error(message)
            raise HandlerMetadataError(message)
        return info

    def handler_infos(self, action_type: type) -> list[HandlerInfo]:
        """Return the indexed metadata for every handler of an action class."""
        return list(self.index(action_type).values())

    def _build_table(
        self, action_type: type
    ) -> dict[Callable[..., Any], HandlerInfo]:
        table: dict[Callable[..., Any], HandlerInfo] = {}
        seen: set[str] = set()

        for klass in action_type.__mro__:
            if klass is object:
                continue
            for name, member in vars(klass).items():
                if name.startswith("_") or name in seen:
                    continue
                seen.add(name)
                if not inspect.isfunction(member):
                    continue

                declared = getattr(member, SPAM_PROTECT_ATTRIBUTE, None)
                table[member] = HandlerInfo(
                    handler_id=HandlerId.of(action_type, member),
                    is_protected=declared is not None,
                    protected_fields=declared or (),
                )

        return table
