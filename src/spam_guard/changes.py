"""Change classification for submitted field values.

A ``Change`` tells the scoring engine what a submission actually modifies.
Content fields are compared against the current page text so only the newly
added lines are judged; every other field is treated as brand-new text.
"""

from __future__ import annotations

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias

logger = logging.getLogger(__name__)

PageTextLookup: TypeAlias = Callable[[Any], str | None]
"""Returns the current text of the page targeted by a request, if it exists."""


class ChangeKind(Enum):
    """What kind of content a change modifies."""

    PAGE = "page"
    TEXT = "text"


@dataclass(frozen=True)
class Change:
    """Classified modification submitted in one field."""

    kind: ChangeKind
    content: str
    """The text added by the change."""

    adds: int = 0
    """Number of added lines (or 1 for a non-empty text change)."""

    removals: int = 0
    """Number of removed lines."""

    @property
    def is_empty(self) -> bool:
        return not self.content and self.removals == 0


class ChangeClassifier:
    """Converts raw field values into Change descriptors."""

    def __init__(self, page_text_lookup: PageTextLookup | None = None) -> None:
        """Initialise classifier.

        Args:
            page_text_lookup: Optional callable returning the current text of
                the page a request modifies. Without it every page change is
                treated as creating a new page.

        """
        self._page_text_lookup = page_text_lookup

    def text_change(self, value: str) -> Change:
        """Classify a value with no knowledge of what it replaces."""
        return Change(
            kind=ChangeKind.TEXT,
            content=value,
            adds=1 if value else 0,
            removals=0,
        )

    def page_change(self, request_context: Any, value: str) -> Change:
        """Classify a value as a modification of the request's target page.

        Args:
            request_context: Opaque request context handed to the page lookup.
            value: The submitted page text.

        Returns:
            Change holding only the lines added relative to the current page.

        """
        current = None
        if self._page_text_lookup is not None:
            current = self._page_text_lookup(request_context)

        old_lines = (current or "").splitlines()
        new_lines = value.splitlines()

        added: list[str] = []
        removals = 0
        for line in difflib.ndiff(old_lines, new_lines):
            if line.startswith("+ "):
                added.append(line[2:])
            elif line.startswith("- "):
                removals += 1

        logger.debug(
            "Page change: %d lines added, %d removed (existing page: %s)",
            len(added),
            removals,
            current is not None,
        )
        return Change(
            kind=ChangeKind.PAGE,
            content="\n".join(added),
            adds=len(added),
            removals=removals,
        )
