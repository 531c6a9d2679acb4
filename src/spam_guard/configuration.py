"""Configuration for spam protection.

This module provides the configuration model and the default configuration
provider consumed by the orchestrator. Configuration supports explicit
instantiation, application properties and environment variable fallback.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spam_guard.inspection import (
    InspectionPlan,
    Inspector,
    WeightedInspectionPlan,
    WeightedInspector,
)

logger = logging.getLogger(__name__)

PROPERTY_PREFIX = "spam_guard."
"""Namespace prefix for spam-guard keys inside application properties."""

DEFAULT_SPAM_THRESHOLD = -0.01
DEFAULT_CONTENT_FIELDS = ("page", "content")


class SpamGuardConfiguration(BaseModel):
    """Configuration for spam protection with environment fallback.

    Attributes:
        spam_threshold: Scores at or below this value are treated as spam.
            Lower scores mean more suspicious content.
        content_fields: Field names classified as page content changes.
        inspector_weights: Finding weight overrides keyed by inspector name.

    Example:
        ```python
        # Explicit configuration
        config = SpamGuardConfiguration(spam_threshold=-0.5)

        # From application properties with env fallback
        config = SpamGuardConfiguration.from_properties({
            "spam_guard.spam_threshold": "-0.5",
            "spam_guard.content_fields": "page,body",
        })
        ```

    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
    )

    spam_threshold: float = Field(
        default=DEFAULT_SPAM_THRESHOLD,
        ge=-1.0,
        le=1.0,
        description="Spam score limit; scores at or below it are spam",
    )
    content_fields: tuple[str, ...] = Field(
        default=DEFAULT_CONTENT_FIELDS,
        description="Fields classified as modifications of the target page",
    )
    inspector_weights: dict[str, float] = Field(
        default_factory=dict,
        description="Finding weight per inspector name, in (0, 1]",
    )

    @field_validator("content_fields", mode="before")
    @classmethod
    def split_content_fields(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a sequence."""
        if isinstance(v, str):
            return tuple(part.strip() for part in v.split(","))
        return v

    @field_validator("content_fields")
    @classmethod
    def validate_content_fields(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Validate that no content field name is blank.

        Raises:
            ValueError: If any field name is empty or whitespace

        """
        if any(not name.strip() for name in v):
            raise ValueError("Content field names cannot be empty")
        return tuple(name.strip() for name in v)

    @field_validator("inspector_weights")
    @classmethod
    def validate_inspector_weights(cls, v: dict[str, float]) -> dict[str, float]:
        """Validate that every weight is in (0, 1].

        Raises:
            ValueError: If a weight is out of range

        """
        for name, weight in v.items():
            if not 0.0 < weight <= 1.0:
                raise ValueError(
                    f"Weight for inspector '{name}' must be in (0, 1], got: {weight}"
                )
        return v

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> Self:
        """Create configuration from properties with environment fallback.

        Layering:
        1. Explicit properties (highest priority). Keys may be bare field
           names or carry the ``spam_guard.`` prefix; other keys are ignored.
        2. Environment variables (fallback)
        3. Defaults (lowest priority)

        Environment variables used:
        - SPAM_GUARD_THRESHOLD: Spam score limit
        - SPAM_GUARD_CONTENT_FIELDS: Comma-separated content field names

        Args:
            properties: Application properties

        Returns:
            Validated configuration instance

        Raises:
            ValidationError: If configuration is invalid

        """
        config_data: dict[str, Any] = {}
        for key, value in properties.items():
            if key.startswith(PROPERTY_PREFIX):
                config_data[key.removeprefix(PROPERTY_PREFIX)] = value
            elif key in cls.model_fields:
                config_data[key] = value

        if "spam_threshold" not in config_data:
            threshold = os.getenv("SPAM_GUARD_THRESHOLD")
            if threshold:
                config_data["spam_threshold"] = threshold

        if "content_fields" not in config_data:
            content_fields = os.getenv("SPAM_GUARD_CONTENT_FIELDS")
            if content_fields:
                config_data["content_fields"] = content_fields

        return cls.model_validate(config_data)


class InspectionPlanProvider(Protocol):
    """Supplies the inspection plan, spam threshold and content fields."""

    def get_inspection_plan(self, properties: Mapping[str, Any]) -> InspectionPlan:
        """Return the plan describing which checks to run."""
        ...

    def get_spam_threshold(self) -> float:
        """Return the spam score limit."""
        ...

    def get_content_fields(self) -> tuple[str, ...]:
        """Return the field names classified as page content changes."""
        ...


class SpamInspectionFactory:
    """Default InspectionPlanProvider built from a list of inspectors.

    Configuration is resolved once: from the explicit configuration when one
    is given, otherwise from the properties of the first plan request (or the
    environment, if the threshold is requested first). The plan is built once
    and cached, so concurrent invocations share a read-only plan.

    Example:
        ```python
        factory = SpamInspectionFactory([LinkCountInspector(), BanListInspector()])
        plan = factory.get_inspection_plan(app_properties)
        threshold = factory.get_spam_threshold()
        ```

    """

    def __init__(
        self,
        inspectors: Sequence[Inspector] = (),
        config: SpamGuardConfiguration | None = None,
    ) -> None:
        """Initialise factory.

        Args:
            inspectors: Checks to run, in order.
            config: Optional explicit configuration. If None, configuration
                is read from application properties and the environment.

        """
        self._inspectors = tuple(inspectors)
        self._config = config
        self._plan: WeightedInspectionPlan | None = None
        self._lock = threading.Lock()

    @property
    def config(self) -> SpamGuardConfiguration:
        """Get the resolved configuration."""
        return self._resolve_config({})

    def get_inspection_plan(
        self, properties: Mapping[str, Any]
    ) -> WeightedInspectionPlan:
        """Return the cached plan, building it on first use.

        Raises:
            ValidationError: If configuration from properties is invalid

        """
        if self._plan is not None:
            return self._plan

        with self._lock:
            if self._plan is None:
                config = self._resolve_config_locked(properties)
                self._plan = self._build_plan(config)
        return self._plan

    def get_spam_threshold(self) -> float:
        """Return the configured spam score limit."""
        return self._resolve_config({}).spam_threshold

    def get_content_fields(self) -> tuple[str, ...]:
        """Return the configured content field names."""
        return self._resolve_config({}).content_fields

    def _resolve_config(self, properties: Mapping[str, Any]) -> SpamGuardConfiguration:
        if self._config is not None:
            return self._config
        with self._lock:
            return self._resolve_config_locked(properties)

    def _resolve_config_locked(
        self, properties: Mapping[str, Any]
    ) -> SpamGuardConfiguration:
        if self._config is None:
            self._config = SpamGuardConfiguration.from_properties(properties)
            logger.debug(
                "Resolved spam-guard configuration (threshold=%s, content_fields=%s)",
                self._config.spam_threshold,
                self._config.content_fields,
            )
        return self._config

    def _build_plan(self, config: SpamGuardConfiguration) -> WeightedInspectionPlan:
        names = {inspector.name for inspector in self._inspectors}
        for unknown in sorted(set(config.inspector_weights) - names):
            logger.warning("Weight configured for unknown inspector '%s'", unknown)

        plan = WeightedInspectionPlan(
            tuple(
                WeightedInspector(
                    inspector, config.inspector_weights.get(inspector.name, 1.0)
                )
                for inspector in self._inspectors
            )
        )
        logger.info("Built spam inspection plan with %d inspectors", len(self._inspectors))
        return plan
