"""Scope definitions for handler lookups.

The scope decides whether a registry hands out one shared handler per subject
type or constructs a new handler on every lookup.
"""

from enum import Enum
from typing import Union


class Scope(Enum):
    """Lifetime of the handlers returned by a registry.

    Scopes:
        SINGLETON: The registered (or first resolved) instance is returned
            for every lookup of a subject type (default)
        PROTOTYPE: Every lookup constructs a new instance using the
            factory of the binding or of the resolved handler

    Examples:
        >>> Scope.parse("prototype")
        <Scope.PROTOTYPE: 'prototype'>

        >>> Scope.SINGLETON.shares_instances
        True
    """

    SINGLETON = "singleton"
    PROTOTYPE = "prototype"

    @property
    def shares_instances(self) -> bool:
        """Whether handlers are cached and shared between lookups."""
        return self is Scope.SINGLETON

    @classmethod
    def parse(cls, value: Union["Scope", str]) -> "Scope":
        """Convert a scope name to a Scope.

        Args:
            value: Scope member or its string value (case-insensitive)

        Returns:
            Scope enum value

        Raises:
            ValueError: If value does not name a scope
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        valid = ", ".join(s.value for s in cls)
        raise ValueError(f"Unknown scope: {value!r}. Valid scopes: {valid}")
