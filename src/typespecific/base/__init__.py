"""Base classes and utilities for the typespecific handler registry.

This module provides the foundation for type-specific handler lookup:
- HandlerRegistry: Registry mapping subject types to handlers
- Scope: Singleton or prototype handler lifetime
- Resolver, ConventionResolver, MappingResolver: Resolution strategies
- Resolution, Attempt, Outcome: Diagnostic results of a lookup
- Convenience functions: register_handler, find_handler, get_handler
"""

from typespecific.base.registry import (
    HandlerRegistry,
    find_handler,
    get_handler,
    get_registry,
    register_handler,
)
from typespecific.base.resolution import (
    Attempt,
    ConstructionFailure,
    HandlerError,
    HandlerNotFoundError,
    Outcome,
    Resolution,
    ResolutionFailure,
)
from typespecific.base.resolvers import (
    ConventionResolver,
    MappingResolver,
    Resolver,
    load_symbol,
    subject_namespace,
    subject_simple_name,
)
from typespecific.base.scope import Scope

__all__ = [
    "HandlerRegistry",
    "Scope",
    "Resolver",
    "ConventionResolver",
    "MappingResolver",
    "load_symbol",
    "subject_namespace",
    "subject_simple_name",
    "Resolution",
    "Attempt",
    "Outcome",
    "HandlerError",
    "ResolutionFailure",
    "ConstructionFailure",
    "HandlerNotFoundError",
    "register_handler",
    "find_handler",
    "get_handler",
    "get_registry",
]
