"""Handler registry mapping subject types to type-specific handlers.

This module provides the registry used to find the handler of a subject type.
The registry supports:
1. Registering handler instances (or factories) by subject type
2. Resolving unregistered handlers by naming convention, first next to the
   registry and then next to the subject type
3. Singleton and prototype scopes
4. A diagnostic resolve() that reports every attempted strategy
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, Sequence, Union

from typespecific.base.resolution import (
    Attempt,
    ConstructionFailure,
    H,
    Outcome,
    Resolution,
)
from typespecific.base.resolvers import (
    ConventionResolver,
    Factory,
    Loader,
    Resolver,
    load_symbol,
    subject_namespace,
)
from typespecific.base.scope import Scope

if TYPE_CHECKING:
    from typespecific.config import RegistryConfig

logger = logging.getLogger(__name__)

BINDING = "binding"
HANDLER_NAMESPACE = "handler_namespace"
SUBJECT_NAMESPACE = "subject_namespace"


def _construct(factory: Factory) -> Any:
    handler = factory()
    if handler is None:
        raise ConstructionFailure(f"{factory!r} returned None")
    return handler


class _Binding:
    """Registered handler for one subject type.

    The factory produces fresh handlers for prototype lookups. The instance
    is None when only a factory was registered and no singleton lookup has
    happened yet.
    """

    __slots__ = ("handler", "factory")

    def __init__(self, handler: Any, factory: Factory):
        self.handler = handler
        self.factory = factory


class HandlerRegistry(Generic[H]):
    """Registry of type-specific handlers.

    The registry maintains a mapping of subject type -> handler. Lookups
    consult the explicit bindings first. When no binding exists and a
    conventional postfix is set, the handler is resolved by name:

    1. ``<handler_namespace>.<SimpleName><postfix>``, where the handler
       namespace defaults to the module defining the registry class
    2. ``<subject module>.<SimpleName><postfix>``

    Any extra resolvers passed to the constructor are tried afterwards.

    Handlers resolved under singleton scope are memoized into the bindings.
    Under prototype scope every lookup returns a new instance.

    The registry is safe to share between threads. A reentrant lock guards
    the bindings, but handler modules are imported and handlers constructed
    outside it, so a handler module may register into the registry while it
    is being imported.

    Examples:
        Register handlers explicitly:
        >>> registry = HandlerRegistry()
        >>> registry.register(Circle, CircleRenderer())
        >>> registry.find(Circle)
        <CircleRenderer object>

        Resolve by convention:
        >>> class RendererRegistry(HandlerRegistry):
        ...     pass
        >>> registry = RendererRegistry()
        >>> registry.set_conventional_postfix("Renderer")
        >>> registry.find(Square)  # loads <module of Square>.SquareRenderer
        <SquareRenderer object>
    """

    def __init__(
        self,
        handler_namespace: Optional[str] = None,
        fallback_to_subject_namespace: bool = True,
        resolvers: Optional[Sequence[Resolver]] = None,
        loader: Optional[Loader] = None,
        scope: Union[Scope, str] = Scope.SINGLETON,
        postfix: Optional[str] = None,
    ):
        """Initialize an empty registry.

        Args:
            handler_namespace: Module searched first by convention. Defaults
                to the module where the registry class is defined.
            fallback_to_subject_namespace: Also search the subject type's
                module by convention
            resolvers: Extra strategies tried after the naming conventions
            loader: Loads a symbol by qualified name (default: load_symbol)
            scope: Initial scope
            postfix: Initial conventional postfix (None disables conventions)
        """
        self._bindings: Dict[Any, _Binding] = {}
        self._lock = threading.RLock()
        self._handler_namespace = handler_namespace
        self.fallback_to_subject_namespace = fallback_to_subject_namespace
        self._resolvers: List[Resolver] = list(resolvers or [])
        self._loader = loader or load_symbol
        self._scope = Scope.parse(scope)
        self._postfix = postfix or None

    @classmethod
    def from_config(cls, config: Optional["RegistryConfig"] = None, **kwargs):
        """Create a registry from a RegistryConfig.

        Args:
            config: Registry configuration (defaults if None)
            **kwargs: Extra constructor arguments (resolvers, loader)

        Returns:
            New registry instance
        """
        from typespecific.config import RegistryConfig

        config = config or RegistryConfig()
        return cls(
            handler_namespace=config.handler_namespace,
            fallback_to_subject_namespace=config.fallback_to_subject_namespace,
            scope=config.scope,
            postfix=config.postfix,
            **kwargs,
        )

    # ==================== Configuration ====================

    @property
    def scope(self) -> Scope:
        return self._scope

    def set_scope(self, scope: Union[Scope, str]) -> None:
        """Set the scope used by subsequent lookups.

        Existing bindings are kept.

        Args:
            scope: Scope or scope name ('singleton', 'prototype')

        Raises:
            ValueError: If scope is not a valid scope
        """
        self._scope = Scope.parse(scope)

    @property
    def postfix(self) -> Optional[str]:
        return self._postfix

    def set_conventional_postfix(self, postfix: Optional[str]) -> None:
        """Set the name postfix used for convention-based resolution.

        The postfix is appended to the subject type's simple name, like
        'Renderer' for renderers or 'Editor' for editors. None (or an empty
        string) disables convention-based resolution.

        Args:
            postfix: Class name postfix, or None
        """
        self._postfix = postfix or None

    @property
    def handler_namespace(self) -> str:
        """Module searched first for conventionally named handlers."""
        return self._handler_namespace or type(self).__module__

    # ==================== Registration ====================

    def register(self, subject: Any, handler: H) -> None:
        """Register the handler instance for a subject type.

        Overwrites any previous binding. Prototype lookups construct new
        handlers of the same class, so the class must be default-constructible
        for that scope.

        Args:
            subject: Subject type
            handler: Handler instance

        Raises:
            ValueError: If subject or handler is None

        Examples:
            >>> registry = HandlerRegistry()
            >>> registry.register(Circle, CircleRenderer())
        """
        if subject is None:
            raise ValueError("Cannot register a handler for subject type None")
        if handler is None:
            raise ValueError(f"Cannot register None as the handler for {subject!r}")
        with self._lock:
            self._bindings[subject] = _Binding(handler, type(handler))

    def register_factory(self, subject: Any, factory: Factory) -> None:
        """Register a zero-argument handler factory for a subject type.

        Singleton lookups call the factory once and reuse its result;
        prototype lookups call it every time.

        Args:
            subject: Subject type
            factory: Callable returning a new handler

        Raises:
            ValueError: If subject is None
            TypeError: If factory is not callable
        """
        if subject is None:
            raise ValueError("Cannot register a handler for subject type None")
        if not callable(factory):
            raise TypeError(f"Handler factory must be callable, got {factory!r}")
        with self._lock:
            self._bindings[subject] = _Binding(None, factory)

    def unregister(self, subject: Any) -> None:
        """Remove the binding for a subject type.

        Raises:
            KeyError: If nothing is bound to subject
        """
        with self._lock:
            if subject not in self._bindings:
                raise KeyError(f"No handler registered for subject type: {subject!r}")
            del self._bindings[subject]

    def is_registered(self, subject: Any) -> bool:
        """Check if a binding (explicit or memoized) exists for subject."""
        with self._lock:
            try:
                return subject in self._bindings
            except TypeError:
                return False

    def list_types(self) -> List[Any]:
        """List all subject types with a binding."""
        with self._lock:
            return list(self._bindings.keys())

    # ==================== Lookup ====================

    def find(self, subject: Any) -> Optional[H]:
        """Locate the handler for the specified subject type.

        Under singleton scope the registered (or memoized) instance is
        returned. Under prototype scope a new instance is created.

        Never raises: any failure results in None. Use resolve() to find out
        why a lookup failed.

        Args:
            subject: Subject type to look for (None is allowed)

        Returns:
            The handler, or None if not found
        """
        return self.resolve(subject).handler

    def get(self, subject: Any) -> H:
        """Get the handler for a subject type, raising if there is none.

        Args:
            subject: Subject type to look for

        Returns:
            The handler

        Raises:
            HandlerNotFoundError: If no handler could be found. The error
                carries the failed attempts.
        """
        return self.resolve(subject).unwrap()

    def resolve(self, subject: Any) -> Resolution[H]:
        """Resolve the handler for a subject type, recording every attempt.

        The lock guards the bindings only. Loading and construction run
        without it, since handler modules may register into this registry
        at import time. Concurrent lookups can construct redundantly; the
        first handler memoized wins and is returned to every caller.

        Args:
            subject: Subject type to look for (None is allowed)

        Returns:
            Resolution with the handler (or None) and the attempt chain
        """
        resolution: Resolution[H] = Resolution(subject)
        if subject is None:
            return resolution

        with self._lock:
            try:
                binding = self._bindings.get(subject)
            except TypeError as e:
                resolution.attempts.append(
                    Attempt(BINDING, None, Outcome.RESOLUTION_FAILURE, e)
                )
                return resolution

        if binding is not None:
            self._from_binding(binding, resolution)
        else:
            self._from_strategies(subject, resolution)
        return resolution

    def _from_binding(self, binding: _Binding, resolution: Resolution[H]) -> None:
        shared = self._scope.shares_instances
        handler = binding.handler if shared else None

        if handler is None:
            try:
                handler = _construct(binding.factory)
            except Exception as e:
                logger.warning(
                    f"Handler for {resolution.subject!r} could not be constructed: {e}"
                )
                resolution.attempts.append(
                    Attempt(BINDING, None, Outcome.CONSTRUCTION_FAILURE, e)
                )
                return

            if shared:
                with self._lock:
                    if binding.handler is None:
                        binding.handler = handler
                    handler = binding.handler

        resolution.attempts.append(Attempt(BINDING, None, Outcome.RESOLVED))
        resolution.handler = handler
        resolution.source = BINDING

    def _strategies(self) -> List[Resolver]:
        strategies: List[Resolver] = []
        if self._postfix:
            strategies.append(
                ConventionResolver(
                    HANDLER_NAMESPACE, self.handler_namespace, self._postfix, self._loader
                )
            )
            if self.fallback_to_subject_namespace:
                strategies.append(
                    ConventionResolver(
                        SUBJECT_NAMESPACE, subject_namespace, self._postfix, self._loader
                    )
                )
        strategies.extend(self._resolvers)
        return strategies

    def _from_strategies(self, subject: Any, resolution: Resolution[H]) -> None:
        tried = set()
        for resolver in self._strategies():
            target = resolver.target(subject)
            if target is not None:
                if target in tried:
                    continue
                tried.add(target)

            try:
                factory = resolver.locate(subject)
            except Exception as e:
                logger.debug(f"{resolver.name} could not locate {target or subject!r}: {e}")
                target = getattr(e, "target", None) or target
                resolution.attempts.append(
                    Attempt(resolver.name, target, Outcome.RESOLUTION_FAILURE, e)
                )
                continue

            try:
                handler = _construct(factory)
            except Exception as e:
                logger.warning(f"Handler {target or factory!r} could not be constructed: {e}")
                resolution.attempts.append(
                    Attempt(resolver.name, target, Outcome.CONSTRUCTION_FAILURE, e)
                )
                continue

            if self._scope.shares_instances:
                handler = self._memoize(subject, handler, factory)

            resolution.attempts.append(Attempt(resolver.name, target, Outcome.RESOLVED))
            resolution.handler = handler
            resolution.source = resolver.name
            return

    def _memoize(self, subject: Any, handler: Any, factory: Factory) -> Any:
        with self._lock:
            existing = self._bindings.get(subject)
            if existing is None:
                logger.debug(f"Caching handler {type(handler).__name__} for {subject!r}")
                self._bindings[subject] = _Binding(handler, factory)
                return handler
            if existing.handler is None:
                existing.handler = handler
            return existing.handler


# Global default registry
_registry: HandlerRegistry[Any] = HandlerRegistry()


def get_registry() -> HandlerRegistry[Any]:
    """Get the global handler registry.

    Returns:
        The global HandlerRegistry instance
    """
    return _registry


def register_handler(subject: Any, handler: Any) -> None:
    """Register a handler in the global registry.

    Convenience function for registering handlers without accessing
    the registry directly.

    Args:
        subject: Subject type
        handler: Handler instance
    """
    _registry.register(subject, handler)


def find_handler(subject: Any) -> Optional[Any]:
    """Find the handler for a subject type in the global registry.

    Returns:
        The handler, or None if not found
    """
    return _registry.find(subject)


def get_handler(subject: Any) -> Any:
    """Get the handler for a subject type from the global registry.

    Raises:
        HandlerNotFoundError: If no handler could be found
    """
    return _registry.get(subject)
