"""Resolution strategies for locating handlers that were not registered.

A resolver turns a subject type into a zero-argument handler factory. The
registry tries its resolvers in order and constructs the handler from the
first factory that works.

Two strategies are provided:
- ConventionResolver: builds '<namespace>.<SimpleName><postfix>' and loads
  that symbol dynamically
- MappingResolver: looks the subject up in an explicit table supplied by the
  caller, for subjects that cannot be resolved by name
"""

import importlib
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from typespecific.base.resolution import ResolutionFailure

Factory = Callable[[], Any]
Loader = Callable[[str], Any]


def subject_simple_name(subject: Any) -> Optional[str]:
    """Get the simple (unqualified) name of a subject type.

    Examples:
        >>> subject_simple_name(dict)
        'dict'
        >>> subject_simple_name("shapes.geometry.Circle")
        'Circle'
    """
    if isinstance(subject, str):
        return subject.rpartition(".")[2] or None
    name = getattr(subject, "__name__", None)
    return name if isinstance(name, str) else None


def subject_namespace(subject: Any) -> Optional[str]:
    """Get the namespace (module name) a subject type is defined in.

    Examples:
        >>> subject_namespace(dict)
        'builtins'
        >>> subject_namespace("shapes.geometry.Circle")
        'shapes.geometry'
        >>> subject_namespace("Circle") is None
        True
    """
    if isinstance(subject, str):
        return subject.rpartition(".")[0] or None
    if not isinstance(subject, type):
        return None
    module = getattr(subject, "__module__", None)
    return module if isinstance(module, str) else None


def _split_candidates(qualified_name: str) -> List[Tuple[str, str]]:
    """List (module, attribute path) splits of a name, longest module first."""
    if ":" in qualified_name:
        module_name, _, attr_path = qualified_name.partition(":")
        return [(module_name, attr_path)]
    parts = qualified_name.split(".")
    return [
        (".".join(parts[:i]), ".".join(parts[i:])) for i in range(len(parts) - 1, 0, -1)
    ]


def _is_missing(error: ModuleNotFoundError, module_name: str) -> bool:
    # True when the module itself (or a parent package) is absent, as opposed
    # to an existing module failing on one of its own imports
    missing = error.name or ""
    return module_name == missing or module_name.startswith(missing + ".")


def load_symbol(qualified_name: str) -> Any:
    """Load a symbol by its fully qualified name.

    Accepts 'package.module.Name', 'package.module.Outer.Inner' or the
    explicit 'package.module:Outer.Inner' form.

    Args:
        qualified_name: Dotted path of the symbol

    Returns:
        The loaded object

    Raises:
        ResolutionFailure: If the module cannot be imported or the attribute
            does not exist. Errors raised while importing an existing module
            are chained as the cause.

    Examples:
        >>> load_symbol("collections.OrderedDict")
        <class 'collections.OrderedDict'>
    """
    candidates = _split_candidates(qualified_name) if qualified_name else []
    candidates = [(m, a) for m, a in candidates if m and a]
    if not candidates:
        raise ResolutionFailure(
            f"Not a qualified name: {qualified_name!r}", target=qualified_name
        )

    for module_name, attr_path in candidates:
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            if _is_missing(e, module_name):
                continue
            raise ResolutionFailure(
                f"Error importing {module_name}: {e}", target=qualified_name
            ) from e
        except Exception as e:
            raise ResolutionFailure(
                f"Error importing {module_name}: {e}", target=qualified_name
            ) from e

        obj = module
        for attr in attr_path.split("."):
            try:
                obj = getattr(obj, attr)
            except AttributeError as e:
                raise ResolutionFailure(
                    f"{module_name} has no attribute {attr_path!r}",
                    target=qualified_name,
                ) from e
        return obj

    raise ResolutionFailure(
        f"No module found for {qualified_name!r}", target=qualified_name
    )


def _qualified_name(obj: Any) -> Optional[str]:
    module = getattr(obj, "__module__", None)
    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if not module or not name:
        return None
    return f"{module}.{name}"


class Resolver(ABC):
    """Abstract base class for resolution strategies.

    Subclasses locate a factory for a subject type. They report failure by
    raising ResolutionFailure; the registry records the failure and moves on
    to the next resolver.

    Examples:
        A resolver that maps every subject to the same handler class:
        >>> class FallbackResolver(Resolver):
        ...     @property
        ...     def name(self) -> str:
        ...         return "fallback"
        ...
        ...     def locate(self, subject):
        ...         return DefaultRenderer
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name reported in resolution attempts."""
        pass

    def target(self, subject: Any) -> Optional[str]:
        """Qualified name this resolver would load for the subject, if any.

        Used for diagnostics and to skip strategies that would repeat an
        earlier lookup of the same name.
        """
        return None

    @abstractmethod
    def locate(self, subject: Any) -> Factory:
        """Locate a zero-argument factory for the subject's handler.

        Args:
            subject: Subject type to resolve

        Returns:
            Callable producing a new handler instance

        Raises:
            ResolutionFailure: If this strategy cannot provide a handler
        """
        pass


class ConventionResolver(Resolver):
    """Locate handlers by naming convention.

    The handler for subject type ``Circle`` with postfix ``"Renderer"`` is
    looked up as ``<namespace>.CircleRenderer``. The namespace is either a
    fixed module name or derived from the subject by a callable.

    Examples:
        Look next to the subject type:
        >>> resolver = ConventionResolver("subject_namespace", subject_namespace, "Renderer")
        >>> resolver.target("shapes.geometry.Circle")
        'shapes.geometry.CircleRenderer'
    """

    def __init__(
        self,
        name: str,
        namespace: Union[str, Callable[[Any], Optional[str]]],
        postfix: str,
        loader: Optional[Loader] = None,
    ):
        self._name = name
        self._namespace = namespace
        self.postfix = postfix
        self.loader = loader or load_symbol

    @property
    def name(self) -> str:
        return self._name

    def namespace_for(self, subject: Any) -> Optional[str]:
        if callable(self._namespace):
            return self._namespace(subject)
        return self._namespace

    def target(self, subject: Any) -> Optional[str]:
        simple_name = subject_simple_name(subject)
        namespace = self.namespace_for(subject)
        if not simple_name or not namespace:
            return None
        return f"{namespace}.{simple_name}{self.postfix}"

    def locate(self, subject: Any) -> Factory:
        target = self.target(subject)
        if target is None:
            raise ResolutionFailure(
                f"Cannot derive a handler name for {subject!r} "
                f"(no simple name or namespace)"
            )
        try:
            factory = self.loader(target)
        except ResolutionFailure:
            raise
        except Exception as e:
            raise ResolutionFailure(f"Error loading {target}: {e}", target=target) from e
        if not callable(factory):
            raise ResolutionFailure(f"{target} is not constructible", target=target)
        return factory


class MappingResolver(Resolver):
    """Locate handlers through an explicit subject -> factory table.

    Table values are zero-argument factories or qualified names, which are
    loaded on demand. This is the configuration-driven replacement for naming
    conventions, usable with subject identifiers that have no module.

    Examples:
        >>> resolver = MappingResolver({"circle": "shapes.render.CircleRenderer"})
        >>> resolver.target("circle")
        'shapes.render.CircleRenderer'
    """

    def __init__(
        self,
        table: Mapping[Any, Union[Factory, str]],
        name: str = "mapping",
        loader: Optional[Loader] = None,
    ):
        self.table = dict(table)
        self._name = name
        self.loader = loader or load_symbol

    @property
    def name(self) -> str:
        return self._name

    def _entry(self, subject: Any) -> Optional[Union[Factory, str]]:
        try:
            return self.table.get(subject)
        except TypeError:
            # Unhashable subject
            return None

    def target(self, subject: Any) -> Optional[str]:
        entry = self._entry(subject)
        if entry is None:
            return None
        if isinstance(entry, str):
            return entry
        return _qualified_name(entry)

    def locate(self, subject: Any) -> Factory:
        entry = self._entry(subject)
        if entry is None:
            raise ResolutionFailure(f"No mapping entry for {subject!r}")
        if isinstance(entry, str):
            try:
                entry = self.loader(entry)
            except ResolutionFailure:
                raise
            except Exception as e:
                raise ResolutionFailure(
                    f"Error loading {entry}: {e}", target=entry
                ) from e
        if not callable(entry):
            raise ResolutionFailure(f"Mapping entry for {subject!r} is not constructible")
        return entry
