"""Resolution results and errors.

Every lookup performed by a registry produces a Resolution: the handler that
was found (if any) and the ordered chain of attempts that led there. The
default `find()` API collapses a failed resolution to None; `resolve()` and
`get()` expose the attempt chain for diagnosis.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

H = TypeVar("H")


class HandlerError(Exception):
    """Base exception for handler lookup errors."""

    pass


class ResolutionFailure(HandlerError):
    """Raised when a handler cannot be located (missing module or symbol)."""

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.target = target


class ConstructionFailure(HandlerError):
    """Raised when a located handler cannot be default-constructed."""

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.target = target


class Outcome(Enum):
    """Result of a single resolution attempt."""

    RESOLVED = "resolved"
    RESOLUTION_FAILURE = "resolution_failure"
    CONSTRUCTION_FAILURE = "construction_failure"


@dataclass(frozen=True)
class Attempt:
    """One strategy tried while resolving a subject type.

    Attributes:
        strategy: Name of the strategy ('binding', 'handler_namespace', ...)
        target: Qualified name looked up, if the strategy works by name
        outcome: What happened
        error: Exception that caused a failure, None on success
    """

    strategy: str
    target: Optional[str]
    outcome: Outcome
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.RESOLVED

    def describe(self) -> str:
        """Return a one-line human readable summary.

        Examples:
            >>> Attempt("handler_namespace", "app.CircleRenderer", Outcome.RESOLVED).describe()
            'handler_namespace: app.CircleRenderer -> resolved'
        """
        where = f"{self.strategy}: {self.target}" if self.target else self.strategy
        text = f"{where} -> {self.outcome.value}"
        if self.error is not None:
            text += f" ({self.error})"
        return text


class HandlerNotFoundError(HandlerError, KeyError):
    """Raised by strict lookups when no handler could be found.

    Carries the subject type and the chain of failed attempts.
    """

    def __init__(self, subject: Any, attempts: Optional[List[Attempt]] = None):
        self.subject = subject
        self.attempts = list(attempts or [])
        message = f"No handler found for subject type: {subject!r}"
        if self.attempts:
            tried = "; ".join(a.describe() for a in self.attempts)
            message += f". Tried: {tried}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the message readable
        return self.args[0]


@dataclass
class Resolution(Generic[H]):
    """Outcome of resolving a handler for one subject type.

    Attributes:
        subject: The subject type that was looked up
        handler: Resolved handler, or None when nothing was found
        source: Strategy that produced the handler ('binding' or a resolver name)
        attempts: Ordered attempts, including the successful one
    """

    subject: Any
    handler: Optional[H] = None
    source: Optional[str] = None
    attempts: List[Attempt] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.handler is not None

    @property
    def failures(self) -> List[Attempt]:
        """Attempts that did not succeed."""
        return [a for a in self.attempts if not a.succeeded]

    def unwrap(self) -> H:
        """Return the handler or raise HandlerNotFoundError.

        Raises:
            HandlerNotFoundError: If the resolution found nothing
        """
        if self.handler is None:
            raise HandlerNotFoundError(self.subject, self.attempts)
        return self.handler
