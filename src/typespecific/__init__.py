"""typespecific: Find type-specific handlers (renderers, editors, ...) for subject types."""

__version__ = "0.1.0"

from typespecific.base import (
    HandlerNotFoundError,
    HandlerRegistry,
    Resolution,
    Scope,
)
from typespecific.config import RegistryConfig

__all__ = [
    "HandlerRegistry",
    "HandlerNotFoundError",
    "Resolution",
    "Scope",
    "RegistryConfig",
    "__version__",
]
