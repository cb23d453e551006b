"""Registry configuration management."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from typespecific.base.scope import Scope

DEFAULT_CONFIG_PATH = Path.home() / ".typespecific" / "config.json"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class RegistryConfig:
    """Configuration for a HandlerRegistry.

    Attributes:
        scope: Handler lifetime ('singleton' or 'prototype')
        postfix: Conventional class name postfix (e.g. 'Renderer'), or None
            to disable convention-based resolution
        handler_namespace: Module searched first for conventionally named
            handlers. None means the module defining the registry class.
        fallback_to_subject_namespace: Also search the subject type's module
    """

    scope: Scope = Scope.SINGLETON
    postfix: Optional[str] = None
    handler_namespace: Optional[str] = None
    fallback_to_subject_namespace: bool = True

    def __post_init__(self):
        """Normalize the scope and treat empty strings as unset."""
        self.scope = Scope.parse(self.scope)
        self.postfix = self.postfix or None
        self.handler_namespace = self.handler_namespace or None

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> "RegistryConfig":
        """Load configuration from file.

        Args:
            config_path: Path to config file. If None, uses default location.

        Returns:
            RegistryConfig instance (defaults if the file does not exist)

        Raises:
            ValueError: If the file contains an invalid scope
        """
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

        if not config_path.exists():
            return cls()

        with open(config_path, "r") as f:
            data = json.load(f)

        return cls(**data)

    def save(self, config_path: Optional[Union[str, Path]] = None) -> None:
        """Save configuration to file.

        Args:
            config_path: Path to config file. If None, uses default location.
        """
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict:
        return {
            "scope": self.scope.value,
            "postfix": self.postfix,
            "handler_namespace": self.handler_namespace,
            "fallback_to_subject_namespace": self.fallback_to_subject_namespace,
        }

    @classmethod
    def from_env(cls, base: Optional["RegistryConfig"] = None) -> "RegistryConfig":
        """Create configuration from environment variables.

        Environment variables:
            TYPESPECIFIC_SCOPE: 'singleton' or 'prototype'
            TYPESPECIFIC_POSTFIX: Conventional class name postfix
            TYPESPECIFIC_HANDLER_NAMESPACE: Module searched first by convention
            TYPESPECIFIC_SUBJECT_FALLBACK: Search the subject's module (true/false)

        Args:
            base: Configuration to override (defaults if None)

        Returns:
            RegistryConfig instance

        Raises:
            ValueError: If a variable holds an invalid value
        """
        config = cls(**base.to_dict()) if base else cls()

        if os.getenv("TYPESPECIFIC_SCOPE"):
            config.scope = Scope.parse(os.getenv("TYPESPECIFIC_SCOPE", ""))

        if os.getenv("TYPESPECIFIC_POSTFIX"):
            config.postfix = os.getenv("TYPESPECIFIC_POSTFIX")

        if os.getenv("TYPESPECIFIC_HANDLER_NAMESPACE"):
            config.handler_namespace = os.getenv("TYPESPECIFIC_HANDLER_NAMESPACE")

        if os.getenv("TYPESPECIFIC_SUBJECT_FALLBACK"):
            config.fallback_to_subject_namespace = _parse_flag(
                "TYPESPECIFIC_SUBJECT_FALLBACK",
                os.getenv("TYPESPECIFIC_SUBJECT_FALLBACK", ""),
            )

        return config


def _parse_flag(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    valid = ", ".join(_TRUE_VALUES + _FALSE_VALUES)
    raise ValueError(f"Invalid value for {name}: {value!r}. Valid values: {valid}")
