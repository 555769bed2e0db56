"""Configuration for the schema engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from rtschema.exceptions import ConfigurationError
from rtschema.registry.builtins import BUILTIN_DEFINITIONS, DEFAULT_NAMESPACE, default_registry
from rtschema.registry.reference_registry import ReferenceRegistry, load_registry
from rtschema.utils.logging_utils import configure_cli_logging

ENV_ALLOWED_NAMESPACES = "RTSCHEMA_ALLOWED_NAMESPACES"
ENV_REGISTRY = "RTSCHEMA_REGISTRY"
ENV_LOG_LEVEL = "RTSCHEMA_LOG_LEVEL"


@dataclass
class EngineConfig:
    """Engine settings.

    The reference allow-list is deployment configuration: it is never baked
    into the engine itself.
    """

    allowed_namespaces: tuple[str, ...] = ()  # Empty means the registry file's own, or the default
    registry_path: str = ""  # Empty means the built-in registry
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Create configuration from environment variables."""
        namespaces = os.getenv(ENV_ALLOWED_NAMESPACES, "")
        return cls(
            allowed_namespaces=_split_namespaces(namespaces),
            registry_path=os.getenv(ENV_REGISTRY, ""),
            log_level=os.getenv(ENV_LOG_LEVEL, "WARNING"),
        )

    @property
    def effective_namespaces(self) -> tuple[str, ...]:
        return self.allowed_namespaces or (DEFAULT_NAMESPACE,)

    def with_overrides(
        self,
        allowed_namespaces: tuple[str, ...] | list[str] = (),
        registry_path: str | None = None,
        log_level: str | None = None,
    ) -> EngineConfig:
        """Return a copy with the given non-empty values replaced (CLI options win)."""
        return EngineConfig(
            allowed_namespaces=tuple(allowed_namespaces) or self.allowed_namespaces,
            registry_path=registry_path or self.registry_path,
            log_level=log_level or self.log_level,
        )

    def build_registry(self) -> ReferenceRegistry:
        """Load the configured registry, or the built-in one."""
        if self.registry_path:
            path = Path(self.registry_path)
            if not path.is_file():
                raise ConfigurationError(f"Registry file not found: {path}")
            return load_registry(path, self.allowed_namespaces or None)
        if self.effective_namespaces == (DEFAULT_NAMESPACE,):
            return default_registry()
        return ReferenceRegistry.from_definitions(BUILTIN_DEFINITIONS, self.effective_namespaces)

    def set_logging(self, verbose: bool = False) -> logging.Logger:
        """Setup logging based on configuration (DEBUG when verbose)."""
        return configure_cli_logging(self.log_level, verbose=verbose)


def _split_namespaces(value: str) -> tuple[str, ...]:
    return tuple(ns.strip() for ns in value.split(",") if ns.strip())
