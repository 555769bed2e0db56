"""Tests for engine configuration."""

import logging

import pytest

from rtschema.config import EngineConfig
from rtschema.exceptions import ConfigurationError
from rtschema.registry.builtins import DEFAULT_NAMESPACE, default_registry

NS = "https://example.test/types/"


def test_defaults(monkeypatch):
    monkeypatch.delenv("RTSCHEMA_ALLOWED_NAMESPACES", raising=False)
    monkeypatch.delenv("RTSCHEMA_REGISTRY", raising=False)
    monkeypatch.delenv("RTSCHEMA_LOG_LEVEL", raising=False)
    config = EngineConfig.from_env()
    assert config.allowed_namespaces == ()
    assert config.effective_namespaces == (DEFAULT_NAMESPACE,)
    assert config.registry_path == ""
    assert config.log_level == "WARNING"


def test_from_env(monkeypatch):
    monkeypatch.setenv("RTSCHEMA_ALLOWED_NAMESPACES", f"{NS}, https://other.example/ ,")
    monkeypatch.setenv("RTSCHEMA_REGISTRY", "/etc/rtschema/registry.yaml")
    monkeypatch.setenv("RTSCHEMA_LOG_LEVEL", "debug")
    config = EngineConfig.from_env()
    assert config.allowed_namespaces == (NS, "https://other.example/")
    assert config.registry_path == "/etc/rtschema/registry.yaml"
    assert config.log_level == "debug"


def test_overrides_replace_only_given_values():
    config = EngineConfig(allowed_namespaces=(NS,), registry_path="a.yaml", log_level="INFO")
    updated = config.with_overrides(registry_path="b.yaml")
    assert updated.allowed_namespaces == (NS,)
    assert updated.registry_path == "b.yaml"
    assert updated.log_level == "INFO"
    assert config.with_overrides(allowed_namespaces=["https://x.example/"]).allowed_namespaces == (
        "https://x.example/",
    )


def test_default_config_uses_builtin_registry():
    assert EngineConfig().build_registry() is default_registry()


def test_custom_namespaces_rebuild_builtin_registry():
    registry = EngineConfig(allowed_namespaces=(NS,)).build_registry()
    assert registry.allowed_namespaces == (NS,)
    assert not registry.is_allowed("https://radapp.io/schemas/v1#RecipeStatus")
    assert "https://radapp.io/schemas/v1#RecipeStatus" in registry


def test_missing_registry_file():
    with pytest.raises(ConfigurationError):
        EngineConfig(registry_path="/nonexistent/registry.yaml").build_registry()


def test_unknown_log_level():
    with pytest.raises(ConfigurationError):
        EngineConfig(log_level="CHATTY").set_logging()


def test_set_logging_applies_level():
    logger = EngineConfig(log_level="info").set_logging()
    assert logger.name == "rtschema"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2
    assert not logger.propagate


def test_verbose_forces_debug():
    logger = EngineConfig(log_level="ERROR").set_logging(verbose=True)
    assert logger.level == logging.DEBUG
    assert "%(asctime)s" in logger.handlers[0].formatter._fmt


def test_reconfiguring_replaces_handlers():
    EngineConfig().set_logging()
    logger = EngineConfig().set_logging()
    assert len(logger.handlers) == 2
