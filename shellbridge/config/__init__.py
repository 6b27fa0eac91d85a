"""Typed configuration providers."""

from .provider import ConfigProvider, CredentialConfig, EnvConfigProvider, GateConfig

__all__ = ["ConfigProvider", "CredentialConfig", "EnvConfigProvider", "GateConfig"]
