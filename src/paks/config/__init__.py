"""Configuration system for paks.

Main exports:
- PaksSettings: Environment-driven process settings
- LoggingConfig: Logging configuration
- UserConfig: Persisted agents, registries and tokens
"""

from paks.config.logging_config import LoggingConfig
from paks.config.settings import PaksSettings
from paks.config.user import (
    BUILTIN_AGENT_IDS,
    DEFAULT_REGISTRY_URL,
    AgentConfig,
    RegistryConfig,
    UserConfig,
    builtin_agents,
    load_config,
    save_config,
)

__all__ = [
    "BUILTIN_AGENT_IDS",
    "DEFAULT_REGISTRY_URL",
    "AgentConfig",
    "LoggingConfig",
    "PaksSettings",
    "RegistryConfig",
    "UserConfig",
    "builtin_agents",
    "load_config",
    "save_config",
]
