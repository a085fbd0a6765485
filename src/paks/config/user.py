"""User configuration: agents, registries, and auth tokens.

Stored as YAML at ``PaksSettings.config_file``::

    default_agent: claude-code
    default_registry: paks
    agents:
      my-agent:
        name: my-agent
        skills_dir: /home/me/agent/skills
    registries:
      paks:
        url: https://apiv2.stakpak.dev
        token: ...

Built-in agents are merged in on load (user entries win) and are only
written back if the user changed them.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from paks.config.settings import PaksSettings
from paks.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_NAME = "paks"
DEFAULT_REGISTRY_URL = "https://apiv2.stakpak.dev"
DEFAULT_AGENT = "stakpak"


class AgentConfig(BaseModel):
    """An agent tool and the directory it reads skills from."""

    name: str
    skills_dir: Path
    description: str | None = None

    @field_validator("skills_dir", mode="after")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()


class RegistryConfig(BaseModel):
    """A registry endpoint and its stored API token."""

    url: str
    token: str | None = None


def builtin_agents() -> dict[str, AgentConfig]:
    """Agents known out of the box, in display order."""
    home = Path.home()
    config_home = home / ".config"
    return {
        "stakpak": AgentConfig(
            name="Stakpak",
            skills_dir=home / ".stakpak" / "skills",
            description="Stakpak agent",
        ),
        "claude-code": AgentConfig(
            name="Claude Code",
            skills_dir=home / ".claude" / "skills",
            description="Anthropic's Claude Code agent",
        ),
        "cursor": AgentConfig(
            name="Cursor",
            skills_dir=home / ".cursor" / "skills",
            description="Cursor AI editor",
        ),
        "vscode": AgentConfig(
            name="VS Code",
            skills_dir=home / ".vscode" / "skills",
            description="VS Code with GitHub Copilot",
        ),
        "copilot": AgentConfig(
            name="GitHub Copilot",
            skills_dir=config_home / "github-copilot" / "skills",
            description="GitHub Copilot standalone",
        ),
        "goose": AgentConfig(
            name="Goose",
            skills_dir=config_home / "goose" / "skills",
            description="Block's Goose agent",
        ),
        "opencode": AgentConfig(
            name="OpenCode",
            skills_dir=config_home / "opencode" / "skills",
            description="OpenCode AI agent",
        ),
    }


BUILTIN_AGENT_IDS = frozenset(builtin_agents())


class UserConfig(BaseModel):
    """Persisted user configuration.

    Attributes:
        default_agent: Agent used when ``--agent`` is not given.
        default_registry: Registry entry used for API calls and tokens.
        agents: Agent id to agent configuration.
        registries: Registry id to registry configuration.
    """

    default_agent: str | None = None
    default_registry: str | None = None
    agents: dict[str, AgentConfig] = Field(default_factory=dict)
    registries: dict[str, RegistryConfig] = Field(default_factory=dict)

    @classmethod
    def with_defaults(cls) -> UserConfig:
        """Configuration used when no config file exists."""
        return cls(default_agent=DEFAULT_AGENT, agents=builtin_agents())

    # -- agents ----------------------------------------------------------

    def get_agent(self, agent_id: str) -> AgentConfig | None:
        return self.agents.get(agent_id)

    def get_default_agent(self) -> AgentConfig | None:
        if self.default_agent is None:
            return None
        return self.agents.get(self.default_agent)

    def resolve_install_dir(
        self,
        settings: PaksSettings,
        *,
        directory: str | Path | None = None,
        agent: str | None = None,
    ) -> Path:
        """Directory to install into.

        Precedence: explicit ``directory``, then the named agent's directory,
        then the default agent's directory, then ``settings.skills_dir``.
        An unknown agent name falls back to ``settings.skills_dir``.
        """
        if directory is not None:
            return Path(directory).expanduser()

        if agent is not None:
            agent_config = self.get_agent(agent)
            if agent_config is not None:
                return agent_config.skills_dir
            logger.warning(
                "Agent '%s' is not configured; using %s",
                agent,
                settings.skills_dir,
            )
            return settings.skills_dir

        default = self.get_default_agent()
        if default is not None:
            return default.skills_dir
        return settings.skills_dir

    # -- registries ------------------------------------------------------

    @property
    def registry_name(self) -> str:
        return self.default_registry or DEFAULT_REGISTRY_NAME

    def active_registry(self) -> RegistryConfig:
        registry = self.registries.get(self.registry_name)
        if registry is None:
            registry = RegistryConfig(url=DEFAULT_REGISTRY_URL)
        return registry

    def registry_url(self, settings: PaksSettings) -> str:
        return settings.registry_url or self.active_registry().url

    def get_auth_token(self) -> str | None:
        return self.active_registry().token

    def set_auth_token(self, token: str) -> None:
        registry = self.active_registry()
        self.registries[self.registry_name] = registry.model_copy(update={"token": token})

    def clear_auth_token(self) -> bool:
        """Drop the stored token. Returns whether one was present."""
        registry = self.registries.get(self.registry_name)
        if registry is None or registry.token is None:
            return False
        self.registries[self.registry_name] = registry.model_copy(update={"token": None})
        return True


def load_config(path: Path) -> UserConfig:
    """Load the user configuration, merging in built-in agents.

    A missing file yields ``UserConfig.with_defaults()``.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return UserConfig.with_defaults()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            f"Failed to read config from {path}",
            cause=exc,
            path=path,
        ) from exc

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a YAML mapping",
            path=path,
        )

    try:
        config = UserConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Failed to parse config from {path}",
            cause=exc,
            path=path,
        ) from exc

    for agent_id, agent in builtin_agents().items():
        config.agents.setdefault(agent_id, agent)

    return config


def save_config(config: UserConfig, path: Path) -> None:
    """Write the configuration, omitting unmodified built-in agents.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    builtins = builtin_agents()
    agents = {
        agent_id: agent.model_dump(mode="json", exclude_none=True)
        for agent_id, agent in config.agents.items()
        if builtins.get(agent_id) != agent
    }
    data = {
        "default_agent": config.default_agent,
        "default_registry": config.default_registry,
        "agents": agents,
        "registries": {
            name: registry.model_dump(mode="json", exclude_none=True)
            for name, registry in config.registries.items()
        },
    }

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(
            f"Failed to write config to {path}",
            cause=exc,
            path=path,
        ) from exc

    logger.debug("Saved config to %s", path)
