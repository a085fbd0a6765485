"""``paks`` command line interface.

Commands:
- paks create NAME: scaffold a new skill
- paks validate [PATH]: validate a skill's SKILL.md
- paks install SOURCE: install from the registry, git, or a local path
- paks publish [PATH]: tag and register a release
- paks list: list installed skills
- paks remove NAME: remove an installed skill
- paks search QUERY / paks info SOURCE: query the registry
- paks login / paks logout: manage the registry token
- paks agent {list,add,remove,default,show}: manage agent directories

Library errors are turned into ``click.ClickException`` (``Error: ...`` on
stderr, exit code 1) by ``PaksGroup``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
import httpx
import yaml
from rich.console import Console

from paks import __version__
from paks.cli.output import (
    render_agent,
    render_agents,
    render_pak,
    render_publish_plan,
    render_search_results,
    render_skill_info,
    render_skills,
    render_validation,
    skill_record,
)
from paks.cli.prompts import RichPrompter
from paks.config.settings import PaksSettings
from paks.config.user import (
    BUILTIN_AGENT_IDS,
    AgentConfig,
    UserConfig,
    load_config,
    save_config,
)
from paks.errors import ConfigurationError, PaksError, SourceNotFoundError
from paks.git import GitOps, SubprocessGit
from paks.install import Installer, InstallStatus, find_installed
from paks.materialize import remove_tree
from paks.observability import setup_logging
from paks.publish import Prompter, PublishOptions, Publisher
from paks.registry.client import RegistryClient
from paks.registry.errors import RegistryNotFoundError
from paks.skills.errors import SkillError, SkillValidationError
from paks.skills.discovery import list_installed
from paks.skills.loader import has_skill_file, load_skill
from paks.skills.scaffold import create_skill
from paks.skills.validator import validate_skill
from paks.sources.reference import SkillReference
from paks.versioning import BumpLevel

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """State shared by every command of one invocation.

    ``git``, ``transport`` and ``prompter`` can be replaced by passing an
    ``AppContext`` as ``obj`` when invoking the CLI programmatically.
    """

    git: GitOps = field(default_factory=SubprocessGit)
    transport: httpx.BaseTransport | None = None
    prompter: Prompter | None = None
    console: Console = field(default_factory=Console)
    settings: PaksSettings = field(default_factory=PaksSettings)
    config: UserConfig = field(default_factory=UserConfig.with_defaults)

    def get_prompter(self) -> Prompter:
        if self.prompter is None:
            self.prompter = RichPrompter(self.console)
        return self.prompter

    def registry(self, token: str | None = None) -> RegistryClient:
        """Client for the active registry, authenticated with the stored token."""
        return RegistryClient(
            self.config.registry_url(self.settings),
            token=token if token is not None else self.config.get_auth_token(),
            timeout=self.settings.request_timeout,
            transport=self.transport,
        )

    def save_config(self) -> None:
        save_config(self.config, self.settings.config_file)


pass_app = click.make_pass_decorator(AppContext)


class PaksGroup(click.Group):
    """Group that reports library errors as click errors."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except (PaksError, SkillError) as exc:
            logger.debug("Command failed", exc_info=True)
            raise click.ClickException(str(exc)) from exc
        except FileExistsError as exc:
            raise click.ClickException(str(exc)) from exc


@click.group(cls=PaksGroup)
@click.version_option(__version__, prog_name="paks")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Package manager for agent skills."""
    app = ctx.ensure_object(AppContext)

    log_config = app.settings.logging
    if verbose:
        log_config = log_config.model_copy(update={"level": "DEBUG"})
    setup_logging(log_config)
    app.config = load_config(app.settings.config_file)


# ── create / validate ───────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output directory.")
@click.option(
    "-t",
    "--template",
    type=click.Choice(["basic", "devops", "coding"]),
    default="basic",
    show_default=True,
)
@click.option("--with-scripts", is_flag=True, help="Create scripts/example.sh.")
@click.option("--with-references", is_flag=True, help="Create references/README.md.")
@click.option("--with-assets", is_flag=True, help="Create assets/.")
@pass_app
def create(
    app: AppContext,
    name: str,
    output: Path | None,
    template: str,
    with_scripts: bool,
    with_references: bool,
    with_assets: bool,
) -> None:
    """Create a new skill."""
    result = create_skill(
        name,
        output,
        template=template,
        with_scripts=with_scripts,
        with_references=with_references,
        with_assets=with_assets,
    )
    console = app.console
    console.print(f"[green]Created skill '{name}'[/green] in {result.skill.path}")
    console.print("  SKILL.md")
    for dirname in result.created_dirs:
        console.print(f"  {dirname}/")
    console.print()
    console.print("Next steps:")
    console.print(f"  1. Edit {result.skill.skill_file} to add your instructions")
    console.print(f"  2. Run 'paks validate {result.skill.path}' to check it")
    console.print("  3. Run 'paks publish' to share it")


@cli.command()
@click.argument("path", default=".", type=click.Path(path_type=Path))
@click.option("--strict", is_flag=True, help="Treat warnings as errors.")
@pass_app
def validate(app: AppContext, path: Path, strict: bool) -> None:
    """Validate a skill's SKILL.md."""
    skill = load_skill(path)
    app.console.print(f"Validating {skill.name}...")
    result = validate_skill(skill, strict=strict)
    render_validation(result, skill.name, app.console)
    if not result.valid:
        errors = result.errors + (result.warnings if strict else [])
        raise SkillValidationError(name=skill.name, errors=errors, path=skill.path)


# ── install / remove / list ─────────────────────────────────────────

_INSTALL_MESSAGES = {
    InstallStatus.INSTALLED: "Installed",
    InstallStatus.REINSTALLED: "Reinstalled",
    InstallStatus.ALREADY_INSTALLED: "Already installed:",
    InstallStatus.IN_PLACE: "Already in place:",
}


@cli.command()
@click.argument("source")
@click.option("-a", "--agent", help="Agent to install for.")
@click.option("-d", "--dir", "directory", type=click.Path(path_type=Path), help="Install directory.")
@click.option("--version", "version", help="Version for a registry reference.")
@click.option("-f", "--force", is_flag=True, help="Replace an existing install.")
@pass_app
def install(
    app: AppContext,
    source: str,
    agent: str | None,
    directory: Path | None,
    version: str | None,
    force: bool,
) -> None:
    """Install a skill from the registry, a git URL, or a local path.

    \b
    Examples:
        paks install acme/kubernetes-deploy
        paks install acme/kubernetes-deploy@1.2.0
        paks install https://github.com/acme/skills.git#tag=v1.0.0&path=skills/deploy
        paks install ./my-skill --agent claude-code
    """
    with app.registry() as client:
        installer = Installer(app.config, app.settings, git=app.git, registry=client)
        result = installer.install(
            source,
            agent=agent,
            directory=directory,
            version=version,
            force=force,
        )

    version_text = f" {result.version}" if result.version else ""
    app.console.print(
        f"[green]{_INSTALL_MESSAGES[result.status]}[/green] {result.name}{version_text}",
        highlight=False,
    )
    app.console.print(f"  Location: {result.target}", highlight=False)


def _target_dirs(app: AppContext, agent: str | None, all_agents: bool) -> list[tuple[str, Path]]:
    if all_agents:
        seen: set[Path] = set()
        dirs: list[tuple[str, Path]] = []
        for agent_id, agent_config in app.config.agents.items():
            if agent_config.skills_dir not in seen:
                seen.add(agent_config.skills_dir)
                dirs.append((agent_id, agent_config.skills_dir))
        return dirs

    label = agent or app.config.default_agent or "default"
    return [(label, app.config.resolve_install_dir(app.settings, agent=agent))]


@cli.command(name="list")
@click.option("-a", "--agent", help="Agent whose skills to list.")
@click.option("--all", "all_agents", is_flag=True, help="List skills for every agent.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    show_default=True,
)
@pass_app
def list_(app: AppContext, agent: str | None, all_agents: bool, fmt: str) -> None:
    """List installed skills."""
    targets = _target_dirs(app, agent, all_agents)

    if not all_agents:
        label, skills_dir = targets[0]
        render_skills(list_installed(skills_dir), app.console, fmt=fmt, title=f"{label} ({skills_dir})")
        return

    if fmt == "table":
        for label, skills_dir in targets:
            skills = list_installed(skills_dir)
            if skills:
                render_skills(skills, app.console, title=f"{label} ({skills_dir})")
        return

    data = {
        label: [skill_record(s) for s in list_installed(skills_dir)]
        for label, skills_dir in targets
    }
    if fmt == "json":
        app.console.print_json(json.dumps(data))
    else:
        app.console.print(yaml.safe_dump(data, sort_keys=False), markup=False, highlight=False)


@cli.command()
@click.argument("name")
@click.option("-a", "--agent", help="Agent to remove the skill from.")
@click.option("--all", "all_agents", is_flag=True, help="Remove from every agent.")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@pass_app
def remove(app: AppContext, name: str, agent: str | None, all_agents: bool, yes: bool) -> None:
    """Remove an installed skill."""
    found = [
        path
        for _, skills_dir in _target_dirs(app, agent, all_agents)
        if (path := find_installed(name, skills_dir)) is not None
    ]
    if not found:
        raise SourceNotFoundError(f"Skill '{name}' is not installed.", source=name)

    for path in found:
        if not has_skill_file(path):
            app.console.print(f"[yellow]Warning:[/yellow] {path} does not contain a SKILL.md")

    if not yes:
        listing = ", ".join(str(p) for p in found)
        if not app.get_prompter().confirm(f"Remove {name} from {listing}?", default=False):
            app.console.print("Aborted.")
            return

    for path in found:
        remove_tree(path)
        app.console.print(f"[green]Removed[/green] {path}", highlight=False)


# ── publish ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("path", default=".", type=click.Path(path_type=Path))
@click.option("--tag", help="Register this existing tag.")
@click.option(
    "--bump",
    type=click.Choice([level.value for level in BumpLevel]),
    help="Create the next tag at this level without asking.",
)
@click.option("-y", "--yes", is_flag=True, help="Non-interactive; assume yes.")
@click.option("--dry-run", is_flag=True, help="Show what would happen.")
@click.option("--skip-validation", is_flag=True, help="Do not validate SKILL.md.")
@click.option("--strict", is_flag=True, help="Treat validation warnings as errors.")
@click.option(
    "--sync-version/--no-sync-version",
    default=True,
    show_default=True,
    help="Write the new version into SKILL.md before tagging.",
)
@pass_app
def publish(
    app: AppContext,
    path: Path,
    tag: str | None,
    bump: str | None,
    yes: bool,
    dry_run: bool,
    skip_validation: bool,
    strict: bool,
    sync_version: bool,
) -> None:
    """Publish a skill: tag a release and register it with the registry."""
    options = PublishOptions(
        skip_validation=skip_validation,
        strict=strict,
        dry_run=dry_run,
        yes=yes,
        tag=tag,
        bump=BumpLevel(bump) if bump else None,
        sync_version=sync_version,
    )
    publisher = Publisher(
        app.config,
        git=app.git,
        prompter=app.get_prompter(),
        registry_factory=lambda token: app.registry(token),
        settings=app.settings,
    )
    result = publisher.publish(path, options)

    plan = result.plan
    if result.aborted or plan is None:
        app.console.print("Aborted.")
        return

    if result.dry_run:
        render_publish_plan(plan, app.console)
        app.console.print("[green]Dry run complete.[/green]")
        return

    if result.synced_version:
        app.console.print(f"Updated SKILL.md version to {result.synced_version}", highlight=False)
    app.console.print(
        f"[green]Published[/green] {plan.skill_name} @ {plan.tag} (path: {plan.path})",
        highlight=False,
    )


# ── registry queries ────────────────────────────────────────────────


@cli.command()
@click.argument("query")
@click.option("-l", "--limit", type=click.IntRange(1, 100), default=10, show_default=True)
@pass_app
def search(app: AppContext, query: str, limit: int) -> None:
    """Search the registry."""
    with app.registry() as client:
        paks = client.search(query, limit=limit)
    render_search_results(paks, app.console)


@cli.command()
@click.argument("source")
@click.option("--full", is_flag=True, help="Also print the instructions.")
@pass_app
def info(app: AppContext, source: str, full: bool) -> None:
    """Show a local skill or a registry pak."""
    local = Path(source).expanduser()
    if local.is_dir() and has_skill_file(local):
        render_skill_info(load_skill(local), app.console, full=full)
        return

    reference = SkillReference.parse(source)
    with app.registry() as client:
        results = client.search(owner=reference.account, name=reference.name)

    match = next(
        (
            pak
            for pak in results
            if pak.owner_name == reference.account and pak.name == reference.name
        ),
        None,
    )
    if match is None:
        raise RegistryNotFoundError(f"Pak '{reference.account}/{reference.name}' not found")
    render_pak(match, app.console)


# ── auth ────────────────────────────────────────────────────────────


@cli.command()
@click.option("--token", help="API token (prompted for when omitted).")
@pass_app
def login(app: AppContext, token: str | None) -> None:
    """Store a registry API token."""
    if not token:
        prompter = app.get_prompter()
        if isinstance(prompter, RichPrompter):
            token = prompter.secret("API token")
        else:
            token = prompter.text("API token")
    if not token:
        raise click.ClickException("No token given.")

    with app.registry(token) as client:
        user = client.get_current_user()

    app.config.set_auth_token(token)
    app.save_config()
    app.console.print(f"[green]Logged in as[/green] {user.username}", highlight=False)


@cli.command()
@pass_app
def logout(app: AppContext) -> None:
    """Remove the stored registry token."""
    if app.config.clear_auth_token():
        app.save_config()
        app.console.print("Logged out.")
    else:
        app.console.print("Not logged in.")


# ── agents ──────────────────────────────────────────────────────────


@cli.group(cls=PaksGroup)
def agent() -> None:
    """Manage agents and their skills directories."""


@agent.command(name="list")
@pass_app
def agent_list(app: AppContext) -> None:
    """List configured agents."""
    render_agents(app.config, app.console)


@agent.command(name="add")
@click.argument("name")
@click.option("-d", "--dir", "directory", required=True, type=click.Path(path_type=Path))
@click.option("--description", help="Short description.")
@pass_app
def agent_add(app: AppContext, name: str, directory: Path, description: str | None) -> None:
    """Add (or update) an agent."""
    skills_dir = directory.expanduser()
    try:
        skills_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Cannot create skills directory {skills_dir}", cause=exc, path=skills_dir
        ) from exc

    app.config.agents[name] = AgentConfig(
        name=name, skills_dir=skills_dir, description=description
    )
    app.save_config()
    app.console.print(f"[green]Added agent[/green] {name} -> {skills_dir}", highlight=False)


@agent.command(name="remove")
@click.argument("name")
@pass_app
def agent_remove(app: AppContext, name: str) -> None:
    """Remove a custom agent."""
    if name in BUILTIN_AGENT_IDS:
        raise ConfigurationError(f"Cannot remove built-in agent '{name}'", config_key=name)
    if name not in app.config.agents:
        raise ConfigurationError(f"Agent '{name}' not found", config_key=name)

    del app.config.agents[name]
    if app.config.default_agent == name:
        app.config.default_agent = None
    app.save_config()
    app.console.print(f"Removed agent {name}")


@agent.command(name="default")
@click.argument("name")
@pass_app
def agent_default(app: AppContext, name: str) -> None:
    """Set the default agent."""
    if name not in app.config.agents:
        raise ConfigurationError(f"Agent '{name}' not found", config_key=name)
    app.config.default_agent = name
    app.save_config()
    app.console.print(f"Default agent set to {name}")


@agent.command(name="show")
@click.argument("name", required=False)
@pass_app
def agent_show(app: AppContext, name: str | None) -> None:
    """Show an agent (the default agent when NAME is omitted)."""
    agent_id = name or app.config.default_agent
    if agent_id is None:
        raise ConfigurationError("No default agent configured")
    if agent_id not in app.config.agents:
        raise ConfigurationError(f"Agent '{agent_id}' not found", config_key=agent_id)
    render_agent(agent_id, app.config, app.console)


def main() -> None:
    cli()
