"""Rich rendering for CLI output.

Each function prints to the given ``Console``. Tables use ``rich.table``
and free text uses console markup; nothing here reads input.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

from paks.config.user import UserConfig
from paks.publish import PublishPlan
from paks.registry.models import Pak
from paks.skills.config import Skill, ValidationResult
from paks.skills.discovery import count_installed


def skill_record(skill: Skill) -> dict[str, Any]:
    """Serializable summary of an installed skill."""
    return {
        "name": skill.name,
        "version": skill.version,
        "description": skill.manifest.description,
        "path": str(skill.path),
    }


def render_skills(
    skills: Sequence[Skill],
    console: Console,
    *,
    fmt: str = "table",
    title: str | None = None,
) -> None:
    """Print installed skills as a table, JSON, or YAML."""
    if fmt == "json":
        console.print_json(json.dumps([skill_record(s) for s in skills]))
        return
    if fmt == "yaml":
        console.print(
            yaml.safe_dump([skill_record(s) for s in skills], sort_keys=False),
            markup=False,
            highlight=False,
        )
        return

    if not skills:
        console.print(f"No skills installed{f' in {title}' if title else ''}.")
        return

    table = Table(title=title)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Version")
    table.add_column("Description")
    for skill in skills:
        table.add_row(skill.name, skill.version, _truncate(skill.manifest.description, 60))
    console.print(table)


def render_search_results(paks: Sequence[Pak], console: Console) -> None:
    if not paks:
        console.print("No paks found.")
        return

    table = Table()
    table.add_column("Pak", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Downloads", justify="right")
    table.add_column("Tags")
    for pak in paks:
        table.add_row(
            pak.full_name,
            _truncate(pak.description or "", 50),
            f"{pak.total_downloads:,}",
            ", ".join(pak.tags),
        )
    console.print(table)
    console.print(f"{len(paks)} result(s)")


def render_pak(pak: Pak, console: Console) -> None:
    console.print(f"[bold]{pak.full_name}[/bold]")
    if pak.description:
        console.print(pak.description, markup=False)
    console.print()
    _field(console, "Downloads", f"{pak.total_downloads:,}")
    if pak.visibility:
        _field(console, "Visibility", pak.visibility)
    if pak.repository_url:
        _field(console, "Repository", pak.repository_url)
    if pak.tags:
        _field(console, "Tags", ", ".join(pak.tags))
    console.print()
    console.print(f"Install with: paks install {pak.full_name}", markup=False)


def render_skill_info(skill: Skill, console: Console, *, full: bool = False) -> None:
    """Metadata, dependencies and structure of a local skill."""
    manifest = skill.manifest
    console.print(f"[bold]{skill.name}[/bold] {skill.version}")
    console.print(manifest.description, markup=False)
    console.print()

    if manifest.license:
        _field(console, "License", manifest.license)
    if manifest.compatibility:
        _field(console, "Compatibility", manifest.compatibility)
    if manifest.authors:
        _field(console, "Authors", ", ".join(manifest.authors))
    if manifest.repository:
        _field(console, "Repository", manifest.repository)
    if manifest.homepage:
        _field(console, "Homepage", manifest.homepage)
    if manifest.keywords:
        _field(console, "Keywords", ", ".join(manifest.keywords))
    if manifest.categories:
        _field(console, "Categories", ", ".join(manifest.categories))

    if manifest.dependencies:
        console.print()
        console.print("[bold]Dependencies[/bold]")
        for dep in manifest.dependencies:
            detail = dep.version or dep.git or dep.path or "*"
            console.print(f"  {dep.name} ({detail})", markup=False)

    console.print()
    console.print("[bold]Structure[/bold]")
    console.print("  SKILL.md")
    for dirname, present in (
        ("scripts", skill.has_scripts()),
        ("references", skill.has_references()),
        ("assets", skill.has_assets()),
    ):
        if present:
            console.print(f"  {dirname}/")

    if full and skill.instructions:
        console.print()
        console.print(skill.instructions, markup=False, highlight=False)


def render_validation(result: ValidationResult, name: str, console: Console) -> None:
    for error in result.errors:
        console.print(f"  [red]x[/red] {error}")
    for warning in result.warnings:
        console.print(f"  [yellow]![/yellow] {warning}")
    for dirname, count in result.directories.items():
        console.print(f"  {dirname}/: {count} file(s)")
    if result.valid:
        console.print(f"[green]Skill '{name}' is valid.[/green]")


def render_publish_plan(plan: PublishPlan, console: Console) -> None:
    console.print("[bold][Dry run][/bold] Would execute:", highlight=False)
    _field(console, "Repository", plan.repository)
    _field(console, "Branch", plan.branch)
    _field(console, "Path", plan.path)
    _field(console, "Tag", plan.tag)
    if plan.create_tag:
        _field(console, "Action", "Create and push new tag, then register with registry")
    else:
        _field(console, "Action", "Register existing tag with registry")


def render_agents(config: UserConfig, console: Console) -> None:
    table = Table()
    table.add_column("Agent", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Skills directory")
    table.add_column("Default", justify="center")
    for agent_id, agent in config.agents.items():
        table.add_row(
            agent_id,
            agent.name,
            str(agent.skills_dir),
            "*" if agent_id == config.default_agent else "",
        )
    console.print(table)


def render_agent(agent_id: str, config: UserConfig, console: Console) -> None:
    agent = config.agents[agent_id]
    suffix = " (default)" if agent_id == config.default_agent else ""
    console.print(f"[bold]{agent_id}[/bold]{suffix}")
    _field(console, "Name", agent.name)
    if agent.description:
        _field(console, "Description", agent.description)
    _field(console, "Skills directory", str(agent.skills_dir))
    _field(console, "Installed skills", str(count_installed(Path(agent.skills_dir))))


def _field(console: Console, label: str, value: str) -> None:
    console.print(f"  {label}: ", end="")
    console.print(value, markup=False, highlight=False)


def _truncate(text: str, width: int) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."
