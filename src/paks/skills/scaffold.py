"""Scaffolding for new skills."""

from __future__ import annotations

import logging
import stat
from dataclasses import dataclass, field
from pathlib import Path

from paks.skills.config import DEFAULT_VERSION, Skill, SkillManifest
from paks.skills.errors import SkillValidationError
from paks.skills.loader import save_skill
from paks.skills.validator import validate_manifest

logger = logging.getLogger(__name__)

_TEMPLATE_DESCRIPTIONS: dict[str, str] = {
    "basic": "A skill that provides {name} functionality",
    "devops": "DevOps automation skill for {name}",
    "coding": "Coding assistance skill for {name}",
}

_EXAMPLE_SCRIPT = '#!/bin/bash\n# Example script for the skill\necho "Hello from the skill!"\n'
_REFERENCES_README = "# References\n\nAdd reference documentation here.\n"


@dataclass
class ScaffoldResult:
    """Outcome of ``create_skill``.

    Attributes:
        skill: The skill written to disk.
        created_dirs: Optional sub-directories that were created.
    """

    skill: Skill
    created_dirs: list[str] = field(default_factory=list)


def template_description(name: str, template: str) -> str:
    """Default description for a template; unknown templates get a generic one."""
    return _TEMPLATE_DESCRIPTIONS.get(template, "A skill for {name}").format(name=name)


def new_skill(path: Path, name: str, description: str) -> Skill:
    """Build an in-memory skill with the default manifest and body."""
    manifest = SkillManifest(
        name=name,
        description=description,
        license="MIT",
        metadata={"version": DEFAULT_VERSION},
    )
    instructions = (
        f"# {name}\n\n"
        "## When to use this skill\n\n"
        "Describe when this skill should be activated.\n\n"
        "## Instructions\n\n"
        "Add your instructions here.\n"
    )
    return Skill(path=path, manifest=manifest, instructions=instructions)


def create_skill(
    name: str,
    output: str | Path | None = None,
    *,
    template: str = "basic",
    with_scripts: bool = False,
    with_references: bool = False,
    with_assets: bool = False,
) -> ScaffoldResult:
    """Create a new skill directory from a template.

    Args:
        name: Skill name (validated against the naming rules).
        output: Output directory, defaults to ``./<name>``.
        template: Template controlling the default description.
        with_scripts: Create ``scripts/example.sh``.
        with_references: Create ``references/README.md``.
        with_assets: Create ``assets/.gitkeep``.

    Raises:
        FileExistsError: If the output directory already exists.
        SkillValidationError: If ``name`` is not a valid skill name.
    """
    output_dir = Path(output) if output is not None else Path(name)
    if output_dir.exists():
        raise FileExistsError(
            f"Directory '{output_dir}' already exists. Use a different name or remove it first."
        )

    skill = new_skill(output_dir, name, template_description(name, template))
    try:
        validate_manifest(skill.manifest, output_dir)
    except SkillValidationError:
        logger.debug("Refusing to scaffold invalid skill name %r", name)
        raise

    output_dir.mkdir(parents=True)
    save_skill(skill)

    created: list[str] = []
    if with_scripts:
        scripts_dir = output_dir / "scripts"
        scripts_dir.mkdir()
        script = scripts_dir / "example.sh"
        script.write_text(_EXAMPLE_SCRIPT, encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        created.append("scripts")

    if with_references:
        refs_dir = output_dir / "references"
        refs_dir.mkdir()
        (refs_dir / "README.md").write_text(_REFERENCES_README, encoding="utf-8")
        created.append("references")

    if with_assets:
        assets_dir = output_dir / "assets"
        assets_dir.mkdir()
        (assets_dir / ".gitkeep").write_text("", encoding="utf-8")
        created.append("assets")

    logger.info("Created skill '%s' in %s", name, output_dir)
    return ScaffoldResult(skill=skill, created_dirs=created)
