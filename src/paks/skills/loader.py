"""SKILL.md reader and writer.

A SKILL.md file starts with ``---``, followed by YAML frontmatter, a
closing ``\\n---`` line and the free-form instruction body::

    ---
    name: my-skill
    description: Does something useful
    metadata:
      version: 0.1.0
    ---

    # My Skill
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from paks.skills.config import SKILL_FILE, Skill, SkillManifest
from paks.skills.errors import SkillLoadError, SkillNotFoundError, SkillParseError

logger = logging.getLogger(__name__)


def _split_frontmatter(content: str, path: Path) -> tuple[str, str]:
    """Split SKILL.md content into frontmatter YAML and markdown body.

    Leading and trailing whitespace is ignored. The frontmatter ends at the
    first ``\\n---`` after the opening marker, so horizontal rules in the
    body are preserved.

    Args:
        content: Raw file content.
        path: File path (for error messages).

    Returns:
        Tuple of (frontmatter_yaml, body). Both are stripped.

    Raises:
        SkillParseError: If the ``---`` delimiters are missing.
    """
    skill_name = path.parent.name or path.stem
    stripped = content.strip()

    if not stripped.startswith("---"):
        raise SkillParseError(
            name=skill_name,
            path=path,
            detail="SKILL.md must start with YAML frontmatter (---)",
        )

    rest = stripped[3:]
    end = rest.find("\n---")
    if end == -1:
        raise SkillParseError(
            name=skill_name,
            path=path,
            detail="frontmatter not properly closed (missing ---)",
        )

    return rest[:end].strip(), rest[end + 4 :].strip()


def _parse_yaml(yaml_str: str, path: Path) -> dict[str, Any]:
    """Parse the frontmatter block into a mapping.

    Raises:
        SkillParseError: If the YAML is invalid or not a mapping.
    """
    skill_name = path.parent.name or path.stem

    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as exc:
        detail = str(exc)
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            detail = (
                f"YAML syntax error at line {mark.line + 1}, column {mark.column + 1}: "
                f"{getattr(exc, 'problem', exc)}"
            )
        raise SkillParseError(name=skill_name, path=path, detail=detail) from exc

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise SkillParseError(
            name=skill_name,
            path=path,
            detail="Frontmatter must be a YAML mapping, got " + type(data).__name__,
        )

    return data


def parse_skill_md(content: str, path: Path) -> tuple[SkillManifest, str]:
    """Parse SKILL.md text into a manifest and instruction body.

    Args:
        content: Raw SKILL.md content.
        path: Path of the file the content came from (for error messages).

    Returns:
        Tuple of (manifest, instructions).

    Raises:
        SkillParseError: On bad delimiters, bad YAML, or fields of the wrong
            type (including a missing ``name`` or ``description``).
    """
    frontmatter_yaml, body = _split_frontmatter(content, path)
    data = _parse_yaml(frontmatter_yaml, path)

    try:
        manifest = SkillManifest.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'frontmatter'}: {err['msg']}"
            for err in exc.errors()
        )
        raise SkillParseError(
            name=path.parent.name or path.stem,
            path=path,
            detail=problems,
        ) from exc

    return manifest, body


def render_skill_md(manifest: SkillManifest, instructions: str) -> str:
    """Render a manifest and body back into SKILL.md text."""
    frontmatter = yaml.safe_dump(
        manifest.to_frontmatter(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"---\n{frontmatter}---\n\n{instructions}"


def has_skill_file(path: Path) -> bool:
    """Whether ``path`` is a directory containing a SKILL.md file."""
    return (path / SKILL_FILE).is_file()


def load_skill(path: str | Path) -> Skill:
    """Load a skill from its directory.

    Args:
        path: Skill directory (or a SKILL.md path inside one).

    Returns:
        ``Skill`` with the parsed manifest and instruction body.

    Raises:
        SkillNotFoundError: If there is no SKILL.md.
        SkillLoadError: On permission denied or other IO errors.
        SkillParseError: If the file cannot be parsed.
    """
    skill_dir = Path(path)
    if skill_dir.name == SKILL_FILE and skill_dir.is_file():
        skill_dir = skill_dir.parent
    skill_file = skill_dir / SKILL_FILE

    if not skill_file.is_file():
        raise SkillNotFoundError(name=skill_dir.name, path=skill_dir)

    try:
        content = skill_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SkillParseError(
            name=skill_dir.name,
            path=skill_file,
            detail=f"SKILL.md is not valid UTF-8 (invalid byte at offset {exc.start})",
        ) from exc
    except OSError as exc:
        raise SkillLoadError(name=skill_dir.name, path=skill_file, cause=exc) from exc

    manifest, instructions = parse_skill_md(content, skill_file)
    logger.debug("Loaded skill '%s' from %s", manifest.name, skill_dir)
    return Skill(path=skill_dir, manifest=manifest, instructions=instructions)


def save_skill(skill: Skill) -> Path:
    """Write a skill's manifest and instructions to its SKILL.md.

    Returns:
        Path of the written SKILL.md.

    Raises:
        SkillLoadError: If the file cannot be written.
    """
    skill_file = skill.skill_file
    content = render_skill_md(skill.manifest, skill.instructions)
    try:
        skill_file.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise SkillLoadError(name=skill.name, path=skill_file, cause=exc) from exc

    logger.debug("Saved %s", skill_file)
    return skill_file
