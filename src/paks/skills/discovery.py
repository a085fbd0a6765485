"""Discovery of skills installed in a skills directory.

Installed skills live one level below the skills directory, either as
``<name>/`` (git and local installs) or ``<owner>--<name>/`` (registry
installs). Entries that cannot be loaded are logged and skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path

from paks.skills.config import Skill
from paks.skills.errors import SkillError
from paks.skills.loader import load_skill

logger = logging.getLogger(__name__)


def list_installed(skills_dir: Path) -> list[Skill]:
    """Load every skill directly inside ``skills_dir``.

    Args:
        skills_dir: Agent skills directory.

    Returns:
        Loaded skills sorted by name. Empty when the directory is missing.
    """
    skills: list[Skill] = []

    if not skills_dir.exists():
        logger.debug("Skills directory does not exist, skipping: %s", skills_dir)
        return skills

    if not skills_dir.is_dir():
        logger.warning("Skills path is not a directory, skipping: %s", skills_dir)
        return skills

    try:
        entries = sorted(skills_dir.iterdir())
    except PermissionError:
        logger.warning("Permission denied scanning directory: %s", skills_dir)
        return skills

    for entry in entries:
        if not entry.is_dir():
            continue
        try:
            skills.append(load_skill(entry))
        except SkillError as exc:
            logger.info("Skipping %s: %s", entry, exc)

    skills.sort(key=lambda skill: skill.name)
    return skills


def count_installed(skills_dir: Path) -> int:
    """Number of sub-directories in ``skills_dir`` (0 when missing)."""
    if not skills_dir.is_dir():
        return 0
    return sum(1 for entry in skills_dir.iterdir() if entry.is_dir())
