"""Classification of user-supplied skill sources.

A source string is one of:

- a git URL (``https://``, ``http://``, ``git@``, ``ssh://``), optionally
  followed by a ``#key=value&...`` fragment with ``ref``/``tag``/``branch``
  and ``path`` keys;
- a local path;
- a registry reference ``owner/name[@version]``.

``detect_source_type`` never fails: input it cannot place is treated as a
local path and reported as missing later by the installer.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from paks.errors import ReferenceParseError
from paks.skills.config import SKILL_FILE
from paks.sources.reference import SkillReference

logger = logging.getLogger(__name__)

_GIT_PREFIXES = ("https://", "http://", "git@", "ssh://")
_LOCAL_PREFIXES = ("./", "../", "/")
_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")
_REF_KEYS = frozenset({"ref", "tag", "branch"})


@dataclass(frozen=True)
class RegistrySource:
    """A registry reference.

    ``raw`` is kept verbatim; ``reference`` parses it on access so that a
    string classified by the fallback rule reports its syntax error when
    the install is resolved rather than during classification.
    """

    raw: str

    @property
    def reference(self) -> SkillReference:
        return SkillReference.parse(self.raw)


@dataclass(frozen=True)
class GitSource:
    """A git repository, with optional ref and sub-path."""

    url: str
    ref: str | None = None
    subpath: str | None = None


@dataclass(frozen=True)
class LocalSource:
    """A path on the local filesystem, as given."""

    path: str


SourceDescriptor = RegistrySource | GitSource | LocalSource


def parse_git_source(raw: str) -> GitSource:
    """Split a git URL at the first ``#`` and read its fragment.

    ``ref``, ``tag`` and ``branch`` all set the ref; ``path`` sets the
    sub-path. Repeated keys keep the last value. Unknown keys are ignored.
    """
    url, sep, fragment = raw.partition("#")
    ref: str | None = None
    subpath: str | None = None

    if sep:
        for pair in fragment.split("&"):
            key, _, value = pair.partition("=")
            if not value:
                continue
            if key in _REF_KEYS:
                ref = value
            elif key == "path":
                subpath = value
            else:
                logger.debug("Ignoring unknown git fragment key %r in %s", key, raw)

    return GitSource(url=url, ref=ref, subpath=subpath)


def is_git_url(raw: str) -> bool:
    return raw.startswith(_GIT_PREFIXES)


def _looks_like_path(raw: str) -> bool:
    return raw.startswith(_LOCAL_PREFIXES) or bool(_DRIVE_LETTER.match(raw))


def detect_source_type(raw: str, cwd: Path | None = None) -> SourceDescriptor:
    """Classify a source string.

    Args:
        raw: Source as typed by the user.
        cwd: Directory that relative paths are resolved against (defaults
            to the process working directory).

    Returns:
        The source descriptor.
    """
    if is_git_url(raw):
        source: SourceDescriptor = parse_git_source(raw)
    elif _looks_like_path(raw):
        source = LocalSource(raw)
    elif _is_local_skill(raw, cwd):
        source = LocalSource(raw)
    else:
        try:
            SkillReference.parse(raw)
        except ReferenceParseError:
            if "/" in raw and "://" not in raw:
                # Still registry-shaped; the parse error surfaces on resolution.
                source = RegistrySource(raw)
            else:
                source = LocalSource(raw)
        else:
            source = RegistrySource(raw)

    logger.debug("Classified %r as %s", raw, type(source).__name__)
    return source


def _is_local_skill(raw: str, cwd: Path | None) -> bool:
    candidate = (cwd or Path.cwd()) / raw
    try:
        return candidate.is_dir() and (candidate / SKILL_FILE).is_file()
    except OSError:
        return False
