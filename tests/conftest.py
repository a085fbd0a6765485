"""Shared test fixtures and configuration for paks tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from paks.config.settings import PaksSettings
from paks.config.user import UserConfig
from paks.testing import FakeGit

_SKILL_MD = """\
---
name: {name}
description: {description}
license: MIT
metadata:
  version: {version}
---

# {name}

Instructions for {name}.
"""


def write_skill(
    parent: Path,
    name: str = "sample-skill",
    *,
    version: str = "1.0.0",
    description: str = "A sample skill used throughout the test suite",
    dirname: str | None = None,
) -> Path:
    """Create ``parent/<dirname or name>/SKILL.md`` and return the directory."""
    skill_dir = parent / (dirname or name)
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(
        _SKILL_MD.format(name=name, description=description, version=version),
        encoding="utf-8",
    )
    return skill_dir


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``HOME`` into the test's tmp dir and clear ``PAKS_*`` variables.

    Built-in agent directories and the default config file live under the
    home directory, so no test touches the real one.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", home.as_posix())
    monkeypatch.setenv("USERPROFILE", home.as_posix())
    for key in (
        "PAKS_CONFIG_FILE",
        "PAKS_SKILLS_DIR",
        "PAKS_REGISTRY_URL",
        "PAKS_REQUEST_TIMEOUT",
        "PAKS_LOGGING__LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return home


@pytest.fixture(autouse=True)
def reset_paks_logger() -> Iterator[None]:
    """Undo ``setup_logging`` so caplog keeps seeing ``paks`` records."""
    yield
    logger = logging.getLogger("paks")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def settings(tmp_path: Path) -> PaksSettings:
    """Settings with config and skills directories inside tmp_path."""
    return PaksSettings(
        config_file=tmp_path / "config" / "config.yaml",
        skills_dir=tmp_path / "default-skills",
        registry_url="https://registry.test",
    )


@pytest.fixture
def user_config() -> UserConfig:
    """Defaults plus a stored token."""
    config = UserConfig.with_defaults()
    config.set_auth_token("secret-token")
    return config


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def make_skill():
    """Factory fixture wrapping ``write_skill``."""
    return write_skill


@pytest.fixture
def skill_dir(tmp_path: Path) -> Path:
    """A valid skill at ``tmp_path/src/sample-skill``."""
    return write_skill(tmp_path / "src")


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    return tmp_path / "installed"


# Marker for integration tests
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (require the git executable)",
    )
