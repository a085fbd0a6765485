"""Tests for manifest and skill directory validation."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from paks.skills.config import Skill, SkillManifest
from paks.skills.errors import SkillValidationError
from paks.skills.validator import name_error, validate_manifest, validate_skill

_GOOD_DESCRIPTION = "Deploys services to Kubernetes clusters"


def _manifest(**overrides: object) -> SkillManifest:
    data: dict[str, object] = {"name": "my-skill", "description": _GOOD_DESCRIPTION}
    data.update(overrides)
    return SkillManifest.model_validate(data)


class TestValidateManifest:
    """Hard rules raise, soft rules warn."""

    def test_valid(self) -> None:
        assert validate_manifest(_manifest()) == []

    @pytest.mark.parametrize(
        ("name", "message"),
        [
            ("My-Skill", "lowercase"),
            ("my--skill", "consecutive hyphens"),
            ("-my-skill", "start or end"),
            ("my-skill-", "start or end"),
            ("", "1-64"),
            ("a" * 65, "1-64"),
            ("my_skill", "lowercase"),
        ],
    )
    def test_bad_names(self, name: str, message: str) -> None:
        with pytest.raises(SkillValidationError, match=message) as exc:
            validate_manifest(_manifest(name=name))
        assert len(exc.value.errors) == 1

    def test_max_length_name_ok(self) -> None:
        assert validate_manifest(_manifest(name="a" * 64)) == []

    @pytest.mark.parametrize("description", ["", "x" * 1025])
    def test_bad_descriptions(self, description: str) -> None:
        with pytest.raises(SkillValidationError, match="description must be 1-1024"):
            validate_manifest(_manifest(description=description))

    def test_short_description_warns(self) -> None:
        warnings = validate_manifest(_manifest(description="x" * 10))
        assert warnings == ["description is very short; consider adding more detail"]

    def test_compatibility_limit(self) -> None:
        assert validate_manifest(_manifest(compatibility="c" * 500)) == []
        with pytest.raises(SkillValidationError, match="compatibility"):
            validate_manifest(_manifest(compatibility="c" * 501))

    def test_error_mentions_path(self, tmp_path: Path) -> None:
        with pytest.raises(SkillValidationError, match=re.escape(str(tmp_path))):
            validate_manifest(_manifest(name="Bad"), tmp_path)


def test_name_error_accepts_valid() -> None:
    assert name_error("k8s-deploy-2") is None


class TestValidateSkill:
    """Directory-level checks on top of the manifest rules."""

    def _skill(self, tmp_path: Path, **overrides: object) -> Skill:
        data: dict[str, object] = {"license": "MIT", "metadata": {"version": "1.0.0"}}
        data.update(overrides)
        return Skill(path=tmp_path, manifest=_manifest(**data))

    def test_clean(self, tmp_path: Path) -> None:
        result = validate_skill(self._skill(tmp_path))
        assert result.valid
        assert result.errors == []
        assert result.warnings == []
        assert result.skill_path == tmp_path

    def test_missing_version_and_license(self, tmp_path: Path) -> None:
        result = validate_skill(self._skill(tmp_path, license=None, metadata=None))
        assert result.valid
        assert "No version specified - required for publishing" in result.warnings
        assert "No license specified - recommended for sharing" in result.warnings

    def test_strict_makes_warnings_fatal(self, tmp_path: Path) -> None:
        result = validate_skill(self._skill(tmp_path, license=None), strict=True)
        assert not result.valid
        assert result.errors == []

    def test_manifest_errors_collected(self, tmp_path: Path) -> None:
        result = validate_skill(self._skill(tmp_path, name="Bad"))
        assert not result.valid
        assert result.errors == ["name must contain only lowercase letters, numbers, and hyphens"]

    def test_directory_counts(self, tmp_path: Path) -> None:
        (tmp_path / "scripts").mkdir()
        (tmp_path / "scripts" / "run.sh").write_text("echo")
        (tmp_path / "references").mkdir()
        (tmp_path / "assets").mkdir()
        (tmp_path / "assets" / ".gitkeep").write_text("")

        result = validate_skill(self._skill(tmp_path))

        assert result.directories == {"scripts": 1}
        assert "references/ directory is empty" in result.warnings
        assert "assets/ directory is empty" in result.warnings
