"""Tests for source classification."""

from __future__ import annotations

from pathlib import Path

import pytest

from paks.errors import ReferenceParseError
from paks.sources.classifier import (
    GitSource,
    LocalSource,
    RegistrySource,
    detect_source_type,
    is_git_url,
    parse_git_source,
)


class TestRegistrySources:
    def test_reference(self) -> None:
        source = detect_source_type("stakpak/kubernetes-deploy")
        assert source == RegistrySource("stakpak/kubernetes-deploy")
        assert source.reference.name == "kubernetes-deploy"

    def test_reference_with_version(self) -> None:
        source = detect_source_type("stakpak/kubernetes-deploy@1.0.0")
        assert isinstance(source, RegistrySource)
        assert source.reference.version == "1.0.0"

    def test_registry_shaped_invalid_defers_error(self) -> None:
        """A slash without a scheme stays a registry source; parsing fails later."""
        source = detect_source_type("Acme/Deploy")
        assert isinstance(source, RegistrySource)
        with pytest.raises(ReferenceParseError):
            _ = source.reference


class TestGitSources:
    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/u/r.git",
            "http://git.example.com/r.git",
            "git@github.com:u/r.git",
            "ssh://git@github.com/u/r.git",
        ],
    )
    def test_prefixes(self, url: str) -> None:
        assert detect_source_type(url) == GitSource(url=url)
        assert is_git_url(url)

    def test_ref_and_path_fragment(self) -> None:
        source = detect_source_type("https://github.com/u/r.git#ref=v1.0.0&path=skills/x")
        assert source == GitSource(
            url="https://github.com/u/r.git", ref="v1.0.0", subpath="skills/x"
        )

    @pytest.mark.parametrize("key", ["ref", "tag", "branch"])
    def test_ref_aliases(self, key: str) -> None:
        assert parse_git_source(f"https://h/r.git#{key}=main").ref == "main"

    def test_last_occurrence_wins(self) -> None:
        source = parse_git_source("https://h/r.git#tag=v1.0.0&branch=dev&path=a&path=b")
        assert source.ref == "dev"
        assert source.subpath == "b"

    def test_unknown_keys_and_empty_values_ignored(self) -> None:
        source = parse_git_source("https://h/r.git#foo=bar&ref=&path=skills/y")
        assert source == GitSource(url="https://h/r.git", ref=None, subpath="skills/y")

    def test_splits_at_first_hash(self) -> None:
        source = parse_git_source("https://h/r.git#path=a#b")
        assert source.url == "https://h/r.git"
        assert source.subpath == "a#b"


class TestLocalSources:
    @pytest.mark.parametrize("raw", ["./local", "../up", "/abs/path", "C:\\skills\\x", "d:/x"])
    def test_path_prefixes(self, raw: str) -> None:
        assert detect_source_type(raw) == LocalSource(raw)

    def test_relative_dir_with_skill_file(self, tmp_path: Path) -> None:
        """A bare relative path wins over the registry rule when it is a skill."""
        skill = tmp_path / "acme" / "deploy"
        skill.mkdir(parents=True)
        (skill / "SKILL.md").write_text("---\nname: deploy\ndescription: d\n---\n")

        assert detect_source_type("acme/deploy", cwd=tmp_path) == LocalSource("acme/deploy")

    def test_relative_dir_without_skill_file_is_registry(self, tmp_path: Path) -> None:
        (tmp_path / "acme" / "deploy").mkdir(parents=True)
        assert isinstance(detect_source_type("acme/deploy", cwd=tmp_path), RegistrySource)

    def test_fallback_is_local(self) -> None:
        assert detect_source_type("invalid") == LocalSource("invalid")

    def test_scheme_with_slash_is_local(self) -> None:
        assert detect_source_type("file://x/y") == LocalSource("file://x/y")
