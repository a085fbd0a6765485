"""Tests for registry reference parsing."""

from __future__ import annotations

import pytest

from paks.errors import ReferenceParseError
from paks.sources.reference import SkillReference


class TestParseValid:
    """Well-formed references parse into their parts."""

    def test_owner_and_name(self) -> None:
        ref = SkillReference.parse("stakpak/kubernetes-deploy")
        assert ref.account == "stakpak"
        assert ref.name == "kubernetes-deploy"
        assert ref.version is None

    def test_with_version(self) -> None:
        ref = SkillReference.parse("stakpak/kubernetes-deploy@1.0.0")
        assert ref.version == "1.0.0"

    def test_version_taken_after_last_at(self) -> None:
        """Everything after the last ``@`` is the version."""
        with pytest.raises(ReferenceParseError):
            # The identifier "a/b@c" has an invalid name segment.
            SkillReference.parse("a/b@c@1.0.0")
        ref = SkillReference.parse("acme/tool@v2.0.0")
        assert ref.version == "v2.0.0"

    def test_account_allows_leading_digits_and_hyphens(self) -> None:
        ref = SkillReference.parse("42-org-/skill")
        assert ref.account == "42-org-"

    @pytest.mark.parametrize(
        "text",
        ["acme/deploy", "a/b", "my-org/my-skill-2", "x1/y1"],
    )
    def test_to_uri_round_trips(self, text: str) -> None:
        assert SkillReference.parse(text).to_uri() == text
        assert SkillReference.parse(f"{text}@1.2.3").to_uri() == f"{text}@1.2.3"
        assert SkillReference.parse(f"{text}@1.2.3").version == "1.2.3"


class TestParseInvalid:
    """Violations name the field that failed."""

    @pytest.mark.parametrize("text", ["too/many/slashes", "UPPERCASE/skill", "invalid"])
    def test_rejected(self, text: str) -> None:
        with pytest.raises(ReferenceParseError):
            SkillReference.parse(text)

    def test_empty_version(self) -> None:
        with pytest.raises(ReferenceParseError, match="version cannot be empty after @") as exc:
            SkillReference.parse("acme/deploy@")
        assert exc.value.field == "version"
        assert exc.value.input == "acme/deploy@"

    def test_wrong_segment_count_names_format(self) -> None:
        with pytest.raises(ReferenceParseError, match="owner/name") as exc:
            SkillReference.parse("too/many/slashes")
        assert exc.value.field == "identifier"

    def test_uppercase_account(self) -> None:
        with pytest.raises(ReferenceParseError) as exc:
            SkillReference.parse("UPPERCASE/skill")
        assert exc.value.field == "account"

    def test_account_too_long(self) -> None:
        with pytest.raises(ReferenceParseError, match="1-39") as exc:
            SkillReference.parse(f"{'a' * 40}/skill")
        assert exc.value.field == "account"

    def test_empty_account(self) -> None:
        with pytest.raises(ReferenceParseError) as exc:
            SkillReference.parse("/skill")
        assert exc.value.field == "account"

    @pytest.mark.parametrize(
        ("name", "rule"),
        [
            ("-skill", "start or end"),
            ("skill-", "start or end"),
            ("my--skill", "consecutive"),
            ("My-Skill", "lowercase"),
            ("s" * 65, "1-64"),
            ("", "1-64"),
        ],
    )
    def test_name_rules(self, name: str, rule: str) -> None:
        with pytest.raises(ReferenceParseError, match=rule) as exc:
            SkillReference.parse(f"acme/{name}")
        assert exc.value.field == "name"


class TestReferenceHelpers:
    def test_disambiguator(self) -> None:
        assert SkillReference.parse("acme/deploy").disambiguator == "acme--deploy"

    def test_with_version_is_new_instance(self) -> None:
        ref = SkillReference.parse("acme/deploy")
        pinned = ref.with_version("1.0.0")
        assert ref.version is None
        assert pinned.to_uri() == "acme/deploy@1.0.0"

    def test_str_is_uri(self) -> None:
        assert str(SkillReference("acme", "deploy", "2.0.0")) == "acme/deploy@2.0.0"

    def test_immutable(self) -> None:
        ref = SkillReference.parse("acme/deploy")
        with pytest.raises(AttributeError):
            ref.name = "other"  # type: ignore[misc]
