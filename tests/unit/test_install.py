"""Tests for the install pipeline."""

from __future__ import annotations

import os
from pathlib import Path

import httpx
import pytest

from paks.config import PaksSettings, UserConfig
from paks.errors import (
    ConfigurationError,
    GitError,
    InvalidSkillError,
    MaterializeError,
    ReferenceParseError,
    SourceNotFoundError,
    TargetExistsError,
)
from paks.install import InstallStatus, Installer, find_installed, remove_installed
from paks.registry import RegistryAccessDeniedError, RegistryClient, RegistryNotFoundError
from paks.sources import GitSource, LocalSource, RegistrySource
from paks.testing import FakeGit
from tests.conftest import write_skill

CLONE_URL = "https://github.com/acme/skills.git"


def _install_info(version: str = "1.2.0", path: str = "skills/deploy") -> dict:
    return {
        "pak": {"id": "p1", "owner": "acme", "name": "deploy"},
        "version": {"version": version, "tag": f"v{version}"},
        "repository": {"url": "https://github.com/acme/skills", "clone_url": CLONE_URL},
        "install": {"path": path},
    }


class FakeRegistry:
    """Serves install metadata through ``httpx.MockTransport``."""

    def __init__(self, info: dict | None = None, status: int = 200) -> None:
        self.info = info or _install_info()
        self.status = status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, json={"error": {"message": "Pak not found"}})
        return httpx.Response(200, json=self.info)

    def client(self) -> RegistryClient:
        return RegistryClient("https://registry.test", transport=httpx.MockTransport(self.handler))


@pytest.fixture
def repo_tree(tmp_path: Path) -> Path:
    """A cloneable repository with a skill at ``skills/deploy``."""
    repo = tmp_path / "remote"
    write_skill(repo / "skills", "deploy", version="1.2.0")
    (repo / "README.md").write_text("# skills\n")
    return repo


@pytest.fixture
def installer(user_config: UserConfig, settings: PaksSettings, fake_git: FakeGit) -> Installer:
    return Installer(user_config, settings, git=fake_git)


class TestRegistryInstall:
    @pytest.fixture
    def registry(self, fake_git: FakeGit, repo_tree: Path) -> FakeRegistry:
        fake_git.add_remote_tree(CLONE_URL, repo_tree, "v1.2.0")
        return FakeRegistry()

    @pytest.fixture
    def installer(
        self,
        user_config: UserConfig,
        settings: PaksSettings,
        fake_git: FakeGit,
        registry: FakeRegistry,
    ) -> Installer:
        return Installer(user_config, settings, git=fake_git, registry=registry.client())

    def test_installs_subpath(self, installer: Installer, install_dir: Path, registry: FakeRegistry) -> None:
        result = installer.install("acme/deploy", directory=install_dir)

        target = install_dir / "acme--deploy"
        assert result.status is InstallStatus.INSTALLED
        assert result.name == "acme/deploy"
        assert result.version == "1.2.0"
        assert result.target == target
        assert isinstance(result.source, RegistrySource)
        assert (target / "SKILL.md").is_file()
        assert not (target / "README.md").exists()
        assert registry.requests[0].url.raw_path == b"/v1/paks/install/acme%2Fdeploy"

    def test_version_option_sent(self, installer: Installer, install_dir: Path, registry: FakeRegistry) -> None:
        installer.install("acme/deploy", directory=install_dir, version="1.2.0")
        raw_path = registry.requests[0].url.raw_path
        assert b"acme%2Fdeploy" in raw_path
        assert raw_path.endswith(b"1.2.0")

    def test_conflicting_versions(self, installer: Installer, install_dir: Path, registry: FakeRegistry) -> None:
        with pytest.raises(ReferenceParseError) as exc:
            installer.install("acme/deploy@1.0.0", directory=install_dir, version="2.0.0")
        assert exc.value.field == "version"
        assert registry.requests == []

    def test_same_version_is_noop(self, installer: Installer, install_dir: Path, fake_git: FakeGit) -> None:
        installer.install("acme/deploy", directory=install_dir)
        result = installer.install("acme/deploy", directory=install_dir)

        assert result.status is InstallStatus.ALREADY_INSTALLED
        assert len(fake_git.clones) == 1

    def test_different_version_requires_force(self, installer: Installer, install_dir: Path) -> None:
        write_skill(install_dir, "deploy", version="1.0.0", dirname="acme--deploy")

        with pytest.raises(TargetExistsError, match="--force") as exc:
            installer.install("acme/deploy", directory=install_dir)
        assert exc.value.installed_version == "1.0.0"
        assert exc.value.requested_version == "1.2.0"

    def test_force_replaces_stale_files(self, installer: Installer, install_dir: Path) -> None:
        old = write_skill(install_dir, "deploy", version="1.0.0", dirname="acme--deploy")
        (old / "stale.txt").write_text("old")

        result = installer.install("acme/deploy", directory=install_dir, force=True)

        assert result.status is InstallStatus.REINSTALLED
        assert not (old / "stale.txt").exists()
        assert "version: 1.2.0" in (old / "SKILL.md").read_text()

    def test_unknown_pak(self, user_config: UserConfig, settings: PaksSettings, install_dir: Path) -> None:
        registry = FakeRegistry(status=404)
        installer = Installer(user_config, settings, git=FakeGit(), registry=registry.client())

        with pytest.raises(RegistryNotFoundError, match="Pak not found") as exc:
            installer.install("acme/missing", directory=install_dir)
        assert "acme/missing" in str(exc.value)
        assert "Check the owner/name" in str(exc.value)
        assert exc.value.status_code == 404
        assert not install_dir.exists()

    def test_missing_subpath(self, user_config: UserConfig, settings: PaksSettings, fake_git: FakeGit, install_dir: Path, repo_tree: Path) -> None:
        fake_git.add_remote_tree(CLONE_URL, repo_tree, "v1.2.0")
        registry = FakeRegistry(_install_info(path="skills/nope"))
        installer = Installer(user_config, settings, git=fake_git, registry=registry.client())

        with pytest.raises(SourceNotFoundError, match="skills/nope"):
            installer.install("acme/deploy", directory=install_dir)
        _, _, dest = fake_git.clones[-1]
        assert not dest.parent.exists()

    def test_access_denied_suggests_login(self, user_config: UserConfig, settings: PaksSettings, install_dir: Path) -> None:
        registry = FakeRegistry(status=403)
        installer = Installer(user_config, settings, git=FakeGit(), registry=registry.client())

        with pytest.raises(RegistryAccessDeniedError, match="paks login") as exc:
            installer.install("acme/private", directory=install_dir)
        assert "acme/private" in str(exc.value)
        assert exc.value.status_code == 403
        assert not install_dir.exists()

    def test_workspace_removed(self, installer: Installer, install_dir: Path, fake_git: FakeGit) -> None:
        installer.install("acme/deploy", directory=install_dir)
        _, _, dest = fake_git.clones[0]
        assert not dest.parent.exists()

    def test_workspace_removed_when_copy_fails(
        self,
        installer: Installer,
        install_dir: Path,
        fake_git: FakeGit,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def fail(source: Path, dest: Path) -> None:
            raise MaterializeError("disk full", source=source)

        monkeypatch.setattr("paks.install.copy_tree", fail)

        with pytest.raises(MaterializeError):
            installer.install("acme/deploy", directory=install_dir)
        _, _, dest = fake_git.clones[-1]
        assert not dest.parent.exists()

    def test_token_sent_when_stored(self, user_config: UserConfig, settings: PaksSettings, fake_git: FakeGit, install_dir: Path, repo_tree: Path) -> None:
        registry = FakeRegistry()
        fake_git.add_remote_tree(CLONE_URL, repo_tree, "v1.2.0")
        client = RegistryClient(
            "https://registry.test",
            token=user_config.get_auth_token(),
            transport=httpx.MockTransport(registry.handler),
        )

        Installer(user_config, settings, git=fake_git, registry=client).install(
            "acme/deploy", directory=install_dir
        )

        assert registry.requests[0].headers["Authorization"] == "Bearer secret-token"


class TestGitInstall:
    def test_root_of_repo(self, installer: Installer, fake_git: FakeGit, install_dir: Path, skill_dir: Path) -> None:
        fake_git.add_remote_tree("https://github.com/acme/sample.git", skill_dir)

        result = installer.install("https://github.com/acme/sample.git", directory=install_dir)

        assert result.status is InstallStatus.INSTALLED
        assert result.name == "sample-skill"
        assert result.target == install_dir / "sample-skill"
        assert isinstance(result.source, GitSource)

    def test_ref_and_path(self, installer: Installer, fake_git: FakeGit, install_dir: Path, repo_tree: Path) -> None:
        fake_git.add_remote_tree(CLONE_URL, repo_tree, "v1.2.0")

        result = installer.install(f"{CLONE_URL}#tag=v1.2.0&path=skills/deploy", directory=install_dir)

        assert result.target == install_dir / "deploy"
        assert result.version == "1.2.0"

    def test_not_a_skill(self, installer: Installer, fake_git: FakeGit, install_dir: Path, repo_tree: Path) -> None:
        fake_git.add_remote_tree(CLONE_URL, repo_tree)

        with pytest.raises(InvalidSkillError, match="no SKILL.md"):
            installer.install(CLONE_URL, directory=install_dir)
        assert not install_dir.exists()
        _, _, dest = fake_git.clones[-1]
        assert not dest.parent.exists()

    def test_path_escaping_repo(self, installer: Installer, fake_git: FakeGit, install_dir: Path, repo_tree: Path) -> None:
        fake_git.add_remote_tree(CLONE_URL, repo_tree)

        with pytest.raises(SourceNotFoundError, match="escapes"):
            installer.install(f"{CLONE_URL}#path=../../etc", directory=install_dir)

    def test_clone_failure(self, installer: Installer, install_dir: Path) -> None:
        with pytest.raises(GitError):
            installer.install("https://github.com/acme/missing.git", directory=install_dir)

    def test_existing_requires_force(self, installer: Installer, fake_git: FakeGit, install_dir: Path, skill_dir: Path) -> None:
        fake_git.add_remote_tree(CLONE_URL, skill_dir)
        installer.install(CLONE_URL, directory=install_dir)

        with pytest.raises(TargetExistsError):
            installer.install(CLONE_URL, directory=install_dir)
        assert installer.install(CLONE_URL, directory=install_dir, force=True).status is InstallStatus.REINSTALLED


class TestLocalInstall:
    def test_relative_path(self, installer: Installer, install_dir: Path, skill_dir: Path, tmp_path: Path) -> None:
        result = installer.install("./src/sample-skill", directory=install_dir, cwd=tmp_path)

        assert result.status is InstallStatus.INSTALLED
        assert isinstance(result.source, LocalSource)
        assert (install_dir / "sample-skill" / "SKILL.md").is_file()

    def test_skill_file_path(self, installer: Installer, install_dir: Path, skill_dir: Path) -> None:
        result = installer.install(str(skill_dir / "SKILL.md"), directory=install_dir)
        assert result.target == install_dir / "sample-skill"

    def test_bare_directory_name_in_cwd(self, installer: Installer, install_dir: Path, skill_dir: Path) -> None:
        result = installer.install("sample-skill", directory=install_dir, cwd=skill_dir.parent)
        assert result.target == install_dir / "sample-skill"

    def test_missing(self, installer: Installer, install_dir: Path) -> None:
        with pytest.raises(SourceNotFoundError, match="Source not found"):
            installer.install("./nowhere", directory=install_dir)

    def test_directory_without_skill(self, installer: Installer, install_dir: Path, tmp_path: Path) -> None:
        (tmp_path / "empty").mkdir()
        with pytest.raises(InvalidSkillError):
            installer.install("./empty", directory=install_dir)

    def test_already_in_place(self, installer: Installer, skill_dir: Path) -> None:
        result = installer.install(str(skill_dir), directory=skill_dir.parent)
        assert result.status is InstallStatus.IN_PLACE
        assert (skill_dir / "SKILL.md").is_file()

    def test_force_reinstall(self, installer: Installer, install_dir: Path, skill_dir: Path) -> None:
        installer.install(str(skill_dir), directory=install_dir)
        (install_dir / "sample-skill" / "stale.txt").write_text("x")

        result = installer.install(str(skill_dir), directory=install_dir, force=True)

        assert result.status is InstallStatus.REINSTALLED
        assert not (install_dir / "sample-skill" / "stale.txt").exists()

    def test_agent_directory(self, user_config: UserConfig, settings: PaksSettings, skill_dir: Path, isolated_home: Path) -> None:
        installer = Installer(user_config, settings, git=FakeGit())
        result = installer.install(str(skill_dir), agent="claude-code")
        assert result.target == isolated_home / ".claude" / "skills" / "sample-skill"

    def test_invalid_skill_name(self, installer: Installer, install_dir: Path, tmp_path: Path) -> None:
        write_skill(tmp_path / "src", "Bad_Name", dirname="bad")
        with pytest.raises(InvalidSkillError, match="Bad_Name"):
            installer.install("./src/bad", directory=install_dir)

    def test_target_inside_source(self, installer: Installer, skill_dir: Path) -> None:
        with pytest.raises(ConfigurationError, match="target is inside the source"):
            installer.install(str(skill_dir), directory=skill_dir / "out")
        assert not (skill_dir / "out").exists()
        assert sorted(p.name for p in skill_dir.iterdir()) == ["SKILL.md"]

    def test_source_inside_target(self, installer: Installer, tmp_path: Path) -> None:
        skills = tmp_path / "skills"
        source = write_skill(skills / "foo", "foo", dirname="inner")

        with pytest.raises(ConfigurationError, match="source is inside the target"):
            installer.install(str(source), directory=skills, force=True)
        assert (source / "SKILL.md").is_file()


class TestRemoveInstalled:
    def test_registry_name_prefers_disambiguated(self, install_dir: Path) -> None:
        write_skill(install_dir, "deploy", dirname="acme--deploy")
        write_skill(install_dir, "deploy")

        removed = remove_installed("acme/deploy", install_dir)

        assert removed == install_dir / "acme--deploy"
        assert (install_dir / "deploy").exists()

    def test_registry_name_falls_back_to_plain(self, install_dir: Path) -> None:
        write_skill(install_dir, "deploy")
        assert remove_installed("acme/deploy", install_dir) == install_dir / "deploy"

    def test_symlinked_install(self, install_dir: Path, skill_dir: Path) -> None:
        install_dir.mkdir()
        link = install_dir / "sample-skill"
        os.symlink(skill_dir, link, target_is_directory=True)

        remove_installed("sample-skill", install_dir)

        assert not link.is_symlink()
        assert (skill_dir / "SKILL.md").exists()

    def test_not_installed(self, install_dir: Path) -> None:
        with pytest.raises(SourceNotFoundError, match="not installed"):
            remove_installed("ghost", install_dir)

    def test_no_traversal(self, install_dir: Path, tmp_path: Path) -> None:
        write_skill(tmp_path, "outside")
        assert find_installed("../outside", install_dir) is None

