"""Tests for reading config files."""

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from branchstack.config import Config
from branchstack.config.config_parser import load_git_town_config, parse_config


@pytest.fixture(autouse=True)
def no_github_repository(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv('GITHUB_REPOSITORY', raising=False)


class TestGitTownConfig:
    def test_branches(self, tmp_path: Path) -> None:
        (tmp_path / '.git-branches.toml').write_text(
            '[branches]\nmain = "trunk"\nperennials = ["staging", "qa"]\nperennial-regex = "^release-"\n'
        )
        git_town = load_git_town_config(tmp_path)
        assert git_town is not None and git_town.branches is not None
        assert git_town.branches.main == 'trunk'
        assert git_town.branches.perennials == ['staging', 'qa']
        assert git_town.branches.perennial_regex == '^release-'

    def test_second_file_name(self, tmp_path: Path) -> None:
        (tmp_path / '.git-town.toml').write_text('[branches]\nmain = "develop"\n')
        git_town = load_git_town_config(tmp_path)
        assert git_town is not None and git_town.branches is not None
        assert git_town.branches.main == 'develop'

    def test_missing(self, tmp_path: Path) -> None:
        assert load_git_town_config(tmp_path) is None

    def test_invalid_is_ignored(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING)
        (tmp_path / '.git-branches.toml').write_text('[branches\nmain = ')
        assert load_git_town_config(tmp_path) is None
        assert "Failed to parse Git Town config" in caplog.text

    def test_wrong_types_are_ignored(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING)
        (tmp_path / '.git-branches.toml').write_text('[branches]\nperennials = "not-a-list"\n')
        assert load_git_town_config(tmp_path) is None
        assert "Failed to parse Git Town config" in caplog.text


class TestParseConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        config = Config(parse_config(directory=str(tmp_path)))
        assert config.tool.location == 'description'
        assert not config.tool.skip_single_stacks
        assert config.tool.history_limit == 0
        assert config.repo.perennials == []
        assert config.repo.main_branch is None

    def test_git_town(self, tmp_path: Path) -> None:
        (tmp_path / '.git-branches.toml').write_text('[branches]\nmain = "trunk"\nperennials = ["staging"]\n')
        config = Config(parse_config(directory=str(tmp_path)))
        assert config.repo.main_branch == 'trunk'
        assert config.repo.perennials == ['staging']

    def test_yaml_overrides_git_town(self, tmp_path: Path) -> None:
        (tmp_path / '.git-branches.toml').write_text('[branches]\nmain = "trunk"\nperennials = ["staging"]\n')
        (tmp_path / '.branch-stack.yaml').write_text(
            'repo:\n  perennials: [qa]\ntool:\n  location: comment\n  skip_single_stacks: true\n  history_limit: 50\n'
        )
        config = Config(parse_config(directory=str(tmp_path)))
        assert config.repo.main_branch == 'trunk'
        assert config.repo.perennials == ['qa']
        assert config.tool.location == 'comment'
        assert config.tool.skip_single_stacks
        assert config.tool.history_limit == 50

    def test_repository_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('GITHUB_REPOSITORY', 'octo/stacks')
        config = Config(parse_config(directory=str(tmp_path)))
        assert config.repo.github_repo_owner == 'octo'
        assert config.repo.github_repo_name == 'stacks'

    def test_repository_from_remote(self, tmp_path: Path) -> None:
        git_cmd = MagicMock()
        git_cmd.run_cmd.return_value = 'git@github.com:octo/stacks.git'
        config = Config(parse_config(git_cmd, directory=str(tmp_path)))
        git_cmd.run_cmd.assert_called_once_with('remote get-url origin')
        assert config.repo.github_repo_owner == 'octo'
        assert config.repo.github_repo_name == 'stacks'

    def test_remote_failure_is_logged(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        git_cmd = MagicMock()
        git_cmd.run_cmd.side_effect = RuntimeError("Not in a git repository")
        config = Config(parse_config(git_cmd, directory=str(tmp_path)))
        assert config.repo.github_repo_owner is None
        assert "Failed to parse git remote" in caplog.text
