"""Tests for the command line interface."""

import json
from pathlib import Path
from typing import Tuple

import pytest
from click.testing import CliRunner

from branchstack.cmd.branchstack import main as main_module
from branchstack.cmd.branchstack.main import cli
from branchstack.config import Config
from branchstack.github import GitHubClient
from branchstack.tests.fake_github import FakeGithub, FakeRepository


@pytest.fixture
def repo(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> FakeRepository:
    """A fake repository with a two-PR stack and an unrelated PR."""
    monkeypatch.chdir(tmp_path)
    for var in ('GITHUB_EVENT_PATH', 'GITHUB_EVENT_NAME', 'INPUT_LOCATION', 'INPUT_SKIP-SINGLE-STACKS',
                'INPUT_HISTORY-LIMIT', 'INPUT_MAIN-BRANCH', 'INPUT_PERENNIAL-REGEX', 'INPUT_PERENNIAL-BRANCHES'):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv('GITHUB_REPOSITORY', 'octo/stacks')
    # Keep pytest's log capture in place
    monkeypatch.setattr('branchstack.setup_logging', lambda verbose: None)

    fake = FakeGithub()
    fake_repo = fake.create_repo('octo/stacks')
    fake_repo.add_pull(1, 'main', 'a', body="First")
    fake_repo.add_pull(2, 'a', 'b', body="Second")
    fake_repo.add_pull(3, 'main', 'solo', body="Alone")

    def setup_github(config: Config, token: str) -> GitHubClient:
        return GitHubClient(config, fake)
    monkeypatch.setattr(main_module, 'setup_github', setup_github)
    return fake_repo

def invoke(*args: str) -> Tuple[int, str]:
    result = CliRunner().invoke(cli, list(args), obj={})
    return result.exit_code, result.stdout


class TestUpdate:
    def test_updates_stack(self, repo: FakeRepository) -> None:
        exit_code, _ = invoke('update', '-p', '2')
        assert exit_code == 0
        assert repo.pulls[1].body == "First\n\n- `main` <!-- branch-stack -->\n  - #1 👈\n    - #2\n"
        assert repo.pulls[2].body == "Second\n\n- `main` <!-- branch-stack -->\n  - #1\n    - #2 👈\n"
        assert repo.pulls[3].body == "Alone"

    def test_pretend(self, repo: FakeRepository) -> None:
        exit_code, output = invoke('update', '-p', '1', '--pretend')
        assert exit_code == 0
        assert "PR #1" in output and "PR #2" in output
        assert repo.pulls[1].body == "First"
        assert repo.calls == []

    def test_comment_location(self, repo: FakeRepository) -> None:
        exit_code, _ = invoke('update', '-p', '1', '--location', 'comment')
        assert exit_code == 0
        assert repo.pulls[1].body == "First"
        assert len(repo.pulls[1].comments) == 1

    def test_skip_single_stacks(self, repo: FakeRepository) -> None:
        exit_code, _ = invoke('update', '-p', '3', '--skip-single-stacks', 'true')
        assert exit_code == 0
        assert repo.calls == []

    def test_invalid_location(self, repo: FakeRepository) -> None:
        exit_code, _ = invoke('update', '-p', '1', '--location', 'wiki')
        assert exit_code == 1
        assert repo.calls == []

    def test_invalid_config_file(self, repo: FakeRepository, tmp_path: Path) -> None:
        (tmp_path / '.branch-stack.yaml').write_text("tool:\n  history_limit: -1\n")
        exit_code, _ = invoke('update', '-p', '1')
        assert exit_code == 1
        assert repo.calls == []

    def test_publish_failure_exits(self, repo: FakeRepository) -> None:
        repo.failing.add(2)
        exit_code, _ = invoke('update', '-p', '1')
        assert exit_code == 1
        assert repo.pulls[1].body is not None and "#1 👈" in repo.pulls[1].body

    def test_event_payload(self, repo: FakeRepository, tmp_path: Path) -> None:
        event_path = tmp_path / 'event.json'
        event_path.write_text(json.dumps({'pull_request': {
            'number': 2, 'base': {'ref': 'a'}, 'head': {'ref': 'b'}, 'body': 'Second'}}))
        exit_code, _ = invoke('update', '--event-path', str(event_path), '--event-name', 'pull_request')
        assert exit_code == 0
        assert "#2 👈" in (repo.pulls[2].body or '')

    def test_wrong_event(self, repo: FakeRepository, tmp_path: Path) -> None:
        event_path = tmp_path / 'event.json'
        event_path.write_text('{}')
        exit_code, _ = invoke('update', '--event-path', str(event_path), '--event-name', 'push')
        assert exit_code == 1

    def test_no_pull_request(self, repo: FakeRepository) -> None:
        exit_code, _ = invoke('update')
        assert exit_code == 1


class TestShow:
    def test_show(self, repo: FakeRepository) -> None:
        exit_code, output = invoke('show', '-p', '2')
        assert exit_code == 0
        assert "- `main` <!-- branch-stack -->\n  - #1\n    - #2 👈" in output
        assert repo.calls == []

    def test_json(self, repo: FakeRepository) -> None:
        exit_code, output = invoke('show', '-p', '1', '--json')
        assert exit_code == 0
        members = json.loads(output)
        assert {m["ref"] for m in members} == {"main", "a", "b"}
        current = [m for m in members if m['current']]
        assert current == [{'ref': 'a', 'type': 'PullRequestNode', 'current': True, 'number': 1, 'state': 'open'}]

