"""Tests for resolving run inputs."""

import json
from pathlib import Path

import pytest

from branchstack.config.models import RepoConfig
from branchstack.exceptions import InputError
from branchstack.inputs import (
    check_event_name, get_current_pull_request, parse_bool, parse_history_limit, parse_location,
    read_event_payload, resolve_main_branch, resolve_perennial_branches,
)
from branchstack.typing import BranchRef


class TestParseInputs:
    def test_location(self) -> None:
        assert parse_location('') == 'description'
        assert parse_location(None) == 'description'
        assert parse_location('comment') == 'comment'
        with pytest.raises(InputError, match="Invalid 'location' input"):
            parse_location('wiki')

    @pytest.mark.parametrize("value,expected", [
        ('true', True), ('True', True), ('TRUE', True),
        ('false', False), ('False', False), ('FALSE', False), ('', False), (None, False),
    ])
    def test_bool(self, value: str, expected: bool) -> None:
        assert parse_bool(value, 'skip-single-stacks') is expected

    def test_bool_invalid(self) -> None:
        with pytest.raises(InputError):
            parse_bool('yes', 'skip-single-stacks')

    def test_history_limit(self) -> None:
        assert parse_history_limit('') == 0
        assert parse_history_limit('25') == 25
        for value in ('-1', 'many', '1.5'):
            with pytest.raises(InputError):
                parse_history_limit(value)

    def test_event_name(self) -> None:
        check_event_name('pull_request')
        check_event_name('pull_request_target')
        with pytest.raises(InputError, match="only supports"):
            check_event_name('push')


class TestMainBranch:
    def test_precedence(self) -> None:
        repo_config = RepoConfig(main_branch='trunk')
        assert resolve_main_branch(BranchRef('main'), RepoConfig()) == 'main'
        assert resolve_main_branch(BranchRef('main'), repo_config) == 'trunk'
        assert resolve_main_branch(BranchRef('main'), repo_config, 'develop') == 'develop'
        assert resolve_main_branch(BranchRef('main'), repo_config, '') == 'trunk'


class TestPerennialBranches:
    def test_input_overrides_config(self) -> None:
        repo_config = RepoConfig(perennials=['staging'])
        assert resolve_perennial_branches(repo_config, [], None, []) == ['staging']
        assert resolve_perennial_branches(repo_config, ['release', ' '], None, []) == ['release']

    def test_regex(self) -> None:
        remote = [BranchRef(b) for b in ('main', 'release-1', 'release-2', 'feature')]
        result = resolve_perennial_branches(RepoConfig(perennials=['release-1']), [], '^release-', remote)
        assert result == ['release-1', 'release-2']

    def test_config_regex(self) -> None:
        remote = [BranchRef(b) for b in ('main', 'v1.x', 'feature')]
        assert resolve_perennial_branches(RepoConfig(perennial_regex=r'^v\d'), [], None, remote) == ['v1.x']

    def test_invalid_regex(self) -> None:
        with pytest.raises(InputError):
            resolve_perennial_branches(RepoConfig(), [], '(', [BranchRef('main')])


class TestEventPayload:
    def test_current_pull_request(self, tmp_path: Path) -> None:
        event_path = tmp_path / 'event.json'
        event_path.write_text(json.dumps({
            'action': 'synchronize',
            'pull_request': {
                'number': 7, 'state': 'open', 'body': 'Hi',
                'base': {'ref': 'main', 'sha': 'abc'}, 'head': {'ref': 'feature', 'sha': 'def'},
            },
        }))
        pull_request = get_current_pull_request(read_event_payload(str(event_path)))
        assert pull_request.number == 7
        assert pull_request.base_ref == 'main'
        assert pull_request.head_ref == 'feature'
        assert pull_request.body == 'Hi'

    def test_missing_pull_request(self) -> None:
        with pytest.raises(InputError, match="Unable to determine current pull request"):
            get_current_pull_request({'ref': 'refs/heads/main'})

    def test_malformed_pull_request(self) -> None:
        with pytest.raises(InputError):
            get_current_pull_request({'pull_request': {'number': 'x'}})

    def test_unreadable(self, tmp_path: Path) -> None:
        with pytest.raises(InputError):
            read_event_payload(str(tmp_path / 'missing.json'))
