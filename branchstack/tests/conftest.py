"""Configuration for pytest."""

import logging
from typing import Tuple

import pytest

from branchstack.config import Config, default_config
from branchstack.github import GitHubClient
from branchstack.tests.fake_github import FakeGithub, FakeRepository

logger = logging.getLogger(__name__)

@pytest.fixture
def config() -> Config:
    cfg = default_config()
    cfg.repo.github_repo_owner = "octo"
    cfg.repo.github_repo_name = "teststack"
    return cfg

@pytest.fixture
def fake_github(config: Config) -> Tuple[GitHubClient, FakeRepository]:
    """A GitHubClient backed by an in-memory repository."""
    fake = FakeGithub()
    repo = fake.create_repo("octo/teststack")
    return GitHubClient(config, fake), repo
