"""Config parser logic."""

import os
from pathlib import Path
from typing import Dict, Optional, Any
import logging
import tomllib
import yaml
from pydantic import ValidationError

from ...git import parse_remote_url
from ...typing import GitInterface
from ..models import GitTownConfig

# Get module logger
logger = logging.getLogger(__name__)

RepoConfig = Dict[str, Any]  # Use Any since yaml can return various types
Config = Dict[str, RepoConfig]

TOOL_CONFIG_FILE = '.branch-stack.yaml'
GIT_TOWN_CONFIG_FILES = ('.git-branches.toml', '.git-town.toml')

def load_git_town_config(directory: Path) -> Optional[GitTownConfig]:
    """Load the first readable Git Town config file, if any.

    Invalid files are reported and ignored.
    """
    for name in GIT_TOWN_CONFIG_FILES:
        path = directory / name
        try:
            with open(path, 'rb') as f:
                raw = tomllib.load(f)
        except FileNotFoundError:
            continue
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Failed to parse Git Town config. If this is a mistake, ensure that `{name}` is valid: {e}")
            return None

        try:
            git_town_config = GitTownConfig.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Failed to parse Git Town config. If this is a mistake, ensure that `{name}` is valid: {e}")
            return None
        logger.info(f"Config from {name}: {git_town_config.model_dump(exclude_none=True)}")
        return git_town_config

    logger.info("No Git Town config found")
    return None

def parse_config(git_cmd: Optional[GitInterface] = None, directory: str = '.') -> Config:
    """Parse config from Git Town and branchstack config files."""
    root = Path(directory)
    config: Config = {
        'repo': {
            'perennials': [],
        },
        'tool': {
            'location': 'description',
            'skip_single_stacks': False,
            'history_limit': 0,
            'concurrency': 0,
        }
    }

    git_town_config = load_git_town_config(root)
    if git_town_config and git_town_config.branches:
        branches = git_town_config.branches
        if branches.main:
            config['repo']['main_branch'] = branches.main
        if branches.perennials is not None:
            config['repo']['perennials'] = list(branches.perennials)
        if branches.perennial_regex:
            config['repo']['perennial_regex'] = branches.perennial_regex

    # Tool config overrides Git Town settings
    try:
        with open(root / TOOL_CONFIG_FILE, 'r') as f:
            logger.info(f"Found {TOOL_CONFIG_FILE}, loading...")
            tool_file = yaml.safe_load(f)
            logger.info(f"Config from {TOOL_CONFIG_FILE}: {tool_file}")
            if tool_file:
                if 'repo' in tool_file and isinstance(tool_file['repo'], dict):
                    config['repo'].update(tool_file['repo'])
                if 'tool' in tool_file and isinstance(tool_file['tool'], dict):
                    config['tool'].update(tool_file['tool'])
    except FileNotFoundError:
        logger.info(f"No {TOOL_CONFIG_FILE} found, using defaults")

    if not config['repo'].get('github_repo_owner') or not config['repo'].get('github_repo_name'):
        fill_repo_name(config, git_cmd)

    return config

def fill_repo_name(config: Config, git_cmd: Optional[GitInterface]) -> None:
    """Fill owner/name from GITHUB_REPOSITORY or the git remote."""
    owner_and_name = None
    env_repo = os.environ.get('GITHUB_REPOSITORY', '')
    if '/' in env_repo:
        owner, name = env_repo.split('/', 1)
        owner_and_name = (owner, name)
    elif git_cmd is not None:
        try:
            owner_and_name = parse_remote_url(git_cmd.run_cmd("remote get-url origin"))
        except Exception as e:
            logger.error(f"Failed to parse git remote: {e}")

    if owner_and_name:
        owner, name = owner_and_name
        if not config['repo'].get('github_repo_owner'):
            config['repo']['github_repo_owner'] = owner
        if not config['repo'].get('github_repo_name'):
            config['repo']['github_repo_name'] = name
