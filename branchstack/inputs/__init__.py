"""Resolve run inputs from action inputs, config files and the GitHub event."""

import re
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..config.models import RepoConfig
from ..exceptions import InputError
from ..github import PullRequest
from ..github.types import parse_pull_request_payload
from ..typing import BranchRef, LocationKind
from ..util import dedupe

logger = logging.getLogger(__name__)

VALID_EVENTS = ('pull_request', 'pull_request_target')

_TRUE_VALUES = ('true', 'True', 'TRUE')
_FALSE_VALUES = ('false', 'False', 'FALSE')

def check_event_name(event_name: str) -> None:
    """Only pull request events carry the payload we need."""
    if event_name not in VALID_EVENTS:
        triggers = ", ".join(f"`{trigger}`" for trigger in VALID_EVENTS)
        raise InputError(f"Action only supports the following triggers: {triggers}")

def parse_location(value: Optional[str]) -> LocationKind:
    location = (value or 'description').strip()
    if location == 'description':
        return 'description'
    if location == 'comment':
        return 'comment'
    raise InputError(f"Invalid 'location' input: {value}")

def parse_bool(value: Optional[str], name: str) -> bool:
    """Parse a boolean input the way the Actions toolkit does."""
    if value is None or value.strip() == '':
        return False
    value = value.strip()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InputError(f"Input '{name}' must be one of: true | True | TRUE | false | False | FALSE")

def parse_history_limit(value: Optional[str]) -> int:
    """0 (or empty) means every closed pull request is considered."""
    if value is None or value.strip() == '':
        return 0
    try:
        limit = int(value.strip(), 10)
    except ValueError:
        raise InputError(f"Invalid 'history-limit' input: {value}")
    if limit < 0:
        raise InputError(f"Invalid 'history-limit' input: {value}")
    return limit

def resolve_main_branch(default_branch: BranchRef, repo_config: RepoConfig,
                        main_branch_input: Optional[str] = None) -> BranchRef:
    """Input wins over config, config wins over the repository default."""
    main_branch = default_branch
    if repo_config.main_branch:
        main_branch = BranchRef(repo_config.main_branch)
    if main_branch_input:
        main_branch = BranchRef(main_branch_input.strip())
    logger.info(f"Main branch: {main_branch}")
    return main_branch

def resolve_perennial_branches(repo_config: RepoConfig, explicit_input: Sequence[str],
                               regex_input: Optional[str],
                               remote_branches: Sequence[BranchRef]) -> List[BranchRef]:
    """Explicit branches (input over config) plus remote branches matching the regex."""
    explicit = [branch.strip() for branch in explicit_input if branch.strip()]
    if not explicit:
        explicit = list(repo_config.perennials)
    logger.info(f"Explicit perennial branches: {explicit}")

    perennial_regex = regex_input.strip() if regex_input and regex_input.strip() else repo_config.perennial_regex
    matched: List[str] = []
    if perennial_regex:
        try:
            pattern = re.compile(perennial_regex)
        except re.error as e:
            raise InputError(f"Invalid 'perennial-regex' input: {perennial_regex}: {e}")
        matched = [branch for branch in remote_branches if pattern.search(branch)]

    perennial_branches = dedupe([BranchRef(branch) for branch in explicit + matched])
    logger.info(f"Perennial branches: {perennial_branches}")
    return perennial_branches

def read_event_payload(event_path: str) -> Dict[str, Any]:
    """Load the webhook payload GitHub writes for the workflow run."""
    try:
        with open(Path(event_path), 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InputError(f"Unable to read event payload at {event_path}: {e}")

def get_current_pull_request(payload: Dict[str, Any]) -> PullRequest:
    pull_request = PullRequest.from_payload(parse_pull_request_payload(payload))
    logger.info(f"Current pull request: {pull_request}")
    return pull_request
