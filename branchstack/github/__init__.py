"""GitHub interfaces and implementation."""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

from ..typing import BranchRef, PullRequestState
from ..config.models import BranchStackConfig
from .types import PullRequestPayload

# Get module logger
logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class PullRequest:
    """Pull request info. Immutable once fetched."""
    number: int
    base_ref: BranchRef
    head_ref: BranchRef
    state: PullRequestState = 'open'
    body: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state == 'open'

    @classmethod
    def from_github(cls, pr: 'GitHubPullRequestProtocol') -> 'PullRequest':
        """Build from a PyGithub (or fake) pull request object."""
        return cls(
            number=pr.number,
            base_ref=BranchRef(pr.base.ref),
            head_ref=BranchRef(pr.head.ref),
            state='open' if pr.state == 'open' else 'closed',
            body=pr.body,
        )

    @classmethod
    def from_payload(cls, payload: PullRequestPayload) -> 'PullRequest':
        """Build from a validated event payload."""
        return cls(
            number=payload.number,
            base_ref=BranchRef(payload.base.ref),
            head_ref=BranchRef(payload.head.ref),
            state='open' if payload.state == 'open' else 'closed',
            body=payload.body,
        )

    def __str__(self) -> str:
        return f"PR #{self.number} ({self.base_ref} <- {self.head_ref}, {self.state})"

# Define protocols for GitHub objects
@runtime_checkable
class GitHubRefProtocol(Protocol):
    """Protocol for GitHub ref objects (base/head references)."""
    @property
    def ref(self) -> str:
        """Get the ref name (e.g., 'main', 'feature-branch')."""
        ...

@runtime_checkable
class GitHubBranchProtocol(Protocol):
    """Protocol for GitHub branch objects."""
    @property
    def name(self) -> str:
        ...

@runtime_checkable
class GitHubIssueCommentProtocol(Protocol):
    """Protocol for GitHub issue comment objects (real or fake)."""
    @property
    def id(self) -> int:
        ...

    @property
    def body(self) -> Optional[str]:
        ...

    def edit(self, body: str) -> None:
        """Replace the comment body."""
        ...

@runtime_checkable
class GitHubPullRequestProtocol(Protocol):
    """Protocol for GitHub pull request objects (real or fake)."""
    @property
    def number(self) -> int:
        ...

    @property
    def body(self) -> Optional[str]:
        ...

    @property
    def state(self) -> str:
        """Get the PR state (open, closed)."""
        ...

    @property
    def base(self) -> GitHubRefProtocol:
        ...

    @property
    def head(self) -> GitHubRefProtocol:
        ...

    def edit(self, body: Optional[str] = None) -> None:
        """Edit the pull request."""
        ...

    def get_issue_comments(self) -> Iterable[GitHubIssueCommentProtocol]:
        """Get the conversation comments, oldest first."""
        ...

    def create_issue_comment(self, body: str) -> GitHubIssueCommentProtocol:
        """Add a comment to the pull request."""
        ...

@runtime_checkable
class GitHubRepoProtocol(Protocol):
    """Protocol for GitHub repository objects (real or fake)."""
    @property
    def default_branch(self) -> str:
        ...

    def get_pull(self, number: int) -> GitHubPullRequestProtocol:
        """Get a pull request by number."""
        ...

    def get_pulls(self, state: str = "open", sort: str = "",
                  direction: str = "") -> Iterable[GitHubPullRequestProtocol]:
        """Get pull requests, lazily paginated."""
        ...

    def get_branches(self) -> Iterable[GitHubBranchProtocol]:
        """Get remote branches."""
        ...

@runtime_checkable
class PyGithubProtocol(Protocol):
    """Protocol for PyGithub implementations (real or fake)."""
    def get_repo(self, full_name_or_id: str) -> GitHubRepoProtocol:
        """Get a repository by full name."""
        ...

def find_github_token() -> Optional[str]:
    """Find GitHub token from env vars or the gh CLI config."""
    import yaml
    from pathlib import Path

    # Action input first, then the usual environment variable
    for var in ("INPUT_GITHUB-TOKEN", "GITHUB_TOKEN"):
        token = os.environ.get(var, "").strip()
        if token:
            return token

    # Then try gh CLI config at ~/.config/gh/hosts.yml
    try:
        gh_config_path = Path.home() / ".config" / "gh" / "hosts.yml"
        if gh_config_path.exists():
            with open(gh_config_path, "r") as f:
                gh_config = yaml.safe_load(f)
                if gh_config and "github.com" in gh_config:
                    github_config: Dict[str, object] = gh_config["github.com"]
                    token = github_config.get("oauth_token")
                    if isinstance(token, str):
                        return token
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error reading gh CLI config: {e}")

    return None


class GitHubClient:
    """GitHub client implementation."""
    def __init__(self, config: BranchStackConfig, github_client: PyGithubProtocol):
        """Initialize with config and GitHub client implementation (real or fake)."""
        self.config = config
        self.client = github_client
        self._repo: Optional[GitHubRepoProtocol] = None

    @property
    def repo(self) -> GitHubRepoProtocol:
        """Get GitHub repository."""
        if self._repo is None:
            owner = self.config.repo.github_repo_owner
            name = self.config.repo.github_repo_name
            if not owner or not name:
                raise ValueError("Repository owner and name are not configured")
            logger.info(f"> github get repo {owner}/{name}")
            self._repo = self.client.get_repo(f"{owner}/{name}")
        return self._repo

    def get_default_branch(self) -> BranchRef:
        """Get the repository's default branch."""
        return BranchRef(self.repo.default_branch)

    def get_branch_names(self) -> List[BranchRef]:
        """Get the names of all remote branches."""
        logger.info("> github fetch branches")
        return [BranchRef(branch.name) for branch in self.repo.get_branches()]

    def get_pull_request(self, number: int) -> PullRequest:
        """Fetch a single pull request by number."""
        logger.info(f"> github fetch pull request #{number}")
        return PullRequest.from_github(self.repo.get_pull(number))

    def get_pull_requests(self, history_limit: int = 0) -> List[PullRequest]:
        """Fetch every open pull request plus recently closed ones.

        Closed pull requests are only needed to chain through merged bases, so
        pagination stops after `history_limit` of them (0 means no limit).
        Result is sorted by number, newest first.
        """
        logger.info("> github fetch open pull requests")
        pull_requests = [
            PullRequest.from_github(pr)
            for pr in self.repo.get_pulls(state="open", sort="created", direction="desc")
        ]

        logger.info(f"> github fetch closed pull requests (history limit: {history_limit or 'none'})")
        closed_count = 0
        for pr in self.repo.get_pulls(state="closed", sort="created", direction="desc"):
            if history_limit > 0 and closed_count >= history_limit:
                break
            pull_requests.append(PullRequest.from_github(pr))
            closed_count += 1

        pull_requests.sort(key=lambda pr: pr.number, reverse=True)
        logger.debug(f"Pull requests: {[(pr.number, pr.base_ref, pr.head_ref, pr.state) for pr in pull_requests]}")
        return pull_requests

    def update_pull_request_body(self, number: int, body: str) -> None:
        """Overwrite a pull request's description."""
        logger.info(f"> github update description of #{number}")
        self.repo.get_pull(number).edit(body=body)

    def get_issue_comments(self, number: int) -> List[GitHubIssueCommentProtocol]:
        """Get a pull request's conversation comments, oldest first."""
        logger.info(f"> github fetch comments of #{number}")
        return list(self.repo.get_pull(number).get_issue_comments())

    def create_comment(self, number: int, body: str) -> None:
        """Add a conversation comment to a pull request."""
        logger.info(f"> github create comment on #{number}")
        self.repo.get_pull(number).create_issue_comment(body)

    def edit_comment(self, number: int, comment: GitHubIssueCommentProtocol, body: str) -> None:
        """Overwrite an existing conversation comment."""
        logger.info(f"> github update comment {comment.id} on #{number}")
        comment.edit(body)
