"""Where a stack visualization is published: the description or a comment."""

import sys
import logging
from typing import IO, Optional, Protocol

from ..github import GitHubClient, PullRequest
from ..pretty import header
from ..render import ANCHOR, inject_visualization
from ..typing import LocationKind

logger = logging.getLogger(__name__)

class Location(Protocol):
    """Publishes a visualization for one pull request. Raises on failure."""
    def update(self, pull_request: PullRequest, visualization: str) -> None:
        ...

class DescriptionLocation:
    """Keeps the visualization inside the pull request description."""
    def __init__(self, github: GitHubClient):
        self.github = github

    def update(self, pull_request: PullRequest, visualization: str) -> None:
        description = inject_visualization(visualization, pull_request.body or '')
        logger.debug(f"Updated description for #{pull_request.number}:\n{description}")
        self.github.update_pull_request_body(pull_request.number, description)

class CommentLocation:
    """Keeps the visualization in a dedicated conversation comment."""
    def __init__(self, github: GitHubClient):
        self.github = github

    def update(self, pull_request: PullRequest, visualization: str) -> None:
        comments = self.github.get_issue_comments(pull_request.number)
        # Most recent comment carrying the anchor wins
        existing = next((c for c in reversed(comments) if ANCHOR in (c.body or '')), None)

        if existing is not None:
            content = inject_visualization(visualization, existing.body or '')
            logger.debug(f"Updated comment {existing.id} for #{pull_request.number}:\n{content}")
            self.github.edit_comment(pull_request.number, existing, content)
        else:
            content = inject_visualization(visualization, '')
            logger.debug(f"New comment for #{pull_request.number}:\n{content}")
            self.github.create_comment(pull_request.number, content)

class PretendLocation:
    """Prints what would be published without touching GitHub."""
    def __init__(self, output: Optional[IO[str]] = None):
        self.output = output

    def update(self, pull_request: PullRequest, visualization: str) -> None:
        output = self.output or sys.stdout
        description = inject_visualization(visualization, pull_request.body or '')
        # One write per pull request so concurrent updates don't interleave
        output.write(f"{header(f'PR #{pull_request.number}', use_emoji=False)}\n{description}\n")

def create_location(kind: LocationKind, github: Optional[GitHubClient] = None,
                    pretend: bool = False, output: Optional[IO[str]] = None) -> Location:
    """Create the location for `kind`. Pretend mode never needs a GitHub client."""
    if pretend:
        return PretendLocation(output)
    if github is None:
        raise ValueError("A GitHub client is required to publish")
    if kind == 'description':
        return DescriptionLocation(github)
    if kind == 'comment':
        return CommentLocation(github)
    raise ValueError(f"Invalid location: {kind}")
