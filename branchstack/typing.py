"""Common types used across the codebase."""

from typing import Literal, NewType, Protocol

# Branch names are opaque identifiers
BranchRef = NewType('BranchRef', str)

PullRequestState = Literal['open', 'closed']
LocationKind = Literal['description', 'comment']

class GitInterface(Protocol):
    """Protocol for what the config parser expects from git."""
    def run_cmd(self, command: str) -> str:
        ...
