"""Adapter classes to wrap PyGithub objects with our protocol interfaces."""

from typing import Iterator, Optional

from github import Github
from github.Repository import Repository
from github.PullRequest import PullRequest as PyGithubPullRequest
from github.IssueComment import IssueComment
from github.GithubObject import NotSet

from . import (
    PyGithubProtocol,
    GitHubRepoProtocol,
    GitHubPullRequestProtocol,
    GitHubIssueCommentProtocol,
    GitHubBranchProtocol,
    GitHubRefProtocol,
)


class PyGithubIssueCommentAdapter(GitHubIssueCommentProtocol):
    """Adapter for PyGithub IssueComment objects."""

    def __init__(self, comment: IssueComment) -> None:
        self._comment = comment

    @property
    def id(self) -> int:
        return self._comment.id

    @property
    def body(self) -> Optional[str]:
        return self._comment.body

    def edit(self, body: str) -> None:
        self._comment.edit(body)


class PyGithubPullRequestAdapter(GitHubPullRequestProtocol):
    """Adapter for PyGithub PullRequest objects."""

    def __init__(self, pr: PyGithubPullRequest) -> None:
        self._pr = pr

    @property
    def number(self) -> int:
        return self._pr.number

    @property
    def body(self) -> Optional[str]:
        return self._pr.body

    @property
    def state(self) -> str:
        return self._pr.state

    @property
    def base(self) -> GitHubRefProtocol:
        return self._pr.base

    @property
    def head(self) -> GitHubRefProtocol:
        return self._pr.head

    def edit(self, body: Optional[str] = None) -> None:
        """Edit the pull request."""
        # Convert None to NotSet for PyGithub
        self._pr.edit(body=body if body is not None else NotSet)

    def get_issue_comments(self) -> Iterator[GitHubIssueCommentProtocol]:
        """Get conversation comments, oldest first."""
        for comment in self._pr.get_issue_comments():
            yield PyGithubIssueCommentAdapter(comment)

    def create_issue_comment(self, body: str) -> GitHubIssueCommentProtocol:
        """Add a comment to the pull request."""
        return PyGithubIssueCommentAdapter(self._pr.create_issue_comment(body))


class PyGithubRepoAdapter(GitHubRepoProtocol):
    """Adapter for PyGithub Repository objects."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    @property
    def default_branch(self) -> str:
        return self._repo.default_branch

    def get_pull(self, number: int) -> GitHubPullRequestProtocol:
        """Get a pull request by number."""
        return PyGithubPullRequestAdapter(self._repo.get_pull(number))

    def get_pulls(self, state: str = "open", sort: str = "",
                  direction: str = "") -> Iterator[GitHubPullRequestProtocol]:
        """Get pull requests, following pagination lazily."""
        # Convert empty strings to NotSet for PyGithub
        pulls = self._repo.get_pulls(
            state=state,
            sort=sort if sort else NotSet,
            direction=direction if direction else NotSet,
        )
        for pr in pulls:
            yield PyGithubPullRequestAdapter(pr)

    def get_branches(self) -> Iterator[GitHubBranchProtocol]:
        """Get remote branches."""
        return iter(self._repo.get_branches())


class PyGithubAdapter(PyGithubProtocol):
    """Adapter for the main PyGithub object."""

    def __init__(self, github: Github) -> None:
        self._github = github

    def get_repo(self, full_name_or_id: str) -> GitHubRepoProtocol:
        """Get a repository by full name."""
        return PyGithubRepoAdapter(self._github.get_repo(full_name_or_id))


def create_pygithub_client(token: str) -> PyGithubAdapter:
    """Create a real PyGithub client wrapped in our adapter."""
    from github import Auth
    return PyGithubAdapter(Github(auth=Auth.Token(token)))
