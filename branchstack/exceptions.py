"""Exceptions raised by branchstack."""

from typing import List


class BranchStackError(Exception):
    """Base error for branchstack."""


class InputError(BranchStackError):
    """Invalid or missing input (location, event payload, history limit)."""


class GraphInconsistencyError(BranchStackError):
    """The branch/pull request data cannot form a valid stack graph."""


class DocumentParseError(BranchStackError):
    """A pull request body or comment could not be read as a document."""


class PublishError(BranchStackError):
    """One or more pull requests could not be updated."""

    def __init__(self, failed: List[int]):
        self.failed = list(failed)
        numbers = ", ".join(f"#{number}" for number in self.failed)
        super().__init__(f"Action failed for {numbers}")
