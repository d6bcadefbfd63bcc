"""Type definitions for GitHub API responses and event payloads."""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ValidationError

from ..exceptions import InputError

class RefPayload(BaseModel):
    ref: str

    class Config:
        """Pydantic config."""
        extra = "ignore"

class PullRequestPayload(BaseModel):
    """The `pull_request` object of a pull_request / pull_request_target event."""
    number: int
    base: RefPayload
    head: RefPayload
    state: str = "open"
    body: Optional[str] = None

    class Config:
        """Pydantic config."""
        extra = "ignore"

class EventPayload(BaseModel):
    """Subset of the workflow event payload we read."""
    pull_request: Optional[PullRequestPayload] = None

    class Config:
        """Pydantic config."""
        extra = "ignore"

def parse_pull_request_payload(payload: Dict[str, Any]) -> PullRequestPayload:
    """Parse the current pull request out of an event payload."""
    try:
        event = EventPayload.model_validate(payload)
    except ValidationError as e:
        raise InputError(f"Unable to determine current pull request from event payload: {e}")
    if event.pull_request is None:
        raise InputError("Unable to determine current pull request from event payload")
    return event.pull_request
