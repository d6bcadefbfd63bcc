"""Pydantic models for config types."""

from typing import List, Optional
from pydantic import BaseModel, Field

from ..typing import LocationKind

class RepoConfig(BaseModel):
    """Repository configuration."""
    github_repo_owner: Optional[str] = None
    github_repo_name: Optional[str] = None
    main_branch: Optional[str] = None
    perennials: List[str] = Field(default_factory=list)
    perennial_regex: Optional[str] = None

    class Config:
        """Pydantic config."""
        extra = "allow"

class ToolConfig(BaseModel):
    """Tool configuration."""
    location: LocationKind = "description"
    skip_single_stacks: bool = False
    history_limit: int = Field(default=0, ge=0)
    concurrency: int = Field(default=0, ge=0)
    pretend: bool = False

    class Config:
        """Pydantic config."""
        extra = "allow"

class BranchStackConfig(BaseModel):
    """Full branchstack configuration."""
    repo: RepoConfig = Field(default_factory=RepoConfig)
    tool: ToolConfig = Field(default_factory=ToolConfig)

    class Config:
        """Pydantic config."""
        extra = "allow"

class GitTownBranches(BaseModel):
    """The [branches] table of a Git Town config file."""
    main: Optional[str] = None
    perennials: Optional[List[str]] = None
    perennial_regex: Optional[str] = Field(default=None, alias="perennial-regex")

    class Config:
        """Pydantic config."""
        extra = "ignore"
        populate_by_name = True

class GitTownConfig(BaseModel):
    """Schema of `.git-branches.toml` / `.git-town.toml`."""
    branches: Optional[GitTownBranches] = None

    class Config:
        """Pydantic config."""
        extra = "ignore"
