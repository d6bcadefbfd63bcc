"""Git interfaces and implementation."""

import os
import re
import shlex
import logging
from typing import Optional, Tuple
import git
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

# Get module logger
logger = logging.getLogger(__name__)

# git@github.com:owner/repo.git, ssh://git@github.com/owner/repo, https://github.com/owner/repo.git
_REMOTE_PATTERN = re.compile(r'[:/]([^/:]+)/([^/]+?)(?:\.git)?/?$')

def parse_remote_url(remote_url: str) -> Optional[Tuple[str, str]]:
    """Extract (owner, name) from a GitHub remote URL."""
    match = _REMOTE_PATTERN.search(remote_url.strip())
    if not match:
        return None
    return match.group(1), match.group(2)

class RealGit:
    """Real Git implementation."""
    def __init__(self, directory: Optional[str] = None):
        """Initialize with the working directory (defaults to cwd)."""
        self.directory = directory

    def run_cmd(self, command: str) -> str:
        """Run git command."""
        cmd_str = command.strip()
        logger.info(f"> git {cmd_str}")
        try:
            repo = git.Repo(self.directory or os.getcwd(), search_parent_directories=True)
            cmd_parts = shlex.split(cmd_str)
            method = getattr(repo.git, cmd_parts[0].replace('-', '_'))
            result = method(*cmd_parts[1:])
            return result if isinstance(result, str) else str(result)
        except GitCommandError as e:
            raise RuntimeError(f"Git command failed: {e}")
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise RuntimeError("Not in a git repository")
