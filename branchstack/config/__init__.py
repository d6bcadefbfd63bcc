"""Config module."""

from typing import Dict, Any
from .models import RepoConfig, ToolConfig, BranchStackConfig

class Config(BranchStackConfig):
    """Config object holding repository and tool config.

    Built from the dict produced by `config_parser.parse_config`.
    """
    def __init__(self, config: Dict[str, Dict[str, Any]]):
        """Initialize with parsed config dict."""
        repo_config = config.get('repo', {})
        tool_config = config.get('tool', {})

        super().__init__(
            repo=RepoConfig.model_validate(repo_config),
            tool=ToolConfig.model_validate(tool_config),
        )

def default_config() -> Config:
    """Get default config without reading any file."""
    return Config({
        'repo': {},
        'tool': {
            'location': 'description',
            'skip_single_stacks': False,
            'history_limit': 0,
            'concurrency': 0,
        }
    })
