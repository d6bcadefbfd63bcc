"""CLI entry point."""

import os
import sys
import click
import logging
from typing import Optional, Tuple, Dict, Any
from click import Context

from ...config import Config
from ...config.config_parser import parse_config
from ...exceptions import InputError
from ...git import RealGit
from ...github import GitHubClient, find_github_token
from ...graph import PullRequestNode, get_stack_graph
from ...inputs import (
    check_event_name, get_current_pull_request, parse_bool, parse_history_limit,
    parse_location, read_event_payload, resolve_main_branch, resolve_perennial_branches,
)
from ...locations import create_location
from ...pretty import print_header, print_json
from ...stack import BranchStack, StackContext

# Get module logger
logger = logging.getLogger(__name__)

def check(err: Exception) -> None:
    """Log error and exit."""
    logger.error(f"{err}")
    sys.exit(1)

class AliasedGroup(click.Group):
    """Command group with support for aliases."""

    def __init__(self, name: Optional[str] = None, commands: Optional[Dict[str, click.Command]] = None, **attrs: Any) -> None:
        """Initialize with aliases map."""
        super().__init__(name, commands, **attrs)
        self.aliases: Dict[str, str] = {}

    def add_alias(self, alias: str, command: str) -> None:
        """Add an alias for a command."""
        self.aliases[alias] = command

    def get_command(self, ctx: Context, cmd_name: str) -> Optional[click.Command]:
        """Get a command by name, supporting aliases."""
        if cmd_name in self.aliases:
            cmd_name = self.aliases[cmd_name]
        return super().get_command(ctx, cmd_name)

@click.group(cls=AliasedGroup)
@click.pass_context
def cli(ctx: Context) -> None:
    """Keep a map of stacked pull requests in every pull request of the stack."""
    ctx.ensure_object(dict)

def setup_config(directory: Optional[str], repository: Optional[str]) -> Config:
    """Load config files and resolve the target repository."""
    if directory:
        os.chdir(directory)

    cfg = parse_config(RealGit())
    if repository:
        if '/' not in repository:
            raise InputError(f"Invalid repository: {repository} (expected OWNER/NAME)")
        owner, name = repository.split('/', 1)
        cfg['repo']['github_repo_owner'] = owner
        cfg['repo']['github_repo_name'] = name
    return Config(cfg)

def setup_github(config: Config, token: Optional[str]) -> GitHubClient:
    """Create a real PyGithub client wrapped in our adapter."""
    from ...github.adapters import create_pygithub_client

    token = token or find_github_token()
    if not token:
        error_msg = "No GitHub token found. Try one of:\n1. Pass --github-token\n2. Set GITHUB_TOKEN env var\n3. Log in with 'gh auth login'"
        raise InputError(error_msg)
    return GitHubClient(config, create_pygithub_client(token))

def resolve_context(config: Config, github: GitHubClient, pull_request_number: Optional[int],
                    event_path: Optional[str], event_name: Optional[str], main_branch: Optional[str],
                    perennial_branch: Tuple[str, ...], perennial_regex: Optional[str]) -> StackContext:
    """Fetch everything a run needs from GitHub and the event payload."""
    if pull_request_number is not None:
        current = github.get_pull_request(pull_request_number)
    elif event_path:
        if event_name:
            check_event_name(event_name)
        current = get_current_pull_request(read_event_payload(event_path))
    else:
        raise InputError("Pass --pull-request or run from a pull_request workflow (GITHUB_EVENT_PATH)")

    resolved_main = resolve_main_branch(github.get_default_branch(), config.repo, main_branch)
    regex = perennial_regex or config.repo.perennial_regex
    remote_branches = github.get_branch_names() if regex else []
    perennials = resolve_perennial_branches(config.repo, list(perennial_branch), perennial_regex, remote_branches)
    pull_requests = github.get_pull_requests(config.tool.history_limit)

    return StackContext(
        main_branch=resolved_main,
        current_pull_request=current,
        pull_requests=pull_requests,
        perennial_branches=perennials,
        skip_single_stacks=config.tool.skip_single_stacks,
    )

def _common_options(f: Any) -> Any:
    options = [
        click.option('-C', '--directory', type=click.Path(exists=True, file_okay=False, dir_okay=True),
                     help='Run as if branchstack was started in DIRECTORY instead of the current working directory'),
        click.option('--github-token', envvar='INPUT_GITHUB-TOKEN', help="GitHub token (defaults to GITHUB_TOKEN or gh CLI login)"),
        click.option('--repository', envvar='GITHUB_REPOSITORY', help="OWNER/NAME of the repository"),
        click.option('--pull-request', '-p', 'pull_request_number', type=int,
                     help="Number of the current pull request (instead of the event payload)"),
        click.option('--event-path', envvar='GITHUB_EVENT_PATH', help="Path to the workflow event payload"),
        click.option('--event-name', envvar='GITHUB_EVENT_NAME', help="Name of the workflow event"),
        click.option('--main-branch', envvar='INPUT_MAIN-BRANCH', help="Override the main branch"),
        click.option('--perennial-branch', multiple=True, help="Perennial branch (repeatable)"),
        click.option('--perennial-regex', envvar='INPUT_PERENNIAL-REGEX', help="Remote branches matching this regex are perennial"),
        click.option('--history-limit', envvar='INPUT_HISTORY-LIMIT',
                     help="Number of closed pull requests to search for merged bases (0 = all)"),
        click.option('-v', '--verbose', count=True, help="Increase verbosity (can be used multiple times for more verbosity)"),
    ]
    for option in reversed(options):
        f = option(f)
    return f

def _perennial_input(perennial_branch: Tuple[str, ...]) -> Tuple[str, ...]:
    """Repeated flags, else the multiline action input."""
    if perennial_branch:
        return perennial_branch
    raw = os.environ.get('INPUT_PERENNIAL-BRANCHES', '')
    return tuple(line.strip() for line in raw.splitlines() if line.strip())

@cli.command(name="update", help="Update the stack visualization on every pull request of the current stack")
@_common_options
@click.option('--location', envvar='INPUT_LOCATION', help="Where to keep the visualization: description or comment")
@click.option('--skip-single-stacks', envvar='INPUT_SKIP-SINGLE-STACKS',
              help="Do nothing when the pull request is not part of a stack (true/false)")
@click.option('--concurrency', type=int, help="Maximum number of pull requests updated at once (0 = all)")
@click.option('--pretend', is_flag=True, help="Don't update pull requests, just print what would be written")
@click.pass_context
def update(ctx: Context, directory: Optional[str], github_token: Optional[str], repository: Optional[str],
           pull_request_number: Optional[int], event_path: Optional[str], event_name: Optional[str],
           main_branch: Optional[str], perennial_branch: Tuple[str, ...], perennial_regex: Optional[str],
           history_limit: Optional[str], verbose: int, location: Optional[str],
           skip_single_stacks: Optional[str], concurrency: Optional[int], pretend: bool) -> None:
    """Update command."""
    from ... import setup_logging
    setup_logging(verbose)

    try:
        config = setup_config(directory, repository)
        if location:
            config.tool.location = parse_location(location)
        if skip_single_stacks:
            config.tool.skip_single_stacks = parse_bool(skip_single_stacks, 'skip-single-stacks')
        if history_limit:
            config.tool.history_limit = parse_history_limit(history_limit)
        if concurrency is not None:
            config.tool.concurrency = concurrency
        config.tool.pretend = config.tool.pretend or pretend
        logger.info(f"Config: {config.model_dump()}")

        github = setup_github(config, github_token)
        stack_ctx = resolve_context(config, github, pull_request_number, event_path, event_name,
                                    main_branch, _perennial_input(perennial_branch), perennial_regex)

        target = create_location(config.tool.location, github, pretend=config.tool.pretend)
        result = BranchStack(config, target).update(stack_ctx)
        ctx.obj['result'] = result
        if result.skipped:
            logger.info("Nothing to do")
        else:
            logger.info(f"Updated {', '.join(f'#{n}' for n in result.updated)}")
    except Exception as e:
        check(e)

@cli.command(name="show", help="Print the stack of a pull request without updating anything")
@_common_options
@click.option('--json', 'as_json', is_flag=True, help="Print the stack members as JSON")
@click.pass_context
def show(ctx: Context, directory: Optional[str], github_token: Optional[str], repository: Optional[str],
         pull_request_number: Optional[int], event_path: Optional[str], event_name: Optional[str],
         main_branch: Optional[str], perennial_branch: Tuple[str, ...], perennial_regex: Optional[str],
         history_limit: Optional[str], verbose: int, as_json: bool) -> None:
    """Show command."""
    from ... import setup_logging
    setup_logging(verbose)

    try:
        config = setup_config(directory, repository)
        if history_limit:
            config.tool.history_limit = parse_history_limit(history_limit)
        github = setup_github(config, github_token)
        stack_ctx = resolve_context(config, github, pull_request_number, event_path, event_name,
                                    main_branch, _perennial_input(perennial_branch), perennial_regex)

        stacked = BranchStack(config, create_location(config.tool.location, pretend=True))
        repo_graph = stacked.build_graph(stack_ctx)
        head_ref = stack_ctx.current_pull_request.head_ref
        if as_json:
            stack_graph = get_stack_graph(head_ref, repo_graph)
            print_json([_describe(stack_graph.node(ref), stack_graph.is_current(ref)) for ref in stack_graph])
            return
        print_header(f"Stack of PR #{stack_ctx.current_pull_request.number}")
        click.echo(stacked.visualize(stack_ctx, repo_graph, head_ref))
    except Exception as e:
        check(e)

def _describe(node: Any, is_current: bool) -> Dict[str, Any]:
    info: Dict[str, Any] = {'ref': node.ref, 'type': type(node).__name__, 'current': is_current}
    if isinstance(node, PullRequestNode):
        info['number'] = node.number
        info['state'] = node.pull_request.state
    return info


def main() -> None:
    """Main entry point."""
    # Add command aliases
    cli.aliases['up'] = 'update'
    cli.aliases['st'] = 'show'
    cli(obj={})

if __name__ == "__main__":
    main()
