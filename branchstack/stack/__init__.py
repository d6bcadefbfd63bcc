"""Stack visualization orchestration."""

import concurrent.futures
import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..config.models import BranchStackConfig
from ..exceptions import PublishError
from ..github import PullRequest
from ..graph import PerennialNode, RepoGraph, StackGraph, build_repo_graph, get_stack_graph
from ..locations import Location
from ..render import render_visualization
from ..typing import BranchRef

logger = logging.getLogger(__name__)

@dataclass
class StackContext:
    """Everything a run needs, resolved from inputs and GitHub."""
    main_branch: BranchRef
    current_pull_request: PullRequest
    pull_requests: List[PullRequest]
    perennial_branches: List[BranchRef] = field(default_factory=list)
    skip_single_stacks: bool = False

    @property
    def terminating_refs(self) -> List[BranchRef]:
        return [self.main_branch] + [b for b in self.perennial_branches if b != self.main_branch]

@dataclass
class UpdateResult:
    """Outcome of a run once every publish has settled."""
    updated: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    skipped: bool = False

def should_skip(stack_graph: StackGraph, skip_single_stacks: bool) -> bool:
    """A pull request based directly on a perennial branch with nothing stacked on it."""
    if not skip_single_stacks:
        return False
    neighbors = stack_graph.neighbors(stack_graph.current)
    return len(neighbors) == 1 and isinstance(stack_graph.node(neighbors[0]), PerennialNode)

class BranchStack:
    """Builds the stack of the current pull request and publishes it to every member."""

    def __init__(self, config: BranchStackConfig, location: Location):
        self.config = config
        self.location = location
        self.concurrency: int = config.tool.concurrency

    def build_graph(self, ctx: StackContext) -> RepoGraph:
        logger.info(f"Building branch graph from {len(ctx.pull_requests)} pull requests")
        repo_graph = build_repo_graph(ctx.main_branch, ctx.perennial_branches, ctx.pull_requests)
        logger.info(f"Branch graph: {len(repo_graph)} branches, {len(repo_graph.edges())} edges")
        logger.debug(f"Edges: {repo_graph.edges()}")
        return repo_graph

    def visualize(self, ctx: StackContext, repo_graph: RepoGraph, head_ref: BranchRef) -> str:
        """Render the stack as seen from the pull request at `head_ref`."""
        stack_graph = get_stack_graph(head_ref, repo_graph)
        visualization = render_visualization(stack_graph, ctx.terminating_refs)
        logger.debug(f"Visualization for {head_ref}:\n{visualization}")
        return visualization

    def update(self, ctx: StackContext) -> UpdateResult:
        """Publish the visualization to every pull request of the current stack.

        Raises:
            GraphInconsistencyError: If the current pull request is not in the graph
            PublishError: After all publishes settled, if any of them failed
        """
        repo_graph = self.build_graph(ctx)
        stack_graph = get_stack_graph(ctx.current_pull_request.head_ref, repo_graph)
        logger.info(f"Stack of #{ctx.current_pull_request.number}: {list(stack_graph)}")

        if should_skip(stack_graph, ctx.skip_single_stacks):
            logger.info(f"#{ctx.current_pull_request.number} is not part of a stack, skipping")
            return UpdateResult(skipped=True)

        jobs: List[Tuple[PullRequest, str]] = []
        for pull_request in stack_graph.pull_requests():
            jobs.append((pull_request, self.visualize(ctx, repo_graph, pull_request.head_ref)))

        result = self.publish_all(jobs)
        if result.failed:
            raise PublishError(result.failed)
        return result

    def publish_all(self, jobs: List[Tuple[PullRequest, str]]) -> UpdateResult:
        """Run every publish concurrently and wait for all of them, failed or not."""
        result = UpdateResult()
        if not jobs:
            return result

        max_workers = self.concurrency if self.concurrency > 0 else len(jobs)
        logger.info(f"Updating {len(jobs)} pull requests")
        futures: Dict[Future[None], PullRequest] = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            for pull_request, visualization in jobs:
                futures[executor.submit(self._publish, pull_request, visualization)] = pull_request
            concurrent.futures.wait(futures)

        for future, pull_request in futures.items():
            error: Optional[BaseException] = future.exception()
            if error is None:
                result.updated.append(pull_request.number)
            else:
                logger.error(f"Unable to update PR #{pull_request.number}: {error}")
                result.failed.append(pull_request.number)

        result.updated.sort()
        result.failed.sort()
        return result

    def _publish(self, pull_request: PullRequest, visualization: str) -> None:
        logger.info(f"Updating PR #{pull_request.number}")
        self.location.update(pull_request, visualization)
        logger.info(f"✅ Updated PR #{pull_request.number}")
