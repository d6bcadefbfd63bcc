"""Branch dependency graph: construction and stack extraction.

A RepoGraph holds one node per branch. An edge `base -> head` means head's
branch is stacked directly on base's branch, so every branch has at most one
incoming edge. A StackGraph is the part of the RepoGraph relevant to one
pull request: its ancestors up to the nearest perennial or orphan branch,
and its whole descendant subtree.
"""

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Set, Tuple, Union

import networkx as nx

from ..exceptions import GraphInconsistencyError
from ..github import PullRequest
from ..typing import BranchRef


@dataclass(frozen=True)
class PerennialNode:
    """A long-lived branch such as main. Never a pull request."""
    ref: BranchRef


@dataclass(frozen=True)
class OrphanBranchNode:
    """A base branch with no pull request we could find."""
    ref: BranchRef


@dataclass(frozen=True)
class PullRequestNode:
    """A pull request, keyed by its head branch."""
    pull_request: PullRequest

    @property
    def ref(self) -> BranchRef:
        return self.pull_request.head_ref

    @property
    def number(self) -> int:
        return self.pull_request.number


StackNode = Union[PerennialNode, OrphanBranchNode, PullRequestNode]


def is_terminating(node: StackNode) -> bool:
    """Whether an ancestor walk stops at this node."""
    if isinstance(node, (PerennialNode, OrphanBranchNode)):
        return True
    if isinstance(node, PullRequestNode):
        return False
    raise TypeError(f"Unknown stack node: {node!r}")


class RepoGraph:
    """Directed graph of branches keyed by ref.

    Each networkx node carries its StackNode under the `node` attribute.
    Nodes and successors iterate in insertion order.
    """

    def __init__(self, graph: Optional[nx.DiGraph] = None) -> None:
        self.graph = graph if graph is not None else nx.DiGraph()

    def __contains__(self, ref: object) -> bool:
        return ref in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def __iter__(self) -> Iterator[BranchRef]:
        return iter(self.graph)

    def add_node(self, ref: BranchRef, node: StackNode) -> None:
        """Insert a node, replacing the value of an existing one."""
        self.graph.add_node(ref, node=node)

    def add_edge(self, base: BranchRef, head: BranchRef) -> None:
        """Add `base -> head`. Both nodes must exist; duplicates are ignored."""
        if base not in self.graph or head not in self.graph:
            raise GraphInconsistencyError(f"Cannot link {base} -> {head}: missing node")
        self.graph.add_edge(base, head)

    def node(self, ref: BranchRef) -> StackNode:
        return self.graph.nodes[ref]['node']

    def nodes(self) -> List[StackNode]:
        return [data['node'] for _, data in self.graph.nodes(data=True)]

    def heads(self, ref: BranchRef) -> List[BranchRef]:
        """Branches stacked directly on `ref`."""
        return list(self.graph.successors(ref))

    def bases(self, ref: BranchRef) -> List[BranchRef]:
        return list(self.graph.predecessors(ref))

    def edges(self) -> List[Tuple[BranchRef, BranchRef]]:
        return list(self.graph.edges())

    def neighbors(self, ref: BranchRef) -> List[BranchRef]:
        """Inbound and outbound neighbours of a node, without duplicates."""
        return list(dict.fromkeys(self.bases(ref) + self.heads(ref)))

    def induced(self, refs: Iterable[BranchRef]) -> nx.DiGraph:
        """Copy of the part of this graph induced by `refs`, in node order.

        Nodes are immutable so they are shared; adjacency is rebuilt.
        """
        keep = set(refs)
        graph = nx.DiGraph()
        graph.add_nodes_from((ref, data) for ref, data in self.graph.nodes(data=True) if ref in keep)
        graph.add_edges_from((base, head) for base, head in self.graph.edges() if base in keep and head in keep)
        return graph

    def topological_sort(self) -> List[BranchRef]:
        try:
            return list(nx.topological_sort(self.graph))
        except nx.NetworkXUnfeasible:
            raise GraphInconsistencyError("Branch graph contains a cycle")


class StackGraph(RepoGraph):
    """The stack of one pull request. Every node in it is printed."""

    def __init__(self, current: BranchRef, graph: Optional[nx.DiGraph] = None) -> None:
        super().__init__(graph)
        self.current = current

    def is_current(self, ref: BranchRef) -> bool:
        return ref == self.current

    def should_print(self, ref: BranchRef) -> bool:
        return ref in self.graph

    @property
    def root(self) -> BranchRef:
        """The single node without a base: the nearest terminating ancestor."""
        order = self.topological_sort()
        if not order:
            raise GraphInconsistencyError("Stack graph is empty")
        return order[0]

    def pull_requests(self) -> List[PullRequest]:
        """Pull requests in the stack, in graph order."""
        return [node.pull_request for node in self.nodes() if isinstance(node, PullRequestNode)]


def build_repo_graph(main_branch: BranchRef, perennial_branches: Iterable[BranchRef],
                     pull_requests: List[PullRequest]) -> RepoGraph:
    """Build the dependency graph of every open pull request.

    Args:
        main_branch: The repository's main branch
        perennial_branches: Other long-lived branches
        pull_requests: All open pull requests, plus closed ones used to
            chain through merged bases

    Returns:
        RepoGraph with perennial, pull request and orphan branch nodes
    """
    graph = RepoGraph()

    graph.add_node(main_branch, PerennialNode(main_branch))
    for branch in perennial_branches:
        graph.add_node(branch, PerennialNode(branch))

    open_pull_requests = [pr for pr in pull_requests if pr.is_open]

    # All open nodes must exist before any edge is resolved
    for pr in open_pull_requests:
        graph.add_node(pr.head_ref, PullRequestNode(pr))

    for pr in open_pull_requests:
        if pr.base_ref not in graph:
            base_pull_request = _find_by_head(pull_requests, pr.base_ref)
            if base_pull_request is not None and not base_pull_request.is_open:
                graph.add_node(pr.base_ref, PullRequestNode(base_pull_request))
            else:
                graph.add_node(pr.base_ref, OrphanBranchNode(pr.base_ref))
        graph.add_edge(pr.base_ref, pr.head_ref)

    return graph


def _find_by_head(pull_requests: List[PullRequest], head_ref: BranchRef) -> Optional[PullRequest]:
    for pr in pull_requests:
        if pr.head_ref == head_ref:
            return pr
    return None


def get_stack_graph(head_ref: BranchRef, repo_graph: RepoGraph) -> StackGraph:
    """Extract the stack of the pull request whose head is `head_ref`.

    The repo graph is not modified.
    """
    if head_ref not in repo_graph:
        raise GraphInconsistencyError(f"Branch {head_ref} is not part of the branch graph")

    graph = repo_graph.graph
    marked: Set[BranchRef] = {head_ref}

    # Ancestors, nearest first, until a perennial or orphan branch
    queue = deque([head_ref])
    while queue:
        ref = queue.popleft()
        if is_terminating(repo_graph.node(ref)):
            continue
        for base in graph.predecessors(ref):
            if base not in marked:
                marked.add(base)
                queue.append(base)

    # Every descendant
    marked.update(nx.dfs_preorder_nodes(graph, head_ref))

    return StackGraph(head_ref, repo_graph.induced(marked))
