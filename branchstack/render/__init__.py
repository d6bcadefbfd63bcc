"""Render a stack graph as a markdown list and inject it into a document."""

import re
from typing import Iterable, List, Set, Tuple

from ..graph import OrphanBranchNode, PerennialNode, PullRequestNode, StackGraph, StackNode
from ..markdown import AnyBlock, Document, HtmlBlock, ListBlock, Paragraph
from ..typing import BranchRef

# Marks where the visualization lives in a description or comment
ANCHOR = '<!-- branch-stack -->'
CURRENT_MARKER = '👈'
ORPHAN_WARNING = '⚠ No PR associated with branch'
# Must match what `render_visualization` prints for the current pull request
POINTER_PATTERN = re.compile(r'#\d+ ' + CURRENT_MARKER)
_CODE_SPAN = re.compile(r'(`+)(?!`).*?(?<!`)\1(?!`)', re.S)


def _label(node: StackNode, terminating_refs: Set[BranchRef]) -> str:
    if isinstance(node, OrphanBranchNode):
        return f"`{node.ref}` - {ORPHAN_WARNING}"
    if isinstance(node, PerennialNode):
        return f"`{node.ref}`" if node.ref in terminating_refs else ''
    if isinstance(node, PullRequestNode):
        return f"#{node.number}"
    raise TypeError(f"Unknown stack node: {node!r}")


def render_visualization(stack_graph: StackGraph, terminating_refs: Iterable[BranchRef]) -> str:
    """Render the stack as an indented markdown list, root first.

    The root line carries the anchor so the list itself marks where it was
    injected. Children are visited depth-first in graph order.
    """
    terminating = set(terminating_refs)
    lines: List[str] = []

    pending: List[Tuple[BranchRef, int]] = [(stack_graph.root, 0)]
    while pending:
        ref, depth = pending.pop()
        if not stack_graph.should_print(ref):
            continue

        parts = ['-']
        label = _label(stack_graph.node(ref), terminating)
        if label:
            parts.append(label)
        if stack_graph.is_current(ref):
            parts.append(CURRENT_MARKER)
        if depth == 0:
            parts.append(ANCHOR)
        lines.append(' ' * (depth * 2) + ' '.join(parts))

        for head in reversed(stack_graph.heads(ref)):
            pending.append((head, depth + 1))

    return "\n".join(lines)


def _without_code(text: str) -> str:
    """Text with inline code spans removed, so documented markers don't count."""
    return _CODE_SPAN.sub('', text)


def is_standalone_anchor(block: AnyBlock) -> bool:
    return isinstance(block, HtmlBlock) and block.text == ANCHOR


def has_inline_anchor(block: AnyBlock) -> bool:
    """A list whose root item line carries the anchor, i.e. a previous visualization."""
    if not isinstance(block, ListBlock):
        return False
    for item in block.items:
        # An unlabelled root line parses as an HTML block
        first = item.blocks[0] if item.blocks else None
        if isinstance(first, (Paragraph, HtmlBlock)) and ANCHOR in _without_code(first.text):
            return True
    return False


def is_unanchored_visualization(block: AnyBlock) -> bool:
    """A single-rooted list pointing at a pull request, e.g. one whose anchor was edited away."""
    if not isinstance(block, ListBlock) or len(block.items) != 1:
        return False
    return any(POINTER_PATTERN.search(_without_code(paragraph.text))
               for paragraph in block.items[0].paragraphs())


def _is_previous_visualization(block: AnyBlock) -> bool:
    return is_standalone_anchor(block) or has_inline_anchor(block) or is_unanchored_visualization(block)


def inject_visualization(visualization: str, content: str) -> str:
    """Merge a visualization into markdown content.

    The first standalone anchor, else the first list carrying the anchor, is
    replaced in place. Every other anchor and previous visualization is
    removed. Without either, the visualization is appended. Applying the same
    visualization twice gives the same result as applying it once.

    Raises:
        DocumentParseError: If content is not text
    """
    document = Document.parse(content)
    visualization_blocks = Document.parse(visualization).blocks

    target = document.find_index(is_standalone_anchor)
    if target < 0:
        target = document.find_index(has_inline_anchor)

    blocks: List[AnyBlock] = []
    for index, block in enumerate(document.blocks):
        if index == target:
            blocks.extend(visualization_blocks)
        elif not _is_previous_visualization(block):
            blocks.append(block)
    if target < 0:
        blocks.extend(visualization_blocks)

    document.splice(0, len(document.blocks), blocks)
    return document.render()
