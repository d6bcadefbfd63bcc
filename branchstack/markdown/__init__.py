"""Minimal block-level markdown.

Only what is needed to find a previous stack visualization in a pull request
description and splice a new one in: headings, paragraphs, HTML blocks, code
blocks, thematic breaks, block quotes and (nested) lists. Every block other
than a list keeps its source lines and prints them back unchanged. Lists are
printed from their structure, so their spacing and indentation is normalized.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Union

from ..exceptions import DocumentParseError

_FENCE_OPEN = re.compile(r'^( {0,3})(`{3,}|~{3,})(.*)$')
_ATX_HEADING = re.compile(r'^ {0,3}#{1,6}(?:[ \t]|$)')
_SETEXT_UNDERLINE = re.compile(r'^ {0,3}(?:=+|-+)[ \t]*$')
_THEMATIC_BREAK = re.compile(r'^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$')
_HTML_COMMENT = re.compile(r'^ {0,3}<!--')
_HTML_TAG = re.compile(r'^ {0,3}</?[A-Za-z][A-Za-z0-9-]*(?:[ \t>]|/>|$)')
_BLOCK_QUOTE = re.compile(r'^ {0,3}>')
_LIST_ITEM = re.compile(
    r'^(?P<indent> {0,3})(?P<marker>[-+*]|\d{1,9}[.)])(?P<space>[ \t]+|$)(?P<rest>.*)$'
)
_ESCAPED = re.compile(r'\\([!-/:-@\[-`{-~])')

_OTHER_BULLET = {'-': '*', '*': '-', '+': '-'}
_OTHER_DELIMITER = {'.': ')', ')': '.'}


@dataclass
class Block:
    """A block kept exactly as written."""
    lines: List[str]

    def render(self) -> List[str]:
        return list(self.lines)


class Heading(Block):
    pass


class Paragraph(Block):
    @property
    def text(self) -> str:
        """Paragraph text with indentation and backslash escapes removed."""
        return _ESCAPED.sub(r'\1', "\n".join(line.strip() for line in self.lines))


class HtmlBlock(Block):
    @property
    def text(self) -> str:
        return "\n".join(self.lines).strip()


class CodeBlock(Block):
    pass


class ThematicBreak(Block):
    pass


class BlockQuote(Block):
    pass


@dataclass
class ListItem:
    """One item of a list. `spread` items separate their blocks with blank lines."""
    marker: str
    blocks: List['AnyBlock'] = field(default_factory=list)
    spread: bool = False

    def paragraphs(self) -> Iterable[Paragraph]:
        """Every paragraph in this item, at any nesting depth."""
        for block in self.blocks:
            if isinstance(block, Paragraph):
                yield block
            elif isinstance(block, ListBlock):
                for item in block.items:
                    yield from item.paragraphs()


@dataclass
class ListBlock:
    """A bullet or ordered list. `bullet` is the marker char or the delimiter."""
    items: List[ListItem]
    ordered: bool = False
    bullet: str = '-'
    loose: bool = False

    def render(self, bullet: Optional[str] = None) -> List[str]:
        bullet = bullet or self.bullet
        lines: List[str] = []
        for index, item in enumerate(self.items):
            if index and self.loose:
                lines.append('')
            if self.ordered:
                marker = item.marker[:-1] + bullet
            else:
                marker = bullet
            lines.extend(_render_item(item, marker))
        return lines


AnyBlock = Union[Block, ListBlock]


def _render_item(item: ListItem, marker: str) -> List[str]:
    body = render_blocks(item.blocks, tight=not item.spread)
    if not body:
        return [marker]
    width = len(marker) + 1
    lines = [f"{marker} {body[0]}" if body[0] else marker]
    lines.extend(' ' * width + line if line else '' for line in body[1:])
    return lines


def render_blocks(blocks: List[AnyBlock], tight: bool = False) -> List[str]:
    """Print blocks, switching a list's marker when it would merge with the list before it."""
    lines: List[str] = []
    previous: Optional[ListBlock] = None
    previous_bullet = ''
    for index, block in enumerate(blocks):
        if index and not tight:
            lines.append('')
        if isinstance(block, ListBlock):
            bullet = block.bullet
            if previous is not None and previous.ordered == block.ordered and previous_bullet == bullet:
                bullet = (_OTHER_DELIMITER if block.ordered else _OTHER_BULLET)[bullet]
            lines.extend(block.render(bullet))
            previous, previous_bullet = block, bullet
        else:
            lines.extend(block.render())
            previous, previous_bullet = None, ''
    return lines


def _expand(line: str) -> str:
    """Expand tabs in leading whitespace only."""
    stripped = line.lstrip(' \t')
    return line[:len(line) - len(stripped)].expandtabs(4) + stripped


def _indent(line: str) -> int:
    expanded = _expand(line)
    return len(expanded) - len(expanded.lstrip(' '))


def _is_blank(line: str) -> bool:
    return not line.strip()


def _list_item(line: str) -> Optional['re.Match[str]']:
    if _THEMATIC_BREAK.match(line):
        return None
    return _LIST_ITEM.match(_expand(line))


def _interrupts_paragraph(line: str) -> bool:
    if (_ATX_HEADING.match(line) or _FENCE_OPEN.match(line) or _THEMATIC_BREAK.match(line)
            or _HTML_COMMENT.match(line) or _BLOCK_QUOTE.match(line)):
        return True
    match = _list_item(line)
    if match is None or not match.group('rest').strip():
        return False
    marker = match.group('marker')
    return not marker[0].isdigit() or int(marker[:-1]) == 1


def _same_list(match: 're.Match[str]', ordered: bool, bullet: str) -> bool:
    marker = match.group('marker')
    if ordered:
        return marker[0].isdigit() and marker[-1] == bullet
    return marker == bullet


class _BlockParser:
    """Parses a list of lines (already dedented) into blocks."""

    def __init__(self, lines: List[str]):
        self.lines = lines
        self.pos = 0
        # One entry per parsed block: was it preceded by a blank line
        self.blank_before: List[bool] = []

    def parse(self) -> List[AnyBlock]:
        blocks: List[AnyBlock] = []
        saw_blank = False
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            if _is_blank(line):
                saw_blank = True
                self.pos += 1
                continue
            blocks.append(self._block(line))
            self.blank_before.append(saw_blank)
            saw_blank = False
        return blocks

    def _take_while(self, predicate: Callable[[str], bool]) -> List[str]:
        taken: List[str] = []
        while self.pos < len(self.lines) and predicate(self.lines[self.pos]):
            taken.append(self.lines[self.pos])
            self.pos += 1
        return taken

    def _block(self, line: str) -> AnyBlock:
        fence = _FENCE_OPEN.match(line)
        if fence and not (fence.group(2)[0] == '`' and '`' in fence.group(3)):
            return self._fenced_code(fence)
        if _indent(line) >= 4:
            return self._indented_code()
        if _ATX_HEADING.match(line):
            self.pos += 1
            return Heading([line])
        if _THEMATIC_BREAK.match(line):
            self.pos += 1
            return ThematicBreak([line])
        if _HTML_COMMENT.match(line):
            return self._html_comment()
        if _HTML_TAG.match(line):
            return HtmlBlock(self._take_while(lambda l: not _is_blank(l)))
        if _BLOCK_QUOTE.match(line):
            return BlockQuote(self._take_while(lambda l: not _is_blank(l)))
        match = _list_item(line)
        if match:
            return self._list(match)
        return self._paragraph()

    def _fenced_code(self, fence: 're.Match[str]') -> CodeBlock:
        marker = fence.group(2)
        closing = re.compile(r'^ {0,3}' + re.escape(marker[0]) + '{' + str(len(marker)) + r',}[ \t]*$')
        lines = [self.lines[self.pos]]
        self.pos += 1
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            lines.append(line)
            self.pos += 1
            if closing.match(line):
                break
        return CodeBlock(lines)

    def _indented_code(self) -> CodeBlock:
        lines = self._take_while(lambda l: _is_blank(l) or _indent(l) >= 4)
        while lines and _is_blank(lines[-1]):
            lines.pop()
            self.pos -= 1
        return CodeBlock(lines)

    def _html_comment(self) -> HtmlBlock:
        lines: List[str] = []
        first = True
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            lines.append(line)
            self.pos += 1
            search_from = line.index('<!--') + 4 if first else 0
            first = False
            if '-->' in line[search_from:]:
                break
        return HtmlBlock(lines)

    def _paragraph(self) -> Block:
        lines = [self.lines[self.pos]]
        self.pos += 1
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            if _is_blank(line):
                break
            if _SETEXT_UNDERLINE.match(line):
                self.pos += 1
                return Heading(lines + [line])
            if _interrupts_paragraph(line):
                break
            lines.append(line)
            self.pos += 1
        return Paragraph(lines)

    def _list(self, match: 're.Match[str]') -> ListBlock:
        marker = match.group('marker')
        ordered = marker[0].isdigit()
        bullet = marker[-1] if ordered else marker
        items: List[ListItem] = []
        loose = False

        while self.pos < len(self.lines):
            start = self.pos
            while self.pos < len(self.lines) and _is_blank(self.lines[self.pos]):
                self.pos += 1
            match = _list_item(self.lines[self.pos]) if self.pos < len(self.lines) else None
            if match is None or not _same_list(match, ordered, bullet):
                # Blank lines after the list belong to the parent
                self.pos = start
                break
            if items and self.pos > start:
                loose = True
            item_parser = _BlockParser(self._item_lines(match))
            blocks = item_parser.parse()
            items.append(ListItem(match.group('marker'), blocks, any(item_parser.blank_before[1:])))

        return ListBlock(items, ordered=ordered, bullet=bullet, loose=loose)

    def _item_lines(self, match: 're.Match[str]') -> List[str]:
        """Collect one item's content, dedented to its content column."""
        space = match.group('space').expandtabs(4)
        rest = match.group('rest')
        if not rest.strip():
            width = 1
            first = ''
        elif len(space) > 4:
            width = 1
            first = ' ' * (len(space) - 1) + rest
        else:
            width = len(space)
            first = rest
        content_indent = len(match.group('indent')) + len(match.group('marker')) + width

        lines = [first]
        self.pos += 1
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            if _is_blank(line):
                lines.append('')
                self.pos += 1
                continue
            if _indent(line) >= content_indent:
                lines.append(_expand(line)[content_indent:])
                self.pos += 1
                continue
            if lines[-1] and not _interrupts_paragraph(line) and not _list_item(line):
                # Lazy paragraph continuation
                lines.append(line.lstrip())
                self.pos += 1
                continue
            break

        while len(lines) > 1 and lines[-1] == '':
            lines.pop()
            self.pos -= 1
        return lines


class Document:
    """An ordered sequence of top-level blocks."""

    def __init__(self, blocks: Optional[List[AnyBlock]] = None):
        self.blocks: List[AnyBlock] = blocks if blocks is not None else []

    @classmethod
    def parse(cls, content: Union[str, bytes, None]) -> 'Document':
        """Parse markdown text. Raises DocumentParseError if it is not text."""
        if content is None:
            content = ''
        if isinstance(content, bytes):
            try:
                content = content.decode('utf-8')
            except UnicodeDecodeError as e:
                raise DocumentParseError(f"Document is not valid UTF-8: {e}")
        if not isinstance(content, str):
            raise DocumentParseError(f"Cannot parse {type(content).__name__} as markdown")
        lines = content.replace('\r\n', '\n').replace('\r', '\n').split('\n')
        return cls(_BlockParser(lines).parse())

    def find_index(self, predicate: Callable[[AnyBlock], bool]) -> int:
        """Index of the first top-level block matching `predicate`, or -1."""
        for index, block in enumerate(self.blocks):
            if predicate(block):
                return index
        return -1

    def splice(self, index: int, delete_count: int, blocks: Iterable[AnyBlock] = ()) -> None:
        """Replace `delete_count` blocks at `index` with `blocks`."""
        self.blocks[index:index + delete_count] = list(blocks)

    def render(self) -> str:
        lines = render_blocks(self.blocks)
        if not lines:
            return ''
        return "\n".join(lines) + "\n"


def parse(content: Union[str, bytes, None]) -> Document:
    return Document.parse(content)
