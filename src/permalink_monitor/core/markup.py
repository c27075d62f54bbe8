"""HTML walking and element-aware excerpts around links."""

import copy
from collections.abc import Callable, Iterator
from typing import Union

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from permalink_monitor.core.errors import MarkupError, RenderError

ELLIPSIS = "..."
ANCHOR_ELEMENT = "a"
PARSER = "html.parser"


def parse_fragment(html: str) -> BeautifulSoup:
    """Parse an HTML fragment leniently."""
    try:
        return BeautifulSoup(html, PARSER)
    except ParserRejectedMarkup as e:
        raise MarkupError(f"Could not parse markup: {e}") from e


def iter_anchors(root: Union[BeautifulSoup, Tag]) -> Iterator[Tag]:
    """Yield every anchor element under ``root`` in document order."""
    for node in root.descendants:
        if isinstance(node, Tag) and node.name == ANCHOR_ELEMENT:
            yield node


def find_links(html: str, visit: Callable[[Tag], None]) -> None:
    """Parse ``html`` and call ``visit`` for each anchor, depth first."""
    for anchor in iter_anchors(parse_fragment(html)):
        visit(anchor)


def is_text_node(node: PageElement) -> bool:
    # Comments, CDATA and doctypes are strings too but carry no visible text
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def find_text_nodes(node: PageElement) -> Iterator[NavigableString]:
    """Yield the text leaves of ``node`` in pre-order."""
    if is_text_node(node):
        yield node
        return

    if isinstance(node, Tag):
        for child in node.children:
            yield from find_text_nodes(child)


def _take_left(anchor: Tag, radius: int, holder: BeautifulSoup) -> None:
    remaining = radius
    truncated = False

    for sibling in anchor.previous_siblings:
        if truncated:
            break

        node = copy.copy(sibling)
        holder.insert(0, node)

        for leaf in reversed(list(find_text_nodes(node))):
            if truncated:
                leaf.replace_with("")
                continue

            if len(leaf) <= remaining:
                remaining -= len(leaf)
            else:
                leaf.replace_with(ELLIPSIS + leaf[len(leaf) - remaining:])
                truncated = True


def _take_right(anchor: Tag, radius: int, holder: BeautifulSoup) -> None:
    remaining = radius
    truncated = False

    for sibling in anchor.next_siblings:
        if truncated:
            break

        node = copy.copy(sibling)
        holder.append(node)

        for leaf in list(find_text_nodes(node)):
            if truncated:
                leaf.replace_with("")
                continue

            if len(leaf) <= remaining:
                remaining -= len(leaf)
            else:
                leaf.replace_with(leaf[:remaining] + ELLIPSIS)
                truncated = True


def excerpt_html(anchor: Tag, radius: int) -> str:
    """Render ``anchor`` with up to ``radius`` characters of context per side.

    Only the text of sibling nodes is shortened, element tags are always
    kept whole. Siblings are copied before truncation so the document the
    anchor belongs to is left untouched.
    """
    if radius < 0:
        raise ValueError(f"Excerpt radius must be >= 0, got {radius}")

    holder = BeautifulSoup("", PARSER)
    holder.append(copy.copy(anchor))
    _take_left(anchor, radius, holder)
    _take_right(anchor, radius, holder)

    try:
        return holder.decode(formatter="minimal")
    except Exception as e:
        raise RenderError(f"Could not render excerpt: {e}") from e
