"""
Block Extractor v2.0.0
======================
Walks a document tree and yields the ordered list of comparable blocks:
text-like blocks, tables, and images.

Rules:
- Tables and images are emitted at any nesting depth.
- A text-like node is emitted only when it holds no nested text-like or
  table node and is not itself inside a table (tables own their cell text).
- Emission follows depth-first document order; each block keeps its
  position index for alignment tie-breaks.
"""

from typing import List, Optional, Tuple

from config_logging import get_logger
from .models import (
    DocumentNode, Formatting, TextBlock, TableBlock, ImageBlock, Cell, Block
)
from .text_diff import normalize_text

logger = get_logger('document_compare.extractor')

TEXT_TAGS = frozenset({'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'li', 'pre'})
TABLE_TAG = 'table'
IMAGE_TAG = 'img'
ROW_TAG = 'tr'
CELL_TAGS = frozenset({'td', 'th'})
ROW_GROUP_TAGS = frozenset({'thead', 'tbody', 'tfoot'})

BOLD_TAGS = frozenset({'b', 'strong'})
ITALIC_TAGS = frozenset({'i', 'em'})
UNDERLINE_TAGS = frozenset({'u'})


def _truthy(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on', 'bold', 'italic', 'underline')
    return bool(value)


def extract_formatting(node: DocumentNode) -> Formatting:
    """Read presentation attributes from a node and its inline descendants."""
    attrs = node.attrs
    descendant_tags = {d.tag for d in node.iter_descendants()}
    return Formatting(
        bold=_truthy(attrs.get('bold')) or bool(descendant_tags & BOLD_TAGS),
        italic=_truthy(attrs.get('italic')) or bool(descendant_tags & ITALIC_TAGS),
        underline=_truthy(attrs.get('underline')) or bool(descendant_tags & UNDERLINE_TAGS),
        font_size=str(attrs.get('font_size') or ''),
        alignment=str(attrs.get('alignment') or attrs.get('align') or '')
    )


def _has_nested_block(node: DocumentNode) -> bool:
    return any(d.tag in TEXT_TAGS or d.tag == TABLE_TAG for d in node.iter_descendants())


def _table_rows(node: DocumentNode) -> Tuple[Tuple[Cell, ...], ...]:
    """Rows owned by this table (nested tables keep their own rows)."""
    rows = []
    pending = list(reversed(node.children))
    while pending:
        child = pending.pop()
        if child.tag == ROW_TAG:
            cells = tuple(
                Cell(text=cell.text_content().strip())
                for cell in child.children if cell.tag in CELL_TAGS
            )
            rows.append(cells)
        elif child.tag in ROW_GROUP_TAGS:
            pending.extend(reversed(child.children))
    return tuple(rows)


class BlockExtractor:
    """Depth-first extractor assigning position and per-type ordinals."""

    def __init__(self):
        self._blocks: List[Block] = []
        self._text_count = 0
        self._table_count = 0
        self._image_count = 0

    def extract(self, tree: Optional[DocumentNode]) -> List[Block]:
        self._blocks = []
        self._text_count = self._table_count = self._image_count = 0
        if tree is not None:
            self._walk(tree)
        logger.debug("Blocks extracted", blocks=len(self._blocks),
                     text_blocks=self._text_count, tables=self._table_count,
                     images=self._image_count)
        return self._blocks

    def _walk(self, tree: DocumentNode):
        stack = [(tree, False)]
        while stack:
            node, in_table = stack.pop()
            self._visit(node, in_table)
            in_table = in_table or node.tag == TABLE_TAG
            stack.extend((child, in_table) for child in reversed(node.children))

    def _visit(self, node: DocumentNode, in_table: bool):
        tag = node.tag

        if tag == TABLE_TAG:
            self._blocks.append(TableBlock(
                index=len(self._blocks),
                ordinal=self._table_count,
                rows=_table_rows(node)
            ))
            self._table_count += 1
        elif tag == IMAGE_TAG:
            self._blocks.append(ImageBlock(
                index=len(self._blocks),
                ordinal=self._image_count,
                source_id=str(node.attrs.get('src') or ''),
                alt_text=str(node.attrs.get('alt') or '')
            ))
            self._image_count += 1
        elif tag in TEXT_TAGS and not in_table and not _has_nested_block(node):
            self._blocks.append(TextBlock(
                index=len(self._blocks),
                ordinal=self._text_count,
                tag=tag,
                content=node.text_content(),
                formatting=extract_formatting(node)
            ))
            self._text_count += 1


def extract_blocks(tree: Optional[DocumentNode]) -> List[Block]:
    """Extract comparable blocks from a document tree (None = empty)."""
    return BlockExtractor().extract(tree)


def is_empty(block: Block) -> bool:
    """A block is empty when its normalized text is the empty string."""
    return normalize_text(block.content) == ""
