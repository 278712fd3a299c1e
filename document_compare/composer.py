"""
Mutual View Composer v2.0.0
===========================
Turns the per-entry diffs into two parallel views where every change is
visible from both sides:

- equal: the same unmarked content on both sides
- modified text: each side shows its own content with inline markup; text
  the other side gained or lost appears as a dimmed [+...] / [-...] span
- modified table/image: both sides carry a structural-modified marker
- added: real content on the right, a type-tagged placeholder with a
  preview on the left (removed is the mirror image)

Views are built fresh; input trees and blocks are never modified.
"""

from typing import List, Optional, Sequence, Tuple

from config_logging import get_config, get_logger
from .models import (
    AlignmentKind, Block, BlockType, ChangeMarker, EntryDiff, ImageBlock,
    MutualView, TableBlock, TableDiff, TextBlock, ViewFragment
)
from .markup import (
    element, escape, image_element, placeholder, side_markup, truncate
)

logger = get_logger('document_compare.composer')

TEXT_MARKERS = {
    AlignmentKind.ADDED: 'git-line-added',
    AlignmentKind.REMOVED: 'git-line-removed',
    AlignmentKind.MODIFIED: 'git-line-modified',
}
STRUCTURAL_MARKERS = {
    AlignmentKind.ADDED: 'structural-added',
    AlignmentKind.REMOVED: 'structural-removed',
    AlignmentKind.MODIFIED: 'structural-modified',
}
ROW_MARKERS = {
    AlignmentKind.ADDED: 'git-row-added',
    AlignmentKind.REMOVED: 'git-row-removed',
}
CELL_MARKERS = {
    AlignmentKind.ADDED: 'git-cell-added',
    AlignmentKind.REMOVED: 'git-cell-removed',
    AlignmentKind.MODIFIED: 'git-cell-modified',
}


# =============================================================================
# BLOCK RENDERING
# =============================================================================

def _render_table(block: TableBlock, side: str, css_class: str = "",
                  table_diff: Optional[TableDiff] = None) -> str:
    """Render one side of a table, with row/cell markers from its diff."""
    if table_diff is None or table_diff.status in (AlignmentKind.ADDED, AlignmentKind.REMOVED):
        rows_html = ''.join(
            element('tr', ''.join(element('td', escape(cell.text)) for cell in row))
            for row in block.rows
        )
        return element('table', rows_html, css_class)

    # Rows/cells absent on this side are skipped; the other side marks them
    absent = AlignmentKind.ADDED if side == 'left' else AlignmentKind.REMOVED
    rows_html = []
    for row in table_diff.rows:
        if row.status == absent:
            continue
        cells_html = []
        for cell in row.cells:
            if cell.status == absent:
                continue
            html = cell.left_html if side == 'left' else cell.right_html
            cells_html.append(element('td', html, CELL_MARKERS.get(cell.status, '')))
        rows_html.append(element('tr', ''.join(cells_html), ROW_MARKERS.get(row.status, '')))
    return element('table', ''.join(rows_html), css_class)


def render_block(block: Block, side: str, marker: Optional[AlignmentKind] = None,
                 table_diff: Optional[TableDiff] = None) -> str:
    """Render a block's own content, optionally wrapped in a change marker."""
    if isinstance(block, TextBlock):
        return element(block.tag, escape(block.content), TEXT_MARKERS.get(marker, ''))
    if isinstance(block, TableBlock):
        return _render_table(block, side, STRUCTURAL_MARKERS.get(marker, ''), table_diff)
    return image_element(block.source_id, block.alt_text, STRUCTURAL_MARKERS.get(marker, ''))


def block_preview(block: Block, length: int) -> str:
    """Short description of a block for its placeholder on the other side."""
    if isinstance(block, ImageBlock):
        return truncate(block.alt_text or block.source_id, length)
    return truncate(block.content, length)


def _placeholder_fragment(block: Block, direction: AlignmentKind, length: int,
                          entry_index: int) -> ViewFragment:
    preview = block_preview(block, length)
    tag = block.tag if isinstance(block, TextBlock) else 'div'
    return ViewFragment(
        block_type=block.block_type,
        html=placeholder(block.block_type, direction, preview, tag),
        marker=direction,
        is_placeholder=True,
        preview=preview,
        entry_index=entry_index
    )


# =============================================================================
# COMPOSER
# =============================================================================

class MutualViewComposer:
    """
    Builds the left and right mutual views.

    Args:
        preview_length: Max characters of placeholder previews (default from config)
    """

    def __init__(self, preview_length: Optional[int] = None):
        self.preview_length = preview_length or get_config().preview_length

    def compose(self, entry_diffs: Sequence[EntryDiff]) -> Tuple[MutualView, MutualView]:
        left_view = MutualView(side='left')
        right_view = MutualView(side='right')
        for i, entry_diff in enumerate(entry_diffs):
            left_fragment, right_fragment = self.compose_entry(i, entry_diff)
            left_view.fragments.append(left_fragment)
            right_view.fragments.append(right_fragment)
        return left_view, right_view

    def compose_entry(self, i: int, entry_diff: EntryDiff) -> Tuple[ViewFragment, ViewFragment]:
        entry = entry_diff.entry
        kind = entry_diff.kind
        block_type = entry_diff.block_type

        if kind == AlignmentKind.ADDED:
            right = ViewFragment(block_type, render_block(entry.right, 'right', kind, entry_diff.table_diff),
                                 marker=kind, entry_index=i)
            return _placeholder_fragment(entry.right, kind, self.preview_length, i), right

        if kind == AlignmentKind.REMOVED:
            left = ViewFragment(block_type, render_block(entry.left, 'left', kind, entry_diff.table_diff),
                                marker=kind, entry_index=i)
            return left, _placeholder_fragment(entry.left, kind, self.preview_length, i)

        if kind == AlignmentKind.MODIFIED and block_type == BlockType.TEXT:
            left = ViewFragment(block_type, element(entry.left.tag, side_markup(entry_diff.text_ops, 'left'),
                                                    TEXT_MARKERS[kind]),
                                marker=kind, entry_index=i)
            right = ViewFragment(block_type, element(entry.right.tag, side_markup(entry_diff.text_ops, 'right'),
                                                     TEXT_MARKERS[kind]),
                                 marker=kind, entry_index=i)
            return left, right

        marker = kind if kind == AlignmentKind.MODIFIED else None
        left = ViewFragment(block_type, render_block(entry.left, 'left', marker, entry_diff.table_diff),
                            marker=marker, entry_index=i)
        right = ViewFragment(block_type, render_block(entry.right, 'right', marker, entry_diff.table_diff),
                             marker=marker, entry_index=i)
        return left, right


def render_plain(blocks: Sequence[Block], side: str) -> MutualView:
    """Unannotated view of a document's blocks."""
    return MutualView(side=side, fragments=[
        ViewFragment(block.block_type, render_block(block, side), entry_index=i)
        for i, block in enumerate(blocks)
    ])


def build_change_index(entry_diffs: Sequence[EntryDiff], preview_length: int) -> List[ChangeMarker]:
    """
    Navigation markers for every non-equal entry and every
    formatting-only text pair, in view order.
    """
    markers = []
    for i, entry_diff in enumerate(entry_diffs):
        if entry_diff.kind != AlignmentKind.EQUAL:
            kind = entry_diff.kind.value
        elif entry_diff.format_changes:
            kind = 'formatting'
        else:
            continue
        block = entry_diff.entry.right or entry_diff.entry.left
        markers.append(ChangeMarker(
            id=f"change-{len(markers)}",
            entry_index=i,
            kind=kind,
            block_type=entry_diff.block_type,
            preview=block_preview(block, preview_length)
        ))
    logger.debug("Change index built", changes=len(markers))
    return markers
