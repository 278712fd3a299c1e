"""
Table Differ v2.0.0
===================
Positional comparison of a table pair: rows by position, cells by
position within a row. Tables are never re-matched by similarity.

A missing row or cell is reported added/removed at its slot. A present
cell pair compares by normalized text; unequal cells are modified on
both sides and carry word-level markup for each side.
"""

from typing import Optional, Tuple, List

from config_logging import get_logger
from .models import (
    TableBlock, TableDiff, RowDiff, CellDiff, Cell, AlignmentKind
)
from .markup import escape, side_markup
from .text_diff import TextDiffer, texts_equal, diff_words

logger = get_logger('document_compare.table_differ')


def tables_equal(left: TableBlock, right: TableBlock) -> bool:
    """Same shape and normalized-equal text in every cell."""
    if len(left.rows) != len(right.rows):
        return False
    for lrow, rrow in zip(left.rows, right.rows):
        if len(lrow) != len(rrow):
            return False
        if not all(texts_equal(lc.text, rc.text) for lc, rc in zip(lrow, rrow)):
            return False
    return True


class TableDiffer:
    """
    Cell-by-cell table comparison.

    Args:
        text_differ: Differ for cell-local markup (default: process-wide)
    """

    def __init__(self, text_differ: Optional[TextDiffer] = None):
        self._diff_words = text_differ.diff_words if text_differ else diff_words

    def diff(self, left: Optional[TableBlock], right: Optional[TableBlock]) -> TableDiff:
        if left is None and right is None:
            raise ValueError("diff() needs at least one table")
        if left is None:
            return TableDiff(ordinal=right.ordinal, status=AlignmentKind.ADDED,
                             rows=self._single_side_rows(right.rows, AlignmentKind.ADDED))
        if right is None:
            return TableDiff(ordinal=left.ordinal, status=AlignmentKind.REMOVED,
                             rows=self._single_side_rows(left.rows, AlignmentKind.REMOVED))

        rows: List[RowDiff] = []
        for r in range(max(len(left.rows), len(right.rows))):
            lrow = left.rows[r] if r < len(left.rows) else None
            rrow = right.rows[r] if r < len(right.rows) else None
            rows.append(self._diff_row(r, lrow, rrow))

        changed = any(row.status != AlignmentKind.EQUAL for row in rows)
        status = AlignmentKind.MODIFIED if changed else AlignmentKind.EQUAL
        if changed:
            logger.debug("Table differs", ordinal=left.ordinal,
                         changed_rows=sum(1 for row in rows if row.status != AlignmentKind.EQUAL))
        return TableDiff(ordinal=left.ordinal, status=status, rows=tuple(rows))

    def _diff_row(self, r: int, lrow: Optional[Tuple[Cell, ...]],
                  rrow: Optional[Tuple[Cell, ...]]) -> RowDiff:
        if lrow is None:
            return RowDiff(r, AlignmentKind.ADDED, self._single_side_cells(rrow, AlignmentKind.ADDED))
        if rrow is None:
            return RowDiff(r, AlignmentKind.REMOVED, self._single_side_cells(lrow, AlignmentKind.REMOVED))

        cells = []
        for c in range(max(len(lrow), len(rrow))):
            lcell = lrow[c] if c < len(lrow) else None
            rcell = rrow[c] if c < len(rrow) else None
            cells.append(self._diff_cell(c, lcell, rcell))

        changed = any(cell.status != AlignmentKind.EQUAL for cell in cells)
        return RowDiff(r, AlignmentKind.MODIFIED if changed else AlignmentKind.EQUAL, tuple(cells))

    def _diff_cell(self, c: int, lcell: Optional[Cell], rcell: Optional[Cell]) -> CellDiff:
        if lcell is None:
            return CellDiff(c, AlignmentKind.ADDED, None, rcell.text, right_html=escape(rcell.text))
        if rcell is None:
            return CellDiff(c, AlignmentKind.REMOVED, lcell.text, None, left_html=escape(lcell.text))
        if texts_equal(lcell.text, rcell.text):
            return CellDiff(c, AlignmentKind.EQUAL, lcell.text, rcell.text,
                            left_html=escape(lcell.text), right_html=escape(rcell.text))

        ops = tuple(self._diff_words(lcell.text, rcell.text))
        return CellDiff(c, AlignmentKind.MODIFIED, lcell.text, rcell.text,
                        left_html=side_markup(ops, 'left'),
                        right_html=side_markup(ops, 'right'),
                        ops=ops)

    @staticmethod
    def _single_side_cells(row: Tuple[Cell, ...], status: AlignmentKind) -> Tuple[CellDiff, ...]:
        if status == AlignmentKind.ADDED:
            return tuple(CellDiff(c, status, None, cell.text, right_html=escape(cell.text))
                         for c, cell in enumerate(row))
        return tuple(CellDiff(c, status, cell.text, None, left_html=escape(cell.text))
                     for c, cell in enumerate(row))

    def _single_side_rows(self, rows, status: AlignmentKind) -> Tuple[RowDiff, ...]:
        return tuple(RowDiff(r, status, self._single_side_cells(row, status))
                     for r, row in enumerate(rows))


def diff_tables(left: Optional[TableBlock], right: Optional[TableBlock]) -> TableDiff:
    """Compare a positional table pair with the default differ."""
    return TableDiffer().diff(left, right)
