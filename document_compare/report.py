"""
Report Generator v2.0.0
=======================
Flattens the per-entry diffs into the detailed audit report:

- lines: one ReportLine per aligned text pair or non-empty singleton, with
  1-based line numbers counting emitted lines per side (empty on the side
  without a counterpart)
- tables: table-, row- and cell-level changes keyed by 1-based ordinals
- images: per-image changes keyed by 1-based ordinal

Consumes the same EntryDiff sequence as the mutual views, so the report
and the views never disagree.
"""

from typing import List, Sequence

from config_logging import get_logger
from .models import (
    AlignmentKind, BlockType, DetailedReport, DiffOp, DiffOperation, EntryDiff,
    ImageReportEntry, LineStatus, ReportLine, TableDiff, TableReportEntry
)
from .markup import escape, report_markup, visible_spaces
from .extractor import is_empty

logger = get_logger('document_compare.report')

STATUS_BY_KIND = {
    AlignmentKind.EQUAL: LineStatus.UNCHANGED,
    AlignmentKind.ADDED: LineStatus.ADDED,
    AlignmentKind.REMOVED: LineStatus.REMOVED,
    AlignmentKind.MODIFIED: LineStatus.MODIFIED,
}


def _line_content(entry_diff: EntryDiff):
    """Status, markup and format notes of a text entry; None for empty singletons."""
    entry = entry_diff.entry
    kind = entry_diff.kind

    if kind == AlignmentKind.ADDED:
        if is_empty(entry.right):
            return None
        return (LineStatus.ADDED,
                report_markup([DiffOp(DiffOperation.INSERT, entry.right.content)]),
                ("added line",))

    if kind == AlignmentKind.REMOVED:
        if is_empty(entry.left):
            return None
        return (LineStatus.REMOVED,
                report_markup([DiffOp(DiffOperation.DELETE, entry.left.content)]),
                ("removed line",))

    if kind == AlignmentKind.MODIFIED:
        return LineStatus.MODIFIED, report_markup(entry_diff.text_ops), entry_diff.format_changes

    status = LineStatus.FORMATTING_ONLY if entry_diff.format_changes else LineStatus.UNCHANGED
    return status, visible_spaces(escape(entry.left.content)), entry_diff.format_changes


def _table_entries(table_diff: TableDiff) -> List[TableReportEntry]:
    t = table_diff.ordinal + 1
    if table_diff.status in (AlignmentKind.ADDED, AlignmentKind.REMOVED):
        return [TableReportEntry(t, STATUS_BY_KIND[table_diff.status])]

    entries = []
    for row in table_diff.rows:
        if row.status in (AlignmentKind.ADDED, AlignmentKind.REMOVED):
            entries.append(TableReportEntry(t, STATUS_BY_KIND[row.status], row=row.row + 1))
            continue
        for cell in row.cells:
            if cell.status == AlignmentKind.EQUAL:
                continue
            markup = report_markup(cell.ops) if cell.status == AlignmentKind.MODIFIED else ""
            entries.append(TableReportEntry(t, STATUS_BY_KIND[cell.status],
                                            row=row.row + 1, col=cell.column + 1,
                                            diff_markup=markup))
    return entries


class ReportGenerator:
    """Builds the DetailedReport from a sequence of entry diffs."""

    def generate(self, entry_diffs: Sequence[EntryDiff]) -> DetailedReport:
        report = DetailedReport()
        # Numbers count emitted lines per side, so skipped empty singletons leave no gap
        v1 = v2 = 0

        for entry_diff in entry_diffs:
            block_type = entry_diff.block_type
            if block_type == BlockType.TEXT:
                content = _line_content(entry_diff)
                if content is None:
                    continue
                left_no = right_no = ""
                if entry_diff.entry.left is not None:
                    v1 += 1
                    left_no = str(v1)
                if entry_diff.entry.right is not None:
                    v2 += 1
                    right_no = str(v2)
                status, markup, format_changes = content
                report.lines.append(ReportLine(left_no, right_no, status, markup, format_changes))
            elif block_type == BlockType.TABLE and entry_diff.table_diff is not None:
                report.tables.extend(_table_entries(entry_diff.table_diff))
            elif block_type == BlockType.IMAGE and entry_diff.image_diff is not None:
                image_diff = entry_diff.image_diff
                if image_diff.changed:
                    report.images.append(ImageReportEntry(
                        index=image_diff.ordinal + 1,
                        status=STATUS_BY_KIND[image_diff.status],
                        left_source=image_diff.left_source,
                        right_source=image_diff.right_source,
                        left_alt=image_diff.left_alt,
                        right_alt=image_diff.right_alt
                    ))

        report.tables.sort(key=lambda e: (e.table, e.row or 0, e.col or 0))
        report.images.sort(key=lambda e: e.index)

        logger.debug("Report generated", lines=len(report.lines),
                     table_changes=len(report.tables), image_changes=len(report.images))
        return report
