"""
Document Differ v2.0.0
======================
Structural comparison pipeline:

    extract (x2) -> align -> per-entry sub-diffs -> mutual views + report

The views, the summary and the detailed report are all derived from one
sequence of EntryDiffs, so they always agree.

Failure policy:
- A failing sub-diff, composition step or report falls back to a neutral
  result for its slice and is listed in ComparisonResult.stage_failures.
- Anything else escaping the pipeline yields the degraded output: both
  documents unannotated, an all-zero summary, an empty report, and
  degraded=True. compare() never raises.
"""

from typing import List, Optional, Sequence, Tuple

from config_logging import AppConfig, get_config, get_logger
from .models import (
    AlignmentEntry, AlignmentKind, BlockType, ChangeSummary, ComparisonResult,
    DetailedReport, DocumentNode, EntryDiff, MutualView, ViewFragment, empty_tree
)
from .extractor import extract_blocks
from .aligner import BlockAligner
from .text_diff import TextDiffer
from .table_differ import TableDiffer
from .image_differ import diff_images
from .formatting import format_delta
from .composer import MutualViewComposer, build_change_index, render_block, render_plain
from .report import ReportGenerator
from .markup import element, escape
from .stages import StageLog

logger = get_logger('document_compare.differ')


def _raw_text(value) -> str:
    """Concatenated text of a possibly malformed tree; non-nodes count as text."""
    parts = []
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, DocumentNode):
            parts.append(str(item.text or ''))
            children = item.children if isinstance(item.children, (list, tuple)) else [item.children]
            stack.extend(reversed(children))
        elif item:
            parts.append(str(item))
    return ''.join(parts)


def summarize(entry_diffs: Sequence[EntryDiff]) -> ChangeSummary:
    """One addition/deletion credit per structurally significant change."""
    summary = ChangeSummary()
    for entry_diff in entry_diffs:
        summary.record(entry_diff.kind)
    return summary


class DocumentDiffer:
    """
    Document comparison engine producing mutual views and a detailed report.

    Args:
        similarity_threshold: Fuzzy-match floor (default from config)
        preview_length: Placeholder preview length (default from config)
        config: Configuration to read defaults from (default: global config)
    """

    def __init__(self, similarity_threshold: Optional[float] = None,
                 preview_length: Optional[int] = None,
                 config: Optional[AppConfig] = None):
        config = config or get_config()
        self.similarity_threshold = (similarity_threshold if similarity_threshold is not None
                                     else config.similarity_threshold)
        self.preview_length = preview_length or config.preview_length
        self.fast_path = config.fast_path

        self.text_differ = TextDiffer.from_config(config)
        self.aligner = BlockAligner(self.similarity_threshold, self.text_differ)
        self.table_differ = TableDiffer(self.text_differ)
        self.composer = MutualViewComposer(self.preview_length)
        self.reporter = ReportGenerator()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def compare(self, left: Optional[DocumentNode], right: Optional[DocumentNode]) -> ComparisonResult:
        """
        Compare two document trees. Never raises; see the module failure policy.

        Args:
            left: Left (original) document tree; None is an empty document
            right: Right (revised) document tree; None is an empty document

        Returns:
            ComparisonResult with views, summary, detailed report and alignment
        """
        try:
            with logger.log_operation('document_compare'):
                return self._compare(left, right)
        except Exception as e:
            return self._degraded(left, right, e)

    def report(self, left: Optional[DocumentNode], right: Optional[DocumentNode]) -> DetailedReport:
        """
        Generate the detailed report alone, re-deriving the alignment.

        Returns an empty report when the pipeline fails.
        """
        try:
            with logger.log_operation('document_report'):
                stage_log = StageLog()
                entry_diffs = self.entry_diffs(left, right, stage_log)
                return stage_log.run('report', self.reporter.generate, DetailedReport, entry_diffs)
        except Exception as e:
            logger.error(f"Report generation degraded: {type(e).__name__}: {e}")
            return DetailedReport()

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def _compare(self, left: Optional[DocumentNode], right: Optional[DocumentNode]) -> ComparisonResult:
        left = left or empty_tree()
        right = right or empty_tree()

        stage_log = StageLog()

        if self.fast_path and left == right:
            blocks = extract_blocks(left)
            logger.info("Documents identical, skipping comparison", blocks=len(blocks))
            entry_diffs = [EntryDiff(AlignmentEntry(b, b, AlignmentKind.EQUAL), AlignmentKind.EQUAL)
                           for b in blocks]
            return ComparisonResult(
                left_view=render_plain(blocks, 'left'),
                right_view=render_plain(blocks, 'right'),
                detailed=stage_log.run('report', self.reporter.generate, DetailedReport, entry_diffs),
                alignment=[ed.entry for ed in entry_diffs],
                stage_failures=stage_log.failures
            )

        entry_diffs = self.entry_diffs(left, right, stage_log)

        left_view = MutualView(side='left')
        right_view = MutualView(side='right')
        for i, entry_diff in enumerate(entry_diffs):
            left_fragment, right_fragment = stage_log.run(
                'compose', self.composer.compose_entry,
                lambda: self._plain_pair(i, entry_diff), i, entry_diff
            )
            left_view.fragments.append(left_fragment)
            right_view.fragments.append(right_fragment)

        detailed = stage_log.run('report', self.reporter.generate, DetailedReport, entry_diffs)
        summary = summarize(entry_diffs)

        logger.info("Comparison complete", entries=len(entry_diffs),
                    additions=summary.additions, deletions=summary.deletions,
                    stage_failures=len(stage_log.failures))

        return ComparisonResult(
            left_view=left_view,
            right_view=right_view,
            summary=summary,
            detailed=detailed,
            alignment=[ed.entry for ed in entry_diffs],
            changes=build_change_index(entry_diffs, self.preview_length),
            stage_failures=stage_log.failures
        )

    def entry_diffs(self, left: Optional[DocumentNode], right: Optional[DocumentNode],
                    stage_log: Optional[StageLog] = None) -> List[EntryDiff]:
        """Extract, align and sub-diff both trees; the shared input of views and report."""
        stage_log = stage_log if stage_log is not None else StageLog()
        left_blocks = extract_blocks(left)
        right_blocks = extract_blocks(right)
        alignment = self.aligner.align(left_blocks, right_blocks)
        return [self._diff_entry(entry, stage_log) for entry in alignment]

    def _diff_entry(self, entry: AlignmentEntry, stage_log: StageLog) -> EntryDiff:
        """Run the sub-diffs an entry needs; failed sub-diffs count as no change."""
        block_type = entry.block_type
        single_sided = entry.kind in (AlignmentKind.ADDED, AlignmentKind.REMOVED)

        if block_type == BlockType.TABLE:
            table_diff = stage_log.run('table_diff', self.table_differ.diff, lambda: None,
                                       entry.left, entry.right)
            if table_diff is None:
                return EntryDiff(entry, entry.kind if single_sided else AlignmentKind.EQUAL)
            return EntryDiff(entry, table_diff.status, table_diff=table_diff)

        if block_type == BlockType.IMAGE:
            image_diff = stage_log.run('image_diff', diff_images, lambda: None, entry.left, entry.right)
            if image_diff is None:
                return EntryDiff(entry, entry.kind if single_sided else AlignmentKind.EQUAL)
            return EntryDiff(entry, image_diff.status, image_diff=image_diff)

        if single_sided:
            return EntryDiff(entry, entry.kind)

        format_changes = tuple(stage_log.run('format_delta', format_delta, list,
                                             entry.left.formatting, entry.right.formatting))
        if entry.kind != AlignmentKind.MODIFIED:
            return EntryDiff(entry, entry.kind, format_changes=format_changes)

        ops = stage_log.run('text_diff', self.text_differ.diff_words, lambda: None,
                            entry.left.content, entry.right.content)
        if ops is None:
            return EntryDiff(entry, AlignmentKind.EQUAL, format_changes=format_changes)
        return EntryDiff(entry, AlignmentKind.MODIFIED, text_ops=tuple(ops), format_changes=format_changes)

    @staticmethod
    def _plain_pair(i: int, entry_diff: EntryDiff) -> Tuple[ViewFragment, ViewFragment]:
        """Unmarked rendering of an entry; a missing side renders empty."""
        entry = entry_diff.entry
        block_type = entry_diff.block_type
        left_html = render_block(entry.left, 'left') if entry.left is not None else ""
        right_html = render_block(entry.right, 'right') if entry.right is not None else ""
        return (ViewFragment(block_type, left_html, entry_index=i),
                ViewFragment(block_type, right_html, entry_index=i))

    # -------------------------------------------------------------------------
    # Degraded output
    # -------------------------------------------------------------------------

    def _degraded(self, left, right, error: Exception) -> ComparisonResult:
        message = f"{type(error).__name__}: {error}"
        logger.error(f"Comparison degraded to unannotated output: {message}")
        return ComparisonResult(
            left_view=self._unannotated_view(left, 'left'),
            right_view=self._unannotated_view(right, 'right'),
            degraded=True,
            error=message
        )

    @staticmethod
    def _unannotated_view(tree, side: str) -> MutualView:
        """Original content without markers; raw text if blocks cannot be read."""
        if tree is None:
            return MutualView(side=side)
        try:
            return render_plain(extract_blocks(tree), side)
        except Exception as e:
            logger.warning(f"Block rendering failed for {side} view, showing raw text: {e}")
            return MutualView(side=side, fragments=[
                ViewFragment(BlockType.TEXT, element('div', escape(_raw_text(tree))))
            ])


# Convenience functions
def compare_documents(left: Optional[DocumentNode], right: Optional[DocumentNode],
                      **kwargs) -> ComparisonResult:
    """
    Compare two document trees.

    Args:
        left: Left document tree
        right: Right document tree
        **kwargs: Passed to DocumentDiffer

    Returns:
        ComparisonResult
    """
    return DocumentDiffer(**kwargs).compare(left, right)


def generate_report(left: Optional[DocumentNode], right: Optional[DocumentNode],
                    **kwargs) -> DetailedReport:
    """Detailed report for two document trees, generated independently of views."""
    return DocumentDiffer(**kwargs).report(left, right)
