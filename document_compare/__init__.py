"""
Document Comparison Module v2.0.0
=================================
Structural side-by-side comparison of two rich-text documents.

Features:
- Block extraction (text, tables, images) from loader-agnostic trees
- Three-pass alignment: exact, fuzzy (similarity > 0.6), leftovers
- Word-level inline diffs within modified text and table cells
- Mutual views: every change visible from both sides with placeholders
- Formatting-only change detection
- Detailed audit report (lines, table cells, images)
- Per-stage recovery with degraded fallback output
"""

from .routes import dc_blueprint
from .differ import DocumentDiffer, compare_documents, generate_report
from .aligner import BlockAligner
from .extractor import extract_blocks
from .models import (
    DocumentNode,
    AlignmentKind,
    LineStatus,
    BlockType,
    AlignmentEntry,
    ChangeSummary,
    DetailedReport,
    MutualView,
    ComparisonResult
)

__version__ = "2.0.0"
__all__ = [
    'dc_blueprint',
    'DocumentDiffer',
    'compare_documents',
    'generate_report',
    'BlockAligner',
    'extract_blocks',
    'DocumentNode',
    'AlignmentKind',
    'LineStatus',
    'BlockType',
    'AlignmentEntry',
    'ChangeSummary',
    'DetailedReport',
    'MutualView',
    'ComparisonResult'
]
