"""
Document Comparison Models v2.0.0
=================================
Data classes for the document tree, extracted blocks, alignment,
sub-diffs, reports, and mutual views.

Input types (DocumentNode, blocks) are frozen; every output type exposes
to_dict() for JSON serialization.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Dict, Optional, Any, Tuple, Union


# =============================================================================
# ENUMERATIONS
# =============================================================================

class DiffOperation(IntEnum):
    """Text diff operation. Values match diff-match-patch opcodes."""
    DELETE = -1
    EQUAL = 0
    INSERT = 1


class AlignmentKind(str, Enum):
    EQUAL = "equal"
    MODIFIED = "modified"
    ADDED = "added"
    REMOVED = "removed"


class LineStatus(str, Enum):
    UNCHANGED = "UNCHANGED"
    ADDED = "ADDED"
    REMOVED = "REMOVED"
    MODIFIED = "MODIFIED"
    FORMATTING_ONLY = "FORMATTING-ONLY"


class BlockType(str, Enum):
    TEXT = "text"
    TABLE = "table"
    IMAGE = "image"


# =============================================================================
# DOCUMENT TREE (input boundary)
# =============================================================================

@dataclass(frozen=True, eq=False)
class DocumentNode:
    """
    One node of a loader-produced document tree.

    Attributes:
        tag: Lower-case element name ('p', 'h2', 'table', 'img', 'b', ...)
        text: The node's own text, placed before its children
        attrs: Descriptive attributes (src, alt, bold, font_size, alignment, ...)
        children: Child nodes in document order

    Traversal, equality and (de)serialization use explicit stacks, so
    nesting depth is not bounded by the interpreter's recursion limit.
    """
    tag: str
    text: str = ""
    attrs: Dict[str, Any] = field(default_factory=dict)
    children: Tuple['DocumentNode', ...] = ()

    def __eq__(self, other):
        if not isinstance(other, DocumentNode):
            return NotImplemented
        pairs = [(self, other)]
        while pairs:
            a, b = pairs.pop()
            if a is b:
                continue
            if not (isinstance(a, DocumentNode) and isinstance(b, DocumentNode)):
                if isinstance(a, DocumentNode) or isinstance(b, DocumentNode) or a != b:
                    return False
                continue
            if (a.tag != b.tag or a.text != b.text or a.attrs != b.attrs
                    or len(a.children) != len(b.children)):
                return False
            pairs.extend(zip(a.children, b.children))
        return True

    __hash__ = None

    def text_content(self) -> str:
        """Own text followed by all descendant text, in document order."""
        parts = [self.text]
        parts.extend(node.text for node in self.iter_descendants())
        return ''.join(parts)

    def iter_descendants(self):
        """Yield every descendant depth-first, excluding self."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        root: Dict[str, Any] = {}
        stack = [(self, root)]
        while stack:
            node, result = stack.pop()
            result['tag'] = node.tag
            if node.text:
                result['text'] = node.text
            if node.attrs:
                result['attrs'] = dict(node.attrs)
            if node.children:
                result['children'] = [{} for _ in node.children]
                stack.extend(zip(node.children, result['children']))
        return root

    @staticmethod
    def _child_list(data) -> list:
        if not isinstance(data, dict):
            raise TypeError(f"Document node must be an object, got {type(data).__name__}")
        children = data.get('children') or []
        if not isinstance(children, list):
            raise TypeError("Document node 'children' must be a list")
        return children

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocumentNode':
        """
        Build a tree from its JSON form.

        Raises:
            TypeError: If a node is not a dict or children is not a list
            KeyError: If a node has no tag
        """
        # Post-order: each frame is (data, child data, finished child nodes)
        stack = [(data, cls._child_list(data), [])]
        while True:
            current, pending, built = stack[-1]
            if len(built) < len(pending):
                child = pending[len(built)]
                stack.append((child, cls._child_list(child), []))
                continue
            stack.pop()
            node = cls(
                tag=str(current['tag']).lower(),
                text=str(current.get('text') or ''),
                attrs=dict(current.get('attrs') or {}),
                children=tuple(built)
            )
            if not stack:
                return node
            stack[-1][2].append(node)


def empty_tree() -> DocumentNode:
    """A document with no content (zero blocks)."""
    return DocumentNode(tag='body')


# =============================================================================
# BLOCKS
# =============================================================================

@dataclass(frozen=True)
class Formatting:
    """Presentation attributes of a text block."""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    font_size: str = ""
    alignment: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'bold': self.bold,
            'italic': self.italic,
            'underline': self.underline,
            'font_size': self.font_size,
            'alignment': self.alignment
        }


@dataclass(frozen=True)
class TextBlock:
    """
    A paragraph-like block.

    Attributes:
        index: Position in the extraction order of its document
        ordinal: Position among the text blocks of its document
        tag: Element tag ('p', 'h1', 'li', ...)
        content: Raw text content
        formatting: Presentation attributes
    """
    index: int
    ordinal: int
    tag: str
    content: str
    formatting: Formatting = field(default_factory=Formatting)

    block_type = BlockType.TEXT


@dataclass(frozen=True)
class Cell:
    text: str = ""


@dataclass(frozen=True)
class TableBlock:
    """A table; rows are tuples of cells. `ordinal` counts tables only."""
    index: int
    ordinal: int
    rows: Tuple[Tuple[Cell, ...], ...] = ()

    block_type = BlockType.TABLE

    @property
    def content(self) -> str:
        """Cell texts joined row by row, used for previews and emptiness."""
        return ' '.join(cell.text for row in self.rows for cell in row if cell.text)


@dataclass(frozen=True)
class ImageBlock:
    """An image identified by its source id. `ordinal` counts images only."""
    index: int
    ordinal: int
    source_id: str = ""
    alt_text: str = ""

    block_type = BlockType.IMAGE

    @property
    def content(self) -> str:
        return self.alt_text


Block = Union[TextBlock, TableBlock, ImageBlock]


def block_to_dict(block: Optional[Block]) -> Optional[Dict[str, Any]]:
    """Serialize any block variant; None stays None."""
    if block is None:
        return None
    if isinstance(block, TextBlock):
        return {
            'type': 'text',
            'index': block.index,
            'tag': block.tag,
            'content': block.content,
            'formatting': block.formatting.to_dict()
        }
    if isinstance(block, TableBlock):
        return {
            'type': 'table',
            'index': block.index,
            'ordinal': block.ordinal,
            'rows': [[cell.text for cell in row] for row in block.rows]
        }
    return {
        'type': 'image',
        'index': block.index,
        'ordinal': block.ordinal,
        'source_id': block.source_id,
        'alt_text': block.alt_text
    }


# =============================================================================
# DIFF PRIMITIVES AND ALIGNMENT
# =============================================================================

@dataclass(frozen=True)
class DiffOp:
    """One span of a text diff."""
    op: DiffOperation
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {'op': self.op.name.lower(), 'text': self.text}


@dataclass(frozen=True)
class AlignmentEntry:
    """
    A left/right block pairing.

    Exactly one side is None for ADDED (left missing) and REMOVED
    (right missing); both sides are present otherwise.
    """
    left: Optional[Block]
    right: Optional[Block]
    kind: AlignmentKind

    def __post_init__(self):
        if self.kind == AlignmentKind.ADDED:
            valid = self.left is None and self.right is not None
        elif self.kind == AlignmentKind.REMOVED:
            valid = self.left is not None and self.right is None
        else:
            valid = self.left is not None and self.right is not None
        if not valid:
            raise ValueError(f"Invalid sides for {self.kind.value} alignment entry")

    @property
    def block_type(self) -> BlockType:
        return (self.left or self.right).block_type

    @property
    def position(self) -> int:
        """Merge position: left index when present, otherwise right index."""
        return self.left.index if self.left is not None else self.right.index

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'left': block_to_dict(self.left),
            'right': block_to_dict(self.right)
        }


@dataclass
class ChangeSummary:
    """Aggregate addition/deletion counters."""
    additions: int = 0
    deletions: int = 0

    @property
    def changes(self) -> int:
        return self.additions + self.deletions

    def record(self, kind: AlignmentKind):
        """Credit one structurally significant change of the given kind."""
        if kind == AlignmentKind.ADDED:
            self.additions += 1
        elif kind == AlignmentKind.REMOVED:
            self.deletions += 1
        elif kind == AlignmentKind.MODIFIED:
            self.additions += 1
            self.deletions += 1

    def __add__(self, other: 'ChangeSummary') -> 'ChangeSummary':
        return ChangeSummary(
            additions=self.additions + other.additions,
            deletions=self.deletions + other.deletions
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            'additions': self.additions,
            'deletions': self.deletions,
            'changes': self.changes
        }


# =============================================================================
# TABLE AND IMAGE SUB-DIFFS
# =============================================================================

@dataclass(frozen=True)
class CellDiff:
    """
    Comparison of one cell slot.

    Attributes:
        column: 0-based column within the row
        status: equal, modified, added (right only) or removed (left only)
        left_html / right_html: Cell-local markup for each side
    """
    column: int
    status: AlignmentKind
    left_text: Optional[str]
    right_text: Optional[str]
    left_html: str = ""
    right_html: str = ""
    ops: Tuple[DiffOp, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'column': self.column,
            'status': self.status.value,
            'left_text': self.left_text,
            'right_text': self.right_text,
            'ops': [op.to_dict() for op in self.ops]
        }


@dataclass(frozen=True)
class RowDiff:
    row: int
    status: AlignmentKind
    cells: Tuple[CellDiff, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row': self.row,
            'status': self.status.value,
            'cells': [c.to_dict() for c in self.cells]
        }


@dataclass(frozen=True)
class TableDiff:
    """Positional comparison of the table pair at `ordinal`."""
    ordinal: int
    status: AlignmentKind
    rows: Tuple[RowDiff, ...] = ()

    @property
    def changed(self) -> bool:
        return self.status != AlignmentKind.EQUAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ordinal': self.ordinal,
            'status': self.status.value,
            'rows': [r.to_dict() for r in self.rows]
        }


@dataclass(frozen=True)
class ImageDiff:
    ordinal: int
    status: AlignmentKind
    left_source: Optional[str] = None
    right_source: Optional[str] = None
    left_alt: Optional[str] = None
    right_alt: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.status != AlignmentKind.EQUAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ordinal': self.ordinal,
            'status': self.status.value,
            'left_source': self.left_source,
            'right_source': self.right_source,
            'left_alt': self.left_alt,
            'right_alt': self.right_alt
        }


@dataclass(frozen=True)
class EntryDiff:
    """
    An alignment entry with every sub-diff computed for it.

    Both the mutual views and the report are built from the same
    sequence of EntryDiffs.
    """
    entry: AlignmentEntry
    kind: AlignmentKind
    text_ops: Tuple[DiffOp, ...] = ()
    table_diff: Optional[TableDiff] = None
    image_diff: Optional[ImageDiff] = None
    format_changes: Tuple[str, ...] = ()

    @property
    def block_type(self) -> BlockType:
        return self.entry.block_type


# =============================================================================
# REPORT
# =============================================================================

@dataclass(frozen=True)
class ReportLine:
    """
    One line of the detailed text report.

    Line numbers are 1-based strings; the side without a counterpart
    carries an empty string.
    """
    left_index: str
    right_index: str
    status: LineStatus
    diff_markup: str = ""
    format_changes: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'v1': self.left_index,
            'v2': self.right_index,
            'status': self.status.value,
            'diffHtml': self.diff_markup,
            'formatChanges': list(self.format_changes)
        }


@dataclass(frozen=True)
class TableReportEntry:
    """Table-, row- or cell-level change; ordinals are 1-based."""
    table: int
    status: LineStatus
    row: Optional[int] = None
    col: Optional[int] = None
    diff_markup: str = ""

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'table': self.table, 'status': self.status.value}
        if self.row is not None:
            result['row'] = self.row
        if self.col is not None:
            result['col'] = self.col
        if self.diff_markup:
            result['diffHtml'] = self.diff_markup
        return result


@dataclass(frozen=True)
class ImageReportEntry:
    index: int
    status: LineStatus
    left_source: Optional[str] = None
    right_source: Optional[str] = None
    left_alt: Optional[str] = None
    right_alt: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'status': self.status.value,
            'leftSource': self.left_source,
            'rightSource': self.right_source,
            'leftAlt': self.left_alt,
            'rightAlt': self.right_alt
        }


@dataclass
class DetailedReport:
    lines: List[ReportLine] = field(default_factory=list)
    tables: List[TableReportEntry] = field(default_factory=list)
    images: List[ImageReportEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lines': [line.to_dict() for line in self.lines],
            'tables': [t.to_dict() for t in self.tables],
            'images': [i.to_dict() for i in self.images]
        }


# =============================================================================
# MUTUAL VIEWS AND RESULT
# =============================================================================

@dataclass(frozen=True)
class ViewFragment:
    """
    One rendered unit of a mutual view.

    Attributes:
        block_type: text, table or image
        marker: None for unchanged content, otherwise the change kind
        html: Pre-rendered, escaped HTML
        is_placeholder: True when the block exists only on the other side
        preview: Truncated preview of the counterpart (placeholders only)
        entry_index: Index of the alignment entry this fragment renders
    """
    block_type: BlockType
    html: str
    marker: Optional[AlignmentKind] = None
    is_placeholder: bool = False
    preview: str = ""
    entry_index: int = -1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'block_type': self.block_type.value,
            'marker': self.marker.value if self.marker else None,
            'html': self.html,
            'is_placeholder': self.is_placeholder,
            'preview': self.preview,
            'entry_index': self.entry_index
        }


@dataclass
class MutualView:
    """One side of the mutual difference view."""
    side: str  # 'left' or 'right'
    fragments: List[ViewFragment] = field(default_factory=list)

    @property
    def html(self) -> str:
        return ''.join(f.html for f in self.fragments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'side': self.side,
            'html': self.html,
            'fragments': [f.to_dict() for f in self.fragments]
        }


@dataclass(frozen=True)
class ChangeMarker:
    """A navigable change, ordered as it appears in the views."""
    id: str
    entry_index: int
    kind: str
    block_type: BlockType
    preview: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'entry_index': self.entry_index,
            'kind': self.kind,
            'block_type': self.block_type.value,
            'preview': self.preview
        }


@dataclass
class ComparisonResult:
    """
    Complete output of a comparison.

    Attributes:
        left_view / right_view: Mutual views for the presentation layer
        summary: Aggregate change counters
        detailed: Flat line/table/image report
        alignment: The block alignment both outputs were built from
        changes: Navigation index over non-equal entries
        degraded: True when the pipeline failed and views are unannotated
        error: Failure message when degraded
        stage_failures: Names of stages that fell back to a neutral result
    """
    left_view: MutualView
    right_view: MutualView
    summary: ChangeSummary = field(default_factory=ChangeSummary)
    detailed: DetailedReport = field(default_factory=DetailedReport)
    alignment: List[AlignmentEntry] = field(default_factory=list)
    changes: List[ChangeMarker] = field(default_factory=list)
    degraded: bool = False
    error: str = ""
    stage_failures: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'leftView': self.left_view.to_dict(),
            'rightView': self.right_view.to_dict(),
            'summary': self.summary.to_dict(),
            'detailed': self.detailed.to_dict(),
            'alignment': [e.to_dict() for e in self.alignment],
            'changes': [c.to_dict() for c in self.changes],
            'degraded': self.degraded,
            'error': self.error,
            'stage_failures': list(self.stage_failures)
        }
