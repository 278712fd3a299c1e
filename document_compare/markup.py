"""
Inline Markup Helpers
=====================
HTML rendering for diff spans, blocks, and placeholders. All user text
passes through html.escape before it is wrapped.
"""

import html
from typing import Sequence

from .models import DiffOp, DiffOperation, BlockType, AlignmentKind

# Indicator labels keyed by (block type, placeholder direction)
PLACEHOLDER_LABELS = {
    (BlockType.TEXT, AlignmentKind.ADDED): '[Content added in other document]',
    (BlockType.TEXT, AlignmentKind.REMOVED): '[Content removed in other document]',
    (BlockType.TABLE, AlignmentKind.ADDED): '[Table Added]',
    (BlockType.TABLE, AlignmentKind.REMOVED): '[Table Removed]',
    (BlockType.IMAGE, AlignmentKind.ADDED): '[Image Added]',
    (BlockType.IMAGE, AlignmentKind.REMOVED): '[Image Removed]',
}


def escape(text: str) -> str:
    return html.escape(text) if text else ""


def visible_spaces(escaped: str) -> str:
    """Make spaces and tabs visible in already-escaped text."""
    if not escaped:
        return ""
    return (escaped
            .replace(' ', '<span class="ws">·</span>')
            .replace('\t', '<span class="ws">→</span>'))


def truncate(text: str, length: int) -> str:
    """Collapse whitespace and cut to `length` characters with an ellipsis."""
    text = ' '.join((text or '').split())
    if len(text) <= length:
        return text
    return text[:length - 1].rstrip() + '…'


def side_markup(ops: Sequence[DiffOp], side: str) -> str:
    """
    Render diff spans for one side of a mutual view.

    The side that owns a span shows it solid; the other side shows a
    dimmed bracketed placeholder so the reader sees what changed there.
    """
    parts = []
    for d in ops:
        text = escape(d.text)
        if d.op == DiffOperation.EQUAL:
            parts.append(text)
        elif d.op == DiffOperation.INSERT and side == 'right':
            parts.append(f'<span class="git-inline-added">{text}</span>')
        elif d.op == DiffOperation.DELETE and side == 'left':
            parts.append(f'<span class="git-inline-removed">{text}</span>')
        elif d.op == DiffOperation.INSERT:
            parts.append(f'<span class="git-inline-placeholder git-inline-placeholder-added">[+{text}]</span>')
        else:
            parts.append(f'<span class="git-inline-placeholder git-inline-placeholder-removed">[-{text}]</span>')
    return ''.join(parts)


def report_markup(ops: Sequence[DiffOp]) -> str:
    """Render diff spans for the audit report, whitespace visible."""
    parts = []
    for d in ops:
        val = visible_spaces(escape(d.text))
        if d.op == DiffOperation.INSERT:
            parts.append(f'<span class="git-inline-added">{val}</span>')
        elif d.op == DiffOperation.DELETE:
            parts.append(f'<span class="git-inline-removed">{val}</span>')
        else:
            parts.append(val)
    return ''.join(parts)


def element(tag: str, inner: str, css_class: str = "", **attrs) -> str:
    """Wrap pre-escaped inner HTML in an element."""
    attr_parts = []
    if css_class:
        attr_parts.append(f'class="{css_class}"')
    for name, value in attrs.items():
        attr_parts.append(f'{name}="{html.escape(str(value), quote=True)}"')
    attr_str = (' ' + ' '.join(attr_parts)) if attr_parts else ''
    return f'<{tag}{attr_str}>{inner}</{tag}>'


def image_element(source_id: str, alt_text: str, css_class: str = "") -> str:
    attr_parts = [f'src="{html.escape(source_id or "", quote=True)}"',
                  f'alt="{html.escape(alt_text or "", quote=True)}"']
    if css_class:
        attr_parts.insert(0, f'class="{css_class}"')
    return f'<img {" ".join(attr_parts)}>'


def placeholder(block_type: BlockType, direction: AlignmentKind, preview: str, tag: str = 'div') -> str:
    """
    Placeholder block for content that exists only on the other side.

    Args:
        block_type: Type of the counterpart block
        direction: ADDED when the other side gained the block, REMOVED when it lost it
        preview: Already-truncated preview text
        tag: Element tag, mirrors the counterpart's tag for text blocks
    """
    label = PLACEHOLDER_LABELS[(block_type, direction)]
    indicator = element('span', escape(label), 'placeholder-indicator')
    body = indicator
    if preview:
        body += element('span', escape(preview), 'placeholder-preview')
    css = (f'placeholder-block git-line-placeholder placeholder-{block_type.value} '
           f'placeholder-{direction.value}')
    return element(tag, body, css)
