"""
Formatting Delta Detector
=========================
Compares presentation attributes of two text blocks independently of
their text, so a block can be textually unchanged yet reformatted.
"""

from typing import List

from .models import Formatting


def _on_off(flag: bool) -> str:
    return "on" if flag else "off"


def format_delta(a: Formatting, b: Formatting) -> List[str]:
    """
    Describe every differing attribute as "<attr>: <old> → <new>".

    Returns:
        Empty list when the formatting is identical
    """
    changes = []
    if a.bold != b.bold:
        changes.append(f"bold: {_on_off(a.bold)} → {_on_off(b.bold)}")
    if a.italic != b.italic:
        changes.append(f"italic: {_on_off(a.italic)} → {_on_off(b.italic)}")
    if a.underline != b.underline:
        changes.append(f"underline: {_on_off(a.underline)} → {_on_off(b.underline)}")
    if (a.font_size or "") != (b.font_size or ""):
        changes.append(f"font-size: {a.font_size or 'auto'} → {b.font_size or 'auto'}")
    if (a.alignment or "") != (b.alignment or ""):
        changes.append(f"alignment: {a.alignment or 'auto'} → {b.alignment or 'auto'}")
    return changes
