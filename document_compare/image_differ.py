"""
Image Differ
============
Positional image comparison. Two images are equal only when both the
source identifier and the alt text are identical.
"""

from typing import Optional

from .models import ImageBlock, ImageDiff, AlignmentKind


def images_equal(left: ImageBlock, right: ImageBlock) -> bool:
    return left.source_id == right.source_id and left.alt_text == right.alt_text


def diff_images(left: Optional[ImageBlock], right: Optional[ImageBlock]) -> ImageDiff:
    """Compare the image pair at one ordinal; either side may be missing."""
    if left is None and right is None:
        raise ValueError("diff_images() needs at least one image")
    if left is None:
        return ImageDiff(ordinal=right.ordinal, status=AlignmentKind.ADDED,
                         right_source=right.source_id, right_alt=right.alt_text)
    if right is None:
        return ImageDiff(ordinal=left.ordinal, status=AlignmentKind.REMOVED,
                         left_source=left.source_id, left_alt=left.alt_text)

    status = AlignmentKind.EQUAL if images_equal(left, right) else AlignmentKind.MODIFIED
    return ImageDiff(
        ordinal=left.ordinal,
        status=status,
        left_source=left.source_id,
        right_source=right.source_id,
        left_alt=left.alt_text,
        right_alt=right.alt_text
    )
