"""
Block Aligner v2.0.0
====================
Matches left/right block lists into an ordered alignment of
equal / modified / added / removed entries.

Text blocks go through three greedy passes, each only seeing blocks left
unmatched by the previous one:

1. Exact: first unmatched right block with the same tag and normalized-equal
   text. Two empty blocks always pair as equal, whatever their tags.
2. Fuzzy: unmatched right block of the same tag with the highest similarity
   strictly above the threshold; ties go to the earliest right block.
   Empty blocks never take part, so an empty block is never "modified"
   against a non-empty one.
3. Leftover: unmatched left blocks are removed, unmatched right blocks added.

Tables and images are paired positionally by their per-type ordinal.
The result is merged by original position, left-origin entries first on ties.
"""

from typing import List, Optional, Sequence, Set

from config_logging import get_config, get_logger
from .models import (
    AlignmentEntry, AlignmentKind, Block, TextBlock, TableBlock, ImageBlock
)
from .extractor import is_empty
from .text_diff import TextDiffer, texts_equal, similarity as default_similarity
from .table_differ import tables_equal
from .image_differ import images_equal

logger = get_logger('document_compare.aligner')


class BlockAligner:
    """
    Three-pass greedy aligner.

    Args:
        similarity_threshold: Fuzzy pass floor, compared strictly (default from config)
        text_differ: Differ used for similarity scoring (default: process-wide)
    """

    def __init__(self, similarity_threshold: Optional[float] = None,
                 text_differ: Optional[TextDiffer] = None):
        if similarity_threshold is None:
            similarity_threshold = get_config().similarity_threshold
        self.similarity_threshold = similarity_threshold
        self._similarity = text_differ.similarity if text_differ else default_similarity

    def align(self, left_blocks: Sequence[Block], right_blocks: Sequence[Block]) -> List[AlignmentEntry]:
        left_text = [b for b in left_blocks if isinstance(b, TextBlock)]
        right_text = [b for b in right_blocks if isinstance(b, TextBlock)]

        entries = self._align_text(left_text, right_text)
        entries.extend(self._align_positional(
            [b for b in left_blocks if isinstance(b, TableBlock)],
            [b for b in right_blocks if isinstance(b, TableBlock)],
            tables_equal
        ))
        entries.extend(self._align_positional(
            [b for b in left_blocks if isinstance(b, ImageBlock)],
            [b for b in right_blocks if isinstance(b, ImageBlock)],
            images_equal
        ))

        entries.sort(key=lambda e: (e.position, 0 if e.left is not None else 1))

        logger.debug("Alignment complete", entries=len(entries),
                     equal=sum(1 for e in entries if e.kind == AlignmentKind.EQUAL),
                     modified=sum(1 for e in entries if e.kind == AlignmentKind.MODIFIED),
                     added=sum(1 for e in entries if e.kind == AlignmentKind.ADDED),
                     removed=sum(1 for e in entries if e.kind == AlignmentKind.REMOVED))
        return entries

    # -------------------------------------------------------------------------
    # Text passes
    # -------------------------------------------------------------------------

    def _align_text(self, left: List[TextBlock], right: List[TextBlock]) -> List[AlignmentEntry]:
        entries: List[AlignmentEntry] = []
        left_used: Set[int] = set()
        right_used: Set[int] = set()

        # Pass 1: exact
        for li, lb in enumerate(left):
            lb_empty = is_empty(lb)
            for ri, rb in enumerate(right):
                if ri in right_used:
                    continue
                if lb_empty and is_empty(rb):
                    matched = True
                else:
                    matched = lb.tag == rb.tag and texts_equal(lb.content, rb.content)
                if matched:
                    entries.append(AlignmentEntry(lb, rb, AlignmentKind.EQUAL))
                    left_used.add(li)
                    right_used.add(ri)
                    break

        # Pass 2: fuzzy
        for li, lb in enumerate(left):
            if li in left_used or is_empty(lb):
                continue
            best_ri = -1
            best_score = self.similarity_threshold
            for ri, rb in enumerate(right):
                if ri in right_used or rb.tag != lb.tag or is_empty(rb):
                    continue
                if not self._can_exceed(lb.content, rb.content, best_score):
                    continue
                score = self._similarity(lb.content, rb.content)
                if score > best_score:
                    best_score = score
                    best_ri = ri
            if best_ri >= 0:
                entries.append(AlignmentEntry(lb, right[best_ri], AlignmentKind.MODIFIED))
                left_used.add(li)
                right_used.add(best_ri)

        # Pass 3: leftovers
        for li, lb in enumerate(left):
            if li not in left_used:
                entries.append(AlignmentEntry(lb, None, AlignmentKind.REMOVED))
        for ri, rb in enumerate(right):
            if ri not in right_used:
                entries.append(AlignmentEntry(None, rb, AlignmentKind.ADDED))

        return entries

    @staticmethod
    def _can_exceed(a: str, b: str, floor: float) -> bool:
        """Similarity is bounded by min/max length; skip pairs that cannot beat `floor`."""
        longer = max(len(a), len(b))
        return longer > 0 and min(len(a), len(b)) / longer > floor

    # -------------------------------------------------------------------------
    # Positional pairing
    # -------------------------------------------------------------------------

    @staticmethod
    def _align_positional(left: List[Block], right: List[Block], equal_fn) -> List[AlignmentEntry]:
        entries = []
        for i in range(max(len(left), len(right))):
            lb = left[i] if i < len(left) else None
            rb = right[i] if i < len(right) else None
            if lb is not None and rb is not None:
                kind = AlignmentKind.EQUAL if equal_fn(lb, rb) else AlignmentKind.MODIFIED
                entries.append(AlignmentEntry(lb, rb, kind))
            elif lb is not None:
                entries.append(AlignmentEntry(lb, None, AlignmentKind.REMOVED))
            else:
                entries.append(AlignmentEntry(None, rb, AlignmentKind.ADDED))
        return entries


def align_blocks(left_blocks: Sequence[Block], right_blocks: Sequence[Block],
                 similarity_threshold: Optional[float] = None) -> List[AlignmentEntry]:
    """Align two block lists with the default aligner."""
    return BlockAligner(similarity_threshold).align(left_blocks, right_blocks)
