"""
Tests for Block Aligner
=======================
Exact, fuzzy and leftover passes, empty-block handling, positional
tables/images and final ordering.
"""

import pytest

from document_compare.aligner import BlockAligner, align_blocks
from document_compare.extractor import extract_blocks
from document_compare.models import AlignmentEntry, AlignmentKind, BlockType
from .trees import node, doc, paragraphs, table


@pytest.fixture
def aligner() -> BlockAligner:
    return BlockAligner(similarity_threshold=0.6)


def kinds(entries):
    return [e.kind for e in entries]


class TestAlignmentIdentity:
    """align(X, X) is all-Equal."""

    def test_identical_blocks(self, aligner):
        blocks = extract_blocks(doc(
            node('h1', 'Title'), node('p', 'Body'), table(['a']), node('img', src='x.png')
        ))
        entries = aligner.align(blocks, blocks)
        assert len(entries) == 4
        assert all(e.kind == AlignmentKind.EQUAL for e in entries)

    def test_empty_inputs(self, aligner):
        assert aligner.align([], []) == []


class TestExactPass:
    """Tests for normalized exact matching."""

    def test_case_and_whitespace_insensitive(self, aligner):
        left = extract_blocks(paragraphs("Hello   World"))
        right = extract_blocks(paragraphs("hello world"))
        assert kinds(aligner.align(left, right)) == [AlignmentKind.EQUAL]

    def test_tag_must_match(self, aligner):
        left = extract_blocks(doc(node('h2', 'Scope')))
        right = extract_blocks(doc(node('p', 'Scope')))
        entries = aligner.align(left, right)
        assert sorted(k.value for k in kinds(entries)) == ['added', 'removed']

    def test_moved_paragraph_matches_first_unmatched(self, aligner):
        left = extract_blocks(paragraphs("A", "B"))
        right = extract_blocks(paragraphs("B", "A"))
        entries = aligner.align(left, right)
        assert all(e.kind == AlignmentKind.EQUAL for e in entries)
        assert entries[0].left.content == "A" and entries[0].right.content == "A"


class TestFuzzyPass:
    """Tests for similarity matching above the threshold."""

    def test_small_edit_is_modified(self, aligner):
        left = extract_blocks(paragraphs("The quick brown fox jumps"))
        right = extract_blocks(paragraphs("The quick brown fox leaps"))
        assert kinds(aligner.align(left, right)) == [AlignmentKind.MODIFIED]

    def test_unrelated_text_is_removed_and_added(self, aligner):
        left = extract_blocks(paragraphs("Alpha beta"))
        right = extract_blocks(paragraphs("Completely different words here"))
        entries = aligner.align(left, right)
        assert kinds(entries) == [AlignmentKind.REMOVED, AlignmentKind.ADDED]

    def test_tie_goes_to_first_right_candidate(self, aligner):
        left = extract_blocks(paragraphs("abcd"))
        right = extract_blocks(paragraphs("abce", "abcf"))
        entries = aligner.align(left, right)
        modified = [e for e in entries if e.kind == AlignmentKind.MODIFIED]
        assert len(modified) == 1
        assert modified[0].right.content == "abce"

    def test_best_candidate_wins(self, aligner):
        left = extract_blocks(paragraphs("The system shall log every request."))
        right = extract_blocks(paragraphs(
            "The system shall log most requests.",
            "The system shall log every request!",
        ))
        entries = aligner.align(left, right)
        modified = [e for e in entries if e.kind == AlignmentKind.MODIFIED]
        assert modified[0].right.content == "The system shall log every request!"

    def test_threshold_is_strict(self):
        # similarity("abcd", "abce") is exactly 0.75
        left = extract_blocks(paragraphs("abcd"))
        right = extract_blocks(paragraphs("abce"))
        assert kinds(BlockAligner(0.75).align(left, right)) == [
            AlignmentKind.REMOVED, AlignmentKind.ADDED
        ]
        assert kinds(BlockAligner(0.7).align(left, right)) == [AlignmentKind.MODIFIED]


class TestEmptyBlocks:
    """Empty blocks are never modified against content."""

    def test_both_empty_equal_across_tags(self, aligner):
        left = extract_blocks(doc(node('p', '   ')))
        right = extract_blocks(doc(node('h3', '')))
        assert kinds(aligner.align(left, right)) == [AlignmentKind.EQUAL]

    def test_empty_against_text_is_removed_and_added(self, aligner):
        left = extract_blocks(paragraphs(""))
        right = extract_blocks(paragraphs("Now with text"))
        assert kinds(aligner.align(left, right)) == [AlignmentKind.REMOVED, AlignmentKind.ADDED]


class TestPositionalBlocks:
    """Tables and images pair by ordinal."""

    def test_tables_pair_by_position(self, aligner):
        left = extract_blocks(doc(table(['a']), table(['b'])))
        right = extract_blocks(doc(table(['b'])))
        entries = aligner.align(left, right)
        assert kinds(entries) == [AlignmentKind.MODIFIED, AlignmentKind.REMOVED]
        assert all(e.block_type == BlockType.TABLE for e in entries)

    def test_images_pair_by_position(self, aligner):
        left = extract_blocks(doc(node('img', src='a.png', alt='A')))
        right = extract_blocks(doc(node('img', src='a.png', alt='A'), node('img', src='b.png')))
        assert kinds(aligner.align(left, right)) == [AlignmentKind.EQUAL, AlignmentKind.ADDED]


class TestOrdering:
    """Coverage and merge ordering."""

    def test_every_block_covered_once(self, aligner):
        left = extract_blocks(paragraphs("one", "two", "three"))
        right = extract_blocks(paragraphs("two", "four", "three", "five"))
        entries = aligner.align(left, right)
        lefts = [e.left for e in entries if e.left is not None]
        rights = [e.right for e in entries if e.right is not None]
        assert sorted(b.index for b in lefts) == [0, 1, 2]
        assert sorted(b.index for b in rights) == [0, 1, 2, 3]

    def test_merge_by_position_left_first(self, aligner):
        left = extract_blocks(paragraphs("The cat sat."))
        right = extract_blocks(paragraphs("The cat sat.", "It was calm."))
        entries = aligner.align(left, right)
        assert kinds(entries) == [AlignmentKind.EQUAL, AlignmentKind.ADDED]

    def test_removed_precedes_added_at_same_position(self, aligner):
        left = extract_blocks(paragraphs("Zebra"))
        right = extract_blocks(paragraphs("Quokka"))
        entries = aligner.align(left, right)
        assert entries[0].left is not None
        assert entries[1].right is not None

    def test_align_blocks_helper(self):
        blocks = extract_blocks(paragraphs("x"))
        assert kinds(align_blocks(blocks, blocks)) == [AlignmentKind.EQUAL]


class TestAlignmentEntry:
    """Side invariants of AlignmentEntry."""

    def test_added_requires_right_only(self):
        block = extract_blocks(paragraphs("x"))[0]
        with pytest.raises(ValueError):
            AlignmentEntry(block, block, AlignmentKind.ADDED)
        with pytest.raises(ValueError):
            AlignmentEntry(block, None, AlignmentKind.EQUAL)
