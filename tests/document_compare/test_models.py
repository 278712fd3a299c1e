"""
Tests for Document Comparison Models
====================================
"""

import pytest

from document_compare.markup import placeholder, report_markup, side_markup, truncate
from document_compare.models import (
    AlignmentKind, BlockType, DiffOp, DiffOperation, DocumentNode, empty_tree
)
from .trees import node, doc, nested


class TestDocumentNode:
    """Tree input boundary."""

    def test_from_dict(self):
        tree = DocumentNode.from_dict({
            'tag': 'BODY',
            'children': [
                {'tag': 'p', 'text': 'Hello ', 'children': [{'tag': 'b', 'text': 'world'}]},
                {'tag': 'img', 'attrs': {'src': 'a.png', 'alt': 'A'}},
            ]
        })
        assert tree.tag == 'body'
        assert tree.children[0].text_content() == 'Hello world'
        assert tree.children[1].attrs == {'src': 'a.png', 'alt': 'A'}

    def test_to_dict_reverses_from_dict(self):
        data = {'tag': 'body', 'children': [{'tag': 'p', 'text': 'x', 'attrs': {'bold': True}}]}
        assert DocumentNode.from_dict(data).to_dict() == data

    def test_rejects_non_dict_node(self):
        with pytest.raises(TypeError):
            DocumentNode.from_dict(['p'])

    def test_rejects_missing_tag(self):
        with pytest.raises(KeyError):
            DocumentNode.from_dict({'text': 'orphan'})

    def test_empty_tree(self):
        assert empty_tree().children == ()

    def test_iter_descendants_document_order(self):
        tree = DocumentNode.from_dict({'tag': 'body', 'children': [
            {'tag': 'ul', 'children': [{'tag': 'li'}]}, {'tag': 'p'}
        ]})
        assert [n.tag for n in tree.iter_descendants()] == ['ul', 'li', 'p']

    def test_deep_tree_traversal(self):
        deep = nested(5000, node('p', 'leaf'), tag='span')
        assert deep.text_content() == 'leaf'
        assert sum(1 for _ in deep.iter_descendants()) == 5000

    def test_deep_tree_serialization(self):
        deep = nested(5000, node('p', 'leaf'))
        assert DocumentNode.from_dict(deep.to_dict()) == deep

    def test_equality_compares_structure(self):
        assert node('p', 'a', bold=True) == node('p', 'a', bold=True)
        assert node('p', 'a') != node('p', 'b')
        assert doc(node('p', 'a')) != doc(node('p', 'a'), node('p', 'b'))
        assert node('p', 'a') != 'p'


class TestMarkup:
    """HTML helpers."""

    @pytest.fixture
    def ops(self):
        return [
            DiffOp(DiffOperation.EQUAL, 'a '),
            DiffOp(DiffOperation.DELETE, 'old'),
            DiffOp(DiffOperation.INSERT, 'new'),
        ]

    def test_side_markup_left(self, ops):
        assert side_markup(ops, 'left') == (
            'a <span class="git-inline-removed">old</span>'
            '<span class="git-inline-placeholder git-inline-placeholder-added">[+new]</span>'
        )

    def test_side_markup_right(self, ops):
        assert side_markup(ops, 'right') == (
            'a <span class="git-inline-placeholder git-inline-placeholder-removed">[-old]</span>'
            '<span class="git-inline-added">new</span>'
        )

    def test_report_markup_visible_spaces(self, ops):
        assert report_markup(ops).startswith('a<span class="ws">·</span>')

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("a  b\n c", 10) == "a b c"
        assert truncate("abcdefghijkl", 8) == "abcdefg…"

    def test_placeholder(self):
        html = placeholder(BlockType.IMAGE, AlignmentKind.REMOVED, 'Figure <1>')
        assert '[Image Removed]' in html
        assert 'placeholder-image placeholder-removed' in html
        assert 'Figure &lt;1&gt;' in html
