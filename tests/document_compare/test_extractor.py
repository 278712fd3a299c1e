"""
Tests for Block Extractor
=========================
Nesting rules, table ownership of cell text, ordinals and formatting.
"""

import pytest

from document_compare.extractor import extract_blocks, extract_formatting, is_empty
from document_compare.models import (
    DocumentNode, TextBlock, TableBlock, ImageBlock, Formatting
)
from .trees import node, doc, table, nested


@pytest.fixture
def mixed_document() -> DocumentNode:
    """Heading, paragraph, table, list and image in document order."""
    return doc(
        node('h1', 'Title'),
        node('p', 'Intro paragraph.'),
        table(['A', 'B'], ['1', '2']),
        node('ul', children=[node('li', 'First'), node('li', 'Second')]),
        node('img', src='fig1.png', alt='Figure 1'),
    )


class TestBlockExtraction:
    """Tests for extraction order and block variants."""

    def test_document_order(self, mixed_document):
        blocks = extract_blocks(mixed_document)
        kinds = [type(b).__name__ for b in blocks]
        assert kinds == ['TextBlock', 'TextBlock', 'TableBlock', 'TextBlock', 'TextBlock', 'ImageBlock']
        assert [b.index for b in blocks] == list(range(6))

    def test_per_type_ordinals(self, mixed_document):
        blocks = extract_blocks(mixed_document)
        text = [b for b in blocks if isinstance(b, TextBlock)]
        assert [b.ordinal for b in text] == [0, 1, 2, 3]
        tables = [b for b in blocks if isinstance(b, TableBlock)]
        images = [b for b in blocks if isinstance(b, ImageBlock)]
        assert tables[0].ordinal == 0
        assert images[0].ordinal == 0

    def test_text_block_fields(self, mixed_document):
        heading = extract_blocks(mixed_document)[0]
        assert heading.tag == 'h1'
        assert heading.content == 'Title'

    def test_image_fields(self, mixed_document):
        image = extract_blocks(mixed_document)[-1]
        assert image.source_id == 'fig1.png'
        assert image.alt_text == 'Figure 1'

    def test_none_and_empty_tree(self):
        assert extract_blocks(None) == []
        assert extract_blocks(doc()) == []

    def test_non_block_tags_ignored(self):
        assert extract_blocks(doc(node('div', 'loose text'), node('span', 'more'))) == []


class TestNestingRules:
    """Tests for the nested-skip rules."""

    def test_container_with_nested_block_is_skipped(self):
        tree = doc(node('li', 'Item ', children=[node('p', 'inner paragraph')]))
        blocks = extract_blocks(tree)
        assert len(blocks) == 1
        assert blocks[0].tag == 'p'
        assert blocks[0].content == 'inner paragraph'

    def test_text_inside_table_not_extracted(self):
        tree = doc(node('table', children=[
            node('tr', children=[node('td', children=[node('p', 'cell paragraph')])])
        ]))
        blocks = extract_blocks(tree)
        assert len(blocks) == 1
        assert isinstance(blocks[0], TableBlock)
        assert blocks[0].rows[0][0].text == 'cell paragraph'

    def test_inline_image_keeps_paragraph(self):
        tree = doc(node('p', 'See figure', children=[node('img', src='a.png', alt='A')]))
        blocks = extract_blocks(tree)
        assert isinstance(blocks[0], TextBlock)
        assert isinstance(blocks[1], ImageBlock)
        assert blocks[0].content == 'See figure'

    def test_nested_images_extracted_at_any_depth(self):
        tree = doc(node('div', children=[node('div', children=[node('img', src='deep.png')])]))
        blocks = extract_blocks(tree)
        assert len(blocks) == 1
        assert blocks[0].source_id == 'deep.png'

    def test_nested_table_keeps_its_own_rows(self):
        inner = table(['inner'])
        outer = node('table', children=[
            node('tr', children=[node('td', 'outer'), node('td', children=[inner])])
        ])
        blocks = extract_blocks(doc(outer))
        assert [b.ordinal for b in blocks] == [0, 1]
        assert len(blocks[0].rows) == 1
        assert blocks[1].rows[0][0].text == 'inner'

    def test_row_groups(self):
        tree = doc(node('table', children=[
            node('thead', children=[node('tr', children=[node('th', 'Name')])]),
            node('tbody', children=[node('tr', children=[node('td', ' Alice ')])]),
        ]))
        rows = extract_blocks(tree)[0].rows
        assert [[c.text for c in row] for row in rows] == [['Name'], ['Alice']]

    def test_deeply_nested_blocks_keep_document_order(self):
        tree = doc(
            nested(3000, node('p', 'deep', children=[node('b', 'bold')])),
            node('img', src='after.png'),
        )
        blocks = extract_blocks(tree)
        assert [type(b) for b in blocks] == [TextBlock, ImageBlock]
        assert blocks[0].content == 'deepbold'
        assert blocks[0].formatting.bold
        assert blocks[1].index == 1


class TestFormatting:
    """Tests for formatting extraction."""

    def test_attrs(self):
        fmt = extract_formatting(node('p', 'x', bold=True, font_size=12, align='center'))
        assert fmt == Formatting(bold=True, font_size='12', alignment='center')

    def test_inline_emphasis(self):
        fmt = extract_formatting(node('p', children=[node('strong', 'a'), node('em', 'b'), node('u', 'c')]))
        assert fmt.bold and fmt.italic and fmt.underline

    def test_string_flags(self):
        assert extract_formatting(node('p', bold='false')).bold is False
        assert extract_formatting(node('p', bold='true')).bold is True


class TestEmptiness:
    """Tests for the empty block condition."""

    def test_whitespace_only_is_empty(self):
        block = extract_blocks(doc(node('p', '  \n\t ')))[0]
        assert is_empty(block)

    def test_text_is_not_empty(self):
        block = extract_blocks(doc(node('p', 'x')))[0]
        assert not is_empty(block)
