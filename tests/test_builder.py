import pytest

from docexport.docs.builder import HEADING_STYLES, build_block, build_elements, heading_level
from docexport.docs.elements import BulletLine, StyledParagraph, StyledSpan
from docexport.docs.marks import RunStyle
from docexport.docs.model import (
    BulletList,
    DocumentTree,
    Heading,
    Image,
    ListItem,
    Mark,
    OrderedList,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    TextRun,
    UnsupportedNode,
)


def _p(*texts):
    return Paragraph(content=tuple(TextRun(t) for t in texts))


def _item(*blocks):
    return ListItem(blocks=tuple(blocks))


def test_build_elements_title_hello_world_bullets():
    tree = DocumentTree(blocks=(
        Heading(level=1, content=(TextRun("Title"),)),
        Paragraph(content=(TextRun("Hello "), TextRun("world", marks=frozenset({Mark.BOLD})))),
        BulletList(items=(_item(_p("A")), _item(_p("B")))),
    ))
    elements = build_elements(tree)
    assert elements == [
        StyledParagraph(spans=(StyledSpan("Title"),), heading_level=1),
        StyledParagraph(spans=(StyledSpan("Hello ", RunStyle()), StyledSpan("world", RunStyle(bold=True)))),
        BulletLine("• A"),
        BulletLine("• B"),
    ]


def test_build_elements_empty_tree_yields_placeholder():
    elements = build_elements(DocumentTree())
    assert len(elements) == 1
    assert elements[0].text == "Empty document"


def test_build_elements_only_unsupported_blocks_yields_placeholder():
    tree = DocumentTree(blocks=(
        UnsupportedNode("codeBlock"),
        Image(src="x.png"),
        Table(rows=(TableRow(cells=(TableCell(blocks=(_p("cell"),)),)),)),
        BulletList(items=()),
    ))
    elements = build_elements(tree)
    assert [e.text for e in elements] == ["Empty document"]


@pytest.mark.parametrize("level", [0, 7, -1, 99])
def test_heading_out_of_range_clamps_to_level_one(level):
    [element] = build_block(Heading(level=level, content=(TextRun("H"),)))
    assert element.heading_level == 1


def test_heading_levels_in_range_are_kept():
    assert [heading_level(n) for n in range(1, 7)] == [1, 2, 3, 4, 5, 6]
    assert len(HEADING_STYLES) == 6


def test_heading_uses_first_run_only_and_empty_when_absent():
    [h] = build_block(Heading(level=2, content=(TextRun("First"), TextRun(" second"))))
    assert h.text == "First"
    [empty] = build_block(Heading(level=2))
    assert empty.text == ""


def test_empty_paragraph_keeps_placeholder():
    assert build_block(Paragraph()) == [StyledParagraph()]


def test_paragraph_runs_carry_styles():
    run = TextRun("u", marks=frozenset({Mark.UNDERLINE, Mark.ITALIC}), font_family="Arial")
    [p] = build_block(Paragraph(content=(run,)))
    style = p.spans[0].style
    assert style.italic and not style.bold
    assert style.underline is not None
    assert style.font_name == "Arial"


def test_lists_flatten_to_first_run_of_each_paragraph():
    nested = BulletList(items=(_item(_p("deep")),))
    ordered = OrderedList(items=(
        _item(_p("one", " tail"), _p("two")),
        _item(Paragraph(), nested),
    ), start=5)
    # ordered lists also use the bullet glyph; empty paragraphs and nested lists vanish
    assert build_block(ordered) == [BulletLine("• one"), BulletLine("• two")]


def test_order_is_preserved_and_skipped_blocks_do_not_reorder():
    tree = DocumentTree(blocks=(
        _p("1"),
        UnsupportedNode("horizontalRule"),
        Heading(level=3, content=(TextRun("2"),)),
        Image(src="data:image/png;base64,AAAA"),
        BulletList(items=(_item(_p("3")),)),
        _p("4"),
    ))
    texts = [e.text for e in build_elements(tree)]
    assert texts == ["1", "2", "• 3", "4"]


def test_build_block_rejects_non_nodes():
    with pytest.raises(TypeError):
        build_block({"type": "paragraph"})
