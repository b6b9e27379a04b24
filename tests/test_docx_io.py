import io

import pytest
from docx import Document as DocxDocument

from docexport.docs.builder import build_elements
from docexport.docs.docx_io import write_docx
from docexport.docs.elements import BulletLine, StyledParagraph, StyledSpan
from docexport.docs.model import BulletList, DocumentTree, Heading, ListItem, Mark, Paragraph, TextRun
from docexport.errors import PackagingFailure


def _reopen(data: bytes):
    return DocxDocument(io.BytesIO(data))


def test_write_docx_produces_headings_runs_and_bullets():
    tree = DocumentTree(blocks=(
        Heading(level=2, content=(TextRun("Title"),)),
        Paragraph(content=(
            TextRun("Hello "),
            TextRun("world", marks=frozenset({Mark.BOLD, Mark.UNDERLINE}), font_family="Arial"),
        )),
        Paragraph(),
        BulletList(items=(ListItem(blocks=(Paragraph(content=(TextRun("A"),)),)),)),
    ))
    data = write_docx(build_elements(tree))
    assert data[:2] == b"PK"

    doc = _reopen(data)
    paras = doc.paragraphs
    assert [p.text for p in paras] == ["Title", "Hello world", "", "• A"]
    assert paras[0].style.name == "Heading 2"

    plain, styled = paras[1].runs
    assert not plain.bold
    assert plain.underline is None
    assert styled.bold is True
    assert styled.underline  # single underline reads back as True
    assert styled.font.name == "Arial"


def test_write_docx_placeholder_document():
    doc = _reopen(write_docx(build_elements(DocumentTree())))
    assert [p.text for p in doc.paragraphs] == ["Empty document"]


def test_write_docx_rejects_empty_sequence():
    with pytest.raises(PackagingFailure):
        write_docx([])


def test_write_docx_wraps_serialization_errors():
    # NUL is not XML-compatible; python-docx/lxml refuse it
    with pytest.raises(PackagingFailure):
        write_docx([StyledParagraph(spans=(StyledSpan("bad\x00text"),))])


def test_write_docx_bullet_line_is_plain_paragraph():
    doc = _reopen(write_docx([BulletLine("• item")]))
    assert doc.paragraphs[0].text == "• item"
