import zipfile
from io import BytesIO

import pytest
from docx import Document
from lxml import etree

from report_delta.config import CompareOptions, Metadata
from report_delta.create_test_docs import CURRENT_ITEMS, to_bytes
from report_delta.docx_support import (
    W,
    annotate_docx,
    build_delta_docx,
    read_docx_paragraphs,
)
from report_delta.errors import DocumentFormatError
from report_delta.models import Annotation, DeltaItem, Severity, Tag


def _annotation(anchor, text="[NUEVO] Aparece por primera vez en el informe actual."):
    return Annotation(anchor_index=anchor, author="Delta semanal", initials="DS", text=text)


def _comments(data):
    with zipfile.ZipFile(BytesIO(data)) as z:
        if 'word/comments.xml' not in z.namelist():
            return []
        root = etree.fromstring(z.read('word/comments.xml'))
    return root.findall(f'{W}comment')


def _commented_paragraphs(data):
    doc = Document(BytesIO(data))
    return [
        idx for idx, para in enumerate(doc.paragraphs)
        if para._p.xpath('./w:commentRangeStart')
    ]


def test_read_paragraphs(current_docx):
    assert read_docx_paragraphs(current_docx) == CURRENT_ITEMS


@pytest.mark.parametrize("data", [b"", b"not a docx", b"PK\x03\x04 broken"])
def test_invalid_document(data):
    with pytest.raises(DocumentFormatError):
        read_docx_paragraphs(data)


def test_annotate_adds_one_comment_per_annotation(current_docx):
    result = annotate_docx(current_docx, [_annotation(2), _annotation(4, "[NUEVO RIESGO] Riesgo.\nSegunda línea")])

    comments = _comments(result)
    assert [c.get(f'{W}id') for c in comments] == ["1", "2"]
    assert comments[0].get(f'{W}author') == "Delta semanal"
    assert comments[0].get(f'{W}initials') == "DS"
    assert len(comments[1].findall(f'{W}p')) == 2
    assert _commented_paragraphs(result) == [2, 4]
    # the text of the document is untouched
    assert read_docx_paragraphs(result) == CURRENT_ITEMS


def test_annotate_strips_existing_comments(current_docx):
    first = annotate_docx(current_docx, [_annotation(2), _annotation(4), _annotation(6)])
    second = annotate_docx(first, [_annotation(8)])

    comments = _comments(second)
    assert [c.get(f'{W}id') for c in comments] == ["1"]
    assert _commented_paragraphs(second) == [8]


def test_annotate_clamps_anchor(current_docx):
    result = annotate_docx(current_docx, [_annotation(99)])
    assert _commented_paragraphs(result) == [len(CURRENT_ITEMS) - 1]


def test_annotate_document_without_paragraphs():
    empty = Document()
    for para in list(empty.paragraphs):
        para._p.getparent().remove(para._p)

    result = annotate_docx(to_bytes(empty), [_annotation(5)])

    assert len(_comments(result)) == 1
    assert _commented_paragraphs(result) == [0]


def test_annotate_without_annotations(current_docx):
    result = annotate_docx(current_docx, [])
    assert _comments(result) == []
    assert read_docx_paragraphs(result) == CURRENT_ITEMS


def test_build_delta_docx():
    deltas = [
        DeltaItem(key="g", title="Globex - Migración", tag=Tag.NEW_RISK, severity=Severity.HIGH,
                  note="Aparece marcado como [RIESGO] en la semana actual.", anchor=4),
        DeltaItem(key="i", title="Initech - Auditoría", tag=Tag.NO_CHANGE, severity=Severity.LOW,
                  note="Sin cambios relevantes detectados.", anchor=6),
    ]
    metadata = Metadata(manager="Ana", market="Iberia", baseline_date="2024-10-07", current_date="2024-10-14")

    paragraphs = read_docx_paragraphs(build_delta_docx(deltas, metadata))

    assert paragraphs[0] == "Delta semanal – Iberia – Ana"
    assert paragraphs[1] == "Comparación: 2024-10-07 → 2024-10-14"
    assert "[NUEVO RIESGO] Globex - Migración" in paragraphs
    assert "Severidad: High. Aparece marcado como [RIESGO] en la semana actual." in paragraphs
    assert "[SIN CAMBIOS] Initech - Auditoría" not in paragraphs


def test_build_delta_docx_without_changes():
    paragraphs = read_docx_paragraphs(build_delta_docx([], options=CompareOptions(include_highlights=False)))

    assert "No se detectan diferencias." in paragraphs
    assert "Cambios relevantes de la semana" not in paragraphs
