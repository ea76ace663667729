"""
Word (.docx) support for report comparison.

Provides:
1. Paragraph extraction from .docx bytes
2. Comment annotation of the current report (existing comments are replaced)
3. Generation of the standalone delta report
"""

import logging
import re
import zipfile
from datetime import datetime, timezone
from io import BytesIO
from typing import List, Sequence

from docx import Document
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.exceptions import PackageNotFoundError
from docx.opc.packuri import PackURI
from docx.opc.part import Part
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import RGBColor
from lxml import etree

from .annotate import clamp_anchor, highlight_line, select_highlights
from .config import DEFAULT_OPTIONS, CompareOptions, Metadata
from .errors import DocumentFormatError
from .models import Annotation, DeltaItem, Tag

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Word XML namespaces
WORD_NS = 'http://schemas.openxmlformats.org/wordprocessingml/2006/main'
W = '{%s}' % WORD_NS

COMMENTS_PARTNAME = '/word/comments.xml'
COMMENTS_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.comments+xml"

# Word 2010+ side parts that index comments by paragraph id
COMMENT_REL_TYPES = frozenset((
    RT.COMMENTS,
    "http://schemas.microsoft.com/office/2011/relationships/commentsExtended",
    "http://schemas.microsoft.com/office/2016/09/relationships/commentsIds",
    "http://schemas.microsoft.com/office/2018/08/relationships/commentsExtensible",
))

_XML_INVALID_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")

TAG_COLORS = {
    Tag.NEW_RISK: RGBColor(255, 0, 0),    # Red
    Tag.REMOVED: RGBColor(255, 0, 0),     # Red
    Tag.UPDATED: RGBColor(0, 0, 255),     # Blue
    Tag.NEW: RGBColor(0, 128, 0),         # Green
}


def open_docx(data: bytes):
    """Open .docx bytes with python-docx."""
    if not data:
        raise DocumentFormatError("Empty document")
    try:
        return Document(BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError, etree.XMLSyntaxError) as e:
        raise DocumentFormatError(f"Not a valid .docx document: {e}") from e


def read_docx_paragraphs(data: bytes) -> List[str]:
    """Text of every top-level body paragraph, trimmed, in document order."""
    doc = open_docx(data)
    return [(para.text or '').strip() for para in doc.paragraphs]


def xml_safe(text: str) -> str:
    return _XML_INVALID_RE.sub('', text or '')


def clear_comments(doc) -> int:
    """
    Remove every existing comment from the document.

    Drops the range marks and reference runs from the body and the
    relationships to the comments parts. Returns the number of comment
    references removed.
    """
    root = doc.element
    for tag in ('w:commentRangeStart', 'w:commentRangeEnd'):
        for elem in root.xpath(f'.//{tag}'):
            elem.getparent().remove(elem)

    removed = 0
    for ref in root.xpath('.//w:commentReference'):
        run = ref.getparent()
        removed += 1
        only_reference = run.tag == qn('w:r') and all(
            child.tag in (qn('w:rPr'), qn('w:commentReference')) for child in run
        )
        if only_reference:
            run.getparent().remove(run)
        else:
            run.remove(ref)

    for r_id, rel in list(doc.part.rels.items()):
        if rel.reltype in COMMENT_REL_TYPES:
            doc.part.drop_rel(r_id)

    return removed


def _add_comment_marks(paragraph, comment_id: int):
    """Wrap the paragraph content in a comment range and append its reference."""
    p = paragraph._p
    cid = str(comment_id)

    start = OxmlElement('w:commentRangeStart')
    start.set(qn('w:id'), cid)
    end = OxmlElement('w:commentRangeEnd')
    end.set(qn('w:id'), cid)

    ref_run = OxmlElement('w:r')
    ref = OxmlElement('w:commentReference')
    ref.set(qn('w:id'), cid)
    ref_run.append(ref)

    if p.pPr is not None:
        p.pPr.addnext(start)
    else:
        p.insert(0, start)
    p.append(end)
    p.append(ref_run)


def _comment_element(parent, comment_id: int, annotation: Annotation, timestamp: str):
    comment = etree.SubElement(parent, f'{W}comment')
    comment.set(f'{W}id', str(comment_id))
    comment.set(f'{W}author', xml_safe(annotation.author))
    comment.set(f'{W}initials', xml_safe(annotation.initials))
    comment.set(f'{W}date', timestamp)

    for line in (annotation.text or '').split('\n'):
        p = etree.SubElement(comment, f'{W}p')
        r = etree.SubElement(p, f'{W}r')
        t = etree.SubElement(r, f'{W}t')
        t.set('{http://www.w3.org/XML/1998/namespace}space', 'preserve')
        t.text = xml_safe(line)
    return comment


def annotate_docx(data: bytes, annotations: Sequence[Annotation]) -> bytes:
    """
    Return a copy of the document carrying one comment per annotation.

    Pre-existing comments are stripped first. Anchors are clamped to the
    paragraph range and comment ids are assigned sequentially from 1. A
    document without paragraphs gets an empty one to anchor on.
    """
    doc = open_docx(data)
    stripped = clear_comments(doc)
    if stripped:
        logger.info(f"Removed {stripped} existing comments")

    paragraphs = doc.paragraphs
    if not paragraphs:
        doc.add_paragraph('')
        paragraphs = doc.paragraphs

    comments = etree.Element(f'{W}comments', nsmap={'w': WORD_NS})
    timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')

    for comment_id, annotation in enumerate(annotations, start=1):
        anchor = clamp_anchor(annotation.anchor_index, len(paragraphs))
        _add_comment_marks(paragraphs[anchor], comment_id)
        _comment_element(comments, comment_id, annotation, timestamp)

    if annotations:
        blob = etree.tostring(comments, xml_declaration=True, encoding='UTF-8', standalone=True)
        comments_part = Part(PackURI(COMMENTS_PARTNAME), COMMENTS_CONTENT_TYPE, blob, doc.part.package)
        doc.part.relate_to(comments_part, RT.COMMENTS)

    logger.info(f"Anchored {len(annotations)} comments on {len(paragraphs)} paragraphs")
    return save_docx(doc)


def save_docx(doc) -> bytes:
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def set_tag_formatting(run, tag: Tag):
    """Apply the delta colour of a tag to a run."""
    color = TAG_COLORS.get(tag)
    if color is None:
        return
    run.bold = True
    run.font.color.rgb = color
    if tag is Tag.REMOVED:
        run.font.strike = True


def report_title(metadata: Metadata) -> str:
    return f"Delta semanal – {metadata.market or 'Mercado'} – {metadata.manager or 'Gerente'}"


def comparison_line(metadata: Metadata) -> str:
    return f"Comparación: {metadata.baseline_date or 'baseline'} → {metadata.current_date or 'current'}"


def detail_heading(options: CompareOptions) -> str:
    return "Detalle por bloques" if options.segmentation == "blocks" else "Detalle por elementos"


def build_delta_docx(
    deltas: Sequence[DeltaItem],
    metadata: Metadata = Metadata(),
    options: CompareOptions = DEFAULT_OPTIONS
) -> bytes:
    """Generate the standalone delta report as a Word document."""
    doc = Document()

    doc.add_heading(report_title(metadata), level=1)
    doc.add_paragraph(comparison_line(metadata))

    if options.include_highlights:
        doc.add_heading("Cambios relevantes de la semana", level=2)
        highlights = select_highlights(deltas, options.max_highlights)
        if not highlights:
            doc.add_paragraph("No se detectan cambios de severidad alta/crítica.")
        for item in highlights:
            doc.add_paragraph(highlight_line(item), style='List Bullet')

    doc.add_heading(detail_heading(options), level=2)

    written = 0
    for item in deltas:
        if options.significant_only and not item.is_significant:
            continue
        heading = doc.add_heading('', level=3)
        set_tag_formatting(heading.add_run(item.tag.label), item.tag)
        heading.add_run(f" {item.title}")
        doc.add_paragraph(f"Severidad: {item.severity.label}. {item.note}")
        written += 1

    if not written:
        doc.add_paragraph("No se detectan diferencias.")

    return save_docx(doc)
