"""
PDF Support Module for Report Comparison

Provides:
1. PDF paragraph extraction, so a revision exported to PDF can be compared
2. PDF generation of the standalone delta report
"""

import fitz  # PyMuPDF
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional, Sequence, Tuple
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, ListFlowable, ListItem

from .annotate import highlight_line, select_highlights
from .config import DEFAULT_OPTIONS, CompareOptions, Metadata
from .docx_support import comparison_line, detail_heading, report_title
from .errors import DocumentFormatError
from .models import DeltaItem, Tag

PDF_MEDIA_TYPE = "application/pdf"

TAG_FONT_COLORS = {
    Tag.NEW_RISK: "red",
    Tag.REMOVED: "red",
    Tag.UPDATED: "blue",
    Tag.NEW: "green",
}


@dataclass
class ExtractedParagraph:
    """Represents a paragraph extracted from a PDF."""
    text: str
    page_num: int
    bbox: Optional[Tuple[float, float, float, float]] = None  # x0, y0, x1, y1
    font_size: Optional[float] = None
    is_bold: bool = False
    is_heading: bool = False


class PdfParser:
    """Extracts paragraphs from PDF bytes."""

    def __init__(self, data: bytes):
        try:
            self.doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentFormatError(f"Not a valid PDF document: {e}") from e

    def close(self):
        self.doc.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def extract_paragraphs(self) -> List[ExtractedParagraph]:
        """Extract text blocks as paragraphs, with basic heading detection."""
        paragraphs = []

        for page_num in range(len(self.doc)):
            page = self.doc[page_num]
            blocks = page.get_text("dict")["blocks"]

            for block in blocks:
                if block["type"] != 0:  # Not a text block
                    continue

                block_text = []
                max_font_size = 0
                is_bold = False

                for line in block.get("lines", []):
                    line_text = []
                    for span in line.get("spans", []):
                        text = span.get("text", "")
                        if text.strip():
                            line_text.append(text)
                            max_font_size = max(max_font_size, span.get("size", 12))
                            if "bold" in span.get("font", "").lower():
                                is_bold = True

                    if line_text:
                        block_text.append(" ".join(line_text))

                if block_text:
                    paragraphs.append(ExtractedParagraph(
                        text=" ".join(block_text),
                        page_num=page_num + 1,
                        bbox=block.get("bbox"),
                        font_size=max_font_size,
                        is_bold=is_bold,
                        is_heading=max_font_size > 14
                    ))

        return paragraphs

    def get_page_count(self) -> int:
        return len(self.doc)


def extract_paragraphs_from_pdf(data: bytes) -> List[str]:
    """Paragraph texts of a PDF, in reading order."""
    with PdfParser(data) as parser:
        return [p.text.strip() for p in parser.extract_paragraphs()]


class PdfGenerator:
    """Renders the delta report as a PDF document."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_styles()

    def _setup_styles(self):
        self.styles.add(ParagraphStyle(
            name='Normal_Custom',
            parent=self.styles['Normal'],
            fontSize=10,
            leading=13,
            spaceAfter=6
        ))

        self.styles.add(ParagraphStyle(
            name='Item_Heading',
            parent=self.styles['Heading3'],
            fontSize=11,
            leading=14,
            spaceBefore=8,
            spaceAfter=2
        ))

    def generate_delta_report(
        self,
        deltas: Sequence[DeltaItem],
        metadata: Metadata = Metadata(),
        options: CompareOptions = DEFAULT_OPTIONS
    ) -> bytes:
        """Build the report and return the PDF bytes."""
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=72,
            leftMargin=72,
            topMargin=72,
            bottomMargin=72,
            title=report_title(metadata)
        )

        story = [
            Paragraph(self._escape_xml(report_title(metadata)), self.styles['Heading1']),
            Paragraph(self._escape_xml(comparison_line(metadata)), self.styles['Normal_Custom']),
            Spacer(1, 12),
        ]

        if options.include_highlights:
            story.append(Paragraph("Cambios relevantes de la semana", self.styles['Heading2']))
            highlights = select_highlights(deltas, options.max_highlights)
            if highlights:
                story.append(ListFlowable(
                    [ListItem(Paragraph(self._escape_xml(highlight_line(h)), self.styles['Normal_Custom']))
                     for h in highlights],
                    bulletType='bullet'
                ))
            else:
                story.append(Paragraph(
                    "No se detectan cambios de severidad alta/crítica.", self.styles['Normal_Custom']
                ))
            story.append(Spacer(1, 12))

        story.append(Paragraph(detail_heading(options), self.styles['Heading2']))

        written = 0
        for item in deltas:
            if options.significant_only and not item.is_significant:
                continue
            story.append(Paragraph(self._format_heading(item), self.styles['Item_Heading']))
            story.append(Paragraph(
                self._escape_xml(f"Severidad: {item.severity.label}. {item.note}"),
                self.styles['Normal_Custom']
            ))
            written += 1

        if not written:
            story.append(Paragraph("No se detectan diferencias.", self.styles['Normal_Custom']))

        doc.build(story)
        return buffer.getvalue()

    def _format_heading(self, item: DeltaItem) -> str:
        label = self._escape_xml(item.tag.label)
        color = TAG_FONT_COLORS.get(item.tag)
        if color and item.tag is Tag.REMOVED:
            label = f'<font color="{color}"><strike>{label}</strike></font>'
        elif color:
            label = f'<font color="{color}"><b>{label}</b></font>'
        return f"{label} {self._escape_xml(item.title)}"

    def _escape_xml(self, text: str) -> str:
        """Escape special XML characters for ReportLab."""
        text = text.replace("&", "&amp;")
        text = text.replace("<", "&lt;")
        text = text.replace(">", "&gt;")
        text = text.replace('"', "&quot;")
        text = text.replace("'", "&apos;")
        return text


def build_delta_pdf(
    deltas: Sequence[DeltaItem],
    metadata: Metadata = Metadata(),
    options: CompareOptions = DEFAULT_OPTIONS
) -> bytes:
    """Generate the standalone delta report as a PDF document."""
    return PdfGenerator().generate_delta_report(deltas, metadata, options)
