"""
report-delta - Weekly report comparison library.

Compares two revisions of a weekly business report (Word or PDF) and
classifies each item as:
- [NUEVO RIESGO] newly flagged risks
- [ACTUALIZACIÓN] updated items (figures, confirmations, content)
- [NUEVO] / [ELIMINADO] items that appear or disappear
- [SIN CAMBIOS] unchanged items

The result is written as Word comments on the current report or as a
standalone delta report.
"""

__version__ = "1.0.0"

from .config import CompareOptions, Metadata, DEFAULT_OPTIONS
from .errors import ReportDeltaError, InputError, DocumentFormatError, InternalError
from .models import (
    Annotation,
    ComparisonResult,
    DeltaItem,
    FlagKind,
    Severity,
    Summary,
    Tag,
    Unit,
)
from .text import jaccard, normalize, tokenize
from .segment import segment, segment_blocks, segment_items, segment_text
from .matching import match_units, match_by_key
from .classify import classify, classify_removed, RULES
from .delta import assemble, summarize, compare_units
from .annotate import build_annotations, select_highlights

from .report_compare import (
    build_file_name,
    compare_files,
    compare_paragraphs,
    compare_reports,
    read_paragraphs,
)

from .pdf_support import (
    PdfParser,
    PdfGenerator,
    extract_paragraphs_from_pdf,
)

__all__ = [
    "CompareOptions",
    "Metadata",
    "DEFAULT_OPTIONS",
    "ReportDeltaError",
    "InputError",
    "DocumentFormatError",
    "InternalError",
    "Annotation",
    "ComparisonResult",
    "DeltaItem",
    "FlagKind",
    "Severity",
    "Summary",
    "Tag",
    "Unit",
    "jaccard",
    "normalize",
    "tokenize",
    "segment",
    "segment_blocks",
    "segment_items",
    "segment_text",
    "match_units",
    "match_by_key",
    "classify",
    "classify_removed",
    "RULES",
    "assemble",
    "summarize",
    "compare_units",
    "build_annotations",
    "select_highlights",
    "build_file_name",
    "compare_files",
    "compare_paragraphs",
    "compare_reports",
    "read_paragraphs",
    "PdfParser",
    "PdfGenerator",
    "extract_paragraphs_from_pdf",
]
