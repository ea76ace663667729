"""
Weekly Report Comparison Tool

Compares the current week's report against the previous one and produces:
- Word comments anchored on the current report (annotate mode)
- A standalone delta report in Word or PDF (delta_document mode)

Supports:
- Word (.docx) and PDF input
- Title + description items or blank-line separated blocks
"""

import logging
import os
import re
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional

from .annotate import build_annotations, select_highlights
from .config import DEFAULT_OPTIONS, CompareOptions, Metadata
from .delta import compare_units, summarize
from .docx_support import DOCX_MEDIA_TYPE, annotate_docx, build_delta_docx, read_docx_paragraphs
from .errors import DocumentFormatError, InputError, InternalError, ReportDeltaError
from .models import ComparisonResult, DeltaItem
from .pdf_support import PDF_MEDIA_TYPE, build_delta_pdf, extract_paragraphs_from_pdf
from .segment import segment

logger = logging.getLogger(__name__)

PDF_MAGIC = b'%PDF'
ZIP_MAGIC = b'PK'

# Characters that are not allowed in file names on Windows, plus whitespace
UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f\s]')


def get_file_type(data: bytes) -> str:
    """Detect 'pdf' or 'word' from the leading bytes of a document."""
    if data.startswith(PDF_MAGIC):
        return 'pdf'
    if data.startswith(ZIP_MAGIC):
        return 'word'
    raise DocumentFormatError("Unsupported document: expected a .docx or .pdf file")


def read_paragraphs(data: bytes) -> List[str]:
    """Paragraph texts of a Word or PDF document."""
    if get_file_type(data) == 'pdf':
        return extract_paragraphs_from_pdf(data)
    return read_docx_paragraphs(data)


@contextmanager
def _stage(name: str):
    """Report unexpected failures as InternalError tagged with the stage."""
    try:
        yield
    except ReportDeltaError:
        raise
    except Exception as e:
        logger.error(f"Stage '{name}' failed: {e}")
        raise InternalError(name, str(e) or type(e).__name__, e) from e


def compare_paragraphs(
    baseline: List[str],
    current: List[str],
    options: CompareOptions = DEFAULT_OPTIONS
) -> List[DeltaItem]:
    """Segment both revisions and return the ordered delta list."""
    with _stage("segment"):
        baseline_units = segment(baseline, options)
        current_units = segment(current, options)
    logger.info(f"Segmented {len(baseline_units)} baseline and {len(current_units)} current units "
                f"({options.segmentation})")

    with _stage("classify"):
        return compare_units(current_units, baseline_units, options)


def build_file_name(
    metadata: Metadata = Metadata(),
    options: CompareOptions = DEFAULT_OPTIONS,
    today: Optional[str] = None
) -> str:
    """Delta_<market>_<manager>_<date>.<docx|pdf>"""
    market = safe_file_part(metadata.market or "Mercado")
    manager = safe_file_part(metadata.manager or "Gerente")
    date = metadata.current_date or today or datetime.now(timezone.utc).strftime('%Y-%m-%d')
    ext = 'pdf' if options.output_format == 'pdf' else 'docx'
    return f"Delta_{market}_{manager}_{safe_file_part(date)}.{ext}"


def safe_file_part(text: str) -> str:
    return UNSAFE_FILENAME_RE.sub('_', text)


def _validate_request(baseline_bytes: bytes, current_bytes: bytes, options: CompareOptions):
    if not baseline_bytes:
        raise InputError("Missing baseline document.")
    if not current_bytes:
        raise InputError("Missing current document.")
    if options.mode == 'annotate' and options.output_format != 'word':
        raise InputError("Annotate mode only produces Word output; use delta_document for PDF")

    get_file_type(baseline_bytes)
    if get_file_type(current_bytes) != 'word' and options.mode == 'annotate':
        raise InputError("Annotate mode needs the current report as a .docx document")


def compare_reports(
    baseline_bytes: bytes,
    current_bytes: bytes,
    options: CompareOptions = DEFAULT_OPTIONS,
    metadata: Metadata = Metadata()
) -> ComparisonResult:
    """
    Compare two report revisions and render the result.

    Args:
        baseline_bytes: Previous week's report (Word or PDF)
        current_bytes: Current week's report (Word, or PDF in delta_document mode)
        options: Comparison settings
        metadata: Manager, market and dates for the file name and report header

    Returns:
        ComparisonResult with the rendered document, deltas and summary

    Raises:
        InputError, DocumentFormatError: before any comparison work starts
        InternalError: when a later stage fails
    """
    _validate_request(baseline_bytes, current_bytes, options)

    with _stage("read"):
        baseline = read_paragraphs(baseline_bytes)
        current = read_paragraphs(current_bytes)
    logger.info(f"Read {len(baseline)} baseline and {len(current)} current paragraphs")

    deltas = compare_paragraphs(baseline, current, options)
    highlights = select_highlights(deltas, options.max_highlights) if options.include_highlights else []
    annotations = []

    if options.mode == 'annotate':
        with _stage("annotate"):
            annotations = build_annotations(deltas, len(current), options)
            document = annotate_docx(current_bytes, annotations)
        media_type = DOCX_MEDIA_TYPE
    else:
        with _stage("render"):
            if options.output_format == 'pdf':
                document = build_delta_pdf(deltas, metadata, options)
                media_type = PDF_MEDIA_TYPE
            else:
                document = build_delta_docx(deltas, metadata, options)
                media_type = DOCX_MEDIA_TYPE

    return ComparisonResult(
        file_name=build_file_name(metadata, options),
        document=document,
        media_type=media_type,
        summary=summarize(deltas),
        deltas=deltas,
        annotations=annotations,
        highlights=highlights
    )


def compare_files(
    baseline_path: str,
    current_path: str,
    output_path: str,
    options: CompareOptions = DEFAULT_OPTIONS,
    metadata: Metadata = Metadata()
) -> ComparisonResult:
    """Compare two report files and write the rendered document to output_path."""
    for path in (baseline_path, current_path):
        if not os.path.isfile(path):
            raise InputError(f"File not found: {path}")

    print(f"Baseline: {baseline_path}")
    print(f"Current: {current_path}")
    print(f"Output: {output_path} ({options.mode}, {options.output_format})")
    print()

    with open(baseline_path, 'rb') as f:
        baseline_bytes = f.read()
    with open(current_path, 'rb') as f:
        current_bytes = f.read()

    print("Comparing reports...")
    result = compare_reports(baseline_bytes, current_bytes, options, metadata)

    with open(output_path, 'wb') as f:
        f.write(result.document)

    return result


def main():
    """Command-line interface."""
    import argparse

    parser = argparse.ArgumentParser(
        description='Compare two weekly reports and produce an annotated or delta document.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s semana_41.docx semana_42.docx anotado.docx
  %(prog)s semana_41.docx semana_42.docx delta.pdf --mode delta_document
  %(prog)s semana_41.docx semana_42.docx anotado.docx --segmentation blocks --include-removed
        """
    )
    parser.add_argument('baseline', help="Path to the previous week's report (Word or PDF)")
    parser.add_argument('current', help="Path to the current week's report (Word or PDF)")
    parser.add_argument('output', help='Path for the output document')
    parser.add_argument('--segmentation', choices=['items', 'blocks'],
                        help='Report layout (default: items)')
    parser.add_argument('--mode', choices=['annotate', 'delta_document'],
                        help='Comment the current report or build a delta report '
                             '(default: annotate, delta_document for PDF output)')
    parser.add_argument('--format', choices=['word', 'pdf'],
                        help='Output format (default: auto-detect from output extension)')
    parser.add_argument('--threshold', type=float, help='Minimum match score, in (0, 1]')
    parser.add_argument('--token-threshold', type=float,
                        help='Token churn ratio at which added/removed words are listed')
    parser.add_argument('--include-removed', action='store_true',
                        help='Report baseline items missing from the current report')
    parser.add_argument('--all', action='store_true', help='Also report unchanged items')
    parser.add_argument('--no-highlights', action='store_true', help='Omit the highlights summary')
    parser.add_argument('--max-highlights', type=int, help='Maximum number of highlights')
    parser.add_argument('--author', help='Comment author')
    parser.add_argument('--initials', help='Comment author initials')
    parser.add_argument('--manager', default='', help='Manager name for the report header')
    parser.add_argument('--market', default='', help='Market name for the report header')
    parser.add_argument('--baseline-date', default='', help='Date of the baseline report')
    parser.add_argument('--current-date', default='', help='Date of the current report')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log progress details')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    output_format = args.format
    if output_format is None:
        output_format = 'pdf' if args.output.lower().endswith('.pdf') else 'word'
    mode = args.mode
    if mode is None:
        mode = 'delta_document' if output_format == 'pdf' else 'annotate'

    print("=" * 60)
    print("Weekly Report Comparison Tool")
    print("=" * 60)
    print()

    try:
        options = DEFAULT_OPTIONS.with_overrides(
            segmentation=args.segmentation,
            mode=mode,
            output_format=output_format,
            match_threshold=args.threshold,
            token_change_threshold=args.token_threshold,
            include_removed=args.include_removed or None,
            significant_only=False if args.all else None,
            include_highlights=False if args.no_highlights else None,
            max_highlights=args.max_highlights,
            author=args.author,
            initials=args.initials
        )
        metadata = Metadata(
            manager=args.manager,
            market=args.market,
            baseline_date=args.baseline_date,
            current_date=args.current_date
        )
        result = compare_files(args.baseline, args.current, args.output, options, metadata)
    except ReportDeltaError as e:
        print()
        print("=" * 60)
        print("COMPARISON FAILED")
        print("=" * 60)
        print(f"Error: {e}")
        sys.exit(1)

    summary = result.summary
    print()
    print("=" * 60)
    print("COMPARISON COMPLETE")
    print("=" * 60)
    print(f"Output: {args.output}")
    print(f"Suggested name: {result.file_name}")
    print(f"New risks: {summary.new_risk}")
    print(f"Updated: {summary.updated}")
    print(f"New: {summary.new}")
    print(f"Removed: {summary.removed}")
    print(f"Unchanged: {summary.no_change}")
    print(f"Severity - high: {summary.high}, medium: {summary.medium}, low: {summary.low}")
    if options.mode == 'annotate':
        print(f"Comments added: {len(result.annotations)}")


if __name__ == '__main__':
    main()
