"""
Segmentation of a report's paragraphs into comparable units.

Two layouts are supported:
- items: "Client - subject" title paragraphs, each followed by a description
- blocks: runs of non-empty lines separated by blank lines
"""

import hashlib
import logging
import re
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .config import DEFAULT_OPTIONS, CompareOptions
from .models import FlagKind, Unit
from .text import collapse_whitespace, fold, normalize, normalize_dashes

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 12
MAX_TITLE_LENGTH = 220
DESCRIPTION_LOOKAHEAD = 3
MIN_DESCRIPTION_LENGTH = 80

BLOCK_TITLE_LINES = 6
BLOCK_TITLE_PARTS = 3
BLOCK_TITLE_SEPARATOR = " · "
MIN_KEY_SEED_LENGTH = 8

# A hyphen with whitespace on at least one side; "e-commerce" is not a separator
DASH_SEPARATOR_RE = re.compile(r'\s-|-\s')
OUTLINE_PREFIX_RE = re.compile(r'^\d+(?:\.\d+)*[.)]?\s')

RISK_RE = re.compile(r'\[\s*riesgo\s*\]|\briesgo\b', re.IGNORECASE)
NO_CHANGE_RE = re.compile(r'\bsin\s+novedad(?:es)?\b', re.IGNORECASE)


def sha1(text: str) -> str:
    return hashlib.sha1(text.encode('utf-8')).hexdigest()


def detect_flags(text: str) -> frozenset:
    """Risk marker and "sin novedad" signals present in text."""
    flags = set()
    if RISK_RE.search(text or ""):
        flags.add(FlagKind.RISK)
    if NO_CHANGE_RE.search(text or ""):
        flags.add(FlagKind.NO_CHANGE)
    return frozenset(flags)


def clean_paragraph(text: str) -> str:
    return collapse_whitespace(normalize_dashes(text))


def is_section_heading(text: str, options: CompareOptions = DEFAULT_OPTIONS) -> bool:
    """
    Whether a paragraph opens a report section.

    Compared folded, so case and accents are ignored; a trailing colon does
    not prevent an exact match. Prefixes only match short lines without a
    dash separator, so titles and descriptions never open a section.
    """
    folded = fold(text)
    if not folded:
        return False
    headings = {fold(h) for h in options.section_headings}
    if folded in headings:
        return True
    if DASH_SEPARATOR_RE.search(text) or len(text) >= MIN_DESCRIPTION_LENGTH:
        return False
    return any(folded.startswith(p) for p in _folded(options.section_prefixes))


def _folded(phrases: Iterable[str]) -> List[str]:
    return [f for f in (fold(p) for p in phrases) if f]


def is_title_candidate(text: str, options: CompareOptions = DEFAULT_OPTIONS) -> bool:
    """Whether a cleaned paragraph looks like a "Client - subject" item title."""
    if not text:
        return False
    if not MIN_TITLE_LENGTH <= len(text) <= MAX_TITLE_LENGTH:
        return False
    if not DASH_SEPARATOR_RE.search(text):
        return False
    if OUTLINE_PREFIX_RE.match(text):
        return False
    return not is_section_heading(text, options)


def looks_like_description(text: str) -> bool:
    return len(text) >= MIN_DESCRIPTION_LENGTH and ' ' in text


def extract_client(title: str) -> str:
    """Text before the first dash separator of a title."""
    match = DASH_SEPARATOR_RE.search(title)
    if not match:
        return ""
    return title[:match.start()].strip(" -")


def _find_description(
    paragraphs: Sequence[str],
    title_index: int,
    options: CompareOptions
) -> Optional[int]:
    """Index of the description following a title, if any within the window."""
    end = min(len(paragraphs), title_index + 1 + DESCRIPTION_LOOKAHEAD)
    for idx in range(title_index + 1, end):
        text = paragraphs[idx]
        if is_section_heading(text, options):
            return None
        if looks_like_description(text):
            return idx
    return None


def segment_items(
    paragraphs: Sequence[str],
    options: CompareOptions = DEFAULT_OPTIONS
) -> List[Unit]:
    """
    Segment a report written as title + description items.

    Titles without a description in the lookahead window are dropped.
    """
    cleaned = [clean_paragraph(p) for p in paragraphs]
    units = []
    consumed: Set[int] = set()
    category = ""

    for idx, text in enumerate(cleaned):
        if idx in consumed or not text:
            continue
        if is_section_heading(text, options):
            category = text.rstrip(':').strip()
            continue
        if not is_title_candidate(text, options):
            continue

        desc_idx = _find_description(cleaned, idx, options)
        if desc_idx is None:
            logger.debug(f"Discarding title without description at paragraph {idx}: {text[:60]}")
            continue
        consumed.add(desc_idx)

        body = cleaned[desc_idx]
        units.append(Unit(
            key=sha1(normalize(text)),
            title=text,
            body=body,
            anchor=idx,
            flags=detect_flags(f"{text}\n{body}"),
            client=extract_client(text),
            category=category
        ))

    logger.debug(f"Segmented {len(units)} items from {len(paragraphs)} paragraphs")
    return units


def guess_title(lines: Sequence[str], options: CompareOptions = DEFAULT_OPTIONS) -> str:
    """Title of a block: its heading-like opening lines, else its first line."""
    prefixes = _folded(options.block_title_prefixes)
    parts = [
        line for line in lines[:BLOCK_TITLE_LINES]
        if any(fold(line).startswith(p) for p in prefixes)
    ]
    if parts:
        return BLOCK_TITLE_SEPARATOR.join(parts[:BLOCK_TITLE_PARTS])
    return lines[0] if lines else "Bloque"


def _block_lines(paragraphs: Sequence[str]) -> List[Tuple[int, str]]:
    lines = []
    for idx, paragraph in enumerate(paragraphs):
        for line in (paragraph or "").split('\n'):
            lines.append((idx, line.strip()))
    return lines


def _runs(lines: List[Tuple[int, str]]) -> List[List[Tuple[int, str]]]:
    runs = []
    current: List[Tuple[int, str]] = []
    for entry in lines:
        if entry[1]:
            current.append(entry)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs


def segment_blocks(
    paragraphs: Sequence[str],
    options: CompareOptions = DEFAULT_OPTIONS
) -> List[Unit]:
    """Segment a report into blank-line separated blocks."""
    units = []
    for run in _runs(_block_lines(paragraphs)):
        lines = [line for _, line in run]
        raw = '\n'.join(lines)
        title = guess_title(lines, options)

        key_seed = normalize(title)
        if len(key_seed) < MIN_KEY_SEED_LENGTH:
            key_seed = normalize(lines[0])

        units.append(Unit(
            key=sha1(key_seed),
            title=title,
            body=raw,
            anchor=run[0][0],
            flags=detect_flags(raw)
        ))

    logger.debug(f"Segmented {len(units)} blocks from {len(paragraphs)} paragraphs")
    return units


def segment_text(text: str, options: CompareOptions = DEFAULT_OPTIONS) -> List[Unit]:
    """Segment raw text (one paragraph per line) into blocks."""
    if not text:
        return []
    return segment_blocks(text.split('\n'), options)


def segment(paragraphs: Sequence[str], options: CompareOptions = DEFAULT_OPTIONS) -> List[Unit]:
    """Segment paragraphs with the strategy selected in options."""
    if options.segmentation == "blocks":
        return segment_blocks(paragraphs, options)
    return segment_items(paragraphs, options)
