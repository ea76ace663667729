"""
Assembly of classifier verdicts into the ordered delta list and its summary.
"""

import logging
from typing import List, Optional, Sequence

from .classify import ClassifierContext, classify, classify_removed
from .config import DEFAULT_OPTIONS, CompareOptions
from .matching import Match, match_by_key, match_units
from .models import DeltaItem, Severity, Summary, Tag, Unit
from .text import fold

logger = logging.getLogger(__name__)


def sort_deltas(deltas: Sequence[DeltaItem]) -> List[DeltaItem]:
    """Severity descending, then title ascending; ties keep their order."""
    return sorted(deltas, key=lambda d: (-int(d.severity), d.title))


def removed_anchor(unit: Unit, current: Sequence[Unit]) -> int:
    """Anchor of the first current unit for the same client, else 0."""
    client = fold(unit.client)
    if not client:
        return 0
    for cur in current:
        if fold(cur.client) == client:
            return cur.anchor
    return 0


def assemble(
    current: Sequence[Unit],
    baseline: Sequence[Unit],
    match: Match,
    context: ClassifierContext = ClassifierContext(),
    include_removed: bool = False
) -> List[DeltaItem]:
    """
    Classify every current unit, plus unmatched baseline units on request.

    Returns the deltas in their final order.
    """
    deltas = []

    for cur_idx, cur in enumerate(current):
        base_idx = match.baseline_for(cur_idx)
        previous = baseline[base_idx] if base_idx is not None else None
        verdict = classify(previous, cur, context)
        deltas.append(DeltaItem(
            key=cur.key,
            title=cur.title,
            tag=verdict.tag,
            severity=verdict.severity,
            note=verdict.note,
            anchor=cur.anchor,
            previous=previous,
            current=cur
        ))

    if include_removed:
        for base_idx in match.unmatched_baseline(baseline):
            unit = baseline[base_idx]
            verdict = classify_removed(unit)
            deltas.append(DeltaItem(
                key=unit.key,
                title=unit.title,
                tag=verdict.tag,
                severity=verdict.severity,
                note=verdict.note,
                anchor=removed_anchor(unit, current),
                previous=unit,
                current=None
            ))

    return sort_deltas(deltas)


def summarize(deltas: Sequence[DeltaItem]) -> Summary:
    """Count deltas by severity and by tag."""
    summary = Summary()
    severity_fields = {
        Severity.CRITICAL: 'critical',
        Severity.HIGH: 'high',
        Severity.MEDIUM: 'medium',
        Severity.LOW: 'low',
    }
    for delta in deltas:
        name = severity_fields[delta.severity]
        setattr(summary, name, getattr(summary, name) + 1)
        setattr(summary, delta.tag.value, getattr(summary, delta.tag.value) + 1)
    return summary


def compare_units(
    current: Sequence[Unit],
    baseline: Sequence[Unit],
    options: CompareOptions = DEFAULT_OPTIONS,
    match: Optional[Match] = None
) -> List[DeltaItem]:
    """Match units with the strategy of the segmentation mode and assemble deltas."""
    if match is None:
        if options.segmentation == "blocks":
            match = match_by_key(current, baseline)
        else:
            match = match_units(current, baseline, options.match_threshold)

    deltas = assemble(
        current,
        baseline,
        match,
        ClassifierContext.from_options(options),
        include_removed=options.include_removed
    )
    counts = {tag.value: sum(1 for d in deltas if d.tag is tag) for tag in Tag}
    logger.info(f"Assembled {len(deltas)} deltas: {counts}")
    return deltas
