"""
Mapping of delta items to comments on the current document's paragraphs.
"""

from typing import List, Sequence

from .config import DEFAULT_OPTIONS, MAX_HIGHLIGHTS, CompareOptions
from .models import Annotation, DeltaItem, Severity, Tag

HIGHLIGHTS_HEADER = "Cambios relevantes de la semana:"


def clamp_anchor(anchor: int, paragraph_count: int) -> int:
    """Clamp an anchor into the paragraph range; an empty document anchors at 0."""
    if paragraph_count <= 0:
        return 0
    return max(0, min(anchor, paragraph_count - 1))


def annotation_text(delta: DeltaItem) -> str:
    return f"{delta.tag.label} {delta.note}"


def select_highlights(
    deltas: Sequence[DeltaItem],
    max_highlights: int = MAX_HIGHLIGHTS
) -> List[DeltaItem]:
    """High and critical changes in assembled order, capped at max_highlights."""
    picked = [
        d for d in deltas
        if d.severity >= Severity.HIGH and d.tag is not Tag.NO_CHANGE
    ]
    return picked[:max_highlights]


def highlight_line(delta: DeltaItem) -> str:
    return f"{delta.tag.label} {delta.title} — {delta.note}"


def build_annotations(
    deltas: Sequence[DeltaItem],
    paragraph_count: int,
    options: CompareOptions = DEFAULT_OPTIONS
) -> List[Annotation]:
    """
    One annotation per delta item, in delta order.

    With include_highlights a summary annotation listing the highlights is
    placed first, on the opening paragraph.
    """
    annotations = []

    if options.include_highlights:
        highlights = select_highlights(deltas, options.max_highlights)
        if highlights:
            lines = [HIGHLIGHTS_HEADER] + [f"• {highlight_line(h)}" for h in highlights]
            annotations.append(Annotation(
                anchor_index=0,
                author=options.author,
                initials=options.initials,
                text="\n".join(lines)
            ))

    for delta in deltas:
        if options.significant_only and not delta.is_significant:
            continue
        annotations.append(Annotation(
            anchor_index=clamp_anchor(delta.anchor, paragraph_count),
            author=options.author,
            initials=options.initials,
            text=annotation_text(delta)
        ))

    return annotations
