"""
Data classes shared by the segmenter, matcher, classifier and renderers.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, List, Optional


class FlagKind(Enum):
    """Content signals detected when a unit is segmented."""
    RISK = "risk"
    NO_CHANGE = "no_change"


class Tag(Enum):
    """Change taxonomy of a delta item."""
    NEW = "new"
    REMOVED = "removed"
    UPDATED = "updated"
    NEW_RISK = "new_risk"
    NO_CHANGE = "no_change"

    @property
    def label(self) -> str:
        return TAG_LABELS[self]


TAG_LABELS = {
    Tag.NEW_RISK: "[NUEVO RIESGO]",
    Tag.UPDATED: "[ACTUALIZACIÓN]",
    Tag.NEW: "[NUEVO]",
    Tag.REMOVED: "[ELIMINADO]",
    Tag.NO_CHANGE: "[SIN CAMBIOS]",
}


class Severity(IntEnum):
    """Ordinal importance of a delta item."""
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class Unit:
    """
    A comparable piece of a report: an item (title + description) or a block.

    Attributes:
        key: sha1 of the normalized title, stable across revisions
        title: Title paragraph (items) or guessed block title
        body: Description paragraph (items) or the whole block text
        anchor: Index of the representative paragraph in its source document
        flags: Content signals (risk marker, "sin novedad")
        client: Text before the first dash of an item title
        category: Section heading the item was found under
    """
    key: str
    title: str
    body: str
    anchor: int = 0
    flags: FrozenSet[FlagKind] = frozenset()
    client: str = ""
    category: str = ""

    @property
    def has_risk(self) -> bool:
        return FlagKind.RISK in self.flags

    @property
    def is_no_change(self) -> bool:
        return FlagKind.NO_CHANGE in self.flags

    @property
    def signature(self) -> str:
        """Secondary identity text used by the matcher."""
        return " ".join(part for part in (self.category, self.client, self.title) if part)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'title': self.title,
            'body': self.body,
            'anchor': self.anchor,
            'flags': sorted(flag.value for flag in self.flags),
            'client': self.client,
            'category': self.category,
        }


@dataclass(frozen=True)
class Verdict:
    """Outcome of classifying one unit."""
    tag: Tag
    severity: Severity
    note: str


@dataclass(frozen=True)
class DeltaItem:
    """
    One classified difference between the baseline and the current report.

    `current` is None only for removed items; `previous` is None for new ones.
    """
    key: str
    title: str
    tag: Tag
    severity: Severity
    note: str
    anchor: int
    previous: Optional[Unit] = None
    current: Optional[Unit] = None

    @property
    def is_significant(self) -> bool:
        return self.tag is not Tag.NO_CHANGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'title': self.title,
            'tag': self.tag.value,
            'severity': self.severity.label,
            'note': self.note,
            'anchor': self.anchor,
            'previous': self.previous.to_dict() if self.previous else None,
            'current': self.current.to_dict() if self.current else None,
        }


@dataclass
class Summary:
    """Counts of delta items by severity and by tag."""
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    new_risk: int = 0
    updated: int = 0
    new: int = 0
    removed: int = 0
    no_change: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low

    def count(self, tag: Tag) -> int:
        return getattr(self, tag.value)

    def to_dict(self) -> Dict[str, int]:
        return {
            'critical': self.critical,
            'high': self.high,
            'medium': self.medium,
            'low': self.low,
            'newRisk': self.new_risk,
            'updated': self.updated,
            'new': self.new,
            'removed': self.removed,
            'noChange': self.no_change,
            'total': self.total,
        }


@dataclass(frozen=True)
class Annotation:
    """A comment to anchor on a paragraph of the current document."""
    anchor_index: int
    author: str
    initials: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'anchorIndex': self.anchor_index,
            'author': self.author,
            'initials': self.initials,
            'text': self.text,
        }


@dataclass
class ComparisonResult:
    """Result of comparing two report revisions."""
    file_name: str
    document: bytes
    media_type: str
    summary: Summary
    deltas: List[DeltaItem] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)
    highlights: List[DeltaItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Metadata of the result, without the document bytes."""
        return {
            'fileName': self.file_name,
            'mediaType': self.media_type,
            'summary': self.summary.to_dict(),
            'deltas': [d.to_dict() for d in self.deltas],
            'annotations': [a.to_dict() for a in self.annotations],
            'highlights': [d.to_dict() for d in self.highlights],
        }
