"""
Comparison settings.

Defaults live as module constants; a CompareOptions value is built from them
(or from a request payload) and passed explicitly through the pipeline.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import InputError

# Minimum composite score for a current item to be paired with a baseline item
MATCH_THRESHOLD = 0.55

# Body similarity below this marks a matched item as updated
BODY_SIMILARITY_THRESHOLD = 0.70

# Token churn ratio at which added/removed words are listed in the note
TOKEN_CHANGE_THRESHOLD = 0.35

MAX_HIGHLIGHTS = 12

DEFAULT_AUTHOR = "Delta semanal"
DEFAULT_INITIALS = "DS"

SEGMENTATION_MODES = ("items", "blocks")
OUTPUT_MODES = ("annotate", "delta_document")
OUTPUT_FORMATS = ("word", "pdf")

# Paragraphs that open a section of the report rather than describe an item
SECTION_HEADINGS = (
    "resumen",
    "resumen ejecutivo",
    "riesgos",
    "oportunidades",
    "proximos pasos",
    "novedades",
    "pipeline",
    "cuentas",
    "general",
    "partners",
    "otros varios",
    "datos globales",
)

SECTION_PREFIXES = (
    "seguimiento",
    "fecha:",
    "vertical",
    "squad",
    "datos global",
)

# Lines that name a block in the blank-line separated layout
BLOCK_TITLE_PREFIXES = (
    "seguimiento",
    "fecha:",
    "general",
    "vertical",
    "squad",
    "área",
    "datos global",
    "partners",
    "otros varios",
)


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes", "si", "sí"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "0", "no"):
        return False
    if isinstance(value, int):
        return bool(value)
    raise InputError(f"{name} must be a boolean, got {value!r}")


def _as_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InputError(f"{name} must be a number, got {value!r}") from None


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InputError(f"{name} must be an integer, got {value!r}") from None


def _snake_case(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


@dataclass(frozen=True)
class CompareOptions:
    """Tunable parameters of one comparison run."""
    segmentation: str = "items"
    match_threshold: float = MATCH_THRESHOLD
    body_similarity_threshold: float = BODY_SIMILARITY_THRESHOLD
    token_change_threshold: float = TOKEN_CHANGE_THRESHOLD
    include_removed: bool = False
    numeric_deltas: bool = True
    significant_only: bool = True
    include_highlights: bool = True
    max_highlights: int = MAX_HIGHLIGHTS
    author: str = DEFAULT_AUTHOR
    initials: str = DEFAULT_INITIALS
    mode: str = "annotate"
    output_format: str = "word"
    section_headings: Tuple[str, ...] = SECTION_HEADINGS
    section_prefixes: Tuple[str, ...] = SECTION_PREFIXES
    block_title_prefixes: Tuple[str, ...] = BLOCK_TITLE_PREFIXES

    def __post_init__(self):
        if self.segmentation not in SEGMENTATION_MODES:
            raise InputError(f"Unknown segmentation {self.segmentation!r}")
        if self.mode not in OUTPUT_MODES:
            raise InputError(f"Unknown mode {self.mode!r}")
        if self.output_format not in OUTPUT_FORMATS:
            raise InputError(f"Unknown output format {self.output_format!r}")
        if not 0.0 < self.match_threshold <= 1.0:
            raise InputError("match_threshold must be in (0, 1]")
        for name in ("body_similarity_threshold", "token_change_threshold"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise InputError(f"{name} must be in [0, 1]")
        if self.max_highlights < 0:
            raise InputError("max_highlights must not be negative")
        if not self.author.strip():
            raise InputError("author must not be blank")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "CompareOptions":
        """
        Build options from a request payload.

        Keys may be camelCase or snake_case; None values and unknown keys are
        ignored so clients can send partial option objects.
        """
        if not data:
            return cls()

        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _snake_case(key)
            if value is None or name not in known:
                continue
            kind = known[name].type
            if kind in (bool, "bool"):
                values[name] = _as_bool(name, value)
            elif kind in (float, "float"):
                values[name] = _as_float(name, value)
            elif kind in (int, "int"):
                values[name] = _as_int(name, value)
            elif name.endswith(("headings", "prefixes")):
                values[name] = tuple(str(v) for v in value)
            else:
                values[name] = str(value)
        return cls(**values)

    def with_overrides(self, **changes) -> "CompareOptions":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


@dataclass(frozen=True)
class Metadata:
    """Report identification used for the output file name and header."""
    manager: str = ""
    market: str = ""
    baseline_date: str = ""
    current_date: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Metadata":
        if not data:
            return cls()
        aliases = {"gerente": "manager", "mercado": "market"}
        values = {}
        for key, value in data.items():
            name = aliases.get(key, _snake_case(key))
            if value is not None and name in cls.__dataclass_fields__:
                values[name] = str(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        return {
            "manager": self.manager,
            "market": self.market,
            "baselineDate": self.baseline_date,
            "currentDate": self.current_date,
        }


DEFAULT_OPTIONS = CompareOptions()
