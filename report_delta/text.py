"""
Text normalization, tokenization and token-set similarity.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import List, Set, Tuple

MIN_TOKEN_LENGTH = 4

# Spanish function words and domain-generic nouns that carry no identity.
# Tokens shorter than MIN_TOKEN_LENGTH are dropped anyway; entries are folded.
STOPWORDS = frozenset("""
    ante bajo cabe como contra cual cuales cuando desde donde durante
    entre hacia hasta mediante para pero porque segun sino sobre tras
    aunque mientras tambien ademas luego pues incluso
    este esta estas estos esto aquel aquella aquellos aquellas ella ellos ellas
    unos unas todo toda todos todas otro otra otros otras mismo misma
    nuestro nuestra nuestros nuestras vuestro suyo suya cada algun alguna
    algunos algunas ningun ninguna mucho mucha muchos muchas poco pocos
    sido sera seran estan estaba estaban tiene tienen tenia haber hace
    hacer puede pueden debe deben queda quedan sigue siguen
    proyecto proyectos estado semana tema temas
""".split())

_NON_WORD_RE = re.compile(r'[^\w\s]|_')
_WHITESPACE_RE = re.compile(r'\s+')

# Visually distinct dash characters found in reports pasted from Word/Outlook
_DASHES = '‐‑‒–—―−﹘﹣－'
_DASH_TABLE = str.maketrans({ch: '-' for ch in _DASHES})


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(' ', text).strip()


def normalize_dashes(text: str) -> str:
    """Map every dash-like character to an ASCII hyphen."""
    return (text or "").translate(_DASH_TABLE)


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize('NFKD', text or "")
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str) -> str:
    """
    Canonical form used for keys and comparison.

    Lower-cases, replaces every character that is not a letter, digit or
    whitespace with a space, collapses whitespace and trims.
    """
    if not text:
        return ""
    lowered = text.lower()
    lowered = _NON_WORD_RE.sub(' ', lowered)
    return collapse_whitespace(lowered)


def fold(text: str) -> str:
    """normalize() with diacritics removed ("Área" and "area" fold alike)."""
    return normalize(strip_accents(text))


def ordered_tokens(text: str) -> List[str]:
    """Significant tokens of text, deduplicated in first-appearance order."""
    seen = {}
    for token in fold(text).split():
        if len(token) < MIN_TOKEN_LENGTH or token in STOPWORDS:
            continue
        seen.setdefault(token, None)
    return list(seen)


def tokenize(text: str) -> Set[str]:
    """Token set of text for similarity comparison."""
    return set(ordered_tokens(text))


def jaccard_sets(a: Set[str], b: Set[str]) -> float:
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def jaccard(a_text: str, b_text: str) -> float:
    """
    Intersection-over-union of the token sets of two texts.

    Two texts without any significant token are treated as identical (1.0);
    when only one of them is empty the result is 0.0.
    """
    return jaccard_sets(tokenize(a_text), tokenize(b_text))


@dataclass(frozen=True)
class TokenDelta:
    """Tokens gained and lost between two revisions of a text."""
    added: Tuple[str, ...]
    removed: Tuple[str, ...]
    ratio: float


def token_delta(previous: str, current: str, limit: int = 10) -> TokenDelta:
    """
    Compare the token sets of two texts.

    ratio is (|added| + |removed|) / |union|, computed over the full sets;
    the reported token lists are capped at `limit` each.
    """
    prev_tokens = ordered_tokens(previous)
    cur_tokens = ordered_tokens(current)
    prev_set = set(prev_tokens)
    cur_set = set(cur_tokens)

    added = [t for t in cur_tokens if t not in prev_set]
    removed = [t for t in prev_tokens if t not in cur_set]
    union = len(prev_set | cur_set)
    ratio = (len(added) + len(removed)) / union if union else 0.0

    return TokenDelta(
        added=tuple(added[:limit]),
        removed=tuple(removed[:limit]),
        ratio=ratio
    )
