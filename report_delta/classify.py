"""
Rule-based classification of matched and unmatched units.

RULES is evaluated in order and the first rule whose predicate holds decides
the tag, severity and note. Every predicate and outcome is a pure function
of (previous, current, context) so each rule can be tested on its own.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .config import BODY_SIMILARITY_THRESHOLD, TOKEN_CHANGE_THRESHOLD, CompareOptions
from .models import Severity, Tag, Unit, Verdict
from .text import jaccard, token_delta

CONFIRMATION_RE = re.compile(
    r'\b(?:confirmad[oa]s?|se\s+confirma|arranca|arrancan|nuestro\s+tl\s+ser[aá]'
    r'|liderar[aá]|movimiento\s+de\s+tl|firmad[oa]s?|adjudicad[oa]s?)\b',
    re.IGNORECASE
)

PERCENT_RE = re.compile(r'(?<!\d)(\d{1,3})\s*%')
AMOUNT_RE = re.compile(
    r'(?<![\w.,])((?:\d{1,3}(?:[.,]\d{3})+|\d+)(?:[.,]\d+)?)\s*'
    r'(k€|m€|€|euros\b|eur\b|k\b|usd\b|\$)',
    re.IGNORECASE
)

EMPTY_SET = "—"
TOKEN_LIMIT = 10

NOTE_NEW = "Aparece por primera vez en el informe actual."
NOTE_NEW_RISK = "Aparece marcado como [RIESGO] en la semana actual."
NOTE_NO_CHANGE_LIFTED = "Pasa de 'Sin novedad' a incluir acciones/seguimiento."
NOTE_CONFIRMATION = "Se concreta información que antes era preliminar."
NOTE_CONTENT_CHANGED = "Contenido actualizado respecto a la semana anterior."
NOTE_UNCHANGED = "Sin cambios relevantes detectados."


@dataclass(frozen=True)
class ClassifierContext:
    """Classifier switches and thresholds taken from CompareOptions."""
    numeric_deltas: bool = True
    body_similarity_threshold: float = BODY_SIMILARITY_THRESHOLD
    token_change_threshold: float = TOKEN_CHANGE_THRESHOLD

    @classmethod
    def from_options(cls, options: CompareOptions) -> "ClassifierContext":
        return cls(
            numeric_deltas=options.numeric_deltas,
            body_similarity_threshold=options.body_similarity_threshold,
            token_change_threshold=options.token_change_threshold
        )


Predicate = Callable[[Optional[Unit], Unit, ClassifierContext], bool]
Outcome = Callable[[Optional[Unit], Unit, ClassifierContext], Verdict]


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: Predicate
    outcome: Outcome


# ---------------------------------------------------------------------------
# Numeric comparison
# ---------------------------------------------------------------------------

def _amount_value(token: str) -> float:
    """Numeric value of a canonical amount, for ordering only."""
    match = re.match(r'[\d.,]+', token)
    digits = match.group(0) if match else "0"
    if '.' in digits and ',' in digits:
        decimal = '.' if digits.rfind('.') > digits.rfind(',') else ','
        thousands = ',' if decimal == '.' else '.'
        digits = digits.replace(thousands, '').replace(decimal, '.')
    elif re.fullmatch(r'\d{1,3}(?:[.,]\d{3})+', digits):
        digits = re.sub(r'[.,]', '', digits)
    else:
        digits = digits.replace(',', '.')
    try:
        value = float(digits)
    except ValueError:
        value = 0.0
    suffix = token[len(match.group(0)):] if match else ""
    if suffix.startswith('k'):
        value *= 1_000
    elif suffix.startswith('m'):
        value *= 1_000_000
    return value


def extract_percentages(text: str) -> List[str]:
    found = {f"{m.group(1)}%" for m in PERCENT_RE.finditer(text or "")}
    return sorted(found, key=lambda t: (int(t[:-1]), t))


def extract_amounts(text: str) -> List[str]:
    found = {f"{m.group(1)}{m.group(2).lower()}" for m in AMOUNT_RE.finditer(text or "")}
    return sorted(found, key=lambda t: (_amount_value(t), t))


def _format_values(values: List[str]) -> str:
    return ", ".join(values) if values else EMPTY_SET


def numeric_changes(previous_text: str, current_text: str) -> List[str]:
    """
    One message per numeric dimension whose values differ.

    Values are deduplicated and sorted ascending before comparing, so only
    a change in the set of figures is reported.
    """
    messages = []
    dimensions = (
        ("Porcentajes", extract_percentages),
        ("Importes", extract_amounts),
    )
    for label, extract in dimensions:
        before = extract(previous_text)
        after = extract(current_text)
        if before != after:
            messages.append(f"{label}: {_format_values(before)} → {_format_values(after)}")
    return messages


def has_confirmations(text: str) -> bool:
    return bool(CONFIRMATION_RE.search(text or ""))


def describe_token_delta(previous_text: str, current_text: str, threshold: float) -> str:
    """Added/removed words when the token churn reaches the threshold."""
    delta = token_delta(previous_text, current_text, TOKEN_LIMIT)
    if delta.ratio < threshold:
        return ""
    parts = []
    if delta.added:
        parts.append("Añade: " + ", ".join(delta.added) + ".")
    if delta.removed:
        parts.append("Elimina: " + ", ".join(delta.removed) + ".")
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _risk_severity(high: Severity, low: Severity) -> Callable[[Unit], Severity]:
    return lambda unit: high if unit.has_risk else low


_escalated = _risk_severity(Severity.HIGH, Severity.MEDIUM)
_content = _risk_severity(Severity.MEDIUM, Severity.LOW)


def _is_new(prev, cur, ctx):
    return prev is None


def _new(prev, cur, ctx):
    return Verdict(Tag.NEW, Severity.MEDIUM, NOTE_NEW)


def _is_new_risk(prev, cur, ctx):
    return not prev.has_risk and cur.has_risk


def _new_risk(prev, cur, ctx):
    return Verdict(Tag.NEW_RISK, Severity.HIGH, NOTE_NEW_RISK)


def _is_no_change_lifted(prev, cur, ctx):
    return prev.is_no_change and not cur.is_no_change


def _no_change_lifted(prev, cur, ctx):
    return Verdict(Tag.UPDATED, _escalated(cur), NOTE_NO_CHANGE_LIFTED)


def _is_confirmed(prev, cur, ctx):
    return has_confirmations(cur.body) and not has_confirmations(prev.body)


def _confirmed(prev, cur, ctx):
    return Verdict(Tag.UPDATED, _escalated(cur), NOTE_CONFIRMATION)


def _has_numeric_change(prev, cur, ctx):
    return ctx.numeric_deltas and bool(numeric_changes(prev.body, cur.body))


def _numeric_change(prev, cur, ctx):
    note = "Cambios en cifras. " + ". ".join(numeric_changes(prev.body, cur.body)) + "."
    return Verdict(Tag.UPDATED, _escalated(cur), note)


def _is_content_changed(prev, cur, ctx):
    return jaccard(prev.body, cur.body) < ctx.body_similarity_threshold


def _content_changed(prev, cur, ctx):
    detail = describe_token_delta(prev.body, cur.body, ctx.token_change_threshold)
    note = f"{NOTE_CONTENT_CHANGED} {detail}" if detail else NOTE_CONTENT_CHANGED
    return Verdict(Tag.UPDATED, _content(cur), note)


def _always(prev, cur, ctx):
    return True


def _unchanged(prev, cur, ctx):
    return Verdict(Tag.NO_CHANGE, Severity.LOW, NOTE_UNCHANGED)


RULES: Tuple[Rule, ...] = (
    Rule("new", _is_new, _new),
    Rule("new_risk", _is_new_risk, _new_risk),
    Rule("no_change_lifted", _is_no_change_lifted, _no_change_lifted),
    Rule("confirmation", _is_confirmed, _confirmed),
    Rule("numeric_delta", _has_numeric_change, _numeric_change),
    Rule("content_changed", _is_content_changed, _content_changed),
    Rule("unchanged", _always, _unchanged),
)


def matching_rule(
    previous: Optional[Unit],
    current: Unit,
    context: ClassifierContext = ClassifierContext()
) -> Rule:
    """First rule of RULES whose predicate holds."""
    for rule in RULES:
        if rule.predicate(previous, current, context):
            return rule
    raise AssertionError("the last rule always applies")


def classify(
    previous: Optional[Unit],
    current: Unit,
    context: ClassifierContext = ClassifierContext()
) -> Verdict:
    """Tag, severity and note for a current unit and its baseline counterpart."""
    rule = matching_rule(previous, current, context)
    return rule.outcome(previous, current, context)


def classify_removed(unit: Unit) -> Verdict:
    """Verdict for a baseline unit absent from the current report."""
    return Verdict(
        Tag.REMOVED,
        Severity.MEDIUM,
        f"«{unit.title}» deja de aparecer en el informe actual."
    )
