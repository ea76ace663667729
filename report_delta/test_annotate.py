from report_delta.annotate import (
    HIGHLIGHTS_HEADER,
    annotation_text,
    build_annotations,
    clamp_anchor,
    select_highlights,
)
from report_delta.config import CompareOptions
from report_delta.models import DeltaItem, Severity, Tag


def _delta(title, tag, severity, anchor=0, note="nota"):
    return DeltaItem(key=title, title=title, tag=tag, severity=severity, note=note, anchor=anchor)


DELTAS = [
    _delta("Globex", Tag.NEW_RISK, Severity.HIGH, anchor=4, note="Aparece marcado como [RIESGO]."),
    _delta("Acme", Tag.UPDATED, Severity.MEDIUM, anchor=2, note="Cambios en cifras."),
    _delta("Initech", Tag.NO_CHANGE, Severity.LOW, anchor=6, note="Sin cambios relevantes detectados."),
]


def test_clamp_anchor():
    assert clamp_anchor(3, 10) == 3
    assert clamp_anchor(50, 10) == 9
    assert clamp_anchor(-3, 10) == 0
    assert clamp_anchor(5, 0) == 0


def test_annotation_text():
    assert annotation_text(DELTAS[1]) == "[ACTUALIZACIÓN] Cambios en cifras."


def test_annotations_skip_unchanged_and_lead_with_highlights():
    annotations = build_annotations(DELTAS, paragraph_count=10)

    assert [a.anchor_index for a in annotations] == [0, 4, 2]
    summary = annotations[0].text.split("\n")
    assert summary[0] == HIGHLIGHTS_HEADER
    assert summary[1] == "• [NUEVO RIESGO] Globex — Aparece marcado como [RIESGO]."
    assert annotations[1].text == "[NUEVO RIESGO] Aparece marcado como [RIESGO]."
    assert all(a.author == "Delta semanal" and a.initials == "DS" for a in annotations)


def test_annotations_include_everything_when_not_significant_only():
    options = CompareOptions(significant_only=False, include_highlights=False, author="Juana", initials="JU")
    annotations = build_annotations(DELTAS, paragraph_count=10, options=options)

    assert [a.anchor_index for a in annotations] == [4, 2, 6]
    assert annotations[2].text.startswith("[SIN CAMBIOS]")
    assert {a.author for a in annotations} == {"Juana"}


def test_annotation_anchors_are_clamped():
    annotations = build_annotations(DELTAS, paragraph_count=3, options=CompareOptions(include_highlights=False))
    assert [a.anchor_index for a in annotations] == [2, 2]


def test_no_highlight_annotation_without_high_severity():
    annotations = build_annotations(DELTAS[1:], paragraph_count=10)
    assert [a.text for a in annotations] == ["[ACTUALIZACIÓN] Cambios en cifras."]


def test_select_highlights():
    deltas = [
        _delta("a", Tag.NEW_RISK, Severity.HIGH),
        _delta("b", Tag.NO_CHANGE, Severity.HIGH),
        _delta("c", Tag.UPDATED, Severity.CRITICAL),
        _delta("d", Tag.UPDATED, Severity.MEDIUM),
        _delta("e", Tag.UPDATED, Severity.HIGH),
    ]
    assert [d.title for d in select_highlights(deltas)] == ["a", "c", "e"]
    assert [d.title for d in select_highlights(deltas, 2)] == ["a", "c"]
    assert select_highlights(deltas, 0) == []
