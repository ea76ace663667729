from report_delta.classify import ClassifierContext
from report_delta.config import CompareOptions
from report_delta.create_test_docs import (
    BASELINE_BLOCKS,
    BASELINE_ITEMS,
    CURRENT_BLOCKS,
    CURRENT_ITEMS,
)
from report_delta.delta import assemble, compare_units, removed_anchor, sort_deltas, summarize
from report_delta.matching import match_units
from report_delta.models import DeltaItem, Severity, Tag
from report_delta.segment import segment_blocks, segment_items

DESCRIPTION_A = ("Renovación del contrato marco con el área de compras, pendiente de la revisión "
                 "jurídica de las cláusulas de servicio.")
DESCRIPTION_B = ("Migración de la plataforma logística al nuevo almacén central, con pruebas "
                 "de integración previstas para el mes que viene.")
DESCRIPTION_C = ("Primera reunión para definir el alcance del piloto de analítica avanzada "
                 "sobre los datos de ventas del trimestre.")


def _delta(title, tag, severity):
    return DeltaItem(key=title, title=title, tag=tag, severity=severity, note="", anchor=0)


def test_sort_by_severity_then_title():
    deltas = [
        _delta("b", Tag.NO_CHANGE, Severity.LOW),
        _delta("c", Tag.NEW, Severity.MEDIUM),
        _delta("a", Tag.UPDATED, Severity.MEDIUM),
        _delta("z", Tag.NEW_RISK, Severity.HIGH),
    ]
    assert [d.title for d in sort_deltas(deltas)] == ["z", "a", "c", "b"]


def test_end_to_end_near_identical_and_new_item():
    baseline = segment_items([
        "Acme - Renovación de contrato marco", DESCRIPTION_A,
        "Globex - Migración de plataforma logística", DESCRIPTION_B,
    ])
    current = segment_items([
        "Acme - Renovación del contrato marco", DESCRIPTION_A,
        "Umbrella - Piloto de analítica avanzada", DESCRIPTION_C,
    ])

    deltas = compare_units(current, baseline, CompareOptions(include_removed=True))
    by_title = {d.title: d for d in deltas}

    assert by_title["Acme - Renovación del contrato marco"].tag in (Tag.NO_CHANGE, Tag.UPDATED)
    assert by_title["Umbrella - Piloto de analítica avanzada"].tag is Tag.NEW
    assert by_title["Globex - Migración de plataforma logística"].tag is Tag.REMOVED
    assert len(deltas) == 3


def test_removed_items_only_on_request():
    baseline = segment_items(BASELINE_ITEMS)
    current = segment_items(CURRENT_ITEMS)

    deltas = compare_units(current, baseline)

    assert len(deltas) == len(current)
    assert all(d.tag is not Tag.REMOVED for d in deltas)


def test_sample_reports():
    baseline = segment_items(BASELINE_ITEMS)
    current = segment_items(CURRENT_ITEMS)

    deltas = compare_units(current, baseline, CompareOptions(include_removed=True))

    assert [(d.title.split(" - ")[0], d.tag, d.severity) for d in deltas] == [
        ("Globex", Tag.NEW_RISK, Severity.HIGH),
        ("Acme Retail", Tag.UPDATED, Severity.MEDIUM),
        ("Hooli", Tag.REMOVED, Severity.MEDIUM),
        ("Umbrella", Tag.NEW, Severity.MEDIUM),
        ("Initech", Tag.NO_CHANGE, Severity.LOW),
    ]
    acme = deltas[1]
    assert acme.note == "Cambios en cifras. Porcentajes: 40% → 55%."
    assert acme.anchor == 2
    assert acme.previous.body != acme.current.body

    removed = deltas[2]
    assert removed.current is None
    assert removed.anchor == 0


def test_self_comparison_has_only_unchanged_items():
    units = segment_items(CURRENT_ITEMS)

    deltas = compare_units(units, units, CompareOptions(include_removed=True))

    assert len(deltas) == len(units)
    assert all(d.tag is Tag.NO_CHANGE for d in deltas)


def test_removed_anchor_follows_client(make_unit):
    current = [make_unit("Globex - Otro asunto", anchor=3), make_unit("Acme - Nuevo pedido", anchor=7)]

    assert removed_anchor(make_unit("ACME - Contrato marco"), current) == 7
    assert removed_anchor(make_unit("Hooli - Formación"), current) == 0
    assert removed_anchor(make_unit("Acme - Contrato", client=""), current) == 0


def test_assemble_with_explicit_match(make_unit):
    baseline = [make_unit("Acme - Contrato marco", body="Reunión inicial con compras")]
    current = [make_unit("Acme - Contrato marco", body="Reunión inicial con compras", anchor=4)]
    match = match_units(current, baseline, 0.55)

    deltas = assemble(current, baseline, match, ClassifierContext())

    assert len(deltas) == 1
    assert deltas[0].tag is Tag.NO_CHANGE
    assert deltas[0].anchor == 4
    assert deltas[0].previous is baseline[0]


def test_blocks_mode_matches_by_key():
    options = CompareOptions(segmentation="blocks", include_removed=True)
    deltas = compare_units(segment_blocks(CURRENT_BLOCKS), segment_blocks(BASELINE_BLOCKS), options)

    assert [(d.title, d.tag) for d in deltas] == [
        ("Vertical Retail", Tag.NEW_RISK),
        ("Otros varios", Tag.NEW),
        ("Seguimiento Cuenta Acme", Tag.UPDATED),
        ("Squad Datos", Tag.REMOVED),
    ]


def test_summarize():
    deltas = [
        _delta("a", Tag.NEW_RISK, Severity.HIGH),
        _delta("b", Tag.UPDATED, Severity.MEDIUM),
        _delta("c", Tag.NEW, Severity.MEDIUM),
        _delta("d", Tag.NO_CHANGE, Severity.LOW),
    ]
    summary = summarize(deltas)

    assert (summary.critical, summary.high, summary.medium, summary.low) == (0, 1, 2, 1)
    assert summary.count(Tag.NEW_RISK) == 1
    assert summary.count(Tag.REMOVED) == 0
    assert summary.total == 4
    assert summary.to_dict()["newRisk"] == 1
    assert summarize([]).total == 0
