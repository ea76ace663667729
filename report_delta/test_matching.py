import pytest

from report_delta.errors import InputError
from report_delta.matching import (
    CLIENT_BONUS,
    composite_score,
    match_by_key,
    match_units,
    same_client,
)

CURRENT_TITLES = [
    "Acme - renovación contrato marco",
    "Globex - migración plataforma logística",
    "Initech - auditoría seguridad sistemas",
]

BASELINE_TITLES = [
    "Initech - auditoría seguridad",
    "Acme - renovación contrato marco",
    "Globex - migración plataforma almacenes",
]


@pytest.fixture
def current(make_unit):
    return [make_unit(t) for t in CURRENT_TITLES]


@pytest.fixture
def baseline(make_unit):
    return [make_unit(t) for t in BASELINE_TITLES]


def test_composite_score_with_client_bonus(make_unit):
    a = make_unit("Acme - alpha beta")
    b = make_unit("Acme - gamma delta")
    # title and signature share only "acme": 1/5 each
    assert composite_score(a, b) == pytest.approx(0.2 + CLIENT_BONUS)


def test_client_bonus_needs_both_labels(make_unit):
    a = make_unit("Acme - alpha beta")
    b = make_unit("Acme - alpha beta", client="")
    assert not same_client(a, b)
    assert same_client(a, make_unit("ACME - otro asunto"))


def test_identical_units_score_above_one(make_unit):
    unit = make_unit("Acme - renovación contrato marco")
    assert composite_score(unit, unit) == pytest.approx(1.0 + CLIENT_BONUS)


def test_match_units_pairs_by_best_score(current, baseline):
    match = match_units(current, baseline, 0.55)

    assert match.as_tuples() == [(0, 1), (1, 2), (2, 0)]
    assert match.baseline_for(0) == 1
    assert 2 in match
    assert match.unmatched_baseline(baseline) == []


def test_match_is_injective(make_unit):
    base = [make_unit("Acme - renovación contrato marco")]
    cur = [make_unit("Acme - renovación contrato marco"), make_unit("Acme - renovación contrato marco")]

    match = match_units(cur, base, 0.55)

    # the first current unit takes the baseline unit, the second is left unmatched
    assert match.as_tuples() == [(0, 0)]
    assert 1 not in match
    baselines = [p.baseline_index for p in match]
    assert len(baselines) == len(set(baselines))


def test_unmatched_below_threshold(current, make_unit):
    base = [make_unit("Hooli - formación nube")]
    match = match_units(current, base, 0.55)
    assert len(match) == 0
    assert match.unmatched_baseline(base) == [0]


def test_higher_threshold_never_matches_more(current, baseline):
    thresholds = [0.1, 0.3, 0.5, 0.7, 0.9, 1.0]
    matches = [set(match_units(current, baseline, t).as_tuples()) for t in thresholds]

    for looser, stricter in zip(matches, matches[1:]):
        assert stricter <= looser
    assert len(matches[0]) == 3


@pytest.mark.parametrize("threshold", [0, -0.2, 1.01])
def test_threshold_out_of_range(current, baseline, threshold):
    with pytest.raises(InputError):
        match_units(current, baseline, threshold)


def test_empty_inputs(current):
    assert len(match_units([], [], 0.55)) == 0
    assert len(match_units(current, [], 0.55)) == 0


def test_match_by_key(make_unit):
    base = [make_unit("Vertical Retail"), make_unit("Squad Datos"), make_unit("Vertical Retail")]
    cur = [make_unit("Vertical Retail"), make_unit("Otros varios"), make_unit("Vertical Retail")]

    match = match_by_key(cur, base)

    assert match.as_tuples() == [(0, 0), (2, 2)]
    assert match.unmatched_baseline(base) == [1]
    assert all(p.score == 1.0 for p in match)
