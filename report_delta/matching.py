"""
Pairing of current-report units with baseline units.

Items are paired greedily by title similarity; blocks are paired by their
content-derived key. Both produce an injective partial mapping.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from .errors import InputError
from .models import Unit
from .text import fold, jaccard

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 0.75
SIGNATURE_WEIGHT = 0.25
# Added when both units name the same client
CLIENT_BONUS = 0.08


@dataclass(frozen=True)
class MatchPair:
    current_index: int
    baseline_index: int
    score: float


@dataclass
class Match:
    """Committed pairs keyed by current unit index."""
    pairs: Dict[int, MatchPair] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.pairs)

    def __contains__(self, current_index: int) -> bool:
        return current_index in self.pairs

    def __iter__(self) -> Iterator[MatchPair]:
        return iter(self.pairs.values())

    def baseline_for(self, current_index: int) -> Optional[int]:
        pair = self.pairs.get(current_index)
        return pair.baseline_index if pair else None

    def matched_baseline_indices(self) -> List[int]:
        return sorted(p.baseline_index for p in self.pairs.values())

    def unmatched_baseline(self, baseline: Sequence[Unit]) -> List[int]:
        """Indices of baseline units no current unit was paired with."""
        used = set(self.matched_baseline_indices())
        return [i for i in range(len(baseline)) if i not in used]

    def as_tuples(self) -> List[tuple]:
        return sorted((p.current_index, p.baseline_index) for p in self.pairs.values())


def same_client(a: Unit, b: Unit) -> bool:
    if not a.client or not b.client:
        return False
    folded = fold(a.client)
    return bool(folded) and folded == fold(b.client)


def composite_score(current: Unit, baseline: Unit) -> float:
    """Title similarity blended with signature similarity, plus a client bonus."""
    score = (TITLE_WEIGHT * jaccard(current.title, baseline.title)
             + SIGNATURE_WEIGHT * jaccard(current.signature, baseline.signature))
    if same_client(current, baseline):
        score += CLIENT_BONUS
    return score


def match_units(
    current: Sequence[Unit],
    baseline: Sequence[Unit],
    threshold: float
) -> Match:
    """
    Greedy best-score assignment.

    Current units are visited in order; each takes the unused baseline unit
    with the strictly highest score (first one wins ties) when that score
    reaches the threshold. A committed baseline unit is never reconsidered.
    """
    if not 0.0 < threshold <= 1.0:
        raise InputError(f"Match threshold must be in (0, 1], got {threshold}")

    match = Match()
    used = set()

    for cur_idx, cur in enumerate(current):
        best_idx = None
        best_score = -1.0

        for base_idx, base in enumerate(baseline):
            if base_idx in used:
                continue
            score = composite_score(cur, base)
            if score > best_score:
                best_score = score
                best_idx = base_idx

        if best_idx is not None and best_score >= threshold:
            used.add(best_idx)
            match.pairs[cur_idx] = MatchPair(cur_idx, best_idx, best_score)
            logger.debug(f"Matched '{cur.title[:40]}' -> '{baseline[best_idx].title[:40]}' ({best_score:.2f})")

    logger.info(f"Matched {len(match)} of {len(current)} current units against {len(baseline)} baseline units")
    return match


def match_by_key(current: Sequence[Unit], baseline: Sequence[Unit]) -> Match:
    """Pair units whose keys are equal; the first unused baseline unit wins."""
    by_key: Dict[str, List[int]] = {}
    for base_idx, base in enumerate(baseline):
        by_key.setdefault(base.key, []).append(base_idx)

    match = Match()
    for cur_idx, cur in enumerate(current):
        candidates = by_key.get(cur.key)
        if candidates:
            match.pairs[cur_idx] = MatchPair(cur_idx, candidates.pop(0), 1.0)

    logger.info(f"Matched {len(match)} of {len(current)} current blocks by key")
    return match
