"""Secret Santa allocation engine.

Pairs every participant with exactly one other participant to buy a gift
for. A batch of random permutations is tried first; when exclusions make
that unlikely to succeed, a backtracking search settles the question.
"""

from __future__ import annotations

import random
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

# Random permutations tried before falling back to the exhaustive search.
MAX_TRIALS = 1000


def exclusions_from_pairs(pairs: Iterable[Tuple[str, str]]) -> Dict[str, Set[str]]:
    """Turn unordered forbidden pairs into a giver -> excluded mapping.

    ("Alice", "Bob") blocks Alice->Bob and Bob->Alice.
    """
    exclusions: Dict[str, Set[str]] = {}
    for a, b in pairs:
        exclusions.setdefault(a, set()).add(b)
        exclusions.setdefault(b, set()).add(a)
    return exclusions


def _excluded_sets(
    participants: Sequence[str], exclusions: Optional[Mapping[str, Iterable[str]]]
) -> Dict[str, Set[str]]:
    exclusions = exclusions or {}
    return {giver: set(exclusions.get(giver, ())) for giver in participants}


def _try_permutation(
    participants: Sequence[str],
    excluded: Mapping[str, Set[str]],
    rng: random.Random,
) -> Optional[Dict[str, str]]:
    receivers = list(participants)
    rng.shuffle(receivers)

    for giver, receiver in zip(participants, receivers):
        if giver == receiver or receiver in excluded[giver]:
            return None

    return dict(zip(participants, receivers))


def _search(
    participants: Sequence[str],
    excluded: Mapping[str, Set[str]],
    rng: random.Random,
) -> Optional[Dict[str, str]]:
    assignment: Dict[str, str] = {}
    used: Set[str] = set()

    def backtrack(index: int) -> bool:
        if index == len(participants):
            return True

        giver = participants[index]
        candidates: List[str] = [
            r
            for r in participants
            if r != giver and r not in used and r not in excluded[giver]
        ]
        rng.shuffle(candidates)

        for receiver in candidates:
            assignment[giver] = receiver
            used.add(receiver)
            if backtrack(index + 1):
                return True

            used.discard(receiver)
            del assignment[giver]

        return False

    if not backtrack(0):
        return None
    return {giver: assignment[giver] for giver in participants}


def allocate(
    participants: Sequence[str],
    exclusions: Optional[Mapping[str, Iterable[str]]] = None,
    rng: Optional[random.Random] = None,
) -> Optional[Dict[str, str]]:
    """Assign each participant a receiver other than themselves.

    ``exclusions`` maps a giver to the names they must not receive; givers
    without an entry have no exclusions. ``rng`` drives every random choice,
    so passing a seeded ``random.Random`` makes the outcome reproducible.

    Returns a giver -> receiver mapping in the order of ``participants``,
    or ``None`` when no assignment satisfies the exclusions (or there are
    fewer than two participants).
    """
    participants = list(participants)
    if len(participants) < 2:
        return None

    if rng is None:
        rng = random.Random()
    excluded = _excluded_sets(participants, exclusions)

    for _ in range(MAX_TRIALS):
        assignment = _try_permutation(participants, excluded, rng)
        if assignment is not None:
            return assignment

    return _search(participants, excluded, rng)
