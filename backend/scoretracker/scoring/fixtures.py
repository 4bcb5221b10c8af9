"""Round-robin fixture generation for points-table seasons.

Circle method: the first entrant stays put while the rest rotate one slot per
round. An odd field gets a bye slot; pairings against the bye are skipped.
Every other full cycle swaps home and away.
"""

from typing import List, NamedTuple, Optional, Sequence


class FixturePairing(NamedTuple):
    round: int
    home_id: str
    away_id: str


def generate_round_robin(entrant_ids: Sequence[str], cycles: int) -> List[FixturePairing]:
    """Return pairings for ``cycles`` complete round robins, rounds numbered from 1."""
    if cycles <= 0 or len(entrant_ids) < 2:
        return []

    slots: List[Optional[str]] = list(entrant_ids)
    if len(slots) % 2:
        slots.append(None)

    total = len(slots)
    rounds_per_cycle = total - 1
    pairings: List[FixturePairing] = []

    for cycle in range(cycles):
        rotation = list(slots)
        for round_index in range(rounds_per_cycle):
            round_number = cycle * rounds_per_cycle + round_index + 1
            for i in range(total // 2):
                first, second = rotation[i], rotation[total - 1 - i]
                if first is None or second is None:
                    continue
                if cycle % 2:
                    first, second = second, first
                pairings.append(FixturePairing(round_number, first, second))
            rotation = [rotation[0], rotation[-1], *rotation[1:-1]]

    return pairings
