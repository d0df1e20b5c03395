"""Branch-level "cannot work together" rules."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Set

from smart_scheduler.domain.models import WorkerRestriction


def has_worker_restriction(
    worker1_id: str,
    worker2_id: str,
    branch_id: str,
    restrictions: Iterable[WorkerRestriction],
) -> bool:
    """Linear scan form of the restriction check; order of the pair does not matter."""
    pair = {worker1_id, worker2_id}
    return any(
        r.branch_id == branch_id and {r.worker1_id, r.worker2_id} == pair
        for r in restrictions
    )


class RestrictionIndex:
    """Symmetric pair index over a set of restrictions."""

    def __init__(self, restrictions: Iterable[WorkerRestriction] = ()):
        self._pairs: Dict[str, Set[FrozenSet[str]]] = defaultdict(set)
        for r in restrictions:
            self._pairs[r.branch_id].add(frozenset((r.worker1_id, r.worker2_id)))

    def conflicts(self, worker1_id: str, worker2_id: str, branch_id: str) -> bool:
        return frozenset((worker1_id, worker2_id)) in self._pairs.get(branch_id, ())

    def conflicts_with_any(self, worker_id: str, selected: Iterable[str], branch_id: str) -> str | None:
        """First already-selected worker that ``worker_id`` may not work with, if any."""
        for other in selected:
            if self.conflicts(worker_id, other, branch_id):
                return other
        return None

    def __len__(self) -> int:
        return sum(len(pairs) for pairs in self._pairs.values())
