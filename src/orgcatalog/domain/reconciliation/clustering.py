"""Cluster building for one reconciliation batch.

Responsibilities of this stage:
- link records sharing any identity key (``exact``)
- link records whose names score at or above the threshold (``fuzzy``)
- close links transitively with a union-find over record positions
- report the strongest link method observed per cluster

Exact links come from a direct key -> positions index and never depend on
blocking. Fuzzy scoring only compares records that share a blocking token, and
may run on a thread pool; unions are always applied by the calling thread in
sorted pair order.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import combinations
from typing import TYPE_CHECKING, Final, Protocol

from orgcatalog.domain.model import MergeMethod

from .contracts import Cluster, PartitionInvariantError
from .keys import identity_keys
from .similarity import comparable_names, names_similarity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from orgcatalog.domain.model import CandidateRecord

    from .contracts import IdentityKey
    from .similarity import ComparableNames


type Pair = tuple[int, int]

log = logging.getLogger(__name__)

# Below this many pairs the pool start-up costs more than it saves.
_PARALLEL_MIN_PAIRS: Final[int] = 256


class UnionFind:
    """Disjoint sets over ``0..size-1`` as a parent-pointer array."""

    __slots__ = ("_parent", "_size")

    def __init__(self, size: int) -> None:
        self._parent = list(range(size))
        self._size = [1] * size

    def __len__(self) -> int:
        return len(self._parent)

    def find(self, index: int) -> int:
        root = index
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[index] != root:
            self._parent[index], index = root, self._parent[index]
        return root

    def union(self, left: int, right: int) -> bool:
        """Merge the sets of ``left`` and ``right``; return whether they were disjoint."""

        left_root = self.find(left)
        right_root = self.find(right)
        if left_root == right_root:
            return False
        if self._size[left_root] < self._size[right_root]:
            left_root, right_root = right_root, left_root
        self._parent[right_root] = left_root
        self._size[left_root] += self._size[right_root]
        return True

    def connected(self, left: int, right: int) -> bool:
        return self.find(left) == self.find(right)

    def groups(self) -> list[list[int]]:
        """Sets as ascending position lists, ordered by their first position."""

        by_root: dict[int, list[int]] = {}
        for index in range(len(self._parent)):
            by_root.setdefault(self.find(index), []).append(index)
        return sorted(by_root.values(), key=lambda group: group[0])


class BuildClusters(Protocol):
    """Partition candidate records into clusters."""

    def __call__(
        self,
        records: Sequence[CandidateRecord],
        *,
        threshold: float,
        max_workers: int | None = None,
    ) -> tuple[Cluster, ...]: ...


@dataclass(slots=True)
class _LinkCounts:
    exact: int = 0
    fuzzy: int = 0


def build_clusters(
    records: Sequence[CandidateRecord],
    *,
    threshold: float,
    max_workers: int | None = None,
) -> tuple[Cluster, ...]:
    """Group ``records`` into clusters using exact keys and name similarity."""

    union_find = UnionFind(len(records))
    keys = [identity_keys(record) for record in records]
    key_sets = [frozenset(record_keys) for record_keys in keys]

    exact_pairs = _exact_pairs(keys)
    for left, right in exact_pairs:
        union_find.union(left, right)

    names = [comparable_names(record) for record in records]
    candidate_pairs = [
        pair
        for pair in _blocked_pairs(names)
        if key_sets[pair[0]].isdisjoint(key_sets[pair[1]])
    ]
    scores = _score_pairs(candidate_pairs, names=names, max_workers=max_workers)

    fuzzy_pairs: list[Pair] = []
    for (left, right), score in zip(candidate_pairs, scores, strict=True):
        if score < threshold:
            continue
        fuzzy_pairs.append((left, right))
        union_find.union(left, right)
        log.debug(
            "Fuzzy link %s <-> %s (score=%.3f): %r / %r",
            records[left].record_id,
            records[right].record_id,
            score,
            records[left].name,
            records[right].name,
        )

    clusters = _clusters_from(
        records,
        union_find=union_find,
        exact_pairs=exact_pairs,
        fuzzy_pairs=fuzzy_pairs,
    )
    log.debug(
        "Built %s clusters from %s records: exact_links=%s, fuzzy_links=%s, scored_pairs=%s",
        len(clusters),
        len(records),
        len(exact_pairs),
        len(fuzzy_pairs),
        len(candidate_pairs),
    )
    return clusters


def blocking_tokens(names: ComparableNames) -> frozenset[str]:
    """First token of the primary name and of every alias."""

    return frozenset(name.split(" ", 1)[0] for name in names if name)


def assert_partition(
    records: Sequence[CandidateRecord],
    clusters: Sequence[Cluster],
) -> None:
    """Raise ``PartitionInvariantError`` unless every record is in exactly one cluster."""

    seen: Counter[int] = Counter()
    for cluster in clusters:
        seen.update(cluster.positions)
    in_range = range(len(records))
    duplicated = tuple(
        records[position].record_id if position in in_range else f"#{position}"
        for position, count in sorted(seen.items())
        if count > 1 or position not in in_range
    )
    missing = tuple(
        record.record_id for position, record in enumerate(records) if position not in seen
    )
    if duplicated or missing:
        raise PartitionInvariantError(duplicated=duplicated, missing=missing)
    for cluster in clusters:
        for position, member in zip(cluster.positions, cluster.members, strict=True):
            if records[position] is not member:
                raise PartitionInvariantError(duplicated=(member.record_id,))


def _exact_pairs(keys: Sequence[tuple[IdentityKey, ...]]) -> list[Pair]:
    """Link each record to the first record carrying the same key."""

    first_by_key: dict[IdentityKey, int] = {}
    pairs: set[Pair] = set()
    for position, record_keys in enumerate(keys):
        for key in record_keys:
            first = first_by_key.setdefault(key, position)
            if first != position:
                pairs.add((first, position))
    return sorted(pairs)


def _blocked_pairs(names: Sequence[ComparableNames]) -> list[Pair]:
    buckets: defaultdict[str, list[int]] = defaultdict(list)
    for position, record_names in enumerate(names):
        for token in sorted(blocking_tokens(record_names)):
            buckets[token].append(position)
    pairs: set[Pair] = set()
    for positions in buckets.values():
        pairs.update(combinations(positions, 2))
    return sorted(pairs)


def _score_pairs(
    pairs: Sequence[Pair],
    *,
    names: Sequence[ComparableNames],
    max_workers: int | None,
) -> list[float]:
    def score(pair: Pair) -> float:
        return names_similarity(names[pair[0]], names[pair[1]])

    if max_workers is None or max_workers <= 1 or len(pairs) < _PARALLEL_MIN_PAIRS:
        return [score(pair) for pair in pairs]
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="similarity") as pool:
        return list(pool.map(score, pairs))


def _clusters_from(
    records: Sequence[CandidateRecord],
    *,
    union_find: UnionFind,
    exact_pairs: Sequence[Pair],
    fuzzy_pairs: Sequence[Pair],
) -> tuple[Cluster, ...]:
    links: defaultdict[int, _LinkCounts] = defaultdict(_LinkCounts)
    for left, _right in exact_pairs:
        links[union_find.find(left)].exact += 1
    for left, _right in fuzzy_pairs:
        links[union_find.find(left)].fuzzy += 1

    clusters: list[Cluster] = []
    for group in union_find.groups():
        counts = links.get(union_find.find(group[0]), _LinkCounts())
        clusters.append(
            Cluster(
                members=tuple(records[position] for position in group),
                positions=tuple(group),
                merge_method=_merge_method(counts),
                exact_links=counts.exact,
                fuzzy_links=counts.fuzzy,
            )
        )
    return tuple(clusters)


def _merge_method(counts: _LinkCounts) -> MergeMethod | None:
    if counts.exact:
        return MergeMethod.EXACT
    if counts.fuzzy:
        return MergeMethod.FUZZY
    return None
