from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from orgcatalog.domain.model import MergeMethod, Source
from orgcatalog.domain.reconciliation import (
    Cluster,
    PartitionInvariantError,
    UnionFind,
    assert_partition,
    build_clusters,
)
from orgcatalog.domain.reconciliation.clustering import blocking_tokens
from tests.helpers.records import make_record

if TYPE_CHECKING:
    from orgcatalog.domain.model import CandidateRecord


def _record_id_groups(clusters: tuple[Cluster, ...]) -> list[list[str]]:
    return [list(cluster.record_ids) for cluster in clusters]


def test_union_find_groups_transitively() -> None:
    union_find = UnionFind(5)

    assert union_find.union(0, 1) is True
    assert union_find.union(3, 4) is True
    assert union_find.union(1, 4) is True
    assert union_find.union(0, 3) is False

    assert union_find.connected(0, 4)
    assert not union_find.connected(0, 2)
    assert union_find.groups() == [[0, 1, 3, 4], [2]]
    assert len(union_find) == 5


def test_union_find_singletons_without_unions() -> None:
    assert UnionFind(3).groups() == [[0], [1], [2]]


def test_exact_name_match_clusters_records() -> None:
    records = [
        make_record("Met Office", record_id="a", source=Source.GOV_UK_API),
        make_record("MET OFFICE.", record_id="b", source=Source.ONS_INSTITUTIONAL),
    ]

    clusters = build_clusters(records, threshold=0.8)

    assert _record_id_groups(clusters) == [["a", "b"]]
    assert clusters[0].merge_method is MergeMethod.EXACT
    assert clusters[0].exact_links == 1
    assert clusters[0].fuzzy_links == 0


def test_shared_identifier_bypasses_blocking() -> None:
    # No shared first token and no name similarity: only the identifier links them.
    records = [
        make_record("Alpha Trust", record_id="a", identifiers={"ons_code": "X1"}),
        make_record("Zeta Body", record_id="b", identifiers={"ons_code": "X1"}),
    ]

    clusters = build_clusters(records, threshold=0.8)

    assert _record_id_groups(clusters) == [["a", "b"]]
    assert clusters[0].merge_method is MergeMethod.EXACT


def test_identifier_values_are_scoped_by_scheme() -> None:
    records = [
        make_record("Alpha School", record_id="a", identifiers={"gias_urn": "001"}),
        make_record("Zeta College", record_id="b", identifiers={"ukprn": "001"}),
    ]

    clusters = build_clusters(records, threshold=0.8)

    assert _record_id_groups(clusters) == [["a"], ["b"]]
    assert all(cluster.merge_method is None for cluster in clusters)


def test_fuzzy_match_links_token_subset_names() -> None:
    records = [
        make_record("Department of Health", record_id="a"),
        make_record("Department of Health and Social Care", record_id="b"),
    ]

    clusters = build_clusters(records, threshold=0.8)

    assert _record_id_groups(clusters) == [["a", "b"]]
    assert clusters[0].merge_method is MergeMethod.FUZZY
    assert clusters[0].fuzzy_links == 1


def test_below_threshold_names_stay_separate() -> None:
    records = [
        make_record("Dept of Health", record_id="a"),
        make_record("Department of Health & Social Care", record_id="b"),
    ]

    clusters = build_clusters(records, threshold=0.8)

    assert _record_id_groups(clusters) == [["a"], ["b"]]


def test_threshold_zero_still_requires_shared_blocking_token() -> None:
    records = [
        make_record("Alpha Trust", record_id="a"),
        make_record("Zeta Body", record_id="b"),
    ]

    clusters = build_clusters(records, threshold=0.0)

    assert _record_id_groups(clusters) == [["a"], ["b"]]


def test_alias_blocking_token_enables_fuzzy_comparison() -> None:
    records = [
        make_record("DHSC", record_id="a"),
        make_record(
            "Department of Health and Social Care",
            record_id="b",
            alternative_names=("DHSC",),
        ),
    ]

    clusters = build_clusters(records, threshold=0.8)

    assert _record_id_groups(clusters) == [["a", "b"]]
    assert clusters[0].merge_method is MergeMethod.FUZZY


def test_clusters_are_transitive() -> None:
    # a~b by identifier, b~c by name; a and c share nothing directly.
    records = [
        make_record("Alpha Trust", record_id="a", identifiers={"ons_code": "X1"}),
        make_record("Zeta Body", record_id="b", identifiers={"ons_code": "X1"}),
        make_record("Zeta Body.", record_id="c"),
        make_record("Unrelated Council", record_id="d"),
    ]

    clusters = build_clusters(records, threshold=0.8)

    assert _record_id_groups(clusters) == [["a", "b", "c"], ["d"]]
    assert clusters[0].exact_links == 2


def test_clusters_ordered_by_first_member_position() -> None:
    records = [
        make_record("Zeta Body", record_id="z1"),
        make_record("Alpha Trust", record_id="a1"),
        make_record("Zeta Body", record_id="z2"),
    ]

    clusters = build_clusters(records, threshold=0.8)

    assert _record_id_groups(clusters) == [["z1", "z2"], ["a1"]]
    assert clusters[0].positions == (0, 2)


def test_parallel_scoring_matches_serial_scoring() -> None:
    records: list[CandidateRecord] = []
    for index in range(40):
        records.append(make_record(f"Borough Council {index}", record_id=f"c{index}"))
        records.append(make_record(f"Borough Council {index} Services", record_id=f"s{index}"))

    serial = build_clusters(records, threshold=0.99)
    parallel = build_clusters(records, threshold=0.99, max_workers=4)

    assert len(serial) == 40
    assert _record_id_groups(serial) == _record_id_groups(parallel)
    assert [c.merge_method for c in serial] == [c.merge_method for c in parallel]


def test_build_clusters_on_empty_input() -> None:
    assert build_clusters([], threshold=0.8) == ()


def test_blocking_tokens_use_first_token_of_every_name() -> None:
    assert blocking_tokens(("department of health", "dhsc")) == frozenset({"department", "dhsc"})


def test_assert_partition_accepts_true_partition() -> None:
    records = [make_record("Alpha", record_id="a"), make_record("Beta", record_id="b")]

    assert_partition(records, build_clusters(records, threshold=0.8))


def test_assert_partition_rejects_missing_record() -> None:
    records = [make_record("Alpha", record_id="a"), make_record("Beta", record_id="b")]
    clusters = (Cluster(members=(records[0],), positions=(0,)),)

    with pytest.raises(PartitionInvariantError) as excinfo:
        assert_partition(records, clusters)

    assert excinfo.value.missing == ("b",)


def test_assert_partition_rejects_overlap() -> None:
    records = [make_record("Alpha", record_id="a"), make_record("Beta", record_id="b")]
    clusters = (
        Cluster(members=(records[0], records[1]), positions=(0, 1)),
        Cluster(members=(records[1],), positions=(1,)),
    )

    with pytest.raises(PartitionInvariantError) as excinfo:
        assert_partition(records, clusters)

    assert excinfo.value.duplicated == ("b",)
