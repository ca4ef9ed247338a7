from __future__ import annotations

from ecsmapper.processing.paths import (
    classify_json,
    extract_field_paths,
    get_by_path,
    iter_field_paths,
    union_field_paths,
)
from ecsmapper.typing.models import JsonAbsent, JsonContainer, JsonScalar


def test_extract_includes_containers_and_leaves() -> None:
    assert extract_field_paths({"a": {"b": 1}, "c": 2}) == {"a", "a.b", "c"}


def test_extract_stops_below_max_depth() -> None:
    document = {"l0": {"l1": {"l2": {"l3": {"l4": 1}}}}}

    paths = extract_field_paths(document, max_depth=2)

    assert paths == {"l0", "l0.l1", "l0.l1.l2"}


def test_extract_depth_zero_keeps_top_level_only() -> None:
    assert extract_field_paths({"a": {"b": 1}, "c": None}, max_depth=0) == {"a", "c"}


def test_extract_indexes_nested_arrays() -> None:
    paths = extract_field_paths({"tags": ["x", "y"], "rules": [{"id": 1}]})

    assert paths == {"tags", "tags.0", "tags.1", "rules", "rules.0", "rules.0.id"}


def test_extract_non_container_is_empty() -> None:
    assert extract_field_paths("text") == set()
    assert extract_field_paths(None) == set()
    assert extract_field_paths(42) == set()


def test_null_values_are_leaves() -> None:
    assert extract_field_paths({"user": None}) == {"user"}


def test_iter_field_paths_yields_container_before_children() -> None:
    assert list(iter_field_paths({"net": {"src": "a", "dst": "b"}, "action": "allow"})) == [
        "net",
        "net.src",
        "net.dst",
        "action",
    ]


def test_union_field_paths_keeps_first_seen_order() -> None:
    documents = [{"a": 1, "b": 2}, {"b": 3, "c": {"d": 4}}]

    assert union_field_paths(documents) == ["a", "b", "c", "c.d"]


def test_classify_json() -> None:
    assert classify_json(None) == JsonAbsent()
    assert classify_json(False) == JsonScalar(value=False)
    assert classify_json({"k": 1}) == JsonContainer(children=(("k", 1),))
    assert classify_json(["v"]) == JsonContainer(children=(("0", "v"),))


def test_get_by_path_resolves_objects_and_arrays() -> None:
    document = {"a": {"b": [10, {"c": "deep"}]}}

    assert get_by_path(document, "a.b.1.c") == JsonScalar(value="deep")
    assert get_by_path(document, "a.b.0") == JsonScalar(value=10)
    assert isinstance(get_by_path(document, "a"), JsonContainer)


def test_get_by_path_missing_segment_is_absent() -> None:
    document = {"a": {"b": [10]}}

    assert get_by_path(document, "a.x") == JsonAbsent()
    assert get_by_path(document, "a.b.5") == JsonAbsent()
    assert get_by_path(document, "a.b.0.c") == JsonAbsent()
