"""Dot-notated field path extraction over decoded JSON documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ecsmapper.typing.models import JsonAbsent, JsonContainer, JsonNode, JsonScalar

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

DEFAULT_MAX_DEPTH = 2

_ABSENT = JsonAbsent()


def classify_json(value: object) -> JsonNode:
    """Wrap a decoded JSON value into the node union walked by the extractor.

    Args:
        value (object): Value produced by `json.loads`.

    Returns:
        JsonNode: Container for dicts and lists, absent for `None`, scalar otherwise.
    """
    if value is None:
        return _ABSENT
    if isinstance(value, dict):
        return JsonContainer(children=tuple((str(key), child) for key, child in value.items()))
    if isinstance(value, list):
        return JsonContainer(children=tuple((str(index), child) for index, child in enumerate(value)))
    if isinstance(value, str | int | float | bool):
        return JsonScalar(value=value)
    return _ABSENT


def iter_field_paths(
    value: object,
    *,
    prefix: str = "",
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Iterator[str]:
    """Yield field paths in depth-first order.

    Keys are visited at depths `0..max_depth`, so the default of 2 exposes paths of up
    to three segments. A container path is yielded before the paths of its children.
    Paths may repeat across sibling array entries; callers de-duplicate.

    Args:
        value (object): Decoded JSON value.
        prefix (str): Path of `value` inside the enclosing document.
        depth (int): Nesting level of `value`'s keys.
        max_depth (int): Deepest level whose keys are emitted.

    Yields:
        str: Dot-joined field path.
    """
    node = classify_json(value)
    if not isinstance(node, JsonContainer) or depth > max_depth:
        return

    for key, child in node.children:
        path = f"{prefix}.{key}" if prefix else key
        yield path
        if isinstance(classify_json(child), JsonContainer):
            yield from iter_field_paths(child, prefix=path, depth=depth + 1, max_depth=max_depth)


def extract_field_paths(value: object, *, max_depth: int = DEFAULT_MAX_DEPTH) -> set[str]:
    """Return the set of field paths reachable within `max_depth`.

    Args:
        value (object): Decoded JSON object or array.
        max_depth (int): Deepest level whose keys are emitted.

    Returns:
        set[str]: Unique paths; empty when `value` is not a container.
    """
    return set(iter_field_paths(value, max_depth=max_depth))


def union_field_paths(documents: Iterable[object], *, max_depth: int = DEFAULT_MAX_DEPTH) -> list[str]:
    """Union the paths of several documents, keeping first-seen order.

    Args:
        documents (Iterable[object]): Decoded documents.
        max_depth (int): Deepest level whose keys are emitted.

    Returns:
        list[str]: De-duplicated paths.
    """
    ordered: dict[str, None] = {}
    for document in documents:
        ordered.update(dict.fromkeys(iter_field_paths(document, max_depth=max_depth)))
    return list(ordered)


def get_by_path(document: object, path: str) -> JsonNode:
    """Resolve a dot-joined path inside a document.

    Object segments are looked up by key, array segments by numeric index.

    Args:
        document (object): Decoded JSON document.
        path (str): Dot-joined field path.

    Returns:
        JsonNode: Node found at `path`, or `JsonAbsent` when a segment is missing.
    """
    current: object = document
    for segment in path.split("."):
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return _ABSENT
    return classify_json(current)
