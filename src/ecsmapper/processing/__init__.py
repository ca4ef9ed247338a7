"""Sample processing helpers."""

from ecsmapper.processing.paths import (
    DEFAULT_MAX_DEPTH,
    classify_json,
    extract_field_paths,
    get_by_path,
    iter_field_paths,
    union_field_paths,
)
from ecsmapper.processing.payload import (
    build_batch_payload,
    describe_sample,
    parse_documents,
    render_scalar,
)

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "build_batch_payload",
    "classify_json",
    "describe_sample",
    "extract_field_paths",
    "get_by_path",
    "iter_field_paths",
    "parse_documents",
    "render_scalar",
    "union_field_paths",
]
