"""Build /map-batch payloads from pasted JSON samples."""

from __future__ import annotations

import json
import math
from decimal import Decimal
from typing import Any

from ecsmapper.exceptions import InputParseError, PayloadShapeError
from ecsmapper.processing.paths import DEFAULT_MAX_DEPTH, get_by_path, union_field_paths
from ecsmapper.typing.models import BatchInputItem, JsonScalar


def parse_documents(text: str | None) -> list[dict[str, Any]] | None:
    """Decode pasted text into sample documents.

    Args:
        text (str | None): Raw text, a JSON object or an array of objects.

    Raises:
        InputParseError: If the text is not valid JSON.
        PayloadShapeError: If the JSON holds no object at the top level.

    Returns:
        list[dict[str, Any]] | None: Documents, or None when there is nothing to parse yet.
    """
    if not text or not text.strip():
        return None

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputParseError(exc=exc) from exc

    if isinstance(parsed, dict):
        documents = [parsed]
    elif isinstance(parsed, list):
        documents = [entry for entry in parsed if isinstance(entry, dict)]
    else:
        documents = []

    if not documents:
        raise PayloadShapeError()
    return documents


def _format_float(value: float) -> str:
    """Format a float with the shortest round-trip digits, laid out like ECMAScript `Number#toString`."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple))
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped
    point = exponent + len(digits)

    if len(digits) <= point <= 21:
        return f"{sign}{digits}{'0' * (point - len(digits))}"
    if 0 < point <= 21:
        return f"{sign}{digits[:point]}.{digits[point:]}"
    if -6 < point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"

    mantissa = digits[0] if len(digits) == 1 else f"{digits[0]}.{digits[1:]}"
    power = point - 1
    return f"{sign}{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"


def render_scalar(value: str | int | float | bool) -> str:
    """Render a JSON scalar the way JavaScript stringifies it.

    Booleans become `true`/`false`, integral floats drop the fraction and tiny or huge
    numbers use the `1e-7` / `1e+21` exponent form.

    Args:
        value (str | int | float | bool): Decoded scalar.

    Returns:
        str: Rendered value.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


def describe_sample(document: dict[str, Any], path: str) -> str:
    """Describe a field from the value it holds in a sample document.

    Args:
        document (dict[str, Any]): Sample document.
        path (str): Field path.

    Returns:
        str: `sample value: ...` for scalars, `field <path>` for containers, nulls and misses.
    """
    node = get_by_path(document, path)
    if isinstance(node, JsonScalar):
        return f"sample value: {render_scalar(node.value)}"
    return f"field {path}"


def build_batch_payload(
    text: str | None,
    *,
    sourcetype: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[BatchInputItem] | None:
    """Turn pasted samples into one batch item per unique field path.

    Paths are the union over every document; descriptions come from the first document only.

    Args:
        text (str | None): Raw pasted text.
        sourcetype (str): Sourcetype attached to every item.
        max_depth (int): Deepest level whose keys are emitted.

    Returns:
        list[BatchInputItem] | None: Batch items, or None for empty input.
    """
    documents = parse_documents(text)
    if documents is None:
        return None

    first = documents[0]
    return [
        BatchInputItem(sourcetype=sourcetype, field=path, description=describe_sample(first, path))
        for path in union_field_paths(documents, max_depth=max_depth)
    ]
