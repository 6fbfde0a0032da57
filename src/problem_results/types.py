"""Type aliases shared across problem_results.

This module has no runtime dependencies so every other module can import it
without creating cycles.
"""

from __future__ import annotations

__all__ = [
    "JsonObject",
    "JsonPrimitive",
    "JsonValue",
]


# Primitive JSON types (leaf values)
type JsonPrimitive = str | int | float | bool | None

# JSON value can be primitive or nested (dict/list)
type JsonValue = JsonPrimitive | dict[str, JsonValue] | list[JsonValue]

# A decoded JSON object
type JsonObject = dict[str, JsonValue]
