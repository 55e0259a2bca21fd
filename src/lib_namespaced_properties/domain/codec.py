"""Canonical string codec for primitive property values.

Purpose
-------
Convert between the single textual representation stored in buckets (and
written to the persisted form) and the primitive types callers work with.

Contents
--------
* :class:`ValueType` – the supported primitive kinds.
* :class:`DecodeSuccess` / :class:`DecodeFailure` – explicit decode results.
* :func:`encode` – value to canonical string.
* :func:`decode` – canonical string to a :data:`Decoded` result.
* :func:`value_type_for` – infer the kind requested by a default value.

System Role
-----------
Pure and stateless. Views call :func:`encode` on every typed write and
:func:`decode` on every typed read, turning a :class:`DecodeFailure` into the
caller-supplied default at the getter boundary.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Union


class ValueType(str, Enum):
    """Primitive kinds a stored value can be decoded into."""

    INT = "int"
    LONG = "long"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    STRING = "string"


INT_RANGE: Final[tuple[int, int]] = (-(2**31), 2**31 - 1)
LONG_RANGE: Final[tuple[int, int]] = (-(2**63), 2**63 - 1)

_INTEGER_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_DECIMAL_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL_DOUBLES: Final[dict[str, float]] = {
    "nan": math.nan,
    "+nan": math.nan,
    "-nan": math.nan,
    "infinity": math.inf,
    "+infinity": math.inf,
    "-infinity": -math.inf,
    "inf": math.inf,
    "+inf": math.inf,
    "-inf": -math.inf,
}


@dataclass(frozen=True, slots=True)
class DecodeSuccess:
    """Successful decode carrying the parsed value."""

    value: Any


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """Stored text could not be read as the requested kind.

    Never raised. The typed getters of
    :class:`~lib_namespaced_properties.domain.view.NamespaceView` convert it
    into the caller-supplied default.
    """

    text: str
    value_type: ValueType
    reason: str


Decoded = Union[DecodeSuccess, DecodeFailure]


def encode(value: int | float | bool | str) -> str:
    """Return the canonical textual form of *value*.

    Examples
    --------
    >>> encode(True), encode(1322), encode(2.5), encode("hey")
    ('true', '1322', '2.5', 'hey')
    >>> encode(None)
    Traceback (most recent call last):
    ...
    TypeError: Unsupported property value type: NoneType
    """

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _encode_double(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"Unsupported property value type: {type(value).__name__}")


def decode(text: str | None, value_type: ValueType) -> Decoded:
    """Parse *text* as *value_type* and report the outcome as a result value.

    Examples
    --------
    >>> decode("1322", ValueType.INT)
    DecodeSuccess(value=1322)
    >>> decode("true", ValueType.INT).reason
    'not an integer'
    >>> decode("TRUE", ValueType.BOOLEAN).value
    True
    """

    if text is None:
        return DecodeFailure("", value_type, "no stored value")
    if value_type is ValueType.STRING:
        return DecodeSuccess(text)
    if value_type is ValueType.BOOLEAN:
        return _decode_boolean(text)
    if value_type is ValueType.DOUBLE:
        return _decode_double(text)
    bounds = INT_RANGE if value_type is ValueType.INT else LONG_RANGE
    return _decode_integer(text, value_type, bounds)


def value_type_for(default: object) -> ValueType:
    """Infer the kind a typed getter should decode from its *default*.

    Examples
    --------
    >>> value_type_for(-1), value_type_for(False), value_type_for(0.5)
    (<ValueType.LONG: 'long'>, <ValueType.BOOLEAN: 'boolean'>, <ValueType.DOUBLE: 'double'>)
    """

    if isinstance(default, bool):
        return ValueType.BOOLEAN
    if isinstance(default, int):
        return ValueType.LONG
    if isinstance(default, float):
        return ValueType.DOUBLE
    return ValueType.STRING


def _encode_double(value: float) -> str:
    """Render floats so that ``float(text)`` reproduces *value* exactly."""

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return repr(value)


def _decode_boolean(text: str) -> Decoded:
    lowered = text.lower()
    if lowered == "true":
        return DecodeSuccess(True)
    if lowered == "false":
        return DecodeSuccess(False)
    return DecodeFailure(text, ValueType.BOOLEAN, "not a boolean")


def _decode_double(text: str) -> Decoded:
    special = _SPECIAL_DOUBLES.get(text.lower())
    if special is not None:
        return DecodeSuccess(special)
    if not _DECIMAL_PATTERN.fullmatch(text):
        return DecodeFailure(text, ValueType.DOUBLE, "not a decimal number")
    return DecodeSuccess(float(text))


def _decode_integer(text: str, value_type: ValueType, bounds: tuple[int, int]) -> Decoded:
    if not _INTEGER_PATTERN.fullmatch(text):
        return DecodeFailure(text, value_type, "not an integer")
    number = int(text)
    low, high = bounds
    if not low <= number <= high:
        return DecodeFailure(text, value_type, f"outside {value_type.value} range")
    return DecodeSuccess(number)
