"""Human-readable rendering of arbitrary values for diagnostics.

Only used for debug listings (``NamespaceView.describe`` and the CLI ``show``
command); the read/write/claim path never depends on it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping


def render(value: object, separator: str = "\n") -> str:
    """Render *value* as text, joining container members with *separator*.

    Mappings become ``key=value`` entries in key order, other iterables list
    their items, and every entry is followed by *separator*.

    Examples
    --------
    >>> render(None)
    ''
    >>> render({"b": 2, "a": "x"}, ", ")
    'a=x, b=2, '
    >>> render(["eep", "kaboom"], "|")
    'eep|kaboom|'
    >>> render(12.5)
    '12.5'
    """

    if value is None:
        return ""
    if isinstance(value, (str, bytes, int, float)):
        return str(value)
    if isinstance(value, Mapping):
        return "".join(f"{key}={value[key]}{separator}" for key in sorted(value, key=str))
    if isinstance(value, Iterable):
        return "".join(f"{item}{separator}" for item in value)
    return str(value)
