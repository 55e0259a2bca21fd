"""Allow-list of writable key names.

An empty :class:`Dictionary` leaves a bucket unrestricted; once it holds at
least one name, only those exact names (case and whitespace sensitive) may be
written. Reads are never restricted.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from threading import Lock


class Dictionary:
    """Mutable, grow-only set of permitted keys.

    Examples
    --------
    >>> dictionary = Dictionary()
    >>> dictionary.check_writable("anything")
    True
    >>> dictionary.add("SUPERKEY")
    >>> dictionary.check_writable("anything"), dictionary.check_writable("SUPERKEY")
    (False, True)
    >>> dictionary.check_writable("superkey ")
    False
    """

    __slots__ = ("_allowed", "_lock")

    def __init__(self, allowed: Iterable[str] = ()) -> None:
        self._allowed: set[str] = set(allowed)
        self._lock = Lock()

    def add(self, key: str) -> None:
        """Permit *key*; adding an existing name is a no-op."""

        if key is None:
            raise TypeError("Dictionary keys cannot be None")
        with self._lock:
            self._allowed.add(key)

    def update(self, keys: Iterable[str]) -> None:
        """Permit every name in *keys*."""

        for key in keys:
            self.add(key)

    def check_writable(self, key: str) -> bool:
        """Return ``True`` when *key* may be written under this dictionary."""

        with self._lock:
            return not self._allowed or key in self._allowed

    @property
    def restricting(self) -> bool:
        """``True`` once the dictionary holds at least one name."""

        with self._lock:
            return bool(self._allowed)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._allowed

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._allowed))

    def __len__(self) -> int:
        with self._lock:
            return len(self._allowed)

    def __repr__(self) -> str:
        with self._lock:
            return f"Dictionary({sorted(self._allowed)!r})"
