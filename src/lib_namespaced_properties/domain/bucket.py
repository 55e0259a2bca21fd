"""Per-namespace storage of canonical string values.

Purpose
-------
Hold the flat ``key -> canonical string`` mapping for one namespace together
with its optional :class:`~lib_namespaced_properties.domain.dictionary.Dictionary`.

Contents
--------
* :data:`NAMESPACE_DELIMITER` – separator between namespace and key in flat
  (qualified) keys.
* :class:`NamespaceBucket` – the mapping plus dictionary enforcement.

System Role
-----------
Buckets are created and owned by
:class:`~lib_namespaced_properties.application.store.PropertyStore` and mutated
through :class:`~lib_namespaced_properties.domain.view.NamespaceView`. A bucket
may host *guest scopes*: keys written by a view derived under another namespace
are stored as ``"<scope>:<key>"`` so each view only sees its own keys.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from threading import RLock
from typing import Final

from .dictionary import Dictionary
from .errors import InvalidNamespace, KeyRejected

NAMESPACE_DELIMITER: Final[str] = ":"


class NamespaceBucket:
    """Flat mapping from bare key to canonical string for one namespace.

    Examples
    --------
    >>> bucket = NamespaceBucket("NS1")
    >>> bucket.set("INT", "132") is None
    True
    >>> bucket.set("INT", "1322")
    '132'
    >>> bucket.get("INT"), bucket.keys()
    ('1322', {'INT'})
    >>> bucket.remove("INT"), bucket.remove("INT")
    (True, False)
    """

    def __init__(self, namespace: str, dictionary: Dictionary | None = None) -> None:
        self.namespace = namespace
        self._entries: dict[str, str] = {}
        self._dictionary = dictionary if dictionary is not None else Dictionary()
        self._lock = RLock()

    @property
    def dictionary(self) -> Dictionary:
        return self._dictionary

    @dictionary.setter
    def dictionary(self, dictionary: Dictionary) -> None:
        # Late assignment does not revalidate keys already stored.
        self._dictionary = dictionary

    def set(self, key: str, encoded: str, *, scope: str | None = None) -> str | None:
        """Store *encoded* under *key* and return the previous value, if any.

        Raises
        ------
        KeyRejected
            For ``None``, empty or non-string keys, keys containing
            :data:`NAMESPACE_DELIMITER`, and keys the dictionary disallows.
        """

        self._check_key(key)
        if not isinstance(encoded, str):
            raise TypeError(f"Bucket values must be canonical strings, got {type(encoded).__name__}")
        with self._lock:
            storage_key = _storage_key(key, scope)
            previous = self._entries.get(storage_key)
            self._entries[storage_key] = encoded
            return previous

    def get(self, key: str, *, scope: str | None = None) -> str | None:
        if not isinstance(key, str):
            return None
        with self._lock:
            return self._entries.get(_storage_key(key, scope))

    def remove(self, key: str, *, scope: str | None = None) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            return self._entries.pop(_storage_key(key, scope), None) is not None

    def keys(self, *, scope: str | None = None) -> set[str]:
        """Return the bare keys of the home scope, or of guest *scope*."""

        return set(self.items(scope=scope))

    def items(self, *, scope: str | None = None) -> dict[str, str]:
        """Return a copy of ``bare key -> encoded value`` for one scope."""

        with self._lock:
            if scope is None:
                return {key: value for key, value in self._entries.items() if NAMESPACE_DELIMITER not in key}
            prefix = scope + NAMESPACE_DELIMITER
            return {key[len(prefix) :]: value for key, value in self._entries.items() if key.startswith(prefix)}

    def raw_items(self) -> dict[str, str]:
        """Return every stored entry keyed by its storage key (guest scopes included)."""

        with self._lock:
            return dict(self._entries)

    def restore(self, entries: Mapping[str, str]) -> None:
        """Merge storage-level *entries*, validating all of them before writing any."""

        with self._lock:
            self._entries.update(self.validate(entries))

    def validate(self, entries: Mapping[str, str]) -> dict[str, str]:
        """Check storage-level *entries* against this bucket and return them as a dict.

        Nothing is written. Storage keys may carry a guest scope
        (``"NS2:eep"``); the dictionary is checked against the bare key after
        the scope.

        Raises
        ------
        KeyRejected
            On the first entry :meth:`restore` would refuse.
        """

        staged: dict[str, str] = {}
        for storage_key, encoded in entries.items():
            if not isinstance(storage_key, str) or not isinstance(encoded, str):
                raise KeyRejected(storage_key, "entries must map strings to strings")
            scope, delimiter, bare = storage_key.rpartition(NAMESPACE_DELIMITER)
            if delimiter and not scope:
                raise KeyRejected(storage_key, "guest scope cannot be empty")
            self._check_key(bare)
            staged[storage_key] = encoded
        return staged

    def copy(self) -> NamespaceBucket:
        """Return an independent bucket holding the same entries and dictionary names."""

        with self._lock:
            clone = NamespaceBucket(self.namespace, Dictionary(self._dictionary))
            clone._entries = dict(self._entries)
        return clone

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"NamespaceBucket({self.namespace!r}, entries={len(self._entries)})"

    def _check_key(self, key: object) -> None:
        if key is None:
            raise KeyRejected(key, "key cannot be None")
        if not isinstance(key, str):
            raise KeyRejected(key, "key must be a string")
        if not key:
            raise KeyRejected(key, "key cannot be empty")
        if NAMESPACE_DELIMITER in key:
            raise KeyRejected(key, f"key cannot contain {NAMESPACE_DELIMITER!r}")
        if not self._dictionary.check_writable(key):
            raise KeyRejected(key, "not in dictionary")


def qualify(namespace: str, key: str) -> str:
    """Join *namespace* and *key* into a flat qualified key.

    Examples
    --------
    >>> qualify("NS1", "INT")
    'NS1:INT'
    """

    return namespace + NAMESPACE_DELIMITER + key


def split_qualified(qualified: str) -> tuple[str, str]:
    """Split a flat key into ``(namespace, storage_key)`` at the first delimiter.

    The storage key is either a bare key or ``"<scope>:<key>"``. Raises
    ``ValueError`` when any part is empty or the key nests deeper than one scope.

    Examples
    --------
    >>> split_qualified("NS1:NS2:eep")
    ('NS1', 'NS2:eep')
    """

    namespace, delimiter, storage_key = qualified.partition(NAMESPACE_DELIMITER)
    parts = storage_key.split(NAMESPACE_DELIMITER)
    if not delimiter or not namespace or len(parts) > 2 or not all(parts):
        raise ValueError(f"Not a namespace-qualified key: {qualified!r}")
    return namespace, storage_key


def flatten(buckets: Iterable[NamespaceBucket]) -> dict[str, str]:
    """Return the flat ``namespace:key -> value`` form of *buckets*."""

    flat: dict[str, str] = {}
    for bucket in buckets:
        for storage_key, encoded in bucket.raw_items().items():
            flat[qualify(bucket.namespace, storage_key)] = encoded
    return flat


def _storage_key(key: str, scope: str | None) -> str:
    return key if scope is None else scope + NAMESPACE_DELIMITER + key


def check_namespace(namespace: object) -> str:
    """Return *namespace* when it can name a bucket, else raise :class:`InvalidNamespace`.

    Examples
    --------
    >>> check_namespace("NS1")
    'NS1'
    >>> check_namespace("a:b")
    Traceback (most recent call last):
    ...
    lib_namespaced_properties.domain.errors.InvalidNamespace: Namespace cannot contain ':': 'a:b'
    """

    if not isinstance(namespace, str) or not namespace:
        raise InvalidNamespace(f"Namespace must be a non-empty string: {namespace!r}")
    if NAMESPACE_DELIMITER in namespace:
        raise InvalidNamespace(f"Namespace cannot contain {NAMESPACE_DELIMITER!r}: {namespace!r}")
    return namespace
