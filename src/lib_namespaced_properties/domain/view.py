"""Namespace-scoped typed accessor over a bucket.

Purpose
-------
Give callers get/set access to one namespace without repeating the namespace
on every call, converting between primitives and canonical strings on the way.

Contents
--------
* :class:`NamespaceView` – typed setters and getters, key listing, dictionary
  management, and :meth:`NamespaceView.derive` for reinterpreting a bucket
  under another namespace.

System Role
-----------
Views are handed out by
:meth:`lib_namespaced_properties.application.store.PropertyStore.claim`. They
hold a reference to their bucket, never a copy; dropping a view leaves the
bucket with the store. Reads never raise: missing keys, ``None`` keys, and
values that do not decode as the requested type all produce the caller's
default.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from .bucket import NamespaceBucket, check_namespace
from .codec import INT_RANGE, LONG_RANGE, DecodeSuccess, ValueType, decode, encode, value_type_for
from .dictionary import Dictionary
from .formatting import render

T = TypeVar("T")


class NamespaceView:
    """Typed façade for one namespace over a (possibly shared) bucket.

    Parameters
    ----------
    namespace:
        Name this view addresses. When it differs from ``bucket.namespace`` the
        view is a *guest* and its keys live in their own scope of the bucket.
    bucket:
        Backing storage; shared by reference.

    Examples
    --------
    >>> view = NamespaceView("NS1", NamespaceBucket("NS1"))
    >>> view.set("INT", 1322)
    >>> view.get_int("INT", -1), view.get_int("eeee", -1)
    (1322, -1)
    >>> view.set("FLAG", True)
    >>> view.get_int("FLAG", -7), view.get_boolean("FLAG", False)
    (-7, True)
    >>> guest = view.derive("NS2")
    >>> guest.set("eep", 1000)
    >>> sorted(view.keys()), sorted(guest.keys())
    (['FLAG', 'INT'], ['eep'])
    """

    __slots__ = ("_namespace", "_bucket", "_scope")

    def __init__(self, namespace: str, bucket: NamespaceBucket) -> None:
        self._namespace = check_namespace(namespace)
        self._bucket = bucket
        self._scope = None if namespace == bucket.namespace else namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def bucket(self) -> NamespaceBucket:
        return self._bucket

    def derive(self, namespace: str) -> NamespaceView:
        """Return a view over the same bucket addressed as *namespace*.

        Keys written through the derived view are invisible to this view and
        vice versa, but both share the bucket's dictionary and lifetime.
        """

        return NamespaceView(namespace, self._bucket)

    # -- writes -----------------------------------------------------------

    def set(self, key: str | None, value: int | float | bool | str) -> str | None:
        """Encode *value* and store it under *key*, returning the previous encoding.

        A ``None`` key is silently ignored. Dictionary violations raise
        :class:`~lib_namespaced_properties.domain.errors.KeyRejected`; integers
        outside the long range raise ``ValueError``.
        """

        if key is None:
            return None
        if isinstance(value, int) and not isinstance(value, bool):
            _checked_integer(value, LONG_RANGE, "long")
        return self._bucket.set(key, encode(value), scope=self._scope)

    def set_int(self, key: str | None, value: int) -> str | None:
        return self.set(key, _checked_integer(value, INT_RANGE, "int"))

    def set_long(self, key: str | None, value: int) -> str | None:
        return self.set(key, _checked_integer(value, LONG_RANGE, "long"))

    def set_double(self, key: str | None, value: float) -> str | None:
        return self.set(key, float(value))

    def set_boolean(self, key: str | None, value: bool) -> str | None:
        if not isinstance(value, bool):
            raise TypeError(f"Expected bool, got {type(value).__name__}")
        return self.set(key, value)

    def set_string(self, key: str | None, value: str) -> str | None:
        if not isinstance(value, str):
            raise TypeError(f"Expected str, got {type(value).__name__}")
        return self.set(key, value)

    def remove(self, key: str | None) -> bool:
        """Drop *key*; returns ``False`` when nothing was stored (or *key* is ``None``)."""

        if key is None:
            return False
        return self._bucket.remove(key, scope=self._scope)

    # -- reads ------------------------------------------------------------

    def get(self, key: str | None, default: T, *, value_type: ValueType | None = None) -> T | Any:
        """Return the value under *key* decoded as *value_type*, else *default*.

        When *value_type* is omitted it is inferred from *default*
        (see :func:`~lib_namespaced_properties.domain.codec.value_type_for`).
        """

        if key is None:
            return default
        result = decode(self._bucket.get(key, scope=self._scope), value_type or value_type_for(default))
        if isinstance(result, DecodeSuccess):
            return result.value
        return default

    def get_int(self, key: str | None, default: int) -> int:
        return self.get(key, default, value_type=ValueType.INT)

    def get_long(self, key: str | None, default: int) -> int:
        return self.get(key, default, value_type=ValueType.LONG)

    def get_double(self, key: str | None, default: float) -> float:
        return self.get(key, default, value_type=ValueType.DOUBLE)

    def get_boolean(self, key: str | None, default: bool) -> bool:
        return self.get(key, default, value_type=ValueType.BOOLEAN)

    def get_string(self, key: str | None, default: str | None = None) -> str | None:
        return self.get(key, default, value_type=ValueType.STRING)

    def get_raw(self, key: str | None, default: str | None = None) -> str | None:
        """Return the stored canonical string without decoding."""

        if key is None:
            return default
        encoded = self._bucket.get(key, scope=self._scope)
        return default if encoded is None else encoded

    def has_key(self, key: str | None) -> bool:
        if key is None:
            return False
        return self._bucket.get(key, scope=self._scope) is not None

    def keys(self) -> set[str]:
        """Bare keys visible under this view's namespace."""

        return self._bucket.keys(scope=self._scope)

    def items(self) -> dict[str, str]:
        return self._bucket.items(scope=self._scope)

    # -- dictionary -------------------------------------------------------

    @property
    def dictionary(self) -> Dictionary:
        return self._bucket.dictionary

    def set_dictionary(self, keys: Iterable[str]) -> None:
        """Replace the bucket's dictionary with exactly *keys*."""

        self._bucket.dictionary = Dictionary(keys)

    def add_to_dictionary(self, key: str) -> None:
        self._bucket.dictionary.add(key)

    # -- diagnostics ------------------------------------------------------

    def describe(self, separator: str = "\n") -> str:
        """Render ``key=value`` lines for this namespace, for debugging only."""

        return render(self.items(), separator)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has_key(key)

    def __len__(self) -> int:
        return len(self.keys())

    def __repr__(self) -> str:
        return f"NamespaceView({self._namespace!r}, keys={len(self)})"


def _checked_integer(value: int, bounds: tuple[int, int], kind: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected {kind}, got {type(value).__name__}")
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{value} is outside the {kind} range [{low}, {high}]")
    return value
