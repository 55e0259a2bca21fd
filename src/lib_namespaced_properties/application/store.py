"""Claim-once registry of namespace buckets.

Purpose
-------
Own every :class:`~lib_namespaced_properties.domain.bucket.NamespaceBucket` and
hand each namespace to exactly one caller for the lifetime of the store, even
under concurrent claims.

Contents
--------
* :class:`PropertyStore` – bucket registry, claim registry, and the flat
  snapshot/restore pair used by persistence.

System Role
-----------
Sits between consumers and the domain objects. The composition root
(:mod:`lib_namespaced_properties.core`) feeds :meth:`PropertyStore.restore`
from document adapters and writes :meth:`PropertyStore.snapshot` back out.
Stores are plain objects: create as many as needed, one per test if desired.
"""

from __future__ import annotations

from collections.abc import Mapping
from threading import Lock

from ..domain.bucket import NamespaceBucket, check_namespace, flatten, split_qualified
from ..domain.errors import InvalidFormat, NamespaceAlreadyClaimed
from ..domain.view import NamespaceView
from ..observability import count_by_namespace, log_debug, log_info, make_event


class PropertyStore:
    """Registry mapping namespace names to buckets with at-most-one owner each.

    Claims are permanent: there is no release, so the per-namespace state only
    moves from unclaimed to claimed.

    Examples
    --------
    >>> store = PropertyStore()
    >>> view = store.claim("NS1")
    >>> view.set("INT", 1322)
    >>> store.claim("NS1")
    Traceback (most recent call last):
    ...
    lib_namespaced_properties.domain.errors.NamespaceAlreadyClaimed: Namespace NS1 has already been claimed by another caller
    >>> store.snapshot()
    {'NS1:INT': '1322'}
    """

    def __init__(self) -> None:
        self._buckets: dict[str, NamespaceBucket] = {}
        self._claimed: set[str] = set()
        self._lock = Lock()

    def claim(self, namespace: str) -> NamespaceView:
        """Return the only view ever granted for *namespace*.

        The membership test and insertion into the claimed set happen in one
        critical section together with bucket creation, so concurrent callers
        can never both win.

        Raises
        ------
        NamespaceAlreadyClaimed
            When *namespace* was claimed before, by any caller.
        InvalidNamespace
            When *namespace* is empty, not a string, or contains ``":"``.
        """

        check_namespace(namespace)
        with self._lock:
            if namespace in self._claimed:
                won = False
            else:
                self._claimed.add(namespace)
                won = True
                bucket = self._buckets.get(namespace)
                created = bucket is None
                if created:
                    bucket = self._buckets[namespace] = NamespaceBucket(namespace)
        if not won:
            log_debug("namespace_claim_rejected", **make_event(namespace, None))
            raise NamespaceAlreadyClaimed(namespace)
        log_debug("namespace_claimed", **make_event(namespace, None, {"created": created, "keys": len(bucket)}))
        return NamespaceView(namespace, bucket)

    def is_claimed(self, namespace: str) -> bool:
        with self._lock:
            return namespace in self._claimed

    def claimed(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._claimed)

    def namespaces(self) -> set[str]:
        """Every namespace that has a bucket, claimed or merely loaded."""

        with self._lock:
            return set(self._buckets)

    def snapshot(self) -> dict[str, str]:
        """Return an independent flat copy: ``"<namespace>:<key>" -> encoded value``."""

        with self._lock:
            buckets = list(self._buckets.values())
        return flatten(buckets)

    def restore(self, entries: Mapping[str, str]) -> None:
        """Merge flat *entries* into the store, all or nothing.

        Unknown namespaces become new, unclaimed buckets without a dictionary.
        Every group is checked before any bucket is created or merged, so a
        failure leaves the store exactly as it was.

        Raises
        ------
        InvalidFormat
            When a flat key is malformed or a value is not a string.
        KeyRejected
            When an existing bucket's dictionary refuses one of its keys.
        """

        grouped: dict[str, dict[str, str]] = {}
        for qualified, encoded in entries.items():
            try:
                namespace, storage_key = split_qualified(qualified)
            except (TypeError, AttributeError, ValueError) as exc:
                raise InvalidFormat(f"Malformed property key {qualified!r}") from exc
            if not isinstance(encoded, str):
                raise InvalidFormat(f"Value for {qualified!r} is not a string")
            grouped.setdefault(namespace, {})[storage_key] = encoded

        with self._lock:
            staged: list[tuple[NamespaceBucket, dict[str, str]]] = []
            for namespace, bucket_entries in grouped.items():
                bucket = self._buckets.get(namespace)
                if bucket is None:
                    bucket = NamespaceBucket(namespace)
                staged.append((bucket, bucket.validate(bucket_entries)))
            for bucket, validated in staged:
                bucket.restore(validated)
                self._buckets.setdefault(bucket.namespace, bucket)
        log_info("store_restored", **make_event(None, None, {"namespaces": count_by_namespace(entries)}))

    def __contains__(self, namespace: object) -> bool:
        with self._lock:
            return namespace in self._buckets

    def __repr__(self) -> str:
        with self._lock:
            return f"PropertyStore(namespaces={sorted(self._buckets)!r}, claimed={sorted(self._claimed)!r})"
