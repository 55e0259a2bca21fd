"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the store, the document adapters,
and consuming applications. The hierarchy lives in the domain layer so outer
layers may depend on it without the domain depending on them.

Contents
--------
* :class:`PropertyStoreError` – umbrella base class for all library errors.
* :class:`KeyRejected` – a write used a key the bucket refuses.
* :class:`NamespaceAlreadyClaimed` – a namespace was claimed twice.
* :class:`InvalidNamespace` – a namespace name cannot be represented.
* :class:`PersistenceError` – loading or saving the persisted form failed.
* :class:`NotFound` / :class:`InvalidFormat` – persistence failure details.

System Role
-----------
Dictionary and claim violations are contract violations by the integrating
code and surface immediately. Persistence errors are recoverable: callers decide
whether to retry, abort, or fall back to an empty store. Decode mismatches never
reach this module; they are plain result values in
:mod:`lib_namespaced_properties.domain.codec`.
"""

from __future__ import annotations


class PropertyStoreError(Exception):
    """Base type for all exceptions emitted by ``lib_namespaced_properties``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class KeyRejected(PropertyStoreError):
    """Raised when a write targets a key the bucket does not accept.

    Typical Sources
    ---------------
    A key missing from a non-empty dictionary, a ``None`` or non-string key at
    the bucket boundary, or a key containing the namespace delimiter.
    """

    def __init__(self, key: object, reason: str) -> None:
        super().__init__(f"Key rejected ({reason}): {key!r}")
        self.key = key
        self.reason = reason


class NamespaceAlreadyClaimed(PropertyStoreError):
    """Raised when a namespace is claimed after another caller already won it.

    Examples
    --------
    >>> str(NamespaceAlreadyClaimed("NS1"))
    'Namespace NS1 has already been claimed by another caller'
    """

    def __init__(self, namespace: str) -> None:
        super().__init__(f"Namespace {namespace} has already been claimed by another caller")
        self.namespace = namespace


class InvalidNamespace(PropertyStoreError):
    """Raised when a namespace name is empty, not a string, or contains the delimiter."""


class PersistenceError(PropertyStoreError):
    """Signals that the persisted form could not be read or written.

    Why
    ----
    I/O problems are recoverable conditions distinct from contract violations,
    so callers can catch them separately.
    """


class NotFound(PersistenceError):
    """Represents a missing document or a missing optional parser."""


class InvalidFormat(PersistenceError):
    """Raised when a document cannot be parsed into flat ``namespace:key`` entries."""
