"""Composition root for ``lib_namespaced_properties``.

Purpose
-------
Provide the entry points that connect a :class:`PropertyStore` with the
persisted-form document adapters.

Contents
--------
* :data:`_DOCUMENTS` – mapping of file suffixes to document adapter factories.
* :func:`document_for` – adapter lookup by path suffix or format name.
* :func:`save_store` / :func:`load_store` – file-based persistence.
* :func:`dumps_store` / :func:`loads_store` – in-memory persistence.

System Role
-----------
This module wires adapters to the application layer while emitting structured
observability signals. It is the canonical place to register a new document
format.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from .adapters.documents.structured import BaseDocument, JSONDocument, XMLDocument, YAMLDocument
from .application.store import PropertyStore
from .domain.errors import (
    InvalidFormat,
    InvalidNamespace,
    KeyRejected,
    NamespaceAlreadyClaimed,
    NotFound,
    PersistenceError,
    PropertyStoreError,
)
from .observability import bind_trace_id, count_by_namespace, log_info, make_event

# Supported document adapters keyed by suffix (and by format name without the dot).
_DOCUMENTS: dict[str, Callable[[], BaseDocument]] = {
    ".xml": XMLDocument,
    ".json": JSONDocument,
    ".yaml": YAMLDocument,
    ".yml": YAMLDocument,
}

DEFAULT_ENCODING = "UTF-8"


def document_for(target: str | Path) -> BaseDocument:
    """Return a fresh adapter for a path suffix or a bare format name.

    Examples
    --------
    >>> document_for("store.xml").format, document_for("yml").format
    ('xml', 'yaml')
    >>> document_for("store.ini")
    Traceback (most recent call last):
    ...
    lib_namespaced_properties.domain.errors.InvalidFormat: Unsupported property document format: 'store.ini'
    """

    text = str(target)
    suffix = Path(text).suffix.lower() or "." + text.lower().lstrip(".")
    factory = _DOCUMENTS.get(suffix)
    if factory is None:
        raise InvalidFormat(f"Unsupported property document format: {text!r}")
    return factory()


def save_store(
    store: PropertyStore,
    path: str | Path,
    *,
    comment: str | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> None:
    """Write every bucket of *store* to *path* in the format named by its suffix.

    Dictionaries are not persisted.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> store = PropertyStore()
    >>> store.claim("NS1").set("INT", 1322)
    >>> save_store(store, Path(tmp.name) / "store.xml", comment="demo")
    >>> load_store(Path(tmp.name) / "store.xml").claim("NS1").get_int("INT", -1)
    1322
    >>> tmp.cleanup()
    """

    document = document_for(path)
    entries = store.snapshot()
    document.save(str(path), entries, comment=comment, encoding=encoding)
    summary = {"format": document.format, "namespaces": count_by_namespace(entries)}
    log_info("store_saved", **make_event(None, str(path), summary))


def load_store(
    path: str | Path,
    *,
    store: PropertyStore | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> PropertyStore:
    """Restore the document at *path* into *store* (or a fresh store) and return it.

    Namespaces absent from *store* become unclaimed buckets without a
    dictionary; reattach dictionaries after claiming.

    Raises
    ------
    NotFound
        When *path* does not exist.
    InvalidFormat
        When the document is malformed.
    PersistenceError
        For other I/O failures.
    """

    bind_trace_id(None)
    document = document_for(path)
    entries = document.load(str(path), encoding=encoding)
    target = store if store is not None else PropertyStore()
    target.restore(entries)
    summary = {"format": document.format, "namespaces": count_by_namespace(entries)}
    log_info("store_loaded", **make_event(None, str(path), summary))
    return target


def dumps_store(
    store: PropertyStore,
    *,
    format: str = "xml",
    comment: str | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> bytes:
    """Return the persisted form of *store* as bytes."""

    return document_for(format).render(store.snapshot(), comment=comment, encoding=encoding)


def loads_store(
    payload: bytes,
    *,
    format: str = "xml",
    store: PropertyStore | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> PropertyStore:
    """Restore *payload* into *store* (or a fresh store) and return it."""

    target = store if store is not None else PropertyStore()
    target.restore(document_for(format).parse(payload, encoding=encoding))
    return target


__all__ = [
    "PropertyStore",
    "PropertyStoreError",
    "KeyRejected",
    "NamespaceAlreadyClaimed",
    "InvalidNamespace",
    "PersistenceError",
    "NotFound",
    "InvalidFormat",
    "document_for",
    "save_store",
    "load_store",
    "dumps_store",
    "loads_store",
]
