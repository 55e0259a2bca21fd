"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contract persistence adapters satisfy so the composition
root can save and load stores without depending on a concrete document format.

Contents
--------
* :class:`StoreDocument` – reads and writes the flat persisted form.

System Role
-----------
These protocols enforce Dependency Inversion (DIP). Each document adapter in
:mod:`lib_namespaced_properties.adapters.documents.structured` implements
:class:`StoreDocument`; :mod:`lib_namespaced_properties.core` selects one by
file suffix.
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class StoreDocument(Protocol):
    """Translate between flat ``namespace:key -> encoded value`` entries and bytes.

    Why
    ----
    Segregate document syntax (XML/JSON/YAML) from store semantics.

    Attributes
    ----------
    format:
        Short format name (``"xml"``, ``"json"``, ``"yaml"``).
    last_comment:
        Comment found by the most recent :meth:`parse` or :meth:`load`, if any.
    """

    format: str
    last_comment: str | None

    def parse(self, payload: bytes, *, encoding: str = "UTF-8") -> Mapping[str, str]:
        """Decode *payload* or raise ``InvalidFormat``."""

    def render(self, entries: Mapping[str, str], *, comment: str | None = None, encoding: str = "UTF-8") -> bytes:
        """Encode *entries* with an optional leading *comment*."""

    def load(self, path: str, *, encoding: str = "UTF-8") -> Mapping[str, str]:
        """Read the document at *path*; raise ``NotFound`` or ``PersistenceError`` on I/O failure."""

    def save(
        self, path: str, entries: Mapping[str, str], *, comment: str | None = None, encoding: str = "UTF-8"
    ) -> None:
        """Write *entries* to *path*; raise ``PersistenceError`` on I/O failure."""
