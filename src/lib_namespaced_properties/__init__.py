"""Public package surface for the namespaced property store.

``import lib_namespaced_properties`` exposes the store, the view and bucket
types, the error taxonomy, the persistence helpers, and the observability hooks
host applications use to attach log handlers.
"""

from __future__ import annotations

from .application.store import PropertyStore
from .core import document_for, dumps_store, load_store, loads_store, save_store
from .domain.bucket import NAMESPACE_DELIMITER, NamespaceBucket
from .domain.codec import ValueType
from .domain.dictionary import Dictionary
from .domain.errors import (
    InvalidFormat,
    InvalidNamespace,
    KeyRejected,
    NamespaceAlreadyClaimed,
    NotFound,
    PersistenceError,
    PropertyStoreError,
)
from .domain.view import NamespaceView
from .observability import bind_trace_id, get_logger

__all__ = [
    "PropertyStore",
    "NamespaceView",
    "NamespaceBucket",
    "Dictionary",
    "ValueType",
    "NAMESPACE_DELIMITER",
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
    "bind_trace_id",
    "get_logger",
]
