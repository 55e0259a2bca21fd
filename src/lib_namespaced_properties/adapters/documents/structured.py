"""Persisted-form document adapters.

Purpose
-------
Convert stores' flat ``namespace:key -> canonical string`` entries to and from
on-disk documents. Adapters are small wrappers around ``xml.etree``/``json``/
``yaml.safe_load`` so error handling and observability live in one place.

Contents
--------
* :class:`BaseDocument` – shared helpers for file I/O and flat-mapping checks.
* :class:`XMLDocument` – the properties XML document (comment, encoding
  declaration, one ``<entry key="...">`` per value).
* :class:`JSONDocument` – ``{"comment": ..., "entries": {...}}``.
* :class:`YAMLDocument` – leading ``#`` comment lines plus a flat mapping (only
  available when PyYAML is installed).

System Role
-----------
Invoked by :mod:`lib_namespaced_properties.core` which picks an adapter by file
suffix and hands the parsed entries to
:meth:`lib_namespaced_properties.application.store.PropertyStore.restore`.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Mapping
from xml.sax.saxutils import escape, quoteattr

from ...domain.codec import encode
from ...domain.errors import InvalidFormat, NotFound, PersistenceError
from ...observability import log_debug, log_error

try:
    import yaml  # type: ignore[import-not-found]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]

PROPERTIES_DOCTYPE = '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">'

# Characters outside the XML 1.0 Char production cannot appear in a document at all.
_XML_ILLEGAL = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")
# Parsers normalise a raw carriage return to a newline.
_TEXT_ENTITIES = {"\r": "&#13;"}


class BaseDocument:
    """Common utilities shared by the document adapters."""

    format = "base"

    def __init__(self) -> None:
        self.last_comment: str | None = None

    def parse(self, payload: bytes, *, encoding: str = "UTF-8") -> Mapping[str, str]:
        raise NotImplementedError

    def render(self, entries: Mapping[str, str], *, comment: str | None = None, encoding: str = "UTF-8") -> bytes:
        raise NotImplementedError

    def load(self, path: str, *, encoding: str = "UTF-8") -> Mapping[str, str]:
        """Read and parse the document at *path*.

        Side Effects
        ------------
        Emits ``store_document_read`` and ``store_document_loaded`` debug events.
        """

        payload = self._read(path)
        try:
            entries = self.parse(payload, encoding=encoding)
        except InvalidFormat as exc:
            log_error("store_document_invalid", namespace=None, path=path, format=self.format, error=str(exc))
            raise InvalidFormat(f"Invalid {self.format.upper()} document {path}: {exc}") from exc
        log_debug("store_document_loaded", namespace=None, path=path, format=self.format, keys=len(entries))
        return entries

    def save(
        self, path: str, entries: Mapping[str, str], *, comment: str | None = None, encoding: str = "UTF-8"
    ) -> None:
        """Render *entries* and write them to *path*, creating parent directories."""

        payload = self.render(entries, comment=comment, encoding=encoding)
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        except OSError as exc:
            raise PersistenceError(f"Cannot write property document {path}: {exc}") from exc
        log_debug("store_document_written", namespace=None, path=path, format=self.format, keys=len(entries))

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"<properties/>")
        >>> tmp.close()
        >>> BaseDocument()._read(tmp.name)[:11]
        b'<properties'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Property document not found: {path}")
        try:
            payload = file_path.read_bytes()
        except OSError as exc:
            raise PersistenceError(f"Cannot read property document {path}: {exc}") from exc
        log_debug("store_document_read", namespace=None, path=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_flat(data: object) -> dict[str, str]:
        """Return *data* as a ``str -> str`` mapping or raise ``InvalidFormat``.

        Scalar numbers and booleans in hand-edited documents are converted to
        their canonical strings.

        Examples
        --------
        >>> BaseDocument._ensure_flat({"NS1:INT": 1322, "NS1:FLAG": True})
        {'NS1:INT': '1322', 'NS1:FLAG': 'true'}
        >>> BaseDocument._ensure_flat({"NS1:LIST": [1]})
        Traceback (most recent call last):
        ...
        lib_namespaced_properties.domain.errors.InvalidFormat: Value for 'NS1:LIST' is not a scalar
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat("Document did not produce a mapping")
        flat: dict[str, str] = {}
        for key, value in data.items():
            if not isinstance(key, str):
                raise InvalidFormat(f"Property key {key!r} is not a string")
            if not isinstance(value, (str, bool, int, float)):
                raise InvalidFormat(f"Value for {key!r} is not a scalar")
            flat[key] = encode(value)
        return flat


class XMLDocument(BaseDocument):
    """Properties XML document with an encoding declaration and optional comment.

    Examples
    --------
    >>> document = XMLDocument()
    >>> payload = document.render({"NS1:INT": "1322"}, comment="demo")
    >>> payload.splitlines()[0]
    b'<?xml version="1.0" encoding="UTF-8" standalone="no"?>'
    >>> document.parse(payload), document.last_comment
    ({'NS1:INT': '1322'}, 'demo')
    """

    format = "xml"

    def parse(self, payload: bytes, *, encoding: str = "UTF-8") -> Mapping[str, str]:
        # The document's own declaration wins over *encoding*.
        try:
            root = ET.fromstring(payload)
        except ET.ParseError as exc:
            raise InvalidFormat(f"Malformed XML: {exc}") from exc
        if root.tag != "properties":
            raise InvalidFormat(f"Expected <properties> root element, found <{root.tag}>")
        self.last_comment = root.findtext("comment")
        entries: dict[str, str] = {}
        for element in root.findall("entry"):
            key = element.get("key")
            if key is None:
                raise InvalidFormat("<entry> element without a key attribute")
            entries[key] = element.text or ""
        return entries

    def render(self, entries: Mapping[str, str], *, comment: str | None = None, encoding: str = "UTF-8") -> bytes:
        lines = [f'<?xml version="1.0" encoding="{encoding}" standalone="no"?>', PROPERTIES_DOCTYPE, "<properties>"]
        if comment is not None:
            _check_xml_characters(comment, "comment")
            lines.append(f"  <comment>{escape(comment, _TEXT_ENTITIES)}</comment>")
        for key in sorted(entries):
            value = entries[key]
            _check_xml_characters(key, "key")
            _check_xml_characters(value, key)
            lines.append(f"  <entry key={quoteattr(key)}>{escape(value, _TEXT_ENTITIES)}</entry>")
        lines.append("</properties>")
        return "\n".join([*lines, ""]).encode(encoding, errors="xmlcharrefreplace")


class JSONDocument(BaseDocument):
    """JSON document holding a comment and a flat ``entries`` object."""

    format = "json"

    def parse(self, payload: bytes, *, encoding: str = "UTF-8") -> Mapping[str, str]:
        try:
            data = json.loads(payload.decode(encoding))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidFormat(f"Malformed JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise InvalidFormat("Document did not produce a mapping")
        comment = data.get("comment")
        self.last_comment = comment if isinstance(comment, str) else None
        return self._ensure_flat(data.get("entries", {}))

    def render(self, entries: Mapping[str, str], *, comment: str | None = None, encoding: str = "UTF-8") -> bytes:
        document: dict[str, object] = {}
        if comment is not None:
            document["comment"] = comment
        document["entries"] = dict(sorted(entries.items()))
        try:
            return (json.dumps(document, indent=2, ensure_ascii=False) + "\n").encode(encoding)
        except UnicodeEncodeError:
            # \uXXXX escapes carry anything the target encoding cannot.
            return (json.dumps(document, indent=2) + "\n").encode(encoding)


class YAMLDocument(BaseDocument):
    """YAML document: ``#`` comment header followed by a flat mapping."""

    format = "yaml"

    def parse(self, payload: bytes, *, encoding: str = "UTF-8") -> Mapping[str, str]:
        _require_yaml()
        try:
            text = payload.decode(encoding)
            data = yaml.safe_load(text)  # type: ignore[union-attr]
        except (yaml.YAMLError, UnicodeDecodeError) as exc:  # type: ignore[union-attr]
            raise InvalidFormat(f"Malformed YAML: {exc}") from exc
        self.last_comment = _leading_comment(text)
        return self._ensure_flat({} if data is None else data)

    def render(self, entries: Mapping[str, str], *, comment: str | None = None, encoding: str = "UTF-8") -> bytes:
        _require_yaml()
        header = ""
        if comment:
            illegal = yaml.reader.Reader.NON_PRINTABLE.search(comment)  # type: ignore[union-attr]
            if illegal is not None:
                raise InvalidFormat(f"Comment holds U+{ord(illegal.group()):04X}, which YAML documents cannot represent")
            header = "".join(f"# {line}\n" for line in comment.splitlines())
        # Double quotes escape every line break, so values come back unfolded.
        options = {"default_flow_style": False, "default_style": '"', "sort_keys": True}
        body = yaml.safe_dump(dict(entries), allow_unicode=True, **options)  # type: ignore[union-attr]
        try:
            return (header + body).encode(encoding)
        except UnicodeEncodeError:
            body = yaml.safe_dump(dict(entries), **options)  # type: ignore[union-attr]
        try:
            return (header + body).encode(encoding)
        except UnicodeEncodeError as exc:
            raise InvalidFormat(f"Comment cannot be written as {encoding}: {exc}") from exc


def _require_yaml() -> None:
    if yaml is None:
        raise NotFound("PyYAML is required for YAML property documents")


def _leading_comment(text: str) -> str | None:
    """Collect the ``#`` lines that open a YAML document.

    Examples
    --------
    >>> _leading_comment("# first\\n# second\\nNS1:INT: '1'\\n")
    'first\\nsecond'
    """

    lines: list[str] = []
    for line in text.splitlines():
        if not line.startswith("#"):
            break
        lines.append(line[1:].removeprefix(" "))
    return "\n".join(lines) if lines else None


def _check_xml_characters(text: str, label: str) -> None:
    """Raise :class:`InvalidFormat` when *text* holds a character XML 1.0 forbids.

    Examples
    --------
    >>> _check_xml_characters("tab\\tand\\rreturn", "NS1:A")
    >>> _check_xml_characters("bell\\x07", "NS1:A")
    Traceback (most recent call last):
    ...
    lib_namespaced_properties.domain.errors.InvalidFormat: 'NS1:A' holds U+0007, which XML documents cannot represent
    """

    illegal = _XML_ILLEGAL.search(text)
    if illegal is not None:
        raise InvalidFormat(f"{label!r} holds U+{ord(illegal.group()):04X}, which XML documents cannot represent")
