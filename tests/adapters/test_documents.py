"""Document adapter tests, including the port contract.

Every adapter must satisfy :class:`StoreDocument` and reproduce the flat
entries, including awkward values, after a render/parse cycle.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lib_namespaced_properties.adapters.documents import structured as structured_module
from lib_namespaced_properties.adapters.documents.structured import JSONDocument, XMLDocument, YAMLDocument
from lib_namespaced_properties.application import ports
from lib_namespaced_properties.domain.errors import InvalidFormat, NotFound

documents = [XMLDocument, JSONDocument]
if structured_module.yaml is not None:
    documents.append(YAMLDocument)

ENTRIES = {
    "NS1:INT": "1322",
    "NS1:STRING": "hey",
    "NS1:SPACED": "  padded value ",
    "NS1:MARKUP": '<a href="x">&amp;</a>',
    "NS1:EMPTY": "",
    "NS1:NUMERIC_STRING": "007",
    "NS2:eep": "1000",
    "NS2:unicode": "grüße ☃",
}


@pytest.mark.parametrize("document_cls", documents)
def test_document_satisfies_port(document_cls) -> None:
    assert isinstance(document_cls(), ports.StoreDocument)


@pytest.mark.parametrize("document_cls", documents)
def test_render_then_parse_preserves_entries_and_comment(document_cls) -> None:
    document = document_cls()
    payload = document.render(ENTRIES, comment="stored by tests")
    reader = document_cls()
    assert dict(reader.parse(payload)) == ENTRIES
    assert reader.last_comment == "stored by tests"


@pytest.mark.parametrize("document_cls", documents)
def test_comment_is_optional(document_cls) -> None:
    document = document_cls()
    document.parse(document.render({"NS1:A": "1"}))
    assert document.last_comment is None


@pytest.mark.parametrize("document_cls", documents)
def test_save_and_load_files(tmp_path: Path, document_cls) -> None:
    document = document_cls()
    target = tmp_path / "nested" / f"store.{document.format}"
    document.save(str(target), ENTRIES, comment="c")
    assert dict(document_cls().load(str(target))) == ENTRIES


@pytest.mark.parametrize("document_cls", documents)
def test_load_missing_file(tmp_path: Path, document_cls) -> None:
    with pytest.raises(NotFound):
        document_cls().load(str(tmp_path / "missing"))


def test_xml_declares_encoding_and_doctype() -> None:
    payload = XMLDocument().render({"NS1:INT": "1"}, comment="demo", encoding="ISO-8859-1")
    lines = payload.splitlines()
    assert lines[0] == b'<?xml version="1.0" encoding="ISO-8859-1" standalone="no"?>'
    assert lines[1].startswith(b"<!DOCTYPE properties")
    assert b"<comment>demo</comment>" in payload
    assert dict(XMLDocument().parse(payload)) == {"NS1:INT": "1"}


def test_xml_non_latin_characters_survive_narrow_encoding() -> None:
    payload = XMLDocument().render({"NS1:snow": "☃"}, encoding="ISO-8859-1")
    assert dict(XMLDocument().parse(payload)) == {"NS1:snow": "☃"}


@pytest.mark.parametrize(
    "payload",
    [
        b"<properties><entry>no key</entry></properties>",
        b"<settings/>",
        b"<properties>",
    ],
)
def test_xml_malformed(payload: bytes) -> None:
    with pytest.raises(InvalidFormat):
        XMLDocument().parse(payload)


def test_xml_load_wraps_format_errors_with_path(tmp_path: Path) -> None:
    target = tmp_path / "broken.xml"
    target.write_bytes(b"<properties>")
    with pytest.raises(InvalidFormat, match="broken.xml"):
        XMLDocument().load(str(target))


def test_json_accepts_hand_written_scalars() -> None:
    payload = json.dumps({"entries": {"NS1:INT": 5, "NS1:FLAG": True}}).encode()
    assert dict(JSONDocument().parse(payload)) == {"NS1:INT": "5", "NS1:FLAG": "true"}


@pytest.mark.parametrize(
    "payload",
    [b"{invalid}", b"[1, 2]", b'{"entries": {"NS1:LIST": [1]}}', b'{"entries": []}'],
)
def test_json_malformed(payload: bytes) -> None:
    with pytest.raises(InvalidFormat):
        JSONDocument().parse(payload)


@pytest.mark.skipif(structured_module.yaml is None, reason="PyYAML not available")
def test_yaml_empty_document() -> None:
    document = YAMLDocument()
    assert dict(document.parse(b"# only a comment\n")) == {}
    assert document.last_comment == "only a comment"


@pytest.mark.skipif(structured_module.yaml is None, reason="PyYAML not available")
def test_yaml_numeric_looking_strings_stay_strings() -> None:
    payload = YAMLDocument().render({"NS1:INT": "1322", "NS1:FLAG": "true"})
    assert dict(YAMLDocument().parse(payload)) == {"NS1:INT": "1322", "NS1:FLAG": "true"}


def test_xml_escapes_carriage_returns_in_values_and_comment() -> None:
    document = XMLDocument()
    payload = document.render({"NS1:CR": "a\r\nb"}, comment="first\rsecond")
    assert b"a&#13;\nb" in payload
    reader = XMLDocument()
    assert dict(reader.parse(payload)) == {"NS1:CR": "a\r\nb"}
    assert reader.last_comment == "first\rsecond"


@pytest.mark.parametrize("comment", ["bell\x07", "\ufffe"])
def test_xml_refuses_unrepresentable_comment(comment: str) -> None:
    with pytest.raises(InvalidFormat, match="comment"):
        XMLDocument().render({"NS1:A": "1"}, comment=comment)


def test_json_falls_back_to_escapes_for_narrow_encodings() -> None:
    payload = JSONDocument().render({"NS1:snow": "☃"}, comment="grüße ☃", encoding="ISO-8859-1")
    reader = JSONDocument()
    assert dict(reader.parse(payload, encoding="ISO-8859-1")) == {"NS1:snow": "☃"}
    assert reader.last_comment == "grüße ☃"


@pytest.mark.skipif(structured_module.yaml is None, reason="PyYAML not available")
def test_yaml_falls_back_to_escapes_for_narrow_encodings() -> None:
    payload = YAMLDocument().render({"NS1:snow": "☃", "NS1:nel": "a\x85b"}, encoding="ISO-8859-1")
    assert dict(YAMLDocument().parse(payload, encoding="ISO-8859-1")) == {"NS1:snow": "☃", "NS1:nel": "a\x85b"}


@pytest.mark.skipif(structured_module.yaml is None, reason="PyYAML not available")
def test_yaml_refuses_unprintable_comment() -> None:
    with pytest.raises(InvalidFormat):
        YAMLDocument().render({"NS1:A": "1"}, comment="bell\x07")
