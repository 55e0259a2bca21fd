"""Store-level persistence through the composition root.

Writes a populated store, reads it into a fresh one, and checks that every
(namespace, key) pair comes back without leaking across namespaces.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_namespaced_properties import (
    InvalidFormat,
    KeyRejected,
    NamespaceAlreadyClaimed,
    NotFound,
    PersistenceError,
    PropertyStore,
    document_for,
    dumps_store,
    load_store,
    loads_store,
    save_store,
)
from lib_namespaced_properties.adapters.documents import structured as structured_module

FORMATS = ["xml", "json"]
if structured_module.yaml is not None:
    FORMATS.append("yaml")

# XML 1.0 has no representation for most C0 controls or U+FFFE/U+FFFF.
XML_TEXT = st.text(
    st.characters().filter(
        lambda ch: ch in "\t\n\r" or " " <= ch <= "\ud7ff" or "\ue000" <= ch <= "\ufffd" or ch >= "\U00010000"
    )
)
AWKWARD_VALUES = [
    "a\rb",
    "a\r\nb",
    "\r",
    "line\n  indented",
    " padded ",
    "tab\tseparated",
    "nel\x85ls\u2028ps\u2029",
    "]]>",
    "",
]


def populated_store() -> PropertyStore:
    store = PropertyStore()
    ns1 = store.claim("NS1")
    ns1.set("INT", 1322)
    ns1.set("STRING", "hey")
    ns2 = store.claim("NS2")
    ns2.set("eep", 1000)
    return store


@pytest.mark.parametrize("fmt", FORMATS)
def test_round_trip_reproduces_typed_values(tmp_path: Path, fmt: str) -> None:
    path = tmp_path / f"store.{fmt}"
    save_store(populated_store(), path, comment="round trip")

    restored = load_store(path)
    ns1 = restored.claim("NS1")
    ns2 = restored.claim("NS2")
    assert ns1.get_int("INT", -1) == 1322
    assert ns1.get_string("STRING") == "hey"
    assert ns2.get_int("eep", -1) == 1000
    assert ns2.get_int("INT", -1) == -1
    assert ns2.keys() == {"eep"}


@pytest.mark.parametrize("fmt", FORMATS)
def test_round_trip_preserves_snapshot(fmt: str) -> None:
    original = populated_store()
    original.claim("NS3").derive("GUEST").set("FLAG", True)
    payload = dumps_store(original, format=fmt)
    assert loads_store(payload, format=fmt).snapshot() == original.snapshot()


def test_load_into_existing_store_merges() -> None:
    store = PropertyStore()
    store.claim("LOCAL").set("A", 1)
    loads_store(dumps_store(populated_store()), store=store)
    assert store.namespaces() == {"LOCAL", "NS1", "NS2"}
    with pytest.raises(NamespaceAlreadyClaimed):
        store.claim("LOCAL")
    assert store.claim("NS1").get_int("INT", -1) == 1322


def test_dictionaries_are_not_persisted() -> None:
    store = PropertyStore()
    view = store.claim("NS1")
    view.set_dictionary(["INT"])
    view.set("INT", 1)
    restored = loads_store(dumps_store(store)).claim("NS1")
    assert len(restored.dictionary) == 0
    restored.set("anything", 2)


def test_load_missing_document(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        load_store(tmp_path / "missing.xml")


def test_unknown_suffix(tmp_path: Path) -> None:
    with pytest.raises(InvalidFormat):
        save_store(PropertyStore(), tmp_path / "store.ini")
    assert document_for("STORE.XML").format == "xml"


def test_xml_document_matches_properties_layout(tmp_path: Path) -> None:
    path = tmp_path / "store.xml"
    save_store(populated_store(), path, comment="demo", encoding="UTF-8")
    text = path.read_text(encoding="utf-8")
    assert text.startswith('<?xml version="1.0" encoding="UTF-8" standalone="no"?>')
    assert "<comment>demo</comment>" in text
    assert '<entry key="NS1:INT">1322</entry>' in text
    assert '<entry key="NS2:eep">1000</entry>' in text


def reload_string(value: str, fmt: str) -> str | None:
    store = PropertyStore()
    store.claim("NS1").set("S", value)
    return loads_store(dumps_store(store, format=fmt), format=fmt).claim("NS1").get_string("S")


@pytest.mark.parametrize("value", AWKWARD_VALUES)
@pytest.mark.parametrize("fmt", FORMATS)
def test_awkward_strings_survive_every_format(fmt: str, value: str) -> None:
    assert reload_string(value, fmt) == value


@given(st.text())
def test_json_round_trips_any_string(value: str) -> None:
    assert reload_string(value, "json") == value


@pytest.mark.skipif(structured_module.yaml is None, reason="PyYAML not available")
@given(st.text())
def test_yaml_round_trips_any_string(value: str) -> None:
    assert reload_string(value, "yaml") == value


@given(XML_TEXT)
def test_xml_round_trips_any_representable_string(value: str) -> None:
    assert reload_string(value, "xml") == value


@pytest.mark.parametrize("value", ["bell\x01", "nul\x00", "\ufffe"])
def test_xml_refuses_unrepresentable_characters(tmp_path: Path, value: str) -> None:
    store = PropertyStore()
    store.claim("NS1").set("S", value)
    path = tmp_path / "store.xml"
    with pytest.raises(InvalidFormat, match="NS1:S"):
        save_store(store, path)
    assert not path.exists()
    assert reload_string(value, "json") == value


@pytest.mark.parametrize("flat_key", ["NS1:NS2:", "NS1::x", "NS1:a:b:c"])
def test_malformed_keys_in_documents_are_format_errors(flat_key: str) -> None:
    payload = f'<properties><entry key="{flat_key}">1</entry></properties>'.encode()
    with pytest.raises(PersistenceError):
        loads_store(payload)


def test_failed_load_leaves_target_store_untouched() -> None:
    store = PropertyStore()
    view = store.claim("B")
    view.set_dictionary(["ok"])
    payload = dumps_store(PropertyStore()).replace(
        b"</properties>", b'<entry key="A:x">1</entry><entry key="B:bad">2</entry></properties>'
    )
    with pytest.raises(KeyRejected):
        loads_store(payload, store=store)
    assert store.namespaces() == {"B"}
    assert store.snapshot() == {}
