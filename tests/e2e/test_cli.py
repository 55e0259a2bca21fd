"""End-to-end CLI coverage for the commands exposed by lib_namespaced_properties."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

import lib_cli_exit_tools

from lib_namespaced_properties import PropertyStore, load_store, save_store
from lib_namespaced_properties import cli


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


def _store_file(tmp_path: Path, name: str = "store.xml") -> Path:
    store = PropertyStore()
    ns1 = store.claim("NS1")
    ns1.set("INT", 1322)
    ns1.set("FLAG", True)
    store.claim("NS2").set("eep", 1000)
    path = tmp_path / name
    save_store(store, path, comment="cli fixture")
    return path


def test_cli_show_lists_all_namespaces(tmp_path: Path) -> None:
    result = _runner().invoke(cli.cli, ["show", str(_store_file(tmp_path))])
    assert result.exit_code == 0
    assert result.output == "[NS1]\nFLAG=true\nINT=1322\n[NS2]\neep=1000\n"


def test_cli_show_single_namespace_with_separator(tmp_path: Path) -> None:
    result = _runner().invoke(
        cli.cli, ["show", str(_store_file(tmp_path)), "--namespace", "NS2", "--separator", ";"]
    )
    assert result.exit_code == 0
    assert result.output == "[NS2]\neep=1000;"


def test_cli_show_unknown_namespace_fails(tmp_path: Path) -> None:
    result = _runner().invoke(cli.cli, ["show", str(_store_file(tmp_path)), "--namespace", "NOPE"])
    assert result.exit_code != 0
    assert "NOPE" in result.output


def test_cli_get_typed_value(tmp_path: Path) -> None:
    path = str(_store_file(tmp_path))
    result = _runner().invoke(cli.cli, ["get", path, "NS1", "INT", "--type", "int"])
    assert result.exit_code == 0
    assert result.output.strip() == "1322"
    result = _runner().invoke(cli.cli, ["get", path, "NS1", "FLAG", "--type", "boolean"])
    assert result.output.strip() == "true"


def test_cli_get_type_mismatch_uses_default(tmp_path: Path) -> None:
    path = str(_store_file(tmp_path))
    result = _runner().invoke(cli.cli, ["get", path, "NS1", "FLAG", "--type", "int", "--default", "-7"])
    assert result.exit_code == 0
    assert result.output.strip() == "-7"
    result = _runner().invoke(cli.cli, ["get", path, "NS1", "missing"])
    assert result.exit_code != 0


def test_cli_set_creates_and_updates_document(tmp_path: Path) -> None:
    path = tmp_path / "fresh.json"
    runner = _runner()
    result = runner.invoke(cli.cli, ["set", str(path), "NS1", "INT", "5", "--type", "int", "--comment", "made"])
    assert result.exit_code == 0
    result = runner.invoke(cli.cli, ["set", str(path), "NS1", "NAME", "demo"])
    assert result.exit_code == 0

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["comment"] == "made"
    assert payload["entries"] == {"NS1:INT": "5", "NS1:NAME": "demo"}


def test_cli_set_rejects_badly_typed_value(tmp_path: Path) -> None:
    path = tmp_path / "fresh.xml"
    result = _runner().invoke(cli.cli, ["set", str(path), "NS1", "INT", "five", "--type", "int"])
    assert result.exit_code != 0
    assert not path.exists()


def test_cli_convert_between_formats(tmp_path: Path) -> None:
    source = _store_file(tmp_path)
    destination = tmp_path / "converted.json"
    result = _runner().invoke(cli.cli, ["convert", str(source), str(destination)])
    assert result.exit_code == 0
    assert load_store(destination).snapshot() == load_store(source).snapshot()


def test_cli_info_runs() -> None:
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "Info for" in result.output or "metadata unavailable" in result.output


def test_main_restores_traceback_flag(tmp_path: Path) -> None:
    previous = lib_cli_exit_tools.config.traceback
    exit_code = cli.main(["--traceback", "show", str(_store_file(tmp_path))])
    assert exit_code == 0
    assert lib_cli_exit_tools.config.traceback == previous


def test_main_reports_missing_document(tmp_path: Path) -> None:
    exit_code = cli.main(["get", str(tmp_path / "missing.xml"), "NS1", "INT"])
    assert exit_code != 0
