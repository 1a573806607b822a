from __future__ import annotations

"""
Unit tests for the CLI application controller.

Runs main() in-process against the demo organisation, a CSV file or a
mocked HTTP host, and checks rendered output and exit codes.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from hierfilter.domain.config import load_config
from hierfilter.domain.errors import HostError
from hierfilter.interface.cli.app import main


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep the CLI from installing console handlers during tests."""
    with patch("hierfilter.interface.cli.app.configure_logging"):
        yield


def test_demo_renders_collapsed_root(capsys) -> None:
    code = main(["--demo", "--use-defaults"])
    out = capsys.readouterr().out

    assert code == 0
    assert out.splitlines()[0] == "└── + [ ] Carlos (2)"
    assert "No filter applied" in out


def test_demo_expand_all(capsys) -> None:
    code = main(["--use-defaults", "--expand-all"])
    lines = capsys.readouterr().out.splitlines()

    assert code == 0
    assert lines[0] == "└── [ ] Carlos (2)"
    assert "        │   ├── [ ] Diego" in lines
    assert "        │   └── [ ] Laura" in lines


def test_search_opens_matching_path(capsys) -> None:
    """TC-01: A search shows matches, their ancestors and expands the result."""
    code = main(["--use-defaults", "--search", "  JUAN "])
    out = capsys.readouterr().out

    assert code == 0
    assert "Juan (2)" in out
    assert "Laura" in out
    assert "Ana" not in out


def test_search_without_results(capsys) -> None:
    code = main(["--use-defaults", "--search", "zzz"])

    assert code == 0
    assert "No results found" in capsys.readouterr().out


def test_select_json_report(capsys) -> None:
    """TC-02: Selecting a leader cascades to the whole subtree."""
    code = main(["--use-defaults", "--select", "Juan", "--json"])
    report = json.loads(capsys.readouterr().out)

    assert code == 0
    assert report["selected"] == ["Diego", "Juan", "Laura"]
    assert report["filter"] == {"ok": True, "error": "", "values": ["Diego", "Juan", "Laura"]}
    assert report["summary"]["nodes"] == 15
    assert report["forest"][0]["state"] == "indeterminate"


def test_unknown_select_id_exits_2(capsys) -> None:
    code = main(["--use-defaults", "--select", "Nobody"])

    assert code == 2
    assert "Unknown user id: Nobody" in capsys.readouterr().err


def test_unknown_expand_id_exits_2(capsys) -> None:
    assert main(["--use-defaults", "--expand", "Nobody"]) == 2


def test_dump_config_fills_demo_fields(capsys) -> None:
    code = main(["--use-defaults", "--dump-config", "--display-field", "Nombre"])
    dumped = json.loads(capsys.readouterr().out)

    assert code == 0
    assert dumped == {
        "source_name": "Hoja de Usuarios",
        "entity_field": "Usuario",
        "parent_field": "Lider",
        "display_field": "Nombre",
    }


def test_csv_source(tmp_path: Path, capsys) -> None:
    path = tmp_path / "team.csv"
    path.write_text("user,leader,name\nboss,,The Boss\nann,boss,Ann\n", encoding="utf-8")

    code = main([
        "--use-defaults", "--csv", str(path),
        "--entity-field", "user", "--parent-field", "leader", "--display-field", "name",
        "--expand-all",
    ])
    lines = capsys.readouterr().out.splitlines()

    assert code == 0
    assert lines[:2] == ["└── [ ] The Boss (1)", "    └── [ ] Ann"]


def test_missing_field_is_configuration_error(tmp_path: Path, capsys) -> None:
    path = tmp_path / "team.csv"
    path.write_text("user,leader\nboss,\n", encoding="utf-8")

    code = main(["--use-defaults", "--csv", str(path), "--entity-field", "user", "--parent-field", "boss"])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_host_failure_exits_1(capsys) -> None:
    with patch(
        "hierfilter.infra.hosts.http_host.HttpHost.list_sources",
        side_effect=HostError("connection refused"),
    ):
        code = main(["--use-defaults", "--host", "http://localhost:9", "--source", "S",
                     "--entity-field", "u", "--parent-field", "l"])

    assert code == 1
    assert "connection refused" in capsys.readouterr().err


def test_save_config_persists(capsys) -> None:
    assert main(["--use-defaults", "--save-config"]) == 0
    assert load_config().source_name == "Hoja de Usuarios"
