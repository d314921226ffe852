from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from lazygraph.cli.main import app

runner = CliRunner()


def write_program(tmp_path: Path) -> Path:
    path = tmp_path / "prog.json"
    path.write_text(
        json.dumps(
            {
                "nodes": [
                    {"id": "x", "op": "placeholder", "dtype": "float64", "name": "x"},
                    {"id": "y", "op": "mult", "args": ["x", 2.0]},
                ]
            }
        )
    )
    return path


def test_run_prints_json_result(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", str(write_program(tmp_path)), "--feed", "x=3.0"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout.strip().splitlines()[-1]) == 6.0


def test_run_reports_engine_errors(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", str(write_program(tmp_path))])
    assert result.exit_code == 1


def test_run_rejects_malformed_feed(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", str(write_program(tmp_path)), "--feed", "x"])
    assert result.exit_code != 0


def test_ops_lists_combinators_and_operations() -> None:
    result = runner.invoke(app, ["ops"])
    assert result.exit_code == 0, result.output
    assert "plus" in result.stdout
    assert "MatMul" in result.stdout
    assert "numpy" in result.stdout


def test_run_ignores_feed_for_nodes_the_target_does_not_use(tmp_path: Path) -> None:
    path = tmp_path / "const.json"
    path.write_text(
        json.dumps(
            {
                "nodes": [
                    {"id": "x", "op": "placeholder", "dtype": "float64", "name": "x"},
                    {"id": "c", "op": "constant", "value": 4},
                ],
                "run": ["c"],
            }
        )
    )
    result = runner.invoke(app, ["run", str(path), "--feed", "x=3.0"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout.strip().splitlines()[-1]) == 4
