import json
import subprocess
import sys
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[1] / "structurize.py"


def _write_listing(base: Path, statements: list) -> Path:
    path = base / "program.json"
    path.write_text(json.dumps({"program": statements}, indent=2), "utf-8")
    return path


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
    )


LOOP = [
    {"op": "label", "address": 0},
    {"op": "block", "start": 0, "end": 8},
    {"op": "goto", "target": 0, "condition": {"pred": 0}},
    {"op": "goto", "target": 24, "condition": {"cc": 1}},
    {"op": "block", "start": 8, "end": 24},
    {"op": "label", "address": 24},
]


def test_cli_prints_structured_program(tmp_path: Path) -> None:
    listing = _write_listing(tmp_path, LOOP)

    result = _run(str(listing))

    assert result.returncode == 0, result.stderr
    assert result.stdout == (
        "program {\n"
        "  do {\n"
        "    Block(0, 8);\n"
        "  } while (P0);\n"
        "  if (!CC1) {\n"
        "    Block(8, 24);\n"
        "  }\n"
        "}\n"
    )
    assert "fully structured; 0 synthetic variable(s)" in result.stderr


def test_cli_backwards_mode_writes_json(tmp_path: Path) -> None:
    listing = _write_listing(tmp_path, LOOP)
    output = tmp_path / "out.json"

    result = _run(str(listing), "--mode", "backwards", "--json", "--out", str(output))

    assert result.returncode == 0, result.stderr
    payload = json.loads(output.read_text("utf-8"))
    ops = [entry["op"] for entry in payload["body"]]
    assert ops == ["label", "do_while", "goto", "block", "label"]
    assert payload["body"][0]["unused"] is True
    assert payload["body"][4]["unused"] is False


def test_cli_reports_malformed_listing(tmp_path: Path) -> None:
    listing = _write_listing(tmp_path, [{"op": "goto", "target": 4}])

    result = _run(str(listing))

    assert result.returncode == 2
    assert "malformed program" in result.stderr


def test_cli_rejects_missing_input(tmp_path: Path) -> None:
    result = _run(str(tmp_path / "missing.json"))

    assert result.returncode != 0
    assert "missing input file" in result.stderr
