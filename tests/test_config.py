import json
from pathlib import Path

import pytest

from structurizer.config import DecompileMode, StructurizerOptions


def test_defaults_enable_full_decompile_and_else_derivation():
    options = StructurizerOptions()

    assert options.mode is DecompileMode.FULL
    assert options.full_decompile
    assert not options.disable_else_derivation


def test_from_mapping_parses_known_keys():
    options = StructurizerOptions.from_mapping(
        {"mode": "backwards", "disable_else_derivation": True}
    )

    assert options == StructurizerOptions(DecompileMode.BACKWARDS, True)
    assert not options.full_decompile


@pytest.mark.parametrize(
    "entry,message",
    [
        ({"mode": "sideways"}, "unsupported decompile mode"),
        ({"verbose": True}, "unknown structurizer options"),
        ({"disable_else_derivation": "yes"}, "must be a boolean"),
    ],
)
def test_from_mapping_rejects_bad_entries(entry, message):
    with pytest.raises(ValueError, match=message):
        StructurizerOptions.from_mapping(entry)


def test_load_missing_file_returns_defaults(tmp_path: Path):
    assert StructurizerOptions.load(tmp_path / "absent.json") == StructurizerOptions()
    assert StructurizerOptions.load(None) == StructurizerOptions()


def test_load_reads_json_file(tmp_path: Path):
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"mode": "backwards"}), "utf-8")

    assert StructurizerOptions.load(path).mode is DecompileMode.BACKWARDS


def test_load_rejects_non_object_payload(tmp_path: Path):
    path = tmp_path / "options.json"
    path.write_text("[1, 2]", "utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        StructurizerOptions.load(path)
