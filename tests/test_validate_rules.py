# tests/test_validate_rules.py
import json

from resthours.validate_rules import main


def test_bundled_rules_validate(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "stcw_rest_hours.json: OK" in out
    assert "24h: rest >= 10:00 in 24:00" in out
    assert "7d:  rest >= 77:00 in 168:00" in out


def test_missing_folder(tmp_path, capsys):
    assert main([str(tmp_path / "missing")]) == 1
    assert "Rules folder not found" in capsys.readouterr().out


def test_empty_folder(tmp_path, capsys):
    assert main([str(tmp_path)]) == 0
    assert "No .json files found" in capsys.readouterr().out


def test_broken_json_prints_context(tmp_path, capsys):
    (tmp_path / "bad.json").write_text('{\n  "rules": [\n    {"id": "A",,}\n  ]\n}\n', encoding="utf-8")
    assert main([str(tmp_path)]) == 2
    out = capsys.readouterr().out
    assert "bad.json: JSON parse error" in out
    assert "---- context ----" in out
    assert ">>    3:" in out


def test_invalid_rule_fails(tmp_path, capsys):
    bad = {"id": "R", "title": "bad", "logic": {"type": "rest_window", "window": "24h",
                                                "window_minutes": 1440, "min_rest_minutes": 2000}}
    (tmp_path / "r.json").write_text(json.dumps([bad]), encoding="utf-8")
    assert main([str(tmp_path)]) == 2
    out = capsys.readouterr().out
    assert "r.json[0]: validation_error" in out
    assert "1 invalid rules" in out


def test_non_utf8_file_fails_without_traceback(tmp_path, capsys):
    (tmp_path / "latin1.json").write_bytes(b'{"rules": [], "note": "caf\xe9"}')
    assert main([str(tmp_path)]) == 2
    out = capsys.readouterr().out
    assert "latin1.json: ERROR reading file" in out
    assert "latin1.json: read_error" in out
