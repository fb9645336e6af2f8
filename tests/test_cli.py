"""CLI tests for fmt, validate and to-json subcommands."""

import json
import logging
from pathlib import Path
import sys

import pytest

from glyphsplist import cli

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def _run_cli(args, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["glyphsplist"] + args)
    return cli.main()


def test_fmt_check_canonical(monkeypatch, capsys):
    _run_cli(["fmt", str(FIXTURES / "NewFontG3.glyphs"), "--check"], monkeypatch)
    out = capsys.readouterr().out
    assert "[OK]" in out
    assert "is canonical" in out


def test_fmt_check_not_canonical(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["fmt", str(FIXTURES / "Example.glyphs"), "--check"], monkeypatch)
    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "[FAIL]" in out


def test_fmt_check_quiet(monkeypatch, capsys):
    with pytest.raises(SystemExit):
        _run_cli(["fmt", str(FIXTURES / "Example.glyphs"), "--check", "--quiet"], monkeypatch)
    assert capsys.readouterr().out == ""


def test_fmt_to_stdout(monkeypatch, capsys):
    _run_cli(["fmt", str(FIXTURES / "NewFontG3.glyphs")], monkeypatch)
    out = capsys.readouterr().out
    assert out == (FIXTURES / "NewFontG3.glyphs").read_text(encoding="utf-8")


def test_fmt_output_then_check(monkeypatch, capsys, tmp_path):
    out_path = tmp_path / "Example.glyphs"
    _run_cli(["fmt", str(FIXTURES / "Example.glyphs"), "--output", str(out_path)], monkeypatch)
    assert "[OK] Wrote" in capsys.readouterr().out
    _run_cli(["fmt", str(out_path), "--check"], monkeypatch)
    assert "is canonical" in capsys.readouterr().out


def test_fmt_parse_error(monkeypatch, capsys, tmp_path):
    bad = tmp_path / "bad.plist"
    bad.write_text("{a = 1", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["fmt", str(bad)], monkeypatch)
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: expected `;`")


def test_fmt_missing_file(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["fmt", str(tmp_path / "missing.plist")], monkeypatch)
    assert excinfo.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_validate_ok(monkeypatch, capsys, tmp_path):
    _run_cli(["validate", str(FIXTURES / "Example.glyphs"), "--output-dir", str(tmp_path)], monkeypatch)
    out = capsys.readouterr().out
    assert "Status: OK" in out
    assert "Errors: 0" in out
    assert "Glyphs: 3" in out
    assert "Masters: 2" in out

    report = json.loads((tmp_path / "validate.json").read_text(encoding="utf-8"))
    assert report["ok"] is True
    assert report["glyph_count"] == 3
    assert report["issues"] == []


def test_validate_glyphs2_fails(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["validate", str(FIXTURES / "NewFontG2.glyphs")], monkeypatch)
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "Status: FAILED" in captured.out
    assert "Errors: 1" in captured.out
    assert "UNSUPPORTED_FORMAT" in captured.err


def test_validate_report_written_on_failure(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit):
        _run_cli(["validate", str(FIXTURES / "NewFontG2.glyphs"), "--output-dir", str(tmp_path)], monkeypatch)
    report = json.loads((tmp_path / "validate.json").read_text(encoding="utf-8"))
    assert report["ok"] is False
    assert report["issues"][0]["code"] == "UNSUPPORTED_FORMAT"


def test_validate_invalid_utf8(monkeypatch, capsys, tmp_path):
    bad = tmp_path / "bad.glyphs"
    bad.write_bytes(b'{.formatVersion = 3; familyName = "\xff";}')
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["validate", str(bad)], monkeypatch)
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "Status: FAILED" in captured.out
    assert "INVALID_ENCODING (byte 35)" in captured.err


def test_fmt_invalid_utf8(monkeypatch, capsys, tmp_path):
    bad = tmp_path / "bad.glyphs"
    bad.write_bytes(b'{a = "\xff";}')
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["fmt", str(bad)], monkeypatch)
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_to_json(monkeypatch, capsys):
    _run_cli(["to-json", str(FIXTURES / "NewFontG3.glyphs")], monkeypatch)
    out = capsys.readouterr().out
    tree = json.loads(out)
    assert tree["unitsPerEm"] == 1000
    assert tree[".appVersion"] == "3259"
    assert out.startswith('{".appVersion":"3259",".formatVersion":3,')


def test_to_json_non_finite(monkeypatch, capsys):
    _run_cli(["to-json", str(FIXTURES / "FloatNames.glyphs")], monkeypatch)
    tree = json.loads(capsys.readouterr().out)
    assert tree["glyphs"][0]["glyphname"] == "inf"
    assert tree["glyphs"][1]["glyphname"] == "nan"


def test_verbose_configures_debug_logging(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    _run_cli(["validate", str(FIXTURES / "NewFontG3.glyphs"), "--verbose"], monkeypatch)
    assert len(calls) == 1
    assert calls[0]["level"] == logging.DEBUG


def test_default_leaves_logging_alone(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    _run_cli(["validate", str(FIXTURES / "NewFontG3.glyphs")], monkeypatch)
    assert calls == []


def test_no_command_prints_help(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli([], monkeypatch)
    assert excinfo.value.code == 1
    assert "usage" in capsys.readouterr().out
