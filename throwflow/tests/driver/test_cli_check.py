# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""`throwflow check` end to end: exit codes, human output and --json payloads."""

from __future__ import annotations

import json
from pathlib import Path

from throwflow.driver import ENV_CHECKED, main

RISKY = """
exception IOErr
def f() { raise IOErr() }
def g() { raise IllegalStateException() }
"""

CLEAN = """
exception IOErr
@throws[IOErr] def f() { raise IOErr() }
"""


def _write(tmp_path: Path, name: str, text: str) -> Path:
	path = tmp_path / name
	path.write_text(text)
	return path


def _run_json(argv: list[str], capsys) -> tuple[int, dict]:
	code = main(argv + ["--json"])
	out = capsys.readouterr().out
	return code, json.loads(out)


def test_clean_file_exits_zero(tmp_path: Path, capsys):
	src = _write(tmp_path, "clean.src", CLEAN)
	code, payload = _run_json(["check", str(src)], capsys)
	assert code == 0
	assert payload == {"exit_code": 0, "diagnostics": []}


def test_unhandled_reported_as_json(tmp_path: Path, capsys):
	src = _write(tmp_path, "risky.src", RISKY)
	code, payload = _run_json(["check", str(src)], capsys)
	assert code == 1
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "exceptions"
	assert diag["code"] == "UNHANDLED_THROWABLE"
	assert diag["file"] == str(src)
	assert diag["line"] == 3
	assert "IOErr" in diag["message"]


def test_human_output_on_stderr(tmp_path: Path, capsys):
	src = _write(tmp_path, "risky.src", RISKY)
	assert main(["check", str(src)]) == 1
	err = capsys.readouterr().err
	assert f"{src}:3:" in err
	assert "error: unreported exception IOErr; must be caught or declared to be thrown" in err


def test_invalid_declaration_prints_accepted_forms_note(tmp_path: Path, capsys):
	src = _write(tmp_path, "bad.src", "@throws[Nope] def f() { }\n")
	assert main(["check", str(src)]) == 1
	err = capsys.readouterr().err.splitlines()
	assert err[0].startswith(f"{src}:1:") and "Unsupported @throws marker" in err[0]
	assert err[1] == "  note: accepted forms: @throws[T] or @throws(classOf[T]) naming one exception type"


def test_invalid_declaration_note_in_json(tmp_path: Path, capsys):
	src = _write(tmp_path, "bad.src", "@throws[Nope] def f() { }\n")
	_, payload = _run_json(["check", str(src)], capsys)
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "INVALID_THROWS"
	assert diag["notes"] == ["accepted forms: @throws[T] or @throws(classOf[T]) naming one exception type"]


def test_checked_flag_selects_strategy(tmp_path: Path, capsys):
	src = _write(tmp_path, "risky.src", RISKY)
	_, payload = _run_json(["check", str(src), "--checked", "strict"], capsys)
	assert len(payload["diagnostics"]) == 2


def test_plugin_option_overrides_flag(tmp_path: Path, capsys):
	src = _write(tmp_path, "risky.src", RISKY)
	_, payload = _run_json(["check", str(src), "--checked", "strict", "-P", "checked:standard"], capsys)
	assert len(payload["diagnostics"]) == 1


def test_environment_default(tmp_path: Path, capsys, monkeypatch):
	monkeypatch.setenv(ENV_CHECKED, "strict")
	src = _write(tmp_path, "risky.src", RISKY)
	_, payload = _run_json(["check", str(src)], capsys)
	assert len(payload["diagnostics"]) == 2


def test_unknown_plugin_options_are_reported(tmp_path: Path, capsys):
	src = _write(tmp_path, "clean.src", CLEAN)
	code, payload = _run_json(["check", str(src), "-P", "checked:loose", "-P", "colour"], capsys)
	assert code == 1
	assert [d["message"] for d in payload["diagnostics"]] == [
		"Unknown checked exception value: loose",
		"Unknown option: colour",
	]
	assert {d["phase"] for d in payload["diagnostics"]} == {"options"}


def test_syntax_error_is_parser_diagnostic(tmp_path: Path, capsys):
	src = _write(tmp_path, "broken.src", "def f( {")
	code, payload = _run_json(["check", str(src)], capsys)
	assert code == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "parser"
	assert diag["file"] == str(src)
	assert diag["line"] == 1


def test_frontend_error_is_parser_diagnostic(tmp_path: Path, capsys):
	src = _write(tmp_path, "bad.src", "def f() {\n  nowhere()\n}")
	code, payload = _run_json(["check", str(src)], capsys)
	assert code == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "parser"
	assert diag["code"] == "FRONTEND"
	assert diag["line"] == 2


def test_multiple_files_are_checked_independently(tmp_path: Path, capsys):
	a = _write(tmp_path, "a.src", RISKY)
	b = _write(tmp_path, "b.src", CLEAN)
	missing = tmp_path / "missing.src"
	_, payload = _run_json(["check", str(a), str(b), str(missing)], capsys)
	assert [d["file"] for d in payload["diagnostics"]] == [str(a), str(missing)]


def test_no_command_prints_help(capsys):
	assert main([]) == 2
	assert "check" in capsys.readouterr().err
