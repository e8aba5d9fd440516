"""CLI tests for emu-dbg: one-shot commands, scripts and fatal exits."""

from __future__ import annotations

import json

from emu_dbg.cli import EXIT_FATAL, _run_script, build_arg_parser, build_context, main
from emu_dbg.commands import build_registry
from emu_dbg.context import DebuggerContext


def _ctx_registry():
    return DebuggerContext(), build_registry()


def test_single_command_prints_value(capsys):
    assert main(["-c", "p (1+2)*3"]) == 0
    assert capsys.readouterr().out.strip() == "9 (0x00000009)"


def test_single_command_with_registers(capsys):
    assert main(["--reg", "eax=0x10", "--reg", "$ebx=2", "-c", "p $eax / $ebx"]) == 0
    assert capsys.readouterr().out.strip() == "8 (0x00000008)"


def test_single_command_json(capsys):
    assert main(["--json", "-c", "p 020"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["result"]["value"] == 16


def test_invalid_expression_returns_nonzero(capsys):
    assert main(["-c", "p (1+2"]) == 1


def test_unknown_register_option_is_rejected(capsys):
    assert main(["--reg", "xyz=1", "-c", "p 1"]) == 2
    assert "unknown register" in capsys.readouterr().err


def test_image_is_loaded_and_eip_set(tmp_path, capsys):
    image = tmp_path / "image.bin"
    image.write_bytes((0x12345678).to_bytes(4, "little"))
    args = build_arg_parser().parse_args(["--image", str(image), "--memory-size", "0x200000"])
    ctx = build_context(args)
    assert ctx.monitor.evaluate("*$eip").value == 0x12345678
    assert ctx.monitor.evaluate("$eip == 0x100000").value == 1


def test_script_executes_commands(tmp_path, capsys):
    ctx, registry = _ctx_registry()
    script = tmp_path / "script.txt"
    script.write_text("# comment\nalias pp print\n\nw $eax\ninfo w\n", encoding="utf-8")
    rc = _run_script(ctx, registry, str(script))
    assert rc == 0
    assert ctx.aliases.get("pp") == "print"
    assert [w.expr for w in ctx.monitor.list_watches()] == ["$eax"]


def test_script_reports_failure(tmp_path):
    ctx, registry = _ctx_registry()
    script = tmp_path / "script.txt"
    script.write_text("unknowncmd\np 1\n", encoding="utf-8")
    assert _run_script(ctx, registry, str(script)) != 0


def test_script_stops_at_quit(tmp_path, capsys):
    ctx, registry = _ctx_registry()
    script = tmp_path / "script.txt"
    script.write_text("q\np 12345\n", encoding="utf-8")
    assert _run_script(ctx, registry, str(script)) == 0
    assert "12345" not in capsys.readouterr().out


def test_script_missing_file_returns_error(tmp_path):
    ctx, registry = _ctx_registry()
    missing = tmp_path / "missing.txt"
    assert _run_script(ctx, registry, str(missing)) != 0


def test_pool_exhaustion_aborts_with_fatal_status(tmp_path, capsys):
    script = tmp_path / "script.txt"
    script.write_text("w 1\nw 2\nw 3\n", encoding="utf-8")
    rc = main(["--watch-capacity", "2", "--script", str(script)])
    assert rc == EXIT_FATAL
    assert "fatal: there is no more watchpoint" in capsys.readouterr().err


def test_stack_overflow_aborts_with_fatal_status(capsys):
    rc = main(["-c", "p " + "(" * 40 + "1" + ")" * 40])
    assert rc == EXIT_FATAL


def test_many_adjacent_operands_is_not_fatal(capsys):
    rc = main(["-c", "p " + " ".join(["1"] * 40)])
    assert rc == 1
    assert "missing operator" in capsys.readouterr().out
