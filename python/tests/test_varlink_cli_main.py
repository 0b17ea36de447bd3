"""Tests for the varlink-cli entry point and interactive shell."""

from __future__ import annotations

import json

import pytest
from prompt_toolkit.history import InMemoryHistory

from varlink_cli.cli import build_arg_parser, build_context, main
from varlink_cli.commands import build_registry
from varlink_cli.context import CliContext
from varlink_cli.errors import CliError
from varlink_cli.repl import CliREPL


def test_main_missing_command(capsys):
    assert main([]) == CliError.MISSING_COMMAND
    assert "Missing command" in capsys.readouterr().err


def test_main_unknown_command(capsys):
    assert main(["bogus"]) == CliError.COMMAND_NOT_FOUND
    assert capsys.readouterr().err == "Command not found: bogus\n"


def test_main_help_lists_commands(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "Commands:" in out
    assert "call" in out and "resolve" in out
    assert "  complete" not in out


def test_global_options_build_context(monkeypatch, tmp_path):
    monkeypatch.setenv("VARLINK_RESOLVER", "unix:/run/env.resolver")
    args = build_arg_parser().parse_args(
        ["--timeout", "1.5", "--no-color", "--history", str(tmp_path / "h"), "call", "-m", "org.example.Ping", "{}"]
    )
    assert args.command == "call"
    assert args.args == ["-m", "org.example.Ping", "{}"]
    ctx = build_context(args)
    assert ctx.timeout == 1.5
    assert not ctx.color
    assert ctx.history_path == tmp_path / "h"
    assert ctx.resolver_address == "unix:/run/env.resolver"

    args = build_arg_parser().parse_args(["--resolver", "unix:/run/cli.resolver", "resolve", "org.example"])
    assert build_context(args).resolver_address == "unix:/run/cli.resolver"


def test_main_call_end_to_end(varlink_server, capsys):
    varlink_server.add(
        "org.example.more.Count",
        lambda msg: [{"parameters": {"n": n}, "continues": n < 2} for n in range(1, 3)],
    )
    rc = main(["--no-color", "call", "-m", f"{varlink_server.address}/org.example.more.Count", '{"max": 2}'])
    assert rc == 0
    assert capsys.readouterr().out == "".join(json.dumps({"n": n}, indent=2) + "\n" for n in (1, 2))
    assert varlink_server.calls[0]["parameters"] == {"max": 2}


def test_main_resolve_with_resolver_option(varlink_server, capsys):
    varlink_server.reply("org.varlink.resolver.Resolve", {"parameters": {"address": "unix:/run/org.example"}})
    assert main(["--resolver", varlink_server.address, "resolve", "org.example"]) == 0
    assert capsys.readouterr().out == "unix:/run/org.example\n"


def test_main_maps_unexpected_errors_to_panic(monkeypatch, capsys):
    def explode(self, ctx, argv):
        raise ZeroDivisionError("boom")

    monkeypatch.setattr("varlink_cli.commands.resolve.ResolveCommand.run", explode)
    assert main(["resolve", "org.example"]) == CliError.PANIC
    assert "boom" in capsys.readouterr().err


def _repl(tmp_path, **kwargs) -> CliREPL:
    ctx = CliContext(color=False, history_path=tmp_path / "history", **kwargs)
    return CliREPL(ctx, build_registry(), history=InMemoryHistory())


def test_repl_dispatch(tmp_path, capsys):
    repl = _repl(tmp_path, resolver_address="unix:/run/test.resolver")
    assert repl.dispatch("resolve org.varlink.resolver") == 0
    assert capsys.readouterr().out == "unix:/run/test.resolver\n"
    assert repl.dispatch("") == 0
    assert repl.dispatch("bogus") == 1
    assert capsys.readouterr().out == "Unknown command: bogus\n"
    assert repl.dispatch('call "unterminated') == 1
    assert "Parse error" in capsys.readouterr().out
    assert repl.dispatch("call") == CliError.MISSING_ARGUMENT
    with pytest.raises(SystemExit):
        repl.dispatch("quit")


def test_repl_file_history(tmp_path):
    ctx = CliContext(color=False, history_path=tmp_path / "nested" / "history")
    repl = CliREPL(ctx, build_registry())
    assert (tmp_path / "nested" / "history").exists()
    assert repl.last_status == 0
