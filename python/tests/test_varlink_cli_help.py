"""Tests for the introspection commands: help, info and resolve."""

from __future__ import annotations

import pytest

from varlink_cli.commands.help import HelpCommand
from varlink_cli.commands.info import InfoCommand
from varlink_cli.commands.resolve import ResolveCommand
from varlink_cli.context import CliContext
from varlink_cli.errors import CliError, CliFailure

DESCRIPTION = """# Ping service
interface org.example.ping

method Ping(ping: string) -> (pong: string)
"""


def _ctx(**kwargs) -> CliContext:
    kwargs.setdefault("resolver_address", "unix:/nonexistent/org.varlink.resolver")
    return CliContext(color=False, **kwargs)


@pytest.fixture
def ping_service(varlink_server):
    def describe(msg):
        if msg["parameters"]["interface"] != "org.example.ping":
            return [{"error": "org.varlink.service.InterfaceNotFound", "parameters": msg["parameters"]}]
        return [{"parameters": {"description": DESCRIPTION}}]

    varlink_server.add("org.varlink.service.GetInterfaceDescription", describe)
    varlink_server.reply(
        "org.varlink.service.GetInfo",
        {
            "parameters": {
                "vendor": "Example",
                "product": "Ping",
                "version": "1",
                "url": "https://example.org/ping",
                "interfaces": ["org.varlink.service", "org.example.ping"],
            }
        },
    )
    return varlink_server


def test_help_prints_interface(ping_service, capsys):
    rc = HelpCommand().run(_ctx(), [f"{ping_service.address}/org.example.ping"])
    assert rc == 0
    assert capsys.readouterr().out == (
        "# Ping service\n"
        "interface org.example.ping\n"
        "\n"
        "method Ping(ping: string) -> (pong: string)\n"
    )


def test_help_remote_error_is_not_fatal(ping_service, capsys):
    rc = HelpCommand().run(_ctx(), [f"{ping_service.address}/org.example.other"])
    assert rc == 0
    assert capsys.readouterr().out == "Error: org.varlink.service.InterfaceNotFound\n"


def test_help_via_resolver(ping_service, capsys):
    ping_service.reply("org.varlink.resolver.Resolve", {"parameters": {"address": ping_service.address}})
    rc = HelpCommand().run(_ctx(resolver_address=ping_service.address), ["org.example.ping"])
    assert rc == 0
    assert "interface org.example.ping" in capsys.readouterr().out


def test_help_errors(tmp_path, capsys):
    assert HelpCommand().run(_ctx(), []) == CliError.MISSING_ARGUMENT
    assert capsys.readouterr().err == "Usage: varlink-cli help [ADDRESS/]INTERFACE\n"

    assert HelpCommand().run(_ctx(), ["org.example.ping"]) == CliError.CANNOT_RESOLVE
    assert capsys.readouterr().err == "Error resolving interface org.example.ping\n"

    address = f"unix:{tmp_path / 'missing'}"
    assert HelpCommand().run(_ctx(), [f"{address}/org.example.ping"]) == CliError.CANNOT_CONNECT
    assert capsys.readouterr().err == f"Error connecting to {address}\n"

    assert HelpCommand().run(_ctx(), ["--bogus"]) == CliError.INVALID_ARGUMENT
    assert "Try 'varlink-cli --help'" in capsys.readouterr().err


def test_help_bad_description(varlink_server, capsys):
    varlink_server.reply("org.varlink.service.GetInterfaceDescription", {"parameters": {"description": "garbage"}})
    rc = HelpCommand().run(_ctx(), [f"{varlink_server.address}/org.example.ping"])
    assert rc == CliError.PANIC
    assert "Unable to parse interface description" in capsys.readouterr().err


def test_info_lists_interfaces(ping_service, capsys):
    rc = InfoCommand().run(_ctx(), [ping_service.address])
    out = capsys.readouterr().out.splitlines()
    assert rc == 0
    assert out[0] == "Vendor:   Example"
    assert "Url:      https://example.org/ping" in out
    assert out[-3:] == ["Interfaces:", "  org.varlink.service", "  org.example.ping"]


def test_info_defaults_to_resolver(ping_service, capsys):
    assert InfoCommand().run(_ctx(resolver_address=ping_service.address), []) == 0
    assert "Product:  Ping" in capsys.readouterr().out


def test_resolve_prints_address(ping_service, capsys):
    ping_service.reply("org.varlink.resolver.Resolve", {"parameters": {"address": "unix:/run/org.example.ping"}})
    rc = ResolveCommand().run(_ctx(resolver_address=ping_service.address), ["org.example.ping"])
    assert rc == 0
    assert capsys.readouterr().out == "unix:/run/org.example.ping\n"


def test_resolve_failures(varlink_server, capsys):
    varlink_server.reply(
        "org.varlink.resolver.Resolve",
        {"error": "org.varlink.resolver.InterfaceNotFound", "parameters": {}},
    )
    ctx = _ctx(resolver_address=varlink_server.address)
    assert ResolveCommand().run(ctx, ["org.example.ping"]) == CliError.CANNOT_RESOLVE
    assert "Error resolving interface org.example.ping" in capsys.readouterr().err
    assert ResolveCommand().run(ctx, []) == CliError.MISSING_ARGUMENT


def test_context_resolver_interface_and_cache(ping_service):
    ctx = _ctx(resolver_address=ping_service.address)
    assert ctx.resolve("org.varlink.resolver") == ping_service.address
    assert ctx.list_interfaces(ping_service.address) == ["org.example.ping", "org.varlink.service"]
    assert ctx.list_interfaces(ping_service.address) == ["org.example.ping", "org.varlink.service"]
    assert [call["method"] for call in ping_service.calls] == ["org.varlink.service.GetInfo"]
    with pytest.raises(CliFailure) as excinfo:
        ctx.connect(None)
    assert excinfo.value.error is CliError.MISSING_ARGUMENT


def test_context_transport_config():
    assert CliContext(timeout=2.5).transport_config.read_timeout == 2.5
    assert CliContext().transport_config.read_timeout is None


def test_context_catalog_uses_resolver_registry(varlink_server):
    varlink_server.reply(
        "org.varlink.resolver.GetInfo",
        {"parameters": {"interfaces": ["org.example.ping", "org.example.more"]}},
    )
    varlink_server.reply(
        "org.varlink.service.GetInfo",
        {"parameters": {"interfaces": ["org.varlink.service", "org.varlink.resolver"]}},
    )
    ctx = _ctx(resolver_address=varlink_server.address)
    assert ctx.list_interfaces() == ["org.example.more", "org.example.ping"]
    assert ctx.list_interfaces(varlink_server.address) == ["org.varlink.resolver", "org.varlink.service"]
    assert [call["method"] for call in varlink_server.calls] == [
        "org.varlink.resolver.GetInfo",
        "org.varlink.service.GetInfo",
    ]
