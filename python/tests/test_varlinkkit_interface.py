"""Interface description parser and renderer tests."""

from __future__ import annotations

import pytest

from varlinkkit.interface import (
    ArrayType,
    DictType,
    EnumType,
    InterfaceSyntaxError,
    MaybeType,
    NamedType,
    StructType,
    format_interface,
    fragments_to_text,
    parse_interface,
)

PING = """# Example service
interface org.example.ping

# A pong reply
type Pong (value: string, count: ?int)

type Color (red, green, blue)

# Returns the same string
method Ping(ping: string) -> (pong: string)

method Empty() -> ()

error NotFound (name: string)
"""


def test_parse_members():
    iface = parse_interface(PING)
    assert iface.name == "org.example.ping"
    assert iface.doc == ["Example service"]
    assert [member.name for member in iface.members] == ["Pong", "Color", "Ping", "Empty", "NotFound"]
    assert iface.method_names() == ["Ping", "Empty"]

    pong = iface.member("Pong")
    assert pong is not None and pong.kind == "type"
    assert pong.doc == ["A pong reply"]
    assert isinstance(pong.type, StructType)
    assert [entry.name for entry in pong.type.fields] == ["value", "count"]
    assert pong.type.fields[1].type == MaybeType(NamedType("int"))

    color = iface.member("Color")
    assert color is not None and color.type == EnumType(["red", "green", "blue"])

    empty = iface.member("Empty")
    assert empty is not None
    assert empty.input == StructType() and empty.output == StructType()

    not_found = iface.member("NotFound")
    assert not_found is not None and not_found.kind == "error"
    assert iface.member("Missing") is None


def test_parse_container_types():
    iface = parse_interface(
        "interface org.example.types\n"
        "type T (\n"
        "  # list of names\n"
        "  names: []string,\n"
        "  map: [string]?float,\n"
        "  nested: (inner: bool, mode: (a, b)),\n"
        "  raw: object\n"
        ")\n"
    )
    member = iface.member("T")
    assert member is not None and isinstance(member.type, StructType)
    fields = {entry.name: entry for entry in member.type.fields}
    assert fields["names"].doc == ["list of names"]
    assert fields["names"].type == ArrayType(NamedType("string"))
    assert fields["map"].type == DictType(MaybeType(NamedType("float")))
    nested = fields["nested"].type
    assert isinstance(nested, StructType)
    assert nested.fields[1].type == EnumType(["a", "b"])
    assert fields["raw"].type == NamedType("object")


@pytest.mark.parametrize(
    "text, line",
    [
        ("interface", 1),
        ("service org.example", 1),
        ("interface org\n", 1),
        ("interface org.example\nmethod Foo(a: string)\n", 2),
        ("interface org.example\n\ntype T (m: [int]string)\n", 3),
        ("interface org.example\nmethod foo() -> ()\n", 2),
        ("interface org.example\nmethod Foo() -> (a, b)\n", 2),
        ("interface org.example\ntype T (a: string, $b: int)\n", 2),
        ("interface org.example\nconst Foo ()\n", 2),
    ],
)
def test_parse_errors_report_line(text, line):
    with pytest.raises(InterfaceSyntaxError) as excinfo:
        parse_interface(text)
    assert excinfo.value.line == line


def test_format_short_members_inline():
    text = fragments_to_text(format_interface(parse_interface(PING)))
    assert text == PING.rstrip("\n")


def test_format_breaks_long_method():
    iface = parse_interface(
        "interface org.example.long\n"
        "method Long(first_argument: string, second_argument: int) -> (result: string)\n"
    )
    text = fragments_to_text(format_interface(iface, width=40))
    assert text.splitlines()[2:] == [
        "method Long(",
        "  first_argument: string,",
        "  second_argument: int",
        ") -> (",
        "  result: string",
        ")",
    ]


def test_format_breaks_nested_struct():
    iface = parse_interface("interface org.example.nested\ntype Outer (inner: (alpha: string, beta: string), gamma: int)\n")
    text = fragments_to_text(format_interface(iface, width=30))
    assert text.splitlines()[2:] == [
        "type Outer (",
        "  inner: (",
        "    alpha: string,",
        "    beta: string",
        "  ),",
        "  gamma: int",
        ")",
    ]


def test_format_uses_styles():
    fragments = format_interface(parse_interface(PING))
    styles = {style for style, _ in fragments}
    assert {"class:idl.comment", "class:idl.keyword", "class:idl.name", "class:idl.type"} <= styles
    assert ("class:idl.keyword", "interface") in fragments


def test_format_keeps_field_comments():
    iface = parse_interface("interface org.example.a\n\ntype Foo (\n  # the answer\n  a: int\n)\n")
    text = fragments_to_text(format_interface(iface))
    assert text.splitlines()[2:] == [
        "type Foo (",
        "  # the answer",
        "  a: int",
        ")",
    ]


def test_format_keeps_nested_and_method_field_comments():
    iface = parse_interface(
        "interface org.example.a\n"
        "method Get(\n  # key to look up\n  key: string\n) -> (value: ?(\n  # cached copy\n  data: string\n))\n"
    )
    text = fragments_to_text(format_interface(iface))
    assert "  # key to look up" in text
    assert "    # cached copy" in text
    assert text.splitlines()[2] == "method Get("
