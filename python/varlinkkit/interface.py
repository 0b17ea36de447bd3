"""Parser and renderer for varlink interface descriptions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .uri import METHOD_RE, is_interface_name

STYLE_COMMENT = "class:idl.comment"
STYLE_KEYWORD = "class:idl.keyword"
STYLE_NAME = "class:idl.name"
STYLE_TYPE = "class:idl.type"

Fragment = Tuple[str, str]

_TOKEN_RE = re.compile(
    r"(?P<comment>#[^\n]*)"
    r"|(?P<newline>\n)"
    r"|(?P<space>[ \t\r]+)"
    r"|(?P<arrow>->)"
    r"|(?P<punct>[()\[\],:?])"
    r"|(?P<word>[A-Za-z0-9_.-]+)"
)
_FIELD_RE = re.compile(r"^[A-Za-z]([_]?[A-Za-z0-9])*$")


class InterfaceSyntaxError(ValueError):
    """Raised when an interface description cannot be parsed."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"line {line}: {message}")
        self.line = line


#
# Model
#
@dataclass
class NamedType:
    name: str


@dataclass
class ArrayType:
    element: "VarlinkType"


@dataclass
class DictType:
    element: "VarlinkType"


@dataclass
class MaybeType:
    element: "VarlinkType"


@dataclass
class Field:
    name: str
    type: "VarlinkType"
    doc: List[str] = field(default_factory=list)


@dataclass
class StructType:
    fields: List[Field] = field(default_factory=list)


@dataclass
class EnumType:
    values: List[str] = field(default_factory=list)


VarlinkType = Union[NamedType, ArrayType, DictType, MaybeType, StructType, EnumType]


@dataclass
class Member:
    kind: str
    name: str
    doc: List[str] = field(default_factory=list)
    type: Optional[VarlinkType] = None
    input: Optional[StructType] = None
    output: Optional[StructType] = None


@dataclass
class Interface:
    name: str
    doc: List[str] = field(default_factory=list)
    members: List[Member] = field(default_factory=list)

    def member(self, name: str) -> Optional[Member]:
        for entry in self.members:
            if entry.name == name:
                return entry
        return None

    def method_names(self) -> List[str]:
        return [entry.name for entry in self.members if entry.kind == "method"]


#
# Parser
#
@dataclass
class _Token:
    kind: str
    text: str
    line: int


def _tokenize(text: str) -> List[_Token]:
    tokens: List[_Token] = []
    line = 1
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise InterfaceSyntaxError(f"unexpected character {text[pos]!r}", line)
        kind = match.lastgroup or ""
        if kind == "newline":
            line += 1
        elif kind != "space":
            value = match.group()
            if kind == "punct":
                kind = value
            elif kind == "arrow":
                kind = "->"
            tokens.append(_Token(kind, value, line))
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: Sequence[_Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def peek(self) -> Optional[_Token]:
        return None if self.at_end() else self._tokens[self._pos]

    def _line(self) -> int:
        token = self.peek()
        if token is not None:
            return token.line
        return self._tokens[-1].line if self._tokens else 1

    def next(self, kind: str) -> _Token:
        token = self.peek()
        if token is None:
            raise InterfaceSyntaxError(f"expected {kind!r}, got end of input", self._line())
        if token.kind != kind:
            raise InterfaceSyntaxError(f"expected {kind!r}, got {token.text!r}", token.line)
        self._pos += 1
        return token

    def accept(self, kind: str) -> bool:
        token = self.peek()
        if token is not None and token.kind == kind:
            self._pos += 1
            return True
        return False

    def comments(self) -> List[str]:
        doc: List[str] = []
        while True:
            token = self.peek()
            if token is None or token.kind != "comment":
                return doc
            self._pos += 1
            text = token.text[1:]
            doc.append(text[1:] if text.startswith(" ") else text)

    def parse(self) -> Interface:
        doc = self.comments()
        keyword = self.next("word")
        if keyword.text != "interface":
            raise InterfaceSyntaxError("description must start with 'interface'", keyword.line)
        name = self.next("word")
        if not is_interface_name(name.text):
            raise InterfaceSyntaxError(f"invalid interface name {name.text!r}", name.line)
        interface = Interface(name=name.text, doc=doc)
        while True:
            doc = self.comments()
            if self.at_end():
                break
            interface.members.append(self._member(doc))
        return interface

    def _member(self, doc: List[str]) -> Member:
        keyword = self.next("word")
        name = self.next("word")
        if not METHOD_RE.match(name.text):
            raise InterfaceSyntaxError(f"invalid member name {name.text!r}", name.line)
        if keyword.text == "type":
            return Member("type", name.text, doc, type=self._paren())
        if keyword.text == "error":
            return Member("error", name.text, doc, type=self._struct(keyword.text))
        if keyword.text == "method":
            input_type = self._struct(keyword.text)
            self.next("->")
            output_type = self._struct(keyword.text)
            return Member("method", name.text, doc, input=input_type, output=output_type)
        raise InterfaceSyntaxError(f"unknown keyword {keyword.text!r}", keyword.line)

    def _struct(self, owner: str) -> StructType:
        line = self._line()
        value = self._paren()
        if isinstance(value, EnumType):
            if value.values:
                raise InterfaceSyntaxError(f"{owner} expects a struct, got an enum", line)
            return StructType()
        return value

    def _paren(self) -> Union[StructType, EnumType]:
        self.next("(")
        doc = self.comments()
        if self.accept(")"):
            return StructType()
        first = self.next("word")
        if self.accept(":"):
            if not _FIELD_RE.match(first.text):
                raise InterfaceSyntaxError(f"invalid field name {first.text!r}", first.line)
            return self._struct_body(Field(first.text, self._type(), doc))
        values = [first.text]
        while self.accept(","):
            self.comments()
            values.append(self.next("word").text)
        self.comments()
        self.next(")")
        return EnumType(values)

    def _struct_body(self, first: Field) -> StructType:
        fields = [first]
        while True:
            if self.accept(","):
                doc = self.comments()
                name = self.next("word")
                if not _FIELD_RE.match(name.text):
                    raise InterfaceSyntaxError(f"invalid field name {name.text!r}", name.line)
                self.next(":")
                fields.append(Field(name.text, self._type(), doc))
                continue
            self.comments()
            self.next(")")
            return StructType(fields)

    def _type(self) -> VarlinkType:
        if self.accept("?"):
            return MaybeType(self._type())
        if self.accept("["):
            if self.accept("]"):
                return ArrayType(self._type())
            key = self.next("word")
            if key.text != "string":
                raise InterfaceSyntaxError("dictionary keys must be 'string'", key.line)
            self.next("]")
            return DictType(self._type())
        token = self.peek()
        if token is not None and token.kind == "(":
            return self._paren()
        return NamedType(self.next("word").text)


def parse_interface(text: str) -> Interface:
    return _Parser(_tokenize(text)).parse()


#
# Renderer
#
def _text_length(fragments: Sequence[Fragment]) -> int:
    return sum(len(text) for _, text in fragments)


def _inline(value: VarlinkType) -> List[Fragment]:
    if isinstance(value, NamedType):
        return [(STYLE_TYPE, value.name)]
    if isinstance(value, ArrayType):
        return [("", "[]")] + _inline(value.element)
    if isinstance(value, DictType):
        return [("", "["), (STYLE_TYPE, "string"), ("", "]")] + _inline(value.element)
    if isinstance(value, MaybeType):
        return [("", "?")] + _inline(value.element)
    fragments: List[Fragment] = [("", "(")]
    if isinstance(value, EnumType):
        for idx, name in enumerate(value.values):
            if idx:
                fragments.append(("", ", "))
            fragments.append((STYLE_NAME, name))
    else:
        for idx, entry in enumerate(value.fields):
            if idx:
                fragments.append(("", ", "))
            fragments.extend([(STYLE_NAME, entry.name), ("", ": ")])
            fragments.extend(_inline(entry.type))
    fragments.append(("", ")"))
    return fragments


def _last_line_length(fragments: Sequence[Fragment]) -> int:
    text = fragments_to_text(fragments)
    return len(text) - text.rfind("\n") - 1


def _comment_lines(doc: Sequence[str], indent: int) -> Iterator[Fragment]:
    pad = " " * indent
    for line in doc:
        yield ("", pad)
        yield (STYLE_COMMENT, f"# {line}" if line else "#")
        yield ("", "\n")


def _has_docs(value: VarlinkType) -> bool:
    if isinstance(value, (ArrayType, DictType, MaybeType)):
        return _has_docs(value.element)
    if isinstance(value, StructType):
        return any(entry.doc or _has_docs(entry.type) for entry in value.fields)
    return False


def _prefix_length(value: VarlinkType) -> int:
    length = 0
    while isinstance(value, (ArrayType, DictType, MaybeType)):
        length += {ArrayType: 2, DictType: 8, MaybeType: 1}[type(value)]
        value = value.element
    return length


def _block(
    value: VarlinkType,
    *,
    indent: int,
    column: int,
    width: int,
    force: bool = False,
) -> List[Fragment]:
    """Render ``value`` starting at ``column`` on a line indented by ``indent``.

    Structs and enums that do not fit into ``width`` are broken into one
    entry per line, recursively.
    """
    inline = _inline(value)
    if not force and not _has_docs(value) and column + _text_length(inline) <= width:
        return inline
    if isinstance(value, (ArrayType, DictType, MaybeType)):
        prefix = inline[: len(inline) - len(_inline(value.element))]
        return prefix + _block(
            value.element,
            indent=indent,
            column=column + _prefix_length(value),
            width=width,
        )
    if isinstance(value, NamedType):
        return inline
    pad = " " * (indent + 2)
    fragments: List[Fragment] = [("", "(\n")]
    if isinstance(value, EnumType):
        for idx, name in enumerate(value.values):
            fragments.extend([("", pad), (STYLE_NAME, name)])
            fragments.append(("", ",\n" if idx + 1 < len(value.values) else "\n"))
    else:
        for idx, entry in enumerate(value.fields):
            fragments.extend(_comment_lines(entry.doc, indent + 2))
            fragments.extend([("", pad), (STYLE_NAME, entry.name), ("", ": ")])
            fragments.extend(
                _block(
                    entry.type,
                    indent=indent + 2,
                    column=indent + 2 + len(entry.name) + 2,
                    width=width - 1,
                )
            )
            fragments.append(("", ",\n" if idx + 1 < len(value.fields) else "\n"))
    fragments.append(("", " " * indent + ")"))
    return fragments


def _member_fragments(member: Member, width: int) -> List[Fragment]:
    head: List[Fragment] = [(STYLE_KEYWORD, member.kind), ("", " "), (STYLE_NAME, member.name)]
    if member.kind == "method":
        assert member.input is not None and member.output is not None
        inline = head + _inline(member.input) + [("", " -> ")] + _inline(member.output)
        if _text_length(inline) <= width and not (_has_docs(member.input) or _has_docs(member.output)):
            return inline
        fragments = head + _block(
            member.input,
            indent=0,
            column=_text_length(head),
            width=width,
            force=bool(member.input.fields),
        )
        fragments.append(("", " -> "))
        fragments.extend(
            _block(
                member.output,
                indent=0,
                column=_last_line_length(fragments),
                width=width,
                force=bool(member.output.fields),
            )
        )
        return fragments
    assert member.type is not None
    head.append(("", " "))
    return head + _block(member.type, indent=0, column=_text_length(head), width=width)


def format_interface(interface: Interface, width: int = 70) -> List[Fragment]:
    """Render an interface as styled ``(style, text)`` fragments."""
    fragments: List[Fragment] = list(_comment_lines(interface.doc, 0))
    fragments.extend([(STYLE_KEYWORD, "interface"), ("", " "), (STYLE_NAME, interface.name)])
    for member in interface.members:
        fragments.append(("", "\n\n"))
        fragments.extend(_comment_lines(member.doc, 0))
        fragments.extend(_member_fragments(member, width))
    return fragments


def fragments_to_text(fragments: Sequence[Fragment]) -> str:
    return "".join(text for _, text in fragments)


__all__ = [
    "ArrayType",
    "DictType",
    "EnumType",
    "Field",
    "Interface",
    "InterfaceSyntaxError",
    "MaybeType",
    "Member",
    "NamedType",
    "StructType",
    "format_interface",
    "fragments_to_text",
    "parse_interface",
]
