"""Per-command option schemas.

Each command declares ``{name: OptionSpec}``; the schema is validated once
when the command is built and ``parse_options`` turns argv into an
``OptionResult`` following GNU getopt conventions: options may be mixed with
positionals, ``--`` ends option processing and a lone ``-`` is positional.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from .errors import CliError, CliFailure


@dataclass(frozen=True)
class OptionSpec:
    short: Optional[str]
    long: str
    effect: str
    takes_value: bool = False
    stops: bool = False
    help: str = ""

    def flags(self) -> List[str]:
        names = [f"--{self.long}"]
        if self.short:
            names.insert(0, f"-{self.short}")
        return names

    def format_help(self) -> str:
        names = ", ".join(self.flags())
        if self.takes_value:
            names += " " + self.long.upper()
        return f"  {names:<22} {self.help}"


OptionSchema = Mapping[str, OptionSpec]


@dataclass
class OptionResult:
    values: Dict[str, object] = field(default_factory=dict)
    positionals: List[str] = field(default_factory=list)
    stopped_by: Optional[str] = None

    def flag(self, effect: str) -> bool:
        return bool(self.values.get(effect))


def validate_schema(schema: OptionSchema) -> None:
    seen: set[str] = set()
    for name, spec in schema.items():
        if not spec.long or spec.long.startswith("-"):
            raise ValueError(f"option {name!r} has an invalid long name")
        if spec.short is not None and (len(spec.short) != 1 or not spec.short.isalnum()):
            raise ValueError(f"option {name!r} has an invalid short name")
        for flag in spec.flags():
            if flag in seen:
                raise ValueError(f"duplicate option flag {flag}")
            seen.add(flag)


def _lookup(schema: OptionSchema, *, short: Optional[str] = None, long: Optional[str] = None) -> Optional[OptionSpec]:
    for spec in schema.values():
        if short is not None and spec.short == short:
            return spec
        if long is not None and spec.long == long:
            return spec
    return None


def parse_options(schema: OptionSchema, argv: Sequence[str]) -> OptionResult:
    """Split ``argv`` into option effects and positionals.

    Raises ``CliFailure`` with INVALID_ARGUMENT for unknown options and
    MISSING_ARGUMENT for an option whose value is missing. An option marked
    ``stops`` returns immediately without looking at later tokens.
    """
    result = OptionResult()
    idx = 0
    while idx < len(argv):
        token = argv[idx]
        idx += 1
        if token == "--":
            result.positionals.extend(argv[idx:])
            break
        if token == "-" or not token.startswith("-"):
            result.positionals.append(token)
            continue
        if token.startswith("--"):
            name, has_value, inline_value = token[2:].partition("=")
            spec = _lookup(schema, long=name)
            if spec is None:
                raise CliFailure(CliError.INVALID_ARGUMENT, f"unrecognized option '{token}'")
            if spec.takes_value:
                if has_value:
                    value: object = inline_value
                elif idx < len(argv):
                    value = argv[idx]
                    idx += 1
                else:
                    raise CliFailure(CliError.MISSING_ARGUMENT, f"option '--{name}' requires an argument")
            elif has_value:
                raise CliFailure(CliError.INVALID_ARGUMENT, f"option '--{name}' doesn't allow an argument")
            else:
                value = True
            result.values[spec.effect] = value
            if spec.stops:
                result.stopped_by = spec.effect
                return result
            continue
        cluster = token[1:]
        for pos, letter in enumerate(cluster):
            spec = _lookup(schema, short=letter)
            if spec is None:
                raise CliFailure(CliError.INVALID_ARGUMENT, f"invalid option -- '{letter}'")
            if spec.takes_value:
                rest = cluster[pos + 1 :]
                if rest:
                    value = rest
                elif idx < len(argv):
                    value = argv[idx]
                    idx += 1
                else:
                    raise CliFailure(CliError.MISSING_ARGUMENT, f"option requires an argument -- '{letter}'")
                result.values[spec.effect] = value
                if spec.stops:
                    result.stopped_by = spec.effect
                    return result
                break
            result.values[spec.effect] = True
            if spec.stops:
                result.stopped_by = spec.effect
                return result
    return result


def complete_options(schema: OptionSchema, current: str) -> List[str]:
    """Flags from ``schema`` that start with ``current``."""
    names: List[str] = []
    for spec in schema.values():
        names.extend(flag for flag in spec.flags() if flag.startswith(current))
    return sorted(names)


__all__ = [
    "OptionResult",
    "OptionSchema",
    "OptionSpec",
    "complete_options",
    "parse_options",
    "validate_schema",
]
