"""
Packing of option sets into the KEY=value,KEY=value text carried inside messages.

Value encodings: Bool "t"/"f"; Int and Enum decimal; IntBool and EnumBool
"t"/"f" followed by the decimal; Str and StrHide raw text. Keys the local
registry does not know are kept as Unknown values and written back verbatim.
"""

from __future__ import annotations

import re
from typing import Optional

from shared.protocol.constants import OPTION_ASSIGN, OPTION_SEP
from shared.protocol.errors import OptionValueOutOfRange, ParseFailure

from .registry import OptionRegistry, get_registry
from .types import OptionType
from .values import OptionSet, OptionValue

_INT_RE = re.compile(r"-?[0-9]{1,9}")


def pack_value(value: OptionValue) -> str:
    kind = value.type
    if kind == OptionType.UNKNOWN:
        return value.raw or ""
    if kind == OptionType.BOOL:
        return "t" if value.bool_value else "f"
    if kind in (OptionType.INT, OptionType.ENUM):
        return str(value.int_value)
    if kind in (OptionType.INTBOOL, OptionType.ENUMBOOL):
        return ("t" if value.bool_value else "f") + str(value.int_value)
    return value.str_value


def pack_options(options: OptionSet, changed_only: bool = False) -> str:
    """Pack `options` sorted by key. With changed_only, defaults are skipped; Unknowns always pass through."""
    records = []
    for key in sorted(options):
        value = options[key]
        if changed_only and not (value.is_unknown or value.is_changed):
            continue
        records.append(f"{key}{OPTION_ASSIGN}{pack_value(value)}")
    return OPTION_SEP.join(records)


def _parse_int(key: str, text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ParseFailure(f"Option {key} expects an integer, got {text!r}", field=key)
    return int(text)


def _parse_flag(key: str, text: str) -> bool:
    if text == "t":
        return True
    if text == "f":
        return False
    raise ParseFailure(f"Option {key} expects t or f, got {text!r}", field=key)


def parse_value(value: OptionValue, text: str) -> None:
    """Load packed `text` into `value`; raises instead of storing anything invalid."""
    kind = value.type
    key = value.key
    if kind == OptionType.BOOL:
        value.set_bool_value(_parse_flag(key, text))
        return
    if kind.is_string:
        value.set_string_value(text)
        return
    if kind in (OptionType.INTBOOL, OptionType.ENUMBOOL):
        flag = _parse_flag(key, text[:1])
        number = _parse_int(key, text[1:])
    else:
        flag = None
        number = _parse_int(key, text)
    definition = value.definition
    if not (definition.min_int <= number <= definition.max_int):
        raise OptionValueOutOfRange(key, number, definition.min_int, definition.max_int)
    value.set_int_value(number)
    if flag is not None:
        value.set_bool_value(flag)


def parse_options(text: str, registry: Optional[OptionRegistry] = None) -> OptionSet:
    """
    Parse a packed option string into a new OptionSet.

    Only the keys present in `text` appear in the result. Unrecognized keys become
    Unknown values holding their raw text. Malformed records raise ParseFailure and
    out-of-range numbers raise OptionValueOutOfRange; nothing partial is returned.
    """
    registry = registry if registry is not None else get_registry()
    options = OptionSet()
    if not text:
        return options
    for record in text.split(OPTION_SEP):
        key, assign, raw = record.partition(OPTION_ASSIGN)
        if not key or not assign:
            raise ParseFailure(f"Malformed option record {record!r}", field="options")
        if key in options:
            raise ParseFailure(f"Duplicate option key {key!r}", field=key)
        definition = registry.get(key)
        if definition is None:
            options.add(OptionValue.unknown(key, raw))
            continue
        value = OptionValue.from_definition(definition)
        parse_value(value, raw)
        options.add(value)
    return options


def merge_into(target: OptionSet, incoming: OptionSet) -> None:
    """Copy every value of `incoming` into `target`, replacing same-key entries."""
    for value in incoming.values():
        target.add(value.copy())


__all__ = ["pack_value", "pack_options", "parse_value", "parse_options", "merge_into"]
