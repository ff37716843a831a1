"""
Editable representations of option values, independent of any UI toolkit.

Input widgets and validators on both ends size themselves from these
functions, so the width rules must stay exactly as written.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

from .types import OptionType
from .values import OptionValue

# Int ranges up to this size are offered as a choice of every value
INTFIELD_POPUP_MAXRANGE = 21
MIN_INT_FIELD_WIDTH = 3
MAX_STR_FIELD_WIDTH = 20


@dataclass(frozen=True)
class CheckboxEditor:
    checked: bool


@dataclass(frozen=True)
class ChoiceEditor:
    """Indexed choice; `values[i]` is what selecting entry i stores."""

    labels: Tuple[str, ...]
    values: Tuple[int, ...]
    selected_index: int
    has_checkbox: bool = False
    checked: bool = False


@dataclass(frozen=True)
class TextEditor:
    width: int
    text: str
    digits_only: bool = False
    masked: bool = False
    has_checkbox: bool = False
    checked: bool = False


Editor = Union[CheckboxEditor, ChoiceEditor, TextEditor]


def int_field_width(min_int: int, max_int: int) -> int:
    """Characters needed for a free-text integer field: 1 + ceil(log10(magnitude)), at least 3."""
    magnitude = max(abs(min_int), abs(max_int))
    if magnitude == 0:
        return MIN_INT_FIELD_WIDTH
    return max(MIN_INT_FIELD_WIDTH, 1 + math.ceil(math.log10(magnitude)))


def uses_int_choice(min_int: int, max_int: int) -> bool:
    return 0 <= max_int - min_int <= INTFIELD_POPUP_MAXRANGE


def editor_for(value: OptionValue) -> Editor:
    definition = value.definition
    kind = definition.type
    has_checkbox = kind in (OptionType.INTBOOL, OptionType.ENUMBOOL)

    if kind == OptionType.BOOL:
        return CheckboxEditor(checked=value.bool_value)

    if kind in (OptionType.INT, OptionType.INTBOOL):
        if uses_int_choice(definition.min_int, definition.max_int):
            values = tuple(range(definition.min_int, definition.max_int + 1))
            return ChoiceEditor(
                labels=tuple(str(v) for v in values),
                values=values,
                selected_index=max(0, value.int_value - definition.min_int),
                has_checkbox=has_checkbox,
                checked=value.bool_value,
            )
        return TextEditor(
            width=int_field_width(definition.min_int, definition.max_int),
            text=str(value.int_value),
            digits_only=True,
            has_checkbox=has_checkbox,
            checked=value.bool_value,
        )

    if kind.is_enum:
        labels = definition.enum_values
        return ChoiceEditor(
            labels=labels,
            values=tuple(range(1, len(labels) + 1)),
            selected_index=max(0, value.int_value - 1),
            has_checkbox=has_checkbox,
            checked=value.bool_value,
        )

    if kind.is_string:
        hidden = kind == OptionType.STRHIDE
        return TextEditor(
            width=min(definition.max_length, MAX_STR_FIELD_WIDTH),
            text="" if hidden else value.str_value,
            masked=hidden,
        )

    raise ValueError(f"Option {definition.key} of type {kind.value} has no editor")


def choice_to_value(value: OptionValue, index: int) -> int:
    """Stored integer for choice entry `index` (Int*: offset from min; Enum*: 1-based)."""
    return index + value.definition.min_int


__all__ = [
    "INTFIELD_POPUP_MAXRANGE",
    "CheckboxEditor",
    "ChoiceEditor",
    "TextEditor",
    "Editor",
    "int_field_width",
    "uses_int_choice",
    "editor_for",
    "choice_to_value",
]
