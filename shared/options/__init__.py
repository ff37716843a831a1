"""
Game option type system: definitions, per-session values, registry,
wire packing, editing representations and minimum-version negotiation.
"""

from .editing import (
    INTFIELD_POPUP_MAXRANGE,
    CheckboxEditor,
    ChoiceEditor,
    TextEditor,
    choice_to_value,
    editor_for,
    int_field_width,
)
from .registry import DEFAULT_OPTIONS_FILE, OptionRegistry, get_registry
from .types import OptionDefinition, OptionType
from .values import OptionSet, OptionValue
from .version import Negotiation, check_participant_version, confirmation_required, minimum_version, negotiate
from .wire import pack_options, pack_value, parse_options

__all__ = [
    "INTFIELD_POPUP_MAXRANGE",
    "CheckboxEditor",
    "ChoiceEditor",
    "TextEditor",
    "choice_to_value",
    "editor_for",
    "int_field_width",
    "DEFAULT_OPTIONS_FILE",
    "OptionRegistry",
    "get_registry",
    "OptionDefinition",
    "OptionType",
    "OptionSet",
    "OptionValue",
    "Negotiation",
    "check_participant_version",
    "confirmation_required",
    "minimum_version",
    "negotiate",
    "pack_options",
    "pack_value",
    "parse_options",
]
