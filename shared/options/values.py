from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from shared.protocol.constants import OPTION_SEP, SEP
from shared.protocol.errors import InvalidOptionText

from .types import OptionDefinition, OptionType

if TYPE_CHECKING:
    from .registry import OptionRegistry

logger = logging.getLogger(__name__)

_FORBIDDEN_TEXT = ("\n", "\r", SEP, OPTION_SEP)


class OptionValue:
    """
    Current value of one option within a session.

    "Changed from default" is always derived by comparing against the definition.
    Unknown values keep the raw wire text they arrived with and nothing else.
    """

    def __init__(
        self,
        definition: OptionDefinition,
        bool_value: Optional[bool] = None,
        int_value: Optional[int] = None,
        str_value: Optional[str] = None,
        raw: Optional[str] = None,
    ) -> None:
        self.definition = definition
        self.bool_value = definition.default_bool if bool_value is None else bool_value
        self.int_value = definition.default_int if int_value is None else int_value
        self.str_value = definition.default_str if str_value is None else str_value
        self.raw = raw

    @classmethod
    def from_definition(cls, definition: OptionDefinition) -> "OptionValue":
        return cls(definition)

    @classmethod
    def unknown(cls, key: str, raw: str) -> "OptionValue":
        return cls(OptionDefinition.unknown(key), raw=raw)

    @property
    def key(self) -> str:
        return self.definition.key

    @property
    def type(self) -> OptionType:
        return self.definition.type

    @property
    def is_unknown(self) -> bool:
        return self.definition.type == OptionType.UNKNOWN

    # --- Mutation ---------------------------------------------------------
    def set_bool_value(self, value: bool) -> None:
        self.bool_value = bool(value)

    def set_int_value(self, value: int) -> None:
        """Store `value` if within [min_int, max_int]; otherwise leave the current value unchanged."""
        if value < self.definition.min_int or value > self.definition.max_int:
            logger.debug("Ignoring out-of-range value %s for option %s", value, self.key)
            return
        self.int_value = value

    def set_enum_index(self, index: int) -> None:
        """Select the 0-based entry `index` of the enum list; stored value is index + 1."""
        self.set_int_value(index + 1)

    def set_string_value(self, value: Optional[str]) -> None:
        text = value or ""
        if any(ch in text for ch in _FORBIDDEN_TEXT):
            raise InvalidOptionText(self.key)
        max_length = self.definition.max_length
        if max_length and len(text) > max_length:
            text = text[:max_length]
        self.str_value = text

    # --- Derived state ----------------------------------------------------
    @property
    def enum_index(self) -> int:
        return self.int_value - 1

    @property
    def enum_label(self) -> Optional[str]:
        if not self.type.is_enum or not (1 <= self.int_value <= len(self.definition.enum_values)):
            return None
        return self.definition.enum_values[self.int_value - 1]

    @property
    def is_changed(self) -> bool:
        definition = self.definition
        kind = definition.type
        if kind == OptionType.UNKNOWN:
            return False
        if kind.has_bool and self.bool_value != definition.default_bool:
            return True
        if kind.has_int and self.int_value != definition.default_int:
            return True
        if kind.is_string and self.str_value != definition.default_str:
            return True
        return False

    def copy(self) -> "OptionValue":
        return OptionValue(self.definition, self.bool_value, self.int_value, self.str_value, self.raw)

    def __repr__(self) -> str:
        kind = self.definition.type
        if kind == OptionType.UNKNOWN:
            shown = f"raw={self.raw!r}"
        elif kind == OptionType.BOOL:
            shown = f"bool={self.bool_value}"
        elif kind in (OptionType.INT, OptionType.ENUM):
            shown = f"int={self.int_value}"
        elif kind.is_string:
            shown = "str=***" if kind == OptionType.STRHIDE else f"str={self.str_value!r}"
        else:
            shown = f"bool={self.bool_value}, int={self.int_value}"
        return f"OptionValue({self.key}, {kind.value}, {shown})"


class OptionSet:
    """Per-session mapping of option key to OptionValue. Never shared between sessions."""

    def __init__(self, values: Optional[List[OptionValue]] = None) -> None:
        self._values: Dict[str, OptionValue] = {}
        for value in values or ():
            self.add(value)

    def add(self, value: OptionValue) -> None:
        self._values[value.key] = value

    def remove(self, key: str) -> Optional[OptionValue]:
        return self._values.pop(key, None)

    def get(self, key: str) -> Optional[OptionValue]:
        return self._values.get(key)

    def __getitem__(self, key: str) -> OptionValue:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def keys(self) -> List[str]:
        return list(self._values)

    def values(self) -> List[OptionValue]:
        return list(self._values.values())

    def known_values(self) -> List[OptionValue]:
        return [value for value in self._values.values() if not value.is_unknown]

    def changed_values(self) -> List[OptionValue]:
        return [value for value in self._values.values() if value.is_changed]

    def remove_unknown(self, registry: Optional["OptionRegistry"] = None) -> List[str]:
        """
        Drop every value whose key the local software does not recognize.
        Returns the removed keys; running it again removes nothing.
        """
        removed = [
            key
            for key, value in self._values.items()
            if value.is_unknown or (registry is not None and key not in registry)
        ]
        for key in removed:
            del self._values[key]
        if removed:
            logger.info("Dropped unknown options: %s", ", ".join(sorted(removed)))
        return removed

    def display_order(self) -> List[OptionValue]:
        """Values sorted by description, then key, for deterministic display."""
        return sorted(self._values.values(), key=lambda value: value.definition.sort_key())

    def copy(self) -> "OptionSet":
        return OptionSet([value.copy() for value in self._values.values()])

    def __repr__(self) -> str:
        return f"OptionSet({sorted(self._values)})"


__all__ = ["OptionValue", "OptionSet"]
