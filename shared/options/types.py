from __future__ import annotations

from enum import StrEnum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shared.protocol.constants import NO_VERSION

PLACEHOLDER = "#"


class OptionType(StrEnum):
    """Declared type of a game option. UNKNOWN marks a key this version does not recognize."""

    UNKNOWN = "unknown"
    BOOL = "bool"
    INT = "int"
    INTBOOL = "intbool"
    ENUM = "enum"
    ENUMBOOL = "enumbool"
    STR = "str"
    STRHIDE = "strhide"

    @property
    def has_bool(self) -> bool:
        return self in (OptionType.BOOL, OptionType.INTBOOL, OptionType.ENUMBOOL)

    @property
    def has_int(self) -> bool:
        return self in (OptionType.INT, OptionType.INTBOOL, OptionType.ENUM, OptionType.ENUMBOOL)

    @property
    def is_enum(self) -> bool:
        return self in (OptionType.ENUM, OptionType.ENUMBOOL)

    @property
    def is_string(self) -> bool:
        return self in (OptionType.STR, OptionType.STRHIDE)


class OptionDefinition(BaseModel):
    """Static description of one known game option, loaded once into the registry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str = Field(..., min_length=1, description="Short case-sensitive identifier")
    type: OptionType
    description: str = ""
    min_version: int = Field(NO_VERSION, description="Minimum client version if changed from default")
    default_bool: bool = False
    default_int: int = 0
    min_int: int = 0
    max_int: int = 0
    enum_values: Tuple[str, ...] = ()
    max_length: int = 0
    default_str: str = ""

    @model_validator(mode="before")
    @classmethod
    def _enum_bounds(cls, data: Any) -> Any:
        # Enum values are 1-based indexes into enum_values
        if isinstance(data, dict) and OptionType(data.get("type", OptionType.UNKNOWN)).is_enum:
            data = dict(data)
            data["min_int"] = 1
            data["max_int"] = len(data.get("enum_values") or ())
        return data

    @model_validator(mode="after")
    def _check_consistency(self) -> "OptionDefinition":
        if self.type.has_int:
            if self.min_int > self.max_int:
                raise ValueError(f"{self.key}: min_int {self.min_int} > max_int {self.max_int}")
            if not (self.min_int <= self.default_int <= self.max_int):
                raise ValueError(f"{self.key}: default {self.default_int} outside [{self.min_int}, {self.max_int}]")
        if self.type.is_string:
            if self.max_length <= 0:
                raise ValueError(f"{self.key}: string options need a positive max_length")
            if len(self.default_str) > self.max_length:
                raise ValueError(f"{self.key}: default_str longer than max_length")
        return self

    @classmethod
    def unknown(cls, key: str) -> "OptionDefinition":
        return cls(key=key, type=OptionType.UNKNOWN, description=key)

    @property
    def placeholder_index(self) -> int:
        """Offset of the value placeholder in the description, or -1. Only Int*/Enum* options have one."""
        if not self.type.has_int:
            return -1
        return self.description.find(PLACEHOLDER)

    def split_description(self) -> Tuple[str, str]:
        """Text before and after the placeholder; the character just before it (a space) is dropped."""
        idx = self.placeholder_index
        if idx == -1:
            return "", self.description
        before = self.description[: idx - 1] if idx > 0 else ""
        return before, self.description[idx + 1 :]

    def sort_key(self) -> Tuple[str, str]:
        return self.description, self.key

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


__all__ = ["PLACEHOLDER", "OptionType", "OptionDefinition"]
