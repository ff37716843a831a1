from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

import jsonschema
from pydantic import ValidationError

from shared.settings import SETTINGS, ConfigError

from .types import OptionDefinition
from .values import OptionSet, OptionValue

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
SCHEMA_DIR = Path(__file__).parent / "schemas"
DEFAULT_OPTIONS_FILE = DATA_DIR / "options.json"


class OptionRegistry:
    """Static table of option definitions known to this software version."""

    def __init__(self, definitions: Iterable[OptionDefinition]) -> None:
        self._definitions: Dict[str, OptionDefinition] = {}
        for definition in definitions:
            if definition.key in self._definitions:
                raise ConfigError(f"Duplicate option key {definition.key!r}")
            self._definitions[definition.key] = definition

    def get(self, key: str) -> Optional[OptionDefinition]:
        return self._definitions.get(key)

    def __getitem__(self, key: str) -> OptionDefinition:
        return self._definitions[key]

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def __iter__(self) -> Iterator[OptionDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    def keys(self) -> List[str]:
        return list(self._definitions)

    def new_option_set(self) -> OptionSet:
        """Fresh per-session values cloned from the registry defaults."""
        return OptionSet([OptionValue.from_definition(definition) for definition in self._definitions.values()])

    @classmethod
    def from_dict(cls, data: dict) -> "OptionRegistry":
        try:
            jsonschema.validate(instance=data, schema=load_schema())
        except jsonschema.ValidationError as exc:
            raise ConfigError(f"Option registry schema validation failed: {exc.message}") from exc
        try:
            definitions = [OptionDefinition.model_validate(item) for item in data["options"]]
        except ValidationError as exc:
            raise ConfigError(f"Invalid option definition: {exc}") from exc
        return cls(definitions)

    @classmethod
    def from_file(cls, path: Path) -> "OptionRegistry":
        with Path(path).open("r", encoding="utf-8") as fp:
            try:
                data = json.load(fp)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"Option registry {path} is not valid JSON: {exc}") from exc
        registry = cls.from_dict(data)
        logger.debug("Loaded %d option definitions from %s", len(registry), path)
        return registry


@lru_cache(maxsize=1)
def load_schema() -> dict:
    """Load the JSON schema for option registry files."""
    with (SCHEMA_DIR / "option_registry.json").open("r", encoding="utf-8") as fp:
        return json.load(fp)


_REGISTRY: Optional[OptionRegistry] = None


def get_registry() -> OptionRegistry:
    """Process-wide registry, loaded on first use from the configured options file."""
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = OptionRegistry.from_file(SETTINGS.options_file or DEFAULT_OPTIONS_FILE)
    return _REGISTRY


__all__ = ["DEFAULT_OPTIONS_FILE", "OptionRegistry", "get_registry", "load_schema"]
