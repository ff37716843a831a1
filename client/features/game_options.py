from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Collection, Dict, FrozenSet, List, Mapping, Optional

from shared.options import (
    OptionRegistry,
    OptionSet,
    OptionType,
    OptionValue,
    choice_to_value,
    confirmation_required,
    editor_for,
    get_registry,
    negotiate,
    pack_options,
    parse_options,
)
from shared.options.editing import Editor
from shared.options.version import Negotiation
from shared.options.wire import merge_into
from shared.protocol import (
    OPTION_SEP,
    ErrorCode,
    NewGameWithOptionsRequestMsg,
    OptionValueOutOfRange,
    ParseFailure,
    ProtocolError,
    StatusCode,
    VersionTooOld,
    is_single_line_and_safe,
)
from shared.settings import SETTINGS, Settings

logger = logging.getLogger(__name__)

TXT_SERVER_TOO_OLD = "This server version does not support game options."
TXT_READ_ONLY = "These game options can't be changed."
TXT_DIGITS_ONLY = "Please use only digits here."
TXT_NO_GAME_NAME = "Please enter a game name."
TXT_GAME_NAME_REJECTED = "This game name is not permitted, please choose a different name."
TXT_GAME_EXISTS = "A game with this name already exists, please choose a different name."
TXT_UNSUPPORTED_EDIT = "This kind of value can't be used for this option."

_INT_TEXT_RE = re.compile(r"-?[0-9]{1,9}")

# Edit components each option type can take
_EDIT_FIELDS: Dict[OptionType, FrozenSet[str]] = {
    OptionType.BOOL: frozenset({"checked"}),
    OptionType.INT: frozenset({"text", "choice"}),
    OptionType.INTBOOL: frozenset({"text", "choice", "checked"}),
    OptionType.ENUM: frozenset({"choice"}),
    OptionType.ENUMBOOL: frozenset({"choice", "checked"}),
    OptionType.STR: frozenset({"text"}),
    OptionType.STRHIDE: frozenset({"text"}),
}


class ErrorPolicy(StrEnum):
    """Which validation error is surfaced when several fields fail at once."""

    LAST = "last"
    FIRST = "first"
    ALL = "all"


class CreateStatus(StrEnum):
    CREATED = "created"
    NEEDS_CONFIRMATION = "needs_confirmation"
    REJECTED = "rejected"


@dataclass(frozen=True)
class OptionEdit:
    """Raw edit for one option as supplied by a UI surface. `choice` is a 0-based index."""

    text: Optional[str] = None
    checked: Optional[bool] = None
    choice: Optional[int] = None


@dataclass(frozen=True)
class OptionError:
    key: str
    error: ProtocolError

    @property
    def message(self) -> str:
        return self.error.message


@dataclass
class ValidationReport:
    ok: bool
    message: str = ""
    key: Optional[str] = None
    errors: List[OptionError] = field(default_factory=list)


@dataclass(frozen=True)
class CreateOutcome:
    status: CreateStatus
    message: str = ""
    key: Optional[str] = None
    request: Optional[NewGameWithOptionsRequestMsg] = None
    negotiation: Optional[Negotiation] = None

    @property
    def ok(self) -> bool:
        return self.status == CreateStatus.CREATED


class GameOptionsExchange:
    """
    Reads per-key edits from a UI surface into a session's OptionSet and
    prepares the new-game request once every field validates.

    Only one actor edits the set at a time: local edits before submission,
    then remote updates through apply_remote().
    """

    def __init__(
        self,
        options: Optional[OptionSet],
        *,
        for_practice: bool = False,
        read_only: bool = False,
        registry: Optional[OptionRegistry] = None,
        settings: Optional[Settings] = None,
        policy: Optional[ErrorPolicy] = None,
    ) -> None:
        self.settings = settings or SETTINGS
        self.registry = registry if registry is not None else get_registry()
        self.for_practice = for_practice
        self.read_only = read_only
        self.policy = policy or ErrorPolicy(self.settings.error_policy)
        self.options = options
        if options is not None:
            options.remove_unknown(self.registry)
        self._editors: Dict[str, Editor] = {}
        self._refresh_editors()

    @property
    def options_supported(self) -> bool:
        return self.options is not None

    @property
    def status_text(self) -> str:
        if not self.options_supported:
            return TXT_SERVER_TOO_OLD
        return "" if self.read_only else "Choose options for the new game."

    @property
    def editors(self) -> Dict[str, Editor]:
        return dict(self._editors)

    def display_order(self) -> List[OptionValue]:
        return self.options.display_order() if self.options is not None else []

    def _refresh_editors(self) -> None:
        self._editors = {}
        for value in self.display_order():
            self._editors[value.key] = editor_for(value)

    # --- Validation -------------------------------------------------------
    def read_edits(self, edits: Mapping[str, OptionEdit]) -> ValidationReport:
        """Apply every edit; each field is validated even after an earlier one failed."""
        if self.read_only or self.options is None:
            message = TXT_READ_ONLY if self.read_only else TXT_SERVER_TOO_OLD
            return ValidationReport(ok=False, message=message)

        errors: List[OptionError] = []
        for key, edit in edits.items():
            value = self.options.get(key)
            if value is None:
                error = ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.UNKNOWN_OPTION, f"Unknown option {key}")
            else:
                error = self._apply_edit(value, edit)
            if error is not None:
                logger.warning("Rejected edit for option %s: %s", key, error.message)
                errors.append(OptionError(key=key, error=error))

        self._refresh_editors()
        if not errors:
            return ValidationReport(ok=True)
        return self._report(errors)

    def _report(self, errors: List[OptionError]) -> ValidationReport:
        if self.policy == ErrorPolicy.FIRST:
            chosen = errors[0]
            return ValidationReport(ok=False, message=chosen.message, key=chosen.key, errors=errors)
        if self.policy == ErrorPolicy.ALL:
            message = "\n".join(f"{err.key}: {err.message}" for err in errors)
            return ValidationReport(ok=False, message=message, key=errors[0].key, errors=errors)
        chosen = errors[-1]
        return ValidationReport(ok=False, message=chosen.message, key=chosen.key, errors=errors)

    def _apply_edit(self, value: OptionValue, edit: OptionEdit) -> Optional[ProtocolError]:
        kind = value.type
        try:
            self._check_edit_fields(value, edit)
            if kind == OptionType.BOOL:
                value.set_bool_value(edit.checked)
            elif kind in (OptionType.INT, OptionType.INTBOOL):
                self._apply_int_edit(value, edit)
            elif kind.is_enum:
                self._apply_enum_edit(value, edit)
            elif kind.is_string:
                value.set_string_value(edit.text.strip())
        except ProtocolError as exc:
            return exc
        return None

    def _check_edit_fields(self, value: OptionValue, edit: OptionEdit) -> None:
        supplied = {name for name in ("text", "checked", "choice") if getattr(edit, name) is not None}
        allowed = _EDIT_FIELDS.get(value.type, frozenset())
        if not supplied or not supplied <= allowed:
            raise ParseFailure(TXT_UNSUPPORTED_EDIT, field=value.key)

    def _apply_int_edit(self, value: OptionValue, edit: OptionEdit) -> None:
        has_checkbox = value.type == OptionType.INTBOOL
        definition = value.definition
        if edit.choice is not None:
            number = choice_to_value(value, edit.choice)
            value.set_int_value(number)
            if value.int_value != number:
                raise OptionValueOutOfRange(value.key, number, definition.min_int, definition.max_int)
            implied = True
        elif edit.text is not None:
            text = edit.text.strip()
            implied = bool(text)
            # An empty, unticked IntBool field means "off"; the number is left alone
            if has_checkbox and not text and not edit.checked:
                implied = False
            else:
                if not _INT_TEXT_RE.fullmatch(text):
                    raise ParseFailure(TXT_DIGITS_ONLY, field=value.key)
                number = int(text)
                value.set_int_value(number)
                if value.int_value != number:
                    raise OptionValueOutOfRange(value.key, number, definition.min_int, definition.max_int)
        else:
            implied = None
        if has_checkbox:
            checked = edit.checked if edit.checked is not None else implied
            if checked is not None:
                value.set_bool_value(checked)

    def _apply_enum_edit(self, value: OptionValue, edit: OptionEdit) -> None:
        if edit.choice is not None:
            count = len(value.definition.enum_values)
            if not (0 <= edit.choice < count):
                raise OptionValueOutOfRange(value.key, edit.choice + 1, 1, count)
            value.set_enum_index(edit.choice)
        if value.type == OptionType.ENUMBOOL:
            checked = edit.checked if edit.checked is not None else (True if edit.choice is not None else None)
            if checked is not None:
                value.set_bool_value(checked)

    # --- Game creation ----------------------------------------------------
    def check_game_name(self, game_name: str, existing_games: Collection[str] = ()) -> Optional[str]:
        """Return an error message for an unusable game name, or None."""
        name = game_name.strip()
        if not name:
            return TXT_NO_GAME_NAME
        if not is_single_line_and_safe(name) or OPTION_SEP in name:
            return TXT_GAME_NAME_REJECTED
        if name in existing_games:
            return TXT_GAME_EXISTS
        return None

    def create_game(
        self,
        game_name: str,
        *,
        nickname: str,
        password: str = "",
        host: str = "",
        edits: Optional[Mapping[str, OptionEdit]] = None,
        confirmed: bool = False,
        existing_games: Collection[str] = (),
    ) -> CreateOutcome:
        """
        Validate the name and any pending edits, negotiate the minimum version,
        and build the new-game request. A NEEDS_CONFIRMATION outcome must be
        re-submitted with confirmed=True to proceed.
        """
        if self.read_only:
            return CreateOutcome(CreateStatus.REJECTED, message=TXT_READ_ONLY)
        name_error = self.check_game_name(game_name, existing_games)
        if name_error:
            return CreateOutcome(CreateStatus.REJECTED, message=name_error)

        if edits and self.options is not None:
            report = self.read_edits(edits)
            if not report.ok:
                return CreateOutcome(CreateStatus.REJECTED, message=report.message, key=report.key)

        options = self.options if self.options is not None else OptionSet()
        negotiation = negotiate(
            options,
            self.settings.baseline_version,
            require_confirmation=confirmation_required(not self.for_practice, self.settings),
            confirmed=confirmed,
        )
        if negotiation.needs_confirmation:
            try:
                negotiation.raise_for_confirmation()
            except VersionTooOld as exc:
                return CreateOutcome(CreateStatus.NEEDS_CONFIRMATION, message=exc.message, negotiation=negotiation)

        request = NewGameWithOptionsRequestMsg(
            nickname=nickname,
            password=password,
            host=host,
            game=game_name.strip(),
            options=pack_options(options),
        )
        return CreateOutcome(CreateStatus.CREATED, request=request, negotiation=negotiation)

    # --- Remote updates ---------------------------------------------------
    def apply_remote(self, packed: str) -> List[str]:
        """
        Merge an option string received from the server. Unknown keys are dropped.
        On a parse error nothing is changed and the error is raised.
        """
        if self.options is None:
            self.options = OptionSet()
        incoming = parse_options(packed, self.registry)
        dropped = incoming.remove_unknown(self.registry)
        merge_into(self.options, incoming)
        self._refresh_editors()
        return dropped


__all__ = [
    "CreateOutcome",
    "CreateStatus",
    "ErrorPolicy",
    "GameOptionsExchange",
    "OptionEdit",
    "OptionError",
    "ValidationReport",
    "TXT_SERVER_TOO_OLD",
]
