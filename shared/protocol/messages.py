from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .commands import MsgType, normalize_command
from .constants import NO_VERSION, SEP
from .errors import ParseFailure

FIELD_TYPES = (str, int, bool)


class BaseMsg(BaseModel):
    """
    Base for every wire message. Subclasses declare their fields in wire order,
    each typed with one of the primitive field types (str, int, bool).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type_id: ClassVar[int] = 0

    @property
    def msg_type(self) -> Optional[MsgType]:
        try:
            return MsgType(self.type_id)
        except ValueError:
            return None

    def field_values(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, name) for name in type(self).model_fields)

    @classmethod
    def from_fields(cls, **values: Any) -> "BaseMsg":
        try:
            return cls(**values)
        except ValidationError as exc:
            errors = exc.errors()
            field = str(errors[0]["loc"][0]) if errors and errors[0].get("loc") else None
            raise ParseFailure(f"Message validation failed: {exc}", field=field) from exc


@dataclass(frozen=True)
class MessageType:
    """Immutable registry entry describing one wire message type."""

    type_id: int
    name: str
    model: Type[BaseMsg]

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(self.model.model_fields)

    @property
    def field_types(self) -> Tuple[type, ...]:
        return tuple(info.annotation for info in self.model.model_fields.values())

    @property
    def arity(self) -> int:
        return len(self.model.model_fields)


MESSAGE_TYPES: Dict[int, MessageType] = {}


def register(command: MsgType) -> Callable[[Type[BaseMsg]], Type[BaseMsg]]:
    """Class decorator binding a message model to its wire type id."""

    def decorator(model: Type[BaseMsg]) -> Type[BaseMsg]:
        type_id = normalize_command(command)
        if type_id in MESSAGE_TYPES:
            raise ValueError(f"Duplicate message type id {type_id}")
        for name, info in model.model_fields.items():
            if info.annotation not in FIELD_TYPES:
                raise TypeError(f"{model.__name__}.{name} must be one of str/int/bool")
        model.type_id = type_id
        MESSAGE_TYPES[type_id] = MessageType(type_id=type_id, name=command.name, model=model)
        return model

    return decorator


def message_type(type_id: int) -> Optional[MessageType]:
    return MESSAGE_TYPES.get(type_id)


@register(MsgType.END_TURN)
class EndTurnMsg(BaseMsg):
    """A player wants to end the turn."""

    game: str = Field(..., description="Name of game")


@register(MsgType.LEAVE_GAME)
class LeaveGameMsg(BaseMsg):
    nickname: str
    host: str
    game: str


@register(MsgType.JOIN_GAME)
class JoinGameMsg(BaseMsg):
    nickname: str
    password: str
    host: str
    game: str


@register(MsgType.STATUS_MESSAGE)
class StatusMessageMsg(BaseMsg):
    """Status reply; `status` uses StatusCode values."""

    status: int
    text: str


@register(MsgType.RESET_BOARD_REQUEST)
class ResetBoardRequestMsg(BaseMsg):
    game: str


@register(MsgType.NEW_GAME_WITH_OPTIONS_REQUEST)
class NewGameWithOptionsRequestMsg(BaseMsg):
    """Client asks the server to create a game with these packed options."""

    nickname: str
    password: str
    host: str
    game: str
    options: str = Field(..., description="Packed KEY=value option records")


@register(MsgType.NEW_GAME_WITH_OPTIONS)
class NewGameWithOptionsMsg(BaseMsg):
    """Server announces a new game, its options and the minimum client version (-1 for none)."""

    game: str
    options: str
    min_version: int = NO_VERSION

    @property
    def minimum_version(self) -> Optional[int]:
        return None if self.min_version == NO_VERSION else self.min_version


@register(MsgType.GAME_OPTION_GET_DEFAULTS)
class GameOptionGetDefaultsMsg(BaseMsg):
    """Request (empty options) or reply (packed defaults) for the server's option defaults."""

    options: str = ""


@register(MsgType.SET_SEAT_LOCK)
class SetSeatLockMsg(BaseMsg):
    game: str
    player_number: int
    locked: bool


class UnknownMsg(BaseMsg):
    """
    A line whose type id this version does not know. The raw text after the type id
    is kept verbatim so the line can be re-encoded unchanged.
    """

    unknown_type_id: int
    data: Optional[str] = None

    @property
    def msg_type(self) -> Optional[MsgType]:
        return None

    def to_line(self) -> str:
        if self.data is None:
            return str(self.unknown_type_id)
        return f"{self.unknown_type_id}{SEP}{self.data}"


__all__ = [
    "BaseMsg",
    "MessageType",
    "MESSAGE_TYPES",
    "register",
    "message_type",
    "EndTurnMsg",
    "LeaveGameMsg",
    "JoinGameMsg",
    "StatusMessageMsg",
    "ResetBoardRequestMsg",
    "NewGameWithOptionsRequestMsg",
    "NewGameWithOptionsMsg",
    "GameOptionGetDefaultsMsg",
    "SetSeatLockMsg",
    "UnknownMsg",
]
