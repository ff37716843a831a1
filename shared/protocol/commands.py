from __future__ import annotations

from enum import IntEnum
from typing import Dict, Iterable, Union


class MsgType(IntEnum):
    """
    Wire type ids shared by client/server.
    The table is additive-only: new types get new ids, existing ids are never renumbered.
    """

    # Game play
    END_TURN = 109
    LEAVE_GAME = 1004
    JOIN_GAME = 1013
    RESET_BOARD_REQUEST = 1074
    SET_SEAT_LOCK = 1083

    # Status
    STATUS_MESSAGE = 1069

    # Game options
    NEW_GAME_WITH_OPTIONS_REQUEST = 1078
    NEW_GAME_WITH_OPTIONS = 1079
    GAME_OPTION_GET_DEFAULTS = 1080


COMMAND_GROUPS: Dict[int, str] = {
    MsgType.END_TURN.value: "game",
    MsgType.LEAVE_GAME.value: "game",
    MsgType.JOIN_GAME.value: "game",
    MsgType.RESET_BOARD_REQUEST.value: "game",
    MsgType.SET_SEAT_LOCK.value: "game",
    MsgType.STATUS_MESSAGE.value: "status",
    MsgType.NEW_GAME_WITH_OPTIONS_REQUEST.value: "options",
    MsgType.NEW_GAME_WITH_OPTIONS.value: "options",
    MsgType.GAME_OPTION_GET_DEFAULTS.value: "options",
}


def normalize_command(command: Union[int, MsgType]) -> int:
    """Convert enum/int into the plain wire type id."""
    return command.value if isinstance(command, MsgType) else int(command)


def is_command(value: int) -> bool:
    """Check if `value` is a type id known to this version."""
    try:
        MsgType(value)
        return True
    except ValueError:
        return False


def commands_in_group(group: str) -> Iterable[int]:
    """Yield type ids belonging to the specified logical domain."""
    for command, grp in COMMAND_GROUPS.items():
        if grp == group:
            yield command


__all__ = [
    "MsgType",
    "COMMAND_GROUPS",
    "normalize_command",
    "is_command",
    "commands_in_group",
]
