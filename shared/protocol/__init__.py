"""
Shared protocol package that centralizes message type ids, message models,
line codec helpers and error types for both client and server.
"""

from .commands import MsgType, commands_in_group, is_command, normalize_command
from .constants import ENCODING, FRAME_DELIMITER, NO_VERSION, OPTION_SEP, SEP, VERSION
from .errors import (
    ErrorCode,
    InvalidOptionText,
    OptionValueOutOfRange,
    ParseFailure,
    ProtocolError,
    StatusCode,
    UnknownMessageType,
    VersionTooOld,
)
from .framing import decode_frame, decode_msg, encode_frame, encode_msg, is_single_line_and_safe, parse_line
from .messages import (
    MESSAGE_TYPES,
    BaseMsg,
    EndTurnMsg,
    GameOptionGetDefaultsMsg,
    JoinGameMsg,
    LeaveGameMsg,
    MessageType,
    NewGameWithOptionsMsg,
    NewGameWithOptionsRequestMsg,
    ResetBoardRequestMsg,
    SetSeatLockMsg,
    StatusMessageMsg,
    UnknownMsg,
)

__all__ = [
    "MsgType",
    "commands_in_group",
    "is_command",
    "normalize_command",
    "ENCODING",
    "FRAME_DELIMITER",
    "NO_VERSION",
    "OPTION_SEP",
    "SEP",
    "VERSION",
    "ErrorCode",
    "InvalidOptionText",
    "OptionValueOutOfRange",
    "ParseFailure",
    "ProtocolError",
    "StatusCode",
    "UnknownMessageType",
    "VersionTooOld",
    "decode_frame",
    "decode_msg",
    "encode_frame",
    "encode_msg",
    "is_single_line_and_safe",
    "parse_line",
    "MESSAGE_TYPES",
    "BaseMsg",
    "EndTurnMsg",
    "GameOptionGetDefaultsMsg",
    "JoinGameMsg",
    "LeaveGameMsg",
    "MessageType",
    "NewGameWithOptionsMsg",
    "NewGameWithOptionsRequestMsg",
    "ResetBoardRequestMsg",
    "SetSeatLockMsg",
    "StatusMessageMsg",
    "UnknownMsg",
]
