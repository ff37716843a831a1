from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional


class StatusCode(IntEnum):
    """HTTP-like status codes used across responses."""

    SUCCESS = 200
    ACCEPTED = 202
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UPGRADE_REQUIRED = 426
    INTERNAL_ERROR = 500


class ErrorCode(IntEnum):
    """Domain specific error codes."""

    PARSE_FAILURE = 1001
    UNKNOWN_MESSAGE_TYPE = 1002
    INVALID_FIELD_TEXT = 1003
    OPTION_OUT_OF_RANGE = 1004
    INVALID_OPTION_TEXT = 1005
    UNKNOWN_OPTION = 1006
    VERSION_TOO_OLD = 1007
    GAME_EXISTS = 1008
    INVALID_GAME_NAME = 1009


class ProtocolError(Exception):
    """Structured protocol exception carrying status + code + message."""

    def __init__(self, status: StatusCode, code: Optional[ErrorCode] = None, message: str = "") -> None:
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status.name} ({int(status)}): {message} (code={code.name if code else 'n/a'})")

    def to_payload(self) -> dict:
        """Map error into payload fragment consumable by clients."""
        return {
            "status": int(self.status),
            "error_code": int(self.code) if self.code is not None else None,
            "error_message": self.message,
        }


class ParseFailure(ProtocolError):
    """A wire line could not be decoded: wrong arity or a field failed its primitive parse."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(StatusCode.BAD_REQUEST, ErrorCode.PARSE_FAILURE, message)


class UnknownMessageType(ProtocolError):
    """A type id this version does not recognize. Non-fatal: the message is dropped."""

    def __init__(self, type_id: int) -> None:
        self.type_id = type_id
        super().__init__(StatusCode.BAD_REQUEST, ErrorCode.UNKNOWN_MESSAGE_TYPE, f"Unknown message type {type_id}")


class OptionValueOutOfRange(ProtocolError):
    def __init__(self, key: str, value: Any, minimum: int, maximum: int) -> None:
        self.key = key
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            StatusCode.BAD_REQUEST,
            ErrorCode.OPTION_OUT_OF_RANGE,
            f"Out of range: Should be {minimum} to {maximum}",
        )


class InvalidOptionText(ProtocolError):
    def __init__(self, key: str, message: str = "Please use only a single line of text here.") -> None:
        self.key = key
        super().__init__(StatusCode.BAD_REQUEST, ErrorCode.INVALID_OPTION_TEXT, message)


class VersionTooOld(ProtocolError):
    """The negotiated minimum version exceeds a participant's version."""

    def __init__(self, required: int, actual: int) -> None:
        self.required = required
        self.actual = actual
        super().__init__(
            StatusCode.UPGRADE_REQUIRED,
            ErrorCode.VERSION_TOO_OLD,
            f"Client version {required} or higher is required for these game options.\n"
            "Older clients won't be able to join.",
        )

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["min_version"] = self.required
        return payload


__all__ = [
    "StatusCode",
    "ErrorCode",
    "ProtocolError",
    "ParseFailure",
    "UnknownMessageType",
    "OptionValueOutOfRange",
    "InvalidOptionText",
    "VersionTooOld",
]
