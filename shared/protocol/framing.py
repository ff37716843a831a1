from __future__ import annotations

import re
from typing import Any, Union

from .constants import ENCODING, FRAME_DELIMITER, MAX_LINE_LENGTH, SEP
from .errors import ErrorCode, ParseFailure, ProtocolError, StatusCode, UnknownMessageType
from .messages import BaseMsg, UnknownMsg, message_type

_INT_RE = re.compile(r"-?[0-9]{1,18}")
_TYPE_ID_RE = re.compile(r"[0-9]{1,9}")

_TRUE = "true"
_FALSE = "false"


def is_single_line_and_safe(text: str) -> bool:
    """True if `text` can travel inside a wire field: no separator, no line breaks."""
    return SEP not in text and "\n" not in text and "\r" not in text


def _format_field(name: str, value: Any) -> str:
    if isinstance(value, bool):
        return _TRUE if value else _FALSE
    text = str(value)
    if not is_single_line_and_safe(text):
        raise ProtocolError(
            StatusCode.BAD_REQUEST,
            ErrorCode.INVALID_FIELD_TEXT,
            f"Field {name!r} contains a separator or line break",
        )
    return text


def _parse_field(name: str, field_type: type, text: str) -> Any:
    if field_type is bool:
        if text == _TRUE:
            return True
        if text == _FALSE:
            return False
        raise ParseFailure(f"Field {name!r} is not a boolean: {text!r}", field=name)
    if field_type is int:
        if not _INT_RE.fullmatch(text):
            raise ParseFailure(f"Field {name!r} is not an integer: {text!r}", field=name)
        return int(text)
    return text


def encode_msg(msg: BaseMsg) -> str:
    """Encode a message into one wire line: TypeId|field1|...|fieldN."""
    if isinstance(msg, UnknownMsg):
        return msg.to_line()
    parts = [str(msg.type_id)]
    for name in type(msg).model_fields:
        parts.append(_format_field(name, getattr(msg, name)))
    return SEP.join(parts)


def decode_msg(line: str, allow_unknown: bool = True) -> BaseMsg:
    """
    Decode one wire line into its message model.

    Unknown type ids come back as UnknownMsg (or raise UnknownMessageType when
    allow_unknown is False). Arity or field-type mismatches raise ParseFailure.
    """
    if not isinstance(line, str):
        raise ParseFailure(f"Expected text line, got {type(line).__name__}")
    head, sep, rest = line.partition(SEP)
    if not _TYPE_ID_RE.fullmatch(head) or int(head) <= 0:
        raise ParseFailure(f"Invalid message type id: {head!r}", field="type_id")
    type_id = int(head)

    mtype = message_type(type_id)
    if mtype is None:
        if not allow_unknown:
            raise UnknownMessageType(type_id)
        return UnknownMsg(unknown_type_id=type_id, data=rest if sep else None)

    fields = rest.split(SEP) if sep else []
    if len(fields) != mtype.arity:
        raise ParseFailure(f"{mtype.name} expects {mtype.arity} fields, got {len(fields)}")

    values = {
        name: _parse_field(name, field_type, text)
        for name, field_type, text in zip(mtype.field_names, mtype.field_types, fields)
    }
    return mtype.model.from_fields(**values)


def parse_line(line: str) -> Union[BaseMsg, ParseFailure]:
    """Total variant of decode_msg: returns the ParseFailure instead of raising it."""
    try:
        return decode_msg(line)
    except ParseFailure as exc:
        return exc


def encode_frame(msg: BaseMsg) -> bytes:
    """Encode message into bytes (line + delimiter)."""
    data = encode_msg(msg).encode(ENCODING)
    if len(data) > MAX_LINE_LENGTH:
        raise ProtocolError(StatusCode.BAD_REQUEST, message="Line too long for control channel")
    return data + FRAME_DELIMITER


def decode_frame(data: bytes) -> BaseMsg:
    """Decode bytes into a message, stripping the delimiter."""
    if len(data) > MAX_LINE_LENGTH + len(FRAME_DELIMITER):
        raise ParseFailure("Line too long for control channel")
    try:
        line = data.rstrip(b"\r" + FRAME_DELIMITER).decode(ENCODING)
    except UnicodeDecodeError as exc:
        raise ParseFailure(f"Decode failed: {exc}") from exc
    return decode_msg(line)


__all__ = [
    "is_single_line_and_safe",
    "encode_msg",
    "decode_msg",
    "parse_line",
    "encode_frame",
    "decode_frame",
]
