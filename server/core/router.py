from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Dict, Optional, TYPE_CHECKING, Union

from shared.protocol.commands import MsgType, normalize_command
from shared.protocol.errors import ParseFailure, ProtocolError
from shared.protocol.framing import encode_msg, parse_line
from shared.protocol.messages import BaseMsg, StatusMessageMsg, UnknownMsg

if TYPE_CHECKING:
    from .connection import ConnectionContext

logger = logging.getLogger(__name__)

Handler = Callable[[BaseMsg, "ConnectionContext"], Optional[BaseMsg]]


def error_reply(exc: ProtocolError) -> StatusMessageMsg:
    # Status text travels in a wire field, so line breaks become spaces
    text = " ".join(exc.message.split())
    return StatusMessageMsg(status=int(exc.status), text=text.replace("|", "/"))


class CommandRouter:
    """Maps wire type ids to handlers; messages of unknown type are dropped with a notice."""

    def __init__(self) -> None:
        self._handlers: Dict[int, Handler] = {}

    def register(self, command: Union[MsgType, int], handler: Handler) -> None:
        self._handlers[normalize_command(command)] = handler

    def dispatch(self, message: BaseMsg, ctx: "ConnectionContext") -> Optional[BaseMsg]:
        if isinstance(message, UnknownMsg):
            logger.warning("Dropping message of unknown type %s from %s", message.unknown_type_id, ctx.peername)
            return None
        handler = self._handlers.get(message.type_id)
        if handler is None:
            logger.info("No handler for %s from %s", type(message).__name__, ctx.peername)
            return None
        ctx.touch()
        try:
            return handler(message, ctx)
        except ProtocolError as exc:
            logger.warning("Handler for %s failed: %s", type(message).__name__, exc)
            return error_reply(exc)

    def dispatch_line(self, line: str, ctx: "ConnectionContext") -> Optional[str]:
        """Decode, dispatch and encode the reply of one wire line."""
        message = parse_line(line)
        if isinstance(message, ParseFailure):
            logger.warning("Malformed line from %s: %s", ctx.peername, message.message)
            reply: Optional[BaseMsg] = error_reply(message)
        else:
            reply = self.dispatch(message, ctx)
        return encode_msg(reply) if reply is not None else None


__all__ = ["CommandRouter", "Handler", "error_reply"]
