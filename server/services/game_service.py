from __future__ import annotations

import logging
from typing import Optional

from server.core.connection import ConnectionContext
from server.core.router import CommandRouter, error_reply
from server.storage.memory import InMemoryGameStore
from shared.options import (
    OptionRegistry,
    check_participant_version,
    get_registry,
    minimum_version,
    pack_options,
    parse_options,
)
from shared.options.wire import merge_into
from shared.protocol import (
    NO_VERSION,
    OPTION_SEP,
    BaseMsg,
    EndTurnMsg,
    ErrorCode,
    GameOptionGetDefaultsMsg,
    JoinGameMsg,
    LeaveGameMsg,
    MsgType,
    NewGameWithOptionsMsg,
    NewGameWithOptionsRequestMsg,
    ProtocolError,
    StatusCode,
    StatusMessageMsg,
    is_single_line_and_safe,
)

logger = logging.getLogger(__name__)


class GameService:
    """Creates games from option requests and admits players whose version can honor them."""

    def __init__(self, store: InMemoryGameStore, registry: Optional[OptionRegistry] = None) -> None:
        self.store = store
        self.registry = registry if registry is not None else get_registry()

    def register(self, router: CommandRouter) -> None:
        router.register(MsgType.NEW_GAME_WITH_OPTIONS_REQUEST, self.handle_new_game)
        router.register(MsgType.GAME_OPTION_GET_DEFAULTS, self.handle_get_defaults)
        router.register(MsgType.JOIN_GAME, self.handle_join)
        router.register(MsgType.LEAVE_GAME, self.handle_leave)
        router.register(MsgType.END_TURN, self.handle_end_turn)

    def handle_new_game(self, message: NewGameWithOptionsRequestMsg, ctx: ConnectionContext) -> BaseMsg:
        name = message.game.strip()
        if not name or not is_single_line_and_safe(name) or OPTION_SEP in name:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.INVALID_GAME_NAME, "Game name not permitted")
        if self.store.game_exists(name):
            raise ProtocolError(StatusCode.CONFLICT, ErrorCode.GAME_EXISTS, f"Game {name} already exists")

        requested = parse_options(message.options, self.registry)
        unknown = requested.remove_unknown(self.registry)
        if unknown:
            raise ProtocolError(
                StatusCode.BAD_REQUEST,
                ErrorCode.UNKNOWN_OPTION,
                f"Unknown game options: {', '.join(sorted(unknown))}",
            )

        # Work on a private copy: a rejected request leaves no trace
        options = self.registry.new_option_set()
        merge_into(options, requested)
        required = minimum_version(options)
        check_participant_version(ctx.version, required)

        self.store.create_game(name, message.nickname, options, required)
        ctx.mark_identified(message.nickname)
        logger.info("Created game %s for %s (minimum version %s)", name, message.nickname, required)
        return NewGameWithOptionsMsg(
            game=name,
            options=pack_options(options, changed_only=True),
            min_version=NO_VERSION if required is None else required,
        )

    def handle_get_defaults(self, message: GameOptionGetDefaultsMsg, ctx: ConnectionContext) -> BaseMsg:
        return GameOptionGetDefaultsMsg(options=pack_options(self.registry.new_option_set()))

    def handle_join(self, message: JoinGameMsg, ctx: ConnectionContext) -> BaseMsg:
        record = self.store.get_game(message.game)
        if record is None:
            raise ProtocolError(StatusCode.NOT_FOUND, message=f"Game {message.game} not found")
        check_participant_version(ctx.version, record.min_version)
        self.store.add_member(record.name, message.nickname)
        ctx.mark_identified(message.nickname)
        return NewGameWithOptionsMsg(
            game=record.name,
            options=pack_options(record.options, changed_only=True),
            min_version=NO_VERSION if record.min_version is None else record.min_version,
        )

    def handle_leave(self, message: LeaveGameMsg, ctx: ConnectionContext) -> Optional[BaseMsg]:
        if self.store.remove_member(message.game, message.nickname):
            logger.info("Game %s is empty and was removed", message.game)
        return None

    def handle_end_turn(self, message: EndTurnMsg, ctx: ConnectionContext) -> Optional[BaseMsg]:
        # Turn rules live elsewhere; here the message is only a marker
        if not self.store.game_exists(message.game):
            return error_reply(ProtocolError(StatusCode.NOT_FOUND, message=f"Game {message.game} not found"))
        logger.debug("%s ended a turn in %s", ctx.nickname or ctx.peername, message.game)
        return StatusMessageMsg(status=int(StatusCode.ACCEPTED), text=message.game)


__all__ = ["GameService"]
