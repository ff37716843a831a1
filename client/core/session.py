from __future__ import annotations

import logging
from typing import Dict, Optional

from client.features.game_options import GameOptionsExchange
from shared.options import OptionRegistry, OptionSet, check_participant_version, get_registry, parse_options
from shared.protocol import (
    BaseMsg,
    GameOptionGetDefaultsMsg,
    NewGameWithOptionsMsg,
    ParseFailure,
    ProtocolError,
    StatusMessageMsg,
    UnknownMsg,
    VersionTooOld,
    parse_line,
)
from shared.settings import SETTINGS, Settings

logger = logging.getLogger(__name__)


class ClientSession:
    """Client-side state fed by decoded server messages, in arrival order."""

    def __init__(
        self,
        nickname: str,
        settings: Optional[Settings] = None,
        registry: Optional[OptionRegistry] = None,
    ) -> None:
        self.nickname = nickname
        self.settings = settings or SETTINGS
        self.registry = registry if registry is not None else get_registry()
        # game name -> minimum client version (None: no restriction)
        self.games: Dict[str, Optional[int]] = {}
        self.unjoinable: Dict[str, VersionTooOld] = {}
        self.game_options: Dict[str, OptionSet] = {}
        self.exchange: Optional[GameOptionsExchange] = None
        self.last_status: Optional[StatusMessageMsg] = None

    @property
    def version(self) -> int:
        return self.settings.version

    def new_game_options(self, for_practice: bool = False) -> GameOptionsExchange:
        """Start editing options for a new game from a fresh copy of the defaults."""
        self.exchange = GameOptionsExchange(
            self.registry.new_option_set(),
            for_practice=for_practice,
            registry=self.registry,
            settings=self.settings,
        )
        return self.exchange

    def handle_line(self, line: str) -> Optional[BaseMsg]:
        message = parse_line(line)
        if isinstance(message, ParseFailure):
            logger.warning("Ignoring malformed line from server: %s", message.message)
            return None
        self.handle_message(message)
        return message

    def handle_message(self, message: BaseMsg) -> None:
        if isinstance(message, UnknownMsg):
            logger.warning("Dropping message of unknown type %s", message.unknown_type_id)
        elif isinstance(message, NewGameWithOptionsMsg):
            self._on_new_game(message)
        elif isinstance(message, GameOptionGetDefaultsMsg):
            if self.exchange is not None:
                try:
                    self.exchange.apply_remote(message.options)
                except ProtocolError as exc:
                    logger.warning("Server sent unusable option defaults: %s", exc.message)
        elif isinstance(message, StatusMessageMsg):
            self.last_status = message
        else:
            logger.debug("No client handling for %s", type(message).__name__)

    def _on_new_game(self, message: NewGameWithOptionsMsg) -> None:
        self.games[message.game] = message.minimum_version
        try:
            check_participant_version(self.version, message.minimum_version)
        except VersionTooOld as exc:
            self.unjoinable[message.game] = exc
            logger.info("Game %s needs version %s; this client is %s", message.game, exc.required, self.version)
            return
        self.unjoinable.pop(message.game, None)
        try:
            options = parse_options(message.options, self.registry)
        except ProtocolError as exc:
            logger.warning("Game %s has unreadable options: %s", message.game, exc.message)
            return
        options.remove_unknown(self.registry)
        self.game_options[message.game] = options

    def can_join(self, game: str) -> bool:
        return game in self.games and game not in self.unjoinable


__all__ = ["ClientSession"]
