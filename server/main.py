from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from server.core import CommandRouter, ConnectionContext
from server.services import GameService
from server.storage import InMemoryGameStore
from shared.options import OptionRegistry, get_registry
from shared.settings import SETTINGS, load_settings, setup_logging

logger = logging.getLogger(__name__)


def build_router(store: Optional[InMemoryGameStore] = None, registry: Optional[OptionRegistry] = None) -> CommandRouter:
    router = CommandRouter()
    game_service = GameService(store or InMemoryGameStore(), registry)
    game_service.register(router)
    return router


def run_lines(router: CommandRouter, ctx: ConnectionContext, source: TextIO, sink: TextIO) -> None:
    """Feed wire lines from `source` through the router, writing replies to `sink`."""
    for raw in source:
        line = raw.rstrip("\r\n")
        if not line:
            continue
        reply = router.dispatch_line(line, ctx)
        if reply is not None:
            sink.write(reply + "\n")
            sink.flush()


def main() -> None:
    load_settings()
    setup_logging(SETTINGS)
    registry = get_registry()
    logger.info("Loaded %d game options; protocol version %s", len(registry), SETTINGS.version)
    router = build_router(registry=registry)
    run_lines(router, ConnectionContext(peername="stdin", version=SETTINGS.version), sys.stdin, sys.stdout)


if __name__ == "__main__":
    main()
