from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional

from shared.protocol.constants import VERSION


@dataclass
class ConnectionContext:
    """Per-connection facts the handlers need; the transport that fills them lives elsewhere."""

    peername: str
    version: int = VERSION
    nickname: Optional[str] = None
    last_seen: float = field(default_factory=time.time)

    def mark_identified(self, nickname: str) -> None:
        self.nickname = nickname
        self.touch()

    def touch(self) -> None:
        self.last_seen = time.time()

    def is_identified(self) -> bool:
        return self.nickname is not None
