from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from shared.options import OptionSet


@dataclass
class GameRecord:
    name: str
    owner: str
    options: OptionSet
    min_version: Optional[int] = None
    members: Set[str] = field(default_factory=set)


class InMemoryGameStore:
    """
    Games of the running server. Nothing outlives the process, and each game
    owns its OptionSet exclusively.
    """

    def __init__(self) -> None:
        self._games: Dict[str, GameRecord] = {}

    def game_exists(self, name: str) -> bool:
        return name in self._games

    def get_game(self, name: str) -> Optional[GameRecord]:
        return self._games.get(name)

    def list_games(self) -> List[str]:
        return sorted(self._games)

    def create_game(self, name: str, owner: str, options: OptionSet, min_version: Optional[int]) -> GameRecord:
        if name in self._games:
            raise ValueError(f"Game {name} already exists")
        record = GameRecord(name=name, owner=owner, options=options, min_version=min_version, members={owner})
        self._games[name] = record
        return record

    def add_member(self, name: str, nickname: str) -> None:
        record = self._games.get(name)
        if record is None:
            raise KeyError(name)
        record.members.add(nickname)

    def remove_member(self, name: str, nickname: str) -> bool:
        """Remove `nickname`; deletes the game once empty. Returns True if the game was deleted."""
        record = self._games.get(name)
        if record is None:
            return False
        record.members.discard(nickname)
        if not record.members:
            del self._games[name]
            return True
        return False
