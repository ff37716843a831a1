from .memory import GameRecord, InMemoryGameStore

__all__ = ["GameRecord", "InMemoryGameStore"]
