from .game_service import GameService

__all__ = ["GameService"]
