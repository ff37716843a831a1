from .game_options import (
    CreateOutcome,
    CreateStatus,
    ErrorPolicy,
    GameOptionsExchange,
    OptionEdit,
    OptionError,
    ValidationReport,
)

__all__ = [
    "CreateOutcome",
    "CreateStatus",
    "ErrorPolicy",
    "GameOptionsExchange",
    "OptionEdit",
    "OptionError",
    "ValidationReport",
]
