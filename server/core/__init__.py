from .connection import ConnectionContext
from .router import CommandRouter, error_reply

__all__ = ["ConnectionContext", "CommandRouter", "error_reply"]
