"""Protocol-wide constants shared by client and server.

These values are part of the wire contract: changing them breaks
interoperability between software versions.
"""

ENCODING = "utf-8"
FRAME_DELIMITER = b"\n"

# Field separator inside a message line; never allowed inside field text
SEP = "|"
# Separator between KEY=value records of a packed option set
OPTION_SEP = ","
OPTION_ASSIGN = "="

# Versions are 4-digit integers: 1107 is 1.1.07
VERSION = 2000
VERSION_FOR_GAME_OPTIONS = 1107
NO_VERSION = -1

MAX_LINE_LENGTH = 64 * 1024

__all__ = [
    "ENCODING",
    "FRAME_DELIMITER",
    "SEP",
    "OPTION_SEP",
    "OPTION_ASSIGN",
    "VERSION",
    "VERSION_FOR_GAME_OPTIONS",
    "NO_VERSION",
    "MAX_LINE_LENGTH",
]
