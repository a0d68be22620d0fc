"""
Parsing of the ``vtuber`` chat command.

    !vtuber -p [history_uid]   start (or rebind) the vtuber in this channel
    !vtuber -d                 stop it
    !v ...                     alias
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

COMMAND_NAMES = ("vtuber", "v")
UP_OPTIONS = ("-p", "--up")
DOWN_OPTIONS = ("-d", "--down")


class CommandAction(Enum):
    UP = "up"
    DOWN = "down"
    USAGE = "usage"


@dataclass
class VtuberCommand:
    action: CommandAction
    history_uid: str = ""


def parse_command(text: str, prefix: str = "!") -> Optional[VtuberCommand]:
    """
    Parse a chat message as a ``vtuber`` command.

    ``up`` takes precedence when both options are given. A command without
    options asks for usage.

    Args:
        text: Raw chat message.
        prefix: Command prefix, e.g. ``!``.

    Returns:
        The parsed command, or None when the message is not a vtuber command.
    """
    tokens = text.split()
    if not tokens or not tokens[0].startswith(prefix):
        return None
    if tokens[0][len(prefix):].lower() not in COMMAND_NAMES:
        return None

    up: Optional[str] = None
    down = False
    args = tokens[1:]
    i = 0
    while i < len(args):
        token = args[i]
        if token in UP_OPTIONS:
            up = ""
            if i + 1 < len(args) and not args[i + 1].startswith("-"):
                up = args[i + 1]
                i += 1
        elif token in DOWN_OPTIONS:
            down = True
        i += 1

    if up is not None:
        return VtuberCommand(CommandAction.UP, history_uid=up)
    if down:
        return VtuberCommand(CommandAction.DOWN)
    return VtuberCommand(CommandAction.USAGE)
