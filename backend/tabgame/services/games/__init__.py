"""Game domain services: dice, board moves, session state machine and timers.

This package holds the Tâb rules and game lifecycle. HTTP routes and socket
handlers call into ``TabEngine`` and never touch game records directly,
keeping transport concerns separated from core game mechanics.
"""

from .session import FORCED, TabEngine  # noqa: F401
