import random
from typing import Sequence

from .state import Dice

# Number of light faces -> move value. Five is not reachable with four sticks.
STICK_VALUES = {0: 6, 1: 1, 2: 2, 3: 3, 4: 4}
STICK_COUNT = 4


def dice_from_sticks(sticks: Sequence[bool]) -> Dice:
    if len(sticks) != STICK_COUNT:
        raise ValueError(f'Expected {STICK_COUNT} sticks, got {len(sticks)}')
    light = sum(1 for s in sticks if s)
    return Dice(stick_values=tuple(bool(s) for s in sticks), value=STICK_VALUES[light], keep_playing=light == 0)


def roll(rng=random) -> Dice:
    """Throw the four stick dice. Only an all-dark throw (6) grants another roll."""
    return dice_from_sticks([rng.random() < 0.5 for _ in range(STICK_COUNT)])
