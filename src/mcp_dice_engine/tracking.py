from __future__ import annotations

import logging
from typing import Protocol

from .errors import DiceLimitError


logger = logging.getLogger(__name__)

# Budget used when the caller does not supply a tracker.
DEFAULT_MAX_DICE = 1000


class Tracker(Protocol):
    def notify_new_dice(self, count: int) -> None: ...


class DiceCountTracker:
    """Counts the dice rolled during one evaluation and enforces a budget.

    The budget is the only guard against runaway input such as
    ``100000d6`` or ``1d1!``. Pass ``max_dice=None`` to only count;
    `resolve_dice_string` falls back to ``DEFAULT_MAX_DICE`` when no
    tracker is given.
    """

    def __init__(self, max_dice: int | None = None) -> None:
        self.max_dice = max_dice
        self.count = 0

    def notify_new_dice(self, count: int) -> None:
        self.count += count
        if self.max_dice is not None and self.count > self.max_dice:
            logger.warning("Dice budget exceeded: %d rolled, max %d", self.count, self.max_dice)
            raise DiceLimitError(self.max_dice)
