from __future__ import annotations

import logging
import re

from .carving import carve_dice_string
from .dice import RandomSource, default_random_source
from .evaluator import ResolveContext, resolve
from .formatting import Formatter, MarkdownFormatter
from .models import ResolvedNumber
from .nodes import ResolutionNode
from .processing import process_carved_hierarchy
from .resolution import resolve_to_number
from .tracking import DEFAULT_MAX_DICE, DiceCountTracker, Tracker


logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def standardize_dice_string(text: str) -> str:
    """Strip all whitespace and lower-case, so ' 4D6 kh3 ' becomes '4d6kh3'."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub("", text).lower()


def parse_dice_string(text: str) -> ResolutionNode | None:
    """Carve and process a dice string without rolling anything.

    Returns None for an empty string. Raises DiceError for invalid input.
    """
    carved = carve_dice_string(standardize_dice_string(text))
    if carved is None:
        return None
    return process_carved_hierarchy(carved)


def resolve_dice_string(
    text: str,
    tracker: Tracker | None = None,
    formatter: Formatter | None = None,
    random_source: RandomSource | None = None,
) -> ResolvedNumber:
    """Parse, validate, then roll. Raises DiceError for invalid input.

    Any error aborts the whole evaluation; dice rolled before the failing
    step are never returned.
    """
    standardized = standardize_dice_string(text)
    logger.debug("Resolving dice string %r", standardized)

    root = parse_dice_string(standardized)
    if root is None:
        return ResolvedNumber(0, "")

    context = ResolveContext(
        tracker=tracker if tracker is not None else DiceCountTracker(DEFAULT_MAX_DICE),
        formatter=formatter if formatter is not None else MarkdownFormatter(),
        random_source=random_source if random_source is not None else default_random_source(),
    )
    result = resolve_to_number(resolve(root, context), context.formatter)

    logger.debug("Resolved %r to %s (%s)", standardized, result.value, result.type)
    return result
