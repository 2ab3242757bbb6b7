from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import settings
from .dice import RandomSource
from .errors import DiceError
from .formatting import MarkdownFormatter
from .models import Number, ResolvedNumber
from .parser import resolve_dice_string, standardize_dice_string
from .tracking import DiceCountTracker


logger = logging.getLogger(__name__)

mcp = FastMCP("mcp-dice-engine")


def format_value(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_result(result: ResolvedNumber) -> str:
    """Render a result the way the chat bot posts it, value first, then the trace."""
    value = result.value
    suffix = ""
    if result.type == "match_count":
        suffix = " Matches"
    elif result.type == "success_fail":
        if value >= 0:
            suffix = " Successes"
        else:
            suffix = " Failures"
            value = abs(value)

    return f"**Result: {format_value(value)}{suffix}**\n>>> {result.text}"


def enforce_message_length_limit(message: str, max_length: int | None = None) -> str:
    limit = settings.max_message_length if max_length is None else max_length
    if len(message) > limit:
        return message[: limit - 3] + "..."
    return message


def roll_from_text(text: str, random_source: RandomSource | None = None) -> dict[str, Any]:
    """Roll a dice string and return the result with its audit trail.

    Raises DiceError for invalid input or when the dice budget is exceeded.
    """
    tracker = DiceCountTracker(settings.max_dice_per_roll)
    result = resolve_dice_string(text, tracker, MarkdownFormatter(), random_source)

    return {
        "input": text,
        "normalized_input": standardize_dice_string(text),
        "value": result.value,
        "type": result.type,
        "text": result.text,
        "dice_rolled": tracker.count,
        "message": render_result(result),
    }


def build_roll_message(text: str, command: str = "roll", random_source: RandomSource | None = None) -> str:
    """Build the full chat reply for a roll command; errors become 'Error: ...'."""
    try:
        body = roll_from_text(text, random_source)["message"]
    except DiceError as e:
        logger.info("Rejected dice string %r: %s", text, e)
        body = f"Error: {e}"

    message = f"> `/{command} input:{standardize_dice_string(text)}`\n{body}"
    return enforce_message_length_limit(message)


@mcp.tool()
def roll_dice(text: str):
    """Roll a dice expression such as '4d6kh3', '{1d20+5,1d20+5}kh' or '6d10>7f1'.

    Input: text (string)
    Output: structured JSON with the value, result type, and annotated roll text

    Raises a hard error (exception) on invalid input.
    """

    try:
        return roll_from_text(text)
    except DiceError as e:
        # Fail-fast: surface stable error codes in the message.
        raise ValueError(str(e)) from None


@mcp.tool()
def roll_dice_message(text: str, command: str = "roll") -> str:
    """Roll a dice expression and return a ready-to-post Markdown chat message."""
    return build_roll_message(text, command)


def run() -> None:
    logging.basicConfig(level=settings.log_level.upper())
    # Default transport is stdio.
    mcp.run()


if __name__ == "__main__":
    run()
