"""Grammar for the leaf text of a carved dice string.

A leaf is either a number (``12``, ``-3``, ``1.5``) or a dice string:

    [count] d(<sides>|f) <modifier>* [<resolver>]

where modifiers are explosions (``!``, ``!!``, ``!p``), rerolls (``r``,
``ro``) and keep/drop (``k``, ``d``, ``kh``, ``dl``...), and the resolver is
either a match (``m``, ``mt``) or a success/failure count (``>4f1``).
Modifiers wrap the node built so far, so they execute in reading order.
"""

from __future__ import annotations

from .cursor import DiceStringCursor
from .errors import DiceSyntaxError, unexpected_character, unexpected_end
from .models import CompareCondition
from .nodes import (
    DiceRoll,
    ExplodeCompounding,
    ExplodePenetrating,
    ExplodeRegular,
    KeepDropConditional,
    KeepDropHighLow,
    NumberMatcher,
    Reroll,
    ResolutionNode,
    StaticNumber,
    SuccessFailCounter,
)


DIGITS = "0123456789"
COMPARE_OPERATORS = "=<>"


def is_int_char(char: str | None) -> bool:
    return char is not None and (char == "-" or char in DIGITS)


def is_compare_point_char(char: str | None) -> bool:
    return char is not None and (is_int_char(char) or char in COMPARE_OPERATORS)


def _read_int_text(cursor: DiceStringCursor) -> str:
    char = cursor.peek()
    if char is None:
        raise unexpected_end(cursor.index + 1)
    if not is_int_char(char):
        raise DiceSyntaxError(
            f"Unexpected character '{char}' encountered parsing integer.",
            position=cursor.index + 1,
        )

    text = ""
    while is_int_char(cursor.peek()):
        text += cursor.next()
        if len(text) > 1 and text.endswith("-"):
            raise DiceSyntaxError("Unexpected '-' after start of integer.", position=cursor.index)

    if text == "-":
        raise DiceSyntaxError("Expected digits after '-'.", position=cursor.index)
    return text


def read_int(cursor: DiceStringCursor) -> int:
    return int(_read_int_text(cursor))


def read_compare_point(cursor: DiceStringCursor) -> CompareCondition:
    """Read ``N``, ``=N``, ``<N`` or ``>N``; a bare integer means equality."""
    if is_int_char(cursor.peek()):
        return CompareCondition("=", read_int(cursor))

    operator = cursor.next()
    if operator is None:
        raise unexpected_end(cursor.index)
    if operator not in COMPARE_OPERATORS:
        raise DiceSyntaxError(f"Unexpected compare point type '{operator}'.", position=cursor.index)

    return CompareCondition(operator, read_int(cursor))  # type: ignore[arg-type]


def parse_number_or_dice(text: str) -> ResolutionNode:
    cursor = DiceStringCursor(text)
    cursor.expect_more()

    if cursor.peek() == "d":
        # "d20" rolls a single die.
        count_text = "1"
    else:
        count_text = _read_int_text(cursor)

    char = cursor.peek()
    if char == ".":
        cursor.next()
        decimals = _read_int_text(cursor)
        if decimals.startswith("-"):
            raise DiceSyntaxError("Malformed decimal number.", position=cursor.index)
        cursor.expect_done()
        literal = f"{count_text}.{decimals}"
        return StaticNumber(float(literal), literal)

    if char == "d":
        return parse_dice(cursor, int(count_text))

    cursor.expect_done()
    value = int(count_text)
    return StaticNumber(value, str(value))


def parse_dice(cursor: DiceStringCursor, count: int) -> ResolutionNode:
    if count < 0:
        raise DiceSyntaxError("Cannot roll a negative number of dice.", position=cursor.index)

    node = _parse_die_size(cursor, count)
    while True:
        modified = parse_roll_modifier(cursor, node)
        if modified is node:
            break
        node = modified

    node = parse_resolver(cursor, node)
    cursor.expect_done()
    return node


def _parse_die_size(cursor: DiceStringCursor, count: int) -> DiceRoll:
    char = cursor.next()
    if char is None:
        raise unexpected_end(cursor.index)
    if char != "d":
        raise DiceSyntaxError(f"Expected character 'd' at position {cursor.index}.", position=cursor.index)

    char = cursor.peek()
    if is_int_char(char):
        sides = read_int(cursor)
        if sides < 1:
            raise DiceSyntaxError("Dice must have 1 or more faces.", position=cursor.index)
        return DiceRoll(count, sides)

    if char == "f":
        cursor.next()
        return DiceRoll(count, 1, -1)

    if char is None:
        raise unexpected_end(cursor.index + 1)
    raise unexpected_character(char, cursor.index + 1)


def parse_roll_modifier(cursor: DiceStringCursor, node: ResolutionNode) -> ResolutionNode:
    """Wrap `node` in the modifier at the cursor; a no-op if there is none."""
    char = cursor.peek()
    if char == "!":
        return parse_explosion(cursor, node)
    if char == "r":
        return parse_reroll(cursor, node)
    if char in ("k", "d"):
        return parse_keep_drop(cursor, node)
    return node


def parse_explosion(cursor: DiceStringCursor, node: ResolutionNode) -> ResolutionNode:
    if cursor.next() != "!":
        raise DiceSyntaxError(f"Expected explosion character at position {cursor.index}.", position=cursor.index)

    explosion: type[ExplodeRegular] | type[ExplodeCompounding] | type[ExplodePenetrating] = ExplodeRegular
    char = cursor.peek()
    if char == "!":
        explosion = ExplodeCompounding
        cursor.next()
    elif char == "p":
        explosion = ExplodePenetrating
        cursor.next()

    condition = read_compare_point(cursor) if is_compare_point_char(cursor.peek()) else None
    return explosion(node, condition)


def parse_reroll(cursor: DiceStringCursor, node: ResolutionNode) -> ResolutionNode:
    if cursor.next() != "r":
        raise DiceSyntaxError(f"Expected reroll character at position {cursor.index}.", position=cursor.index)

    only_once = cursor.peek() == "o"
    if only_once:
        cursor.next()

    conditions = [read_compare_point(cursor)]
    while cursor.peek() == "r":
        # "r" and "ro" conditions never share a chain; a switch ends this one.
        if (cursor.peek(2) == "o") != only_once:
            break

        cursor.next()
        if only_once:
            cursor.next()
        conditions.append(read_compare_point(cursor))

    return Reroll(node, tuple(conditions), only_once)


def parse_keep_drop(cursor: DiceStringCursor, node: ResolutionNode) -> ResolutionNode:
    char = cursor.next()
    if char not in ("k", "d"):
        raise DiceSyntaxError(f"Expected keep or drop character at position {cursor.index}.", position=cursor.index)

    is_keep = char == "k"
    char = cursor.peek()
    if char in ("h", "l"):
        cursor.next()
        count = read_int(cursor) if is_int_char(cursor.peek()) else 1
        if count < 0:
            raise DiceSyntaxError("Cannot keep or drop a negative number of values.", position=cursor.index)
        return KeepDropHighLow(node, is_high=char == "h", is_keep=is_keep, count=count)

    marker = "k" if is_keep else "d"
    conditions = [read_compare_point(cursor)]
    # "k5k6" chains, but "k5kh" starts a separate high/low modifier.
    while cursor.peek() == marker and cursor.peek(2) not in ("h", "l"):
        cursor.next()
        conditions.append(read_compare_point(cursor))

    return KeepDropConditional(node, tuple(conditions), is_keep)


def parse_resolver(cursor: DiceStringCursor, node: ResolutionNode) -> ResolutionNode:
    """Wrap `node` in a match or success/failure resolver if one follows."""
    char = cursor.peek()
    if char == "m":
        cursor.next()
        match_count = cursor.peek() == "t"
        if match_count:
            cursor.next()
        return NumberMatcher(node, match_count)

    if is_compare_point_char(char):
        success = read_compare_point(cursor)
        failure = None
        if cursor.peek() == "f":
            cursor.next()
            failure = read_compare_point(cursor)
        return SuccessFailCounter(node, success, failure)

    return node


def parse_list_suffix(node: ResolutionNode, suffix: str) -> ResolutionNode:
    """Apply the modifier written after a ``{...}`` list.

    A list takes a single resolver or a single keep/drop modifier.
    """
    cursor = DiceStringCursor(suffix)
    if cursor.done:
        return node

    resolved = parse_resolver(cursor, node)
    if resolved is not node:
        cursor.expect_done()
        return resolved

    if cursor.peek() in ("k", "d"):
        resolved = parse_keep_drop(cursor, node)
        cursor.expect_done()
        return resolved

    raise DiceSyntaxError(f"Unknown list modifiers '{suffix}'.")
