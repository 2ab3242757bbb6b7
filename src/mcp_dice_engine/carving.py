"""Carve a standardized dice string into groups, math nodes and leaf text.

The result of `carve_dice_string` is a small hierarchy:

- ``str`` leaves holding a number or a dice string (``4d6kh3``),
- `MathNode`s linking two operands with an operator,
- `Group`s for ``(...)`` brackets, function calls such as ``floor(...)``
  and ``{a,b,...}`` lists with their uninterpreted modifier suffix.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

from .arithmetic import MathNode, carve_math_string, fold_math_slots
from .cursor import DiceStringCursor
from .errors import DiceSyntaxError, unexpected_character, unexpected_end


FUNCTION_NAMES: tuple[str, ...] = ("floor", "ceil", "round", "abs")

LETTERS = "abcdefghijklmnopqrstuvwxyz"
COMPARE_OPERATORS = "=<>"
LIST_SUFFIX_CHARACTERS = LETTERS + "0123456789" + COMPARE_OPERATORS + "-"

_TERMINATORS = ")},"


@dataclass(eq=False)
class Group:
    elements: list[Any] = field(default_factory=list)
    is_list: bool = False
    function_name: str = ""
    modifier_suffix: str = ""
    terminator: str | None = None


CarvedNode: TypeAlias = str | MathNode | Group


def carve_dice_string(text: str) -> CarvedNode | None:
    """Carve a whole dice string; returns None for the empty string.

    The implicit root group always folds down to at most one element, which
    is unwrapped here so the root does not display an extra pair of brackets.
    """
    root = _carve_group(DiceStringCursor(text))
    return root.elements[0] if root.elements else None


def _carve_group(cursor: DiceStringCursor, required_terminators: str = "") -> Group:
    group = Group()
    buffer = ""

    while True:
        char = cursor.next()
        if char is None or char in _TERMINATORS:
            break

        if char not in "({":
            buffer += char
            continue

        function_name = find_function_suffix(buffer)
        if function_name:
            if char == "{":
                raise DiceSyntaxError(
                    f"Function '{function_name}' cannot be applied to a list.",
                    position=cursor.index,
                )
            buffer = buffer[: -len(function_name)]

        if buffer:
            group.elements.append(carve_math_string(buffer, after_group=bool(group.elements)))
            buffer = ""

        if char == "{":
            sub_group = _carve_list(cursor)
            sub_group.modifier_suffix = read_list_suffix(cursor)
        else:
            sub_group = _carve_group(cursor, ")")
            sub_group.function_name = function_name

        group.elements.append(sub_group)

    group.terminator = char

    if required_terminators:
        if char is None or char not in required_terminators:
            raise DiceSyntaxError("Bracket not closed.", position=cursor.index)
    elif char is not None:
        raise DiceSyntaxError("Unexpected closing bracket or comma.", position=cursor.index)

    if buffer:
        group.elements.append(carve_math_string(buffer, after_group=bool(group.elements)))

    group.elements = fold_math_slots(group.elements)
    if len(group.elements) > 1:
        raise DiceSyntaxError("Found elements that are not linked by a math operator.")

    return group


def _carve_list(cursor: DiceStringCursor) -> Group:
    result = Group(is_list=True)

    while True:
        entry = _carve_group(cursor, "},")
        # ",," leaves an empty entry behind; it is dropped rather than kept.
        if entry.elements:
            result.elements.append(entry)

        if entry.terminator is None:
            raise unexpected_end(cursor.index)
        if entry.terminator not in "},":
            raise unexpected_character(entry.terminator, cursor.index)
        if entry.terminator == "}":
            return result


def find_function_suffix(text: str) -> str:
    """Return the function name `text` ends with, or '' if there is none."""
    for name in FUNCTION_NAMES:
        if text.endswith(name):
            return name
    return ""


def read_list_suffix(cursor: DiceStringCursor) -> str:
    """Read the modifier characters that directly follow a closing '}'."""
    suffix = ""
    char = cursor.peek()
    while char is not None and char in LIST_SUFFIX_CHARACTERS:
        # A '-' only belongs to the suffix as the sign of a compare point
        # (``dl-1``, ``<-2``); anywhere else it is a subtraction.
        if char == "-" and (not suffix or suffix[-1] not in COMPARE_OPERATORS + LETTERS):
            break

        suffix += char
        cursor.next()
        char = cursor.peek()

    return suffix
