"""Math carving and slot folding for the text between brackets.

Text such as ``2*3+4*5`` is carved into a hierarchy of `MathNode`s that
applies operator precedence without any brackets. Text that sits next to a
bracket leaves an operand slot empty (``None``), e.g. ``*2`` in ``(1+1)*2``;
`fold_math_slots` later fills those slots from the neighbouring elements.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .errors import DiceSyntaxError


MATH_OPERATORS = "+-*/%^<>="


@dataclass(eq=False)
class MathNode:
    symbol: str
    left: Any = None
    right: Any = None


def is_sign_minus(text: str, idx: int, after_group: bool = False) -> bool:
    """Return True when the '-' at `idx` is a number's sign, not subtraction.

    A leading '-' is a sign unless the text directly follows a bracket, in
    which case it subtracts from that bracket. Anywhere else a '-' is a sign
    only when it directly follows another operator (``2*-3``, ``d6r<-1``).
    """
    if text[idx] != "-":
        return False
    if idx == 0:
        return not after_group
    return text[idx - 1] in MATH_OPERATORS


def carve_math_string(text: str, after_group: bool = False) -> Any:
    """Carve `text` into MathNodes; returns the text itself when it holds no math."""
    return _carve_by_operators(
        text,
        "+-",
        _carve_mult_div_mod,
        lambda idx: is_sign_minus(text, idx, after_group),
    )


def _carve_mult_div_mod(text: str) -> Any:
    return _carve_by_operators(text, "*/%", _carve_exponent)


def _carve_exponent(text: str) -> Any:
    # Exponents fold right: 2^3^2 is 2^(3^2).
    if not text:
        return None

    idx = text.find("^")
    if idx < 0:
        return text

    return MathNode("^", text[:idx] or None, _carve_exponent(text[idx + 1 :]))


def _is_operator(piece: str, operators: str) -> bool:
    return len(piece) == 1 and piece in operators


def _split_on_operators(
    text: str,
    operators: str,
    is_sign: Callable[[int], bool] | None = None,
) -> list[str]:
    pieces: list[str] = []
    start = 0
    for idx, char in enumerate(text):
        if char in operators and not (is_sign and is_sign(idx)):
            if text[start:idx]:
                pieces.append(text[start:idx])
            pieces.append(char)
            start = idx + 1

    if start < len(text):
        pieces.append(text[start:])
    return pieces


def _carve_by_operators(
    text: str,
    operators: str,
    carve_operand: Callable[[str], Any],
    is_sign: Callable[[int], bool] | None = None,
) -> Any:
    pieces = _split_on_operators(text, operators, is_sign)
    if not pieces:
        return None

    # Each operator takes the running result as its left side, so
    # 3%6%4 folds as ((3%6)%4).
    idx = 0
    result: Any = None
    if not _is_operator(pieces[0], operators):
        result = carve_operand(pieces[0])
        idx = 1

    while idx < len(pieces):
        operator = pieces[idx]
        if not _is_operator(operator, operators):
            raise DiceSyntaxError(f"Math syntax error near '{operator}'.")

        right = carve_operand(pieces[idx + 1]) if idx + 1 < len(pieces) else None
        result = MathNode(operator, result, right)
        idx += 2

    return result


def _find_empty_left(node: MathNode) -> MathNode | None:
    if node.left is None:
        return node

    for child in (node.left, node.right):
        if isinstance(child, MathNode):
            found = _find_empty_left(child)
            if found is not None:
                return found
    return None


def _find_empty_right(node: MathNode) -> MathNode | None:
    if node.right is None:
        return node

    for child in (node.right, node.left):
        if isinstance(child, MathNode):
            found = _find_empty_right(child)
            if found is not None:
                return found
    return None


def fold_math_slots(elements: list[Any]) -> list[Any]:
    """Let MathNodes with empty slots consume their neighbours.

    A well formed bracket folds down to a single element. Two neighbours that
    both want to consume each other, or two MathNodes with nothing to link
    them, are syntax errors.
    """
    result: list[Any] = []
    for element in elements:
        if not result:
            result.append(element)
            continue

        previous = result[-1]
        if not isinstance(previous, MathNode) and not isinstance(element, MathNode):
            result.append(element)
            continue

        empty_right = _find_empty_right(previous) if isinstance(previous, MathNode) else None
        empty_left = _find_empty_left(element) if isinstance(element, MathNode) else None

        if empty_right is not None and empty_left is None:
            empty_right.right = element
        elif empty_right is None and empty_left is not None:
            empty_left.left = result.pop()
            result.append(element)
        else:
            raise DiceSyntaxError("Math syntax error.")

    return result
