from __future__ import annotations

from .arithmetic import MathNode
from .carving import CarvedNode, Group
from .errors import DiceSyntaxError
from .grammar import parse_list_suffix, parse_number_or_dice
from .nodes import FUNCTION_NODES, MATH_NODES, Bracket, NumberList, ResolutionNode, shape


def process_carved_hierarchy(carved: CarvedNode | None) -> ResolutionNode:
    """Turn the output of `carve_dice_string` into an executable node tree."""
    if isinstance(carved, Group):
        return process_group(carved)
    if isinstance(carved, MathNode):
        return process_math(carved)
    if isinstance(carved, str) and carved:
        return parse_number_or_dice(carved)
    raise DiceSyntaxError("Expected a number, dice roll or bracket.")


def process_group(group: Group) -> ResolutionNode:
    entries = [process_carved_hierarchy(e) for e in group.elements]

    if group.is_list:
        if len(entries) == 1 and shape(entries[0]) == "dice_roll":
            return parse_list_suffix(entries[0], group.modifier_suffix)
        return parse_list_suffix(NumberList(tuple(entries)), group.modifier_suffix)

    if len(entries) != 1:
        raise DiceSyntaxError("Brackets must contain exactly one expression.")

    if group.function_name:
        function = FUNCTION_NODES.get(group.function_name)
        if function is None:
            raise DiceSyntaxError(f"Unknown function name '{group.function_name}'.")
        return function(entries[0])

    return Bracket(entries[0])


def process_math(node: MathNode) -> ResolutionNode:
    if node.left is None or node.right is None:
        raise DiceSyntaxError(f"Math operator '{node.symbol}' is missing an operand.")

    math_node = MATH_NODES.get(node.symbol)
    if math_node is None:
        raise DiceSyntaxError(f"Unknown math operator '{node.symbol}'.")

    return math_node(process_carved_hierarchy(node.left), process_carved_hierarchy(node.right))
