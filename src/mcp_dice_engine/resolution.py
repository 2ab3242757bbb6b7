from __future__ import annotations

from typing import Sequence, TypeAlias

from .dice import DieResult
from .errors import DiceSemanticError
from .formatting import Formatter
from .models import ResolvedNumber


Resolved: TypeAlias = ResolvedNumber | list[DieResult] | list[ResolvedNumber]


def die_text(die: DieResult, formatter: Formatter) -> str:
    """Render a die as ``[6]`` or, with several rolls, ``[6+6+2=14]``."""
    text = "[" + str(die.rolls[0])
    for roll in die.rolls[1:]:
        text += f"+{roll}" if roll >= 0 else str(roll)
    if len(die.rolls) > 1:
        text += f"={die.value}"
    text += "]"

    if die.discarded:
        text = formatter.add_discarded_formatting(text)
    if die.exploded:
        text = formatter.add_explode_formatting(text, True)
    return text


def dice_to_number_list(dice: Sequence[DieResult], formatter: Formatter) -> list[ResolvedNumber]:
    return [ResolvedNumber(d.value, die_text(d, formatter), discarded=d.discarded) for d in dice]


def number_list_text(numbers: Sequence[ResolvedNumber], separator: str = " + ") -> str:
    if not numbers:
        return ""
    if len(numbers) == 1:
        return numbers[0].text
    return "(" + separator.join(n.text for n in numbers) + ")"


def resolve_to_number(result: Resolved, formatter: Formatter) -> ResolvedNumber:
    """Collapse any resolved value into a single number.

    A number is returned as is. Dice are rendered first; the values of every
    entry that is not discarded are then summed.
    """
    if isinstance(result, ResolvedNumber):
        return result

    if not result:
        raise DiceSemanticError("Cannot resolve an empty list to a number.")

    if isinstance(result[0], DieResult):
        numbers = dice_to_number_list(result, formatter)  # type: ignore[arg-type]
    else:
        numbers = result  # type: ignore[assignment]
    value = sum(0 if n.discarded else n.value for n in numbers)
    return ResolvedNumber(value, number_list_text(numbers))
