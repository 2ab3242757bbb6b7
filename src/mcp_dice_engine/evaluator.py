"""Resolve a tree of resolution nodes into dice, number lists or numbers.

Evaluation is depth first and strictly ordered: the random source is
consulted in traversal order, so a scripted source always reproduces the
same roll. Die results are created and mutated only here, and never outlive
a single call to `resolve_dice_string`.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator

from .dice import DieResult, RandomSource, roll_custom, roll_standard
from .errors import DiceSemanticError
from .formatting import Formatter
from .models import Number, ResolvedNumber, Shape, any_condition_matches, shared_type
from .nodes import (
    Absolute,
    Add,
    BinaryMath,
    Bracket,
    Ceiling,
    CustomDiceRoll,
    DiceRoll,
    Divide,
    ExplodeCompounding,
    ExplodePenetrating,
    ExplodeRegular,
    Explosion,
    Exponent,
    Floor,
    KeepDropConditional,
    KeepDropHighLow,
    Modulo,
    Multiply,
    NumberList,
    NumberMatcher,
    Reroll,
    ResolutionNode,
    Round,
    StaticNumber,
    Subtract,
    SuccessFailCounter,
    UnaryFunction,
    shape,
)
from .resolution import Resolved, dice_to_number_list, number_list_text, resolve_to_number
from .tracking import Tracker


# Integer powers whose result would need more bits than this are rejected.
MAX_POWER_BITS = 4096

_DICE: tuple[Shape, ...] = ("dice_roll",)
_LISTS: tuple[Shape, ...] = ("dice_roll", "number_list")


@dataclass(frozen=True)
class ResolveContext:
    tracker: Tracker
    formatter: Formatter
    random_source: RandomSource


def resolve(node: ResolutionNode, context: ResolveContext) -> Resolved:
    match node:
        case DiceRoll(count=count, sides=sides, min_value=min_value):
            context.tracker.notify_new_dice(count)
            return roll_standard(count, min_value, sides, context.random_source)
        case CustomDiceRoll(count=count, faces=faces):
            context.tracker.notify_new_dice(count)
            return roll_custom(count, faces, context.random_source)
        case StaticNumber():
            return ResolvedNumber(node.value, node.display())
        case ExplodeRegular() | ExplodePenetrating():
            return _explode_into_new_dice(node, context)
        case ExplodeCompounding():
            return _explode_compounding(node, context)
        case Reroll():
            return _reroll(node, context)
        case KeepDropConditional():
            return _keep_drop_conditional(node, context)
        case KeepDropHighLow():
            return _keep_drop_high_low(node, context)
        case NumberMatcher():
            return _match_numbers(node, context)
        case SuccessFailCounter():
            return _count_successes(node, context)
        case Bracket(child=child):
            result = resolve(child, context)
            if isinstance(result, ResolvedNumber) and result.text:
                return replace(result, text=f"({result.text})")
            return result
        case NumberList(entries=entries):
            return [resolve_to_number(resolve(e, context), context.formatter) for e in entries]
        case UnaryFunction():
            return _apply_function(node, context)
        case Add() if shape(node) == "dice_roll":
            # Two dice pools stay dice so later modifiers can still act on them.
            left = resolve(node.left, context)
            right = resolve(node.right, context)
            return [*left, *right]  # type: ignore[misc]
        case BinaryMath():
            return _apply_math(node, context)
        case _:
            raise TypeError(f"Unknown resolution node: {node!r}")


def _resolve_child(
    owner: ResolutionNode, child: ResolutionNode, allowed: tuple[Shape, ...], context: ResolveContext
) -> Resolved:
    if shape(child) not in allowed:
        raise DiceSemanticError(
            f"{type(owner).__name__} does not support operating on {type(child).__name__}."
        )
    return resolve(child, context)


def _resolve_dice(owner: ResolutionNode, child: ResolutionNode, context: ResolveContext) -> list[DieResult]:
    return _resolve_child(owner, child, _DICE, context)  # type: ignore[return-value]


def _resolve_numbers(owner: ResolutionNode, child: ResolutionNode, context: ResolveContext) -> list[ResolvedNumber]:
    values = _resolve_child(owner, child, _LISTS, context)
    if shape(child) == "dice_roll":
        return dice_to_number_list(values, context.formatter)  # type: ignore[arg-type]
    return values  # type: ignore[return-value]


def _discard(entry: DieResult | ResolvedNumber, formatter: Formatter) -> None:
    if isinstance(entry, ResolvedNumber):
        entry.text = formatter.add_discarded_formatting(entry.text)
    entry.discarded = True


def _check_explodable(die: DieResult) -> int:
    threshold = die.explode_threshold
    if threshold is None:
        raise DiceSemanticError("Explode function not supported for custom dice.")
    return threshold


def _explodes(node: Explosion, threshold: int, roll: int) -> bool:
    if node.condition is None:
        return roll >= threshold
    return node.condition.matches(roll)


def _explode_into_new_dice(node: ExplodeRegular | ExplodePenetrating, context: ResolveContext) -> list[DieResult]:
    dice = _resolve_dice(node, node.child, context)
    penetrating = isinstance(node, ExplodePenetrating)

    # The pool grows while it is scanned, so new dice can explode in turn.
    idx = 0
    while idx < len(dice):
        die = dice[idx]
        idx += 1
        threshold = _check_explodable(die)
        if die.discarded:
            continue

        # A penetrating explosion only looks at the die's own roll, never at
        # the -1 it was penalised with.
        rolls = die.rolls[:1] if penetrating else list(die.rolls)
        for roll in rolls:
            if not _explodes(node, threshold, roll):
                continue

            context.tracker.notify_new_dice(1)
            die.exploded = True
            new_die = die.unrolled_copy()
            new_die.add_roll(context.random_source)
            if penetrating:
                new_die.add_result(-1)
            dice.append(new_die)

    return dice


def _explode_compounding(node: ExplodeCompounding, context: ResolveContext) -> list[DieResult]:
    dice = _resolve_dice(node, node.child, context)

    for die in dice:
        threshold = _check_explodable(die)
        if die.discarded:
            continue

        while _explodes(node, threshold, die.rolls[-1]):
            context.tracker.notify_new_dice(1)
            die.exploded = True
            die.add_roll(context.random_source)

    return dice


def _reroll(node: Reroll, context: ResolveContext) -> list[DieResult]:
    dice = _resolve_dice(node, node.child, context)

    # "ro" only looks at the dice that existed before any reroll.
    initial_count = len(dice)
    idx = 0
    while idx < len(dice) and (not node.only_once or idx < initial_count):
        die = dice[idx]
        idx += 1
        if die.discarded or not any_condition_matches(node.conditions, die.value):
            continue

        context.tracker.notify_new_dice(1)
        _discard(die, context.formatter)
        new_die = die.unrolled_copy()
        new_die.add_roll(context.random_source)
        dice.append(new_die)

    return dice


def _keep_drop_conditional(node: KeepDropConditional, context: ResolveContext) -> Resolved:
    values = _resolve_child(node, node.child, _LISTS, context)

    for entry in values:  # type: ignore[union-attr]
        if entry.discarded:
            continue
        if node.is_keep != any_condition_matches(node.conditions, entry.value):
            _discard(entry, context.formatter)

    return values


def _keep_drop_high_low(node: KeepDropHighLow, context: ResolveContext) -> Resolved:
    values = _resolve_child(node, node.child, _LISTS, context)

    # Entries that are already discarded neither count towards `count` nor
    # get discarded a second time.
    ordered = sorted(values, key=lambda v: v.value, reverse=node.is_high)  # type: ignore[union-attr]
    counted = 0
    for entry in ordered:
        if entry.discarded:
            continue
        if counted < node.count:
            counted += 1
            if not node.is_keep:
                _discard(entry, context.formatter)
        elif node.is_keep:
            _discard(entry, context.formatter)

    return values


def _match_numbers(node: NumberMatcher, context: ResolveContext) -> ResolvedNumber:
    values = _resolve_numbers(node, node.child, context)
    if not values:
        raise DiceSemanticError("Cannot match values in an empty list.")

    groups: dict[Number, list[ResolvedNumber]] = {}
    discarded: list[ResolvedNumber] = []
    for entry in values:
        if entry.discarded:
            discarded.append(entry)
        else:
            groups.setdefault(entry.value, []).append(entry)

    # Biggest matches first, ties broken by the higher value.
    ordered_groups = sorted(groups.values(), key=lambda g: (len(g), g[0].value), reverse=True)
    ordered = [entry for group in ordered_groups for entry in group] + discarded
    text = number_list_text(ordered)

    if node.resolve_to_match_count:
        matches = sum(1 for group in ordered_groups if len(group) > 1)
        return ResolvedNumber(matches, text, "match_count")

    return ResolvedNumber(sum(e.value for group in ordered_groups for e in group), text)


def _count_successes(node: SuccessFailCounter, context: ResolveContext) -> ResolvedNumber:
    is_die = shape(node.child) == "dice_roll"
    values = _resolve_numbers(node, node.child, context)
    if not values:
        raise DiceSemanticError("Cannot resolve an empty list to a number.")
    formatter = context.formatter

    total = 0
    for entry in values:
        if entry.discarded:
            continue
        if node.success.matches(entry.value):
            entry.text = formatter.add_success_formatting(entry.text, is_die)
            total += 1
        elif node.failure is not None and node.failure.matches(entry.value):
            entry.text = formatter.add_failure_formatting(entry.text, is_die)
            total -= 1

    return ResolvedNumber(total, number_list_text(values), "success_fail")


@contextmanager
def _arithmetic_errors() -> Iterator[None]:
    try:
        yield
    except ZeroDivisionError:
        raise DiceSemanticError("Division by zero.") from None
    except OverflowError:
        raise DiceSemanticError("Math result is too large.") from None
    except ValueError:
        raise DiceSemanticError("Math domain error.") from None


def _round_half_up(value: Number) -> int:
    return math.floor(value + 0.5)


def _apply_function(node: UnaryFunction, context: ResolveContext) -> ResolvedNumber:
    number = resolve_to_number(resolve(node.child, context), context.formatter)

    with _arithmetic_errors():
        match node:
            case Floor():
                value: Number = math.floor(number.value)
            case Ceiling():
                value = math.ceil(number.value)
            case Round():
                value = _round_half_up(number.value)
            case Absolute():
                value = abs(number.value)
            case _:
                raise TypeError(f"Unknown function node: {node!r}")

    return replace(number, value=value, text=f"{node.name}({number.text})")


def _power(base: Number, exponent: Number) -> Number:
    if isinstance(base, int) and isinstance(exponent, int) and exponent >= 0:
        # Lower bound on the bit length of the result.
        if abs(base) > 1 and exponent * (abs(base).bit_length() - 1) + 1 > MAX_POWER_BITS:
            raise OverflowError("integer power too large")
        return base**exponent
    return math.pow(base, exponent)


def _remainder(dividend: Number, divisor: Number) -> Number:
    # Truncated remainder: the result takes the sign of the dividend.
    if divisor == 0:
        raise ZeroDivisionError("modulo by zero")
    if isinstance(dividend, int) and isinstance(divisor, int):
        remainder = abs(dividend) % abs(divisor)
        return -remainder if dividend < 0 else remainder
    return math.fmod(dividend, divisor)


def _apply_math(node: BinaryMath, context: ResolveContext) -> ResolvedNumber:
    left = resolve_to_number(resolve(node.left, context), context.formatter)
    right = resolve_to_number(resolve(node.right, context), context.formatter)

    with _arithmetic_errors():
        match node:
            case Add():
                value: Number = left.value + right.value
            case Subtract():
                value = left.value - right.value
            case Multiply():
                value = left.value * right.value
            case Divide():
                value = left.value / right.value
            case Modulo():
                value = _remainder(left.value, right.value)
            case Exponent():
                value = _power(left.value, right.value)
            case _:
                raise TypeError(f"Unknown math node: {node!r}")

    text = f"{left.text} {context.formatter.format_operator(node.symbol)} {right.text}"
    return ResolvedNumber(value, text, shared_type(left, right))

