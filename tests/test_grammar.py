import pytest

from mcp_dice_engine.cursor import DiceStringCursor
from mcp_dice_engine.errors import DiceSyntaxError
from mcp_dice_engine.grammar import parse_list_suffix, parse_number_or_dice, read_compare_point
from mcp_dice_engine.models import CompareCondition
from mcp_dice_engine.nodes import (
    DiceRoll,
    ExplodeCompounding,
    ExplodePenetrating,
    ExplodeRegular,
    KeepDropConditional,
    KeepDropHighLow,
    NumberList,
    NumberMatcher,
    Reroll,
    StaticNumber,
    SuccessFailCounter,
)


D6 = DiceRoll(count=1, sides=6)
FOUR_D6 = DiceRoll(count=4, sides=6)


def eq(target):
    return CompareCondition("=", target)


@pytest.mark.parametrize(
    ("text", "node"),
    [
        ("12", StaticNumber(12, "12")),
        ("-3", StaticNumber(-3, "-3")),
        ("1.5", StaticNumber(1.5, "1.5")),
        ("1.05", StaticNumber(1.05, "1.05")),
        ("-0.5", StaticNumber(-0.5, "-0.5")),
        ("d20", DiceRoll(count=1, sides=20)),
        ("4d6", FOUR_D6),
        ("0d6", DiceRoll(count=0, sides=6)),
        ("4df", DiceRoll(count=4, sides=1, min_value=-1)),
    ],
)
def test_parse_numbers_and_dice(text, node):
    assert parse_number_or_dice(text) == node


@pytest.mark.parametrize(
    ("text", "node"),
    [
        ("1d6!", ExplodeRegular(D6)),
        ("1d6!5", ExplodeRegular(D6, eq(5))),
        ("1d6!!>4", ExplodeCompounding(D6, CompareCondition(">", 4))),
        ("1d6!p", ExplodePenetrating(D6)),
        ("1d6!p<2", ExplodePenetrating(D6, CompareCondition("<", 2))),
        ("4d6r1r2", Reroll(FOUR_D6, (eq(1), eq(2)))),
        ("4d6ro<3", Reroll(FOUR_D6, (CompareCondition("<", 3),), only_once=True)),
        ("4d6r1ro2", Reroll(Reroll(FOUR_D6, (eq(1),)), (eq(2),), only_once=True)),
        ("4d6kh3", KeepDropHighLow(FOUR_D6, is_high=True, is_keep=True, count=3)),
        ("4d6dl", KeepDropHighLow(FOUR_D6, is_high=False, is_keep=False, count=1)),
        ("4d6k5k6", KeepDropConditional(FOUR_D6, (eq(5), eq(6)), is_keep=True)),
        ("4d6d<3", KeepDropConditional(FOUR_D6, (CompareCondition("<", 3),), is_keep=False)),
        (
            "4d6k5kh",
            KeepDropHighLow(KeepDropConditional(FOUR_D6, (eq(5),), is_keep=True), is_high=True, is_keep=True),
        ),
        (
            "4d6r1kh3",
            KeepDropHighLow(Reroll(FOUR_D6, (eq(1),)), is_high=True, is_keep=True, count=3),
        ),
        ("4d6m", NumberMatcher(FOUR_D6)),
        ("4d6mt", NumberMatcher(FOUR_D6, resolve_to_match_count=True)),
        ("6d10>7f1", SuccessFailCounter(DiceRoll(6, 10), CompareCondition(">", 7), eq(1))),
        ("6d10=10", SuccessFailCounter(DiceRoll(6, 10), eq(10))),
        (
            "4d6kh3>4",
            SuccessFailCounter(
                KeepDropHighLow(FOUR_D6, is_high=True, is_keep=True, count=3),
                CompareCondition(">", 4),
            ),
        ),
    ],
)
def test_parse_modifiers_in_reading_order(text, node):
    assert parse_number_or_dice(text) == node


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("", "Unexpected end of dice string."),
        ("-", "Expected digits after '-'."),
        ("1-2", "Unexpected '-' after start of integer."),
        ("1.-5", "Malformed decimal number."),
        ("-2d6", "Cannot roll a negative number of dice."),
        ("2d0", "Dice must have 1 or more faces."),
        ("2d", "Unexpected end of dice string."),
        ("2dx", "Unexpected character 'x'."),
        ("4d6q", "Unexpected character 'q'."),
        ("4d6mx", "Unexpected character 'x'."),
        ("4d6kh-1", "Cannot keep or drop a negative number of values."),
        ("1d6r", "Unexpected end of dice string."),
        ("1d6rx", "Unexpected compare point type 'x'."),
        ("4d6k", "Unexpected end of dice string."),
        ("x", "Unexpected character 'x' encountered parsing integer."),
    ],
)
def test_parse_rejections(text, message):
    with pytest.raises(DiceSyntaxError) as exc:
        parse_number_or_dice(text)
    assert exc.value.message == message
    assert str(exc.value).startswith("[SYNTAX_ERROR]")


@pytest.mark.parametrize(
    ("text", "condition"),
    [
        ("5", eq(5)),
        ("-1", eq(-1)),
        ("=5", eq(5)),
        ("<3", CompareCondition("<", 3)),
        (">-2", CompareCondition(">", -2)),
    ],
)
def test_read_compare_point(text, condition):
    cursor = DiceStringCursor(text)
    assert read_compare_point(cursor) == condition
    assert cursor.done


def test_list_suffix_empty_is_a_no_op():
    entries = NumberList((StaticNumber(1, "1"),))
    assert parse_list_suffix(entries, "") is entries


@pytest.mark.parametrize(
    ("suffix", "expected"),
    [
        ("kh", lambda n: KeepDropHighLow(n, is_high=True, is_keep=True)),
        ("dl2", lambda n: KeepDropHighLow(n, is_high=False, is_keep=False, count=2)),
        ("k3", lambda n: KeepDropConditional(n, (eq(3),), is_keep=True)),
        (">3f1", lambda n: SuccessFailCounter(n, CompareCondition(">", 3), eq(1))),
        ("mt", lambda n: NumberMatcher(n, resolve_to_match_count=True)),
    ],
)
def test_list_suffix(suffix, expected):
    entries = NumberList((StaticNumber(1, "1"), StaticNumber(2, "2")))
    assert parse_list_suffix(entries, suffix) == expected(entries)


@pytest.mark.parametrize("suffix", ["!", "r1", "khkl", "m>3"])
def test_list_suffix_rejections(suffix):
    entries = NumberList((StaticNumber(1, "1"),))
    with pytest.raises(DiceSyntaxError):
        parse_list_suffix(entries, suffix)
