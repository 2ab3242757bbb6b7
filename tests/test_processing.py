import pytest

from mcp_dice_engine.errors import DiceSyntaxError
from mcp_dice_engine.models import CompareCondition
from mcp_dice_engine.nodes import (
    Add,
    Bracket,
    DiceRoll,
    Divide,
    Exponent,
    Floor,
    KeepDropHighLow,
    Multiply,
    NumberList,
    StaticNumber,
    Subtract,
    SuccessFailCounter,
    shape,
)
from mcp_dice_engine.parser import parse_dice_string


def num(value):
    return StaticNumber(value, str(value))


D20_PLUS_5 = Bracket(Add(DiceRoll(1, 20), num(5)))


@pytest.mark.parametrize(
    ("text", "node"),
    [
        ("", None),
        ("   ", None),
        ("4D6 KH3", KeepDropHighLow(DiceRoll(4, 6), is_high=True, is_keep=True, count=3)),
        ("(1+3)*2", Multiply(Bracket(Add(num(1), num(3))), num(2))),
        ("2*3+4", Add(Multiply(num(2), num(3)), num(4))),
        ("10-2-3", Subtract(Subtract(num(10), num(2)), num(3))),
        ("2^3^2", Exponent(num(2), Exponent(num(3), num(2)))),
        ("1^(3-2)+3", Add(Exponent(num(1), Bracket(Subtract(num(3), num(2)))), num(3))),
        ("((7-3)/2)", Bracket(Divide(Bracket(Subtract(num(7), num(3))), num(2)))),
        ("floor(5.9)", Floor(StaticNumber(5.9, "5.9"))),
        ("{1d20+5,1d20+5}kh", KeepDropHighLow(NumberList((D20_PLUS_5, D20_PLUS_5)), is_high=True, is_keep=True)),
        (
            "{2d20+1d10}>7",
            SuccessFailCounter(Bracket(Add(DiceRoll(2, 20), DiceRoll(1, 10))), CompareCondition(">", 7)),
        ),
        ("{1,2}", NumberList((Bracket(num(1)), Bracket(num(2))))),
        ("{}", NumberList(())),
    ],
)
def test_parse_dice_string(text, node):
    assert parse_dice_string(text) == node


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("4d6", "dice_roll"),
        ("4d6kh3", "dice_roll"),
        ("1d6+1d8", "dice_roll"),
        ("(2d6)", "dice_roll"),
        ("{4d6}kh", "dice_roll"),
        ("1d6+1", "number"),
        ("1d6-1d6", "number"),
        ("6d10>7", "number"),
        ("4d6m", "number"),
        ("floor(1d6)", "number"),
        ("{1,2}", "number_list"),
        ("{1,2}kh", "number_list"),
    ],
)
def test_shape(text, expected):
    assert shape(parse_dice_string(text)) == expected


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("1+", "Math operator '+' is missing an operand."),
        ("*2", "Math operator '*' is missing an operand."),
        ("1d6+(", "Bracket not closed."),
        ("()", "Brackets must contain exactly one expression."),
        ("{1,2}!", "Found elements that are not linked by a math operator."),
        ("{1,2}r1", "Unknown list modifiers 'r1'."),
    ],
)
def test_process_rejections(text, message):
    with pytest.raises(DiceSyntaxError) as exc:
        parse_dice_string(text)
    assert exc.value.message == message
