import random

import pytest

from mcp_dice_engine.errors import DiceError
from mcp_dice_engine.models import ResolvedNumber
from mcp_dice_engine.parser import resolve_dice_string, standardize_dice_string


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (" 1D6 ", "1d6"),
        ("4d6 KH3", "4d6kh3"),
        ("{1d20 + 5,\t1d20 + 5} kh", "{1d20+5,1d20+5}kh"),
        ("", ""),
        (None, ""),
    ],
)
def test_standardize(text, expected):
    assert standardize_dice_string(text) == expected
    assert standardize_dice_string(standardize_dice_string(text)) == expected


@pytest.mark.parametrize("text", ["", "   "])
def test_empty_input_resolves_to_zero(text):
    assert resolve_dice_string(text) == ResolvedNumber(0, "", "untyped")


@pytest.mark.parametrize(
    ("text", "sequence", "value", "expected_text", "result_type"),
    [
        ("1d10", [0.5], 6, "[6]", "untyped"),
        ("{1d20+5,1d20+5}kh", [0.7, 0.4], 20, "(([15] + 5) + ~~([9] + 5)~~)", "untyped"),
        ("{2d20+1d10}>7", [0.7, 0.1, 0.9], 2, "(__[15]__ + [3] + __[10]__)", "success_fail"),
        ("{3d20+5}>10", [0.7, 0.6, 0.1], 1, "(([15] + [13] + [3]) + 5)", "success_fail"),
        ("{1d10ro>5,2d10}dl", [0.7, 0.1, 0.6, 0.5], 13, "(~~([8] + [2])~~ + ([7] + [6]))", "untyped"),
        ("1d20 + 1d20", [0.7, 0.4], 24, "([15] + [9])", "untyped"),
        ("1d20 - 1d20", [0.7, 0.4], 6, "[15] - [9]", "untyped"),
    ],
)
def test_resolve_with_scripted_draws(draws, text, sequence, value, expected_text, result_type):
    result = resolve_dice_string(text, random_source=draws(*sequence))

    assert result.value == value
    assert result.text == expected_text
    assert result.type == result_type


@pytest.mark.parametrize(
    ("text", "value", "expected_text"),
    [
        ("(1+3)*2+((7-3)/2)", 10, "(1 + 3) \\* 2 + ((7 - 3) / 2)"),
        ("1^(3-2)+3", 4, "1 ^ (3 - 2) + 3"),
        ("2^3^2", 512, "2 ^ 3 ^ 2"),
        ("2*3+4*5", 26, "2 \\* 3 + 4 \\* 5"),
        ("10-2-3", 5, "10 - 2 - 3"),
        ("3*5", 15, "3 \\* 5"),
        ("51%10", 1, "51 % 10"),
        ("-7%3", -1, "-7 % 3"),
        ("7%-3", 1, "7 % -3"),
        ("-6%3", 0, "-6 % 3"),
        ("5.5%2", 1.5, "5.5 % 2"),
        ("7/2", 3.5, "7 / 2"),
        ("2*-3", -6, "2 \\* -3"),
        ("(1+1)-1", 1, "(1 + 1) - 1"),
        ("ceil(5.1)", 6, "ceil(5.1)"),
        ("floor(5.9)", 5, "floor(5.9)"),
        ("round(5.5)", 6, "round(5.5)"),
        ("round(4.5)", 5, "round(4.5)"),
        ("round(-2.5)", -2, "round(-2.5)"),
        ("abs(-5)", 5, "abs(-5)"),
        ("abs(2-5)*2", 6, "abs(2 - 5) \\* 2"),
        ("{3,1,4,5,1}", 14, "((3) + (1) + (4) + (5) + (1))"),
        ("{3,1,4,5,1}kh3", 12, "((3) + ~~(1)~~ + (4) + (5) + ~~(1)~~)"),
    ],
)
def test_resolve_math(text, value, expected_text):
    # No dice involved, so no random source is ever consulted.
    result = resolve_dice_string(text, random_source=random.Random(0))

    assert result.value == value
    assert result.text == expected_text


def test_decimals_keep_their_digits():
    result = resolve_dice_string("1.05+1")

    assert result.value == pytest.approx(2.05)
    assert result.text == "1.05 + 1"


def test_same_seed_same_roll():
    text = "{4d6kh3,4d6kh3,4d6kh3}>10"
    a = resolve_dice_string(text, random_source=random.Random(42))
    b = resolve_dice_string(text, random_source=random.Random(42))

    assert a == b


@pytest.mark.parametrize(
    ("text", "prefix"),
    [
        ("2d6+", "[SYNTAX_ERROR]"),
        ("(1d6", "[SYNTAX_ERROR]"),
        ("4d6x", "[SYNTAX_ERROR]"),
        ("floor{1,2}", "[SYNTAX_ERROR]"),
        ("1/0", "[SEMANTIC_ERROR]"),
        ("{}", "[SEMANTIC_ERROR]"),
    ],
)
def test_resolve_rejections(text, prefix):
    with pytest.raises(DiceError) as exc:
        resolve_dice_string(text, random_source=random.Random(0))
    assert str(exc.value).startswith(prefix)
