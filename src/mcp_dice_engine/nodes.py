"""Resolution nodes: the executable tree built from a carved dice string.

Every variant is an immutable dataclass. Behaviour lives in
`evaluator.resolve`, which dispatches over this closed set of classes;
`shape` reports what a node resolves to so modifiers can check that they
are applied to something they support.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, TypeAlias

from .models import CompareCondition, Number, Shape


@dataclass(frozen=True)
class DiceRoll:
    count: int
    sides: int
    min_value: int = 1


@dataclass(frozen=True)
class CustomDiceRoll:
    count: int
    faces: tuple[int, ...]


@dataclass(frozen=True)
class StaticNumber:
    value: Number
    text: str = ""

    def display(self) -> str:
        return self.text or str(self.value)


@dataclass(frozen=True)
class ExplodeRegular:
    child: ResolutionNode
    condition: CompareCondition | None = None


@dataclass(frozen=True)
class ExplodeCompounding:
    child: ResolutionNode
    condition: CompareCondition | None = None


@dataclass(frozen=True)
class ExplodePenetrating:
    child: ResolutionNode
    condition: CompareCondition | None = None


@dataclass(frozen=True)
class Reroll:
    child: ResolutionNode
    conditions: tuple[CompareCondition, ...]
    only_once: bool = False


@dataclass(frozen=True)
class KeepDropConditional:
    child: ResolutionNode
    conditions: tuple[CompareCondition, ...]
    is_keep: bool


@dataclass(frozen=True)
class KeepDropHighLow:
    child: ResolutionNode
    is_high: bool
    is_keep: bool
    count: int = 1


@dataclass(frozen=True)
class NumberMatcher:
    child: ResolutionNode
    resolve_to_match_count: bool = False


@dataclass(frozen=True)
class SuccessFailCounter:
    child: ResolutionNode
    success: CompareCondition
    failure: CompareCondition | None = None


@dataclass(frozen=True)
class Bracket:
    child: ResolutionNode


@dataclass(frozen=True)
class NumberList:
    entries: tuple[ResolutionNode, ...]


@dataclass(frozen=True)
class UnaryFunction:
    child: ResolutionNode

    name: ClassVar[str] = ""


@dataclass(frozen=True)
class Floor(UnaryFunction):
    name: ClassVar[str] = "floor"


@dataclass(frozen=True)
class Ceiling(UnaryFunction):
    name: ClassVar[str] = "ceil"


@dataclass(frozen=True)
class Round(UnaryFunction):
    name: ClassVar[str] = "round"


@dataclass(frozen=True)
class Absolute(UnaryFunction):
    name: ClassVar[str] = "abs"


@dataclass(frozen=True)
class BinaryMath:
    left: ResolutionNode
    right: ResolutionNode

    symbol: ClassVar[str] = ""


@dataclass(frozen=True)
class Add(BinaryMath):
    symbol: ClassVar[str] = "+"


@dataclass(frozen=True)
class Subtract(BinaryMath):
    symbol: ClassVar[str] = "-"


@dataclass(frozen=True)
class Multiply(BinaryMath):
    symbol: ClassVar[str] = "*"


@dataclass(frozen=True)
class Divide(BinaryMath):
    symbol: ClassVar[str] = "/"


@dataclass(frozen=True)
class Modulo(BinaryMath):
    symbol: ClassVar[str] = "%"


@dataclass(frozen=True)
class Exponent(BinaryMath):
    symbol: ClassVar[str] = "^"


ResolutionNode: TypeAlias = (
    DiceRoll
    | CustomDiceRoll
    | StaticNumber
    | ExplodeRegular
    | ExplodeCompounding
    | ExplodePenetrating
    | Reroll
    | KeepDropConditional
    | KeepDropHighLow
    | NumberMatcher
    | SuccessFailCounter
    | Bracket
    | NumberList
    | UnaryFunction
    | BinaryMath
)

Explosion: TypeAlias = ExplodeRegular | ExplodeCompounding | ExplodePenetrating

FUNCTION_NODES: dict[str, type[UnaryFunction]] = {
    cls.name: cls for cls in (Floor, Ceiling, Round, Absolute)
}

MATH_NODES: dict[str, type[BinaryMath]] = {
    cls.symbol: cls for cls in (Add, Subtract, Multiply, Divide, Modulo, Exponent)
}


def shape(node: ResolutionNode) -> Shape:
    match node:
        case DiceRoll() | CustomDiceRoll():
            return "dice_roll"
        case ExplodeRegular() | ExplodeCompounding() | ExplodePenetrating() | Reroll():
            return "dice_roll"
        case KeepDropConditional(child=child) | KeepDropHighLow(child=child):
            return "dice_roll" if shape(child) == "dice_roll" else "number_list"
        case Bracket(child=child):
            return shape(child)
        case NumberList():
            return "number_list"
        case Add(left=left, right=right):
            if shape(left) == "dice_roll" and shape(right) == "dice_roll":
                return "dice_roll"
            return "number"
        case _:
            return "number"
