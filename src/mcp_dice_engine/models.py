from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence, TypeAlias


Number: TypeAlias = int | float
Shape: TypeAlias = Literal["dice_roll", "number", "number_list"]
ResultType: TypeAlias = Literal["untyped", "success_fail", "match_count"]
CompareOperator: TypeAlias = Literal["=", "<", ">"]


@dataclass(frozen=True)
class CompareCondition:
    operator: CompareOperator
    target: int

    def matches(self, value: Number) -> bool:
        if self.operator == "<":
            return value < self.target
        if self.operator == ">":
            return value > self.target
        return value == self.target

    def __str__(self) -> str:
        return f"{self.operator}{self.target}"


def any_condition_matches(conditions: Sequence[CompareCondition], value: Number) -> bool:
    return any(c.matches(value) for c in conditions)


@dataclass
class ResolvedNumber:
    value: Number
    text: str
    type: ResultType = "untyped"
    discarded: bool = False


def shared_type(left: ResolvedNumber, right: ResolvedNumber) -> ResultType:
    return left.type if left.type == right.type else "untyped"
