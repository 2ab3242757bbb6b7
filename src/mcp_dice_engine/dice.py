from __future__ import annotations

import math
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol, Sequence


class RandomSource(Protocol):
    """Anything with a `random()` returning a float in [0, 1).

    `random.Random`, `secrets.SystemRandom` and the scripted sources used in
    tests all qualify.
    """

    def random(self) -> float: ...


def default_random_source() -> RandomSource:
    return secrets.SystemRandom()


def random_in_range(source: RandomSource, min_val: int, max_val: int) -> int:
    """Uniform integer draw over [min_val, max_val] from a single float."""
    return math.floor(source.random() * (max_val - min_val + 1)) + min_val


@dataclass(eq=False)
class DieResult(ABC):
    """One physical die and every roll that has contributed to it.

    `rolls` keeps the full history, including compounded rolls and the
    synthetic -1 of a penetrating explosion, so `value` is always its sum.
    A discarded die keeps its rolls for display.
    """

    rolls: list[int] = field(default_factory=list, kw_only=True)
    discarded: bool = field(default=False, kw_only=True)
    exploded: bool = field(default=False, kw_only=True)

    @property
    def value(self) -> int:
        return sum(self.rolls)

    @property
    def explode_threshold(self) -> int | None:
        return None

    @abstractmethod
    def draw(self, source: RandomSource) -> int: ...

    @abstractmethod
    def unrolled_copy(self) -> DieResult: ...

    def add_result(self, value: int) -> None:
        self.rolls.append(value)

    def add_roll(self, source: RandomSource) -> None:
        self.add_result(self.draw(source))


@dataclass(eq=False)
class StandardDie(DieResult):
    min_val: int
    max_val: int

    @property
    def explode_threshold(self) -> int | None:
        return self.max_val

    def draw(self, source: RandomSource) -> int:
        return random_in_range(source, self.min_val, self.max_val)

    def unrolled_copy(self) -> StandardDie:
        return StandardDie(self.min_val, self.max_val)


@dataclass(eq=False)
class CustomDie(DieResult):
    faces: tuple[int, ...]

    def draw(self, source: RandomSource) -> int:
        return self.faces[random_in_range(source, 0, len(self.faces) - 1)]

    def unrolled_copy(self) -> CustomDie:
        return CustomDie(self.faces)


def roll_standard(count: int, min_val: int, max_val: int, source: RandomSource) -> list[DieResult]:
    dice: list[DieResult] = []
    for _ in range(count):
        die = StandardDie(min_val, max_val)
        die.add_roll(source)
        dice.append(die)
    return dice


def roll_custom(count: int, faces: Sequence[int], source: RandomSource) -> list[DieResult]:
    frozen_faces = tuple(faces)
    dice: list[DieResult] = []
    for _ in range(count):
        die = CustomDie(frozen_faces)
        die.add_roll(source)
        dice.append(die)
    return dice
