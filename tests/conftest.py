import pytest


class SequenceRandom:
    """Random source replaying a fixed list of floats in [0, 1)."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        if self.calls >= len(self.values):
            raise AssertionError(f"random source exhausted after {self.calls} draws")
        value = self.values[self.calls]
        self.calls += 1
        return value


@pytest.fixture
def draws():
    def make(*values):
        return SequenceRandom(values)

    return make


@pytest.fixture
def faces():
    """Random source producing the given faces on dice with `sides` sides."""

    def make(sides, *values, min_val=1):
        size = sides - min_val + 1
        return SequenceRandom([(v - min_val + 0.5) / size for v in values])

    return make
