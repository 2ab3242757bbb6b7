from __future__ import annotations

from .errors import unexpected_character, unexpected_end


class DiceStringCursor:
    """Single-character cursor over a standardized dice string.

    `index` is the position of the last character returned by `next()`,
    starting at -1 before anything has been read. Both `peek()` and `next()`
    return None once the end of the text is reached.
    """

    def __init__(self, text: str | None) -> None:
        self.text = text or ""
        self.index = -1

    def next(self) -> str | None:
        self.index += 1
        if self.index >= len(self.text):
            return None
        return self.text[self.index]

    def peek(self, offset: int = 1) -> str | None:
        idx = self.index + offset
        if idx >= len(self.text):
            return None
        return self.text[idx]

    @property
    def done(self) -> bool:
        return self.peek() is None

    def expect_done(self) -> None:
        char = self.peek()
        if char is not None:
            raise unexpected_character(char, self.index + 1)

    def expect_more(self) -> None:
        if self.peek() is None:
            raise unexpected_end(self.index + 1)
