from __future__ import annotations


class DiceError(ValueError):
    """User-facing evaluation errors (fail-fast, no partial roll is returned)."""

    code: str = "DICE_ERROR"

    def __init__(self, message: str, *, position: int | None = None) -> None:
        self.message = message
        self.position = position
        super().__init__(f"[{self.code}] {message}")


class DiceSyntaxError(DiceError):
    """The dice string could not be carved or processed."""

    code = "SYNTAX_ERROR"


class DiceSemanticError(DiceError):
    """The dice string is well formed but asks for something impossible."""

    code = "SEMANTIC_ERROR"


class DiceLimitError(DiceError):
    """More dice were rolled than the caller allowed."""

    code = "DICE_LIMIT"

    def __init__(self, max_dice: int) -> None:
        self.max_dice = max_dice
        super().__init__(f"Exceeded the maximum of {max_dice} dice.")


def unexpected_end(position: int | None = None) -> DiceSyntaxError:
    return DiceSyntaxError("Unexpected end of dice string.", position=position)


def unexpected_character(char: str, position: int | None = None) -> DiceSyntaxError:
    return DiceSyntaxError(f"Unexpected character '{char}'.", position=position)
