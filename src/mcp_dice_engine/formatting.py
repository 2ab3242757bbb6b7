"""Text decoration strategies used while resolving a dice string.

The evaluator never adds markup itself; it asks a formatter, so the same
result can be rendered as chat Markdown or as plain text.
"""

from __future__ import annotations

from typing import Protocol


class Formatter(Protocol):
    def add_discarded_formatting(self, text: str) -> str: ...

    def add_explode_formatting(self, text: str, is_die: bool) -> str: ...

    def add_success_formatting(self, text: str, is_die: bool) -> str: ...

    def add_failure_formatting(self, text: str, is_die: bool) -> str: ...

    def format_operator(self, symbol: str) -> str: ...


class MarkdownFormatter:
    """Chat Markdown: ~~discarded~~, **exploded**, __success__, *failure*."""

    def add_discarded_formatting(self, text: str) -> str:
        if not text:
            return text
        # Strike-through does not nest; collapse inner markers into one span.
        return f"~~{text.replace('~~', '')}~~"

    def add_explode_formatting(self, text: str, is_die: bool) -> str:
        if not is_die or not text:
            return text
        return f"**{text}**"

    def add_success_formatting(self, text: str, is_die: bool) -> str:
        if not is_die or not text:
            return text
        return f"__{text}__"

    def add_failure_formatting(self, text: str, is_die: bool) -> str:
        if not is_die or not text:
            return text
        return f"*{text}*"

    def format_operator(self, symbol: str) -> str:
        return "\\*" if symbol == "*" else symbol


class PlainFormatter:
    """Undecorated text; only discarded values are marked, as ~value~."""

    def add_discarded_formatting(self, text: str) -> str:
        if not text:
            return text
        return f"~{text.replace('~', '')}~"

    def add_explode_formatting(self, text: str, is_die: bool) -> str:
        return text

    def add_success_formatting(self, text: str, is_die: bool) -> str:
        return text

    def add_failure_formatting(self, text: str, is_die: bool) -> str:
        return text

    def format_operator(self, symbol: str) -> str:
        return symbol
