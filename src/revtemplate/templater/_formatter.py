"""Output formatters.

Templates write text to a formatter while pushing and popping labels.
Formatters decide what labels mean: the plain-text formatter drops them, the
rich formatter turns them into styles.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rich.style import Style
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


@runtime_checkable
class Formatter(Protocol):
    """Sink for labeled template output."""

    def write(self, text: str) -> None:
        """Write text under the current label stack."""
        ...

    def push_label(self, label: str) -> None:
        """Enter a labeled region."""
        ...

    def pop_label(self) -> None:
        """Leave the innermost labeled region."""
        ...


@contextmanager
def labeled(formatter: Formatter, label: str) -> Iterator[Formatter]:
    """Write to ``formatter`` inside a labeled region."""
    formatter.push_label(label)
    try:
        yield formatter
    finally:
        formatter.pop_label()


class PlainTextFormatter:
    """Formatter collecting unstyled text."""

    __slots__ = ("_depth", "_parts")

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._depth: int = 0

    def write(self, text: str) -> None:
        self._parts.append(text)

    def push_label(self, label: str) -> None:  # noqa: ARG002
        self._depth += 1

    def pop_label(self) -> None:
        self._depth -= 1

    def getvalue(self) -> str:
        """Return everything written so far."""
        return "".join(self._parts)


DEFAULT_COLORS: Mapping[str, str] = {
    "commit_id": "blue",
    "change_id": "magenta",
    "prefix": "bold",
    "rest": "bright_black",
    "name": "magenta",
    "remote": "magenta",
    "email": "yellow",
    "branches": "magenta",
    "tags": "magenta",
    "git_refs": "green",
    "git_head": "green",
    "working_copies": "green",
    "conflict": "red",
    "divergent": "red",
    "hidden": "red",
    "empty": "green",
    "root": "green",
}


class RichFormatter:
    """Formatter building a styled ``rich.text.Text``.

    Each label maps to a rich style string. Nested labels combine their
    styles, innermost last, so ``change_id`` + ``prefix`` renders as bold
    magenta.
    """

    __slots__ = ("_colors", "_labels", "_text")

    def __init__(self, colors: Mapping[str, str] | None = None) -> None:
        self._colors: dict[str, str] = dict(DEFAULT_COLORS)
        if colors:
            self._colors.update(colors)
        self._labels: list[str] = []
        self._text: Text = Text()

    @property
    def text(self) -> Text:
        """The styled text written so far."""
        return self._text

    @property
    def labels(self) -> tuple[str, ...]:
        """The current label stack, outermost first."""
        return tuple(self._labels)

    def write(self, text: str) -> None:
        if not text:
            return
        self._text.append(text, style=self._current_style())

    def push_label(self, label: str) -> None:
        self._labels.append(label)

    def pop_label(self) -> None:
        self._labels.pop()

    def _current_style(self) -> Style | None:
        styles = [
            Style.parse(self._colors[label])
            for label in self._labels
            if label in self._colors
        ]
        if not styles:
            return None
        return Style.combine(styles)
