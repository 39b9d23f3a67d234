"""Commit and change identifiers.

Commit ids render as plain hex. Change ids render in "reverse hex", which
maps ``0-9a-f`` onto ``z-k`` so the two kinds of id never look alike.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from revtemplate.templater import labeled

if TYPE_CHECKING:
    from revtemplate.repo import ChangeId, CommitId, IdPrefixContext
    from revtemplate.templater import Formatter

DEFAULT_SHORT_LEN: Final = 12

_HEX_DIGITS: Final = "0123456789abcdef"
_REVERSE_HEX_DIGITS: Final = "zyxwvutsrqponmlk"
_TO_REVERSE_HEX: Final = str.maketrans(_HEX_DIGITS, _REVERSE_HEX_DIGITS)
_FROM_REVERSE_HEX: Final = str.maketrans(_REVERSE_HEX_DIGITS, _HEX_DIGITS)


def to_reverse_hex(hex_text: str) -> str:
    """Encode lowercase hex in the reverse-hex alphabet.

    Raises:
        ValueError: If ``hex_text`` has a non-hex character.
    """
    if not set(hex_text) <= set(_HEX_DIGITS):
        msg = f"Not a lowercase hex string: {hex_text!r}"
        raise ValueError(msg)
    return hex_text.translate(_TO_REVERSE_HEX)


def from_reverse_hex(reverse_hex: str) -> str:
    """Decode a reverse-hex string back to lowercase hex.

    Raises:
        ValueError: If ``reverse_hex`` has a character outside ``k-z``.
    """
    if not set(reverse_hex) <= set(_REVERSE_HEX_DIGITS):
        msg = f"Not a reverse hex string: {reverse_hex!r}"
        raise ValueError(msg)
    return reverse_hex.translate(_FROM_REVERSE_HEX)


class IdSpace(StrEnum):
    """Which identifier namespace an id belongs to."""

    COMMIT = "commit"
    CHANGE = "change"


@dataclass(frozen=True, slots=True)
class ShortestIdPrefix:
    """An id split into its shortest unique prefix and the remainder.

    Attributes:
        prefix: Leading characters needed to identify the id.
        rest: The remaining characters.
    """

    prefix: str
    rest: str

    def format(self, formatter: Formatter) -> None:
        with labeled(formatter, "prefix"):
            formatter.write(self.prefix)
        with labeled(formatter, "rest"):
            formatter.write(self.rest)

    def to_upper(self) -> ShortestIdPrefix:
        return ShortestIdPrefix(self.prefix.upper(), self.rest.upper())

    def to_lower(self) -> ShortestIdPrefix:
        return ShortestIdPrefix(self.prefix.lower(), self.rest.lower())


@dataclass(frozen=True, slots=True)
class CommitOrChangeId:
    """A commit id or a change id, with hex rendering and shortening.

    Attributes:
        space: The identifier namespace.
        id: The raw lowercase hex id.
    """

    space: IdSpace
    id: str

    @classmethod
    def commit(cls, commit_id: CommitId) -> CommitOrChangeId:
        return cls(IdSpace.COMMIT, commit_id)

    @classmethod
    def change(cls, change_id: ChangeId) -> CommitOrChangeId:
        return cls(IdSpace.CHANGE, change_id)

    def hex(self) -> str:
        """Render the id: verbatim for commits, reverse hex for changes."""
        match self.space:
            case IdSpace.COMMIT:
                return self.id
            case IdSpace.CHANGE:
                return to_reverse_hex(self.id)

    def short(self, total_len: int = DEFAULT_SHORT_LEN) -> str:
        """Return the first ``total_len`` characters of ``hex()``.

        Negative lengths count as zero.
        """
        return self.hex()[: max(total_len, 0)]

    def shortest(self, id_prefix_context: IdPrefixContext, total_len: int = 0) -> ShortestIdPrefix:
        """Split ``hex()`` at its shortest unique prefix.

        The split point is the larger of the unique prefix length and
        ``total_len``. The prefix and rest always concatenate back to the full
        hex rendering.
        """
        match self.space:
            case IdSpace.COMMIT:
                unique_len = id_prefix_context.shortest_commit_prefix_len(self.id)
            case IdSpace.CHANGE:
                unique_len = id_prefix_context.shortest_change_prefix_len(self.id)
        text = self.hex()
        split = max(unique_len, total_len)
        return ShortestIdPrefix(prefix=text[:split], rest=text[split:])

    def format(self, formatter: Formatter) -> None:
        formatter.write(self.hex())
