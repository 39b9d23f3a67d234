"""Shortest unique id prefixes.

The uniqueness service answers "how many hex digits are needed to tell this
id apart from every other id of the same kind in the snapshot". Indexes are
built on first use and shared for the rest of the session.
"""

from __future__ import annotations

from bisect import bisect_left
from functools import cached_property
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from revtemplate.repo._models import ChangeId, CommitId
    from revtemplate.repo._protocol import RepoProtocol


def common_hex_prefix_len(left: str, right: str) -> int:
    length = 0
    for left_char, right_char in zip(left, right, strict=False):
        if left_char != right_char:
            break
        length += 1
    return length


class IdPrefixIndex:
    """Sorted set of hex ids supporting neighbour-based prefix queries."""

    __slots__ = ("_sorted_ids",)

    def __init__(self, hex_ids: Iterable[str]) -> None:
        self._sorted_ids: list[str] = sorted(set(hex_ids))

    def __len__(self) -> int:
        return len(self._sorted_ids)

    def shortest_unique_prefix_len(self, hex_id: str) -> int:
        """Return the minimal prefix length distinguishing ``hex_id``.

        The id doesn't have to be in the index. The result is at least 1 and
        never longer than the id itself.
        """
        position = bisect_left(self._sorted_ids, hex_id)
        neighbours: list[str] = []
        if position > 0:
            neighbours.append(self._sorted_ids[position - 1])
        if position < len(self._sorted_ids) and self._sorted_ids[position] == hex_id:
            position += 1
        if position < len(self._sorted_ids):
            neighbours.append(self._sorted_ids[position])
        longest = max(
            (common_hex_prefix_len(hex_id, other) for other in neighbours),
            default=0,
        )
        return max(1, min(longest + 1, len(hex_id)))


class IdPrefixContext:
    """Shortest-prefix service over the visible commits of one repository."""

    def __init__(self, repo: RepoProtocol) -> None:
        self._repo: RepoProtocol = repo

    @cached_property
    def commit_index(self) -> IdPrefixIndex:
        return IdPrefixIndex(self._repo.visible_commit_ids())

    @cached_property
    def change_index(self) -> IdPrefixIndex:
        return IdPrefixIndex(
            self._repo.get_commit(commit_id).change_id
            for commit_id in self._repo.visible_commit_ids()
        )

    def shortest_commit_prefix_len(self, commit_id: CommitId) -> int:
        return self.commit_index.shortest_unique_prefix_len(commit_id)

    def shortest_change_prefix_len(self, change_id: ChangeId) -> int:
        return self.change_index.shortest_unique_prefix_len(change_id)
