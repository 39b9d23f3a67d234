"""Tree merging over flattened trees.

Trees are compared as flat mappings from path to an opaque, hashable entry
(a blob id, or a ``(mode, sha)`` pair for git). Merging several parents folds
them pairwise, using the merged tree of their common ancestors as the base.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping, Sequence

    from revtemplate.repo._models import CommitId

type FlatTree = Mapping[str, object]


class TreeSource(Protocol):
    """Commit graph and tree access needed to merge commit trees."""

    def parent_ids_of(self, commit_id: CommitId) -> Sequence[CommitId]: ...

    def flat_tree_of(self, commit_id: CommitId) -> FlatTree: ...


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Outcome of a tree merge.

    Attributes:
        entries: Resolved entries. Conflicted paths keep the first side's
            entry, or are absent if the first side deleted them.
        conflicts: Paths that could not be resolved.
    """

    entries: dict[str, object] = field(default_factory=dict)
    conflicts: frozenset[str] = frozenset()

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts)


def merge_flat_trees(base: FlatTree, ours: FlatTree, theirs: FlatTree) -> MergeResult:
    """Three-way merge of flat trees, path by path."""
    entries: dict[str, object] = {}
    conflicts: set[str] = set()
    for path in sorted(set(base) | set(ours) | set(theirs)):
        base_entry = base.get(path)
        our_entry = ours.get(path)
        their_entry = theirs.get(path)
        if our_entry == their_entry or base_entry == their_entry:
            resolved = our_entry
        elif base_entry == our_entry:
            resolved = their_entry
        else:
            conflicts.add(path)
            resolved = our_entry
        if resolved is not None:
            entries[path] = resolved
    return MergeResult(entries=entries, conflicts=frozenset(conflicts))


def ancestors(
    commit_ids: Iterable[CommitId],
    source: TreeSource,
) -> set[CommitId]:
    """Return the given commits and all their ancestors."""
    seen: set[CommitId] = set()
    pending = list(commit_ids)
    while pending:
        commit_id = pending.pop()
        if commit_id in seen:
            continue
        seen.add(commit_id)
        pending.extend(source.parent_ids_of(commit_id))
    return seen


def heads(commit_ids: Collection[CommitId], source: TreeSource) -> list[CommitId]:
    """Return members of ``commit_ids`` that aren't ancestors of another member."""
    members = set(commit_ids)
    proper_ancestors = ancestors(
        (parent for commit_id in members for parent in source.parent_ids_of(commit_id)),
        source,
    )
    return sorted(members - proper_ancestors)


def merge_commit_trees(
    commit_ids: Sequence[CommitId],
    source: TreeSource,
) -> MergeResult:
    """Merge the trees of several commits.

    With no commits the result is the empty tree. With one commit it is that
    commit's tree. Otherwise each further commit is merged into the running
    result, using the merged trees of the common-ancestor heads as base.
    """
    if not commit_ids:
        return MergeResult()
    merged = MergeResult(entries=dict(source.flat_tree_of(commit_ids[0])))
    conflicts = set(merged.conflicts)
    for index, other_id in enumerate(commit_ids[1:], start=1):
        common = ancestors(commit_ids[:index], source) & ancestors([other_id], source)
        base = merge_commit_trees(heads(common, source), source)
        step = merge_flat_trees(base.entries, merged.entries, source.flat_tree_of(other_id))
        conflicts |= step.conflicts | base.conflicts
        merged = MergeResult(entries=step.entries)
    return MergeResult(entries=merged.entries, conflicts=frozenset(conflicts))
