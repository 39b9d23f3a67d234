"""In-memory repository.

This module provides a MemoryRepo class that implements RepoProtocol without
any backing store. Useful for unit testing templates and for hosts that
already hold commit data in memory.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from revtemplate.exceptions import CommitNotFoundError, TreeNotFoundError
from revtemplate.repo._merge import FlatTree, MergeResult, ancestors, merge_commit_trees
from revtemplate.repo._models import (
    ChangeId,
    Commit,
    CommitId,
    RefTarget,
    RemoteRef,
    Signature,
    TreeId,
    View,
    WorkspaceId,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

ROOT_COMMIT_ID: Final = CommitId("0" * 40)
ROOT_CHANGE_ID: Final = ChangeId("0" * 32)

DEFAULT_SIGNATURE: Final = Signature(
    name="Test User",
    email="test.user@example.com",
    timestamp=datetime(2024, 1, 1, tzinfo=UTC),
)


def hash_flat_tree(
    entries: Mapping[str, object],
    conflicts: frozenset[str] = frozenset(),
) -> TreeId:
    """Derive a content id for a flat tree."""
    digest = hashlib.sha1(usedforsecurity=False)
    for path in sorted(entries):
        digest.update(f"{path}\0{entries[path]}\n".encode())
    for path in sorted(conflicts):
        digest.update(f"conflict\0{path}\n".encode())
    return TreeId(digest.hexdigest())


EMPTY_TREE_ID: Final = hash_flat_tree({})


@dataclass(slots=True)
class MemoryRepo:
    """Repository snapshot held entirely in memory.

    A root commit with the empty tree exists from the start. Commits added
    with ``add_commit`` become visible heads, replacing their parents as
    heads. Ref helpers replace the frozen ``view`` with an updated copy.

    Example:
        >>> repo = MemoryRepo()
        >>> commit = repo.add_commit("first", files={"README": "hello"})
        >>> repo.set_local_branch("main", RefTarget.normal(commit.id))
        >>> repo.resolve_change_id(commit.change_id) == [commit.id]
        True
    """

    commits: dict[CommitId, Commit] = field(default_factory=dict)
    trees: dict[TreeId, dict[str, object]] = field(default_factory=dict)
    view: View = field(default_factory=View)
    root_commit_id: CommitId = ROOT_COMMIT_ID
    _counter: int = 0

    def __post_init__(self) -> None:
        self.trees.setdefault(EMPTY_TREE_ID, {})
        if self.root_commit_id not in self.commits:
            self.commits[self.root_commit_id] = Commit(
                id=self.root_commit_id,
                change_id=ROOT_CHANGE_ID,
                description="",
                parent_ids=(),
                author=DEFAULT_SIGNATURE,
                committer=DEFAULT_SIGNATURE,
                tree_id=EMPTY_TREE_ID,
            )

    # =========================================================================
    # Building
    # =========================================================================

    def add_tree(self, entries: Mapping[str, object]) -> TreeId:
        tree_id = hash_flat_tree(entries)
        self.trees[tree_id] = dict(entries)
        return tree_id

    def add_commit(
        self,
        description: str = "",
        *,
        parents: Sequence[CommitId] | None = None,
        files: Mapping[str, object] | None = None,
        tree_id: TreeId | None = None,
        change_id: ChangeId | None = None,
        author: Signature = DEFAULT_SIGNATURE,
        committer: Signature = DEFAULT_SIGNATURE,
        has_conflict: bool = False,
    ) -> Commit:
        """Create a commit and make it a visible head.

        Args:
            description: Commit message.
            parents: Parent ids. Defaults to the root commit.
            files: Flat tree contents. Ignored when ``tree_id`` is given;
                defaults to the first parent's tree.
            tree_id: Existing tree id to use.
            change_id: Change id. A fresh one is generated when omitted.
            author: Author signature.
            committer: Committer signature.
            has_conflict: Whether the tree carries unresolved conflicts.

        Returns:
            The new commit.
        """
        parent_ids = tuple(parents) if parents is not None else (self.root_commit_id,)
        for parent_id in parent_ids:
            _ = self.get_commit(parent_id)
        if tree_id is None:
            if files is not None:
                tree_id = self.add_tree(files)
            else:
                tree_id = self.get_commit(parent_ids[0]).tree_id if parent_ids else EMPTY_TREE_ID
        self._counter += 1
        if change_id is None:
            change_id = ChangeId(self._digest("change", str(self._counter))[:32])
        commit_id = CommitId(
            self._digest(
                "commit",
                str(self._counter),
                change_id,
                tree_id,
                description,
                *parent_ids,
            )
        )
        commit = Commit(
            id=commit_id,
            change_id=change_id,
            description=description,
            parent_ids=parent_ids,
            author=author,
            committer=committer,
            tree_id=tree_id,
            has_conflict=has_conflict,
        )
        self.commits[commit_id] = commit
        heads = (self.view.head_ids - set(parent_ids)) | {commit_id}
        self.view = replace(self.view, head_ids=frozenset(heads))
        return commit

    def set_local_branch(self, name: str, target: RefTarget) -> None:
        self.view = replace(self.view, local_branches={**self.view.local_branches, name: target})

    def set_remote_branch(self, name: str, remote: str, remote_ref: RemoteRef) -> None:
        self.view = replace(
            self.view,
            remote_branches={**self.view.remote_branches, (name, remote): remote_ref},
        )

    def set_tag(self, name: str, target: RefTarget) -> None:
        self.view = replace(self.view, tags={**self.view.tags, name: target})

    def set_git_ref(self, name: str, target: RefTarget) -> None:
        self.view = replace(self.view, git_refs={**self.view.git_refs, name: target})

    def set_git_head(self, target: RefTarget) -> None:
        self.view = replace(self.view, git_head=target)

    def set_wc_commit(self, workspace_id: WorkspaceId, commit_id: CommitId) -> None:
        self.view = replace(
            self.view,
            wc_commit_ids={**self.view.wc_commit_ids, workspace_id: commit_id},
        )

    def hide_commit(self, commit_id: CommitId) -> None:
        """Drop a head so that it (and ancestors only it reached) become hidden."""
        commit = self.get_commit(commit_id)
        heads = (self.view.head_ids - {commit_id}) | set(commit.parent_ids)
        self.view = replace(self.view, head_ids=frozenset(heads))

    @staticmethod
    def _digest(*parts: str) -> str:
        return hashlib.sha1("\0".join(parts).encode(), usedforsecurity=False).hexdigest()

    # =========================================================================
    # RepoProtocol
    # =========================================================================

    def get_commit(self, commit_id: CommitId) -> Commit:
        try:
            return self.commits[commit_id]
        except KeyError:
            raise CommitNotFoundError(commit_id) from None

    def visible_commit_ids(self) -> frozenset[CommitId]:
        view = self.view
        tips: set[CommitId] = set(view.head_ids) | set(view.wc_commit_ids.values())
        tips.add(self.root_commit_id)
        return frozenset(ancestors(tips, self))

    def resolve_change_id(self, change_id: ChangeId) -> list[CommitId] | None:
        matches = sorted(
            commit_id
            for commit_id in self.visible_commit_ids()
            if self.commits[commit_id].change_id == change_id
        )
        return matches or None

    def merge_commit_trees(self, commits: Sequence[Commit]) -> TreeId:
        if not commits:
            return EMPTY_TREE_ID
        result: MergeResult = merge_commit_trees([commit.id for commit in commits], self)
        return hash_flat_tree(result.entries, result.conflicts)

    # =========================================================================
    # TreeSource
    # =========================================================================

    def parent_ids_of(self, commit_id: CommitId) -> Sequence[CommitId]:
        return self.get_commit(commit_id).parent_ids

    def flat_tree_of(self, commit_id: CommitId) -> FlatTree:
        tree_id = self.get_commit(commit_id).tree_id
        try:
            return self.trees[tree_id]
        except KeyError:
            raise TreeNotFoundError(tree_id) from None
