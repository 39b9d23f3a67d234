"""Repository data model.

Read-only value types describing commits, ref targets, and a view snapshot.
Ids are lowercase hex strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, NewType

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

CommitId = NewType("CommitId", str)
ChangeId = NewType("ChangeId", str)
TreeId = NewType("TreeId", str)
WorkspaceId = NewType("WorkspaceId", str)

# Remote name used for refs mirrored from the backing git repository.
REMOTE_NAME_FOR_LOCAL_GIT_REPO = "git"

DEFAULT_WORKSPACE_ID = WorkspaceId("default")


@dataclass(frozen=True, slots=True)
class Signature:
    """Author or committer identity.

    Attributes:
        name: Display name.
        email: Email address.
        timestamp: When the signature was made (timezone-aware).
    """

    name: str
    email: str
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as seen through one repository snapshot.

    Attributes:
        id: Commit id (changes whenever the commit is rewritten).
        change_id: Change id (stable across rewrites).
        description: Full commit message.
        parent_ids: Parent commit ids, in order. Empty only for the root commit.
        author: Author signature.
        committer: Committer signature.
        tree_id: Id of the commit's tree.
        has_conflict: True if the tree has unresolved merge conflicts.
    """

    id: CommitId
    change_id: ChangeId
    description: str
    parent_ids: tuple[CommitId, ...]
    author: Signature
    committer: Signature
    tree_id: TreeId
    has_conflict: bool = False


@dataclass(frozen=True, slots=True)
class RefTarget:
    """The commit ids a named ref resolves to.

    A normal ref has exactly one added id. A conflicted ref has several added
    ids and the ids they were merged from in ``removes``. An absent ref has
    neither.
    """

    adds: tuple[CommitId, ...] = ()
    removes: tuple[CommitId, ...] = ()

    @classmethod
    def absent(cls) -> RefTarget:
        return cls()

    @classmethod
    def normal(cls, commit_id: CommitId) -> RefTarget:
        return cls(adds=(commit_id,))

    @classmethod
    def conflict(
        cls,
        removes: Iterable[CommitId],
        adds: Iterable[CommitId],
    ) -> RefTarget:
        return cls(adds=tuple(adds), removes=tuple(removes))

    def is_present(self) -> bool:
        return bool(self.adds)

    def is_absent(self) -> bool:
        return not self.adds

    def has_conflict(self) -> bool:
        return len(self.adds) > 1 or bool(self.removes)

    def added_ids(self) -> tuple[CommitId, ...]:
        return self.adds

    def as_normal(self) -> CommitId | None:
        """Return the single target id, or None if absent or conflicted."""
        if self.has_conflict() or not self.adds:
            return None
        return self.adds[0]


class RemoteRefState(StrEnum):
    """Whether a remote ref is tracked by the local ref of the same name."""

    NEW = "new"
    TRACKING = "tracking"


@dataclass(frozen=True, slots=True)
class RemoteRef:
    target: RefTarget
    state: RemoteRefState = RemoteRefState.NEW

    def is_tracking(self) -> bool:
        return self.state is RemoteRefState.TRACKING


@dataclass(frozen=True, slots=True)
class BranchTarget:
    """A branch's local target and its remote refs, ordered by remote name."""

    local_target: RefTarget
    remote_refs: tuple[tuple[str, RemoteRef], ...] = ()


@dataclass(frozen=True, slots=True)
class View:
    """Immutable snapshot of all refs and workspaces.

    Attributes:
        local_branches: Branch name to local target.
        remote_branches: (branch name, remote name) to remote ref.
        tags: Tag name to target.
        git_refs: Full git ref name to target.
        git_head: Target of the backing git repository's HEAD.
        wc_commit_ids: Workspace id to its working-copy commit id.
        head_ids: Visible head commits.
    """

    local_branches: Mapping[str, RefTarget] = field(default_factory=dict)
    remote_branches: Mapping[tuple[str, str], RemoteRef] = field(default_factory=dict)
    tags: Mapping[str, RefTarget] = field(default_factory=dict)
    git_refs: Mapping[str, RefTarget] = field(default_factory=dict)
    git_head: RefTarget = field(default_factory=RefTarget.absent)
    wc_commit_ids: Mapping[WorkspaceId, CommitId] = field(default_factory=dict)
    head_ids: frozenset[CommitId] = frozenset()

    def branches(self) -> Iterator[tuple[str, BranchTarget]]:
        """Iterate branches sorted by name, remote refs sorted by remote."""
        remotes_by_branch: dict[str, list[tuple[str, RemoteRef]]] = {}
        for (branch_name, remote_name), remote_ref in self.remote_branches.items():
            remotes_by_branch.setdefault(branch_name, []).append((remote_name, remote_ref))
        names = sorted(set(self.local_branches) | set(remotes_by_branch))
        for name in names:
            local_target = self.local_branches.get(name, RefTarget.absent())
            remote_refs = tuple(sorted(remotes_by_branch.get(name, ()), key=lambda p: p[0]))
            yield name, BranchTarget(local_target=local_target, remote_refs=remote_refs)

    def iter_tags(self) -> Iterator[tuple[str, RefTarget]]:
        """Iterate tags sorted by name."""
        for name in sorted(self.tags):
            yield name, self.tags[name]

    def iter_git_refs(self) -> Iterator[tuple[str, RefTarget]]:
        """Iterate git refs sorted by full ref name."""
        for name in sorted(self.git_refs):
            yield name, self.git_refs[name]

    def get_wc_commit_id(self, workspace_id: WorkspaceId) -> CommitId | None:
        return self.wc_commit_ids.get(workspace_id)
