"""Repository protocol for type-safe dependency injection.

The commit template language only ever reads from a repository snapshot.
``MemoryRepo`` and ``GitRepo`` both satisfy this protocol, so templates can be
built and rendered against either without knowing which one they got.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from revtemplate.repo._models import ChangeId, Commit, CommitId, TreeId, View


@runtime_checkable
class RepoProtocol(Protocol):
    """Read-only access to one repository snapshot."""

    @property
    def view(self) -> View:
        """The ref and workspace snapshot."""
        ...

    @property
    def root_commit_id(self) -> CommitId:
        """Id of the designated root commit every history descends from."""
        ...

    def get_commit(self, commit_id: CommitId) -> Commit:
        """Load a commit.

        Raises:
            CommitNotFoundError: If the id is unknown.
        """
        ...

    def visible_commit_ids(self) -> frozenset[CommitId]:
        """Ids of all commits reachable from the view's heads."""
        ...

    def resolve_change_id(self, change_id: ChangeId) -> list[CommitId] | None:
        """Return the visible commits carrying ``change_id``, or None if none do."""
        ...

    def merge_commit_trees(self, commits: Sequence[Commit]) -> TreeId:
        """Return the id of the tree obtained by merging the commits' trees.

        An empty sequence yields the empty tree.

        Raises:
            RepositoryError: If a tree or commit can't be loaded.
        """
        ...
