"""Reverse lookup from commits to the refs pointing at them.

Each index is built by scanning one category of refs (branches, tags, or git
refs) once per session. ``CommitKeywordCache`` builds them on first use and
shares them read-only with every property built in that session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from revtemplate.repo import REMOTE_NAME_FOR_LOCAL_GIT_REPO
from revtemplate.templater import labeled

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from structlog.typing import FilteringBoundLogger

    from revtemplate.repo import Commit, CommitId, RefTarget, RepoProtocol
    from revtemplate.templater import Formatter


@dataclass(frozen=True, slots=True)
class RefName:
    """Branch, tag, or git ref name attached to a commit.

    Attributes:
        name: Local name.
        remote: Remote name for remote and git-tracking refs, else None.
        conflict: The ref target has conflicts.
        synced: A local ref agrees with all its tracking remotes, or a
            tracking remote ref agrees with the local ref.
    """

    name: str
    remote: str | None = None
    conflict: bool = False
    synced: bool = True

    def is_local(self) -> bool:
        return self.remote is None

    def is_remote(self) -> bool:
        return self.remote is not None

    def format(self, formatter: Formatter) -> None:
        with labeled(formatter, "name"):
            formatter.write(self.name)
        if self.remote is not None:
            formatter.write("@")
            with labeled(formatter, "remote"):
                formatter.write(self.remote)
        # A conflicted ref can't be pushed, so the unsynced marker is moot.
        if self.conflict:
            formatter.write("??")
        elif self.is_local() and not self.synced:
            formatter.write("*")


@dataclass(slots=True)
class RefNamesIndex:
    """Multimap from commit id to ref names, in scan order."""

    index: dict[CommitId, list[RefName]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.index)

    def insert(self, ids: Iterable[CommitId], ref_name: RefName) -> None:
        for commit_id in ids:
            self.index.setdefault(commit_id, []).append(ref_name)

    def get(self, commit_id: CommitId) -> Sequence[RefName]:
        return self.index.get(commit_id, ())


def build_branches_index(repo: RepoProtocol) -> RefNamesIndex:
    """Index local branches and every remote ref of each branch."""
    index = RefNamesIndex()
    for branch_name, branch_target in repo.view.branches():
        local_target = branch_target.local_target
        remote_refs = branch_target.remote_refs
        if local_target.is_present():
            ref_name = RefName(
                name=branch_name,
                remote=None,
                conflict=local_target.has_conflict(),
                synced=all(
                    not remote_ref.is_tracking() or remote_ref.target == local_target
                    for _, remote_ref in remote_refs
                ),
            )
            index.insert(local_target.added_ids(), ref_name)
        for remote_name, remote_ref in remote_refs:
            ref_name = RefName(
                name=branch_name,
                remote=remote_name,
                conflict=remote_ref.target.has_conflict(),
                synced=remote_ref.is_tracking() and remote_ref.target == local_target,
            )
            index.insert(remote_ref.target.added_ids(), ref_name)
    return index


def build_ref_names_index(ref_pairs: Iterable[tuple[str, RefTarget]]) -> RefNamesIndex:
    """Index refs that have no tracking remotes (tags, git refs)."""
    index = RefNamesIndex()
    for name, target in ref_pairs:
        ref_name = RefName(
            name=name,
            remote=None,
            conflict=target.has_conflict(),
            synced=True,
        )
        index.insert(target.added_ids(), ref_name)
    return index


def extract_git_head(repo: RepoProtocol, commit: Commit) -> list[RefName]:
    """Return ``[HEAD@git]`` if the git HEAD points at ``commit``."""
    target = repo.view.git_head
    if commit.id not in target.added_ids():
        return []
    return [
        RefName(
            name="HEAD",
            remote=REMOTE_NAME_FOR_LOCAL_GIT_REPO,
            conflict=target.has_conflict(),
            synced=False,
        )
    ]


def extract_working_copies(repo: RepoProtocol, commit: Commit) -> str:
    """Return ``"<workspace>@"`` tokens for workspaces checked out at ``commit``.

    Empty when the repository has at most one workspace.
    """
    wc_commit_ids = repo.view.wc_commit_ids
    if len(wc_commit_ids) <= 1:
        return ""
    return " ".join(
        f"{workspace_id}@"
        for workspace_id, wc_commit_id in sorted(wc_commit_ids.items())
        if wc_commit_id == commit.id
    )


class CommitKeywordCache:
    """Ref name indexes for one evaluation session, each built on first use."""

    def __init__(self, repo: RepoProtocol, logger: FilteringBoundLogger) -> None:
        self._repo: RepoProtocol = repo
        self._logger: FilteringBoundLogger = logger

    def _built(self, category: str, index: RefNamesIndex) -> RefNamesIndex:
        self._logger.debug("ref_names_index_built", category=category, commits=len(index))
        return index

    @cached_property
    def branches_index(self) -> RefNamesIndex:
        return self._built("branches", build_branches_index(self._repo))

    @cached_property
    def tags_index(self) -> RefNamesIndex:
        return self._built("tags", build_ref_names_index(self._repo.view.iter_tags()))

    @cached_property
    def git_refs_index(self) -> RefNamesIndex:
        return self._built("git_refs", build_ref_names_index(self._repo.view.iter_git_refs()))
