"""Read-only repository snapshot backed by a git repository.

This module adapts a dulwich ``Repo`` to ``RepoProtocol``. The snapshot is
taken when the object is created; later changes to the git repository are not
seen. Nothing is ever written to the repository.

Git has no change ids and no single root commit, so both are synthesized:
change ids are derived from commit id bytes, and a virtual all-zero root
commit with the empty tree parents every parentless git commit.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Final, Self

from dulwich.errors import NotGitRepository
from dulwich.index import commit_tree
from dulwich.object_store import MemoryObjectStore, iter_tree_contents
from dulwich.objects import Commit as GitCommit
from dulwich.objects import Tag, Tree
from dulwich.repo import Repo

from revtemplate.exceptions import CommitNotFoundError, RepositoryError, TreeNotFoundError
from revtemplate.repo._memory import ROOT_CHANGE_ID, ROOT_COMMIT_ID
from revtemplate.repo._merge import FlatTree, ancestors, merge_commit_trees
from revtemplate.repo._models import (
    DEFAULT_WORKSPACE_ID,
    REMOTE_NAME_FOR_LOCAL_GIT_REPO,
    ChangeId,
    Commit,
    CommitId,
    RefTarget,
    RemoteRef,
    RemoteRefState,
    Signature,
    TreeId,
    View,
    WorkspaceId,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

EMPTY_GIT_TREE_ID: Final = TreeId(Tree().id.decode())

_HEADS_PREFIX: Final = "refs/heads/"
_REMOTES_PREFIX: Final = "refs/remotes/"
_TAGS_PREFIX: Final = "refs/tags/"


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _reverse_bits(byte: int) -> int:
    return int(f"{byte:08b}"[::-1], 2)


def change_id_from_commit_id(commit_id: str) -> ChangeId:
    """Derive a stable change id for a git commit.

    Takes bytes 4..20 of the commit id, reverses their order, and reverses the
    bits of each byte, giving a 16-byte id unrelated-looking to the commit id.
    """
    raw = bytes.fromhex(commit_id)[4:20]
    return ChangeId(bytes(_reverse_bits(byte) for byte in reversed(raw)).hex())


def parse_signature(identity: bytes, timestamp: int, offset: int) -> Signature:
    """Parse ``Name <email>`` plus git time fields into a Signature."""
    text = decode_bytes(identity)
    name, _, rest = text.partition("<")
    email = rest.rstrip().removesuffix(">")
    when = datetime.fromtimestamp(timestamp, tz=timezone(timedelta(seconds=offset)))
    return Signature(name=name.strip(), email=email.strip(), timestamp=when)


def open_git_repo(path: Path | str | None = None) -> Repo:
    """Open the repository at ``path``, or discover one from the current directory.

    Raises:
        RepositoryError: If no git repository is found.
    """
    try:
        if path is not None:
            return Repo(str(path))
        return Repo.discover()
    except NotGitRepository as e:
        msg = "Not inside a Git repository"
        raise RepositoryError(msg) from e


class GitRepo:
    """Read-only ``RepoProtocol`` implementation over a dulwich repository.

    Implements the context manager protocol; the underlying dulwich Repo is
    closed on exit.

    Example:
        >>> with GitRepo(Path("/path/to/repo")) as repo:
        ...     main = repo.view.local_branches["main"]
    """

    __slots__ = (
        "_change_index",
        "_commits",
        "_repo",
        "_view",
        "_visible",
        "_workspace_id",
    )

    def __init__(
        self,
        path: Path | str | None = None,
        *,
        workspace_id: WorkspaceId = DEFAULT_WORKSPACE_ID,
    ) -> None:
        self._repo: Repo = open_git_repo(path)
        self._workspace_id: WorkspaceId = workspace_id
        self._commits: dict[CommitId, Commit] = {}
        self._visible: frozenset[CommitId] | None = None
        self._change_index: dict[ChangeId, list[CommitId]] | None = None
        self._view: View = self._load_view()

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release file handles held by the dulwich Repo."""
        self._repo.close()

    # =========================================================================
    # Snapshot loading
    # =========================================================================

    def _peel(self, sha: bytes) -> CommitId | None:
        """Follow annotated tags down to a commit id, or None for non-commits."""
        try:
            obj = self._repo[sha]
            while isinstance(obj, Tag):
                _, target_sha = obj.object
                obj = self._repo[target_sha]
        except KeyError:
            return None
        if not isinstance(obj, GitCommit):
            return None
        return CommitId(obj.id.decode())

    def _is_tracking(self, branch: str, remote: str) -> bool:
        config = self._repo.get_config()
        section = (b"branch", branch.encode())
        try:
            configured_remote = config.get(section, b"remote")
            configured_merge = config.get(section, b"merge")
        except KeyError:
            return False
        return (
            decode_bytes(configured_remote) == remote
            and decode_bytes(configured_merge) == f"{_HEADS_PREFIX}{branch}"
        )

    def _load_view(self) -> View:
        local_branches: dict[str, RefTarget] = {}
        remote_branches: dict[tuple[str, str], RemoteRef] = {}
        tags: dict[str, RefTarget] = {}
        git_refs: dict[str, RefTarget] = {}
        head_ids: set[CommitId] = set()

        for raw_name, sha in sorted(self._repo.get_refs().items()):
            ref_name = decode_bytes(raw_name)
            if ref_name == "HEAD":
                continue
            commit_id = self._peel(sha)
            if commit_id is None:
                continue
            target = RefTarget.normal(commit_id)
            head_ids.add(commit_id)
            git_refs[ref_name] = target
            if ref_name.startswith(_HEADS_PREFIX):
                name = ref_name.removeprefix(_HEADS_PREFIX)
                local_branches[name] = target
                remote_branches[name, REMOTE_NAME_FOR_LOCAL_GIT_REPO] = RemoteRef(
                    target, RemoteRefState.TRACKING
                )
            elif ref_name.startswith(_REMOTES_PREFIX):
                remote, _, name = ref_name.removeprefix(_REMOTES_PREFIX).partition("/")
                if not name or name == "HEAD":
                    continue
                state = (
                    RemoteRefState.TRACKING
                    if self._is_tracking(name, remote)
                    else RemoteRefState.NEW
                )
                remote_branches[name, remote] = RemoteRef(target, state)
            elif ref_name.startswith(_TAGS_PREFIX):
                tags[ref_name.removeprefix(_TAGS_PREFIX)] = target

        git_head = RefTarget.absent()
        wc_commit_ids: dict[WorkspaceId, CommitId] = {}
        try:
            head_sha = self._repo.refs[b"HEAD"]
        except KeyError:
            head_sha = None
        if head_sha is not None:
            head_id = self._peel(head_sha)
            if head_id is not None:
                git_head = RefTarget.normal(head_id)
                wc_commit_ids[self._workspace_id] = head_id
                head_ids.add(head_id)

        return View(
            local_branches=local_branches,
            remote_branches=remote_branches,
            tags=tags,
            git_refs=git_refs,
            git_head=git_head,
            wc_commit_ids=wc_commit_ids,
            head_ids=frozenset(head_ids),
        )

    # =========================================================================
    # RepoProtocol
    # =========================================================================

    @property
    def view(self) -> View:
        return self._view

    @property
    def root_commit_id(self) -> CommitId:
        return ROOT_COMMIT_ID

    def get_commit(self, commit_id: CommitId) -> Commit:
        cached = self._commits.get(commit_id)
        if cached is not None:
            return cached
        if commit_id == ROOT_COMMIT_ID:
            commit = self._root_commit()
        else:
            commit = self._load_commit(commit_id)
        self._commits[commit_id] = commit
        return commit

    def _root_commit(self) -> Commit:
        epoch = Signature(name="", email="", timestamp=datetime.fromtimestamp(0, tz=timezone.utc))
        return Commit(
            id=ROOT_COMMIT_ID,
            change_id=ROOT_CHANGE_ID,
            description="",
            parent_ids=(),
            author=epoch,
            committer=epoch,
            tree_id=EMPTY_GIT_TREE_ID,
        )

    def _load_commit(self, commit_id: CommitId) -> Commit:
        try:
            obj = self._repo[commit_id.encode()]
        except (KeyError, ValueError):
            raise CommitNotFoundError(commit_id) from None
        if not isinstance(obj, GitCommit):
            raise CommitNotFoundError(commit_id)
        parent_ids = tuple(CommitId(decode_bytes(parent)) for parent in obj.parents)
        return Commit(
            id=commit_id,
            change_id=change_id_from_commit_id(commit_id),
            description=decode_bytes(obj.message),
            parent_ids=parent_ids or (ROOT_COMMIT_ID,),
            author=parse_signature(obj.author, obj.author_time, obj.author_timezone),
            committer=parse_signature(obj.committer, obj.commit_time, obj.commit_timezone),
            tree_id=TreeId(decode_bytes(obj.tree)),
        )

    def visible_commit_ids(self) -> frozenset[CommitId]:
        if self._visible is None:
            tips = set(self._view.head_ids) | {ROOT_COMMIT_ID}
            self._visible = frozenset(ancestors(tips, self))
        return self._visible

    def resolve_change_id(self, change_id: ChangeId) -> list[CommitId] | None:
        if self._change_index is None:
            index: dict[ChangeId, list[CommitId]] = {}
            for commit_id in sorted(self.visible_commit_ids()):
                index.setdefault(self.get_commit(commit_id).change_id, []).append(commit_id)
            self._change_index = index
        matches = self._change_index.get(change_id)
        return list(matches) if matches else None

    def merge_commit_trees(self, commits: Sequence[Commit]) -> TreeId:
        if not commits:
            return EMPTY_GIT_TREE_ID
        if len(commits) == 1:
            return commits[0].tree_id
        result = merge_commit_trees([commit.id for commit in commits], self)
        if result.has_conflict:
            # Conflicted merges have no git tree; any id distinct from real trees works.
            digest = hashlib.sha1(usedforsecurity=False)
            for path in sorted(result.conflicts):
                digest.update(f"conflict\0{path}\n".encode())
            for path, entry in sorted(result.entries.items()):
                digest.update(f"{path}\0{entry}\n".encode())
            return TreeId(f"conflict-{digest.hexdigest()}")
        scratch = MemoryObjectStore()
        blobs = [
            (path.encode(), sha.encode(), mode)
            for path, (mode, sha) in sorted(result.entries.items())  # type: ignore[misc]
        ]
        return TreeId(decode_bytes(commit_tree(scratch, blobs)))

    # =========================================================================
    # TreeSource
    # =========================================================================

    def parent_ids_of(self, commit_id: CommitId) -> Sequence[CommitId]:
        return self.get_commit(commit_id).parent_ids

    def flat_tree_of(self, commit_id: CommitId) -> FlatTree:
        tree_id = self.get_commit(commit_id).tree_id
        if tree_id == EMPTY_GIT_TREE_ID:
            return {}
        try:
            entries = iter_tree_contents(self._repo.object_store, tree_id.encode())
            return {
                decode_bytes(entry.path): (entry.mode, decode_bytes(entry.sha))
                for entry in entries
            }
        except KeyError:
            raise TreeNotFoundError(tree_id) from None
