"""Repository snapshot model.

The commit template language reads commits, refs, and workspace state
through ``RepoProtocol``. Two implementations ship with the package:
``MemoryRepo`` for hosts and tests that hold data in memory, and ``GitRepo``
for a read-only snapshot of a git repository loaded with dulwich.
"""

from revtemplate.repo._git import (
    EMPTY_GIT_TREE_ID,
    GitRepo,
    change_id_from_commit_id,
    open_git_repo,
    parse_signature,
)
from revtemplate.repo._id_prefix import IdPrefixContext, IdPrefixIndex, common_hex_prefix_len
from revtemplate.repo._memory import (
    DEFAULT_SIGNATURE,
    EMPTY_TREE_ID,
    ROOT_CHANGE_ID,
    ROOT_COMMIT_ID,
    MemoryRepo,
    hash_flat_tree,
)
from revtemplate.repo._merge import (
    FlatTree,
    MergeResult,
    TreeSource,
    ancestors,
    heads,
    merge_commit_trees,
    merge_flat_trees,
)
from revtemplate.repo._models import (
    DEFAULT_WORKSPACE_ID,
    REMOTE_NAME_FOR_LOCAL_GIT_REPO,
    BranchTarget,
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
from revtemplate.repo._protocol import RepoProtocol

__all__ = [
    "DEFAULT_SIGNATURE",
    "DEFAULT_WORKSPACE_ID",
    "EMPTY_GIT_TREE_ID",
    "EMPTY_TREE_ID",
    "REMOTE_NAME_FOR_LOCAL_GIT_REPO",
    "ROOT_CHANGE_ID",
    "ROOT_COMMIT_ID",
    "BranchTarget",
    "ChangeId",
    "Commit",
    "CommitId",
    "FlatTree",
    "GitRepo",
    "IdPrefixContext",
    "IdPrefixIndex",
    "MemoryRepo",
    "MergeResult",
    "RefTarget",
    "RemoteRef",
    "RemoteRefState",
    "RepoProtocol",
    "Signature",
    "TreeId",
    "TreeSource",
    "View",
    "WorkspaceId",
    "ancestors",
    "change_id_from_commit_id",
    "common_hex_prefix_len",
    "hash_flat_tree",
    "heads",
    "merge_commit_trees",
    "merge_flat_trees",
    "open_git_repo",
    "parse_signature",
]
