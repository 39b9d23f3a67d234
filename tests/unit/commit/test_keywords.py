"""Tests for the built-in commit keywords."""

from collections.abc import Callable
from datetime import UTC, datetime

from revtemplate.repo import (
    Commit,
    MemoryRepo,
    RefTarget,
    RemoteRef,
    RemoteRefState,
    Signature,
    WorkspaceId,
)
from revtemplate.templater import ExpressionNode

N = ExpressionNode
RenderFunc = Callable[..., str]


def kw(name: str) -> ExpressionNode:
    return N.identifier(name)


def root_of(repo: MemoryRepo) -> Commit:
    return repo.get_commit(repo.root_commit_id)


# =============================================================================
# Text and id keywords
# =============================================================================


class TestDescription:
    def test_adds_missing_newline(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("hello")
        assert render(kw("description"), commit) == "hello\n"

    def test_keeps_trailing_newline(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("hello\n\nbody\n")
        assert render(kw("description"), commit) == "hello\n\nbody\n"

    def test_empty_stays_empty(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("")
        assert render(kw("description"), commit) == ""

    def test_first_line(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("subject\n\nbody")
        node = N.method(kw("description"), "first_line")
        assert render(node, commit) == "subject"


class TestIds:
    def test_commit_id_renders_full_hex(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        assert render(kw("commit_id"), commit) == commit.id

    def test_change_id_renders_reverse_hex(self, repo: MemoryRepo, render: RenderFunc) -> None:
        assert render(kw("change_id"), root_of(repo)) == "z" * 32

    def test_change_id_short(self, repo: MemoryRepo, render: RenderFunc) -> None:
        node = N.method(kw("change_id"), "short", N.integer(4))
        assert render(node, root_of(repo)) == "zzzz"

    def test_commit_id_short_defaults_to_twelve(
        self, repo: MemoryRepo, render: RenderFunc
    ) -> None:
        commit = repo.add_commit("one")
        node = N.method(kw("commit_id"), "short")
        assert render(node, commit) == commit.id[:12]


# =============================================================================
# Parents and signatures
# =============================================================================


class TestParents:
    def test_len_of_merge(self, repo: MemoryRepo, render: RenderFunc) -> None:
        left = repo.add_commit("left")
        right = repo.add_commit("right")
        merge = repo.add_commit("merge", parents=[left.id, right.id])

        node = N.method(kw("parents"), "len")

        assert render(node, merge) == "2"

    def test_root_has_no_parents(self, repo: MemoryRepo, render: RenderFunc) -> None:
        node = N.method(kw("parents"), "len")
        assert render(node, root_of(repo)) == "0"

    def test_map_over_parent_ids(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        body = N.method(N.method(N.identifier("c"), "commit_id"), "short", N.integer(4))
        node = N.method(kw("parents"), "map", N.lambda_(["c"], body))

        assert render(node, commit) == "0000"

    def test_map_joins_items_with_space(self, repo: MemoryRepo, render: RenderFunc) -> None:
        left = repo.add_commit("left")
        right = repo.add_commit("right")
        merge = repo.add_commit("merge", parents=[left.id, right.id])
        body = N.method(N.method(N.identifier("p"), "description"), "first_line")
        node = N.method(kw("parents"), "map", N.lambda_(["p"], body))

        assert render(node, merge) == "left right"


class TestSignatures:
    def test_author_renders_name_and_email(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        assert render(kw("author"), commit) == "Test User <test.user@example.com>"

    def test_author_username(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        node = N.method(kw("author"), "username")
        assert render(node, commit) == "test.user"

    def test_committer_is_separate(self, repo: MemoryRepo, render: RenderFunc) -> None:
        committer = Signature(
            name="Other Person",
            email="other@example.org",
            timestamp=datetime(2024, 6, 1, tzinfo=UTC),
        )
        commit = repo.add_commit("one", committer=committer)

        assert render(N.method(kw("committer"), "name"), commit) == "Other Person"
        assert render(N.method(kw("author"), "name"), commit) == "Test User"


# =============================================================================
# Workspaces
# =============================================================================


class TestWorkingCopies:
    def test_lists_workspaces_at_commit(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        repo.set_wc_commit(WorkspaceId("default"), commit.id)
        repo.set_wc_commit(WorkspaceId("ws2"), commit.id)

        assert render(kw("working_copies"), commit) == "default@ ws2@"

    def test_empty_with_single_workspace(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        repo.set_wc_commit(WorkspaceId("default"), commit.id)

        assert render(kw("working_copies"), commit) == ""


class TestCurrentWorkingCopy:
    def test_true_for_own_workspace(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        repo.set_wc_commit(WorkspaceId("default"), commit.id)

        assert render(kw("current_working_copy"), commit) == "true"

    def test_false_for_other_workspace(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        other = repo.add_commit("two")
        repo.set_wc_commit(WorkspaceId("default"), commit.id)
        repo.set_wc_commit(WorkspaceId("ws2"), other.id)

        assert render(kw("current_working_copy"), commit, workspace_id=WorkspaceId("ws2")) == (
            "false"
        )
        assert render(kw("current_working_copy"), other, workspace_id=WorkspaceId("ws2")) == (
            "true"
        )

    def test_false_without_checkout(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        assert render(kw("current_working_copy"), commit) == "false"


# =============================================================================
# Ref names
# =============================================================================


class TestBranches:
    def test_synced_tracking_remote_is_hidden_from_branches(
        self, repo: MemoryRepo, render: RenderFunc
    ) -> None:
        commit = repo.add_commit("one")
        repo.set_local_branch("main", RefTarget.normal(commit.id))
        repo.set_remote_branch(
            "main", "origin", RemoteRef(RefTarget.normal(commit.id), RemoteRefState.TRACKING)
        )
        repo.set_remote_branch(
            "main", "upstream", RemoteRef(RefTarget.normal(commit.id), RemoteRefState.NEW)
        )

        assert render(kw("branches"), commit) == "main main@upstream"

    def test_local_and_remote_lists_ignore_sync_state(
        self, repo: MemoryRepo, render: RenderFunc
    ) -> None:
        commit = repo.add_commit("one")
        repo.set_local_branch("main", RefTarget.normal(commit.id))
        repo.set_remote_branch(
            "main", "origin", RemoteRef(RefTarget.normal(commit.id), RemoteRefState.TRACKING)
        )
        repo.set_remote_branch(
            "main", "upstream", RemoteRef(RefTarget.normal(commit.id), RemoteRefState.NEW)
        )

        assert render(kw("local_branches"), commit) == "main"
        assert render(kw("remote_branches"), commit) == "main@origin main@upstream"

    def test_unsynced_local_branch_gets_star(
        self, repo: MemoryRepo, render: RenderFunc
    ) -> None:
        old = repo.add_commit("old")
        new = repo.add_commit("new", parents=[old.id])
        repo.set_local_branch("main", RefTarget.normal(new.id))
        repo.set_remote_branch(
            "main", "origin", RemoteRef(RefTarget.normal(old.id), RemoteRefState.TRACKING)
        )

        assert render(kw("branches"), new) == "main*"
        assert render(kw("branches"), old) == "main@origin"
        assert render(kw("local_branches"), old) == ""

    def test_conflicted_branch(self, repo: MemoryRepo, render: RenderFunc) -> None:
        left = repo.add_commit("left")
        right = repo.add_commit("right")
        repo.set_local_branch("main", RefTarget.conflict(removes=[], adds=[left.id, right.id]))

        assert render(kw("branches"), left) == "main??"
        assert render(kw("branches"), right) == "main??"

    def test_no_branches_renders_nothing(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        assert render(kw("branches"), commit) == ""


class TestTagsAndGitRefs:
    def test_tags(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        repo.set_tag("v2", RefTarget.normal(commit.id))
        repo.set_tag("v1", RefTarget.normal(commit.id))

        assert render(kw("tags"), commit) == "v1 v2"

    def test_git_refs(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        repo.set_git_ref("refs/heads/main", RefTarget.normal(commit.id))
        repo.set_git_ref("refs/tags/v1", RefTarget.normal(commit.id))

        assert render(kw("git_refs"), commit) == "refs/heads/main refs/tags/v1"

    def test_git_head(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        other = repo.add_commit("two")
        repo.set_git_head(RefTarget.normal(commit.id))

        assert render(kw("git_head"), commit) == "HEAD@git"
        assert render(kw("git_head"), other) == ""


# =============================================================================
# Boolean keywords
# =============================================================================


class TestDivergent:
    def test_two_visible_commits_with_one_change_id(
        self, repo: MemoryRepo, render: RenderFunc
    ) -> None:
        first = repo.add_commit("one")
        second = repo.add_commit("one again", change_id=first.change_id)

        assert render(kw("divergent"), first) == "true"
        assert render(kw("divergent"), second) == "true"

    def test_single_commit(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        assert render(kw("divergent"), commit) == "false"


class TestHidden:
    def test_visible_commit(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        assert render(kw("hidden"), commit) == "false"

    def test_abandoned_commit(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        repo.hide_commit(commit.id)

        assert render(kw("hidden"), commit) == "true"

    def test_rewritten_commit(self, repo: MemoryRepo, render: RenderFunc) -> None:
        old = repo.add_commit("one")
        new = repo.add_commit("one, amended", change_id=old.change_id)
        repo.hide_commit(old.id)

        assert render(kw("hidden"), old) == "true"
        assert render(kw("hidden"), new) == "false"


class TestConflict:
    def test_conflicted_tree(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one", has_conflict=True)
        assert render(kw("conflict"), commit) == "true"

    def test_clean_tree(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        assert render(kw("conflict"), commit) == "false"


class TestEmpty:
    def test_same_tree_as_parent(self, repo: MemoryRepo, render: RenderFunc) -> None:
        parent = repo.add_commit("parent", files={"a": "1"})
        commit = repo.add_commit("child", parents=[parent.id])

        assert render(kw("empty"), commit) == "true"

    def test_changed_tree(self, repo: MemoryRepo, render: RenderFunc) -> None:
        parent = repo.add_commit("parent", files={"a": "1"})
        commit = repo.add_commit("child", parents=[parent.id], files={"a": "2"})

        assert render(kw("empty"), commit) == "false"

    def test_clean_merge(self, repo: MemoryRepo, render: RenderFunc) -> None:
        base = repo.add_commit("base")
        left = repo.add_commit("left", parents=[base.id], files={"a": "1"})
        right = repo.add_commit("right", parents=[base.id], files={"b": "2"})
        merge = repo.add_commit(
            "merge", parents=[left.id, right.id], files={"a": "1", "b": "2"}
        )

        assert render(kw("empty"), merge) == "true"

    def test_merge_with_extra_change(self, repo: MemoryRepo, render: RenderFunc) -> None:
        base = repo.add_commit("base")
        left = repo.add_commit("left", parents=[base.id], files={"a": "1"})
        right = repo.add_commit("right", parents=[base.id], files={"b": "2"})
        merge = repo.add_commit(
            "merge", parents=[left.id, right.id], files={"a": "1", "b": "2", "c": "3"}
        )

        assert render(kw("empty"), merge) == "false"

    def test_root_is_empty(self, repo: MemoryRepo, render: RenderFunc) -> None:
        assert render(kw("empty"), root_of(repo)) == "true"


class TestRoot:
    def test_root_commit(self, repo: MemoryRepo, render: RenderFunc) -> None:
        assert render(kw("root"), root_of(repo)) == "true"

    def test_other_commit(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        assert render(kw("root"), commit) == "false"


# =============================================================================
# Keywords as methods
# =============================================================================


class TestKeywordsAsMethods:
    def test_keyword_on_mapped_parent(self, repo: MemoryRepo, render: RenderFunc) -> None:
        commit = repo.add_commit("one")
        body = N.method(N.identifier("p"), "root")
        node = N.method(kw("parents"), "map", N.lambda_(["p"], body))

        assert render(node, commit) == "true"

    def test_branches_of_mapped_parent(self, repo: MemoryRepo, render: RenderFunc) -> None:
        parent = repo.add_commit("parent")
        child = repo.add_commit("child", parents=[parent.id])
        repo.set_local_branch("main", RefTarget.normal(parent.id))
        body = N.method(N.identifier("p"), "branches")
        node = N.method(kw("parents"), "map", N.lambda_(["p"], body))

        assert render(node, child) == "main"
