"""Property-based tests for commit template invariants.

This module uses Hypothesis to test key invariants of id rendering, prefix
uniqueness, emptiness, and tree merging:
- Reverse hex: encoding is a bijection onto the z..k alphabet
- Short ids: truncation never exceeds the full hex and is always a prefix
- Shortest ids: prefix and rest always rejoin to the full hex
- Prefix index: the returned length is unique and minimal
- Emptiness: a single-parent commit is empty iff its tree matches the parent's
- Merging: merging an unchanged side is the identity
- Stateful testing: growing a repository keeps every prefix unique
"""

from hypothesis import given, settings, strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule

from revtemplate.commit import (
    CommitOrChangeId,
    from_reverse_hex,
    is_empty,
    to_reverse_hex,
)
from revtemplate.repo import (
    ChangeId,
    CommitId,
    IdPrefixContext,
    IdPrefixIndex,
    MemoryRepo,
    merge_flat_trees,
)

# =============================================================================
# Strategies
# =============================================================================

hex_digits = st.text(alphabet="0123456789abcdef", min_size=0, max_size=40)
commit_hex = st.text(alphabet="0123456789abcdef", min_size=40, max_size=40)

# Distinct fixed-width ids, the way a repository hands them out
hex_id_sets = st.lists(
    st.text(alphabet="0123456789abcdef", min_size=8, max_size=8),
    min_size=1,
    max_size=30,
    unique=True,
)

# Flat trees over a small path alphabet so sides collide often
tree_paths = st.sampled_from(["a", "b", "c", "d/e", "d/f"])
tree_values = st.sampled_from(["1", "2", "3"])
flat_trees = st.dictionaries(tree_paths, tree_values, max_size=5)

descriptions = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz \n",
    min_size=0,
    max_size=40,
)


# =============================================================================
# Reverse hex
# =============================================================================


class TestReverseHexProperties:
    @given(hex_digits)
    def test_decodes_back(self, hex_id: str) -> None:
        assert from_reverse_hex(to_reverse_hex(hex_id)) == hex_id

    @given(hex_digits)
    def test_uses_reverse_alphabet(self, hex_id: str) -> None:
        encoded = to_reverse_hex(hex_id)
        assert len(encoded) == len(hex_id)
        assert set(encoded) <= set("zyxwvutsrqponmlk")

    @given(hex_digits, hex_digits)
    def test_reverses_ordering(self, left: str, right: str) -> None:
        if len(left) == len(right) and left < right:
            assert to_reverse_hex(left) > to_reverse_hex(right)


# =============================================================================
# Short and shortest ids
# =============================================================================


class TestShortIdProperties:
    @given(commit_hex, st.integers(min_value=-5, max_value=60))
    def test_short_is_prefix(self, hex_id: str, length: int) -> None:
        short = CommitOrChangeId.commit(CommitId(hex_id)).short(length)

        assert hex_id.startswith(short)
        assert len(short) == min(max(length, 0), len(hex_id))

    @given(commit_hex, st.integers(min_value=40, max_value=100))
    def test_long_short_is_full_hex(self, hex_id: str, length: int) -> None:
        assert CommitOrChangeId.commit(CommitId(hex_id)).short(length) == hex_id


class TestShortestIdProperties:
    @settings(max_examples=25)
    @given(st.integers(min_value=1, max_value=15), st.integers(min_value=0, max_value=50))
    def test_prefix_and_rest_rejoin(self, commit_count: int, min_len: int) -> None:
        repo = MemoryRepo()
        commits = [repo.add_commit(f"commit {n}") for n in range(commit_count)]
        context = IdPrefixContext(repo)

        for commit in commits:
            for id_ in (
                CommitOrChangeId.commit(commit.id),
                CommitOrChangeId.change(commit.change_id),
            ):
                shortest = id_.shortest(context, min_len)
                assert shortest.prefix + shortest.rest == id_.hex()
                assert len(shortest.prefix) >= min(min_len, len(id_.hex()))


class TestIdPrefixIndexProperties:
    @given(hex_id_sets)
    def test_prefix_is_unique(self, hex_ids: list[str]) -> None:
        index = IdPrefixIndex(hex_ids)

        for hex_id in hex_ids:
            prefix = hex_id[: index.shortest_unique_prefix_len(hex_id)]
            assert [other for other in hex_ids if other.startswith(prefix)] == [hex_id]

    @given(hex_id_sets)
    def test_prefix_is_minimal(self, hex_ids: list[str]) -> None:
        index = IdPrefixIndex(hex_ids)

        for hex_id in hex_ids:
            length = index.shortest_unique_prefix_len(hex_id)
            if length > 1:
                shorter = hex_id[: length - 1]
                assert len([other for other in hex_ids if other.startswith(shorter)]) > 1


# =============================================================================
# Emptiness and merging
# =============================================================================


class TestEmptyProperties:
    @given(flat_trees, flat_trees)
    def test_single_parent_empty_iff_same_tree(
        self, parent_files: dict[str, str], child_files: dict[str, str]
    ) -> None:
        repo = MemoryRepo()
        parent = repo.add_commit("parent", files=parent_files)
        child = repo.add_commit("child", parents=[parent.id], files=child_files)

        assert is_empty(repo, child) == (parent_files == child_files)

    @given(flat_trees, flat_trees, flat_trees)
    def test_merge_of_merge_result_is_empty(
        self,
        base_files: dict[str, str],
        left_files: dict[str, str],
        right_files: dict[str, str],
    ) -> None:
        repo = MemoryRepo()
        base = repo.add_commit("base", files=base_files)
        left = repo.add_commit("left", parents=[base.id], files=left_files)
        right = repo.add_commit("right", parents=[base.id], files=right_files)
        merged = merge_flat_trees(base_files, left_files, right_files)
        merge = repo.add_commit(
            "merge",
            parents=[left.id, right.id],
            tree_id=repo.merge_commit_trees([left, right]),
            has_conflict=merged.has_conflict,
        )

        assert is_empty(repo, merge)


class TestMergeProperties:
    @given(flat_trees, flat_trees)
    def test_unchanged_theirs_keeps_ours(
        self, base: dict[str, str], ours: dict[str, str]
    ) -> None:
        result = merge_flat_trees(base, ours, base)

        assert result.entries == ours
        assert not result.has_conflict

    @given(flat_trees, flat_trees)
    def test_unchanged_ours_takes_theirs(
        self, base: dict[str, str], theirs: dict[str, str]
    ) -> None:
        result = merge_flat_trees(base, base, theirs)

        assert result.entries == theirs
        assert not result.has_conflict

    @given(flat_trees, flat_trees, flat_trees)
    def test_conflicts_only_where_both_sides_changed(
        self, base: dict[str, str], ours: dict[str, str], theirs: dict[str, str]
    ) -> None:
        result = merge_flat_trees(base, ours, theirs)

        for path in result.conflicts:
            assert ours.get(path) != base.get(path)
            assert theirs.get(path) != base.get(path)
            assert ours.get(path) != theirs.get(path)


# =============================================================================
# Stateful testing
# =============================================================================


class GrowingRepoMachine(RuleBasedStateMachine):
    """Adds, rewrites, and hides commits while checking visible-id invariants."""

    def __init__(self) -> None:
        super().__init__()
        self.repo: MemoryRepo = MemoryRepo()
        self.added: list[CommitId] = []

    @rule(description=descriptions, data=st.data())
    def add_commit(self, description: str, data: st.DataObject) -> None:
        visible = sorted(self.repo.visible_commit_ids())
        parent = data.draw(st.sampled_from(visible))
        commit = self.repo.add_commit(description, parents=[parent])
        self.added.append(commit.id)

    @rule(data=st.data())
    def rewrite_commit(self, data: st.DataObject) -> None:
        if not self.added:
            return
        old_id = data.draw(st.sampled_from(self.added))
        old = self.repo.get_commit(old_id)
        new = self.repo.add_commit(
            old.description + "!",
            parents=list(old.parent_ids),
            change_id=ChangeId(old.change_id),
        )
        self.added.append(new.id)

    @rule(data=st.data())
    def hide_commit(self, data: st.DataObject) -> None:
        heads = sorted(self.repo.view.head_ids)
        if not heads:
            return
        self.repo.hide_commit(data.draw(st.sampled_from(heads)))

    @invariant()
    def commit_prefixes_unique(self) -> None:
        context = IdPrefixContext(self.repo)
        visible = self.repo.visible_commit_ids()
        for commit_id in visible:
            prefix = commit_id[: context.shortest_commit_prefix_len(commit_id)]
            assert [other for other in visible if other.startswith(prefix)] == [commit_id]

    @invariant()
    def resolved_change_ids_are_visible(self) -> None:
        visible = self.repo.visible_commit_ids()
        for commit_id in visible:
            change_id = self.repo.get_commit(commit_id).change_id
            resolved = self.repo.resolve_change_id(change_id)
            assert resolved is not None
            assert commit_id in resolved
            assert set(resolved) <= visible


TestGrowingRepo = GrowingRepoMachine.TestCase
TestGrowingRepo.settings = settings(max_examples=25, stateful_step_count=20)
