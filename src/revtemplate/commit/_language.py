"""Commit template language.

``CommitTemplateLanguage`` is the ``TemplateLanguage`` the generic builder
talks to when templates are rendered per commit. It owns the commit keyword
table, the methods of every commit-specific kind, and the fallback to an
optional extension for names it doesn't know.

Example:
    >>> template = parse(repo, DEFAULT_WORKSPACE_ID, IdPrefixContext(repo),
    ...                  "commit_id.short(8)", {}, parser=my_parser)
    >>> render_plain(template, repo.get_commit(commit_id))
    '1a2b3c4d'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from revtemplate.commit._ids import DEFAULT_SHORT_LEN, CommitOrChangeId
from revtemplate.commit._kinds import (
    CommitKind,
    CommitListKind,
    CommitOrChangeIdKind,
    CoreKind,
    RefNameKind,
    RefNameListKind,
    ShortestIdPrefixKind,
    try_into_boolean,
    try_into_integer,
    try_into_plain_text,
    try_into_template,
)
from revtemplate.commit._ref_names import (
    CommitKeywordCache,
    extract_git_head,
    extract_working_copies,
)
from revtemplate.exceptions import (
    NoSuchFunctionError,
    NoSuchKeywordError,
    NoSuchMethodError,
    RepositoryError,
    TemplatePropertyError,
)
from revtemplate.templater import (
    BooleanKind,
    BuildContext,
    FunctionCallNode,
    IntegerKind,
    SignatureKind,
    StringKind,
    TemplateKind,
    TemplateProperty,
    build,
    build_core_method,
    build_formattable_list_method,
    build_unformattable_list_method,
    expect_arguments,
    expect_integer_expression,
    expect_no_arguments,
    identity_property,
    zip_properties,
)
from revtemplate.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from structlog.typing import FilteringBoundLogger

    from revtemplate.commit._extension import CommitTemplateLanguageExtension
    from revtemplate.commit._ids import ShortestIdPrefix
    from revtemplate.commit._kinds import CommitTemplatePropertyKind
    from revtemplate.commit._ref_names import RefName
    from revtemplate.repo import Commit, IdPrefixContext, RepoProtocol, Signature, WorkspaceId
    from revtemplate.templater import (
        ExpressionNode,
        Span,
        Template,
        TemplateAliasesMap,
        TemplateParser,
    )


def complete_newline(text: str) -> str:
    """Append a newline to non-empty text that doesn't end with one."""
    if text and not text.endswith("\n"):
        return f"{text}\n"
    return text


def load_parents(repo: RepoProtocol, commit: Commit) -> list[Commit]:
    """Load a commit's parents.

    Raises:
        TemplatePropertyError: If a parent can't be loaded.
    """
    try:
        return [repo.get_commit(parent_id) for parent_id in commit.parent_ids]
    except RepositoryError as e:
        msg = f"Failed to load parents of commit {commit.id}: {e}"
        raise TemplatePropertyError(msg, cause=e) from e


def is_empty(repo: RepoProtocol, commit: Commit) -> bool:
    """Whether the commit's tree equals what its parents combine to.

    Raises:
        TemplatePropertyError: If a parent or tree can't be loaded.
    """
    parents = load_parents(repo, commit)
    if len(parents) == 1:
        return parents[0].tree_id == commit.tree_id
    try:
        return repo.merge_commit_trees(parents) == commit.tree_id
    except RepositoryError as e:
        msg = f"Failed to merge parent trees of commit {commit.id}: {e}"
        raise TemplatePropertyError(msg, cause=e) from e


class CommitTemplateLanguage:
    """Template language over ``Commit`` contexts.

    One instance is one evaluation session: the ref name indexes it builds
    are shared by every template built through it.

    Attributes:
        repo: The repository snapshot to read from.
        workspace_id: Workspace whose checkout ``current_working_copy`` tests.
        id_prefix_context: Shortest-prefix service for ``shortest()``.
        extension: Optional host extension consulted for unknown names.
        keyword_cache: Lazily built ref name indexes.
    """

    def __init__(
        self,
        repo: RepoProtocol,
        workspace_id: WorkspaceId,
        id_prefix_context: IdPrefixContext,
        *,
        extension: CommitTemplateLanguageExtension | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.repo: RepoProtocol = repo
        self.workspace_id: WorkspaceId = workspace_id
        self.id_prefix_context: IdPrefixContext = id_prefix_context
        self.extension: CommitTemplateLanguageExtension | None = extension
        self._logger: FilteringBoundLogger = logger if logger is not None else create_null_logger()
        self.keyword_cache: CommitKeywordCache = CommitKeywordCache(repo, self._logger)

    # =========================================================================
    # Wrapping
    # =========================================================================

    def wrap_string(
        self,
        property: TemplateProperty[Commit, str],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return CoreKind(StringKind(property))

    def wrap_boolean(
        self,
        property: TemplateProperty[Commit, bool],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return CoreKind(BooleanKind(property))

    def wrap_integer(
        self,
        property: TemplateProperty[Commit, int],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return CoreKind(IntegerKind(property))

    def wrap_signature(
        self,
        property: TemplateProperty[Commit, Signature],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return CoreKind(SignatureKind(property))

    def wrap_template(self, template: Template[Commit]) -> CommitTemplatePropertyKind:
        return CoreKind(TemplateKind(template))

    def wrap_commit(
        self,
        property: TemplateProperty[Commit, Commit],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return CommitKind(property)

    def wrap_commit_list(
        self,
        property: TemplateProperty[Commit, list[Commit]],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return CommitListKind(property)

    def wrap_ref_name(
        self,
        property: TemplateProperty[Commit, RefName],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return RefNameKind(property)

    def wrap_ref_name_list(
        self,
        property: TemplateProperty[Commit, list[RefName]],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return RefNameListKind(property)

    def wrap_commit_or_change_id(
        self,
        property: TemplateProperty[Commit, CommitOrChangeId],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return CommitOrChangeIdKind(property)

    def wrap_shortest_id_prefix(
        self,
        property: TemplateProperty[Commit, ShortestIdPrefix],  # noqa: A002
    ) -> CommitTemplatePropertyKind:
        return ShortestIdPrefixKind(property)

    # =========================================================================
    # Conversions
    # =========================================================================

    def try_into_boolean(
        self,
        property: CommitTemplatePropertyKind,  # noqa: A002
    ) -> TemplateProperty[Commit, bool] | None:
        return try_into_boolean(property)

    def try_into_integer(
        self,
        property: CommitTemplatePropertyKind,  # noqa: A002
    ) -> TemplateProperty[Commit, int] | None:
        return try_into_integer(property)

    def try_into_plain_text(
        self,
        property: CommitTemplatePropertyKind,  # noqa: A002
    ) -> TemplateProperty[Commit, str] | None:
        return try_into_plain_text(property)

    def try_into_template(
        self,
        property: CommitTemplatePropertyKind,  # noqa: A002
    ) -> Template[Commit] | None:
        return try_into_template(property)

    # =========================================================================
    # Resolution entry points
    # =========================================================================

    def build_keyword(self, name: str, span: Span) -> CommitTemplatePropertyKind:
        """Resolve a bare identifier against the commit being rendered.

        Unknown names are offered to the extension, first as a keyword and
        then as a zero-argument function call.

        Raises:
            NoSuchKeywordError: If neither the built-in table nor the
                extension knows ``name``.
        """
        property: TemplateProperty[Commit, Commit] = identity_property()
        kind = self.build_commit_keyword_opt(property, name)
        if kind is not None:
            return kind
        if self.extension is not None:
            self._logger.debug("keyword_extension_fallback", name=name)
            result = self.extension.build_commit_property_opt(property, name)
            if not isinstance(result, TemplateProperty):
                return result
            function = FunctionCallNode(name=name, name_span=span, args_span=span)
            try:
                return self.extension.build_commit_function(BuildContext(), result, function)
            except NoSuchFunctionError:
                pass
        raise NoSuchKeywordError(name, span)

    def build_method(
        self,
        build_ctx: BuildContext[CommitTemplatePropertyKind],
        property: CommitTemplatePropertyKind,  # noqa: A002
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        match property:
            case CoreKind(kind=core):
                return build_core_method(self, build_ctx, core, function)
            case CommitKind(property=prop):
                return self.build_commit_method(build_ctx, prop, function)
            case CommitListKind(property=prop):
                return build_unformattable_list_method(
                    self, build_ctx, prop, function, self.wrap_commit
                )
            case RefNameKind(property=prop):
                return self.build_ref_name_method(prop, function)
            case RefNameListKind(property=prop):
                return build_formattable_list_method(
                    self, build_ctx, prop, function, self.wrap_ref_name
                )
            case CommitOrChangeIdKind(property=prop):
                return self.build_commit_or_change_id_method(build_ctx, prop, function)
            case ShortestIdPrefixKind(property=prop):
                return self.build_shortest_id_prefix_method(prop, function)
            case _:
                assert_never(property)

    def build_function(
        self,
        build_ctx: BuildContext[CommitTemplatePropertyKind],
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        """Resolve a global function the generic builder doesn't know.

        The call is handed to the extension with the rendered commit as its
        receiver.

        Raises:
            NoSuchFunctionError: If there is no extension or it doesn't know
                the function.
        """
        if self.extension is None:
            raise NoSuchFunctionError(function)
        self._logger.debug("function_extension_fallback", name=function.name)
        return self.extension.build_commit_function(build_ctx, identity_property(), function)

    # =========================================================================
    # Commit keywords and methods
    # =========================================================================

    def build_commit_keyword_opt(
        self,
        property: TemplateProperty[Commit, Commit],  # noqa: A002
        name: str,
    ) -> CommitTemplatePropertyKind | None:
        """Build a built-in commit keyword, or return None if unknown."""
        repo = self.repo
        cache = self.keyword_cache
        match name:
            case "description":
                return self.wrap_string(
                    property.map(lambda commit: complete_newline(commit.description))
                )
            case "change_id":
                return self.wrap_commit_or_change_id(
                    property.map(lambda commit: CommitOrChangeId.change(commit.change_id))
                )
            case "commit_id":
                return self.wrap_commit_or_change_id(
                    property.map(lambda commit: CommitOrChangeId.commit(commit.id))
                )
            case "parents":
                return self.wrap_commit_list(
                    property.map(lambda commit: load_parents(repo, commit))
                )
            case "author":
                return self.wrap_signature(property.map(lambda commit: commit.author))
            case "committer":
                return self.wrap_signature(property.map(lambda commit: commit.committer))
            case "working_copies":
                return self.wrap_string(
                    property.map(lambda commit: extract_working_copies(repo, commit))
                )
            case "current_working_copy":
                workspace_id = self.workspace_id
                return self.wrap_boolean(
                    property.map(
                        lambda commit: commit.id == repo.view.get_wc_commit_id(workspace_id)
                    )
                )
            case "branches":
                index = cache.branches_index
                # Synced remote refs would only repeat the local name.
                return self.wrap_ref_name_list(
                    property.map(
                        lambda commit: [
                            ref_name
                            for ref_name in index.get(commit.id)
                            if ref_name.is_local() or not ref_name.synced
                        ]
                    )
                )
            case "local_branches":
                index = cache.branches_index
                return self.wrap_ref_name_list(
                    property.map(
                        lambda commit: [
                            ref_name for ref_name in index.get(commit.id) if ref_name.is_local()
                        ]
                    )
                )
            case "remote_branches":
                index = cache.branches_index
                return self.wrap_ref_name_list(
                    property.map(
                        lambda commit: [
                            ref_name for ref_name in index.get(commit.id) if ref_name.is_remote()
                        ]
                    )
                )
            case "tags":
                index = cache.tags_index
                return self.wrap_ref_name_list(
                    property.map(lambda commit: list(index.get(commit.id)))
                )
            case "git_refs":
                index = cache.git_refs_index
                return self.wrap_ref_name_list(
                    property.map(lambda commit: list(index.get(commit.id)))
                )
            case "git_head":
                return self.wrap_ref_name_list(
                    property.map(lambda commit: extract_git_head(repo, commit))
                )
            case "divergent":
                return self.wrap_boolean(
                    property.map(
                        lambda commit: len(repo.resolve_change_id(commit.change_id) or ()) > 1
                    )
                )
            case "hidden":
                return self.wrap_boolean(property.map(lambda commit: self._is_hidden(commit)))
            case "conflict":
                return self.wrap_boolean(property.map(lambda commit: commit.has_conflict))
            case "empty":
                return self.wrap_boolean(property.map(lambda commit: is_empty(repo, commit)))
            case "root":
                return self.wrap_boolean(
                    property.map(lambda commit: commit.id == repo.root_commit_id)
                )
            case _:
                return None

    def _is_hidden(self, commit: Commit) -> bool:
        # No match at all counts as hidden, the same as not being among the matches.
        commit_ids = self.repo.resolve_change_id(commit.change_id)
        return commit_ids is None or commit.id not in commit_ids

    def build_commit_method(
        self,
        build_ctx: BuildContext[CommitTemplatePropertyKind],
        self_property: TemplateProperty[Commit, Commit],
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        """Resolve ``commit.name(args...)``.

        Keywords double as argument-less methods. Other names go to the
        extension, as a keyword when called without arguments and then as a
        function.

        Raises:
            InvalidArgumentsError: If a keyword method is given arguments.
            NoSuchMethodError: If nothing knows the method.
        """
        kind = self.build_commit_keyword_opt(self_property, function.name)
        if kind is not None:
            expect_no_arguments(function)
            return kind
        if self.extension is not None:
            self._logger.debug("method_extension_fallback", name=function.name)
            if not function.args:
                result = self.extension.build_commit_property_opt(self_property, function.name)
                if not isinstance(result, TemplateProperty):
                    return result
                self_property = result
            try:
                return self.extension.build_commit_function(build_ctx, self_property, function)
            except NoSuchFunctionError:
                pass
        raise NoSuchMethodError("Commit", function)

    # =========================================================================
    # Methods of other kinds
    # =========================================================================

    def build_ref_name_method(
        self,
        self_property: TemplateProperty[Commit, RefName],
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        match function.name:
            case "name":
                expect_no_arguments(function)
                return self.wrap_string(self_property.map(lambda ref_name: ref_name.name))
            case "remote":
                expect_no_arguments(function)
                return self.wrap_string(
                    self_property.map(lambda ref_name: ref_name.remote or "")
                )
            case _:
                raise NoSuchMethodError("RefName", function)

    def _optional_length(
        self,
        build_ctx: BuildContext[CommitTemplatePropertyKind],
        function: FunctionCallNode,
    ) -> TemplateProperty[Commit, int] | None:
        _, (len_node,) = expect_arguments(function, 0, 1)
        if len_node is None:
            return None
        return expect_integer_expression(self, build_ctx, len_node)

    def build_commit_or_change_id_method(
        self,
        build_ctx: BuildContext[CommitTemplatePropertyKind],
        self_property: TemplateProperty[Commit, CommitOrChangeId],
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        match function.name:
            case "short":
                len_property = self._optional_length(build_ctx, function)
                return self.wrap_string(
                    zip_properties(self_property, len_property).map(
                        lambda pair: pair[0].short(
                            DEFAULT_SHORT_LEN if pair[1] is None else pair[1]
                        )
                    )
                )
            case "shortest":
                id_prefix_context = self.id_prefix_context
                len_property = self._optional_length(build_ctx, function)
                return self.wrap_shortest_id_prefix(
                    zip_properties(self_property, len_property).map(
                        lambda pair: pair[0].shortest(id_prefix_context, pair[1] or 0)
                    )
                )
            case _:
                raise NoSuchMethodError("CommitOrChangeId", function)

    def build_shortest_id_prefix_method(
        self,
        self_property: TemplateProperty[Commit, ShortestIdPrefix],
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        match function.name:
            case "prefix":
                expect_no_arguments(function)
                return self.wrap_string(self_property.map(lambda id_prefix: id_prefix.prefix))
            case "rest":
                expect_no_arguments(function)
                return self.wrap_string(self_property.map(lambda id_prefix: id_prefix.rest))
            case "upper":
                expect_no_arguments(function)
                return self.wrap_shortest_id_prefix(
                    self_property.map(lambda id_prefix: id_prefix.to_upper())
                )
            case "lower":
                expect_no_arguments(function)
                return self.wrap_shortest_id_prefix(
                    self_property.map(lambda id_prefix: id_prefix.to_lower())
                )
            case _:
                raise NoSuchMethodError("ShortestIdPrefix", function)


def build_template(
    repo: RepoProtocol,
    workspace_id: WorkspaceId,
    id_prefix_context: IdPrefixContext,
    node: ExpressionNode,
    *,
    extension: CommitTemplateLanguageExtension | None = None,
    logger: FilteringBoundLogger | None = None,
) -> Template[Commit]:
    """Build a commit template from an already parsed expression tree.

    Raises:
        TemplateParseError: If the expression can't be built.
    """
    language = CommitTemplateLanguage(
        repo,
        workspace_id,
        id_prefix_context,
        extension=extension,
        logger=logger,
    )
    return build(language, node)


def parse(
    repo: RepoProtocol,
    workspace_id: WorkspaceId,
    id_prefix_context: IdPrefixContext,
    template_text: str,
    aliases_map: TemplateAliasesMap,
    *,
    parser: TemplateParser | Callable[[str, TemplateAliasesMap], ExpressionNode],
    extension: CommitTemplateLanguageExtension | None = None,
    logger: FilteringBoundLogger | None = None,
) -> Template[Commit]:
    """Parse and build a commit template.

    Args:
        repo: Repository snapshot templates read from.
        workspace_id: Workspace for ``current_working_copy``.
        id_prefix_context: Shortest-prefix service for ``shortest()``.
        template_text: Template source.
        aliases_map: Template aliases handed to the parser.
        parser: Turns template source into an expression tree.
        extension: Optional extra keywords and functions.
        logger: Optional structlog logger for debug output.

    Returns:
        The built template.

    Raises:
        TemplateParseError: If parsing or building fails.
    """
    node = parser(template_text, aliases_map)
    return build_template(
        repo,
        workspace_id,
        id_prefix_context,
        node,
        extension=extension,
        logger=logger,
    )
