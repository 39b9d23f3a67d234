"""Extension hook for the commit template language.

A host program can add keywords and functions without touching the built-in
vocabulary. The language consults the extension only after its own table
fails to recognize a name: first the keyword resolver, then the function
resolver. At most one extension is active per language instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from revtemplate.exceptions import NoSuchFunctionError

if TYPE_CHECKING:
    from collections.abc import Callable

    from revtemplate.commit._kinds import CommitTemplatePropertyKind
    from revtemplate.repo import Commit
    from revtemplate.templater import BuildContext, FunctionCallNode, TemplateProperty

type CommitPropertyOpt = Callable[
    [TemplateProperty[Commit, Commit], str],
    CommitTemplatePropertyKind | TemplateProperty[Commit, Commit],
]
type CommitFunction = Callable[
    [
        BuildContext[CommitTemplatePropertyKind],
        TemplateProperty[Commit, Commit],
        FunctionCallNode,
    ],
    CommitTemplatePropertyKind,
]


class CommitTemplateLanguageExtension(Protocol):
    """Additional commit keywords and functions supplied by a host."""

    def build_commit_property_opt(
        self,
        property: TemplateProperty[Commit, Commit],  # noqa: A002
        name: str,
    ) -> CommitTemplatePropertyKind | TemplateProperty[Commit, Commit]:
        """Resolve a keyword on a commit property.

        Returns:
            The new property kind, or ``property`` itself (not consumed) when
            ``name`` isn't one of the extension's keywords.
        """
        ...

    def build_commit_function(
        self,
        build_ctx: BuildContext[CommitTemplatePropertyKind],
        property: TemplateProperty[Commit, Commit],  # noqa: A002
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        """Resolve a function call on a commit property.

        Arguments are unbuilt expression nodes; the extension validates them.

        Raises:
            NoSuchFunctionError: If the function isn't known.
            InvalidArgumentsError: If the arguments have the wrong shape.
        """
        ...


@dataclass(frozen=True, slots=True)
class FunctionExtension:
    """Extension assembled from two plain callables.

    Either callable may be omitted; a missing keyword resolver declines every
    name and a missing function resolver knows no functions.
    """

    property_opt: CommitPropertyOpt | None = None
    function: CommitFunction | None = None

    def build_commit_property_opt(
        self,
        property: TemplateProperty[Commit, Commit],  # noqa: A002
        name: str,
    ) -> CommitTemplatePropertyKind | TemplateProperty[Commit, Commit]:
        if self.property_opt is None:
            return property
        return self.property_opt(property, name)

    def build_commit_function(
        self,
        build_ctx: BuildContext[CommitTemplatePropertyKind],
        property: TemplateProperty[Commit, Commit],  # noqa: A002
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        if self.function is None:
            raise NoSuchFunctionError(function)
        return self.function(build_ctx, property, function)
