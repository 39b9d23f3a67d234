"""Example extension counting characters in commit ids.

Adds the ``num_digits_in_id`` keyword and the ``num_char_in_id("c")``
function to the commit template language.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from revtemplate.commit import CoreKind
from revtemplate.exceptions import InvalidArgumentsError, NoSuchFunctionError
from revtemplate.templater import ExpressionKind, IntegerKind

if TYPE_CHECKING:
    from revtemplate.commit import CommitTemplatePropertyKind
    from revtemplate.repo import Commit
    from revtemplate.templater import BuildContext, FunctionCallNode, TemplateProperty


def num_digits_in_id(commit: Commit) -> int:
    return sum(1 for ch in commit.id if ch.isascii() and ch.isdigit())


def num_char_in_id(commit: Commit, ch_match: str) -> int:
    return commit.id.count(ch_match)


class HexCounter:
    """Commit template extension counting characters in the commit id."""

    def build_commit_property_opt(
        self,
        property: TemplateProperty[Commit, Commit],  # noqa: A002
        name: str,
    ) -> CommitTemplatePropertyKind | TemplateProperty[Commit, Commit]:
        match name:
            case "num_digits_in_id":
                return CoreKind(IntegerKind(property.map(num_digits_in_id)))
            case _:
                return property

    def build_commit_function(
        self,
        build_ctx: BuildContext[CommitTemplatePropertyKind],  # noqa: ARG002
        property: TemplateProperty[Commit, Commit],  # noqa: A002
        function: FunctionCallNode,
    ) -> CommitTemplatePropertyKind:
        match function.name:
            case "num_char_in_id":
                match function.args:
                    case (node,) if node.kind is ExpressionKind.STRING and isinstance(
                        node.value, str
                    ):
                        text = node.value
                    case _:
                        raise InvalidArgumentsError(function, "Expected singular string argument")
                if len(text) != 1:
                    raise InvalidArgumentsError(function, "Expected single character argument")
                return CoreKind(
                    IntegerKind(property.map(lambda commit: num_char_in_id(commit, text)))
                )
            case _:
                raise NoSuchFunctionError(function)
