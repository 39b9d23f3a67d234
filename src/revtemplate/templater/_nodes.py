"""Template expression tree.

The tree is produced by an external parser. Builders walk it and ask the
template language to turn identifiers and calls into typed properties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from revtemplate.exceptions import InvalidArgumentsError

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open character range into the template source."""

    start: int
    end: int

    def merge(self, other: Span) -> Span:
        """Return the smallest span covering both spans."""
        return Span(min(self.start, other.start), max(self.end, other.end))


class ExpressionKind(StrEnum):
    """Expression node kinds."""

    IDENTIFIER = "identifier"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    STRING = "string"
    CONCAT = "concat"
    FUNCTION_CALL = "function_call"
    METHOD_CALL = "method_call"
    LAMBDA = "lambda"


@dataclass(frozen=True, slots=True)
class FunctionCallNode:
    """A call ``name(args...)``, either global or as a method.

    Attributes:
        name: Function or method name.
        args: Argument expressions, not yet built.
        name_span: Span of the name.
        args_span: Span of the parenthesized argument list.
    """

    name: str
    args: tuple[ExpressionNode, ...] = ()
    name_span: Span = field(default_factory=lambda: Span(0, 0))
    args_span: Span = field(default_factory=lambda: Span(0, 0))


@dataclass(frozen=True, slots=True)
class MethodCallNode:
    """A method call ``object.function(args...)``."""

    object: ExpressionNode
    function: FunctionCallNode


@dataclass(frozen=True, slots=True)
class LambdaNode:
    """A lambda ``|params| body``."""

    params: tuple[str, ...]
    body: ExpressionNode


type ExpressionValue = (
    str
    | int
    | bool
    | tuple[ExpressionNode, ...]
    | FunctionCallNode
    | MethodCallNode
    | LambdaNode
)


@dataclass(frozen=True, slots=True)
class ExpressionNode:
    """One node of the expression tree.

    The payload type depends on ``kind``: ``str`` for identifiers and
    strings, ``int`` for integers, ``bool`` for booleans, a tuple of nodes for
    concatenation, and the matching node class for calls and lambdas.
    """

    kind: ExpressionKind
    value: ExpressionValue
    span: Span = field(default_factory=lambda: Span(0, 0))

    @classmethod
    def identifier(cls, name: str, span: Span | None = None) -> ExpressionNode:
        return cls(ExpressionKind.IDENTIFIER, name, span or Span(0, len(name)))

    @classmethod
    def string(cls, value: str, span: Span | None = None) -> ExpressionNode:
        return cls(ExpressionKind.STRING, value, span or Span(0, len(value) + 2))

    @classmethod
    def integer(cls, value: int, span: Span | None = None) -> ExpressionNode:
        return cls(ExpressionKind.INTEGER, value, span or Span(0, len(str(value))))

    @classmethod
    def boolean(cls, value: bool, span: Span | None = None) -> ExpressionNode:  # noqa: FBT001
        return cls(ExpressionKind.BOOLEAN, value, span or Span(0, len(str(value))))

    @classmethod
    def concat(cls, *nodes: ExpressionNode) -> ExpressionNode:
        span = nodes[0].span if nodes else Span(0, 0)
        for node in nodes[1:]:
            span = span.merge(node.span)
        return cls(ExpressionKind.CONCAT, tuple(nodes), span)

    @classmethod
    def call(
        cls,
        name: str,
        *args: ExpressionNode,
        span: Span | None = None,
    ) -> ExpressionNode:
        function = FunctionCallNode(
            name=name,
            args=tuple(args),
            name_span=span or Span(0, len(name)),
            args_span=span or Span(0, len(name)),
        )
        return cls(ExpressionKind.FUNCTION_CALL, function, function.name_span)

    @classmethod
    def method(
        cls,
        obj: ExpressionNode,
        name: str,
        *args: ExpressionNode,
        span: Span | None = None,
    ) -> ExpressionNode:
        function = FunctionCallNode(
            name=name,
            args=tuple(args),
            name_span=span or obj.span,
            args_span=span or obj.span,
        )
        return cls(
            ExpressionKind.METHOD_CALL,
            MethodCallNode(object=obj, function=function),
            span or obj.span,
        )

    @classmethod
    def lambda_(cls, params: Sequence[str], body: ExpressionNode) -> ExpressionNode:
        return cls(ExpressionKind.LAMBDA, LambdaNode(tuple(params), body), body.span)


def expect_no_arguments(function: FunctionCallNode) -> None:
    """Ensure the call has no arguments.

    Raises:
        InvalidArgumentsError: If any argument was passed.
    """
    if function.args:
        raise InvalidArgumentsError(function, "Expected 0 arguments")


def expect_arguments(
    function: FunctionCallNode,
    required: int,
    optional: int = 0,
) -> tuple[tuple[ExpressionNode, ...], tuple[ExpressionNode | None, ...]]:
    """Split arguments into required and optional parts.

    Args:
        function: The call node.
        required: Number of required arguments.
        optional: Number of optional arguments after the required ones.

    Returns:
        Tuple of (required nodes, optional nodes padded with None).

    Raises:
        InvalidArgumentsError: If the argument count is out of range.
    """
    count = len(function.args)
    if not required <= count <= required + optional:
        if optional == 0:
            expectation = f"Expected {required} arguments"
        else:
            expectation = f"Expected {required} to {required + optional} arguments"
        raise InvalidArgumentsError(function, expectation)
    required_args = function.args[:required]
    optional_args = function.args[required:]
    padding: tuple[None, ...] = (None,) * (required + optional - count)
    return required_args, (*optional_args, *padding)


def expect_string_literal(node: ExpressionNode, function: FunctionCallNode) -> str:
    """Return the payload of a string literal argument.

    Raises:
        InvalidArgumentsError: If the node is not a string literal.
    """
    if node.kind is ExpressionKind.STRING and isinstance(node.value, str):
        return node.value
    raise InvalidArgumentsError(function, "Expected string literal")
