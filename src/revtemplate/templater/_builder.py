"""Expression builder and core type system.

The builder walks an expression tree and asks a ``TemplateLanguage`` to turn
identifiers and method calls into typed property kinds. The language owns the
domain vocabulary; this module owns literals, global functions, the core
primitive kinds, and list operations shared by every language.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, assert_never

from revtemplate.exceptions import (
    InvalidArgumentsError,
    NoSuchMethodError,
    TemplateParseError,
    TemplateParseErrorKind,
    TypeMismatchError,
)

from ._formatter import labeled
from ._nodes import (
    ExpressionKind,
    ExpressionNode,
    FunctionCallNode,
    LambdaNode,
    MethodCallNode,
    expect_arguments,
    expect_no_arguments,
)
from ._property import Literal, PropertyFn, TemplateProperty, zip_properties
from ._template import (
    ConcatTemplate,
    ConditionalTemplate,
    FormattablePropertyTemplate,
    ItemCell,
    LabelTemplate,
    ListMapTemplate,
    ListPropertyTemplate,
    PlainTextFormattedProperty,
    Template,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from revtemplate.repo import Signature

    from ._formatter import Formatter
    from ._nodes import Span


type TemplateAliasesMap = Mapping[str, str]


class TemplateParser(Protocol):
    """Turns template source into an expression tree."""

    def __call__(self, text: str, aliases: TemplateAliasesMap) -> ExpressionNode:
        """Parse ``text``, expanding ``aliases``."""
        ...


# =============================================================================
# Core property kinds
# =============================================================================


@dataclass(frozen=True, slots=True)
class StringKind:
    property: TemplateProperty[Any, str]


@dataclass(frozen=True, slots=True)
class BooleanKind:
    property: TemplateProperty[Any, bool]


@dataclass(frozen=True, slots=True)
class IntegerKind:
    property: TemplateProperty[Any, int]


@dataclass(frozen=True, slots=True)
class SignatureKind:
    property: TemplateProperty[Any, Signature]


@dataclass(frozen=True, slots=True)
class TemplateKind:
    template: Template[Any]


type CoreTemplatePropertyKind = (
    StringKind | BooleanKind | IntegerKind | SignatureKind | TemplateKind
)


@dataclass(frozen=True, slots=True)
class SignatureTemplate[C](Template[C]):
    """Formats a signature as ``name <email>``."""

    property: TemplateProperty[C, Signature]

    def format(self, context: C, formatter: Formatter) -> None:
        signature = self.property.extract(context)
        with labeled(formatter, "name"):
            formatter.write(signature.name)
        formatter.write(" <")
        with labeled(formatter, "email"):
            formatter.write(signature.email)
        formatter.write(">")


def core_type_name(kind: CoreTemplatePropertyKind) -> str:
    match kind:
        case StringKind():
            return "String"
        case BooleanKind():
            return "Boolean"
        case IntegerKind():
            return "Integer"
        case SignatureKind():
            return "Signature"
        case TemplateKind():
            return "Template"
        case _:
            assert_never(kind)


def core_try_into_boolean(
    kind: CoreTemplatePropertyKind,
) -> TemplateProperty[Any, bool] | None:
    match kind:
        case StringKind(property=prop):
            return prop.map(bool)
        case BooleanKind(property=prop):
            return prop
        case IntegerKind() | SignatureKind() | TemplateKind():
            return None
        case _:
            assert_never(kind)


def core_try_into_integer(
    kind: CoreTemplatePropertyKind,
) -> TemplateProperty[Any, int] | None:
    match kind:
        case IntegerKind(property=prop):
            return prop
        case StringKind() | BooleanKind() | SignatureKind() | TemplateKind():
            return None
        case _:
            assert_never(kind)


def core_try_into_plain_text(
    kind: CoreTemplatePropertyKind,
) -> TemplateProperty[Any, str] | None:
    match kind:
        case StringKind(property=prop):
            return prop
        case BooleanKind() | IntegerKind() | SignatureKind() | TemplateKind():
            template = core_try_into_template(kind)
            if template is None:
                return None
            return PlainTextFormattedProperty(template)
        case _:
            assert_never(kind)


def core_try_into_template(kind: CoreTemplatePropertyKind) -> Template[Any] | None:
    match kind:
        case StringKind(property=prop):
            return FormattablePropertyTemplate(prop)
        case BooleanKind(property=prop):
            return FormattablePropertyTemplate(prop)
        case IntegerKind(property=prop):
            return FormattablePropertyTemplate(prop)
        case SignatureKind(property=prop):
            return SignatureTemplate(prop)
        case TemplateKind(template=template):
            return template
        case _:
            assert_never(kind)


# =============================================================================
# Language protocol and build context
# =============================================================================


class TemplateLanguage[C, P](Protocol):
    """Domain vocabulary plugged into the generic builder.

    ``C`` is the context type templates are rendered for; ``P`` is the
    language's closed union of property kinds.
    """

    def wrap_string(self, property: TemplateProperty[C, str]) -> P: ...  # noqa: A002

    def wrap_boolean(self, property: TemplateProperty[C, bool]) -> P: ...  # noqa: A002

    def wrap_integer(self, property: TemplateProperty[C, int]) -> P: ...  # noqa: A002

    def wrap_signature(self, property: TemplateProperty[C, Signature]) -> P: ...  # noqa: A002

    def wrap_template(self, template: Template[C]) -> P: ...

    def build_keyword(self, name: str, span: Span) -> P:
        """Resolve a bare identifier against the context."""
        ...

    def build_method(
        self,
        build_ctx: BuildContext[P],
        property: P,  # noqa: A002
        function: FunctionCallNode,
    ) -> P:
        """Resolve ``property.function(args...)``."""
        ...

    def build_function(self, build_ctx: BuildContext[P], function: FunctionCallNode) -> P:
        """Resolve a global function the builder doesn't know."""
        ...

    def try_into_boolean(self, property: P) -> TemplateProperty[C, bool] | None: ...  # noqa: A002

    def try_into_integer(self, property: P) -> TemplateProperty[C, int] | None: ...  # noqa: A002

    def try_into_plain_text(self, property: P) -> TemplateProperty[C, str] | None: ...  # noqa: A002

    def try_into_template(self, property: P) -> Template[C] | None: ...  # noqa: A002


@dataclass(frozen=True, slots=True)
class BuildContext[P]:
    """Scope for building nested expressions.

    Attributes:
        local_variables: Lambda parameters in scope, mapped to factories that
            produce a fresh property kind for each reference.
    """

    local_variables: Mapping[str, Callable[[], P]] = field(default_factory=dict)

    def with_local(self, name: str, factory: Callable[[], P]) -> BuildContext[P]:
        """Return a child scope with one more local variable."""
        return BuildContext({**self.local_variables, name: factory})


# =============================================================================
# Expression building
# =============================================================================


def build_expression[C, P](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    node: ExpressionNode,
) -> P:
    """Build one expression node into a property kind.

    Raises:
        TemplateParseError: If any part of the expression can't be built.
    """
    match node.kind:
        case ExpressionKind.IDENTIFIER:
            name = _payload(node, str)
            factory = build_ctx.local_variables.get(name)
            if factory is not None:
                return factory()
            return language.build_keyword(name, node.span)
        case ExpressionKind.BOOLEAN:
            return language.wrap_boolean(Literal(_payload(node, bool)))
        case ExpressionKind.INTEGER:
            return language.wrap_integer(Literal(_payload(node, int)))
        case ExpressionKind.STRING:
            return language.wrap_string(Literal(_payload(node, str)))
        case ExpressionKind.CONCAT:
            nodes = _payload(node, tuple)
            templates = tuple(
                expect_template_expression(language, build_ctx, child) for child in nodes
            )
            return language.wrap_template(ConcatTemplate(templates))
        case ExpressionKind.FUNCTION_CALL:
            return build_global_function(language, build_ctx, _payload(node, FunctionCallNode))
        case ExpressionKind.METHOD_CALL:
            method = _payload(node, MethodCallNode)
            receiver = build_expression(language, build_ctx, method.object)
            return language.build_method(build_ctx, receiver, method.function)
        case ExpressionKind.LAMBDA:
            msg = "Lambda cannot be defined here"
            raise TemplateParseError(
                msg, kind=TemplateParseErrorKind.TYPE_MISMATCH, span=node.span
            )
        case _:
            assert_never(node.kind)


def _payload[T](node: ExpressionNode, expected: type[T]) -> T:
    value = node.value
    if not isinstance(value, expected):
        msg = f"Malformed {node.kind} node"
        raise TemplateParseError(
            msg, kind=TemplateParseErrorKind.TYPE_MISMATCH, span=node.span
        )
    return value


def build_global_function[C, P](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    function: FunctionCallNode,
) -> P:
    """Build one of the engine's global functions, else defer to the language."""
    match function.name:
        case "if":
            (condition_node, then_node), (else_node,) = expect_arguments(function, 2, 1)
            condition = expect_boolean_expression(language, build_ctx, condition_node)
            true_template = expect_template_expression(language, build_ctx, then_node)
            false_template = (
                None
                if else_node is None
                else expect_template_expression(language, build_ctx, else_node)
            )
            return language.wrap_template(
                ConditionalTemplate(condition, true_template, false_template)
            )
        case "concat":
            templates = tuple(
                expect_template_expression(language, build_ctx, arg)
                for arg in function.args
            )
            return language.wrap_template(ConcatTemplate(templates))
        case "label":
            (label_node, content_node), _ = expect_arguments(function, 2)
            label_property = expect_plain_text_expression(language, build_ctx, label_node)
            content = expect_template_expression(language, build_ctx, content_node)
            return language.wrap_template(
                LabelTemplate(content, label_property.map(str.split))
            )
        case _:
            return language.build_function(build_ctx, function)


def expect_boolean_expression[C, P](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    node: ExpressionNode,
) -> TemplateProperty[C, bool]:
    prop = language.try_into_boolean(build_expression(language, build_ctx, node))
    if prop is None:
        raise TypeMismatchError("Boolean", node.span)
    return prop


def expect_integer_expression[C, P](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    node: ExpressionNode,
) -> TemplateProperty[C, int]:
    prop = language.try_into_integer(build_expression(language, build_ctx, node))
    if prop is None:
        raise TypeMismatchError("Integer", node.span)
    return prop


def expect_plain_text_expression[C, P](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    node: ExpressionNode,
) -> TemplateProperty[C, str]:
    prop = language.try_into_plain_text(build_expression(language, build_ctx, node))
    if prop is None:
        raise TypeMismatchError("String", node.span)
    return prop


def expect_template_expression[C, P](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    node: ExpressionNode,
) -> Template[C]:
    template = language.try_into_template(build_expression(language, build_ctx, node))
    if template is None:
        raise TypeMismatchError("Template", node.span)
    return template


def build[C, P](language: TemplateLanguage[C, P], node: ExpressionNode) -> Template[C]:
    """Build a complete template from the root expression node.

    Raises:
        TemplateParseError: If the expression can't be built. No partial
            template is produced.
    """
    return expect_template_expression(language, BuildContext(), node)


# =============================================================================
# Core methods
# =============================================================================


def build_core_method[C, P](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    kind: CoreTemplatePropertyKind,
    function: FunctionCallNode,
) -> P:
    """Build a method call on one of the core primitive kinds."""
    match kind:
        case StringKind(property=prop):
            return _build_string_method(language, build_ctx, prop, function)
        case SignatureKind(property=prop):
            return _build_signature_method(language, prop, function)
        case BooleanKind() | IntegerKind() | TemplateKind():
            raise NoSuchMethodError(core_type_name(kind), function)
        case _:
            assert_never(kind)


def _build_string_method[C, P](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    self_property: TemplateProperty[C, str],
    function: FunctionCallNode,
) -> P:
    match function.name:
        case "len":
            expect_no_arguments(function)
            return language.wrap_integer(self_property.map(len))
        case "contains":
            (needle_node,), _ = expect_arguments(function, 1)
            needle = expect_plain_text_expression(language, build_ctx, needle_node)
            return language.wrap_boolean(
                zip_properties(self_property, needle).map(lambda pair: pair[1] in pair[0])
            )
        case "first_line":
            expect_no_arguments(function)
            return language.wrap_string(
                self_property.map(lambda text: text.split("\n", 1)[0])
            )
        case "upper":
            expect_no_arguments(function)
            return language.wrap_string(self_property.map(str.upper))
        case "lower":
            expect_no_arguments(function)
            return language.wrap_string(self_property.map(str.lower))
        case _:
            raise NoSuchMethodError("String", function)


def _build_signature_method[C, P](
    language: TemplateLanguage[C, P],
    self_property: TemplateProperty[C, Signature],
    function: FunctionCallNode,
) -> P:
    match function.name:
        case "name":
            expect_no_arguments(function)
            return language.wrap_string(self_property.map(lambda sig: sig.name))
        case "email":
            expect_no_arguments(function)
            return language.wrap_string(self_property.map(lambda sig: sig.email))
        case "username":
            expect_no_arguments(function)
            return language.wrap_string(
                self_property.map(lambda sig: sig.email.split("@", 1)[0])
            )
        case _:
            raise NoSuchMethodError("Signature", function)


# =============================================================================
# List methods
# =============================================================================


def build_formattable_list_method[C, P, T](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    self_property: TemplateProperty[C, Sequence[T]],
    function: FunctionCallNode,
    wrap_item: Callable[[TemplateProperty[C, T]], P],
) -> P:
    """Build a method on a list whose items can be formatted."""
    match function.name:
        case "join":
            (separator_node,), _ = expect_arguments(function, 1)
            separator = expect_template_expression(language, build_ctx, separator_node)
            return language.wrap_template(ListPropertyTemplate(self_property, separator))
        case _:
            return build_unformattable_list_method(
                language, build_ctx, self_property, function, wrap_item
            )


def build_unformattable_list_method[C, P, T](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    self_property: TemplateProperty[C, Sequence[T]],
    function: FunctionCallNode,
    wrap_item: Callable[[TemplateProperty[C, T]], P],
) -> P:
    """Build a method on a list whose items can't be formatted directly."""
    match function.name:
        case "len":
            expect_no_arguments(function)
            return language.wrap_integer(self_property.map(len))
        case "map":
            return _build_map_operation(
                language, build_ctx, self_property, function, wrap_item
            )
        case _:
            raise NoSuchMethodError("List", function)


def _build_map_operation[C, P, T](
    language: TemplateLanguage[C, P],
    build_ctx: BuildContext[P],
    self_property: TemplateProperty[C, Sequence[T]],
    function: FunctionCallNode,
    wrap_item: Callable[[TemplateProperty[C, T]], P],
) -> P:
    (lambda_node,), _ = expect_arguments(function, 1)
    if lambda_node.kind is not ExpressionKind.LAMBDA or not isinstance(
        lambda_node.value, LambdaNode
    ):
        raise InvalidArgumentsError(function, "Expected lambda expression")
    lambda_ = lambda_node.value
    if len(lambda_.params) != 1:
        raise InvalidArgumentsError(function, "Expected 1 lambda parameters")

    cell = ItemCell()
    item_property: TemplateProperty[C, T] = PropertyFn(lambda _context: cell.get())
    inner_ctx = build_ctx.with_local(lambda_.params[0], lambda: wrap_item(item_property))
    body = expect_template_expression(language, inner_ctx, lambda_.body)
    return language.wrap_template(ListMapTemplate(self_property, cell, body))
