"""Generic template engine pieces.

This package holds the language-independent half of the template engine:
the expression tree handed over by a parser, lazy properties, formattable
templates, output formatters, the core primitive kinds, and the expression
builder. Domain languages (see ``revtemplate.commit``) plug into the builder
through the ``TemplateLanguage`` protocol.

Example:
    >>> from revtemplate.templater import ExpressionNode, PlainTextFormatter
    >>> node = ExpressionNode.method(ExpressionNode.identifier("commit_id"), "short")
"""

from revtemplate.templater._builder import (
    BooleanKind,
    BuildContext,
    CoreTemplatePropertyKind,
    IntegerKind,
    SignatureKind,
    SignatureTemplate,
    StringKind,
    TemplateAliasesMap,
    TemplateKind,
    TemplateLanguage,
    TemplateParser,
    build,
    build_core_method,
    build_expression,
    build_formattable_list_method,
    build_global_function,
    build_unformattable_list_method,
    core_try_into_boolean,
    core_try_into_integer,
    core_try_into_plain_text,
    core_try_into_template,
    core_type_name,
    expect_boolean_expression,
    expect_integer_expression,
    expect_plain_text_expression,
    expect_template_expression,
)
from revtemplate.templater._formatter import (
    DEFAULT_COLORS,
    Formatter,
    PlainTextFormatter,
    RichFormatter,
    labeled,
)
from revtemplate.templater._nodes import (
    ExpressionKind,
    ExpressionNode,
    FunctionCallNode,
    LambdaNode,
    MethodCallNode,
    Span,
    expect_arguments,
    expect_no_arguments,
    expect_string_literal,
)
from revtemplate.templater._property import (
    Literal,
    PropertyFn,
    TemplateFunction,
    TemplateProperty,
    identity_property,
    zip_properties,
)
from revtemplate.templater._template import (
    ConcatTemplate,
    ConditionalTemplate,
    Formattable,
    FormattablePropertyTemplate,
    ItemCell,
    LabelTemplate,
    ListMapTemplate,
    ListPropertyTemplate,
    LiteralTemplate,
    PlainTextFormattedProperty,
    Template,
    format_joined,
    format_value,
    label_template,
    render_plain,
)

__all__ = [
    "DEFAULT_COLORS",
    "BooleanKind",
    "BuildContext",
    "ConcatTemplate",
    "ConditionalTemplate",
    "CoreTemplatePropertyKind",
    "ExpressionKind",
    "ExpressionNode",
    "Formattable",
    "FormattablePropertyTemplate",
    "Formatter",
    "FunctionCallNode",
    "IntegerKind",
    "ItemCell",
    "LabelTemplate",
    "LambdaNode",
    "ListMapTemplate",
    "ListPropertyTemplate",
    "Literal",
    "LiteralTemplate",
    "MethodCallNode",
    "PlainTextFormattedProperty",
    "PlainTextFormatter",
    "PropertyFn",
    "RichFormatter",
    "SignatureKind",
    "SignatureTemplate",
    "Span",
    "StringKind",
    "Template",
    "TemplateAliasesMap",
    "TemplateFunction",
    "TemplateKind",
    "TemplateLanguage",
    "TemplateParser",
    "TemplateProperty",
    "build",
    "build_core_method",
    "build_expression",
    "build_formattable_list_method",
    "build_global_function",
    "build_unformattable_list_method",
    "core_try_into_boolean",
    "core_try_into_integer",
    "core_try_into_plain_text",
    "core_try_into_template",
    "core_type_name",
    "expect_arguments",
    "expect_boolean_expression",
    "expect_integer_expression",
    "expect_no_arguments",
    "expect_plain_text_expression",
    "expect_string_literal",
    "expect_template_expression",
    "format_joined",
    "format_value",
    "identity_property",
    "label_template",
    "labeled",
    "render_plain",
    "zip_properties",
]
