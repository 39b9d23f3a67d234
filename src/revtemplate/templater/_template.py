"""Formattable templates.

A template writes output for one context to a formatter. Values that don't
depend on a context (ref names, ids) implement ``Formattable`` instead and are
lifted into templates through ``FormattablePropertyTemplate``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from revtemplate.exceptions import TemplatePropertyError

from ._formatter import PlainTextFormatter
from ._property import Literal, TemplateProperty

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ._formatter import Formatter


@runtime_checkable
class Formattable(Protocol):
    """A context-free value that knows how to write itself."""

    def format(self, formatter: Formatter) -> None:
        """Write this value to the formatter."""
        ...


class Template[C](ABC):
    """Something that can be formatted for a context of type ``C``."""

    __slots__ = ()

    @abstractmethod
    def format(self, context: C, formatter: Formatter) -> None:
        """Write output for ``context``."""


def format_value(value: object, formatter: Formatter) -> None:
    """Write a property output: formattables format themselves, the rest is text."""
    if isinstance(value, bool):
        formatter.write("true" if value else "false")
    elif isinstance(value, str | int):
        formatter.write(str(value))
    elif isinstance(value, Formattable):
        value.format(formatter)
    else:
        msg = f"Value of type {type(value).__name__} is not formattable"
        raise TemplatePropertyError(msg)


def format_joined[C](
    context: C,
    formatter: Formatter,
    items: Iterable[object],
    separator: Template[C],
) -> None:
    """Format each item, writing ``separator`` between consecutive items."""
    for index, item in enumerate(items):
        if index:
            separator.format(context, formatter)
        format_value(item, formatter)


@dataclass(frozen=True, slots=True)
class LiteralTemplate(Template[Any]):
    text: str

    def format(self, context: object, formatter: Formatter) -> None:  # noqa: ARG002
        formatter.write(self.text)


@dataclass(frozen=True, slots=True)
class ConcatTemplate[C](Template[C]):
    templates: tuple[Template[C], ...]

    def format(self, context: C, formatter: Formatter) -> None:
        for template in self.templates:
            template.format(context, formatter)


@dataclass(frozen=True, slots=True)
class LabelTemplate[C](Template[C]):
    """Formats ``content`` inside the labels produced by ``labels``."""

    content: Template[C]
    labels: TemplateProperty[C, Sequence[str]]

    def format(self, context: C, formatter: Formatter) -> None:
        names = list(self.labels.extract(context))
        for name in names:
            formatter.push_label(name)
        try:
            self.content.format(context, formatter)
        finally:
            for _ in names:
                formatter.pop_label()


@dataclass(frozen=True, slots=True)
class ConditionalTemplate[C](Template[C]):
    condition: TemplateProperty[C, bool]
    true_template: Template[C]
    false_template: Template[C] | None = None

    def format(self, context: C, formatter: Formatter) -> None:
        if self.condition.extract(context):
            self.true_template.format(context, formatter)
        elif self.false_template is not None:
            self.false_template.format(context, formatter)


@dataclass(frozen=True, slots=True)
class FormattablePropertyTemplate[C](Template[C]):
    """Formats whatever value a property extracts."""

    property: TemplateProperty[C, object]

    def format(self, context: C, formatter: Formatter) -> None:
        format_value(self.property.extract(context), formatter)


@dataclass(frozen=True, slots=True)
class ListPropertyTemplate[C](Template[C]):
    """Formats a list-valued property, items joined by a separator."""

    property: TemplateProperty[C, Sequence[object]]
    separator: Template[C] = field(default_factory=lambda: LiteralTemplate(" "))

    def format(self, context: C, formatter: Formatter) -> None:
        format_joined(context, formatter, self.property.extract(context), self.separator)


class ItemCell:
    """Holds the list item currently being formatted by a ``map`` lambda."""

    __slots__ = ("_value",)

    _EMPTY = object()

    def __init__(self) -> None:
        self._value: object = self._EMPTY

    def get(self) -> object:
        if self._value is self._EMPTY:
            msg = "Lambda parameter used outside of its list"
            raise TemplatePropertyError(msg)
        return self._value

    def set(self, value: object) -> None:
        self._value = value

    def clear(self) -> None:
        self._value = self._EMPTY


@dataclass(frozen=True, slots=True)
class ListMapTemplate[C](Template[C]):
    """Formats ``body`` once per list item, bound through ``cell``."""

    property: TemplateProperty[C, Sequence[object]]
    cell: ItemCell
    body: Template[C]
    separator: Template[C] = field(default_factory=lambda: LiteralTemplate(" "))

    def format(self, context: C, formatter: Formatter) -> None:
        items = self.property.extract(context)
        try:
            for index, item in enumerate(items):
                if index:
                    self.separator.format(context, formatter)
                self.cell.set(item)
                self.body.format(context, formatter)
        finally:
            self.cell.clear()


@dataclass(frozen=True, slots=True)
class PlainTextFormattedProperty[C](TemplateProperty[C, str]):
    """Property rendering a template to text, dropping all labels."""

    template: Template[C]

    def extract(self, context: C) -> str:
        formatter = PlainTextFormatter()
        self.template.format(context, formatter)
        return formatter.getvalue()


def label_template[C](label: str, content: Template[C]) -> Template[C]:
    """Wrap ``content`` in a single static label."""
    return LabelTemplate(content, Literal((label,)))


def render_plain[C](template: Template[C], context: C) -> str:
    """Render ``template`` for ``context`` as plain text."""
    return PlainTextFormattedProperty(template).extract(context)

