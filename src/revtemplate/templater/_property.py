"""Lazy template properties.

A property is a cold computation from a context value (usually a commit) to
an output. Nothing runs until ``extract`` is called by the final render pass.
Composing properties wraps one inside another; each ``extract`` call pulls the
inner property exactly once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


class TemplateProperty[C, O](ABC):
    """Deferred computation from a context of type ``C`` to a value ``O``."""

    __slots__ = ()

    @abstractmethod
    def extract(self, context: C) -> O:
        """Evaluate the property for one context."""

    def map[R](self, fn: Callable[[O], R]) -> TemplateProperty[C, R]:
        """Return a property applying ``fn`` to this property's output."""
        return TemplateFunction(self, fn)


@dataclass(frozen=True, slots=True)
class PropertyFn[C, O](TemplateProperty[C, O]):
    """Property backed by a plain function of the context."""

    fn: Callable[[C], O]

    def extract(self, context: C) -> O:
        return self.fn(context)


@dataclass(frozen=True, slots=True)
class Literal[O](TemplateProperty[Any, O]):
    """Property that ignores the context and returns a constant."""

    value: O

    def extract(self, context: object) -> O:  # noqa: ARG002
        return self.value


@dataclass(frozen=True, slots=True)
class TemplateFunction[C, I, O](TemplateProperty[C, O]):
    """Property composed of an inner property and a function over its output."""

    property: TemplateProperty[C, I]
    fn: Callable[[I], O]

    def extract(self, context: C) -> O:
        return self.fn(self.property.extract(context))


@dataclass(frozen=True, slots=True)
class ZippedProperty[C](TemplateProperty[C, tuple[Any, ...]]):
    """Property extracting several properties into a tuple.

    ``None`` entries stand for omitted optional arguments and extract to
    ``None``.
    """

    properties: tuple[TemplateProperty[C, Any] | None, ...]

    def extract(self, context: C) -> tuple[Any, ...]:
        return tuple(
            None if prop is None else prop.extract(context)
            for prop in self.properties
        )


def identity_property[C]() -> TemplateProperty[C, C]:
    """Return a property that yields the context itself."""
    return PropertyFn(lambda context: context)


def zip_properties[C](
    *properties: TemplateProperty[C, Any] | None,
) -> TemplateProperty[C, tuple[Any, ...]]:
    """Combine properties so one extract pulls each of them once."""
    return ZippedProperty(tuple(properties))
