"""Property kinds of the commit template language.

``CommitTemplatePropertyKind`` is a closed union: one arm per kind of value a
commit template expression can produce. The conversion functions match on
every arm, so adding an arm without deciding how it converts fails type
checking at the ``assert_never`` fallthrough.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, assert_never

from revtemplate.templater import (
    FormattablePropertyTemplate,
    ListPropertyTemplate,
    LiteralTemplate,
    PlainTextFormattedProperty,
    core_try_into_boolean,
    core_try_into_integer,
    core_try_into_plain_text,
    core_try_into_template,
    core_type_name,
)

if TYPE_CHECKING:
    from revtemplate.commit._ids import CommitOrChangeId, ShortestIdPrefix
    from revtemplate.commit._ref_names import RefName
    from revtemplate.repo import Commit
    from revtemplate.templater import CoreTemplatePropertyKind, Template, TemplateProperty


@dataclass(frozen=True, slots=True)
class CoreKind:
    """A primitive value handled by the generic engine."""

    kind: CoreTemplatePropertyKind


@dataclass(frozen=True, slots=True)
class CommitKind:
    property: TemplateProperty[Commit, Commit]


@dataclass(frozen=True, slots=True)
class CommitListKind:
    property: TemplateProperty[Commit, list[Commit]]


@dataclass(frozen=True, slots=True)
class RefNameKind:
    property: TemplateProperty[Commit, RefName]


@dataclass(frozen=True, slots=True)
class RefNameListKind:
    property: TemplateProperty[Commit, list[RefName]]


@dataclass(frozen=True, slots=True)
class CommitOrChangeIdKind:
    property: TemplateProperty[Commit, CommitOrChangeId]


@dataclass(frozen=True, slots=True)
class ShortestIdPrefixKind:
    property: TemplateProperty[Commit, ShortestIdPrefix]


type CommitTemplatePropertyKind = (
    CoreKind
    | CommitKind
    | CommitListKind
    | RefNameKind
    | RefNameListKind
    | CommitOrChangeIdKind
    | ShortestIdPrefixKind
)


def type_name(kind: CommitTemplatePropertyKind) -> str:
    """Name of the kind's type as shown in error messages."""
    match kind:
        case CoreKind(kind=core):
            return core_type_name(core)
        case CommitKind():
            return "Commit"
        case CommitListKind():
            return "List<Commit>"
        case RefNameKind():
            return "RefName"
        case RefNameListKind():
            return "List<RefName>"
        case CommitOrChangeIdKind():
            return "CommitOrChangeId"
        case ShortestIdPrefixKind():
            return "ShortestIdPrefix"
        case _:
            assert_never(kind)


def try_into_boolean(kind: CommitTemplatePropertyKind) -> TemplateProperty[Commit, bool] | None:
    """Lists are true when non-empty; other commit kinds have no truth value."""
    match kind:
        case CoreKind(kind=core):
            return core_try_into_boolean(core)
        case CommitListKind(property=prop):
            return prop.map(bool)
        case RefNameListKind(property=prop):
            return prop.map(bool)
        case CommitKind() | RefNameKind() | CommitOrChangeIdKind() | ShortestIdPrefixKind():
            return None
        case _:
            assert_never(kind)


def try_into_integer(kind: CommitTemplatePropertyKind) -> TemplateProperty[Commit, int] | None:
    match kind:
        case CoreKind(kind=core):
            return core_try_into_integer(core)
        case (
            CommitKind()
            | CommitListKind()
            | RefNameKind()
            | RefNameListKind()
            | CommitOrChangeIdKind()
            | ShortestIdPrefixKind()
        ):
            return None
        case _:
            assert_never(kind)


def try_into_plain_text(kind: CommitTemplatePropertyKind) -> TemplateProperty[Commit, str] | None:
    match kind:
        case CoreKind(kind=core):
            return core_try_into_plain_text(core)
        case (
            CommitKind()
            | CommitListKind()
            | RefNameKind()
            | RefNameListKind()
            | CommitOrChangeIdKind()
            | ShortestIdPrefixKind()
        ):
            template = try_into_template(kind)
            if template is None:
                return None
            return PlainTextFormattedProperty(template)
        case _:
            assert_never(kind)


def try_into_template(kind: CommitTemplatePropertyKind) -> Template[Commit] | None:
    """Everything but commits and commit lists can be formatted."""
    match kind:
        case CoreKind(kind=core):
            return core_try_into_template(core)
        case CommitKind() | CommitListKind():
            return None
        case RefNameKind(property=prop):
            return FormattablePropertyTemplate(prop)
        case RefNameListKind(property=prop):
            return ListPropertyTemplate(prop, LiteralTemplate(" "))
        case CommitOrChangeIdKind(property=prop):
            return FormattablePropertyTemplate(prop)
        case ShortestIdPrefixKind(property=prop):
            return FormattablePropertyTemplate(prop)
        case _:
            assert_never(kind)
