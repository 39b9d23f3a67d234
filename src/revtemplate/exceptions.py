"""revtemplate exceptions."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from revtemplate.templater._nodes import FunctionCallNode, Span


class RevTemplateError(Exception):
    """Base exception for revtemplate errors."""


# =============================================================================
# Template Exceptions
# =============================================================================


class TemplateError(RevTemplateError):
    """Base exception for template errors."""


class TemplateParseErrorKind(StrEnum):
    """Categories of template build errors."""

    NO_SUCH_KEYWORD = "no_such_keyword"
    NO_SUCH_METHOD = "no_such_method"
    NO_SUCH_FUNCTION = "no_such_function"
    INVALID_ARGUMENTS = "invalid_arguments"
    TYPE_MISMATCH = "type_mismatch"


class TemplateParseError(TemplateError):
    """Raised when a template expression cannot be built.

    Build errors are never recovered from internally. They abort building the
    whole template and carry the source span of the offending expression.

    Attributes:
        kind: The error category.
        span: Source span into the original template text.
        name: The offending keyword, method, or function name (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        kind: TemplateParseErrorKind,
        span: Span,
        name: str | None = None,
    ) -> None:
        """Initialize with error message and source location."""
        super().__init__(message)
        self.kind: TemplateParseErrorKind = kind
        self.span: Span = span
        self.name: str | None = name


class NoSuchKeywordError(TemplateParseError):
    """Raised when a bare identifier is not a known keyword."""

    def __init__(self, name: str, span: Span) -> None:
        """Initialize with the unknown keyword and its span."""
        super().__init__(
            f'Keyword "{name}" doesn\'t exist',
            kind=TemplateParseErrorKind.NO_SUCH_KEYWORD,
            span=span,
            name=name,
        )


class NoSuchMethodError(TemplateParseError):
    """Raised when a method is not defined for the receiver's type.

    Attributes:
        type_name: Name of the receiver type (e.g. "Commit").
    """

    def __init__(self, type_name: str, function: FunctionCallNode) -> None:
        """Initialize with the receiver type and the offending call."""
        super().__init__(
            f'Method "{function.name}" doesn\'t exist for type "{type_name}"',
            kind=TemplateParseErrorKind.NO_SUCH_METHOD,
            span=function.name_span,
            name=function.name,
        )
        self.type_name: str = type_name


class NoSuchFunctionError(TemplateParseError):
    """Raised when a global or extension function is unknown."""

    def __init__(self, function: FunctionCallNode) -> None:
        """Initialize with the offending call."""
        super().__init__(
            f'Function "{function.name}" doesn\'t exist',
            kind=TemplateParseErrorKind.NO_SUCH_FUNCTION,
            span=function.name_span,
            name=function.name,
        )


class InvalidArgumentsError(TemplateParseError):
    """Raised when a call's arguments don't have the expected shape.

    Attributes:
        expectation: Human-readable description of what was expected.
    """

    def __init__(self, function: FunctionCallNode, expectation: str) -> None:
        """Initialize with the offending call and the expectation text."""
        super().__init__(
            f"Invalid arguments: {expectation}",
            kind=TemplateParseErrorKind.INVALID_ARGUMENTS,
            span=function.args_span,
            name=function.name,
        )
        self.expectation: str = expectation


class TypeMismatchError(TemplateParseError):
    """Raised when an expression can't be converted to the required type.

    Attributes:
        expected: Name of the type the surrounding expression required.
    """

    def __init__(self, expected: str, span: Span) -> None:
        """Initialize with the required type and the expression span."""
        super().__init__(
            f'Expected expression of type "{expected}"',
            kind=TemplateParseErrorKind.TYPE_MISMATCH,
            span=span,
        )
        self.expected: str = expected


class TemplatePropertyError(TemplateError):
    """Raised when a property can't be evaluated for one context.

    These are render-time failures. They abort rendering of the current
    commit only.
    """

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        """Initialize with error message and optional underlying cause."""
        super().__init__(message)
        self.cause: Exception | None = cause


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(RevTemplateError):
    """Base exception for repository store errors."""


class CommitNotFoundError(RepositoryError, KeyError):
    """Raised when a commit id is not present in the store.

    Attributes:
        commit_id: The id that could not be found.
    """

    def __init__(self, commit_id: str) -> None:
        """Initialize with the missing commit id."""
        super().__init__(f"Commit not found: {commit_id}")
        self.commit_id: str = commit_id


class TreeNotFoundError(RepositoryError, KeyError):
    """Raised when a tree id is not present in the store.

    Attributes:
        tree_id: The id that could not be found.
    """

    def __init__(self, tree_id: str) -> None:
        """Initialize with the missing tree id."""
        super().__init__(f"Tree not found: {tree_id}")
        self.tree_id: str = tree_id


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(RevTemplateError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column
