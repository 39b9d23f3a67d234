"""Rendering one template over many commits.

A runtime failure while formatting one commit (a missing tree behind
``empty``, say) aborts only that commit. The caller gets a result for every
commit and decides what to do with the failures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from revtemplate.exceptions import TemplatePropertyError
from revtemplate.templater import PlainTextFormatter
from revtemplate.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from structlog.typing import FilteringBoundLogger

    from revtemplate.repo import Commit
    from revtemplate.templater import Formatter, Template


@dataclass(frozen=True, slots=True)
class RenderResult[F: Formatter]:
    """Outcome of rendering one commit.

    Attributes:
        commit: The rendered commit.
        formatter: The formatter holding whatever was written. On failure it
            holds the output written before the error.
        error: The failure, or None on success.
    """

    commit: Commit
    formatter: F
    error: TemplatePropertyError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def render_commits[F: Formatter](
    template: Template[Commit],
    commits: Iterable[Commit],
    *,
    formatter_factory: Callable[[], F],
    logger: FilteringBoundLogger | None = None,
) -> Iterator[RenderResult[F]]:
    """Render ``template`` once per commit, each into a fresh formatter.

    Args:
        template: A built commit template.
        commits: Commits to render, in output order.
        formatter_factory: Creates the formatter for each commit.
        logger: Optional structlog logger; failures are logged at warning
            level.

    Yields:
        One result per commit, in input order.
    """
    log = logger if logger is not None else create_null_logger()
    for commit in commits:
        formatter = formatter_factory()
        try:
            template.format(commit, formatter)
        except TemplatePropertyError as e:
            log.warning("commit_render_failed", commit_id=commit.id, error=str(e))
            yield RenderResult(commit, formatter, e)
        else:
            yield RenderResult(commit, formatter)


def render_plain_lines(
    template: Template[Commit],
    commits: Iterable[Commit],
    *,
    logger: FilteringBoundLogger | None = None,
) -> list[str | None]:
    """Render each commit to plain text; failed commits yield None."""
    return [
        result.formatter.getvalue() if result.ok else None
        for result in render_commits(
            template, commits, formatter_factory=PlainTextFormatter, logger=logger
        )
    ]
