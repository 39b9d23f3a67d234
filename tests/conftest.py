"""Shared test fixtures for revtemplate tests."""

from collections.abc import Callable

import pytest

from revtemplate.commit import CommitTemplateLanguageExtension, build_template
from revtemplate.repo import (
    DEFAULT_WORKSPACE_ID,
    Commit,
    IdPrefixContext,
    MemoryRepo,
    WorkspaceId,
)
from revtemplate.templater import ExpressionNode, Template, render_plain

BuildFunc = Callable[..., Template[Commit]]
RenderFunc = Callable[..., str]


@pytest.fixture
def repo() -> MemoryRepo:
    """Create an empty in-memory repository (root commit only)."""
    return MemoryRepo()


@pytest.fixture
def build(repo: MemoryRepo) -> BuildFunc:
    """Return a function building a commit template against ``repo``."""

    def _build(
        node: ExpressionNode,
        *,
        extension: CommitTemplateLanguageExtension | None = None,
        workspace_id: WorkspaceId = DEFAULT_WORKSPACE_ID,
    ) -> Template[Commit]:
        return build_template(
            repo,
            workspace_id,
            IdPrefixContext(repo),
            node,
            extension=extension,
        )

    return _build


@pytest.fixture
def render(build: BuildFunc) -> RenderFunc:
    """Return a function building ``node`` and rendering it for one commit."""

    def _render(
        node: ExpressionNode,
        commit: Commit,
        *,
        extension: CommitTemplateLanguageExtension | None = None,
        workspace_id: WorkspaceId = DEFAULT_WORKSPACE_ID,
    ) -> str:
        template = build(node, extension=extension, workspace_id=workspace_id)
        return render_plain(template, commit)

    return _render
