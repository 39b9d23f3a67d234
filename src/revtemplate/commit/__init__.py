"""Commit template language.

This package binds the generic template engine to repository commits: the
property kinds a commit template can produce, the keyword and method
resolver, the reverse index from commits to ref names, commit and change id
rendering, and the extension hook for host-defined keywords and functions.

Example:
    >>> from revtemplate.commit import build_template, render_plain_lines
    >>> node = ExpressionNode.method(ExpressionNode.identifier("commit_id"), "short")
    >>> template = build_template(repo, DEFAULT_WORKSPACE_ID, IdPrefixContext(repo), node)
    >>> render_plain_lines(template, [commit])
    ['0123456789ab']
"""

from revtemplate.commit._extension import (
    CommitFunction,
    CommitPropertyOpt,
    CommitTemplateLanguageExtension,
    FunctionExtension,
)
from revtemplate.commit._ids import (
    DEFAULT_SHORT_LEN,
    CommitOrChangeId,
    IdSpace,
    ShortestIdPrefix,
    from_reverse_hex,
    to_reverse_hex,
)
from revtemplate.commit._kinds import (
    CommitKind,
    CommitListKind,
    CommitOrChangeIdKind,
    CommitTemplatePropertyKind,
    CoreKind,
    RefNameKind,
    RefNameListKind,
    ShortestIdPrefixKind,
    try_into_boolean,
    try_into_integer,
    try_into_plain_text,
    try_into_template,
    type_name,
)
from revtemplate.commit._language import (
    CommitTemplateLanguage,
    build_template,
    complete_newline,
    is_empty,
    load_parents,
    parse,
)
from revtemplate.commit._ref_names import (
    CommitKeywordCache,
    RefName,
    RefNamesIndex,
    build_branches_index,
    build_ref_names_index,
    extract_git_head,
    extract_working_copies,
)
from revtemplate.commit._render import RenderResult, render_commits, render_plain_lines

__all__ = [
    "DEFAULT_SHORT_LEN",
    "CommitFunction",
    "CommitKeywordCache",
    "CommitKind",
    "CommitListKind",
    "CommitOrChangeId",
    "CommitOrChangeIdKind",
    "CommitPropertyOpt",
    "CommitTemplateLanguage",
    "CommitTemplateLanguageExtension",
    "CommitTemplatePropertyKind",
    "CoreKind",
    "FunctionExtension",
    "IdSpace",
    "RefName",
    "RefNameKind",
    "RefNameListKind",
    "RefNamesIndex",
    "RenderResult",
    "ShortestIdPrefix",
    "ShortestIdPrefixKind",
    "build_branches_index",
    "build_ref_names_index",
    "build_template",
    "complete_newline",
    "extract_git_head",
    "extract_working_copies",
    "from_reverse_hex",
    "is_empty",
    "load_parents",
    "parse",
    "render_commits",
    "render_plain_lines",
    "to_reverse_hex",
    "try_into_boolean",
    "try_into_integer",
    "try_into_plain_text",
    "try_into_template",
    "type_name",
]
