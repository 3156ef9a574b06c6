"""Run the lint rules over a post and collect Issues"""

import logging
from pathlib import Path
from typing import Sequence

from mdpost.core.lint.rules import (
    check_categories, check_date, check_fences, check_references, check_required, scan_fences,
)
from mdpost.core.models import Issue, Severity
from mdpost.core.parse import has_unclosed_frontmatter, load_frontmatter, make_parser, split_frontmatter


logger = logging.getLogger(__name__)

DEFAULT_REQUIRED = ("layout", "title", "date")


def lint_text(
    text: str,
    path: str,
    required_fields: Sequence[str] = DEFAULT_REQUIRED,
    require_fence_language: bool = False,
    parser_config: str = 'gfm-like',
    ) -> list[Issue]:
    """Lint post text; returns issues ordered by line (file-level issues first)."""
    findings = []
    yaml_text, body, offset = split_frontmatter(text)

    if yaml_text is None:
        if has_unclosed_frontmatter(text):
            findings.append(("frontmatter-unclosed", Severity.error, "front matter is never closed with '---'", 1))
            # the whole file is an unusable header; nothing else to check
            return _issues(path, findings)
        findings.append(("frontmatter-missing", Severity.error, "no front matter block", None))
    else:
        try:
            fm = load_frontmatter(yaml_text)
        except ValueError as e:
            findings.append(("frontmatter-yaml", Severity.error, str(e), 1))
        else:
            findings += check_required(fm, required_fields)
            findings += check_date(fm)
            findings += check_categories(fm)

    body_lines = body.splitlines(keepends=True)
    fences = scan_fences(body_lines, offset)
    findings += check_fences(fences, require_fence_language)
    tokens = make_parser(parser_config).parse(body)
    findings += check_references(tokens, body_lines, offset, fences)

    return _issues(path, findings)


def _issues(path: str, findings: list) -> list[Issue]:
    issues = [
        Issue(path=path, rule=rule, severity=severity, message=message, line=line)
        for rule, severity, message, line in findings
    ]
    issues.sort(key=lambda i: i.line or 0)
    logger.debug("%s: %d issue(s)", path, len(issues))
    return issues


def lint_file(path: Path, **options) -> list[Issue]:
    """Lint a post file. Options are passed through to lint_text.

    A file that is not valid UTF-8 yields a single `encoding` issue.
    """
    try:
        text = path.read_text(encoding='utf-8-sig')
    except UnicodeDecodeError as e:
        line = e.object[:e.start].count(b'\n') + 1
        message = f"not valid UTF-8: {e.reason} at byte {e.start}"
        return _issues(str(path), [("encoding", Severity.error, message, line)])
    return lint_text(text, str(path), **options)


def count_by_severity(issues: Sequence[Issue]) -> dict[str, int]:
    counts = {s.value: 0 for s in Severity}
    for issue in issues:
        counts[issue.severity.value] += 1
    return counts
