"""Editorial lint rules for blog posts.

Every rule is a plain function that returns a list of ``(rule, severity,
message, line)`` findings; ``lint.py`` attaches the path and orders them.
Rules never raise on malformed content.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from mdpost.core.models import Severity
from mdpost.core.utils.dates import coerce_date


Finding = tuple[str, Severity, str, Optional[int]]

FENCE_RE = re.compile(r'^[ \t]*(?P<fence>`{3,}|~{3,})(?P<info>.*)$')
LIQUID_REF_RE = re.compile(r'\{%-?\s*(?P<tag>post_url|link)\s+(?P<target>[^\s%]+)')
MD_TARGET_RE = re.compile(r'\.mdx?(?:#.*)?$', re.IGNORECASE)
URL_SCHEME_RE = re.compile(r'^[a-z][a-z0-9+.-]*:', re.IGNORECASE)


@dataclass
class Fence:
    """A fenced code block located by its opening and closing lines (1-based)."""
    char: str
    length: int
    info: str
    start: int
    end: Optional[int] = None

    @property
    def closed(self) -> bool:
        return self.end is not None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def check_required(frontmatter: dict, required_fields: Iterable[str], line: int = 1) -> list[Finding]:
    """Each required field must be present and non-blank."""
    findings = []
    for name in required_fields:
        if name not in frontmatter:
            findings.append(("frontmatter-required", Severity.error, f"missing required field '{name}'", line))
        elif _is_blank(frontmatter[name]):
            findings.append(("frontmatter-required", Severity.error, f"required field '{name}' is empty", line))
    return findings


def check_date(frontmatter: dict, line: int = 1) -> list[Finding]:
    value = frontmatter.get("date")
    if _is_blank(value) or coerce_date(value) is not None:
        return []
    return [("frontmatter-date", Severity.error, f"unrecognised date {value!r}", line)]


def check_categories(frontmatter: dict, line: int = 1) -> list[Finding]:
    """categories is a space-separated string or a list of non-empty strings."""
    value = frontmatter.get("categories")
    if value is None or isinstance(value, str):
        return []
    if isinstance(value, list) and all(isinstance(c, str) and c.strip() for c in value):
        return []
    return [("frontmatter-categories", Severity.error,
             "categories must be a string or a list of non-empty strings", line)]


def scan_fences(lines: list[str], line_offset: int = 0) -> list[Fence]:
    """Locate fenced code blocks in body lines, pairing each opener with its closer.

    An unterminated fence runs to the end of the document and is returned
    with ``end=None``.
    """
    fences: list[Fence] = []
    current: Optional[Fence] = None

    for i, line in enumerate(lines):
        m = FENCE_RE.match(line.rstrip('\r\n'))
        if not m:
            continue
        marker, info = m.group('fence'), m.group('info')
        lineno = line_offset + i + 1

        if current is None:
            if marker[0] == '`' and '`' in info:
                continue    # inline code span, not a fence
            current = Fence(char=marker[0], length=len(marker), info=info.strip(), start=lineno)
            fences.append(current)
        elif marker[0] == current.char and len(marker) >= current.length and not info.strip():
            current.end = lineno
            current = None

    return fences


def check_fences(fences: list[Fence], require_language: bool = False) -> list[Finding]:
    findings = []
    for f in fences:
        if not f.closed:
            findings.append(("fence-unclosed", Severity.error,
                             f"code fence {f.char * f.length} opened here is never closed", f.start))
        if require_language and not f.info:
            findings.append(("fence-language", Severity.warning, "code fence has no language", f.start))
    return findings


def _is_local_markdown(href: str) -> bool:
    if not href or href.startswith('#') or URL_SCHEME_RE.match(href) or href.startswith('//'):
        return False
    return bool(MD_TARGET_RE.search(href))


def check_references(
    tokens: list,
    body_lines: list[str],
    line_offset: int = 0,
    fences: Iterable[Fence] = (),
    ) -> list[Finding]:
    """Posts are self-contained: flag links to other local Markdown files and Liquid post refs.

    Liquid tags inside code fences are example content and are not flagged.
    """
    findings = []
    last_line = line_offset + len(body_lines)
    fenced = {n for f in fences for n in range(f.start, (f.end or last_line) + 1)}

    for tok in tokens:
        if tok.type != 'inline' or not tok.children:
            continue
        line = line_offset + tok.map[0] + 1 if tok.map else None
        for child in tok.children:
            if child.type not in ('link_open', 'image'):
                continue
            href = child.attrGet('href') or child.attrGet('src') or ''
            if _is_local_markdown(str(href)):
                findings.append(("local-reference", Severity.warning,
                                 f"link to another document '{href}'", line))

    for i, text in enumerate(body_lines):
        lineno = line_offset + i + 1
        if lineno in fenced:
            continue
        for m in LIQUID_REF_RE.finditer(text):
            findings.append(("local-reference", Severity.warning,
                             f"{m.group('tag')} reference to '{m.group('target')}'", lineno))

    return findings
