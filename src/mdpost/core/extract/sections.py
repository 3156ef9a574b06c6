"""Token grouping into post sections by heading depth"""

from mdpost.core.utils.tokens import heading_level


def group_sections(tokens: list, max_nesting: int) -> list[list]:
    """Split tokens into sections; each heading <= max_nesting starts a new one."""
    sections: list[list] = [[]]

    for tok in tokens:
        level = heading_level(tok)
        if level is not None and level <= max_nesting and sections[-1]:
            sections.append([])
        sections[-1].append(tok)

    return [s for s in sections if s]


def section_heading(tokens: list) -> str | None:
    """Return the inline text of the heading that opens a section, else None."""
    if len(tokens) > 1 and heading_level(tokens[0]) is not None and tokens[1].type == 'inline':
        return tokens[1].content.strip()
    return None
