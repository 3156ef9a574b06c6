"""Shared markdown-it token utilities"""


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def token_line(token, line_offset: int = 0) -> int | None:
    """Return the 1-based file line where a block token starts, or None without a map."""
    if not token.map:
        return None
    return line_offset + token.map[0] + 1
