"""Token-to-Block conversion using source line positions"""

from mdpost.crud.models import BlockEnum
from mdpost.core.models import Block
from mdpost.core.utils.tokens import heading_level, token_line


BLOCK_TYPE_MAP: dict[str, BlockEnum] = {
    'heading_open':      BlockEnum.heading,
    'bullet_list_open':  BlockEnum.list,
    'ordered_list_open': BlockEnum.list,
    'fence':             BlockEnum.code,
    'code_block':        BlockEnum.code,
    'table_open':        BlockEnum.table,
    'html_block':        BlockEnum.html,
    'blockquote_open':   BlockEnum.quote,
}


def _para_type(tokens: list, i: int) -> BlockEnum:
    """Return figure if paragraph at i contains only an image inline, else paragraph."""
    for tok in tokens[i + 1:]:
        if tok.type == 'paragraph_close':
            break
        if tok.type == 'inline' and tok.children:
            non_ws = [c for c in tok.children if c.type not in ('softbreak', 'hardbreak')]
            if len(non_ws) == 1 and non_ws[0].type == 'image':
                return BlockEnum.figure
    return BlockEnum.paragraph


def _source_slice(token, source_lines: list[str]) -> str:
    """Extract raw source for a block via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return ''.join(source_lines[start:end]).rstrip()
    return token.content.rstrip()


def _fence_language(token) -> str | None:
    if token.type != 'fence':
        return None
    info = token.info.strip()
    return info.split()[0].lower() if info else None


def tokens_to_blocks(tokens: list, source_lines: list[str], line_offset: int = 0) -> list[Block]:
    """Convert a section's token list to typed Blocks.

    Only top-level tokens become blocks; paragraphs nested in lists and quotes
    stay inside their parent's source slice.
    """
    blocks: list[Block] = []

    for i, tok in enumerate(tokens):
        if tok.level != 0:
            continue
        if tok.type == 'paragraph_open':
            block_type = _para_type(tokens, i)
        else:
            block_type = BLOCK_TYPE_MAP.get(tok.type)
            if block_type is None:
                continue

        blocks.append(Block(
            type=block_type,
            content=_source_slice(tok, source_lines),
            level=heading_level(tok),
            language=_fence_language(tok),
            line=token_line(tok, line_offset),
        ))

    return blocks
