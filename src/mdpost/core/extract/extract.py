"""Convert a ParsedDoc into a structured ExtractedDoc"""

from pydantic import ValidationError

from mdpost.core.extract.blocks import tokens_to_blocks
from mdpost.core.extract.sections import group_sections, section_heading
from mdpost.core.models import ExtractedDoc, FrontMatter, ParsedDoc, Section


def extract_doc(parsed: ParsedDoc, max_nesting: int = 6) -> ExtractedDoc:
    """Convert a ParsedDoc into validated front matter and sections of typed blocks."""
    try:
        frontmatter = FrontMatter.model_validate(parsed.frontmatter)
    except ValidationError as e:
        raise ValueError(f"Invalid frontmatter: {e}") from e

    source_lines = parsed.markdown.splitlines(keepends=True)
    sections = [
        Section(
            position=position,
            heading=section_heading(group),
            blocks=tokens_to_blocks(group, source_lines, parsed.body_offset),
        )
        for position, group in enumerate(group_sections(parsed.tokens, max_nesting))
    ]

    return ExtractedDoc(
        slug=parsed.slug,
        path=str(parsed.path),
        hash=parsed.hash,
        markdown=parsed.markdown,
        frontmatter=frontmatter,
        sections=sections,
    )
