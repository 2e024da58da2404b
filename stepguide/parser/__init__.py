"""Parsing pipeline: front-matter, markdown lexing, shell transcripts, node tree."""

from stepguide.parser.frontmatter import split_frontmatter
from stepguide.parser.highlight import highlight
from stepguide.parser.md_parser import lex
from stepguide.parser.shell_block import (
    ShellBlockFailure,
    parse_shell_code_block,
    scan_shell_code_block,
)
from stepguide.parser.transformer import (
    parse_markdown_content,
    parse_raw_markdown,
    transform,
)

__all__ = [
    "ShellBlockFailure",
    "highlight",
    "lex",
    "parse_markdown_content",
    "parse_raw_markdown",
    "parse_shell_code_block",
    "scan_shell_code_block",
    "split_frontmatter",
    "transform",
]
