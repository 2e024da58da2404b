"""Markdown lexer — turns guide text into a ``markdown-it-py`` syntax tree.

CommonMark with the two GitHub extensions guides rely on: pipe tables and
``~~strikethrough~~``.  A fresh parser is built per call so independent
parses share no state.
"""

from __future__ import annotations

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode


def create_parser() -> MarkdownIt:
    """Create a configured markdown-it parser."""
    md = MarkdownIt("commonmark")
    md.enable(["table", "strikethrough"])
    return md


def lex(text: str) -> SyntaxTreeNode:
    """Parse *text* as Markdown and return the root of its syntax tree.

    The root node has type ``"root"``; its children are the block-level
    tokens in document order.
    """
    tokens = create_parser().parse(text)
    return SyntaxTreeNode(tokens)
