"""Highlight adapter — Pygments token stream to highlight spans.

Unstyled text comes back as bare strings; every other Pygments token type
becomes ``{"kind": "<dotted.type>", "subnodes": [text]}`` where the kind is
the lowercase dotted token type (``Name.Builtin`` → ``"name.builtin"``).
Adjacent pieces of the same kind are merged.
"""

from __future__ import annotations

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.token import Text, Token, _TokenType
from pygments.util import ClassNotFound

from stepguide.models import Node

# Languages whose Pygments lexer differs from the fence name.
# ``console`` in Pygments expects prompts; transcript commands have none.
_LEXER_ALIASES = {
    "console": "bash",
    "plaintext": "text",
}


def get_lexer(language: str) -> Lexer:
    """Return a Pygments lexer for *language*, plain text if unknown."""
    name = _LEXER_ALIASES.get(language.lower(), language.lower())
    try:
        return get_lexer_by_name(name, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False, ensurenl=False)


def span_kind(ttype: _TokenType) -> str | None:
    """Map a Pygments token type to a span kind; *None* for plain text."""
    if ttype is Token or ttype in Text:
        return None
    return ".".join(ttype).lower()


def highlight(code: str, language: str) -> list[Node]:
    """Highlight *code* as *language* and return a flat list of spans."""
    spans: list[Node] = []
    for ttype, value in get_lexer(language).get_tokens(code):
        if not value:
            continue
        kind = span_kind(ttype)
        last = spans[-1] if spans else None
        if kind is None:
            if isinstance(last, str):
                spans[-1] = last + value
            else:
                spans.append(value)
        elif isinstance(last, dict) and last["kind"] == kind:
            last["subnodes"][0] += value
        else:
            spans.append({"kind": kind, "subnodes": [value]})
    return spans
