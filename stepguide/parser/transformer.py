"""Node transformer — markdown syntax tree to the stepguide node tree.

Walks the ``markdown-it-py`` syntax tree produced by
:func:`~stepguide.parser.md_parser.lex` and builds a tree of plain,
JSON-compatible nodes.  Plain text stays a bare ``str``; everything else is a
``dict`` with a ``kind`` key::

    >>> parse_raw_markdown("# Heading\\n\\nSome  \\ntext\\nhere.\\n")
    [{'kind': 'heading', 'depth': 1, 'subnodes': ['Heading']},
     {'kind': 'paragraph', 'subnodes': ['Some', {'kind': 'br'}, 'text\\nhere.']}]

Three token kinds get special treatment:

- shell-like code blocks are split by
  :func:`~stepguide.parser.shell_block.parse_shell_code_block`, and only their
  commands are highlighted;
- blockquotes opening with a ``[!NOTE]``-style marker become ``alert`` nodes;
- HTML comments become ``comment`` nodes.
"""

from __future__ import annotations

import re
from typing import Any

from markdown_it.tree import SyntaxTreeNode

from stepguide.errors import InvalidAlertSeverity, NestingTooDeep, UnsupportedToken
from stepguide.models import Node, ParseOptions, Severity, ShellTokenKind
from stepguide.parser.frontmatter import split_frontmatter
from stepguide.parser.highlight import highlight
from stepguide.parser.md_parser import lex
from stepguide.parser.shell_block import parse_shell_code_block

_DEFAULT_OPTIONS = ParseOptions()

# ``[!LABEL]`` alone on the first line of a blockquote.
_ALERT_MARKER = re.compile(r"\[!([^\]\n]*)\][ \t]*(?:\n|$)")

_PRE_HTML = re.compile(r"<(?:pre|script|style|textarea)(?:[\s>/]|$)", re.IGNORECASE)

_ALIGN = re.compile(r"text-align:\s*(left|center|right)")


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def parse_raw_markdown(raw: str, options: ParseOptions | None = None) -> list[Node]:
    """Parse the full text of a guide, front-matter included."""
    frontmatter, body = split_frontmatter(raw)
    return parse_markdown_content(body, frontmatter, options)


def parse_markdown_content(
    body: str,
    frontmatter: dict[str, Any] | None = None,
    options: ParseOptions | None = None,
) -> list[Node]:
    """Parse a guide body into nodes, led by a ``frontmatter`` node if any."""
    options = options or _DEFAULT_OPTIONS
    nodes = _subnodes(lex(body), options, 0)
    if not frontmatter:
        return nodes
    return [{"kind": "frontmatter", "data": frontmatter}, *nodes]


def transform(
    token: SyntaxTreeNode,
    options: ParseOptions | None = None,
    depth: int = 0,
) -> Node | None:
    """Recursively transform one syntax tree node; *None* means "drop it"."""
    options = options or _DEFAULT_OPTIONS
    if options.max_depth is not None and depth > options.max_depth:
        raise NestingTooDeep(options.max_depth)

    kind = token.type
    match kind:
        case "text":
            return token.content or None
        case "softbreak":
            return "\n"
        case "hardbreak":
            return {"kind": "br"}
        case "hr":
            return {"kind": "hr"}
        case "code_inline":
            return {"kind": "codespan", "subnodes": [token.content]}
        case "fence" | "code_block":
            return _code(token, options)
        case "html_block" | "html_inline":
            return _html(token)
        case "heading":
            return {
                "kind": "heading",
                "depth": int(token.tag[1:]),
                "subnodes": _subnodes(token, options, depth),
            }
        case "blockquote":
            return _blockquote(token, options, depth)
        case "bullet_list" | "ordered_list":
            return {
                "kind": "list",
                "ordered": kind == "ordered_list",
                "subnodes": _subnodes(token, options, depth),
            }
        case "link" | "image":
            href = token.attrs.get("href" if kind == "link" else "src", "")
            title = token.attrs.get("title")
            node: dict[str, Any] = {"kind": kind, "href": href}
            if title:
                node["title"] = title
            node["subnodes"] = _subnodes(token, options, depth)
            return node
        case "table":
            return _table(token, options, depth)
        case "s":
            return {"kind": "del", "subnodes": _subnodes(token, options, depth)}
        case "em" | "strong" | "list_item" | "paragraph":
            return {"kind": kind, "subnodes": _subnodes(token, options, depth)}
        case _:
            raise UnsupportedToken(kind)


# ---------------------------------------------------------------------------
# Children
# ---------------------------------------------------------------------------


def _subnodes(token: SyntaxTreeNode, options: ParseOptions, depth: int) -> list[Node]:
    """Transform the children of *token*, flattening inline wrappers.

    ``inline`` containers and the hidden paragraphs of tight lists are
    spliced into the parent.  Adjacent strings are joined.
    """
    nodes: list[Node] = []
    for child in token.children:
        if child.type == "inline" or (child.type == "paragraph" and child.hidden):
            nodes.extend(_subnodes(child, options, depth))
            continue
        node = transform(child, options, depth + 1)
        if node is None:
            continue
        if isinstance(node, str) and nodes and isinstance(nodes[-1], str):
            nodes[-1] += node
        else:
            nodes.append(node)
    return nodes


# ---------------------------------------------------------------------------
# Code
# ---------------------------------------------------------------------------


def _code(token: SyntaxTreeNode, options: ParseOptions) -> Node:
    info = token.info.split() if token.type == "fence" else []
    language = info[0] if info else options.default_language

    text = token.content
    if text.endswith("\n"):
        text = text[:-1]

    if language not in options.shell_languages:
        return {"kind": "code", "language": language, "subnodes": highlight(text, language)}

    subnodes: list[Node] = []
    for shell_token in parse_shell_code_block(text):
        if shell_token.kind is ShellTokenKind.COMMAND:
            subnodes.append({
                "kind": shell_token.kind.value,
                "subnodes": highlight("\n".join(shell_token.lines), language),
            })
        else:
            subnodes.append(shell_token.to_dict())
    return {"kind": "code", "language": language, "subnodes": subnodes}


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def _html(token: SyntaxTreeNode) -> Node:
    text = token.content.rstrip("\n")
    trimmed = text.strip()
    if trimmed.startswith("<!--") and trimmed.endswith("-->"):
        return {"kind": "comment", "subnodes": [trimmed[4:-3].strip()]}

    if token.type == "html_block":
        return {
            "kind": "html",
            "block": True,
            "pre": bool(_PRE_HTML.match(trimmed)),
            "subnodes": [text],
        }
    return {"kind": "html", "block": False, "subnodes": [text]}


# ---------------------------------------------------------------------------
# Blockquotes and alerts
# ---------------------------------------------------------------------------


def _blockquote(token: SyntaxTreeNode, options: ParseOptions, depth: int) -> Node:
    subnodes = _subnodes(token, options, depth)
    node = {"kind": "blockquote", "subnodes": subnodes}

    first = subnodes[0] if subnodes else None
    if not isinstance(first, dict) or first["kind"] != "paragraph":
        return node
    inline = first["subnodes"]
    if not inline or not isinstance(inline[0], str) or not inline[0].startswith("[!"):
        return node
    if _escaped(token):
        return node
    marker = _ALERT_MARKER.match(inline[0])
    if marker is None:
        return node

    label = marker.group(1)
    severity = Severity.from_label(label, case_sensitive=options.alert_case_sensitive)
    if severity is None:
        raise InvalidAlertSeverity(label, inline[0])

    rest = inline[0][marker.end():]
    remaining = list(inline[1:])
    if rest:
        remaining.insert(0, rest)
    elif remaining and remaining[0] == {"kind": "br"}:
        remaining.pop(0)

    return {
        "kind": "alert",
        "severity": severity.value,
        "subnodes": [{"kind": "paragraph", "subnodes": remaining}, *subnodes[1:]],
    }


def _escaped(token: SyntaxTreeNode) -> bool:
    """True when the blockquote source opens with a backslash, as in ``\\[!NOTE]``."""
    paragraph = token.children[0]
    inline = paragraph.children[0] if paragraph.children else None
    return inline is not None and inline.content.startswith("\\")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def _cell_align(cell: SyntaxTreeNode) -> str | None:
    match = _ALIGN.search(str(cell.attrs.get("style", "")))
    return match.group(1) if match else None


def _row(row: SyntaxTreeNode, kind: str, options: ParseOptions, depth: int) -> Node:
    return {
        "kind": kind,
        "subnodes": [
            {"kind": "table_cell", "subnodes": _subnodes(cell, options, depth + 2)}
            for cell in row.children
        ],
    }


def _table(token: SyntaxTreeNode, options: ParseOptions, depth: int) -> Node:
    header: SyntaxTreeNode | None = None
    rows: list[SyntaxTreeNode] = []
    for section in token.children:
        if section.type == "thead" and section.children:
            header = section.children[0]
        elif section.type == "tbody":
            rows.extend(section.children)

    align = [_cell_align(cell) for cell in header.children] if header else []
    subnodes: list[Node] = []
    if header is not None:
        subnodes.append(_row(header, "table_header", options, depth))
    subnodes.extend(_row(row, "table_row", options, depth) for row in rows)
    return {"kind": "table", "align": align, "subnodes": subnodes}
