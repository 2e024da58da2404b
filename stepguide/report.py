"""Report rendering — JSON and outline views of a node tree."""

from __future__ import annotations

import json
from collections import Counter
from typing import Any

import stepguide
from stepguide.models import Node, Severity

_PREVIEW_WIDTH = 48

UNTITLED = "Untitled Step-by-Step Guide"


# ---------------------------------------------------------------------------
# JSON output
# ---------------------------------------------------------------------------


def render_json(nodes: list[Node], indent: int | None = 2) -> str:
    """Serialise *nodes* as JSON.

    Front-matter values YAML decodes to non-JSON scalars (dates) are
    written with ``str()``.
    """
    return json.dumps(nodes, indent=indent, ensure_ascii=False, default=str)


def render_document(path: str, nodes: list[Node], indent: int | None = 2) -> str:
    """Wrap *nodes* with tool metadata and a summary."""
    doc: dict[str, Any] = {
        "tool": "stepguide",
        "version": stepguide.__version__,
        "path": path,
        "summary": summarize(nodes),
        "nodes": nodes,
    }
    return json.dumps(doc, indent=indent, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def _walk(nodes: list[Node]):
    for node in nodes:
        if isinstance(node, str):
            continue
        yield node
        # Code subnodes are highlight spans or shell tokens, not document nodes
        subnodes = node.get("subnodes")
        if node["kind"] != "code" and isinstance(subnodes, list):
            yield from _walk(subnodes)


def summarize(nodes: list[Node]) -> dict[str, Any]:
    """Count node kinds, shell steps and alerts per severity."""
    kinds: Counter[str] = Counter()
    steps = 0
    alerts = {str(sev): 0 for sev in Severity}
    for node in _walk(nodes):
        kind = node["kind"]
        if kind == "code" and isinstance(node.get("subnodes"), list):
            steps += sum(
                1 for sub in node["subnodes"]
                if isinstance(sub, dict) and sub.get("kind") == "command"
            )
        if kind == "alert":
            alerts[node["severity"]] += 1
        kinds[kind] += 1
    return {
        "kinds": dict(sorted(kinds.items())),
        "shell_steps": steps,
        "alerts": alerts,
    }


# ---------------------------------------------------------------------------
# Outline output
# ---------------------------------------------------------------------------


def _preview(text: str) -> str:
    text = text.replace("\n", "\\n")
    if len(text) > _PREVIEW_WIDTH:
        return text[: _PREVIEW_WIDTH - 3] + "..."
    return text


def _label(node: dict[str, Any]) -> str:
    kind = node["kind"]
    if kind == "heading":
        return f"heading h{node['depth']}"
    if kind == "alert":
        return f"alert [{node['severity']}]"
    if kind == "list":
        return "list (ordered)" if node["ordered"] else "list"
    if kind == "code":
        return f"code ({node['language']})"
    if kind in ("link", "image"):
        return f"{kind} → {node['href']}"
    if kind == "table":
        cols = ", ".join(a or "-" for a in node["align"])
        return f"table [{cols}]"
    if kind == "frontmatter":
        return f"frontmatter ({', '.join(str(k) for k in node['data'])})"
    if kind in ("description", "output"):
        return f"{kind}: {_preview(' / '.join(node['lines']))}"
    return kind


def _outline(nodes: list[Node], depth: int, lines: list[str]) -> None:
    pad = "  " * depth
    for node in nodes:
        if isinstance(node, str):
            lines.append(f'{pad}"{_preview(node)}"')
            continue
        lines.append(f"{pad}• {_label(node)}")
        subnodes = node.get("subnodes")
        if node["kind"] == "command":
            text = "".join(_flatten(subnodes or []))
            lines.append(f"{pad}  $ {_preview(text)}")
        elif isinstance(subnodes, list):
            _outline(subnodes, depth + 1, lines)


def _flatten(nodes: list[Node]):
    for node in nodes:
        if isinstance(node, str):
            yield node
        else:
            yield from _flatten(node.get("subnodes", []))


def find_title(nodes: list[Node]) -> str:
    """Return the text of the first level-1 heading."""
    for node in nodes:
        if isinstance(node, dict) and node["kind"] == "heading" and node["depth"] == 1:
            return "".join(_flatten(node["subnodes"])).strip() or UNTITLED
    return UNTITLED


def render_outline(nodes: list[Node]) -> str:
    """Produce a human-friendly indented outline of the node tree."""
    lines: list[str] = []
    _outline(nodes, 0, lines)
    summary = summarize(nodes)
    lines.append("-" * 60)
    alerts = ", ".join(f"{count} {sev}" for sev, count in summary["alerts"].items() if count)
    lines.append(
        f"Nodes: {sum(summary['kinds'].values())}, "
        f"shell steps: {summary['shell_steps']}, "
        f"alerts: {alerts or 'none'}"
    )
    return "\n".join(lines)
