"""Front-matter splitter — YAML metadata at the top of a guide.

A guide may open with a YAML mapping between two ``---`` lines (the closing
line may also be ``...``)::

    ---
    title: How to use some-command
    ---
    # How to use `some-command`
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any

import yaml

from stepguide.errors import InvalidFrontmatter

_FRONTMATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?P<yaml>.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def split_frontmatter(raw: str) -> tuple[dict[str, Any], str]:
    """Split *raw* into ``(attributes, body)``.

    Without a front-matter block the attributes are empty and the body is
    *raw* unchanged.  An empty block also yields empty attributes.
    """
    match = _FRONTMATTER_RE.match(raw)
    if match is None:
        return {}, raw

    try:
        data = yaml.safe_load(match.group("yaml"))
    except yaml.YAMLError as exc:
        raise InvalidFrontmatter(f"Front-matter is not valid YAML: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidFrontmatter(
            f"Front-matter must be a mapping, not {type(data).__name__}"
        )
    return _plain(data), raw[match.end():]


def _plain(value: Any) -> Any:
    """Reduce YAML values to JSON types: dates become ISO strings, keys strings."""
    if isinstance(value, dict):
        return {_key(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_plain(v) for v in value]
    if isinstance(value, date):
        return value.isoformat()
    return value


def _key(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    if isinstance(key, date):
        return key.isoformat()
    return str(key)
