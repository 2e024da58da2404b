"""Data models used throughout stepguide."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Union

# ---------------------------------------------------------------------------
# Shell transcript tokens
# ---------------------------------------------------------------------------


class ShellTokenKind(str, enum.Enum):
    """The three sections of a shell transcript step."""

    DESCRIPTION = "description"
    COMMAND = "command"
    OUTPUT = "output"

    def __str__(self) -> str:
        return self.value


@dataclass
class ShellToken:
    """One section of a shell transcript code block."""

    kind: ShellTokenKind
    lines: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "lines": list(self.lines)}


# ---------------------------------------------------------------------------
# Alert severity
# ---------------------------------------------------------------------------


class Severity(str, enum.Enum):
    """GitHub-style alert severities, keyed by their ``[!LABEL]`` marker."""

    CAUTION = "caution"
    IMPORTANT = "important"
    NOTE = "note"
    TIP = "tip"
    WARNING = "warning"

    @classmethod
    def from_label(cls, label: str, case_sensitive: bool = True) -> Severity | None:
        """Return the severity for a marker label, or *None* if unknown.

        With *case_sensitive* only the uppercase labels (``NOTE``) match.
        """
        if not case_sensitive:
            label = label.upper()
        return cls.__members__.get(label)

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Node tree
# ---------------------------------------------------------------------------

# A node is either bare text or a JSON-compatible dict with a ``kind`` key.
Node = Union[str, dict[str, Any]]

SHELL_LANGUAGES: frozenset[str] = frozenset(
    {"bash", "console", "fish", "shell", "sh", "zsh"}
)

DEFAULT_LANGUAGE = "plaintext"


@dataclass(frozen=True)
class ParseOptions:
    """Knobs for a single parse call."""

    shell_languages: frozenset[str] = SHELL_LANGUAGES
    default_language: str = DEFAULT_LANGUAGE
    alert_case_sensitive: bool = True
    max_depth: int | None = None  # None = unbounded
