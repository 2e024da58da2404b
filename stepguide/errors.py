"""Exception types raised by stepguide."""

from __future__ import annotations

import enum


class GuideError(Exception):
    """Base exception for stepguide."""


class ConfigurationError(GuideError):
    """Raised when an explicitly requested config file cannot be loaded."""


# ---------------------------------------------------------------------------
# Parse-time failures
# ---------------------------------------------------------------------------


class ParseError(GuideError):
    """Base exception for failures while parsing a guide."""


class ShellBlockRule(str, enum.Enum):
    """The grammar rule a malformed shell transcript broke."""

    MISSING_LEADING_COMMENT = "missing-leading-comment"
    AMBIGUOUS_COMMENT_LINE = "ambiguous-comment-line"
    UNEXPECTED_EMPTY_LINE = "unexpected-empty-line"
    UNEXPECTED_UNCOMMENTED_LINE = "unexpected-uncommented-line"
    TRAILING_TOKEN_NOT_OUTPUT = "trailing-token-not-output"

    def __str__(self) -> str:
        return self.value


class MalformedShellBlock(ParseError):
    """Raised when a shell code block does not follow the transcript grammar."""

    def __init__(self, rule: ShellBlockRule, message: str) -> None:
        super().__init__(message)
        self.rule = rule


class UnsupportedToken(ParseError):
    """Raised when the transformer meets a markdown token it cannot map."""

    def __init__(self, kind: str) -> None:
        super().__init__(f'Unsupported token type "{kind}"')
        self.kind = kind


class InvalidAlertSeverity(ParseError):
    """Raised when a ``[!LABEL]`` blockquote marker names no known severity."""

    def __init__(self, label: str, text: str) -> None:
        super().__init__(
            f'Invalid alert type "{label}" in "{text}" - '
            "expected one of: CAUTION, IMPORTANT, NOTE, TIP, WARNING"
        )
        self.label = label
        self.text = text


class InvalidFrontmatter(ParseError):
    """Raised when front-matter is not a YAML mapping."""


class NestingTooDeep(ParseError):
    """Raised when a document nests deeper than the configured ``max_depth``."""

    def __init__(self, max_depth: int) -> None:
        super().__init__(f"Markdown nesting exceeds max_depth={max_depth}")
        self.max_depth = max_depth
