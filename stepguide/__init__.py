"""stepguide — parse step-by-step command-line guides into a typed node tree."""

from stepguide.errors import (
    ConfigurationError,
    GuideError,
    InvalidAlertSeverity,
    InvalidFrontmatter,
    MalformedShellBlock,
    NestingTooDeep,
    ParseError,
    ShellBlockRule,
    UnsupportedToken,
)
from stepguide.models import Node, ParseOptions, Severity, ShellToken, ShellTokenKind
from stepguide.parser import (
    highlight,
    lex,
    parse_markdown_content,
    parse_raw_markdown,
    parse_shell_code_block,
    scan_shell_code_block,
    split_frontmatter,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "GuideError",
    "InvalidAlertSeverity",
    "InvalidFrontmatter",
    "MalformedShellBlock",
    "NestingTooDeep",
    "Node",
    "ParseError",
    "ParseOptions",
    "Severity",
    "ShellBlockRule",
    "ShellToken",
    "ShellTokenKind",
    "UnsupportedToken",
    "__version__",
    "highlight",
    "lex",
    "parse_markdown_content",
    "parse_raw_markdown",
    "parse_shell_code_block",
    "scan_shell_code_block",
    "split_frontmatter",
]
