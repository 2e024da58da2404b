"""Shell transcript parser — splits a shell code block into typed tokens.

Each shell code block in a step-by-step guide must follow this format:

- The first non-empty lines are a description (each line starts ``# ``)
- The next lines are the described command (no line starts ``#``)
- The command is followed by output lines (each line starts ``# ``)
- The next description/command/output step follows after one empty line

Example::

    # List current folder
    ls
    # LICENSE         node_modules
    # package.json    README.md

parses to a ``description``, a ``command`` and an ``output`` token.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from stepguide.errors import MalformedShellBlock, ShellBlockRule
from stepguide.models import ShellToken, ShellTokenKind

_PFX = "parse_shell_code_block():"

_LINE_SPLIT = re.compile(r"\r?\n")

_MESSAGES = {
    ShellBlockRule.MISSING_LEADING_COMMENT: 'First non-empty line must be commented "# ..."',
    ShellBlockRule.AMBIGUOUS_COMMENT_LINE: 'All description and output lines with text must start "# "',
    ShellBlockRule.UNEXPECTED_EMPTY_LINE: "Unexpected empty line {position} {kind}",
    ShellBlockRule.UNEXPECTED_UNCOMMENTED_LINE: "Unexpected uncommented line in {kind}",
    ShellBlockRule.TRAILING_TOKEN_NOT_OUTPUT: "Last non-empty line must be output not {kind}",
}


@dataclass(frozen=True)
class ShellBlockFailure:
    """Why a shell code block was rejected, and where."""

    rule: ShellBlockRule
    kind: ShellTokenKind | None = None
    position: str | None = None  # "before" | "after", for empty lines
    line_number: int | None = None  # 1-indexed, after blank-line trimming

    @property
    def message(self) -> str:
        kind = self.kind.value if self.kind else None
        detail = _MESSAGES[self.rule].format(kind=kind, position=self.position)
        return f"{_PFX} {detail}"

    def to_error(self) -> MalformedShellBlock:
        return MalformedShellBlock(self.rule, self.message)


def _is_comment(line: str) -> bool:
    return line == "#" or line.startswith("# ")


def _trim_lines(code_block: str) -> list[str]:
    """Right-trim every line and drop blank lines at the start and end."""
    lines = [raw.rstrip() for raw in _LINE_SPLIT.split(code_block)]
    start = 0
    while start < len(lines) and lines[start] == "":
        start += 1
    end = len(lines)
    while end > start and lines[end - 1] == "":
        end -= 1
    return lines[start:end]


def scan_shell_code_block(code_block: str) -> list[ShellToken] | ShellBlockFailure:
    """Tokenize *code_block*, returning a failure value instead of raising."""
    lines = _trim_lines(code_block)
    if not lines:
        return []

    if not _is_comment(lines[0]):
        return ShellBlockFailure(ShellBlockRule.MISSING_LEADING_COMMENT, line_number=1)

    current = ShellToken(ShellTokenKind.DESCRIPTION)
    tokens = [current]

    for number, line in enumerate(lines, start=1):
        # Description or output line
        if _is_comment(line):
            text = line[2:].strip()
            if current.kind is ShellTokenKind.COMMAND:
                current = ShellToken(ShellTokenKind.OUTPUT, [text])
                tokens.append(current)
            else:
                current.lines.append(text)
            continue

        if line.lstrip().startswith("#"):
            return ShellBlockFailure(
                ShellBlockRule.AMBIGUOUS_COMMENT_LINE,
                kind=current.kind,
                line_number=number,
            )

        # A single empty line ends an output
        if line == "":
            if current.kind is ShellTokenKind.OUTPUT:
                current = ShellToken(ShellTokenKind.DESCRIPTION)
                tokens.append(current)
                continue
            return ShellBlockFailure(
                ShellBlockRule.UNEXPECTED_EMPTY_LINE,
                kind=current.kind,
                position="after" if current.lines else "before",
                line_number=number,
            )

        # Command line, leading whitespace kept for continuations
        if current.kind is ShellTokenKind.COMMAND:
            current.lines.append(line)
        elif current.kind is ShellTokenKind.DESCRIPTION:
            current = ShellToken(ShellTokenKind.COMMAND, [line])
            tokens.append(current)
        else:
            return ShellBlockFailure(
                ShellBlockRule.UNEXPECTED_UNCOMMENTED_LINE,
                kind=current.kind,
                line_number=number,
            )

    if current.kind is not ShellTokenKind.OUTPUT:
        return ShellBlockFailure(
            ShellBlockRule.TRAILING_TOKEN_NOT_OUTPUT,
            kind=current.kind,
            line_number=len(lines),
        )

    return tokens


def parse_shell_code_block(code_block: str) -> list[ShellToken]:
    """Parse a shell transcript code block into description/command/output tokens.

    Raises :class:`~stepguide.errors.MalformedShellBlock` if the block does
    not follow the transcript grammar.
    """
    result = scan_shell_code_block(code_block)
    if isinstance(result, ShellBlockFailure):
        raise result.to_error()
    return result
