"""CLI — click-based command-line interface."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from stepguide.config import OUTPUT_FORMATS, StepGuideConfig, load_config
from stepguide.errors import GuideError
from stepguide.models import Node
from stepguide.parser import parse_raw_markdown
from stepguide.report import find_title, render_document, render_outline

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("stepguide")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _require_markdown(path: str) -> Path:
    guide = Path(path)
    if guide.suffix != ".md":
        click.echo(
            "Error: The provided file must be a markdown file with a .md extension.",
            err=True,
        )
        sys.exit(1)
    return guide


def _parse_guide(guide: Path, cfg: StepGuideConfig) -> list[Node]:
    logger.debug(
        "Parsing %s (config: %s)",
        guide,
        cfg.project_config_path or cfg.user_config_path or "defaults",
    )
    return parse_raw_markdown(guide.read_text(encoding="utf-8"), cfg.parse.to_options())


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Log debug messages to stderr.")
def main(verbose: bool) -> None:
    """stepguide — parse step-by-step command-line guides into a node tree."""
    _configure_logging(verbose)


# ───────────────────────────────────────────────────────────────────
# parse
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", default=None,
              type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
              help="Output format (default: json, or the configured format).")
@click.option("--out", "out_path", default=None, type=click.Path(dir_okay=False),
              help="Write the output to a file instead of stdout.")
@click.option("--config", "config_path", default=None,
              type=click.Path(exists=True, dir_okay=False),
              help="Explicit config file (skips .stepguide.yml lookup).")
def parse(path: str, fmt: str | None, out_path: str | None, config_path: str | None) -> None:
    """Parse a guide and print its node tree."""
    guide = _require_markdown(path)
    try:
        cfg = load_config(guide_path=guide, config_path=config_path)
        nodes = _parse_guide(guide, cfg)
    except GuideError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    effective_fmt = (fmt or cfg.output.format).lower()
    if effective_fmt == "outline":
        output = render_outline(nodes)
    else:
        output = render_document(str(guide), nodes, indent=cfg.output.indent)

    if out_path:
        Path(out_path).write_text(output + "\n", encoding="utf-8")
        click.echo(f"Node tree written to {out_path}", err=True)
    else:
        click.echo(output)


# ───────────────────────────────────────────────────────────────────
# check
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("paths", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", default=None,
              type=click.Path(exists=True, dir_okay=False),
              help="Explicit config file (skips .stepguide.yml lookup).")
def check(paths: tuple[str, ...], config_path: str | None) -> None:
    """Validate one or more guides; exit 1 if any fails to parse."""
    failed = 0
    for path in paths:
        guide = Path(path)
        if guide.suffix != ".md":
            click.echo(f"{path}: skipped (not a .md file)")
            continue
        try:
            _parse_guide(guide, load_config(guide_path=guide, config_path=config_path))
        except GuideError as exc:
            failed += 1
            click.echo(f"{path}: {type(exc).__name__}: {exc}")
        else:
            click.echo(f"{path}: ok")

    click.echo("-" * 60)
    click.echo(f"Checked {len(paths)} file(s), {failed} failed")
    sys.exit(1 if failed else 0)


# ───────────────────────────────────────────────────────────────────
# title
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def title(path: str) -> None:
    """Print the title of a guide (its first level-1 heading)."""
    guide = _require_markdown(path)
    try:
        nodes = _parse_guide(guide, load_config(guide_path=guide))
    except GuideError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(find_title(nodes))
