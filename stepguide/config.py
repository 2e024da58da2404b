"""Configuration loader for stepguide.

Configuration is resolved in priority order: **project > user > defaults**.

1. **Project-level** — ``.stepguide.yml`` next to (or above) the guide.
   Checked into version control alongside the guides.
2. **User-level** — ``~/.stepguide/config.yml``.
3. **Built-in defaults**.

Both files share the same format::

    # .stepguide.yml  or  ~/.stepguide/config.yml
    parse:
      shell_languages: [bash, console, fish, shell, sh, zsh]
      default_language: plaintext
      alert_case_sensitive: true
      max_depth: null
    output:
      format: json        # json | outline
      indent: 2

Project-level values override user-level values.  CLI flags override both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from stepguide.errors import ConfigurationError
from stepguide.models import DEFAULT_LANGUAGE, SHELL_LANGUAGES, ParseOptions

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".stepguide.yml"
USER_CONFIG_DIR = Path.home() / ".stepguide"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yml"

OUTPUT_FORMATS = ("json", "outline")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class ParseConfig:
    """Parse sub-configuration."""

    shell_languages: list[str] = field(default_factory=lambda: sorted(SHELL_LANGUAGES))
    default_language: str = DEFAULT_LANGUAGE
    alert_case_sensitive: bool = True
    max_depth: int | None = None

    def to_options(self) -> ParseOptions:
        return ParseOptions(
            shell_languages=frozenset(self.shell_languages),
            default_language=self.default_language,
            alert_case_sensitive=self.alert_case_sensitive,
            max_depth=self.max_depth,
        )


@dataclass
class OutputConfig:
    """Output sub-configuration for the CLI."""

    format: str = "json"
    indent: int = 2


@dataclass
class StepGuideConfig:
    """Top-level configuration container (parse + output)."""

    parse: ParseConfig = field(default_factory=ParseConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Where the effective config was loaded from (None = defaults only).
    project_config_path: str | None = None
    user_config_path: str | None = None


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(
    guide_path: str | Path | None = None,
    config_path: str | Path | None = None,
) -> StepGuideConfig:
    """Load merged configuration (project > user > defaults).

    Parameters
    ----------
    guide_path:
        Guide file or directory to search for ``.stepguide.yml``.  When
        *None*, only the user-level file (and defaults) are considered.
    config_path:
        Explicit config file path.  When given, *only* this file is loaded
        and it must exist and hold a YAML mapping.
    """
    if config_path is not None:
        path = Path(config_path).expanduser()
        raw = _load_yaml(path, strict=True)
        cfg = _raw_to_config(raw, strict=True)
        cfg.project_config_path = str(config_path)
        return cfg

    user_raw = _load_yaml(USER_CONFIG_PATH)
    user_source = str(USER_CONFIG_PATH) if user_raw else None

    project_raw: dict | None = None
    project_source: str | None = None
    if guide_path is not None:
        project_path = _find_project_config(guide_path)
        if project_path is not None:
            project_raw = _load_yaml(project_path)
            project_source = str(project_path)

    cfg = _raw_to_config(_merge_raw(project_raw, user_raw))
    cfg.project_config_path = project_source
    cfg.user_config_path = user_source
    return cfg


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _find_project_config(guide_path: str | Path) -> Path | None:
    """Search for ``.stepguide.yml`` beside *guide_path* and in its ancestors."""
    p = Path(guide_path).resolve()
    if not p.is_dir():
        p = p.parent
    candidates = [p / CONFIG_FILENAME]
    if not (p / ".git").exists():
        for parent in p.parents:
            candidates.append(parent / CONFIG_FILENAME)
            if (parent / ".git").exists():
                break
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path, strict: bool = False) -> dict | None:
    """Load a YAML mapping; missing/invalid files give *None* unless *strict*."""
    path = path.expanduser()
    if not path.is_file():
        if strict:
            raise ConfigurationError(f"Config file not found: {path}")
        return None
    try:
        raw = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        if strict:
            raise ConfigurationError(f"Cannot load config file {path}: {exc}") from exc
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return None
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        if strict:
            raise ConfigurationError(f"Config file {path} must hold a mapping")
        logger.warning("Ignoring config file %s: not a mapping", path)
        return None
    return raw


def _merge_raw(project: dict | None, user: dict | None) -> dict:
    """Merge project and user raw dicts (project wins, per section)."""
    base: dict = {}
    if user:
        for key, section in user.items():
            base[key] = dict(section) if isinstance(section, dict) else section
    if project:
        for key in ("parse", "output"):
            section = project.get(key)
            if isinstance(section, dict):
                if not isinstance(base.get(key), dict):
                    base[key] = {}
                base[key].update(section)
    return base


def _raw_to_config(raw: dict | None, strict: bool = False) -> StepGuideConfig:
    """Convert a raw YAML dict to a ``StepGuideConfig``.

    Wrongly typed values fall back to their default with a warning, or raise
    ``ConfigurationError`` when *strict*.
    """
    if not raw:
        return StepGuideConfig()

    parse_raw = raw.get("parse", {})
    if not isinstance(parse_raw, dict):
        parse_raw = {}

    output_raw = raw.get("output", {})
    if not isinstance(output_raw, dict):
        output_raw = {}

    languages = _as_list(parse_raw.get("shell_languages"))
    max_depth = parse_raw.get("max_depth")
    if max_depth is not None:
        max_depth = _as_int(max_depth, "parse.max_depth", None, strict)

    parse_cfg = ParseConfig(
        shell_languages=languages or sorted(SHELL_LANGUAGES),
        default_language=str(parse_raw.get("default_language") or DEFAULT_LANGUAGE),
        alert_case_sensitive=_as_bool(
            parse_raw.get("alert_case_sensitive", True), "parse.alert_case_sensitive", True, strict,
        ),
        max_depth=max_depth,
    )

    fmt = str(output_raw.get("format", "json")).lower()
    if fmt not in OUTPUT_FORMATS:
        logger.warning("Unknown output format %r, using json", fmt)
        fmt = "json"
    indent = _as_int(output_raw.get("indent", 2), "output.indent", 2, strict)
    output_cfg = OutputConfig(format=fmt, indent=indent)

    return StepGuideConfig(parse=parse_cfg, output=output_cfg)


def _as_list(val: object) -> list[str]:
    """Coerce a value to a list of strings."""
    if isinstance(val, list):
        return [str(v) for v in val]
    if isinstance(val, str):
        return [val]
    return []


_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


def _invalid(key: str, val: object, default: object, strict: bool) -> object:
    if strict:
        raise ConfigurationError(f"Invalid value for {key}: {val!r}")
    logger.warning("Invalid value for %s: %r, using %r", key, val, default)
    return default


def _as_int(val: object, key: str, default: int | None, strict: bool) -> int | None:
    """Coerce a value to an int; booleans and non-numeric strings are invalid."""
    if isinstance(val, bool):
        return _invalid(key, val, default, strict)
    try:
        return int(val)
    except (TypeError, ValueError):
        return _invalid(key, val, default, strict)


def _as_bool(val: object, key: str, default: bool, strict: bool) -> bool:
    if isinstance(val, bool):
        return val
    if isinstance(val, str) and val.strip().lower() in _TRUE | _FALSE:
        return val.strip().lower() in _TRUE
    return _invalid(key, val, default, strict)
