"""
config.py

Responsibility: Turn the process environment into an explicit, immutable `Settings`.

The environment is read exactly once (by the CLI) and the resulting `Settings`
is passed to the pipeline. Nothing below this module looks at `os.environ`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

INPUT_PATH_ENV = "PROJECTS_FILE_PATH"
OUTPUT_DIR_ENV = "WEB_DIR_PATH"
INPUT_FORMAT_ENV = "INPUT_FORMAT"
DOMAIN_ENV = "DOMAIN"
REPO_BASE_URL_ENV = "REPO_BASE_URL"
LAYOUT_ENV = "PAGE_LAYOUT"
WRITE_CNAME_ENV = "WRITE_CNAME"

INPUT_FORMATS = ("projects", "imports", "json", "yaml")
LAYOUTS = ("directory", "flat")

# Formats whose output paths are derived from the domain.
STRUCTURED_FORMATS = ("json", "yaml")


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    """Everything a generation run needs, resolved up front."""

    input_path: Path
    output_dir: Path
    input_format: str = "projects"
    domain: str | None = None
    repo_base_url: str | None = None
    layout: str = "directory"
    write_cname: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str], **overrides: Any) -> Settings:
        """
        Build settings from an environment mapping.

        Keyword overrides (e.g. from CLI flags) win over the environment when they
        are not None.
        """
        values: dict[str, Any] = {
            "input_path": _optional(environ, INPUT_PATH_ENV),
            "output_dir": _optional(environ, OUTPUT_DIR_ENV),
            "input_format": _optional(environ, INPUT_FORMAT_ENV) or "projects",
            "domain": _optional(environ, DOMAIN_ENV),
            "repo_base_url": _optional(environ, REPO_BASE_URL_ENV),
            "layout": _optional(environ, LAYOUT_ENV) or "directory",
            "write_cname": _parse_bool(WRITE_CNAME_ENV, _optional(environ, WRITE_CNAME_ENV), default=True),
        }
        for key, value in overrides.items():
            if key not in values:
                raise ConfigError(f"Unknown setting: {key}")
            if value is not None:
                values[key] = value

        if not values["input_path"]:
            raise ConfigError(f"{INPUT_PATH_ENV} environment variable is not set")
        if not values["output_dir"]:
            raise ConfigError(f"{OUTPUT_DIR_ENV} env variable not set")

        settings = cls(
            input_path=Path(values["input_path"]),
            output_dir=Path(values["output_dir"]),
            input_format=str(values["input_format"]).strip().lower(),
            domain=_normalize_domain(values["domain"]),
            repo_base_url=_normalize_base_url(values["repo_base_url"]),
            layout=str(values["layout"]).strip().lower(),
            write_cname=bool(values["write_cname"]),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.input_format not in INPUT_FORMATS:
            raise ConfigError(
                f"{INPUT_FORMAT_ENV} must be one of {', '.join(INPUT_FORMATS)} (got {self.input_format!r})"
            )
        if self.layout not in LAYOUTS:
            raise ConfigError(f"{LAYOUT_ENV} must be one of {', '.join(LAYOUTS)} (got {self.layout!r})")
        if self.input_format in (*STRUCTURED_FORMATS, "projects") and not self.domain:
            raise ConfigError(f"{DOMAIN_ENV} env variable not set (required for {self.input_format} input)")
        if self.input_format == "projects" and not self.repo_base_url:
            raise ConfigError(f"{REPO_BASE_URL_ENV} env variable not set (required for projects input)")

    @property
    def structured(self) -> bool:
        return self.input_format in STRUCTURED_FORMATS


def _optional(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_bool(key: str, value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    lowered = value.lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"{key} must be a boolean (got {value!r})")


def _normalize_domain(value: Any) -> str | None:
    if value is None:
        return None
    domain = str(value).strip().strip("/")
    return domain or None


def _normalize_base_url(value: Any) -> str | None:
    if value is None:
        return None
    base = str(value).strip().rstrip("/")
    return base or None
