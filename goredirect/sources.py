"""
sources.py

Responsibility: Load the records file and parse it into deterministic, typed records.

Accepted formats (chosen by configuration, never auto-detected):
- `projects`: one record per line, `name [repo]`, fields split on runs of whitespace
- `imports`: one record per line, `name[; prefix [vcs [repo-root]]]`, fields split on `;`
- `json`: one JSON array of objects (vcs, import_prefix, repo_root, homepage,
  directory_pattern, file_pattern, submodules)
- `yaml`: the same schema as `json`, as a YAML sequence

Every format resolves to `ImportMeta`. Input order is preserved and the first
problem aborts loading; bad records are never skipped.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import urlsplit

import yaml

from goredirect.config import ConfigError, Settings

DEFAULT_VCS = "git"

_WHITESPACE_RE = re.compile(r"\s+")

_META_KEYS = {
    "vcs",
    "import_prefix",
    "repo_root",
    "homepage",
    "directory_pattern",
    "file_pattern",
    "submodules",
}


class SourceError(RuntimeError):
    """Raised when the records file cannot be read."""


class ParseError(ValueError):
    """Raised when the records file content is malformed."""


@dataclass(frozen=True)
class Entry:
    """One delimited line: a name and an optional secondary value ("" when absent)."""

    name: str
    value: str = ""


@dataclass(frozen=True)
class ImportMeta:
    """Everything needed to render one redirect page."""

    import_prefix: str
    repo_root: str
    vcs: str = DEFAULT_VCS
    homepage: str = ""
    directory_pattern: str = ""
    file_pattern: str = ""
    submodules: tuple[str, ...] = ()
    name: str = ""

    @property
    def go_import(self) -> str:
        return f"{self.import_prefix} {self.vcs} {self.repo_root}"

    @property
    def go_source(self) -> str | None:
        if not (self.directory_pattern or self.file_pattern):
            return None
        return " ".join(
            (
                self.import_prefix,
                self.homepage or "_",
                self.directory_pattern or "_",
                self.file_pattern or "_",
            )
        )


def build_meta(
    *,
    import_prefix: str,
    repo_root: str,
    vcs: str | None = None,
    homepage: str | None = None,
    directory_pattern: str | None = None,
    file_pattern: str | None = None,
    submodules: Any = None,
    name: str | None = None,
) -> ImportMeta:
    """
    Validate raw fields and apply defaults:
    - vcs defaults to `git`
    - homepage defaults to the repository root
    - on GitHub hosts, unset directory/file patterns use the tree/master layout
    """
    prefix = (import_prefix or "").strip().strip("/")
    if not prefix:
        raise ParseError("import prefix must not be empty")
    _validate_token(prefix, field="import_prefix")

    root = (repo_root or "").strip()
    _validate_url(root, field="repo_root")

    home = (homepage or "").strip() or root
    dir_pattern = (directory_pattern or "").strip()
    file_pat = (file_pattern or "").strip()
    vcs_name = (vcs or "").strip() or DEFAULT_VCS
    for field, value in (
        ("vcs", vcs_name),
        ("homepage", home),
        ("directory_pattern", dir_pattern),
        ("file_pattern", file_pat),
    ):
        _validate_token(value, field=field)

    if "github.com" in urlsplit(root).netloc:
        base = root.rstrip("/").removesuffix(".git")
        if not dir_pattern:
            dir_pattern = f"{base}/tree/master{{/dir}}"
        if not file_pat:
            file_pat = f"{dir_pattern}/{{file}}#L{{line}}"

    return ImportMeta(
        import_prefix=prefix,
        repo_root=root,
        vcs=vcs_name,
        homepage=home,
        directory_pattern=dir_pattern,
        file_pattern=file_pat,
        submodules=_parse_submodules(submodules),
        name=(name or "").strip() or prefix,
    )


def parse_lines(text: str, *, delimiter: str | None = None) -> list[Entry]:
    """
    Parse delimited lines into entries.

    `delimiter=None` splits on runs of whitespace; any other value is a literal
    separator. Blank lines are skipped; every other line is a record.
    """
    entries: list[Entry] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        if delimiter is None:
            parts = _WHITESPACE_RE.split(line)
        else:
            parts = [p.strip() for p in line.split(delimiter)]

        if len(parts) > 2:
            raise ParseError(f"line {lineno}: value is not interpretable: {line}")

        name = parts[0]
        if not name:
            raise ParseError(f"line {lineno}: name must not be empty: {line}")
        entries.append(Entry(name=name, value=parts[1] if len(parts) > 1 else ""))
    return entries


def projects_to_metas(entries: list[Entry], settings: Settings) -> list[ImportMeta]:
    """`name [repo]` entries -> `<domain>/<name>` served from `<base>/<repo or name>`."""
    domain = _require(settings.domain, "DOMAIN")
    base = _require(settings.repo_base_url, "REPO_BASE_URL")
    metas: list[ImportMeta] = []
    for entry in entries:
        try:
            metas.append(
                build_meta(
                    import_prefix=f"{domain}/{entry.name}",
                    repo_root=f"{base}/{entry.value or entry.name}",
                    name=entry.name,
                )
            )
        except ParseError as e:
            raise ParseError(f"record {entry.name!r}: {e}") from e
    return metas


def imports_to_metas(entries: list[Entry], settings: Settings) -> list[ImportMeta]:
    """`name; prefix [vcs [repo-root]]` entries -> metas, filling gaps from settings."""
    metas: list[ImportMeta] = []
    for entry in entries:
        definition = _WHITESPACE_RE.split(entry.value) if entry.value else []
        if len(definition) > 3:
            raise ParseError(f"import definition is not interpretable: {entry.value}")

        prefix = definition[0] if definition else f"{_require(settings.domain, 'DOMAIN')}/{entry.name}"
        vcs = definition[1] if len(definition) > 1 else None
        if len(definition) > 2:
            repo_root = definition[2]
        else:
            repo_root = f"{_require(settings.repo_base_url, 'REPO_BASE_URL')}/{entry.name}"

        try:
            metas.append(build_meta(import_prefix=prefix, repo_root=repo_root, vcs=vcs, name=entry.name))
        except ParseError as e:
            raise ParseError(f"record {entry.name!r}: {e}") from e
    return metas


def parse_structured(data: Any) -> list[ImportMeta]:
    """Validate a decoded JSON/YAML document (a list of mappings) into metas."""
    if not isinstance(data, list):
        raise ParseError("structured input must be an array of objects at the top level")

    metas: list[ImportMeta] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ParseError(f"item {index}: must be an object/mapping")
        unknown = sorted(set(map(str, item)) - _META_KEYS)
        if unknown:
            raise ParseError(f"item {index}: unknown keys: {', '.join(unknown)}")
        try:
            metas.append(
                build_meta(
                    import_prefix=_as_str(item.get("import_prefix")),
                    repo_root=_as_str(item.get("repo_root")),
                    vcs=_as_str(item.get("vcs")),
                    homepage=_as_str(item.get("homepage")),
                    directory_pattern=_as_str(item.get("directory_pattern")),
                    file_pattern=_as_str(item.get("file_pattern")),
                    submodules=item.get("submodules"),
                )
            )
        except ParseError as e:
            raise ParseError(f"item {index}: {e}") from e
    return metas


def parse_json(text: str) -> list[ImportMeta]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"malformed JSON: {e}") from e
    return parse_structured(data)


def parse_yaml(text: str) -> list[ImportMeta]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(f"malformed YAML: {e}") from e
    return parse_structured([] if data is None else data)


def read_source(path: str | Path) -> str:
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SourceError(f"failed to open projects file: {p}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"failed to read file: {p}") from e


def load_records(settings: Settings) -> list[ImportMeta]:
    """Read `settings.input_path` and parse it according to `settings.input_format`."""
    text = read_source(settings.input_path)
    fmt = settings.input_format
    if fmt == "projects":
        return projects_to_metas(parse_lines(text), settings)
    if fmt == "imports":
        return imports_to_metas(parse_lines(text, delimiter=";"), settings)
    if fmt == "json":
        return parse_json(text)
    if fmt == "yaml":
        return parse_yaml(text)
    raise ConfigError(f"Unsupported input format: {fmt}")


def _require(value: str | None, env_key: str) -> str:
    if not value:
        raise ConfigError(f"{env_key} env variable not set")
    return value


def _validate_url(value: str, *, field: str) -> None:
    if not value:
        raise ParseError(f"{field} must not be empty")
    try:
        parts = urlsplit(value)
    except ValueError as e:
        raise ParseError(f"{field} is not a valid URL: {value}") from e
    if not parts.scheme or not parts.netloc or any(c.isspace() for c in value):
        raise ParseError(f"{field} is not a valid URL: {value}")


def _validate_token(value: str, *, field: str) -> None:
    # Meta tag content is space separated, so no field may contain whitespace.
    if any(c.isspace() for c in value):
        raise ParseError(f"{field} must not contain whitespace: {value!r}")


def _parse_submodules(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ParseError("submodules must be a list of relative paths")

    out: list[str] = []
    for raw in value:
        if not isinstance(raw, str):
            raise ParseError(f"submodule path must be a string (got {raw!r})")
        path = raw.strip().strip("/")
        parts = PurePosixPath(path).parts
        if not parts or ".." in parts:
            raise ParseError(f"submodule path must be a relative path below the package: {raw!r}")
        out.append(path)
    return tuple(out)


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    raise ParseError(f"expected a string value (got {value!r})")
