"""
generator.py

Responsibility: The generation pipeline, executed once per run.

    Settings -> load_records -> (render_page -> write_page) per record -> write_cname

Every record is parsed and given an output path before the first byte is
written, so malformed input never creates output. After that, the first error
aborts the run.

Structured (json/yaml) inputs derive each output path by stripping the
configured domain from the import prefix. Records whose import prefix does not
contain the domain at all are skipped with a warning, not written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from goredirect.config import Settings
from goredirect.logging import get_logger
from goredirect.renderer import load_template, render_page
from goredirect.sources import ImportMeta, load_records
from goredirect.writer import page_path, write_cname, write_page

logger = get_logger("generator")


@dataclass(frozen=True)
class GenerateResult:
    pages_written: int
    records_skipped: int
    files: list[Path] = field(default_factory=list)


def relative_path(meta: ImportMeta, settings: Settings) -> str | None:
    """
    Output path of a record relative to the output root, or None when the
    record is outside the configured domain and must be skipped.
    """
    if not settings.structured:
        return meta.name

    domain = settings.domain or ""
    if domain not in meta.import_prefix:
        return None
    return meta.import_prefix.removeprefix(domain).strip("/")


def generate(settings: Settings) -> GenerateResult:
    template = load_template()
    records = load_records(settings)
    logger.debug("Loaded %d record(s) from %s", len(records), settings.input_path)

    # Resolve every output path first so an unwritable record fails before any write.
    planned: list[tuple[ImportMeta, str]] = []
    skipped = 0
    for meta in records:
        rel = relative_path(meta, settings)
        if rel is None:
            logger.warning("Skipping %s: import prefix is outside domain %s", meta.import_prefix, settings.domain)
            skipped += 1
            continue
        page_path(settings.output_dir, rel, layout=settings.layout)
        planned.append((meta, rel))

    files: list[Path] = []
    written = 0
    for meta, rel in planned:
        content = render_page(template, meta)
        paths = write_page(
            settings.output_dir,
            rel,
            content,
            submodules=meta.submodules,
            layout=settings.layout,
        )
        files.extend(paths)
        written += 1
        logger.info("%s redirect is created", meta.import_prefix)
        for sub_path in paths[1:]:
            logger.debug("Nested module page written: %s", sub_path)

    if settings.write_cname and settings.domain:
        files.append(write_cname(settings.output_dir, settings.domain))
        logger.debug("CNAME written for %s", settings.domain)

    return GenerateResult(pages_written=written, records_skipped=skipped, files=files)
