"""
renderer.py

Responsibility: Deterministically render the packaged redirect template.

Rules:
- The template ships inside the package (`templates/redirect.html`) and is
  loaded once, before any record is rendered.
- Undefined variables are errors (StrictUndefined); values are HTML-escaped.
- Rendering is pure: the same `ImportMeta` always yields the same bytes.

This module intentionally does NOT know about the filesystem layout or the CLI.
"""

from __future__ import annotations

from jinja2 import Environment, PackageLoader, StrictUndefined, Template, TemplateError

from goredirect.sources import ImportMeta

TEMPLATE_NAME = "redirect.html"


class RenderError(RuntimeError):
    pass


def load_template(name: str = TEMPLATE_NAME) -> Template:
    """Compile the packaged Go import redirect template."""
    env = Environment(
        loader=PackageLoader("goredirect", "templates"),
        autoescape=True,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    try:
        return env.get_template(name)
    except TemplateError as e:
        raise RenderError(f"Failed loading redirect template: {name}") from e


def render_page(template: Template, meta: ImportMeta) -> bytes:
    try:
        out = template.render(meta=meta)
    except TemplateError as e:
        raise RenderError(f"redirect template execution failed for {meta.import_prefix}") from e
    return out.encode("utf-8")
