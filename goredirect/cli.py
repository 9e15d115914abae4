"""
cli.py

Responsibility: CLI entrypoint for goredirect.

Commands:
- `generate`: read settings from the environment (flags override), parse the
  records file, render and write every redirect page, write CNAME
- `verify`: fetch a deployed page with `?go-get=1` and check its go-import tag

This module should orchestrate behavior but keep concerns isolated:
- Settings: `config.py`
- Parsing: `sources.py`
- Rendering: `renderer.py`
- Output tree: `writer.py`
- HTTP: `verify.py`
"""

from __future__ import annotations

import argparse
import os

from goredirect import __version__
from goredirect.config import INPUT_FORMATS, LAYOUTS, ConfigError, Settings
from goredirect.generator import generate
from goredirect.logging import configure_logging, get_logger
from goredirect.renderer import RenderError
from goredirect.sources import ParseError, SourceError
from goredirect.verify import RedirectClient, VerifyError
from goredirect.writer import WriteError

logger = get_logger("cli")

HANDLED_ERRORS = (ConfigError, SourceError, ParseError, RenderError, WriteError, VerifyError)


def _describe(exc: BaseException) -> str:
    """Flatten an exception and its `__cause__` chain into one line."""
    parts: list[str] = []
    current: BaseException | None = exc
    while current is not None:
        text = str(current) or current.__class__.__name__
        if text not in parts:
            parts.append(text)
        current = current.__cause__
    return ": ".join(parts)


def generate_cmd(args: argparse.Namespace) -> int:
    settings = Settings.from_env(
        os.environ,
        input_path=args.input,
        output_dir=args.output_dir,
        input_format=args.format,
        domain=args.domain,
        repo_base_url=args.repo_base_url,
        layout=args.layout,
        write_cname=False if args.no_cname else None,
    )
    result = generate(settings)
    logger.info(
        "Generated %d redirect(s) into %s (%d skipped)",
        result.pages_written,
        settings.output_dir,
        result.records_skipped,
    )
    return 0


def verify_cmd(args: argparse.Namespace) -> int:
    client = RedirectClient(base_url=args.base_url, timeout=args.timeout)
    found = client.verify(args.import_path, expected_repo_root=args.expect_repo)
    logger.info("%s -> %s %s (prefix %s)", args.import_path, found.vcs, found.repo_root, found.prefix)
    return 0


def _add_verbose_option(parser: argparse.ArgumentParser, *, suppress_default: bool = False) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Enable debug logging",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="goredirect", description="Generate static Go vanity import redirect pages")
    _add_verbose_option(p)
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser(
        "generate",
        help="Render redirect pages from the records file",
        description="Settings come from PROJECTS_FILE_PATH, WEB_DIR_PATH, INPUT_FORMAT, DOMAIN, "
        "REPO_BASE_URL, PAGE_LAYOUT and WRITE_CNAME; flags override them.",
    )
    _add_verbose_option(g, suppress_default=True)
    g.add_argument("--input", default=None, help="Records file (env PROJECTS_FILE_PATH)")
    g.add_argument("--output-dir", default=None, help="Output root directory (env WEB_DIR_PATH)")
    g.add_argument("--format", choices=INPUT_FORMATS, default=None, help="Records file format (env INPUT_FORMAT)")
    g.add_argument("--domain", default=None, help="Vanity import domain (env DOMAIN)")
    g.add_argument("--repo-base-url", default=None, help="Repository base URL (env REPO_BASE_URL)")
    g.add_argument("--layout", choices=LAYOUTS, default=None, help="Output layout (env PAGE_LAYOUT)")
    g.add_argument("--no-cname", action="store_true", help="Do not write the CNAME file")
    g.set_defaults(func=generate_cmd)

    v = sub.add_parser("verify", help="Check the go-import tag of a deployed page")
    _add_verbose_option(v, suppress_default=True)
    v.add_argument("import_path", help="Import path to fetch, e.g. go.example.org/mylib")
    v.add_argument("--expect-repo", default=None, help="Fail unless the tag points at this repository root")
    v.add_argument("--base-url", default=None, help="Fetch from this origin instead of https://<domain>")
    v.add_argument("--timeout", type=float, default=30, help="HTTP timeout in seconds (default: 30)")
    v.set_defaults(func=verify_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=bool(args.verbose))
    try:
        return int(args.func(args))
    except HANDLED_ERRORS as e:
        logger.error("%s", _describe(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
