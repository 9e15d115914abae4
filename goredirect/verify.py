"""
verify.py

Responsibility: Isolate all HTTP interaction with a deployed redirect site.

This module must be the only place that:
- Builds `?go-get=1` URLs for an import path
- Sends HTTP requests
- Extracts `go-import` meta tags from the response

Generation never imports this module; it is only used by `goredirect verify`.
"""

from __future__ import annotations

from dataclasses import dataclass
from html.parser import HTMLParser

import requests


class VerifyError(RuntimeError):
    pass


@dataclass(frozen=True)
class GoImport:
    prefix: str
    vcs: str
    repo_root: str


class _MetaParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.imports: list[GoImport] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "meta":
            return
        values = dict(attrs)
        if values.get("name") != "go-import":
            return
        fields = (values.get("content") or "").split()
        if len(fields) == 3:
            self.imports.append(GoImport(prefix=fields[0], vcs=fields[1], repo_root=fields[2]))


def parse_go_imports(html: str) -> list[GoImport]:
    """Return every well-formed `go-import` tag in document order."""
    parser = _MetaParser()
    parser.feed(html)
    parser.close()
    return parser.imports


class RedirectClient:
    def __init__(self, base_url: str | None = None, timeout: float = 30) -> None:
        # base_url replaces the `https://` origin derived from the import path (useful for
        # checking a local preview of the output directory).
        self._base_url = base_url.rstrip("/") if base_url else None
        self._timeout = timeout

    def _url(self, import_path: str) -> str:
        path = import_path.strip("/")
        if self._base_url:
            _host, _, rest = path.partition("/")
            return f"{self._base_url}/{rest}".rstrip("/") + "/?go-get=1"
        return f"https://{path}?go-get=1"

    def fetch_imports(self, import_path: str) -> list[GoImport]:
        url = self._url(import_path)
        try:
            r = requests.request("GET", url, headers={"User-Agent": "goredirect"}, timeout=self._timeout)
        except requests.RequestException as e:
            raise VerifyError(f"GET {url} failed") from e
        if r.status_code >= 400:
            raise VerifyError(f"GET {url} returned HTTP {r.status_code}")
        return parse_go_imports(r.text)

    def verify(self, import_path: str, *, expected_repo_root: str | None = None) -> GoImport:
        """
        Fetch the page for `import_path` and return the go-import tag that covers it.

        The tag with the longest prefix matching the path wins, mirroring how the
        go tool picks among several tags.
        """
        path = import_path.strip("/")
        candidates = [
            imp for imp in self.fetch_imports(path) if path == imp.prefix or path.startswith(imp.prefix + "/")
        ]
        if not candidates:
            raise VerifyError(f"no go-import meta tag covers {path}")
        best = max(candidates, key=lambda imp: len(imp.prefix))
        if expected_repo_root and best.repo_root.rstrip("/") != expected_repo_root.rstrip("/"):
            raise VerifyError(f"{path} resolves to {best.repo_root}, expected {expected_repo_root}")
        return best
