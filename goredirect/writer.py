"""
writer.py

Responsibility: Write rendered pages into the output tree.

- Directories are created recursively (mode 0o755) and may already exist.
- Page files are written with mode 0o644.
- A nested sub-module gets the exact bytes of its parent page, because the Go
  tool resolves it through the parent's repository root.
- Nothing is rolled back on failure; a failed run can leave a partial tree.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

DIR_MODE = 0o755
FILE_MODE = 0o644
INDEX_NAME = "index.html"
CNAME_NAME = "CNAME"


class WriteError(RuntimeError):
    pass


def ensure_directory(path: str | Path) -> Path:
    """Create `path` (and parents); existing directories are fine."""
    p = Path(path)
    try:
        p.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(f"creating directory failed: {p}") from e
    return p


def write_file(path: str | Path, content: bytes) -> Path:
    p = Path(path)
    ensure_directory(p.parent)
    try:
        p.write_bytes(content)
        os.chmod(p, FILE_MODE)
    except OSError as e:
        raise WriteError(f"writing out html failed: {p}") from e
    return p


def page_path(output_dir: str | Path, rel_path: str, *, layout: str = "directory") -> Path:
    """
    Where the page for `rel_path` lives:
    - `directory`: <out>/<rel>/index.html (an empty rel means <out>/index.html)
    - `flat`: <out>/<rel>.html
    """
    out = Path(output_dir)
    rel = _safe_relative(rel_path)
    if layout == "flat":
        if not rel.parts:
            raise WriteError("flat layout needs a non-empty page name")
        return out.joinpath(*rel.parts[:-1], f"{rel.parts[-1]}.html")
    return out.joinpath(*rel.parts, INDEX_NAME)


def write_page(
    output_dir: str | Path,
    rel_path: str,
    content: bytes,
    *,
    submodules: tuple[str, ...] = (),
    layout: str = "directory",
) -> list[Path]:
    """
    Write one rendered page plus a copy for every nested sub-module.

    Returns the written paths, parent first, then sub-modules in declaration order.
    """
    written = [write_file(page_path(output_dir, rel_path, layout=layout), content)]
    for sub in submodules:
        sub_rel = str(PurePosixPath(rel_path, sub)) if rel_path else sub
        written.append(write_file(page_path(output_dir, sub_rel, layout=layout), content))
    return written


def write_cname(output_dir: str | Path, domain: str) -> Path:
    """Write the static-hosting custom domain file."""
    return write_file(Path(output_dir) / CNAME_NAME, f"{domain}\n".encode("utf-8"))


def _safe_relative(rel_path: str) -> PurePosixPath:
    rel = PurePosixPath(rel_path.strip("/"))
    if ".." in rel.parts:
        raise WriteError(f"output path escapes the output directory: {rel_path}")
    return rel
