"""End-to-end tests for goredirect.generator."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from goredirect.config import Settings
from goredirect.generator import generate, relative_path
from goredirect.sources import ParseError, build_meta
from goredirect.writer import WriteError


def _settings(input_path: Path, out_dir: Path, **kwargs) -> Settings:
    values = {
        "input_path": input_path,
        "output_dir": out_dir,
        "input_format": "imports",
        "domain": "go.example.org",
        "repo_base_url": "https://github.com/acme",
    }
    values.update(kwargs)
    return Settings(**values)


def test_imports_file_end_to_end(write_input, out_dir: Path) -> None:
    path = write_input("mylib; go.example.org/mylib\n", "imports.txt")

    result = generate(_settings(path, out_dir))

    page = out_dir / "mylib" / "index.html"
    html = page.read_text(encoding="utf-8")
    assert '<meta name="go-import" content="go.example.org/mylib git https://github.com/acme/mylib">' in html
    assert result.pages_written == 1
    assert result.records_skipped == 0
    assert (out_dir / "CNAME").read_text(encoding="utf-8") == "go.example.org\n"
    assert result.files == [page, out_dir / "CNAME"]


def test_projects_file_end_to_end(write_input, out_dir: Path) -> None:
    path = write_input("alpha\nbeta beta-go\n")

    generate(_settings(path, out_dir, input_format="projects", write_cname=False))

    alpha = (out_dir / "alpha" / "index.html").read_text(encoding="utf-8")
    beta = (out_dir / "beta" / "index.html").read_text(encoding="utf-8")
    assert 'content="go.example.org/alpha git https://github.com/acme/alpha"' in alpha
    assert 'content="go.example.org/beta git https://github.com/acme/beta-go"' in beta
    assert not (out_dir / "CNAME").exists()


def test_flat_layout_writes_named_pages(write_input, out_dir: Path) -> None:
    path = write_input("alpha\n")
    generate(_settings(path, out_dir, input_format="projects", layout="flat"))
    assert (out_dir / "alpha.html").is_file()
    assert not (out_dir / "alpha").exists()


def test_json_submodules_are_byte_identical(write_input, out_dir: Path) -> None:
    records = [
        {
            "import_prefix": "go.example.org/pkg",
            "repo_root": "https://github.com/acme/pkg",
            "submodules": ["sub"],
        }
    ]
    path = write_input(json.dumps(records), "imports.json")

    generate(_settings(path, out_dir, input_format="json"))

    parent = out_dir / "pkg" / "index.html"
    nested = out_dir / "pkg" / "sub" / "index.html"
    assert parent.read_bytes() == nested.read_bytes()
    assert 'name="go-source"' in parent.read_text(encoding="utf-8")


def test_json_records_outside_domain_are_skipped(write_input, out_dir: Path, caplog) -> None:
    records = [
        {"import_prefix": "go.example.org/pkg", "repo_root": "https://github.com/acme/pkg"},
        {"import_prefix": "other.dev/tool", "repo_root": "https://github.com/acme/tool"},
    ]
    path = write_input(json.dumps(records), "imports.json")

    with caplog.at_level(logging.WARNING, logger="goredirect.generator"):
        result = generate(_settings(path, out_dir, input_format="json", write_cname=False))

    assert result.pages_written == 1
    assert result.records_skipped == 1
    assert not (out_dir / "tool").exists()
    assert any("other.dev/tool" in message for message in caplog.messages)


def test_domain_root_record_writes_top_level_index(write_input, out_dir: Path) -> None:
    records = [{"import_prefix": "go.example.org", "repo_root": "https://github.com/acme/root"}]
    path = write_input(json.dumps(records), "imports.json")

    generate(_settings(path, out_dir, input_format="json"))

    assert (out_dir / "index.html").is_file()


def test_rerun_is_idempotent(write_input, out_dir: Path) -> None:
    path = write_input("mylib; go.example.org/mylib\n", "imports.txt")
    settings = _settings(path, out_dir)

    generate(settings)
    first = (out_dir / "mylib" / "index.html").read_bytes()
    generate(settings)
    assert (out_dir / "mylib" / "index.html").read_bytes() == first


def test_malformed_json_creates_no_output(write_input, out_dir: Path) -> None:
    path = write_input("[{not json", "imports.json")

    with pytest.raises(ParseError, match="malformed JSON"):
        generate(_settings(path, out_dir, input_format="json"))

    assert not out_dir.exists()


def test_bad_line_aborts_before_any_write(write_input, out_dir: Path) -> None:
    path = write_input("good; go.example.org/good\nbad; x; y\n", "imports.txt")

    with pytest.raises(ParseError, match="line 2"):
        generate(_settings(path, out_dir))

    assert not out_dir.exists()


def test_relative_path_strips_domain_for_structured_input(tmp_path: Path) -> None:
    settings = _settings(tmp_path / "in.json", tmp_path / "out", input_format="yaml")
    meta = build_meta(import_prefix="go.example.org/a/b", repo_root="https://github.com/acme/ab")
    assert relative_path(meta, settings) == "a/b"


def test_relative_path_uses_name_for_line_input(tmp_path: Path) -> None:
    settings = _settings(tmp_path / "in.txt", tmp_path / "out")
    meta = build_meta(import_prefix="go.example.org/mylib", repo_root="https://github.com/acme/x", name="mylib")
    assert relative_path(meta, settings) == "mylib"


def test_flat_layout_domain_root_record_fails_before_any_write(write_input, out_dir: Path) -> None:
    records = [
        {"import_prefix": "go.example.org/pkg", "repo_root": "https://github.com/acme/pkg"},
        {"import_prefix": "go.example.org", "repo_root": "https://github.com/acme/root"},
    ]
    path = write_input(json.dumps(records), "imports.json")

    with pytest.raises(WriteError, match="flat layout"):
        generate(_settings(path, out_dir, input_format="json", layout="flat"))

    assert not out_dir.exists()
