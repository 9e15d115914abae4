"""
goredirect package

This package generates static Go vanity-import redirect pages.

Key responsibilities are split across modules:
- `config.py`: read the environment into an explicit `Settings` object
- `sources.py`: parse the records file (delimited lines, JSON or YAML) into `ImportMeta` records
- `renderer.py`: deterministic rendering of the packaged `redirect.html` template
- `writer.py`: output directories, page files, sub-module copies and CNAME
- `generator.py`: the pipeline (settings -> records -> render -> write)
- `verify.py`: isolated HTTP check of a deployed page (`?go-get=1`)
- `cli.py`: CLI entrypoint and orchestration
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
