from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping

from sitebuild.output.entries import Entry, catalog_entries


def test_catalog_entries(tmp_path: Path, write_tree: Callable[[Path, Mapping[str, str]], None]) -> None:
    pages = tmp_path / "pages"
    write_tree(
        pages,
        {
            "index.mdx": "",
            "docs/intro.md": "",
            "docs/logo.png": "",
            "components/Button.tsx": "",
            "node_modules/x/readme.md": "",
        },
    )

    entries = catalog_entries(pages)

    assert sorted(entries) == ["docs/intro", "index"]
    intro = entries["docs/intro"]
    assert intro.rel_path == "docs/intro.md"
    assert intro.artifact_rel_path(".html") == "docs/intro/index.html"
    assert entries["index"].artifact_rel_path(".js") == "index.js"


def test_entry_artifact_path(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    src = pages / "blog" / "post.mdx"
    src.parent.mkdir(parents=True)
    src.write_text("")

    entry = Entry(abs_path=src, base_dir=pages)
    out = tmp_path / "out"
    assert entry.name == "blog/post"
    assert entry.artifact_path(".html", out) == out / "blog" / "post" / "index.html"
