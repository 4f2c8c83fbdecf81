from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping

import pytest

from sitebuild.output.conflicts import ConflictReport, detect_conflicts

WriteTree = Callable[[Path, Mapping[str, str]], None]


@pytest.fixture
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    return tmp_path / "pages", tmp_path / "public"


def test_scenario_md_and_mdx_share_static_copy(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"foo.md": "# md", "foo.mdx": "# mdx"})

    report = detect_conflicts(pages, public)

    pc = report.path_conflict("foo.md")
    assert pc is not None
    assert pc.sources == ["pages/foo.md (static copy)", "pages/foo.mdx (static copy)"]
    # both also compile to the same page
    assert report.path_conflict("foo/index.html") is not None


def test_scenario_page_and_index_page_collide(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"about.mdx": "a", "about/index.mdx": "b"})

    report = detect_conflicts(pages, public)

    assert [c.dist_path for c in report.path_conflicts] == ["about/index.html"]
    assert report.path_conflicts[0].sources == [
        "pages/about.mdx (HTML)",
        "pages/about/index.mdx (HTML)",
    ]
    assert report.url_conflicts == ()


def test_scenario_url_collision_between_trees(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"foo.mdx": "x"})
    write_tree(public, {"foo.html": "<p>x</p>"})

    report = detect_conflicts(pages, public)

    assert report.path_conflicts == ()
    uc = report.url_conflict("/foo")
    assert uc is not None
    assert uc.dist_paths == ("foo.html", "foo/index.html")


def test_scenario_page_with_sibling_asset_is_clean(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"foo.mdx": "x", "foo.txt": "y"})

    report = detect_conflicts(pages, public)

    assert not report
    assert report == ConflictReport()


def test_same_asset_in_pages_and_public(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"logo.png": "a"})
    write_tree(public, {"logo.png": "b"})

    report = detect_conflicts(pages, public)
    assert report.path_conflict("logo.png").sources == ["pages/logo.png", "public/logo.png"]


def test_mdx_static_copy_collides_with_public_md(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"guide.mdx": "x"})
    write_tree(public, {"guide.md": "y"})

    report = detect_conflicts(pages, public)
    assert report.path_conflict("guide.md").sources == [
        "pages/guide.mdx (static copy)",
        "public/guide.md",
    ]


def test_code_files_never_conflict(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"app.tsx": "x", "index.mdx": "y"})
    write_tree(public, {"app.tsx": "z"})

    assert not detect_conflicts(pages, public)


def test_node_modules_are_ignored(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"node_modules/pkg/logo.png": "a", "logo.png": "b"})
    write_tree(public, {"node_modules/pkg/logo.png": "c"})

    assert not detect_conflicts(pages, public)


def test_missing_roots_report_nothing(tmp_path: Path) -> None:
    assert not detect_conflicts(tmp_path / "nope", tmp_path / "none")


def test_detection_is_idempotent_and_rescans(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"about.mdx": "a", "about/index.mdx": "b"})

    first = detect_conflicts(pages, public)
    assert detect_conflicts(pages, public) == first

    (pages / "about.mdx").unlink()
    assert not detect_conflicts(pages, public)


def test_format_lists_every_conflict(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"about.mdx": "a", "about/index.mdx": "b", "foo.mdx": "c"})
    write_tree(public, {"foo.html": "d"})

    text = detect_conflicts(pages, public).format()

    assert text.splitlines()[0] == "Build failed: Path conflicts detected"
    assert "  dist/about/index.html is produced by multiple sources:" in text
    assert "    - pages/about.mdx (HTML)" in text
    assert "    - pages/about/index.mdx (HTML)" in text
    assert "  URL /foo is served by multiple files:" in text
    assert "    - dist/foo.html" in text
    assert "    - dist/foo/index.html" in text
    assert text.endswith("Remove or rename conflicting files to continue.")


def test_to_dict(dirs, write_tree: WriteTree) -> None:
    pages, public = dirs
    write_tree(pages, {"foo.mdx": "x"})
    write_tree(public, {"foo.html": "y"})

    assert detect_conflicts(pages, public).to_dict() == {
        "path_conflicts": [],
        "url_conflicts": [{"url_path": "/foo", "dist_paths": ["foo.html", "foo/index.html"]}],
    }
