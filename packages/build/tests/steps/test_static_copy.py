from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Mapping

from sitebuild.core import BuildOptions, iter_relative_files
from sitebuild.output.paths import SourceFile, TreeKind, resolve_artifacts
from sitebuild.pipeline import BuildContext, PipelineState
from sitebuild.steps import copy_static_step, copy_to_dist_step
from sitebuild.steps.static import copy_source_tree

PAGES = {
    "index.mdx": "# home",
    "guide.md": "# guide",
    "docs/intro.mdx": "# intro",
    "docs/diagram.svg": "<svg/>",
    "components/Button.tsx": "export {}",
    "lib/util.MJS": "export {}",
    "node_modules/dep/readme.md": "dep",
}
PUBLIC = {
    "robots.txt": "User-agent: *",
    "js/app.js": "console.log(1)",
    "node_modules/lib/a.js": "export {}",
}


def _expected(files: Mapping[str, str], tree: TreeKind) -> set[str]:
    return {
        a.dist_path
        for rel in files
        for a in resolve_artifacts(SourceFile(rel, tree))
    }


def test_copy_source_tree_writes_exactly_the_resolved_paths(
    tmp_path: Path, write_tree: Callable[[Path, Mapping[str, str]], None]
) -> None:
    pages = tmp_path / "pages"
    write_tree(pages, PAGES)
    out = tmp_path / "out"

    written = copy_source_tree(pages, TreeKind.PAGES_STATIC_COPY, out)

    assert set(written) == _expected(PAGES, TreeKind.PAGES_STATIC_COPY)
    assert set(iter_relative_files(out, ignore_dirs=frozenset())) == set(written)
    assert (out / "docs" / "intro.md").read_text() == "# intro"
    assert not (out / "components").exists()


def test_copy_source_tree_missing_root(tmp_path: Path) -> None:
    assert copy_source_tree(tmp_path / "missing", TreeKind.PUBLIC_STATIC, tmp_path) == []


def test_copy_static_and_dist_steps(
    make_ctx: Callable[..., BuildContext],
    write_tree: Callable[[Path, Mapping[str, str]], None],
) -> None:
    ctx = make_ctx()
    write_tree(ctx.pages_dir, PAGES)
    write_tree(ctx.static_dir, PUBLIC)
    write_tree(ctx.layout.client_compiled_dir, {"index.html": "<html></html>"})
    state = PipelineState(options=BuildOptions())

    asyncio.run(copy_static_step.execute(ctx, state))
    asyncio.run(copy_to_dist_step.execute(ctx, state))

    expected = (
        _expected(PAGES, TreeKind.PAGES_STATIC_COPY)
        | _expected(PUBLIC, TreeKind.PUBLIC_STATIC)
        | {"index.html"}
    )
    assert set(iter_relative_files(ctx.build_dir, ignore_dirs=frozenset())) == expected
    assert state.outputs.build_stats.file_count == len(expected)


def test_copy_static_keeps_node_modules_files(
    make_ctx: Callable[..., BuildContext],
    write_tree: Callable[[Path, Mapping[str, str]], None],
) -> None:
    ctx = make_ctx()
    write_tree(ctx.pages_dir, {"index.md": "# home", "node_modules/dep/readme.md": "dep"})
    write_tree(ctx.static_dir, {"node_modules/lib/a.js": "export {}"})
    state = PipelineState(options=BuildOptions())

    asyncio.run(copy_static_step.execute(ctx, state))

    assert (ctx.build_dir / "node_modules" / "lib" / "a.js").read_text() == "export {}"
    assert (ctx.build_dir / "node_modules" / "dep" / "readme.md").read_text() == "dep"
