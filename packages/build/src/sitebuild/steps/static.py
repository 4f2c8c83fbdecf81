from __future__ import annotations

import asyncio
from pathlib import Path

from sitebuild.core import copy_file, copy_tree, directory_stats, iter_relative_files
from sitebuild.output.paths import SourceFile, TreeKind, resolve_artifacts
from sitebuild.pipeline.context import BuildContext
from sitebuild.pipeline.events import EventType
from sitebuild.pipeline.state import PipelineState
from sitebuild.pipeline.step import step


def copy_source_tree(src_root: Path, tree: TreeKind, dest_root: Path) -> list[str]:
    """
    Copy every file of one source tree to the dist paths the resolver assigns it.
    Returns the written dist paths in sorted order.
    """
    src_root = Path(src_root)
    if not src_root.is_dir():
        return []

    # Resolve symlinked roots so relative paths stay stable.
    real_root = src_root.resolve()
    written: list[str] = []
    for rel in iter_relative_files(real_root, ignore_dirs=frozenset()):
        for artifact in resolve_artifacts(SourceFile(rel, tree)):
            copy_file(real_root / rel, Path(dest_root) / artifact.dist_path)
            written.append(artifact.dist_path)
    return sorted(written)


@step("09-copy-static", "Copy static assets", progress="Copying assets...")
async def copy_static_step(ctx: BuildContext, state: PipelineState) -> None:
    log = ctx.step_logger("09-copy-static")

    pages = await asyncio.to_thread(
        copy_source_tree, ctx.pages_dir, TreeKind.PAGES_STATIC_COPY, ctx.build_dir
    )
    log.debug("Copied pages static assets", count=len(pages))

    public = await asyncio.to_thread(
        copy_source_tree, ctx.static_dir, TreeKind.PUBLIC_STATIC, ctx.build_dir
    )
    log.debug("Copied public static assets", count=len(public))

    ctx.emit(
        EventType.STATIC_COPIED,
        step="09-copy-static",
        pages=len(pages),
        public=len(public),
    )


@step("10-copy-to-dist", "Copy compiled assets to dist")
async def copy_to_dist_step(ctx: BuildContext, state: PipelineState) -> None:
    compiled = ctx.layout.client_compiled_dir
    if compiled.is_dir():
        await asyncio.to_thread(copy_tree, compiled, ctx.build_dir)

    stats = await asyncio.to_thread(directory_stats, ctx.build_dir)
    state.outputs.build_stats = stats

    ctx.step_logger("10-copy-to-dist").debug(f"Output in: {ctx.build_dir}")
    ctx.emit(
        EventType.DIST_WRITTEN,
        step="10-copy-to-dist",
        file_count=stats.file_count,
        total_bytes=stats.total_bytes,
    )
