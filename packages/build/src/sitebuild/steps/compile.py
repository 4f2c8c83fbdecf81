from __future__ import annotations

import asyncio

from sitebuild.core import atomic_write_text
from sitebuild.pipeline.context import BuildContext
from sitebuild.pipeline.events import EventType
from sitebuild.pipeline.state import PipelineState
from sitebuild.pipeline.step import step

from .toolchain import has_toolchain, require_toolchain


def _ssg_enabled(ctx: BuildContext, state: PipelineState) -> bool:
    return state.options.ssg and ctx.toolchain is not None


def _server_bundle_ready(ctx: BuildContext, state: PipelineState) -> bool:
    return _ssg_enabled(ctx, state) and state.outputs.has("server_modules")


@step("03-catalog-pages", "Catalog pages", progress="Compiling pages...")
async def catalog_pages_step(ctx: BuildContext, state: PipelineState) -> None:
    entries = await asyncio.to_thread(ctx.get_entries)
    state.outputs.entries = entries
    ctx.emit(EventType.PAGES_CATALOGED, step="03-catalog-pages", count=len(entries))


@step("04-tailwind-css", "Build Tailwind CSS", gate=has_toolchain)
async def tailwind_css_step(ctx: BuildContext, state: PipelineState) -> None:
    state.outputs.css_filename = await require_toolchain(ctx).build_css(ctx, state.options)


@step("05-server-build", "Build server bundle", gate=_ssg_enabled)
async def server_build_step(ctx: BuildContext, state: PipelineState) -> None:
    modules = await require_toolchain(ctx).bundle_server(
        ctx, state.options, state.outputs.entries
    )
    state.outputs.server_modules = dict(modules)


@step("05b-render-server", "Render pages on the server", gate=_server_bundle_ready)
async def render_server_step(ctx: BuildContext, state: PipelineState) -> None:
    rendered = await require_toolchain(ctx).render_pages(
        ctx, state.options, state.outputs.entries, state.outputs.server_modules
    )
    state.outputs.rendered_pages = dict(rendered)


@step("06-client-build", "Build client bundles", gate=has_toolchain)
async def client_build_step(ctx: BuildContext, state: PipelineState) -> None:
    scripts = await require_toolchain(ctx).bundle_client(
        ctx, state.options, state.outputs.entries
    )
    state.outputs.client_scripts = dict(scripts)


@step(
    "07-generate-html",
    "Generate HTML files",
    gate=has_toolchain,
    progress="Generating HTML...",
)
async def generate_html_step(ctx: BuildContext, state: PipelineState) -> None:
    toolchain = require_toolchain(ctx)
    outputs = state.outputs
    rendered_pages = outputs.get("rendered_pages", {})
    client_scripts = outputs.get("client_scripts", {})
    css_filename = outputs.get("css_filename")

    written: list[str] = []
    for name, entry in sorted(outputs.entries.items()):
        html = toolchain.page_document(
            ctx,
            state.options,
            entry,
            rendered=rendered_pages.get(name),
            css_filename=css_filename,
            script=client_scripts.get(name),
        )
        target = entry.artifact_path(".html", ctx.layout.client_compiled_dir)
        await asyncio.to_thread(atomic_write_text, target, html)
        written.append(entry.artifact_rel_path(".html"))

    outputs.html_files = written
    ctx.emit(EventType.HTML_WRITTEN, step="07-generate-html", count=len(written))
