from __future__ import annotations

import asyncio

from sitebuild.pipeline.context import BuildContext
from sitebuild.pipeline.state import PipelineState
from sitebuild.pipeline.step import step

from .toolchain import has_toolchain, require_toolchain


@step(
    "01-ensure-dependencies",
    "Ensure build dependencies installed",
    gate=has_toolchain,
)
async def ensure_dependencies_step(ctx: BuildContext, state: PipelineState) -> None:
    await require_toolchain(ctx).prepare(ctx, state.options)


@step("02-reset-directories", "Reset build and temp directories")
async def reset_directories_step(ctx: BuildContext, state: PipelineState) -> None:
    await asyncio.to_thread(ctx.reset)
