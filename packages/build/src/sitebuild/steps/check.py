from __future__ import annotations

import asyncio

from sitebuild.core import ConflictError
from sitebuild.output.conflicts import detect_conflicts
from sitebuild.pipeline.context import BuildContext
from sitebuild.pipeline.events import EventType
from sitebuild.pipeline.state import PipelineState
from sitebuild.pipeline.step import step


@step("02b-check-conflicts", "Check for path conflicts")
async def check_conflicts_step(ctx: BuildContext, state: PipelineState) -> None:
    """
    Fail before any compilation when two sources would claim the same output
    path or URL. Writes nothing when the trees are clean.
    """
    report = await asyncio.to_thread(detect_conflicts, ctx.pages_dir, ctx.static_dir)

    ctx.emit(
        EventType.CONFLICTS_CHECKED,
        step="02b-check-conflicts",
        path_conflicts=len(report.path_conflicts),
        url_conflicts=len(report.url_conflicts),
    )

    if report.has_conflicts:
        raise ConflictError(report)
