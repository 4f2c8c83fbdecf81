from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from sitebuild.core import StepError, atomic_write_json, step_error_from_exc

from .state import PipelineState


@dataclass(slots=True)
class BuildReport:
    build_id: str
    started_at_utc: str
    finished_at_utc: str
    status: str  # "succeeded" | "failed"
    duration_ms: int

    timings: dict[str, int] = field(default_factory=dict)
    outputs: list[str] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[StepError] = None
    file_count: Optional[int] = None
    total_bytes: Optional[int] = None
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def write_json(self, path: Path) -> None:
        atomic_write_json(Path(path), self.to_dict())


def build_report(
    *,
    build_id: str,
    started_at_utc: str,
    finished_at_utc: str,
    duration_ms: int,
    state: PipelineState | None,
    error: BaseException | None = None,
    meta: dict[str, Any] | None = None,
) -> BuildReport:
    """
    Summarize one build. `state` may be None when the build failed before the
    pipeline created one; `error` defaults to the state's recorded error.
    """
    err = error if error is not None else (state.error if state else None)
    stats = state.outputs.get("build_stats") if state is not None else None

    if state is not None:
        status = state.status.value
    else:
        status = "failed" if err is not None else "succeeded"

    return BuildReport(
        build_id=build_id,
        started_at_utc=started_at_utc,
        finished_at_utc=finished_at_utc,
        status=status,
        duration_ms=duration_ms,
        timings=dict(state.timings) if state else {},
        outputs=state.outputs.produced() if state else [],
        failed_step=state.failed_step if state else None,
        error=step_error_from_exc(err) if err is not None else None,
        file_count=stats.file_count if stats is not None else None,
        total_bytes=stats.total_bytes if stats is not None else None,
        meta=meta or {},
    )
