from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, Protocol, Union

from sitebuild.core import format_duration_ms, monotonic_ms

from .context import BuildContext
from .events import EventType
from .state import PipelineState

StepFn = Callable[[BuildContext, PipelineState], Awaitable[None]]
GateFn = Callable[[BuildContext, PipelineState], bool]

_STEP_NUMBER_RE = re.compile(r"^(\d+[a-z]?)-")


class BuildStep(Protocol):
    name: str
    description: str

    def should_run(self, ctx: BuildContext, state: PipelineState) -> bool: ...

    async def execute(self, ctx: BuildContext, state: PipelineState) -> None: ...


@dataclass(frozen=True, slots=True)
class FunctionStep:
    """
    Adapter that turns a plain coroutine function into a BuildStep.

    `gate` is the optional should-run predicate (run unconditionally when absent);
    `progress` is an optional user-facing line logged before the step starts.
    """

    name: str
    description: str
    fn: StepFn
    gate: GateFn | None = None
    progress: str | None = None

    def should_run(self, ctx: BuildContext, state: PipelineState) -> bool:
        if self.gate is None:
            return True
        return bool(self.gate(ctx, state))

    async def execute(self, ctx: BuildContext, state: PipelineState) -> None:
        await self.fn(ctx, state)


@dataclass(frozen=True, slots=True)
class StepGroup:
    """
    Steps that run concurrently. Members must write disjoint build outputs.
    """

    steps: tuple[BuildStep, ...]

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError("StepGroup needs at least one step")
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def name(self) -> str:
        """Failures of the group are attributed to this name."""
        return self.steps[0].name

    @property
    def description(self) -> str:
        return " + ".join(s.description for s in self.steps)

    def __iter__(self) -> Iterator[BuildStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)


PipelineItem = Union[BuildStep, StepGroup]


def step(
    name: str,
    description: str,
    *,
    gate: GateFn | None = None,
    progress: str | None = None,
) -> Callable[[StepFn], FunctionStep]:
    """Decorator form of FunctionStep."""

    def _wrap(fn: StepFn) -> FunctionStep:
        return FunctionStep(
            name=name, description=description, fn=fn, gate=gate, progress=progress
        )

    return _wrap


def step_number(name: str) -> str:
    """'03-foo' -> '03', '05b-bar' -> '05b'; names without a prefix are returned as-is."""
    m = _STEP_NUMBER_RE.match(name)
    return m.group(1) if m else name


def should_run(step: BuildStep, ctx: BuildContext, state: PipelineState) -> bool:
    gate = getattr(step, "should_run", None)
    if gate is None:
        return True
    return bool(gate(ctx, state))


async def execute_step(
    *,
    ctx: BuildContext,
    state: PipelineState,
    step: BuildStep,
    position: str | None = None,
) -> None:
    """
    Run one step, recording its timing only if it succeeds. Errors propagate
    unchanged; attribution is the runner's job.
    """
    log = ctx.step_logger(step.name)

    ctx.emit(EventType.STEP_START, step=step.name)
    log.debug(
        f"=== [{step_number(step.name)}] {step.description} ===", position=position
    )

    progress = getattr(step, "progress", None)
    if progress:
        log.info(progress)

    t0 = monotonic_ms()
    try:
        await step.execute(ctx, state)
    except Exception as e:
        duration = monotonic_ms() - t0
        ctx.emit(
            EventType.STEP_FAILED,
            step=step.name,
            duration_ms=duration,
            exc_type=type(e).__name__,
        )
        log.error(
            "Step failed",
            position=position,
            duration_ms=duration,
            duration=format_duration_ms(duration),
            error=str(e),
        )
        raise

    duration = monotonic_ms() - t0
    state.timings[step.name] = duration

    ctx.emit(EventType.STEP_SUCCESS, step=step.name, duration_ms=duration)
    log.debug(
        "Step succeeded",
        position=position,
        duration_ms=duration,
        duration=format_duration_ms(duration),
        outputs=state.outputs.produced(),
    )
