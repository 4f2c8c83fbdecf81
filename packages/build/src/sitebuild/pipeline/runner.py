from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, NoReturn, Sequence

from sitebuild.core import (
    BuildOptions,
    GroupExecutionError,
    ILogger,
    StepExecutionError,
    configure_logging,
    format_duration_ms,
    get_logger,
    monotonic_ms,
)

from .context import BuildContext
from .events import EventType
from .formatting import format_build_error
from .state import PipelineState, RunStatus
from .step import BuildStep, PipelineItem, StepGroup, execute_step, should_run

ErrorFormatter = Callable[[BaseException], str]


def default_logger() -> ILogger:
    """
    Provide a structlog BoundLogger that satisfies ILogger.
    """
    configure_logging()
    return get_logger("pipeline")


def _flatten(items: Sequence[PipelineItem]) -> list[BuildStep]:
    out: list[BuildStep] = []
    for item in items:
        if isinstance(item, StepGroup):
            out.extend(item.steps)
        else:
            out.append(item)
    return out


@dataclass(slots=True)
class _Failure:
    step_name: str
    error: BaseException
    group_failures: list[tuple[str, BaseException]] | None = None


class PipelineRunner:
    """
    Executes an ordered list of steps and concurrent step groups against one
    shared PipelineState, stopping at the first failure.

    - top-level items run strictly in order; a group finishes entirely (every
      runnable member settled) before the next item starts
    - a step whose should_run() is false is skipped without a timing entry
    - a failing group is attributed to its first declared member
    """

    def __init__(
        self,
        *,
        items: Sequence[PipelineItem],
        logger: ILogger | None = None,
        error_formatter: ErrorFormatter = format_build_error,
    ) -> None:
        self.items = list(items)
        self.logger: ILogger = logger or default_logger()
        self.error_formatter = error_formatter

        names = [s.name for s in _flatten(self.items)]
        if len(names) != len(set(names)):
            dupes = sorted({x for x in names if names.count(x) > 1})
            raise ValueError(f"Duplicate step name(s): {dupes}")

    @property
    def step_names(self) -> list[str]:
        return [s.name for s in _flatten(self.items)]

    async def run(
        self, ctx: BuildContext, options: BuildOptions | None = None
    ) -> PipelineState:
        """
        Run every item against a fresh state and return it.

        Raises StepExecutionError (GroupExecutionError for groups) on the first
        failure; the error carries the attributed step name and the final state.
        """
        state = PipelineState(options=options or BuildOptions())

        ctx.session.reset()
        state.status = RunStatus.RUNNING

        t0 = monotonic_ms()
        self.logger.debug(
            "Pipeline starting",
            build_id=ctx.session.build_id,
            steps=self.step_names,
            root=str(ctx.root_dir),
        )
        ctx.emit(EventType.BUILD_START, build_id=ctx.session.build_id)

        total = len(self.items)
        for idx, item in enumerate(self.items, start=1):
            position = f"{idx}/{total}"
            if isinstance(item, StepGroup):
                failure = await self._run_group(ctx, state, item, position)
            else:
                failure = await self._run_single(ctx, state, item, position)

            if failure is not None:
                self._fail(ctx, state, failure, duration=monotonic_ms() - t0)

        state.status = RunStatus.SUCCEEDED
        duration = monotonic_ms() - t0

        self.logger.debug("=== TIMING BREAKDOWN ===")
        for name, ms in state.timings.items():
            self.logger.debug(f"  {name}: {ms}ms")

        ctx.emit(EventType.BUILD_FINISH, status=state.status.value, duration_ms=duration)
        self.logger.debug(
            "Pipeline complete",
            duration_ms=duration,
            duration=format_duration_ms(duration),
        )
        return state

    def run_sync(
        self, ctx: BuildContext, options: BuildOptions | None = None
    ) -> PipelineState:
        return asyncio.run(self.run(ctx, options))

    async def _run_single(
        self,
        ctx: BuildContext,
        state: PipelineState,
        step: BuildStep,
        position: str,
    ) -> _Failure | None:
        try:
            if not should_run(step, ctx, state):
                ctx.emit(EventType.STEP_SKIP, step=step.name)
                self.logger.debug(f"Skipping step: {step.description}", step=step.name)
                return None
            await execute_step(ctx=ctx, state=state, step=step, position=position)
        except Exception as e:
            return _Failure(step_name=step.name, error=e)
        return None

    async def _run_group(
        self,
        ctx: BuildContext,
        state: PipelineState,
        group: StepGroup,
        position: str,
    ) -> _Failure | None:
        runnable: list[BuildStep] = []
        for s in group.steps:
            try:
                if should_run(s, ctx, state):
                    runnable.append(s)
            except Exception as e:
                return _Failure(
                    step_name=group.name, error=e, group_failures=[(s.name, e)]
                )

        if not runnable:
            self.logger.debug("Skipping group: no runnable members", step=group.name)
            return None

        ctx.emit(EventType.GROUP_START, steps=[s.name for s in runnable])
        self.logger.debug(
            "Running parallel: " + " + ".join(s.description for s in runnable)
        )

        results = await asyncio.gather(
            *(
                execute_step(ctx=ctx, state=state, step=s, position=position)
                for s in runnable
            ),
            return_exceptions=True,
        )

        failures: list[tuple[str, BaseException]] = []
        for s, res in zip(runnable, results):
            if isinstance(res, BaseException):
                if not isinstance(res, Exception):
                    raise res
                failures.append((s.name, res))

        ctx.emit(
            EventType.GROUP_FINISH,
            steps=[s.name for s in runnable],
            failed=[name for name, _ in failures],
        )

        if not failures:
            return None
        return _Failure(
            step_name=group.name, error=failures[0][1], group_failures=failures
        )

    def _fail(
        self,
        ctx: BuildContext,
        state: PipelineState,
        failure: _Failure,
        *,
        duration: int,
    ) -> NoReturn:
        state.error = failure.error
        state.failed_step = failure.step_name
        state.status = RunStatus.FAILED

        ctx.emit(
            EventType.BUILD_FINISH,
            status=state.status.value,
            failed_step=failure.step_name,
            duration_ms=duration,
        )
        self.logger.error(
            "Stopping on first failure",
            step=failure.step_name,
            exc_type=type(failure.error).__name__,
        )

        message = self.error_formatter(failure.error)
        if failure.group_failures is not None:
            raise GroupExecutionError(
                message,
                step_name=failure.step_name,
                failures=failure.group_failures,
                state=state,
            ) from failure.error
        raise StepExecutionError(
            message, step_name=failure.step_name, state=state
        ) from failure.error

