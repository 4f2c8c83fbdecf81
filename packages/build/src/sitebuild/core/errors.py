from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sitebuild.output.conflicts import ConflictReport


class BuildError(RuntimeError):
    """Base error"""


@dataclass(frozen=True, slots=True)
class StepError:
    """
    A normalized error record for step failures.
    """

    exc_type: str
    message: str
    traceback: str


def step_error_from_exc(exc: BaseException) -> StepError:
    return StepError(
        exc_type=type(exc).__name__,
        message=str(exc),
        traceback="".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    )


class ConflictError(BuildError):
    """
    Two or more sources would produce the same output path or the same served URL.

    The message lists every conflict; the full report stays available on `report`.
    """

    def __init__(self, report: ConflictReport) -> None:
        super().__init__(report.format())
        self.report = report


class StepExecutionError(BuildError):
    """
    A step raised while executing. Wraps the original error (`__cause__`) with the
    step's name and the pipeline state at the time of failure.
    """

    def __init__(self, message: str, *, step_name: str, state: Any = None) -> None:
        super().__init__(message)
        self.step_name = step_name
        self.state = state


class GroupExecutionError(StepExecutionError):
    """
    One or more members of a concurrent group raised.

    `step_name` is always the group's first declared member; the members that
    actually failed are listed in `failures`.
    """

    def __init__(
        self,
        message: str,
        *,
        step_name: str,
        failures: list[tuple[str, BaseException]],
        state: Any = None,
    ) -> None:
        super().__init__(message, step_name=step_name, state=state)
        self.failures = failures

    @property
    def failed_members(self) -> list[str]:
        return [name for name, _ in self.failures]


class MissingOutputError(BuildError, AttributeError):
    """A step read a build output that no upstream step produced"""


class ToolchainError(BuildError):
    """A toolchain collaborator could not be loaded or returned unusable results"""
