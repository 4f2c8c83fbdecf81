from .context import BuildContext
from .events import EventType
from .formatting import extract_source_location, format_build_error
from .report import BuildReport, build_report
from .runner import PipelineRunner
from .state import BuildOutputs, PipelineState, RunStatus
from .step import (
    BuildStep,
    FunctionStep,
    PipelineItem,
    StepGroup,
    step,
    step_number,
)
from .types import RenderedPage

__all__ = [
    "BuildContext",
    "EventType",
    "extract_source_location",
    "format_build_error",
    "BuildReport",
    "build_report",
    "PipelineRunner",
    "BuildOutputs",
    "PipelineState",
    "RunStatus",
    "BuildStep",
    "FunctionStep",
    "PipelineItem",
    "StepGroup",
    "step",
    "step_number",
    "RenderedPage",
]
