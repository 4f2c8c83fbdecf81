from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sitebuild.core import BuildOptions, DirectoryStats, MissingOutputError

from .types import RenderedPage

if TYPE_CHECKING:
    from sitebuild.output.entries import Entry


class RunStatus(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BuildOutputs:
    """
    Typed, append-only channel between build steps.

    Each attribute belongs to exactly one producing step. Reading an attribute that
    no upstream step has written raises MissingOutputError; attributes can be
    overwritten but never removed, and unknown names are rejected.
    """

    # 03-catalog-pages
    entries: dict[str, Entry]
    # 04-tailwind-css (None when the project has no stylesheet)
    css_filename: str | None
    # 05-server-build: entry name -> compiled server module
    server_modules: dict[str, Path]
    # 05b-render-server
    rendered_pages: dict[str, RenderedPage]
    # 06-client-build: entry name -> client script file name
    client_scripts: dict[str, str]
    # 07-generate-html: output-relative paths of written documents
    html_files: list[str]
    # 10-copy-to-dist
    build_stats: DirectoryStats

    def __init__(self) -> None:
        object.__setattr__(self, "_values", {})

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(cls.__annotations__)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, i.e. for output fields.
        if name.startswith("_"):
            raise AttributeError(name)
        values = object.__getattribute__(self, "_values")
        if name in values:
            return values[name]
        if name in self.field_names():
            raise MissingOutputError(
                f"Build output '{name}' was read before any step produced it"
            )
        raise AttributeError(f"Unknown build output '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self.field_names():
            raise AttributeError(f"Unknown build output '{name}'")
        self._values[name] = value

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Build outputs are append-only; cannot remove '{name}'")

    def has(self, name: str) -> bool:
        return name in self._values

    def get(self, name: str, default: Any = None) -> Any:
        if name not in self.field_names():
            raise AttributeError(f"Unknown build output '{name}'")
        return self._values.get(name, default)

    def produced(self) -> list[str]:
        return sorted(self._values)

    def __repr__(self) -> str:
        return f"BuildOutputs(produced={self.produced()})"


@dataclass(slots=True)
class PipelineState:
    """
    Mutable state shared by every step of one pipeline run. Created fresh per run
    and passed by reference; never copied.
    """

    options: BuildOptions
    outputs: BuildOutputs = field(default_factory=BuildOutputs)
    timings: dict[str, int] = field(default_factory=dict)
    status: RunStatus = RunStatus.IDLE
    error: BaseException | None = None
    failed_step: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status is RunStatus.FAILED
