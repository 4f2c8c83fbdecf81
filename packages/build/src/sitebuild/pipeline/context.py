from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from sitebuild.core import (
    BuildError,
    BuildLayout,
    BuildSession,
    ILogger,
    Settings,
    get_logger,
    load_settings,
    remove_tree,
)
from sitebuild.output.entries import Entry, catalog_entries

from .events import EventType

if TYPE_CHECKING:
    from sitebuild.steps.toolchain import Toolchain

_ENTRIES_CACHE_KEY = "entries"


@dataclass(slots=True)
class BuildContext:
    """
    Context shared across steps for a single build.
    """

    layout: BuildLayout
    logger: ILogger
    session: BuildSession = field(default_factory=BuildSession)
    toolchain: Toolchain | None = None

    @classmethod
    def create(
        cls,
        root: Path | str = ".",
        *,
        settings: Settings | None = None,
        logger: ILogger | None = None,
        toolchain: Toolchain | None = None,
        base: str | None = None,
        test_base: bool = False,
        **dirs: Path | str | None,
    ) -> "BuildContext":
        """
        Resolve the project layout from settings, with per-invocation directory
        overrides (`pages_dir=`, `static_dir=`, `out_dir=`, `temp_dir=`).
        """
        s = settings or load_settings()
        chosen = {
            "pages_dir": s.pages_dir,
            "static_dir": s.static_dir,
            "out_dir": s.out_dir,
            "temp_dir": s.temp_dir,
        }
        for key, value in dirs.items():
            if key not in chosen:
                raise TypeError(f"Unknown directory override: {key}")
            if value is not None:
                chosen[key] = Path(value)

        layout = BuildLayout.resolve(root, base=base, test_base=test_base, **chosen)
        return cls(
            layout=layout,
            logger=logger or get_logger("sitebuild"),
            toolchain=toolchain,
        )

    @property
    def root_dir(self) -> Path:
        return self.layout.root

    @property
    def pages_dir(self) -> Path:
        return self.layout.pages_dir

    @property
    def static_dir(self) -> Path:
        return self.layout.static_dir

    @property
    def out_dir(self) -> Path:
        return self.layout.out_dir

    @property
    def build_dir(self) -> Path:
        return self.layout.build_dir

    @property
    def temp_dir(self) -> Path:
        return self.layout.temp_dir

    def step_logger(self, step: str) -> ILogger:
        return self.logger.bind(step=step)

    def emit(self, event: EventType | str, **kw: object) -> None:
        # Keep event chatter at debug level to leave console logs readable.
        event_value = event.value if isinstance(event, EventType) else str(event)
        self.logger.debug(event_value, event_type=event_value, **kw)

    def clear_caches(self) -> None:
        self.session.discard(_ENTRIES_CACHE_KEY)

    def get_entries(self) -> dict[str, Entry]:
        """
        Catalog of markdown pages, computed once per build session.
        """
        entries = self.session.get(_ENTRIES_CACHE_KEY)
        if entries is None:
            entries = catalog_entries(self.pages_dir)
            self.session.put(_ENTRIES_CACHE_KEY, entries)
        return entries

    def reset_build_dir(self) -> None:
        """
        Always wipes the whole out dir, so stale files from a previous build (or a
        previous base path) never survive.
        """
        if self.root_dir.is_relative_to(self.out_dir):
            raise BuildError(
                f"Refusing to remove {self.out_dir}: it contains the project root"
            )
        for source_dir in (self.pages_dir, self.static_dir):
            if source_dir.is_relative_to(self.out_dir):
                raise BuildError(
                    f"Refusing to remove {self.out_dir}: it contains source directory {source_dir}"
                )
        self.logger.debug("Removing build directory", path=str(self.out_dir))
        remove_tree(self.out_dir)
        self.logger.debug("Creating build directory", path=str(self.build_dir))
        self.build_dir.mkdir(parents=True, exist_ok=True)

    def reset_temp_dir(self) -> None:
        self.logger.debug("Removing temp directory", path=str(self.temp_dir))
        remove_tree(self.temp_dir)
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        self.clear_caches()

    def reset(self) -> None:
        self.reset_build_dir()
        self.reset_temp_dir()
