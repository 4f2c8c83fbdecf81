from .config import BuildOptions, Settings, load_settings
from .errors import (
    BuildError,
    ConflictError,
    GroupExecutionError,
    MissingOutputError,
    StepError,
    StepExecutionError,
    ToolchainError,
    step_error_from_exc,
)
from .fs import (
    DirectoryStats,
    atomic_write_text,
    copy_file,
    copy_tree,
    directory_stats,
    ensure_parent,
    file_size,
    iter_files,
    iter_relative_files,
    relpath_posix,
    remove_tree,
    safe_unlink,
)
from .json import atomic_write_json, read_json
from .logging import ILogger, bind, configure_logging, get_logger
from .paths import BuildLayout, normalize_base
from .session import BuildSession, new_build_id
from .time import format_duration_ms, monotonic_ms, utc_now_iso

__all__ = [
    "BuildOptions",
    "Settings",
    "load_settings",
    "BuildError",
    "ConflictError",
    "GroupExecutionError",
    "MissingOutputError",
    "StepError",
    "StepExecutionError",
    "ToolchainError",
    "step_error_from_exc",
    "DirectoryStats",
    "atomic_write_text",
    "copy_file",
    "copy_tree",
    "directory_stats",
    "ensure_parent",
    "file_size",
    "iter_files",
    "iter_relative_files",
    "relpath_posix",
    "remove_tree",
    "safe_unlink",
    "atomic_write_json",
    "read_json",
    "ILogger",
    "bind",
    "configure_logging",
    "get_logger",
    "BuildLayout",
    "normalize_base",
    "BuildSession",
    "new_build_id",
    "format_duration_ms",
    "monotonic_ms",
    "utc_now_iso",
]
