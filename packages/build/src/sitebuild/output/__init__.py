from .conflicts import (
    ConflictReport,
    PathConflict,
    UrlConflict,
    detect_conflicts,
    find_conflicts,
    scan_sources,
)
from .paths import (
    ArtifactKind,
    OutputArtifact,
    SourceFile,
    TreeKind,
    compiled_html_path,
    entry_artifact_path,
    entry_name,
    file_extension,
    is_code_file,
    is_markdown,
    resolve_artifacts,
    resolve_page_artifacts,
    static_copy_path,
    url_path_for,
)

__all__ = [
    "ConflictReport",
    "PathConflict",
    "UrlConflict",
    "detect_conflicts",
    "find_conflicts",
    "scan_sources",
    "ArtifactKind",
    "OutputArtifact",
    "SourceFile",
    "TreeKind",
    "compiled_html_path",
    "entry_artifact_path",
    "entry_name",
    "file_extension",
    "is_code_file",
    "is_markdown",
    "resolve_artifacts",
    "resolve_page_artifacts",
    "static_copy_path",
    "url_path_for",
]
