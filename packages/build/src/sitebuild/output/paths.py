"""
Output path rules: which files in the build output a given source file produces,
and which URL each output file is served at.

Everything here is pure string manipulation on POSIX relative paths. The URL rule
must stay byte-identical to the routing of whatever serves the output directory.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from enum import StrEnum

MARKDOWN_EXTS = frozenset({"md", "mdx"})
CODE_FILE_EXTS = frozenset({"js", "jsx", "ts", "tsx", "mjs", "cjs"})


class TreeKind(StrEnum):
    PAGES_COMPILED = "pages_compiled"
    PAGES_STATIC_COPY = "pages_static_copy"
    PUBLIC_STATIC = "public_static"


class ArtifactKind(StrEnum):
    COMPILED_HTML = "compiled_html"
    STATIC_COPY = "static_copy"


TREE_LABELS: dict[TreeKind, str] = {
    TreeKind.PAGES_COMPILED: "pages",
    TreeKind.PAGES_STATIC_COPY: "pages",
    TreeKind.PUBLIC_STATIC: "public",
}


def to_posix(path: str) -> str:
    return path.replace("\\", "/")


@dataclass(frozen=True, slots=True)
class SourceFile:
    relative_path: str
    tree: TreeKind

    def __post_init__(self) -> None:
        object.__setattr__(self, "relative_path", to_posix(self.relative_path))

    @property
    def display_path(self) -> str:
        return f"{TREE_LABELS[self.tree]}/{self.relative_path}"


@dataclass(frozen=True, slots=True)
class OutputArtifact:
    dist_path: str
    source: SourceFile
    kind: ArtifactKind

    @property
    def label(self) -> str:
        """Human-readable contributor label, e.g. 'pages/foo.mdx (HTML)'."""
        if self.kind is ArtifactKind.COMPILED_HTML:
            return f"{self.source.display_path} (HTML)"
        if self.source.tree is TreeKind.PAGES_STATIC_COPY and is_markdown(
            self.source.relative_path
        ):
            return f"{self.source.display_path} (static copy)"
        return self.source.display_path


def file_extension(path: str) -> str:
    """
    Lower-cased text after the last '.' of the final path segment, or '' when the
    segment has no dot.
    """
    name = to_posix(path).rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def strip_extension(path: str) -> str:
    """Drop only the final extension: 'docs/v1.2.3.md' -> 'docs/v1.2.3'."""
    p = to_posix(path)
    head, _, name = p.rpartition("/")
    if "." not in name:
        return p
    stem = name.rsplit(".", 1)[0]
    return f"{head}/{stem}" if head else stem


def is_markdown(path: str) -> bool:
    return file_extension(path) in MARKDOWN_EXTS


def is_code_file(path: str) -> bool:
    return file_extension(path) in CODE_FILE_EXTS


def entry_name(relative_path: str) -> str:
    """Logical page name of a markdown source: its relative path without extension."""
    return strip_extension(relative_path)


def entry_artifact_path(name: str, extension: str) -> str:
    """
    Output path for an entry-derived artifact ('.html', '.js', ...).

    'index' entries keep their own directory (`docs/index` -> `docs/index.html`);
    every other entry becomes a directory index (`docs/intro` -> `docs/intro/index.html`).
    """
    if posixpath.basename(name) == "index":
        return f"{name}{extension}"
    return f"{name}/index{extension}"


def compiled_html_path(relative_path: str) -> str:
    return entry_artifact_path(entry_name(relative_path), ".html")


def static_copy_path(relative_path: str) -> str | None:
    """
    Where a pages/ file lands when copied verbatim, or None for code files,
    which are never copied. '.mdx' sources are renamed to '.md'.
    """
    p = to_posix(relative_path)
    if is_code_file(p):
        return None
    if file_extension(p) == "mdx":
        return f"{strip_extension(p)}.md"
    return p


def resolve_artifacts(source: SourceFile) -> tuple[OutputArtifact, ...]:
    """
    Compute the output artifacts of one source file under its tree's rule.
    """
    rel = source.relative_path

    if source.tree is TreeKind.PAGES_COMPILED:
        if not is_markdown(rel):
            return ()
        return (
            OutputArtifact(
                dist_path=compiled_html_path(rel),
                source=source,
                kind=ArtifactKind.COMPILED_HTML,
            ),
        )

    if source.tree is TreeKind.PAGES_STATIC_COPY:
        dest = static_copy_path(rel)
        if dest is None:
            return ()
        return (
            OutputArtifact(dist_path=dest, source=source, kind=ArtifactKind.STATIC_COPY),
        )

    return (OutputArtifact(dist_path=rel, source=source, kind=ArtifactKind.STATIC_COPY),)


def resolve_page_artifacts(relative_path: str) -> tuple[OutputArtifact, ...]:
    """All artifacts a single pages/ file produces (compiled HTML and static copy)."""
    return resolve_artifacts(
        SourceFile(relative_path, TreeKind.PAGES_COMPILED)
    ) + resolve_artifacts(SourceFile(relative_path, TreeKind.PAGES_STATIC_COPY))


def url_path_for(dist_path: str) -> str:
    """
    URL a file in the output directory is served at:

      foo/index.html -> /foo
      index.html     -> /
      foo.html       -> /foo
      foo.txt        -> /foo.txt
    """
    p = to_posix(dist_path)

    if p == "index.html":
        return "/"

    if p.endswith("/index.html"):
        parent = p[: -len("/index.html")]
        return "/" + parent if parent else "/"

    if p.endswith(".html"):
        return "/" + p[: -len(".html")]

    return "/" + p
