"""
Fail-fast detection of ambiguous build output.

Pass 1 groups every predicted artifact by output path; any path with more than
one contributor is a path conflict. Pass 2 groups the distinct output paths by
the URL they are served at; any URL with more than one output path is a URL
conflict (e.g. `foo/index.html` and `foo.html` both serving `/foo`).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from sitebuild.core.fs import iter_relative_files

from .paths import OutputArtifact, SourceFile, TreeKind, resolve_artifacts, url_path_for


@dataclass(frozen=True, slots=True)
class PathConflict:
    dist_path: str
    contributors: tuple[OutputArtifact, ...]

    @property
    def sources(self) -> list[str]:
        return [a.label for a in self.contributors]


@dataclass(frozen=True, slots=True)
class UrlConflict:
    url_path: str
    dist_paths: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ConflictReport:
    path_conflicts: tuple[PathConflict, ...] = field(default_factory=tuple)
    url_conflicts: tuple[UrlConflict, ...] = field(default_factory=tuple)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.path_conflicts or self.url_conflicts)

    def __bool__(self) -> bool:
        return self.has_conflicts

    def path_conflict(self, dist_path: str) -> PathConflict | None:
        return next((c for c in self.path_conflicts if c.dist_path == dist_path), None)

    def url_conflict(self, url_path: str) -> UrlConflict | None:
        return next((c for c in self.url_conflicts if c.url_path == url_path), None)

    def format(self, *, out_label: str = "dist") -> str:
        lines = ["Build failed: Path conflicts detected", ""]

        for pc in self.path_conflicts:
            lines.append(f"  {out_label}/{pc.dist_path} is produced by multiple sources:")
            lines.extend(f"    - {s}" for s in pc.sources)
            lines.append("")

        for uc in self.url_conflicts:
            lines.append(f"  URL {uc.url_path} is served by multiple files:")
            lines.extend(f"    - {out_label}/{d}" for d in uc.dist_paths)
            lines.append("")

        lines.append("Remove or rename conflicting files to continue.")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        return {
            "path_conflicts": [
                {"dist_path": c.dist_path, "sources": c.sources}
                for c in self.path_conflicts
            ],
            "url_conflicts": [
                {"url_path": c.url_path, "dist_paths": list(c.dist_paths)}
                for c in self.url_conflicts
            ],
        }


def scan_sources(pages_dir: Path, static_dir: Path) -> Iterator[SourceFile]:
    """
    Walk both source roots and yield one SourceFile per (file, rule).

    Every pages/ file is offered to both the compiled rule and the static-copy rule;
    the resolver decides which of them produce anything.
    """
    for rel in iter_relative_files(Path(pages_dir)):
        yield SourceFile(rel, TreeKind.PAGES_COMPILED)
        yield SourceFile(rel, TreeKind.PAGES_STATIC_COPY)

    for rel in iter_relative_files(Path(static_dir)):
        yield SourceFile(rel, TreeKind.PUBLIC_STATIC)


def find_conflicts(sources: Iterable[SourceFile]) -> ConflictReport:
    """Two-pass collision check over an explicit set of sources."""
    by_dist: dict[str, list[OutputArtifact]] = defaultdict(list)
    for source in sources:
        for artifact in resolve_artifacts(source):
            by_dist[artifact.dist_path].append(artifact)

    path_conflicts = [
        PathConflict(dist_path=dist, contributors=tuple(arts))
        for dist, arts in by_dist.items()
        if len(arts) > 1
    ]

    by_url: dict[str, set[str]] = defaultdict(set)
    for dist in by_dist:
        by_url[url_path_for(dist)].add(dist)

    url_conflicts = [
        UrlConflict(url_path=url, dist_paths=tuple(sorted(dists)))
        for url, dists in by_url.items()
        if len(dists) > 1
    ]

    return ConflictReport(
        path_conflicts=tuple(sorted(path_conflicts, key=lambda c: c.dist_path)),
        url_conflicts=tuple(sorted(url_conflicts, key=lambda c: c.url_path)),
    )


def detect_conflicts(pages_dir: Path, static_dir: Path) -> ConflictReport:
    """
    Scan the pages and public trees from disk and report every output path and
    URL that more than one source would claim. Nothing is cached between calls.
    """
    return find_conflicts(scan_sources(pages_dir, static_dir))
